"""
Scheduler implementations: Round Robin (with I/O), FCFS and non-preemptive SJF.

Each scheduler owns the ready queue and the CPU; the tick loop in
``simulator`` drives them through the same hooks.
"""

from abc import ABC, abstractmethod
from typing import Optional, List

from .core import (
    Policy, ReadyQueue, InvalidQuantumError, PolicyNotImplementedError,
)
from .utils import Process


class BaseScheduler(ABC):
    """Abstract base class for all schedulers."""

    policy: Policy
    models_io: bool = False

    def __init__(self):
        self.ready_queue = ReadyQueue()
        self.current_process: Optional[Process] = None
        self.time_quantum: Optional[int] = None
        self.quantum_remaining: Optional[int] = None

    def prepare(self, process: Process) -> None:
        """Normalise a working copy before the first tick."""
        if not self.models_io:
            process.truncate_to_first_burst()

    def admit(self, returning: List[Process], arrivals: List[Process]) -> None:
        """Append I/O returns, then new arrivals, to the ready queue."""
        self.ready_queue.extend(returning)
        self.ready_queue.extend(arrivals)

    @abstractmethod
    def select(self) -> Optional[Process]:
        """Remove and return the next process to run."""
        pass

    def dispatch(self) -> Optional[Process]:
        """Put the next ready process on an idle CPU."""
        if self.current_process is None and not self.ready_queue.is_empty():
            self.current_process = self.select()
            self.on_dispatch(self.current_process)
        return self.current_process

    def on_dispatch(self, process: Process) -> None:
        pass

    def execute(self) -> None:
        """Run the CPU occupant for one tick."""
        if self.current_process is not None:
            self.current_process.remaining_burst -= 1

    def quantum_expired(self) -> bool:
        return False

    def release(self) -> Process:
        """Take the occupant off the CPU and return it."""
        process = self.current_process
        self.current_process = None
        return process

    def preempt(self) -> Process:
        process = self.release()
        self.ready_queue.push(process)
        return process


class FCFSScheduler(BaseScheduler):
    """First Come First Serve scheduler implementation."""

    policy = Policy.FCFS

    def select(self) -> Optional[Process]:
        # Only arrived processes are ever admitted, so the head is the
        # earliest arrival.
        return self.ready_queue.pop(mode='fifo')


class SJFScheduler(BaseScheduler):
    """Shortest Job First (non-preemptive) scheduler implementation."""

    policy = Policy.SJF

    def select(self) -> Optional[Process]:
        # The queue is re-sorted in place only when the CPU frees up.
        return self.ready_queue.pop(mode='sjf')


class RoundRobinScheduler(BaseScheduler):
    """Round Robin scheduler with multi-phase CPU/I-O bursts."""

    policy = Policy.RR
    models_io = True

    def __init__(self, time_quantum: int = 2):
        super().__init__()
        self.time_quantum = time_quantum
        self.quantum_remaining = 0

    def select(self) -> Optional[Process]:
        return self.ready_queue.pop(mode='fifo')

    def on_dispatch(self, process: Process) -> None:
        self.quantum_remaining = self.time_quantum

    def execute(self) -> None:
        if self.current_process is not None:
            super().execute()
            self.quantum_remaining -= 1

    def quantum_expired(self) -> bool:
        return self.current_process is not None and self.quantum_remaining <= 0

    def release(self) -> Process:
        self.quantum_remaining = 0
        return super().release()


class PriorityScheduler(BaseScheduler):
    """Declared for completeness; priority scheduling is not implemented."""

    policy = Policy.PRIORITY

    def __init__(self):
        raise PolicyNotImplementedError("Priority scheduling is not implemented yet")

    def select(self) -> Optional[Process]:
        raise PolicyNotImplementedError("Priority scheduling is not implemented yet")


def validate_quantum(quantum) -> int:
    if isinstance(quantum, bool) or not isinstance(quantum, int):
        raise InvalidQuantumError(f"Round Robin needs an integer quantum, got {quantum!r}")
    if quantum <= 0:
        raise InvalidQuantumError(f"Round Robin quantum must be positive, got {quantum}")
    return quantum


def create_scheduler(policy, quantum: Optional[int] = None) -> BaseScheduler:
    """Build the scheduler for a policy selector; quantum only matters for RR."""
    policy = Policy.parse(policy)
    if policy is Policy.RR:
        return RoundRobinScheduler(time_quantum=validate_quantum(quantum))
    if policy is Policy.FCFS:
        return FCFSScheduler()
    if policy is Policy.SJF:
        return SJFScheduler()
    return PriorityScheduler()
