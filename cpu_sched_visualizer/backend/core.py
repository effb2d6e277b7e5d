"""
Core data structures for the scheduling visualizer.
Includes process states, policies, snapshots, the ready queue and errors.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Tuple, NamedTuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .utils import Process


IDLE = "Idle"


class ProcessState(Enum):
    """Process states in the system."""
    NEW = "New"
    READY = "Ready"
    RUNNING = "Run"
    BLOCKED = "Block"
    TERMINATED = "Term"


class SimulationError(Exception):
    """Base class for every failure the engine reports."""


class InvalidPolicyError(SimulationError, ValueError):
    """Unrecognised policy selector."""


class PolicyNotImplementedError(SimulationError, NotImplementedError):
    """Policy is declared but has no scheduler behind it."""


class InvalidProcessError(SimulationError, ValueError):
    """Malformed process list or record."""


class InvalidQuantumError(SimulationError, ValueError):
    """Round Robin needs a positive integer quantum."""


class SimulationLimitExceeded(SimulationError):
    """The tick ceiling was reached before every process terminated."""

    def __init__(self, message: str, trace=None):
        super().__init__(message)
        self.trace = trace


class Policy(Enum):
    """Scheduling policies the engine understands."""
    RR = "RR"
    FCFS = "FCFS"
    SJF = "SJF"
    PRIORITY = "PRIORITY"

    @property
    def label(self) -> str:
        return _POLICY_LABELS[self]

    @classmethod
    def parse(cls, value) -> "Policy":
        """Accept a member, its value/name or a display label."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper().replace(" ", "_")
            if key in _POLICY_ALIASES:
                return _POLICY_ALIASES[key]
        raise InvalidPolicyError(f"Unknown scheduling policy: {value!r}")


_POLICY_LABELS = {
    Policy.RR: "Round Robin",
    Policy.FCFS: "FCFS",
    Policy.SJF: "SJF (non-preemptive)",
    Policy.PRIORITY: "Priority",
}

_POLICY_ALIASES: Dict[str, Policy] = {
    "RR": Policy.RR,
    "ROUND_ROBIN": Policy.RR,
    "FCFS": Policy.FCFS,
    "SJF": Policy.SJF,
    "PRIORITY": Policy.PRIORITY,
}


class BlockedEntry(NamedTuple):
    """A blocked process and the I/O ticks it still has to wait."""
    pid: str
    io_timer: int


class ProcessStatus(NamedTuple):
    pid: str
    state: ProcessState
    remaining_burst: int


@dataclass(frozen=True)
class ProcessResult:
    """Final record of one process after the simulation."""
    pid: str
    arrival_time: int
    burst_sequence: Tuple[int, ...]
    priority: int
    total_cpu_burst: int
    completion_time: int
    turnaround_time: int
    waiting_time: int

    @classmethod
    def from_process(cls, process: "Process") -> "ProcessResult":
        return cls(
            pid=process.pid,
            arrival_time=process.arrival_time,
            burst_sequence=tuple(process.burst_sequence),
            priority=process.priority,
            total_cpu_burst=process.total_cpu_burst,
            completion_time=process.completion_time,
            turnaround_time=process.turnaround_time,
            waiting_time=process.waiting_time,
        )


@dataclass(frozen=True)
class Snapshot:
    """System state recorded at the start of one tick."""
    time: int
    cpu_occupant: str = IDLE
    quantum_remaining: Optional[int] = None
    ready_queue: Tuple[str, ...] = ()
    blocked_queue: Tuple[BlockedEntry, ...] = ()
    terminated: Tuple[str, ...] = ()
    arrivals: Tuple[str, ...] = ()
    io_returns: Tuple[str, ...] = ()
    process_states: Tuple[ProcessStatus, ...] = ()
    is_final: bool = False
    final_stats: Tuple[ProcessResult, ...] = field(default=())

    @property
    def cpu_idle(self) -> bool:
        return self.cpu_occupant == IDLE

    def status_of(self, pid: str) -> Optional[ProcessStatus]:
        for status in self.process_states:
            if status.pid == pid:
                return status
        return None

    def state_of(self, pid: str) -> Optional[ProcessState]:
        status = self.status_of(pid)
        return status.state if status else None


class ReadyQueue:
    """List-backed ready queue supporting FIFO and shortest-job selection."""

    def __init__(self):
        self._items: List["Process"] = []

    def push(self, process: "Process") -> None:
        """Append a process to the back of the queue."""
        self._items.append(process)

    def extend(self, processes: List["Process"]) -> None:
        self._items.extend(processes)

    def sort_by_burst(self) -> None:
        """Order the queue by total CPU demand, then arrival.

        list.sort is stable, so processes still tied keep their queue order.
        """
        self._items.sort(key=lambda p: (p.total_cpu_burst, p.arrival_time))

    def _select_index(self, mode: str = 'fifo') -> Optional[int]:
        """Return index in _items for the next process according to mode."""
        if not self._items:
            return None
        if mode == 'sjf':
            self.sort_by_burst()
        elif mode != 'fifo':
            raise ValueError(f"Unknown ready-queue mode: {mode!r}")
        return 0

    def pop(self, mode: str = 'fifo') -> Optional["Process"]:
        """Remove and return the next process according to the given mode."""
        idx = self._select_index(mode)
        if idx is None:
            return None
        return self._items.pop(idx)

    def is_empty(self) -> bool:
        return len(self._items) == 0

    def __len__(self) -> int:
        return len(self._items)

    def pids(self) -> Tuple[str, ...]:
        return tuple(p.pid for p in self._items)
