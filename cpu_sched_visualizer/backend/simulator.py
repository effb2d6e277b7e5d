from __future__ import annotations

from typing import List, Optional, Iterator, Sequence
import copy
import logging

from .core import (
    IDLE, Policy, ProcessState, ProcessStatus, ProcessResult, BlockedEntry, Snapshot,
    InvalidProcessError, PolicyNotImplementedError, SimulationLimitExceeded,
)
from .schedulers import BaseScheduler, create_scheduler
from .utils import Process

logger = logging.getLogger(__name__)

MAX_TICKS = 1000


class Trace(list):
    """Ordered snapshots of one run. ``complete`` is False after a runaway abort."""

    def __init__(self, snapshots: Sequence[Snapshot] = (), complete: bool = True):
        super().__init__(snapshots)
        self.complete = complete

    @property
    def final(self) -> Optional[Snapshot]:
        if self and self[-1].is_final:
            return self[-1]
        return None

    @property
    def final_stats(self) -> tuple:
        final = self.final
        return final.final_stats if final else ()

    def require_complete(self) -> "Trace":
        if not self.complete:
            raise SimulationLimitExceeded(
                f"Simulation did not finish within {len(self)} ticks", trace=self
            )
        return self


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_processes(processes: Sequence[Process]) -> None:
    """Reject malformed input before any tick is simulated."""
    if not processes:
        raise InvalidProcessError("At least one process is required")
    seen = set()
    for p in processes:
        if p.pid in seen:
            raise InvalidProcessError(f"Duplicate process id {p.pid!r}")
        seen.add(p.pid)
        if not _is_int(p.arrival_time) or p.arrival_time < 0:
            raise InvalidProcessError(f"{p.pid}: arrival time must be a non-negative integer")
        if not p.burst_sequence:
            raise InvalidProcessError(f"{p.pid}: burst sequence is empty")
        for burst in p.burst_sequence:
            if not _is_int(burst) or burst <= 0:
                raise InvalidProcessError(f"{p.pid}: bursts must be positive integers, got {burst!r}")


def working_copy(process: Process) -> Process:
    """Fresh record built from the input fields only; run-time state starts over."""
    return Process(process.pid, process.arrival_time, list(process.burst_sequence), process.priority)


class Simulator:
    """Lazy tick-by-tick simulation.

    Iterating yields one ``Snapshot`` per tick followed by the final summary
    snapshot. Each iteration starts again from tick 0 on a fresh copy of the
    input, so the caller's processes are never touched.
    """

    def __init__(self, processes: Sequence[Process], policy, quantum: Optional[int] = None,
                 max_ticks: int = MAX_TICKS):
        self.policy = Policy.parse(policy)
        if self.policy is Policy.PRIORITY:
            raise PolicyNotImplementedError("Priority scheduling is not implemented yet")
        validate_processes(processes)
        # Fails fast on a bad quantum.
        create_scheduler(self.policy, quantum)
        if not _is_int(max_ticks) or max_ticks <= 0:
            raise ValueError(f"max_ticks must be a positive integer, got {max_ticks!r}")
        self.quantum = quantum
        self.max_ticks = max_ticks
        self.complete: Optional[bool] = None
        self._source: List[Process] = [working_copy(p) for p in processes]

    def __iter__(self) -> Iterator[Snapshot]:
        return self._run()

    def _run(self) -> Iterator[Snapshot]:
        scheduler = create_scheduler(self.policy, self.quantum)
        procs = sorted(copy.deepcopy(self._source), key=lambda p: p.arrival_time)
        for p in procs:
            scheduler.prepare(p)

        pending: List[Process] = list(procs)
        blocked: List[Process] = []
        terminated: List[Process] = []
        total = len(procs)
        self.complete = False
        logger.debug("Simulating %d processes with %s (quantum=%s)", total, self.policy.value, self.quantum)

        t = 0
        while len(terminated) < total and t <= self.max_ticks:
            # I/O completions
            returning = [p for p in blocked if p.io_timer == 0]
            if returning:
                blocked = [p for p in blocked if p.io_timer > 0]
            for p in returning:
                p.burst_index += 1
                p.remaining_burst = p.burst_sequence[p.burst_index]

            # Arrivals
            arrivals = [p for p in pending if p.arrival_time == t]
            if arrivals:
                pending = [p for p in pending if p.arrival_time != t]

            scheduler.admit(returning, arrivals)
            scheduler.dispatch()

            yield self._capture(t, scheduler, procs, blocked, terminated, arrivals, returning)

            # Work done during tick t
            scheduler.execute()
            for p in list(blocked):
                p.io_timer -= 1
                p.remaining_burst = p.io_timer
                if p.io_timer == 0 and not p.has_next_phase:
                    # Sequence ended on an I/O phase.
                    blocked.remove(p)
                    self._terminate(p, t + 1, terminated)

            running = scheduler.current_process
            if running is not None:
                if running.remaining_burst == 0:
                    scheduler.release()
                    if running.has_next_phase:
                        running.burst_index += 1
                        running.io_timer = running.burst_sequence[running.burst_index]
                        running.remaining_burst = running.io_timer
                        blocked.append(running)
                    else:
                        self._terminate(running, t + 1, terminated)
                elif scheduler.quantum_expired():
                    scheduler.preempt()

            t += 1

        if len(terminated) < total:
            unfinished = [p.pid for p in procs if not p.is_finished]
            logger.warning(
                "Tick limit %d exceeded with unfinished processes %s; trace is incomplete",
                self.max_ticks, ", ".join(unfinished),
            )
            return

        self.complete = True
        yield Snapshot(
            time=t,
            cpu_occupant=IDLE,
            quantum_remaining=scheduler.quantum_remaining,
            terminated=tuple(p.pid for p in terminated),
            process_states=tuple(ProcessStatus(p.pid, ProcessState.TERMINATED, p.remaining_burst) for p in procs),
            is_final=True,
            final_stats=tuple(ProcessResult.from_process(p) for p in procs),
        )

    @staticmethod
    def _terminate(process: Process, completion_time: int, terminated: List[Process]) -> None:
        process.is_finished = True
        process.completion_time = completion_time
        process.turnaround_time = completion_time - process.arrival_time
        process.waiting_time = process.turnaround_time - process.total_cpu_burst
        terminated.append(process)

    @staticmethod
    def _capture(t: int, scheduler: BaseScheduler, procs: List[Process], blocked: List[Process],
                 terminated: List[Process], arrivals: List[Process], returning: List[Process]) -> Snapshot:
        running = scheduler.current_process
        ready_pids = scheduler.ready_queue.pids()
        ready_set = set(ready_pids)
        blocked_set = {p.pid for p in blocked}

        def state_of(p: Process) -> ProcessState:
            if p.is_finished:
                return ProcessState.TERMINATED
            if running is not None and p.pid == running.pid:
                return ProcessState.RUNNING
            if p.pid in ready_set:
                return ProcessState.READY
            if p.pid in blocked_set:
                return ProcessState.BLOCKED
            return ProcessState.NEW

        return Snapshot(
            time=t,
            cpu_occupant=running.pid if running is not None else IDLE,
            quantum_remaining=scheduler.quantum_remaining,
            ready_queue=ready_pids,
            blocked_queue=tuple(BlockedEntry(p.pid, p.io_timer) for p in blocked),
            terminated=tuple(p.pid for p in terminated),
            arrivals=tuple(p.pid for p in arrivals),
            io_returns=tuple(p.pid for p in returning),
            process_states=tuple(ProcessStatus(p.pid, state_of(p), p.remaining_burst) for p in procs),
        )


def simulate(processes: Sequence[Process], policy, quantum: Optional[int] = None,
             max_ticks: int = MAX_TICKS) -> Trace:
    """Run a whole simulation and return its trace.

    Raises ``InvalidPolicyError``, ``PolicyNotImplementedError``,
    ``InvalidProcessError`` or ``InvalidQuantumError`` before the first tick.
    A run that hits ``max_ticks`` returns a partial trace with
    ``complete = False``.
    """
    simulator = Simulator(processes, policy, quantum=quantum, max_ticks=max_ticks)
    snapshots = list(simulator)
    return Trace(snapshots, complete=bool(simulator.complete))
