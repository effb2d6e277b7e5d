from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any, Iterable, Sequence, Tuple
import random

from .core import IDLE, ProcessResult, Snapshot


@dataclass
class Process:
    pid: str
    arrival_time: int
    burst_sequence: List[int]
    priority: int = 1
    burst_index: int = 0
    io_timer: int = 0
    is_finished: bool = False
    completion_time: int = 0
    turnaround_time: int = 0
    waiting_time: int = 0
    remaining_burst: int = field(init=False)
    total_cpu_burst: int = field(init=False)

    def __post_init__(self) -> None:
        self.burst_sequence = list(self.burst_sequence)
        self.remaining_burst = self.burst_sequence[0] if self.burst_sequence else 0
        self.total_cpu_burst = sum(self.burst_sequence[0::2])

    @property
    def has_next_phase(self) -> bool:
        return self.burst_index + 1 < len(self.burst_sequence)

    def truncate_to_first_burst(self) -> None:
        """Keep only the leading CPU burst (policies without I/O)."""
        self.burst_sequence = self.burst_sequence[:1]
        self.remaining_burst = self.burst_sequence[0] if self.burst_sequence else 0
        self.total_cpu_burst = sum(self.burst_sequence)


# ---------------------------------------------------------------------------
# Input helpers
# ---------------------------------------------------------------------------

# (arrival, burst text, priority) for P1..P3
DEFAULT_ROWS: List[Tuple[int, str, int]] = [
    (0, "5, 2, 3", 1),
    (1, "3", 2),
    (2, "4, 1, 2", 3),
]


def parse_burst_sequence(text: str, io_enabled: bool = True) -> List[int]:
    """Parse comma-separated bursts.

    With I/O disabled only the first value counts. Tokens that are not
    positive integers are dropped.
    """
    tokens = [t.strip() for t in str(text).split(",")]
    if not io_enabled:
        tokens = tokens[:1]
    bursts: List[int] = []
    for token in tokens:
        try:
            value = int(token)
        except ValueError:
            continue
        if value > 0:
            bursts.append(value)
    return bursts


class ProcessIdGenerator:
    """Hands out P<n> labels starting after the default rows."""

    def __init__(self, start: int = len(DEFAULT_ROWS) + 1) -> None:
        self._next = start

    def next_id(self) -> str:
        pid = f"P{self._next}"
        self._next += 1
        return pid


def build_processes(rows: Iterable[Tuple[str, int, str, int]], io_enabled: bool = True) -> List[Process]:
    """Turn (pid, arrival, burst text, priority) rows into processes.

    Rows whose burst text yields no usable burst are skipped.
    """
    procs: List[Process] = []
    for pid, arrival, burst_text, priority in rows:
        bursts = parse_burst_sequence(burst_text, io_enabled=io_enabled)
        if not bursts:
            continue
        procs.append(Process(pid=pid, arrival_time=int(arrival), burst_sequence=bursts, priority=int(priority)))
    return procs


def default_processes(io_enabled: bool = True) -> List[Process]:
    rows = [(f"P{i + 1}", arrival, bursts, prio) for i, (arrival, bursts, prio) in enumerate(DEFAULT_ROWS)]
    return build_processes(rows, io_enabled=io_enabled)


def generate_workload(n: int, seed: int, io_enabled: bool = True, max_arrival_gap: int = 3) -> List[Process]:
    rng = random.Random(seed)
    procs: List[Process] = []
    arrival = 0
    for i in range(n):
        phases = rng.choice([1, 3, 5]) if io_enabled else 1
        bursts = [rng.randint(1, 8) if k % 2 == 0 else rng.randint(1, 4) for k in range(phases)]
        procs.append(Process(pid=f"P{i + 1}", arrival_time=arrival, burst_sequence=bursts, priority=rng.randint(1, 5)))
        arrival += rng.randint(0, max_arrival_gap)
    return procs


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

@dataclass
class ResultsSummary:
    rows: List[Dict[str, Any]]
    avg_turnaround: float
    avg_waiting: float


def compute_waiting_times(results: Sequence[ProcessResult]) -> Dict[str, int]:
    return {r.pid: r.waiting_time for r in results}


def compute_turnaround_times(results: Sequence[ProcessResult]) -> Dict[str, int]:
    return {r.pid: r.turnaround_time for r in results}


def compute_avg(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def compute_throughput(results: Sequence[ProcessResult], total_time: float) -> float:
    if total_time <= 0:
        return 0.0
    return len(results) / total_time


def summarize(results: Sequence[ProcessResult]) -> ResultsSummary:
    """Build the results table and its rounded averages."""
    rows = [
        {
            "pid": r.pid,
            "arrival": r.arrival_time,
            "burst": r.total_cpu_burst,
            "completion": r.completion_time,
            "turnaround": r.turnaround_time,
            "waiting": r.waiting_time,
        }
        for r in results
    ]
    avg_tat = compute_avg(list(compute_turnaround_times(results).values()))
    avg_wt = compute_avg(list(compute_waiting_times(results).values()))
    return ResultsSummary(rows=rows, avg_turnaround=round(avg_tat, 2), avg_waiting=round(avg_wt, 2))


def cpu_timeline(trace: Sequence[Snapshot]) -> List[Dict[str, Any]]:
    """Merge consecutive ticks with the same CPU occupant into slices."""
    timeline: List[Dict[str, Any]] = []
    for snap in trace:
        if snap.is_final:
            continue
        pid: Optional[str] = None if snap.cpu_occupant == IDLE else snap.cpu_occupant
        if timeline and timeline[-1]["pid"] == pid and timeline[-1]["end"] == snap.time:
            timeline[-1]["end"] = snap.time + 1
        else:
            timeline.append({"start": snap.time, "end": snap.time + 1, "pid": pid})
    return timeline


def cpu_utilization(trace: Sequence[Snapshot]) -> float:
    """Busy ticks as a percentage of simulated ticks."""
    ticks = [s for s in trace if not s.is_final]
    if not ticks:
        return 0.0
    busy = len([s for s in ticks if not s.cpu_idle])
    return busy / len(ticks) * 100


def format_blocked(snapshot: Snapshot) -> str:
    if not snapshot.blocked_queue:
        return "[Empty]"
    return ", ".join(f"{entry.pid} ({entry.io_timer})" for entry in snapshot.blocked_queue)


def format_queue(pids: Sequence[str]) -> str:
    return ", ".join(pids) if pids else "[Empty]"
