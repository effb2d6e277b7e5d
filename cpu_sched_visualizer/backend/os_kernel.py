from __future__ import annotations

from typing import List, Sequence
from dataclasses import dataclass
import copy

from .core import Policy
from .utils import Process
from .simulator import simulate, Trace, MAX_TICKS


@dataclass
class KernelConfig:
    policy: Policy = Policy.RR
    time_quantum: int = 2
    io_enabled: bool = True
    max_ticks: int = MAX_TICKS
    playback_interval_ms: int = 1000

    def __post_init__(self) -> None:
        self.policy = Policy.parse(self.policy)

    @property
    def models_io(self) -> bool:
        return self.policy is Policy.RR and self.io_enabled


class OSKernel:
    """Configured entry point shared by the GUI, the terminal and the CLI.

    It applies the I/O toggle the way the input form does (only the first
    burst survives when I/O is off) and hands a copy to ``simulate``.
    """

    def __init__(self, config: KernelConfig | None = None):
        self.config = config or KernelConfig()

    def prepare(self, processes: Sequence[Process]) -> List[Process]:
        procs = copy.deepcopy(list(processes))
        if not self.config.models_io:
            for p in procs:
                p.truncate_to_first_burst()
        return procs

    def run(self, processes: Sequence[Process]) -> Trace:
        """Run the simulation; returns the trace from ``simulate``."""
        quantum = self.config.time_quantum if self.config.policy is Policy.RR else None
        return simulate(
            self.prepare(processes),
            policy=self.config.policy,
            quantum=quantum,
            max_ticks=self.config.max_ticks,
        )
