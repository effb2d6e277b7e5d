"""
Playback cursor over a finished trace.

Stepping and timed playback only move an index; the trace itself is never
recomputed or modified.
"""

from typing import Optional, Sequence

from .core import Snapshot

MIN_INTERVAL_MS = 100
MAX_INTERVAL_MS = 2000


def interval_from_slider(value: int) -> int:
    """Map the speed slider (faster to the right) to a timer interval."""
    return 2100 - max(MIN_INTERVAL_MS, min(MAX_INTERVAL_MS, int(value)))


class Playback:
    def __init__(self, trace: Sequence[Snapshot] = ()):
        self.trace = list(trace)
        self.index = 0
        self.playing = False

    def load(self, trace: Sequence[Snapshot]) -> None:
        self.trace = list(trace)
        self.reset()

    def reset(self) -> None:
        self.index = 0
        self.playing = False

    @property
    def current(self) -> Optional[Snapshot]:
        if not self.trace:
            return None
        return self.trace[self.index]

    @property
    def at_end(self) -> bool:
        return not self.trace or self.index >= len(self.trace) - 1

    @property
    def at_start(self) -> bool:
        return self.index == 0

    def seek(self, index: int) -> Optional[Snapshot]:
        if not self.trace:
            return None
        self.index = max(0, min(len(self.trace) - 1, index))
        return self.current

    def step_forward(self) -> Optional[Snapshot]:
        return self.seek(self.index + 1)

    def step_backward(self) -> Optional[Snapshot]:
        return self.seek(self.index - 1)

    def play(self) -> None:
        self.playing = bool(self.trace) and not self.at_end

    def pause(self) -> None:
        self.playing = False

    def advance(self) -> Optional[Snapshot]:
        """Timer callback: move one step while playing, stop on the last snapshot."""
        if not self.playing:
            return self.current
        snapshot = self.step_forward()
        if self.at_end:
            self.playing = False
        return snapshot
