from __future__ import annotations

from typing import List, Optional, Dict, Sequence
import os
import re
import matplotlib.pyplot as plt

from .core import ProcessState, Snapshot
from .utils import cpu_timeline


GANTT_COLORS = ["#D7BDE2", "#A9DFBF", "#FAD7A0", "#AED6F1", "#F1948A"]
IDLE_COLOR = "#FDFEFE"
BLOCKED_COLOR = "#F1825F"


def color_for(pid: Optional[str]) -> str:
    """Stable colour from the numeric part of the pid."""
    if pid is None:
        return IDLE_COLOR
    match = re.search(r"\d+", pid)
    num = int(match.group()) if match else 0
    return GANTT_COLORS[num % len(GANTT_COLORS)]


def ensure_dir(path: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def blocked_intervals(trace: Sequence[Snapshot]) -> Dict[str, List[tuple]]:
    """(start, length) runs per pid spent in the blocked queue."""
    runs: Dict[str, List[tuple]] = {}
    for snap in trace:
        if snap.is_final:
            continue
        for entry in snap.blocked_queue:
            spans = runs.setdefault(entry.pid, [])
            if spans and spans[-1][0] + spans[-1][1] == snap.time:
                spans[-1] = (spans[-1][0], spans[-1][1] + 1)
            else:
                spans.append((snap.time, 1))
    return runs


def plot_gantt(trace: Sequence[Snapshot], out_path: Optional[str] = None, title: str = "CPU Gantt Chart") -> None:
    if not trace:
        return
    pids = [s.pid for s in trace[0].process_states]
    fig, ax = plt.subplots(figsize=(12, 2 + 0.4 * max(1, len(pids))))
    y_positions: Dict[str, int] = {pid: i + 1 for i, pid in enumerate(pids)}

    # Row 0: CPU occupancy, idle ticks drawn as empty cells
    for seg in cpu_timeline(trace):
        ax.barh(0, seg["end"] - seg["start"], left=seg["start"], color=color_for(seg["pid"]), edgecolor="black")
        if seg["pid"]:
            ax.text((seg["start"] + seg["end"]) / 2, 0, seg["pid"], ha="center", va="center", fontsize=8)

    # One row per process: running and blocked ticks
    for snap in trace:
        if snap.is_final:
            continue
        for status in snap.process_states:
            if status.state is ProcessState.RUNNING:
                ax.barh(y_positions[status.pid], 1, left=snap.time, color=color_for(status.pid), edgecolor="black")
    for pid, spans in blocked_intervals(trace).items():
        ax.broken_barh(spans, (y_positions[pid] - 0.4, 0.8), facecolors=BLOCKED_COLOR, hatch="//", alpha=0.6)

    ax.set_yticks([0] + [y_positions[pid] for pid in pids])
    ax.set_yticklabels(["CPU"] + pids)
    ax.invert_yaxis()
    ax.set_xlabel("Time")
    ax.set_title(title)
    ax.grid(True, axis="x", linestyle=":", alpha=0.5)
    fig.tight_layout()

    if out_path:
        ensure_dir(out_path)
        fig.savefig(out_path, dpi=150)
        plt.close(fig)
    else:
        plt.show()
