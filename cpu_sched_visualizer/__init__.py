"""
Tick-by-tick CPU scheduling simulator for stepwise visualization.
"""

from .backend.core import Policy, Snapshot, ProcessState
from .backend.utils import Process
from .backend.simulator import simulate, Simulator, Trace

__all__ = ['Policy', 'Snapshot', 'ProcessState', 'Process', 'simulate', 'Simulator', 'Trace']
