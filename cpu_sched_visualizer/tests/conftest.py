import os
import sys

import pytest


def pytest_sessionstart(session):
    # Ensure repository root is on sys.path so 'cpu_sched_visualizer' can be imported
    here = os.path.dirname(os.path.abspath(__file__))
    project_root = os.path.abspath(os.path.join(here, os.pardir, os.pardir))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)


@pytest.fixture
def make_process():
    from cpu_sched_visualizer.backend.utils import Process

    def _make(pid, arrival, bursts, priority=1):
        if isinstance(bursts, int):
            bursts = [bursts]
        return Process(pid=pid, arrival_time=arrival, burst_sequence=bursts, priority=priority)
    return _make
