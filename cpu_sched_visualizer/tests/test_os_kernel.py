from __future__ import annotations

import pytest

from cpu_sched_visualizer.backend.core import Policy, InvalidPolicyError, PolicyNotImplementedError
from cpu_sched_visualizer.backend.utils import Process
from cpu_sched_visualizer.backend.os_kernel import OSKernel, KernelConfig


def make_procs():
    return [
        Process(pid='P1', arrival_time=0, burst_sequence=[4, 2, 3]),
        Process(pid='P2', arrival_time=1, burst_sequence=[3]),
    ]


def test_kernel_runs_round_robin_with_io():
    kernel = OSKernel(KernelConfig(policy='RR', time_quantum=3))
    trace = kernel.run(make_procs())

    assert trace.complete
    stats = {r.pid: r for r in trace.final_stats}
    assert stats['P1'].total_cpu_burst == 7
    assert any(snap.blocked_queue for snap in trace)


def test_kernel_io_disabled_uses_first_burst():
    procs = make_procs()
    kernel = OSKernel(KernelConfig(policy=Policy.RR, time_quantum=3, io_enabled=False))
    trace = kernel.run(procs)

    stats = {r.pid: r for r in trace.final_stats}
    assert stats['P1'].burst_sequence == (4,)
    assert not any(snap.blocked_queue for snap in trace)
    # caller's records untouched
    assert procs[0].burst_sequence == [4, 2, 3]


def test_kernel_ignores_quantum_for_fcfs():
    kernel = OSKernel(KernelConfig(policy='FCFS', time_quantum=0))
    trace = kernel.run(make_procs())
    assert trace.final.time == 7


def test_config_rejects_unknown_policy():
    with pytest.raises(InvalidPolicyError):
        KernelConfig(policy='MLFQ')


def test_priority_not_implemented():
    with pytest.raises(PolicyNotImplementedError):
        OSKernel(KernelConfig(policy=Policy.PRIORITY)).run(make_procs())
