"""
Tests for the ready queue, the policy selector and the scheduler variants.
"""

import pytest

from cpu_sched_visualizer.backend.core import (
    Policy, ReadyQueue, InvalidPolicyError, InvalidQuantumError, PolicyNotImplementedError,
)
from cpu_sched_visualizer.backend.schedulers import (
    FCFSScheduler, SJFScheduler, RoundRobinScheduler, PriorityScheduler, create_scheduler,
)
from cpu_sched_visualizer.backend.utils import Process


@pytest.fixture
def sample_processes():
    """Create a set of test processes."""
    return [
        Process(pid="P1", arrival_time=0, burst_sequence=[4]),
        Process(pid="P2", arrival_time=1, burst_sequence=[3, 2, 1]),
        Process(pid="P3", arrival_time=2, burst_sequence=[1]),
        Process(pid="P4", arrival_time=3, burst_sequence=[2, 5, 2]),
        Process(pid="P5", arrival_time=4, burst_sequence=[4]),
    ]


@pytest.fixture
def ready_queue():
    return ReadyQueue()


class TestReadyQueue:
    def test_push_pop_fifo(self, ready_queue, sample_processes):
        for p in sample_processes:
            ready_queue.push(p)
        assert len(ready_queue) == len(sample_processes)

        pids = []
        while not ready_queue.is_empty():
            pids.append(ready_queue.pop().pid)
        assert pids == ["P1", "P2", "P3", "P4", "P5"]

    def test_sjf_pop_sorts_in_place(self, ready_queue, sample_processes):
        ready_queue.extend(sample_processes)
        first = ready_queue.pop(mode='sjf')
        assert first.pid == "P3"
        # the rest all total 4 CPU ticks, so arrival decides
        assert ready_queue.pids() == ("P1", "P2", "P4", "P5")

    def test_pop_empty(self, ready_queue):
        assert ready_queue.pop() is None

    def test_unknown_mode(self, ready_queue, sample_processes):
        ready_queue.push(sample_processes[0])
        with pytest.raises(ValueError):
            ready_queue.pop(mode='lottery')


class TestPolicy:
    @pytest.mark.parametrize("value,expected", [
        ("RR", Policy.RR),
        ("rr", Policy.RR),
        ("Round Robin", Policy.RR),
        ("FCFS", Policy.FCFS),
        ("sjf", Policy.SJF),
        ("Priority", Policy.PRIORITY),
        (Policy.SJF, Policy.SJF),
    ])
    def test_parse(self, value, expected):
        assert Policy.parse(value) is expected

    @pytest.mark.parametrize("value", ["SRTF", "", None, 3])
    def test_parse_rejects(self, value):
        with pytest.raises(InvalidPolicyError):
            Policy.parse(value)


class TestCreateScheduler:
    def test_variants(self):
        assert isinstance(create_scheduler(Policy.FCFS), FCFSScheduler)
        assert isinstance(create_scheduler("SJF"), SJFScheduler)
        rr = create_scheduler(Policy.RR, quantum=4)
        assert isinstance(rr, RoundRobinScheduler)
        assert rr.time_quantum == 4

    def test_priority_not_implemented(self):
        with pytest.raises(PolicyNotImplementedError):
            create_scheduler(Policy.PRIORITY)
        with pytest.raises(PolicyNotImplementedError):
            PriorityScheduler()

    def test_rr_requires_quantum(self):
        with pytest.raises(InvalidQuantumError):
            create_scheduler(Policy.RR)
        with pytest.raises(InvalidQuantumError):
            create_scheduler(Policy.RR, quantum=True)


class TestFCFS:
    def test_prepare_truncates_io(self, sample_processes):
        scheduler = FCFSScheduler()
        p = sample_processes[3]
        scheduler.prepare(p)
        assert p.burst_sequence == [2]
        assert p.total_cpu_burst == 2
        assert p.remaining_burst == 2

    def test_dispatch_order(self, sample_processes):
        scheduler = FCFSScheduler()
        scheduler.admit([], sample_processes)
        pids = []
        while scheduler.dispatch():
            pids.append(scheduler.release().pid)
        assert pids == [p.pid for p in sample_processes]

    def test_dispatch_keeps_current(self, sample_processes):
        scheduler = FCFSScheduler()
        scheduler.admit([], sample_processes[:2])
        first = scheduler.dispatch()
        assert scheduler.dispatch() is first
        assert scheduler.ready_queue.pids() == ("P2",)


class TestSJF:
    def test_sjf_order(self, sample_processes):
        scheduler = SJFScheduler()
        for p in sample_processes:
            scheduler.prepare(p)
        scheduler.admit([], sample_processes)
        bursts = []
        while scheduler.dispatch():
            bursts.append(scheduler.release().total_cpu_burst)
        assert bursts == sorted(bursts)


class TestRoundRobin:
    def test_prepare_keeps_io(self, sample_processes):
        scheduler = RoundRobinScheduler(time_quantum=2)
        p = sample_processes[1]
        scheduler.prepare(p)
        assert p.burst_sequence == [3, 2, 1]
        assert p.total_cpu_burst == 4

    def test_quantum_expiry(self):
        scheduler = RoundRobinScheduler(time_quantum=2)
        p1 = Process("P1", 0, [5])
        p2 = Process("P2", 0, [5])
        scheduler.admit([], [p1, p2])

        assert scheduler.dispatch() is p1
        assert scheduler.quantum_remaining == 2
        scheduler.execute()
        assert not scheduler.quantum_expired()
        scheduler.execute()
        assert scheduler.quantum_expired()
        assert p1.remaining_burst == 3

        scheduler.preempt()
        assert scheduler.quantum_remaining == 0
        assert scheduler.ready_queue.pids() == ("P2", "P1")
        assert scheduler.dispatch() is p2
        assert scheduler.quantum_remaining == 2

    def test_returning_processes_admitted_first(self):
        scheduler = RoundRobinScheduler(time_quantum=2)
        back = Process("P1", 0, [1, 1, 1])
        new = Process("P2", 3, [2])
        scheduler.admit([back], [new])
        assert scheduler.ready_queue.pids() == ("P1", "P2")
