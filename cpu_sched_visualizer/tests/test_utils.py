import pytest

from cpu_sched_visualizer.backend.core import Policy
from cpu_sched_visualizer.backend.simulator import simulate
from cpu_sched_visualizer.backend.utils import (
    Process, ProcessIdGenerator, parse_burst_sequence, build_processes, default_processes,
    generate_workload, summarize, compute_avg, compute_throughput, compute_waiting_times,
    compute_turnaround_times, cpu_timeline, cpu_utilization, format_blocked, format_queue,
)


class TestProcess:
    def test_derived_fields(self):
        p = Process("P1", 2, [4, 2, 3])
        assert p.remaining_burst == 4
        assert p.total_cpu_burst == 7
        assert p.burst_index == 0
        assert p.has_next_phase

    def test_truncate(self):
        p = Process("P1", 0, [4, 2, 3])
        p.truncate_to_first_burst()
        assert p.burst_sequence == [4]
        assert p.total_cpu_burst == 4
        assert not p.has_next_phase


class TestParsing:
    @pytest.mark.parametrize("text,io,expected", [
        ("5, 2, 3", True, [5, 2, 3]),
        ("5,2,3", False, [5]),
        (" 7 ", True, [7]),
        ("4, x, 0, -1, 2", True, [4, 2]),
        ("", True, []),
        ("abc", False, []),
    ])
    def test_parse_burst_sequence(self, text, io, expected):
        assert parse_burst_sequence(text, io_enabled=io) == expected

    def test_id_generator_continues_after_defaults(self):
        ids = ProcessIdGenerator()
        assert [ids.next_id(), ids.next_id()] == ["P4", "P5"]

    def test_build_processes_skips_empty_rows(self):
        rows = [("P1", 0, "3, 1, 2", 1), ("P2", 1, "", 1), ("P3", "2", "4", "2")]
        procs = build_processes(rows, io_enabled=False)
        assert [p.pid for p in procs] == ["P1", "P3"]
        assert procs[0].burst_sequence == [3]
        assert procs[1].arrival_time == 2
        assert procs[1].priority == 2

    def test_default_processes(self):
        procs = default_processes()
        assert [p.pid for p in procs] == ["P1", "P2", "P3"]
        assert all(len(p.burst_sequence) == 1 for p in default_processes(io_enabled=False))

    def test_generate_workload_is_seeded(self):
        a = generate_workload(5, seed=11)
        b = generate_workload(5, seed=11)
        assert [(p.arrival_time, p.burst_sequence) for p in a] == [(p.arrival_time, p.burst_sequence) for p in b]
        assert a[0].arrival_time == 0
        assert all(len(p.burst_sequence) % 2 == 1 for p in a)


class TestStatistics:
    @pytest.fixture
    def fcfs_trace(self):
        procs = [Process("P1", 0, [5]), Process("P2", 1, [3])]
        return simulate(procs, Policy.FCFS)

    def test_summary(self, fcfs_trace):
        summary = summarize(fcfs_trace.final_stats)
        assert [row["pid"] for row in summary.rows] == ["P1", "P2"]
        assert summary.rows[1] == {
            "pid": "P2", "arrival": 1, "burst": 3, "completion": 8, "turnaround": 7, "waiting": 4,
        }
        assert summary.avg_turnaround == 6.0
        assert summary.avg_waiting == 2.0

    def test_averages_rounded(self):
        procs = [Process("P1", 0, [1]), Process("P2", 0, [1]), Process("P3", 0, [1])]
        summary = summarize(simulate(procs, Policy.FCFS).final_stats)
        # waits 0, 1, 2 and turnarounds 1, 2, 3
        assert summary.avg_waiting == 1.0
        assert summary.avg_turnaround == 2.0

    def test_maps(self, fcfs_trace):
        assert compute_waiting_times(fcfs_trace.final_stats) == {"P1": 0, "P2": 4}
        assert compute_turnaround_times(fcfs_trace.final_stats) == {"P1": 5, "P2": 7}

    def test_compute_avg_empty(self):
        assert compute_avg([]) == 0.0
        assert compute_avg([1, 2]) == 1.5

    def test_throughput(self, fcfs_trace):
        assert compute_throughput(fcfs_trace.final_stats, 8) == 0.25
        assert compute_throughput(fcfs_trace.final_stats, 0) == 0.0

    def test_cpu_timeline(self):
        trace = simulate([Process("P1", 0, [4, 2, 3])], Policy.RR, quantum=3)
        assert cpu_timeline(trace) == [
            {"start": 0, "end": 4, "pid": "P1"},
            {"start": 4, "end": 6, "pid": None},
            {"start": 6, "end": 9, "pid": "P1"},
        ]
        assert cpu_utilization(trace) == pytest.approx(7 / 9 * 100)

    def test_formatting(self):
        trace = simulate([Process("P1", 0, [1, 2, 1])], Policy.RR, quantum=2)
        assert format_blocked(trace[1]) == "P1 (2)"
        assert format_blocked(trace[0]) == "[Empty]"
        assert format_queue(("P1", "P2")) == "P1, P2"
        assert format_queue(()) == "[Empty]"
