from __future__ import annotations

import argparse
import logging
import sys

from colorama import Fore, Style, init as colorama_init

from cpu_sched_visualizer.backend.core import Policy, SimulationError, PolicyNotImplementedError
from cpu_sched_visualizer.backend.os_kernel import OSKernel, KernelConfig
from cpu_sched_visualizer.backend.utils import (
    default_processes, generate_workload, summarize, format_queue, format_blocked,
    cpu_utilization, compute_throughput,
)
from cpu_sched_visualizer.backend.visualizer import plot_gantt


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="CPU scheduling trace simulator")
    p.add_argument("--policy", choices=[pol.value for pol in Policy], default=Policy.RR.value)
    p.add_argument("--quantum", type=int, default=2)
    p.add_argument("--no-io", action="store_true", help="Run only the first CPU burst of each process")
    p.add_argument("--n", type=int, default=5, help="Number of synthetic processes")
    p.add_argument("--seed", type=int, default=42)
    p.add_argument("--defaults", action="store_true", help="Use the default P1-P3 rows instead of a synthetic workload")
    p.add_argument("--trace", action="store_true", help="Print every snapshot")
    p.add_argument("--out", type=str, default=None, help="Save a Gantt chart PNG")
    p.add_argument("--verbose", action="store_true")
    return p.parse_args(argv)


def print_trace(trace) -> None:
    for snap in trace:
        if snap.is_final:
            break
        q = f" Q:{snap.quantum_remaining}" if snap.quantum_remaining else ""
        print(f"t={snap.time:>3}  CPU={snap.cpu_occupant:<5}{q:<6} ready=[{format_queue(snap.ready_queue)}]"
              f"  blocked=[{format_blocked(snap)}]  done=[{format_queue(snap.terminated)}]")


def main(argv=None) -> int:
    args = parse_args(argv)
    colorama_init(autoreset=True)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    io_enabled = not args.no_io
    procs = default_processes(io_enabled) if args.defaults else generate_workload(args.n, args.seed, io_enabled)
    config = KernelConfig(policy=args.policy, time_quantum=args.quantum, io_enabled=io_enabled)
    try:
        trace = OSKernel(config).run(procs)
    except PolicyNotImplementedError as e:
        print(Fore.YELLOW + str(e))
        return 2
    except SimulationError as e:
        print(Fore.RED + f"Simulation error: {e}")
        return 1

    if args.trace:
        print_trace(trace)
    if not trace.complete:
        print(Fore.RED + f"Tick limit reached after {len(trace)} snapshots; results are incomplete.")
        return 1

    summary = summarize(trace.final_stats)
    print(Style.BRIGHT + f"{'PID':<6}{'Arrival':>8}{'Burst':>8}{'Done':>8}{'TAT':>8}{'WT':>8}")
    for row in summary.rows:
        print(f"{row['pid']:<6}{row['arrival']:>8}{row['burst']:>8}{row['completion']:>8}"
              f"{row['turnaround']:>8}{row['waiting']:>8}")
    throughput = compute_throughput(trace.final_stats, trace.final.time)
    print(f"Avg turnaround: {summary.avg_turnaround:.2f}, Avg waiting: {summary.avg_waiting:.2f}, "
          f"Throughput: {throughput:.3f}, CPU utilization: {cpu_utilization(trace):.1f}%")
    if args.out:
        plot_gantt(trace, args.out, title=f"Gantt Chart ({config.policy.label})")
        print(f"Saved plot to {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
