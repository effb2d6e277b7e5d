from __future__ import annotations

import shlex
from typing import List, Optional
from colorama import Fore, Style, init as colorama_init

from .core import Snapshot, SimulationError, PolicyNotImplementedError
from .utils import (
    Process, ProcessIdGenerator, default_processes, parse_burst_sequence,
    summarize, format_queue, format_blocked,
)
from .os_kernel import OSKernel, KernelConfig
from .playback import Playback
from .visualizer import plot_gantt


class ManualTerminal:
    def __init__(self) -> None:
        colorama_init(autoreset=True)
        self.processes: List[Process] = default_processes()
        self.ids = ProcessIdGenerator(start=len(self.processes) + 1)
        self.config = KernelConfig()
        self.playback = Playback()
        self.last_trace = None

    def prompt(self) -> None:
        print(Fore.CYAN + "Scheduling visualizer terminal. Type 'help' for commands.")
        while True:
            try:
                raw = input(Fore.GREEN + "> ")
            except (EOFError, KeyboardInterrupt):
                print()
                break
            if not raw.strip():
                continue
            self.handle_command(raw)

    def handle_command(self, raw: str) -> None:
        try:
            parts = shlex.split(raw)
        except ValueError as e:
            print(Fore.RED + f"Parse error: {e}")
            return
        if not parts:
            return
        cmd, *args = parts
        cmd = cmd.lower()
        if cmd == "help":
            self._help()
        elif cmd == "add":
            self._add(args)
        elif cmd == "remove":
            self._remove(args)
        elif cmd == "list":
            self._list()
        elif cmd == "run":
            self._run(args)
        elif cmd == "show":
            self._show(self.playback.current)
        elif cmd == "next":
            self._show(self.playback.step_forward())
        elif cmd == "prev":
            self._show(self.playback.step_backward())
        elif cmd == "stats":
            self._stats()
        elif cmd == "gantt":
            self._gantt(args)
        elif cmd == "reset":
            self._reset()
        elif cmd == "exit" or cmd == "quit":
            raise SystemExit(0)
        else:
            print(Fore.YELLOW + "Unknown command. Type 'help'.")

    def _help(self) -> None:
        print("Commands:")
        print("  add <arrival> <bursts> [priority]   bursts like 5,2,3 (CPU, I/O, CPU...)")
        print("  remove <pid>")
        print("  list")
        print("  run [--policy RR|FCFS|SJF|PRIORITY] [--quantum Q] [--io|--no-io]")
        print("  show | next | prev")
        print("  stats")
        print("  gantt <path.png>")
        print("  reset")
        print("  exit")

    def _add(self, args: List[str]) -> None:
        if len(args) < 2:
            print(Fore.RED + "Usage: add <arrival> <bursts> [priority]")
            return
        try:
            arrival = int(args[0])
            priority = int(args[2]) if len(args) >= 3 else 1
        except ValueError:
            print(Fore.RED + "Invalid numeric values")
            return
        bursts = parse_burst_sequence(args[1])
        if not bursts:
            print(Fore.RED + "Burst sequence needs at least one positive integer")
            return
        pid = self.ids.next_id()
        self.processes.append(Process(pid=pid, arrival_time=arrival, burst_sequence=bursts, priority=priority))
        print(Fore.CYAN + f"Process {pid} added: arrival={arrival}, bursts={bursts}, priority={priority}")

    def _remove(self, args: List[str]) -> None:
        if not args:
            print(Fore.RED + "Usage: remove <pid>")
            return
        before = len(self.processes)
        self.processes = [p for p in self.processes if p.pid != args[0]]
        if len(self.processes) == before:
            print(Fore.YELLOW + f"No process {args[0]}")
        else:
            print(Fore.CYAN + f"Removed {args[0]}")

    def _list(self) -> None:
        if not self.processes:
            print("No processes yet")
            return
        for p in self.processes:
            bursts = ", ".join(str(b) for b in p.burst_sequence)
            print(f"{p.pid}: arrival={p.arrival_time}, bursts=[{bursts}], priority={p.priority}")

    def _run(self, args: List[str]) -> None:
        policy = self.config.policy
        quantum = self.config.time_quantum
        io_enabled = self.config.io_enabled
        it = iter(args)
        for token in it:
            if token == "--policy":
                policy = next(it, policy)
            elif token == "--quantum":
                try:
                    quantum = int(next(it))
                except (TypeError, ValueError):
                    print(Fore.RED + "Quantum must be an integer")
                    return
            elif token == "--io":
                io_enabled = True
            elif token == "--no-io":
                io_enabled = False

        if not self.processes:
            print(Fore.RED + "Please add at least one process.")
            return
        try:
            config = KernelConfig(policy=policy, time_quantum=quantum, io_enabled=io_enabled)
            trace = OSKernel(config).run(self.processes)
        except PolicyNotImplementedError as e:
            print(Fore.YELLOW + f"{e}")
            return
        except SimulationError as e:
            print(Fore.RED + f"Simulation error: {e}")
            return

        self.config = config
        self.last_trace = trace
        self.playback.load(trace)
        if not trace.complete:
            print(Fore.RED + f"Simulation stopped after {len(trace)} ticks without finishing every process.")
        else:
            summary = summarize(trace.final_stats)
            print(Style.BRIGHT + f"Simulation finished in {trace.final.time} ticks. "
                  f"Avg turnaround: {summary.avg_turnaround:.2f}, Avg waiting: {summary.avg_waiting:.2f}")
        self._show(self.playback.current)

    def _show(self, snap: Optional[Snapshot]) -> None:
        if snap is None:
            print("No simulation yet")
            return
        header = f"t={snap.time}" + ("  (final)" if snap.is_final else "")
        print(Style.BRIGHT + header)
        cpu = snap.cpu_occupant
        if snap.quantum_remaining:
            cpu += f"  Q: {snap.quantum_remaining}"
        print(f"  CPU:        {Fore.CYAN}{cpu}")
        print(f"  Ready:      {Fore.YELLOW}{format_queue(snap.ready_queue)}")
        print(f"  Blocked:    {Fore.RED}{format_blocked(snap)}")
        print(f"  Terminated: {format_queue(snap.terminated)}")
        if snap.arrivals:
            print(f"  Arrived:    {', '.join(snap.arrivals)}")

    def _stats(self) -> None:
        if not self.last_trace or not self.last_trace.final:
            print("No finished simulation yet")
            return
        summary = summarize(self.last_trace.final_stats)
        print(f"{'PID':<6}{'Arrival':>8}{'Burst':>8}{'Done':>8}{'TAT':>8}{'WT':>8}")
        for row in summary.rows:
            print(f"{row['pid']:<6}{row['arrival']:>8}{row['burst']:>8}{row['completion']:>8}"
                  f"{row['turnaround']:>8}{row['waiting']:>8}")
        print(f"Avg turnaround time: {summary.avg_turnaround:.2f}")
        print(f"Avg waiting time: {summary.avg_waiting:.2f}")

    def _gantt(self, args: List[str]) -> None:
        if not self.last_trace:
            print("No simulation yet")
            return
        out_path = args[0] if args else None
        plot_gantt(self.last_trace, out_path, title=f"Gantt Chart ({self.config.policy.label})")
        if out_path:
            print(Fore.CYAN + f"Saved plot to {out_path}")

    def _reset(self) -> None:
        self.processes = default_processes()
        self.ids = ProcessIdGenerator(start=len(self.processes) + 1)
        self.playback = Playback()
        self.last_trace = None
        print(Fore.CYAN + "Reset to default processes")


def main() -> None:
    ManualTerminal().prompt()


if __name__ == "__main__":
    main()
