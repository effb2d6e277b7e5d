"""
Main window for the scheduling visualizer GUI.
"""

from typing import List, Optional
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QGridLayout,
    QLabel, QPushButton, QComboBox, QSpinBox, QCheckBox, QSlider,
    QTableWidget, QTableWidgetItem, QHeaderView, QMessageBox,
    QSplitter, QFrame
)
from PyQt6.QtCore import Qt, QTimer, QRect
from PyQt6.QtGui import QPainter, QColor, QPen, QBrush, QFont

from ..backend.core import Policy, ProcessState, Snapshot, SimulationError, PolicyNotImplementedError
from ..backend.utils import DEFAULT_ROWS, ProcessIdGenerator, build_processes, summarize, cpu_timeline
from ..backend.os_kernel import OSKernel, KernelConfig
from ..backend.playback import Playback, interval_from_slider
from ..backend.visualizer import color_for

COLORS = {
    'cpu': QColor('#68B0AB'),
    'ready': QColor('#F0C674'),
    'blocked': QColor('#F1825F'),
    'terminated': QColor('#A3A3AB'),
    'idle': QColor('#F5F5F5'),
    'label': QColor('#555555'),
    'text': QColor('#000000'),
    'gantt_bg': QColor('#EBF5FB'),
}

STATE_COLORS = {
    ProcessState.RUNNING: COLORS['cpu'],
    ProcessState.READY: COLORS['ready'],
    ProcessState.BLOCKED: COLORS['blocked'],
    ProcessState.TERMINATED: COLORS['terminated'],
}


# Process input table
class ProcessTable(QTableWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setColumnCount(4)
        self.setHorizontalHeaderLabels(["PID", "Arrival", "Burst Sequence (CPU, I/O, CPU...)", "Priority"])
        header = self.horizontalHeader()
        header.setSectionResizeMode(QHeaderView.ResizeMode.ResizeToContents)
        header.setStretchLastSection(True)
        self.verticalHeader().setVisible(False)
        self.setAlternatingRowColors(True)
        self.ids = ProcessIdGenerator()
        for i, (arrival, bursts, priority) in enumerate(DEFAULT_ROWS):
            self._append_row(f"P{i + 1}", arrival, bursts, priority)

    def _append_row(self, pid: str, arrival: int, bursts: str, priority: int) -> None:
        row = self.rowCount()
        self.insertRow(row)
        pid_item = QTableWidgetItem(pid)
        pid_item.setFlags(pid_item.flags() & ~Qt.ItemFlag.ItemIsEditable)
        self.setItem(row, 0, pid_item)
        self.setItem(row, 1, QTableWidgetItem(str(arrival)))
        self.setItem(row, 2, QTableWidgetItem(bursts))
        self.setItem(row, 3, QTableWidgetItem(str(priority)))

    def add_process_row(self) -> None:
        self._append_row(self.ids.next_id(), 0, "5", 1)

    def remove_selected(self) -> None:
        rows = sorted({index.row() for index in self.selectedIndexes()}, reverse=True)
        for row in rows:
            self.removeRow(row)

    def set_priority_visible(self, visible: bool) -> None:
        self.setColumnHidden(3, not visible)

    def rows(self):
        """Yield (pid, arrival, burst text, priority); bad numbers raise ValueError."""
        for row in range(self.rowCount()):
            pid = self.item(row, 0).text()
            arrival = int(self.item(row, 1).text())
            if arrival < 0:
                raise ValueError(f"{pid}: arrival must be >= 0")
            bursts = self.item(row, 2).text()
            priority = int(self.item(row, 3).text() or 1)
            yield pid, arrival, bursts, priority


class StatCard(QFrame):
    """Compact metric card component."""

    def __init__(self, title: str, parent=None):
        super().__init__(parent)
        self.setFrameShape(QFrame.Shape.StyledPanel)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(10, 8, 10, 8)
        self.title_label = QLabel(title.upper())
        self.title_label.setStyleSheet("color:#7486a8;font-size:12px;font-weight:600;letter-spacing:1px;")
        layout.addWidget(self.title_label)
        self.value_label = QLabel("0.00")
        self.value_label.setStyleSheet("color:#0b2447;font-size:18px;font-weight:700;")
        layout.addWidget(self.value_label)

    def update_value(self, value: float) -> None:
        self.value_label.setText(f"{value:.2f}")


class ResultsTable(QTableWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setColumnCount(6)
        self.setHorizontalHeaderLabels(["PID", "Arrival", "Total Burst", "Completion", "Turnaround", "Waiting"])
        self.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self.verticalHeader().setVisible(False)

    def show_rows(self, rows) -> None:
        self.setRowCount(0)
        for data in rows:
            row = self.rowCount()
            self.insertRow(row)
            for col, key in enumerate(["pid", "arrival", "burst", "completion", "turnaround", "waiting"]):
                self.setItem(row, col, QTableWidgetItem(str(data[key])))


# Painted view of one snapshot
class StateView(QWidget):
    BOX = 55
    GAP = 15
    GANTT_CELL = 20

    def __init__(self, parent=None):
        super().__init__(parent)
        self.snapshot: Optional[Snapshot] = None
        self.history: List[Snapshot] = []
        self.setMinimumSize(900, 480)

    def show_snapshot(self, snapshot: Optional[Snapshot], history: List[Snapshot]) -> None:
        self.snapshot = snapshot
        self.history = history
        self.update()

    def _label(self, painter: QPainter, x: int, y: int, text: str, size: int = 13) -> None:
        painter.setPen(QPen(COLORS['label']))
        painter.setFont(QFont("Arial", size))
        painter.drawText(x, y, text)

    def _box(self, painter: QPainter, x: int, y: int, color: QColor, text: str, caption: str = "") -> None:
        rect = QRect(x, y, self.BOX, self.BOX)
        painter.setBrush(QBrush(color))
        painter.setPen(QPen(QColor('#333333')))
        painter.drawRect(rect)
        painter.setPen(QPen(COLORS['text']))
        painter.setFont(QFont("Arial", 14))
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, text)
        if caption:
            painter.setFont(QFont("Arial", 11))
            painter.drawText(QRect(x, y + self.BOX + 2, self.BOX, 20), Qt.AlignmentFlag.AlignCenter, caption)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        snap = self.snapshot
        if snap is None:
            painter.setPen(QPen(COLORS['text']))
            painter.setFont(QFont("Arial", 16))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignTop,
                             'Click "Run" to start the simulation.')
            return

        painter.setPen(QPen(COLORS['text']))
        painter.setFont(QFont("Arial", 18))
        painter.drawText(30, 40, f"Time: {snap.time}")

        # CPU
        self._label(painter, 40, 110, "CPU")
        cpu_color = COLORS['idle'] if snap.cpu_idle else COLORS['cpu']
        caption = f"Q: {snap.quantum_remaining}" if snap.quantum_remaining else ""
        self._box(painter, 40, 120, cpu_color, snap.cpu_occupant, caption)

        # Ready queue
        self._label(painter, 180, 110, "Ready Queue")
        if not snap.ready_queue:
            self._label(painter, 180, 150, "[Empty]")
        for i, pid in enumerate(snap.ready_queue):
            self._box(painter, 180 + i * (self.BOX + self.GAP), 120, COLORS['ready'], pid)

        # Blocked queue, timer under each box
        self._label(painter, 180, 230, "Blocked (I/O) Queue")
        if not snap.blocked_queue:
            self._label(painter, 180, 270, "[Empty]")
        for i, entry in enumerate(snap.blocked_queue):
            self._box(painter, 180 + i * (self.BOX + self.GAP), 240, COLORS['blocked'], entry.pid, f"({entry.io_timer})")

        # Terminated
        self._label(painter, 40, 230, "Terminated")
        painter.setPen(QPen(COLORS['terminated']))
        for i, pid in enumerate(snap.terminated):
            painter.drawText(40, 255 + i * 20, pid)

        # Process status table
        table_x = max(560, self.width() - 320)
        self._label(painter, table_x, 30, "All Process Status")
        painter.setFont(QFont("Arial", 12, QFont.Weight.Bold))
        painter.setPen(QPen(COLORS['text']))
        painter.drawText(table_x, 55, "Process")
        painter.drawText(table_x + 90, 55, "State")
        painter.drawText(table_x + 180, 55, "Rem. Burst")
        painter.setFont(QFont("Arial", 12))
        for i, status in enumerate(snap.process_states):
            y = 80 + i * 22
            painter.setPen(QPen(COLORS['text']))
            painter.drawText(table_x, y, status.pid)
            painter.setPen(QPen(STATE_COLORS.get(status.state, COLORS['label'])))
            painter.drawText(table_x + 90, y, status.state.value)
            painter.setPen(QPen(COLORS['text']))
            painter.drawText(table_x + 180, y, str(status.remaining_burst))

        self._paint_gantt(painter, snap)

    def _paint_gantt(self, painter: QPainter, snap: Snapshot) -> None:
        top = self.height() - 80
        left = 30
        width = self.width() - 60
        self._label(painter, left, top - 10, "Gantt Chart (Timeline)")
        painter.setBrush(QBrush(COLORS['gantt_bg']))
        painter.setPen(QPen(QColor('#333333')))
        painter.drawRect(left, top, width, 40)

        max_cells = max(1, width // self.GANTT_CELL)
        start_tick = max(0, snap.time - max_cells + 1)
        for seg in cpu_timeline(self.history):
            for tick in range(max(seg["start"], start_tick), seg["end"]):
                x = left + (tick - start_tick) * self.GANTT_CELL
                painter.setBrush(QBrush(QColor(color_for(seg["pid"]))))
                painter.setPen(QPen(QColor('#333333')))
                painter.drawRect(x, top, self.GANTT_CELL, 40)
                if tick % 5 == 0:
                    painter.setFont(QFont("Arial", 8))
                    painter.drawText(x, top + 52, str(tick))


class MainWindow(QMainWindow):
    def __init__(self, config: Optional[KernelConfig] = None):
        super().__init__()
        self.setWindowTitle("CPU Scheduling Visualizer")
        self.setMinimumSize(1200, 820)
        self.config = config or KernelConfig()
        self.playback = Playback()

        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)

        # Controls
        controls = QHBoxLayout()
        self.policy_combo = QComboBox()
        for policy in Policy:
            self.policy_combo.addItem(policy.label, policy)
        self.policy_combo.setCurrentIndex(list(Policy).index(self.config.policy))
        self.policy_combo.currentIndexChanged.connect(self.update_for_policy)
        controls.addWidget(QLabel("Algorithm:"))
        controls.addWidget(self.policy_combo)

        self.quantum_label = QLabel("Time Quantum:")
        self.quantum_spin = QSpinBox()
        self.quantum_spin.setRange(1, 100)
        self.quantum_spin.setValue(self.config.time_quantum)
        controls.addWidget(self.quantum_label)
        controls.addWidget(self.quantum_spin)

        self.io_check = QCheckBox("Enable I/O bursts")
        self.io_check.setChecked(self.config.io_enabled)
        controls.addWidget(self.io_check)

        controls.addWidget(QLabel("Speed:"))
        self.speed_slider = QSlider(Qt.Orientation.Horizontal)
        self.speed_slider.setRange(100, 2000)
        self.speed_slider.setValue(2100 - self.config.playback_interval_ms)
        self.speed_slider.valueChanged.connect(self.update_speed)
        controls.addWidget(self.speed_slider)
        controls.addStretch(1)
        layout.addLayout(controls)

        # Process input
        self.process_table = ProcessTable()
        table_buttons = QHBoxLayout()
        self.add_button = QPushButton("Add Process")
        self.add_button.clicked.connect(self.process_table.add_process_row)
        self.remove_button = QPushButton("Remove Selected")
        self.remove_button.clicked.connect(self.process_table.remove_selected)
        table_buttons.addWidget(self.add_button)
        table_buttons.addWidget(self.remove_button)
        table_buttons.addStretch(1)

        # Transport
        self.run_button = QPushButton("Run")
        self.run_button.clicked.connect(self.run_simulation)
        self.pause_button = QPushButton("Pause")
        self.pause_button.clicked.connect(self.pause_simulation)
        self.reset_button = QPushButton("Reset")
        self.reset_button.clicked.connect(self.reset_simulation)
        self.back_button = QPushButton("Step Backward")
        self.back_button.clicked.connect(self.step_backward)
        self.forward_button = QPushButton("Step Forward")
        self.forward_button.clicked.connect(self.step_forward)
        for button in (self.run_button, self.pause_button, self.reset_button, self.back_button, self.forward_button):
            table_buttons.addWidget(button)

        input_panel = QWidget()
        input_layout = QVBoxLayout(input_panel)
        input_layout.addWidget(self.process_table)
        input_layout.addLayout(table_buttons)

        # Output
        self.state_view = StateView()
        self.results_table = ResultsTable()
        cards = QGridLayout()
        self.tat_card = StatCard("Avg Turnaround")
        self.wt_card = StatCard("Avg Waiting")
        cards.addWidget(self.tat_card, 0, 0)
        cards.addWidget(self.wt_card, 0, 1)
        results_panel = QWidget()
        results_layout = QVBoxLayout(results_panel)
        results_layout.addWidget(self.results_table)
        results_layout.addLayout(cards)

        splitter = QSplitter(Qt.Orientation.Vertical)
        splitter.addWidget(input_panel)
        splitter.addWidget(self.state_view)
        splitter.addWidget(results_panel)
        layout.addWidget(splitter)

        self.sim_timer = QTimer()
        self.sim_timer.timeout.connect(self.simulation_step)

        self.update_for_policy()
        self.set_running(False)

    def current_policy(self) -> Policy:
        return self.policy_combo.currentData()

    def update_for_policy(self) -> None:
        """Show RR-only inputs for RR and the priority column for Priority."""
        is_rr = self.current_policy() is Policy.RR
        self.quantum_label.setVisible(is_rr)
        self.quantum_spin.setVisible(is_rr)
        self.io_check.setVisible(is_rr)
        self.process_table.set_priority_visible(self.current_policy() is Policy.PRIORITY)

    def update_speed(self, value: int) -> None:
        if self.sim_timer.isActive():
            self.sim_timer.start(interval_from_slider(value))

    def set_running(self, running: bool) -> None:
        for widget in (self.run_button, self.add_button, self.remove_button, self.policy_combo,
                       self.quantum_spin, self.io_check, self.process_table):
            widget.setEnabled(not running)
        has_trace = bool(self.playback.trace)
        self.pause_button.setEnabled(self.playback.playing)
        self.reset_button.setEnabled(has_trace)
        self.back_button.setEnabled(has_trace and not self.playback.playing and not self.playback.at_start)
        self.forward_button.setEnabled(has_trace and not self.playback.playing and not self.playback.at_end)

    def run_simulation(self) -> None:
        config = KernelConfig(
            policy=self.current_policy(),
            time_quantum=self.quantum_spin.value(),
            io_enabled=self.io_check.isChecked(),
            playback_interval_ms=interval_from_slider(self.speed_slider.value()),
        )
        try:
            processes = build_processes(self.process_table.rows(), io_enabled=config.models_io)
        except (ValueError, AttributeError) as e:
            QMessageBox.warning(self, "Invalid input", f"Check the process table: {e}")
            return
        if not processes:
            QMessageBox.warning(self, "No processes", "Please add at least one process.")
            return
        try:
            trace = OSKernel(config).run(processes)
        except PolicyNotImplementedError as e:
            QMessageBox.information(self, "Not implemented", str(e))
            return
        except SimulationError as e:
            QMessageBox.critical(self, "Simulation error", str(e))
            return
        if not trace.complete:
            QMessageBox.warning(self, "Incomplete simulation",
                                "The tick limit was reached before every process finished.")

        self.config = config
        self.results_table.setRowCount(0)
        self.playback.load(trace)
        self.playback.play()
        self.show_current()
        self.sim_timer.start(self.config.playback_interval_ms)
        self.set_running(True)

    def simulation_step(self) -> None:
        self.playback.advance()
        self.show_current()
        if not self.playback.playing:
            self.sim_timer.stop()
            self.set_running(True)

    def pause_simulation(self) -> None:
        self.sim_timer.stop()
        self.playback.pause()
        self.set_running(True)

    def step_forward(self) -> None:
        self.playback.step_forward()
        self.show_current()
        self.set_running(True)

    def step_backward(self) -> None:
        self.playback.step_backward()
        self.show_current()
        self.set_running(True)

    def reset_simulation(self) -> None:
        self.sim_timer.stop()
        self.playback.load([])
        self.state_view.show_snapshot(None, [])
        self.results_table.setRowCount(0)
        self.tat_card.update_value(0.0)
        self.wt_card.update_value(0.0)
        self.set_running(False)

    def show_current(self) -> None:
        snap = self.playback.current
        history = self.playback.trace[:self.playback.index + 1]
        self.state_view.show_snapshot(snap, history)
        if snap is not None and snap.is_final:
            summary = summarize(snap.final_stats)
            self.results_table.show_rows(summary.rows)
            self.tat_card.update_value(summary.avg_turnaround)
            self.wt_card.update_value(summary.avg_waiting)
