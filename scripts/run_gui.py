#!/usr/bin/env python3
"""
Launch the scheduling visualizer GUI application.
"""

import os
import sys

# Ensure project root is on sys.path when running from a checkout
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(SCRIPT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


def main():
    """Launch the GUI."""
    from PyQt6.QtWidgets import QApplication
    from cpu_sched_visualizer.gui.main_window import MainWindow

    app = QApplication(sys.argv)
    app.setStyle("Fusion")

    window = MainWindow()
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
