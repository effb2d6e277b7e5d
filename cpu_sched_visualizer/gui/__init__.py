"""
GUI package for the scheduling visualizer.
Contains PyQt6-based user interface components.
"""

from .main_window import MainWindow

__all__ = ['MainWindow']
