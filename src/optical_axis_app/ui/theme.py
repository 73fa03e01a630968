"""Application-wide theme helpers."""
from __future__ import annotations

from PyQt6.QtGui import QColor, QPalette

from ..config import GIZMOS


def build_dark_palette() -> QPalette:
    palette = QPalette()
    palette.setColor(QPalette.ColorRole.Window, QColor(10, 10, 10))
    palette.setColor(QPalette.ColorRole.WindowText, QColor(229, 231, 235))
    palette.setColor(QPalette.ColorRole.Base, QColor(17, 17, 17))
    palette.setColor(QPalette.ColorRole.AlternateBase, QColor(26, 26, 26))
    palette.setColor(QPalette.ColorRole.ToolTipBase, QColor(24, 24, 27))
    palette.setColor(QPalette.ColorRole.ToolTipText, QColor(244, 244, 245))
    palette.setColor(QPalette.ColorRole.Text, QColor(235, 235, 235))
    palette.setColor(QPalette.ColorRole.Button, QColor(31, 31, 35))
    palette.setColor(QPalette.ColorRole.ButtonText, QColor(235, 235, 235))
    palette.setColor(QPalette.ColorRole.Highlight, QColor(GIZMOS.accent_color))
    palette.setColor(QPalette.ColorRole.HighlightedText, QColor(255, 255, 255))
    return palette


def parameter_label_style(color: str) -> str:
    """Style sheet for the colored parameter captions next to each control."""
    return f"color: {color}; font-weight: 700; letter-spacing: 1px;"


def apply_dark_theme(app) -> None:
    """Apply the dark palette and the Fusion style."""
    app.setPalette(build_dark_palette())
    app.setStyle("Fusion")
