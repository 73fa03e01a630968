"""Application bootstrap utilities."""
from __future__ import annotations

import sys
from typing import Optional

from PyQt6.QtCore import QCoreApplication, Qt
from PyQt6.QtGui import QGuiApplication, QSurfaceFormat
from PyQt6.QtWidgets import QApplication

from .config import APPLICATION_NAME, ORGANIZATION_NAME
from .logging import configure_logging
from .ui.main_window import MainWindow
from .ui.theme import apply_dark_theme


def _configure_high_dpi() -> None:
    """Configure high-DPI handling before QApplication instantiation."""
    QGuiApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )


def _configure_surface_format() -> None:
    surface = QSurfaceFormat()
    surface.setDepthBufferSize(24)
    surface.setSamples(4)
    QSurfaceFormat.setDefaultFormat(surface)


def main(argv: Optional[list[str]] = None) -> int:
    """Launch the Optical Axis Studio desktop application."""
    configure_logging()
    argv = list(sys.argv if argv is None else argv)

    _configure_high_dpi()
    _configure_surface_format()
    QCoreApplication.setOrganizationName(ORGANIZATION_NAME)
    QCoreApplication.setApplicationName(APPLICATION_NAME)
    app = QApplication(argv)
    apply_dark_theme(app)

    window = MainWindow()
    window.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
