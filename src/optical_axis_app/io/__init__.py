"""Input/output helpers for capture export and generation requests."""

from .export import ExportError, capture_filename, save_capture

__all__ = [
    "ExportError",
    "capture_filename",
    "save_capture",
]
