"""Writing captured viewfinder frames to disk."""
from __future__ import annotations

from pathlib import Path
import time
from typing import Optional

import cv2
import numpy as np
from loguru import logger

from ..config import VIEWFINDER


class ExportError(RuntimeError):
    """Raised when a captured frame cannot be encoded or written."""


def capture_filename(timestamp_ms: Optional[int] = None, prefix: str = VIEWFINDER.export_prefix) -> str:
    """Return ``<prefix>-<unix milliseconds>.png``."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{prefix}-{int(timestamp_ms)}.png"


def encode_png(image: np.ndarray) -> bytes:
    """Encode an RGB or RGBA ``uint8`` frame as PNG bytes."""
    if image.dtype != np.uint8:
        raise ExportError(f"Captured frame must be uint8, got {image.dtype}")
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ExportError(f"Captured frame must be RGB or RGBA, got shape {image.shape}")
    code = cv2.COLOR_RGBA2BGRA if image.shape[2] == 4 else cv2.COLOR_RGB2BGR
    ok, encoded = cv2.imencode(".png", cv2.cvtColor(image, code))
    if not ok:
        raise ExportError("OpenCV could not encode the captured frame.")
    return encoded.tobytes()


def save_capture(image: np.ndarray, directory: Path, timestamp_ms: Optional[int] = None) -> Path:
    """Write ``image`` into ``directory`` under a timestamped name and return the path."""
    directory = Path(directory)
    path = directory / capture_filename(timestamp_ms)
    data = encode_png(image)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise ExportError(f"Unable to write {path}: {exc}") from exc
    logger.info("Saved capture {} ({}x{})", path, image.shape[1], image.shape[0])
    return path
