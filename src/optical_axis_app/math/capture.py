"""Mapping between the on-screen viewfinder and the render surface's pixels."""
from __future__ import annotations

import math
from typing import Optional

import numpy as np
from loguru import logger

from ..config import VIEWFINDER, ViewfinderConfig
from ..models.optical_parameters import CaptureRegion, ScreenRect


def viewfinder_rect(
    surface_width: float,
    surface_height: float,
    config: ViewfinderConfig = VIEWFINDER,
) -> ScreenRect:
    """Largest centered rect of the viewfinder aspect within the allowed fraction of the surface."""
    max_w = max(0.0, surface_width * config.max_width_fraction)
    max_h = max(0.0, surface_height * config.max_height_fraction)
    width = min(max_w, max_h * config.aspect)
    height = width / config.aspect
    x = (surface_width - width) / 2.0
    y = (surface_height - height) / 2.0
    return ScreenRect(x, y, width, height)


def map_capture_region(
    overlay: ScreenRect,
    surface: ScreenRect,
    pixel_width: int,
    pixel_height: int,
) -> Optional[CaptureRegion]:
    """Translate ``overlay`` into a pixel region of the surface's backing buffer.

    Both rects must share the same screen coordinate space. Scale factors are
    computed per axis so non-uniform device pixel ratios are honoured. The
    result is clipped to the buffer; ``None`` means there is nothing to capture.
    """
    if overlay.is_empty or surface.is_empty or pixel_width <= 0 or pixel_height <= 0:
        logger.debug("Capture skipped: overlay={} surface={} pixels={}x{}", overlay, surface, pixel_width, pixel_height)
        return None

    scale_x = pixel_width / surface.width
    scale_y = pixel_height / surface.height

    left = (overlay.x - surface.x) * scale_x
    top = (overlay.y - surface.y) * scale_y
    right = left + overlay.width * scale_x
    bottom = top + overlay.height * scale_y
    if not all(math.isfinite(v) for v in (left, top, right, bottom)):
        return None

    x0 = max(0, min(pixel_width, int(round(left))))
    y0 = max(0, min(pixel_height, int(round(top))))
    x1 = max(0, min(pixel_width, int(round(right))))
    y1 = max(0, min(pixel_height, int(round(bottom))))
    if x1 <= x0 or y1 <= y0:
        logger.debug("Capture skipped: overlay {} lies outside the render surface", overlay)
        return None

    return CaptureRegion(origin_x=x0, origin_y=y0, width=x1 - x0, height=y1 - y0)


def extract_region(buffer: np.ndarray, region: CaptureRegion) -> np.ndarray:
    """Copy ``region`` out of an ``(H, W[, C])`` buffer at 1:1 pixel fidelity."""
    rows, cols = region.slices()
    return np.ascontiguousarray(buffer[rows, cols]).copy()


def capture(overlay: ScreenRect, surface: ScreenRect, buffer: Optional[np.ndarray]) -> Optional[np.ndarray]:
    """Crop the part of ``buffer`` that was visible inside ``overlay``.

    Returns ``None`` instead of a zero-sized image when the surface is not
    ready or the overlay has no area.
    """
    if buffer is None or buffer.ndim < 2:
        return None
    pixel_height, pixel_width = buffer.shape[:2]
    region = map_capture_region(overlay, surface, pixel_width, pixel_height)
    if region is None:
        return None
    logger.debug("Capture region {} from buffer {}x{}", region, pixel_width, pixel_height)
    return extract_region(buffer, region)
