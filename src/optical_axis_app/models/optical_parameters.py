"""Optical parameter and derived camera domain models."""
from __future__ import annotations

from dataclasses import dataclass, replace
import math
from typing import Tuple

Vec3 = Tuple[float, float, float]


def normalize_azimuth(azimuth: float) -> float:
    """Wrap an azimuth in degrees into ``[0, 360)``.

    Non-finite values come back as NaN so callers can route them to a fallback.
    """
    if not math.isfinite(azimuth):
        return math.nan
    wrapped = azimuth % 360.0
    # Tiny negative inputs round up to exactly 360.0.
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped


@dataclass(frozen=True, slots=True)
class OpticalParameters:
    """Camera placement around the subject, as entered by the operator."""

    azimuth: float = 0.0  # degrees, 0 = subject front
    elevation: float = 0.0  # degrees, positive = looking down on subject
    distance: float = 8.0  # meters

    @property
    def normalized_azimuth(self) -> float:
        return normalize_azimuth(self.azimuth)

    def with_changes(self, **changes: float) -> "OpticalParameters":
        """Return a new snapshot with the given fields replaced."""
        return replace(self, **changes)


@dataclass(frozen=True, slots=True)
class CameraPose:
    """Per-frame camera placement derived from :class:`OpticalParameters`."""

    position: Vec3
    aim_point: Vec3
    forward: Vec3  # unit vector from position towards aim_point
    up: Vec3  # unit vector, orthogonal to forward
    vertical_fov_deg: float

    @property
    def look_target(self) -> Vec3:
        """A point one unit ahead of the camera, always distinct from ``position``."""
        return (
            self.position[0] + self.forward[0],
            self.position[1] + self.forward[1],
            self.position[2] + self.forward[2],
        )


@dataclass(frozen=True, slots=True)
class ScreenRect:
    """Rectangle in logical (device independent) screen units."""

    x: float
    y: float
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return not (
            math.isfinite(self.width)
            and math.isfinite(self.height)
            and self.width > 0.0
            and self.height > 0.0
        )


@dataclass(frozen=True, slots=True)
class CaptureRegion:
    """Rectangle in backing-buffer pixels."""

    origin_x: int
    origin_y: int
    width: int
    height: int

    def slices(self) -> Tuple[slice, slice]:
        """Return ``(rows, cols)`` slices for indexing an ``(H, W, C)`` array."""
        return (
            slice(self.origin_y, self.origin_y + self.height),
            slice(self.origin_x, self.origin_x + self.width),
        )
