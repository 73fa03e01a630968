"""Guide geometry drawn around the subject for operator feedback."""
from __future__ import annotations

from dataclasses import dataclass
import math

import numpy as np

from ..config import GIZMOS, GizmoConfig
from ..models.optical_parameters import OpticalParameters, Vec3


@dataclass(frozen=True, slots=True)
class GizmoGeometry:
    """Polylines in world space, each an ``(N, 3)`` float64 array."""

    center: Vec3
    azimuth_ring: np.ndarray
    elevation_arc: np.ndarray
    sight_line: np.ndarray


def rotation_x(angle_rad: float) -> np.ndarray:
    c, s = math.cos(angle_rad), math.sin(angle_rad)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]], dtype=np.float64)


def rotation_y(angle_rad: float) -> np.ndarray:
    c, s = math.cos(angle_rad), math.sin(angle_rad)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]], dtype=np.float64)


def rotation_z(angle_rad: float) -> np.ndarray:
    c, s = math.cos(angle_rad), math.sin(angle_rad)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]], dtype=np.float64)


def euler_xyz(x_rad: float, y_rad: float, z_rad: float) -> np.ndarray:
    """Intrinsic X then Y then Z rotation, as a single matrix."""
    return rotation_x(x_rad) @ rotation_y(y_rad) @ rotation_z(z_rad)


def _arc(radius: float, start: float, length: float, segments: int) -> np.ndarray:
    """Arc in the XY plane."""
    angles = np.linspace(start, start + length, segments + 1)
    return np.stack(
        [radius * np.cos(angles), radius * np.sin(angles), np.zeros_like(angles)],
        axis=1,
    )


def build_gizmos(params: OpticalParameters, config: GizmoConfig = GIZMOS) -> GizmoGeometry:
    """Derive the azimuth ring, elevation arc and sight line from ``params``."""
    distance = float(params.distance) if math.isfinite(params.distance) else 0.0
    azimuth = math.radians(params.azimuth) if math.isfinite(params.azimuth) else 0.0
    elevation = math.radians(params.elevation) if math.isfinite(params.elevation) else 0.0
    center = np.array([0.0, config.center_height_m, 0.0], dtype=np.float64)
    segments = config.ring_segments

    # Full circle laid flat in the XZ plane.
    ring = _arc(distance, 0.0, 2.0 * math.pi, segments) @ rotation_x(math.pi / 2.0).T

    # Half circle stood upright, then swung around the vertical axis.
    arc_rotation = rotation_y(-azimuth) @ rotation_y(math.pi / 2.0)
    arc = _arc(distance, 0.0, math.pi, segments // 2) @ arc_rotation.T

    line = np.array([[0.0, 0.0, 0.0], [0.0, 0.0, -distance]], dtype=np.float64)
    line = line @ euler_xyz(elevation, -azimuth, 0.0).T

    return GizmoGeometry(
        center=(float(center[0]), float(center[1]), float(center[2])),
        azimuth_ring=ring + center,
        elevation_arc=arc + center,
        sight_line=line + center,
    )
