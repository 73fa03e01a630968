"""Spherical orbit camera solver.

World frame is Y-up. The subject stands at the origin facing -Z, so azimuth 0
places the camera in front of the subject.
"""
from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np

from ..config import SOLVER, SolverConfig
from ..models.optical_parameters import CameraPose, OpticalParameters, Vec3

WORLD_UP = np.array([0.0, 1.0, 0.0], dtype=np.float64)


def _finite_or(value: float, default: float) -> float:
    return float(value) if math.isfinite(value) else default


def aim_height(distance: float, eye_height: float, config: SolverConfig = SOLVER) -> float:
    """Blend the aim point from eye height down to ``far_aim_factor`` as the camera pulls back."""
    span = config.far_distance_m - config.near_distance_m
    t = float(np.clip((distance - config.near_distance_m) / span, 0.0, 1.0))
    low = eye_height * config.far_aim_factor
    return eye_height + (low - eye_height) * t


def spherical_offset(azimuth_deg: float, elevation_deg: float, distance: float) -> Tuple[float, float, float]:
    """Return the camera offset from the aim point.

    ``phi`` is measured from the vertical axis and ``theta`` is shifted by 180
    degrees so azimuth 0 lands on the subject's front (-Z).
    """
    phi = math.radians(90.0 - elevation_deg)
    theta = math.radians(azimuth_deg + 180.0)
    sin_phi = math.sin(phi)
    x = distance * sin_phi * math.sin(theta)
    y = distance * math.cos(phi)
    z = distance * sin_phi * math.cos(theta)
    return x, y, z


def _horizontal_axis(azimuth_deg: float) -> np.ndarray:
    """Unit vector from the subject towards the camera's ground projection."""
    theta = math.radians(azimuth_deg + 180.0)
    return np.array([math.sin(theta), 0.0, math.cos(theta)], dtype=np.float64)


def camera_basis(
    offset: np.ndarray,
    azimuth_deg: float,
    elevation_deg: float,
    *,
    epsilon: float = SOLVER.pole_epsilon,
) -> Tuple[np.ndarray, np.ndarray]:
    """Return unit ``(forward, up)`` vectors for a camera at ``aim + offset``.

    World up is used whenever it is not collinear with the view direction.
    At the poles the up vector snaps to the azimuth-facing horizontal axis,
    matching the limit approached from just below/above the pole.
    """
    horizontal = _horizontal_axis(azimuth_deg)
    norm = float(np.linalg.norm(offset))
    if norm <= epsilon:
        # Camera sits on the aim point: look horizontally at the subject.
        forward = -horizontal
    else:
        forward = -offset / norm

    right = np.cross(forward, WORLD_UP)
    right_norm = float(np.linalg.norm(right))
    if right_norm <= epsilon:
        # Straight down keeps the subject's far side at the top of frame,
        # straight up keeps the near side there.
        up = -horizontal if elevation_deg >= 0.0 else horizontal
        return forward, up

    right /= right_norm
    up = np.cross(right, forward)
    up /= float(np.linalg.norm(up))
    return forward, up


def solve_camera_pose(
    params: OpticalParameters,
    eye_height: Optional[float] = None,
    config: SolverConfig = SOLVER,
) -> CameraPose:
    """Compute the camera pose for one frame.

    Pure and idempotent. Non-finite inputs are replaced with the defaults of
    :class:`OpticalParameters` so the renderer always receives a valid pose.
    """
    eye = config.eye_height_m if eye_height is None else eye_height
    azimuth = _finite_or(params.azimuth, 0.0)
    elevation = _finite_or(params.elevation, 0.0)
    distance = _finite_or(params.distance, config.far_distance_m)

    aim = np.array([0.0, aim_height(distance, eye, config), 0.0], dtype=np.float64)
    offset = np.array(spherical_offset(azimuth, elevation, distance), dtype=np.float64)
    position = aim + offset
    forward, up = camera_basis(offset, azimuth, elevation, epsilon=config.pole_epsilon)

    return CameraPose(
        position=_as_vec3(position),
        aim_point=_as_vec3(aim),
        forward=_as_vec3(forward),
        up=_as_vec3(up),
        vertical_fov_deg=config.vertical_fov_deg,
    )


def look_at_matrix(pose: CameraPose) -> np.ndarray:
    """Return the 4x4 view matrix equivalent to ``gluLookAt`` for ``pose``."""
    forward = np.asarray(pose.forward, dtype=np.float64)
    up = np.asarray(pose.up, dtype=np.float64)
    eye = np.asarray(pose.position, dtype=np.float64)

    side = np.cross(forward, up)
    side /= float(np.linalg.norm(side))
    true_up = np.cross(side, forward)

    matrix = np.identity(4, dtype=np.float64)
    matrix[0, :3] = side
    matrix[1, :3] = true_up
    matrix[2, :3] = -forward
    matrix[:3, 3] = -matrix[:3, :3] @ eye
    return matrix


def _as_vec3(values: np.ndarray) -> Vec3:
    return float(values[0]), float(values[1]), float(values[2])
