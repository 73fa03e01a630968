import math

import numpy as np
import pytest

from optical_axis_app.config import GIZMOS, GizmoConfig
from optical_axis_app.math.gizmos import build_gizmos, euler_xyz, rotation_y
from optical_axis_app.models.optical_parameters import OpticalParameters


def test_rotations_are_orthonormal():
    matrix = euler_xyz(0.3, -1.1, 0.7)
    assert np.allclose(matrix @ matrix.T, np.identity(3))
    assert np.linalg.det(rotation_y(2.0)) == pytest.approx(1.0)


def test_ring_is_flat_circle_of_camera_distance():
    gizmos = build_gizmos(OpticalParameters(azimuth=40.0, elevation=10.0, distance=6.0))
    center = np.asarray(gizmos.center)
    offsets = gizmos.azimuth_ring - center
    assert gizmos.azimuth_ring.shape == (GIZMOS.ring_segments + 1, 3)
    assert np.allclose(offsets[:, 1], 0.0)
    assert np.allclose(np.linalg.norm(offsets, axis=1), 6.0)


def test_elevation_arc_follows_azimuth():
    front = build_gizmos(OpticalParameters(azimuth=0.0, distance=4.0))
    side = build_gizmos(OpticalParameters(azimuth=90.0, distance=4.0))
    center = np.asarray(front.center)

    assert np.allclose(front.elevation_arc[:, 0], 0.0)
    assert np.allclose(side.elevation_arc[:, 2], 0.0)
    assert np.allclose(np.linalg.norm(front.elevation_arc - center, axis=1), 4.0)
    assert front.elevation_arc[:, 1].max() == pytest.approx(center[1] + 4.0)


def test_sight_line_has_camera_distance_length():
    gizmos = build_gizmos(OpticalParameters(azimuth=135.0, elevation=-20.0, distance=7.5))
    start, end = gizmos.sight_line
    assert np.linalg.norm(end - start) == pytest.approx(7.5)
    assert np.allclose(start, gizmos.center)


def test_sight_line_tilts_with_elevation():
    level = build_gizmos(OpticalParameters(azimuth=0.0, elevation=0.0, distance=8.0))
    raised = build_gizmos(OpticalParameters(azimuth=0.0, elevation=30.0, distance=8.0))
    assert np.allclose(level.sight_line[1], [0.0, GIZMOS.center_height_m, -8.0])
    assert raised.sight_line[1][1] == pytest.approx(GIZMOS.center_height_m + 4.0)
    assert raised.sight_line[1][2] == pytest.approx(-8.0 * math.cos(math.radians(30.0)))


def test_center_is_at_mid_body_height():
    gizmos = build_gizmos(OpticalParameters())
    assert gizmos.center == (0.0, 0.9, 0.0)


def test_config_controls_segments_and_center():
    config = GizmoConfig(center_height_m=1.2, ring_segments=8)
    gizmos = build_gizmos(OpticalParameters(distance=3.0), config)
    assert gizmos.center == (0.0, 1.2, 0.0)
    assert gizmos.azimuth_ring.shape == (9, 3)
    assert gizmos.elevation_arc.shape == (5, 3)
    assert np.allclose(gizmos.sight_line[0], [0.0, 1.2, 0.0])
