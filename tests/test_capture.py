import numpy as np
import pytest

from optical_axis_app.math.capture import capture, extract_region, map_capture_region, viewfinder_rect
from optical_axis_app.models.optical_parameters import CaptureRegion, ScreenRect


def _ramp(height: int, width: int) -> np.ndarray:
    rows, cols = np.mgrid[0:height, 0:width]
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[..., 0] = rows % 256
    image[..., 1] = cols % 256
    image[..., 2] = (rows + cols) % 256
    return image


def test_viewfinder_is_width_limited_on_square_surface():
    rect = viewfinder_rect(1000.0, 1000.0)
    assert rect.width == pytest.approx(940.0)
    assert rect.height == pytest.approx(528.75)
    assert rect.x == pytest.approx(30.0)
    assert rect.y == pytest.approx(235.625)


def test_viewfinder_is_height_limited_on_wide_surface():
    rect = viewfinder_rect(2000.0, 1000.0)
    assert rect.height == pytest.approx(850.0)
    assert rect.width / rect.height == pytest.approx(16.0 / 9.0)
    assert rect.x + rect.width / 2.0 == pytest.approx(1000.0)
    assert rect.y + rect.height / 2.0 == pytest.approx(500.0)


def test_viewfinder_of_empty_surface_is_empty():
    assert viewfinder_rect(0.0, 600.0).is_empty


def test_uniform_scale_maps_region():
    region = map_capture_region(ScreenRect(100, 50, 320, 180), ScreenRect(0, 0, 800, 600), 1600, 1200)
    assert region == CaptureRegion(200, 100, 640, 360)


def test_non_uniform_scale_uses_separate_axes():
    region = map_capture_region(ScreenRect(100, 50, 320, 180), ScreenRect(0, 0, 800, 600), 1600, 900)
    assert region == CaptureRegion(200, 75, 640, 270)


def test_overlay_is_measured_from_surface_origin():
    region = map_capture_region(ScreenRect(110, 70, 320, 180), ScreenRect(10, 20, 800, 600), 1600, 1200)
    assert region == CaptureRegion(200, 100, 640, 360)


def test_region_is_clipped_to_buffer():
    region = map_capture_region(ScreenRect(-50, -50, 200, 200), ScreenRect(0, 0, 100, 100), 100, 100)
    assert region == CaptureRegion(0, 0, 100, 100)


@pytest.mark.parametrize(
    "overlay, surface, pixels",
    [
        (ScreenRect(0, 0, 0, 100), ScreenRect(0, 0, 100, 100), (100, 100)),
        (ScreenRect(0, 0, 50, 50), ScreenRect(0, 0, 0, 0), (100, 100)),
        (ScreenRect(0, 0, 50, 50), ScreenRect(0, 0, 100, 100), (0, 0)),
        (ScreenRect(500, 500, 50, 50), ScreenRect(0, 0, 100, 100), (100, 100)),
    ],
)
def test_nothing_to_capture_returns_none(overlay, surface, pixels):
    assert map_capture_region(overlay, surface, *pixels) is None


def test_capture_copies_exact_pixels():
    buffer = _ramp(600, 800)
    overlay = ScreenRect(30, 40, 160, 90)
    image = capture(overlay, ScreenRect(0, 0, 400, 300), buffer)
    assert image.shape == (180, 320, 3)
    assert np.array_equal(image, buffer[80:260, 60:380])

    image[...] = 0
    assert buffer[80, 60, 1] == 60


def test_capture_dimensions_track_device_pixel_ratio():
    overlay = viewfinder_rect(333.0, 217.0)
    buffer = _ramp(271, 416)
    image = capture(overlay, ScreenRect(0, 0, 333.0, 217.0), buffer)
    assert abs(image.shape[1] - overlay.width * 416 / 333.0) <= 1
    assert abs(image.shape[0] - overlay.height * 271 / 217.0) <= 1


def test_capture_without_buffer_returns_none():
    assert capture(ScreenRect(0, 0, 10, 10), ScreenRect(0, 0, 10, 10), None) is None


def test_extract_region_returns_copy():
    buffer = _ramp(10, 10)
    crop = extract_region(buffer, CaptureRegion(2, 3, 4, 5))
    assert crop.shape == (5, 4, 3)
    assert not np.shares_memory(crop, buffer)
