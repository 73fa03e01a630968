import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtCore import QSettings  # noqa: E402
from PyQt6.QtWidgets import QApplication  # noqa: E402

from optical_axis_app.models.optical_parameters import OpticalParameters  # noqa: E402
from optical_axis_app.models.prompt_state import CameraMotion, PromptMode  # noqa: E402
from optical_axis_app.ui.credential_store import CredentialStore  # noqa: E402
from optical_axis_app.ui.main_window import MainWindow  # noqa: E402


IMAGE_INDEX, VIDEO_INDEX = 0, 1


@pytest.fixture(scope="module")
def app():
    return QApplication.instance() or QApplication([])


@pytest.fixture
def window(app, tmp_path):
    settings = QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)
    win = MainWindow(credentials=CredentialStore(settings))
    yield win
    win.close()
    win.deleteLater()


def test_editing_one_control_keeps_other_parameters_exact(window):
    window._apply_parameters(OpticalParameters(azimuth=10.0, elevation=5.0, distance=6.48))
    assert window.distance_field.value() == pytest.approx(6.5)

    window.azimuth_field.setValue(30.0)
    params = window._state.parameters
    assert params.azimuth == pytest.approx(30.0)
    assert params.distance == pytest.approx(6.48)

    window.elevation_slider.setValue(125)
    params = window._state.parameters
    assert params.elevation == pytest.approx(12.5)
    assert params.azimuth == pytest.approx(30.0)
    assert params.distance == pytest.approx(6.48)


def test_video_only_motion_groups_follow_output_mode(window):
    sections = window._motion_sections
    assert window._state.mode is PromptMode.IMAGE
    assert not sections["Standard Shots"].isHidden()
    assert sections["Pan / Tilt / Zoom"].isHidden()
    assert sections["Dolly / Crane / Tracking"].isHidden()

    window.mode_combo.setCurrentIndex(VIDEO_INDEX)
    assert window._state.mode is PromptMode.VIDEO
    assert not sections["Pan / Tilt / Zoom"].isHidden()
    assert not sections["Dolly / Crane / Tracking"].isHidden()


def test_hidden_selection_is_kept_but_not_active(window):
    window.mode_combo.setCurrentIndex(VIDEO_INDEX)
    window._motion_boxes[CameraMotion.DOLLY_IN].setChecked(True)
    window.mode_combo.setCurrentIndex(IMAGE_INDEX)

    assert window._state.motions == [CameraMotion.DOLLY_IN]
    assert window._state.active_motions == []
