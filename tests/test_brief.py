import math

import pytest

from optical_axis_app.io import brief
from optical_axis_app.math.classifier import ShotDirection, ShotSize
from optical_axis_app.models.optical_parameters import OpticalParameters
from optical_axis_app.models.prompt_state import (
    MOTION_DESCRIPTIONS,
    MOTION_GROUPS,
    CameraMotion,
    CharacterPose,
    PromptMode,
    PromptState,
    group_available,
)


@pytest.mark.parametrize(
    "azimuth, fragment",
    [
        (0.0, "Frontal view"),
        (360.0, "Frontal view"),
        (45.0, "Front-Right"),
        (90.0, "Full Right Profile"),
        (135.0, "Back-Right"),
        (180.0, "Full Back"),
        (200.0, "Back-Left"),
        (270.0, "Full Left Profile"),
        (-90.0, "Full Left Profile"),
        (300.0, "Front-Left"),
        (math.nan, "Frontal view"),
    ],
)
def test_side_description(azimuth, fragment):
    assert fragment in brief.side_description(azimuth)


def test_user_prompt_carries_parameters_and_terms():
    state = PromptState(
        parameters=OpticalParameters(azimuth=0.0, elevation=0.0, distance=8.0),
        description="A detective waits in the rain",
        style="neo-noir",
        motions=[CameraMotion.DOLLY_IN, CameraMotion.HANDHELD],
        mode=PromptMode.VIDEO,
    )
    text = brief.brief_user_prompt(state)

    assert "[METADATA]" in text and "[STORY]" in text
    assert "Azimuth: 0°" in text
    assert "Elevation: 0°" in text
    assert "Distance: 8 m" in text
    assert "Direction: 正面 (Front)" in text
    assert "Angle: 平視 (Eye level)" in text
    assert "Shot Size: 中景 (MLS) (Medium long shot)" in text
    assert "Description: A detective waits in the rain" in text
    assert "Style: neo-noir" in text
    assert "Camera Motions: Dolly In, Handheld" in text
    assert "Output Target: video" in text
    assert "Character Pose" not in text


def test_user_prompt_placeholders_and_pose():
    state = PromptState(pose=CharacterPose.WALKING, include_pose=True)
    text = brief.brief_user_prompt(state)
    assert "Description: 無" in text
    assert "Style: 無" in text
    assert "Character Pose: Walking" in text


def test_system_instruction_lists_selected_motions():
    state = PromptState(motions=[CameraMotion.ORBIT], mode=PromptMode.VIDEO)
    assert "(Orbit)" in brief.brief_system_instruction(state)
    assert "(固定鏡頭)" in brief.brief_system_instruction(PromptState())


def test_system_instruction_quotes_azimuth_and_rubrics():
    state = PromptState(parameters=OpticalParameters(azimuth=-45.0, elevation=10.0, distance=3.0))
    text = brief.brief_system_instruction(state)

    assert "請根據 Azimuth (315°) 判斷" in text
    for band, label in brief.ORIENTATION_BANDS:
        assert f"{band}：{label}" in text
    assert "Elevation > 0 (+1 ~ +80)：定義為俯角 (High Angle)" in text
    assert "Elevation < 0 (-1 ~ -80)：定義為仰角 (Low Angle)" in text
    assert "Cowboy Shot (American)" in text
    assert "Extreme Wide Shot (EWS)" in text


def test_image_hint_only_when_capture_attached():
    state = PromptState()
    assert "請看附圖" in brief.brief_user_prompt(state, has_image=True)
    assert "請看附圖" not in brief.brief_user_prompt(state)


def test_image_mode_drops_video_only_motions():
    state = PromptState(motions=[CameraMotion.DOLLY_IN, CameraMotion.POV, CameraMotion.PAN_LEFT])
    assert state.mode is PromptMode.IMAGE
    assert state.active_motions == [CameraMotion.POV]

    text = brief.brief_user_prompt(state)
    assert "Camera Motions: POV" in text
    assert "Dolly In" not in text
    assert "Dolly In" not in brief.brief_system_instruction(state)

    state.mode = PromptMode.VIDEO
    assert "Camera Motions: Dolly In, POV, Pan Left" in brief.brief_user_prompt(state)


def test_only_standard_group_is_offered_for_stills():
    for name, _ in MOTION_GROUPS:
        assert group_available(name, PromptMode.VIDEO)
    offered = [name for name, _ in MOTION_GROUPS if group_available(name, PromptMode.IMAGE)]
    assert offered == ["Standard Shots"]


def test_final_prompt_instruction_targets_mode():
    assert "Video Generation" in brief.final_prompt_system_instruction(PromptMode.VIDEO)
    image = brief.final_prompt_system_instruction(PromptMode.IMAGE)
    assert "Image Generation" in image
    assert brief.MANNEQUIN_PREAMBLE in image
    assert "CRITICAL STRATEGY for REFERENCE IMAGE WORKFLOW" in image
    assert "Frame Geography" in image
    assert "Prioritize GAZE DIRECTION and GEOMETRY" in image
    assert "my brief" in brief.final_prompt_user_prompt("my brief")


def test_terms_follow_parameter_changes():
    state = PromptState()
    assert state.terms.direction is ShotDirection.FRONT
    state.parameters = state.parameters.with_changes(azimuth=180.0, distance=0.5)
    assert state.terms.direction is ShotDirection.BACK
    assert state.terms.size is ShotSize.EXTREME_CLOSE_UP


def test_toggle_motion():
    state = PromptState()
    assert state.toggle_motion(CameraMotion.ZOOM_IN) is True
    assert state.motions == [CameraMotion.ZOOM_IN]
    assert state.toggle_motion(CameraMotion.ZOOM_IN) is False
    assert state.motions == []


def test_every_grouped_motion_has_a_description():
    grouped = [motion for _, motions in MOTION_GROUPS for motion in motions]
    assert len(grouped) == len(set(grouped)) == len(CameraMotion)
    for motion in grouped:
        assert motion in MOTION_DESCRIPTIONS
