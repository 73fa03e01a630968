"""State handed to the brief and prompt generation steps."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

from ..math.classifier import ClassifiedTerms, classify
from .optical_parameters import OpticalParameters


class CameraMotion(Enum):
    POV = "POV"
    OTS = "OTS"
    DUTCH_ANGLE = "Dutch Angle"
    HANDHELD = "Handheld"
    RACK_FOCUS = "Rack Focus"
    TILT_UP = "Tilt Up"
    TILT_DOWN = "Tilt Down"
    PAN_RIGHT = "Pan Right"
    PAN_LEFT = "Pan Left"
    ZOOM_IN = "Zoom In"
    ZOOM_OUT = "Zoom Out"
    WHIP_PAN = "Whip Pan"
    DOLLY_IN = "Dolly In"
    DOLLY_OUT = "Dolly Out"
    CRANE_IN = "Crane In"
    CRANE_OUT = "Crane Out"
    TRACKING = "Tracking"
    FOLLOWING = "Following"
    ARC_SHOT = "Arc Shot"
    PUSH_IN_REVEAL = "Push In + Reveal"
    BOOM_UP = "Boom Up"
    LOCKED_OFF = "Locked-off"
    REVERSE_FOLLOW = "Reverse Follow"
    ORBIT = "Orbit"
    DRONE_SHOT = "Drone Shot"

    def __str__(self) -> str:  # pragma: no cover - convenience for UI display
        return self.value


class CharacterPose(Enum):
    STANDING = "Standing"
    WALKING = "Walking"
    RUNNING = "Running"

    def __str__(self) -> str:  # pragma: no cover - convenience for UI display
        return self.value


class PromptMode(Enum):
    IMAGE = "image"
    VIDEO = "video"


MOTION_GROUPS: Tuple[Tuple[str, Tuple[CameraMotion, ...]], ...] = (
    (
        "Standard Shots",
        (
            CameraMotion.POV,
            CameraMotion.OTS,
            CameraMotion.DUTCH_ANGLE,
            CameraMotion.HANDHELD,
            CameraMotion.RACK_FOCUS,
            CameraMotion.LOCKED_OFF,
        ),
    ),
    (
        "Pan / Tilt / Zoom",
        (
            CameraMotion.TILT_UP,
            CameraMotion.TILT_DOWN,
            CameraMotion.PAN_RIGHT,
            CameraMotion.PAN_LEFT,
            CameraMotion.ZOOM_IN,
            CameraMotion.ZOOM_OUT,
            CameraMotion.WHIP_PAN,
        ),
    ),
    (
        "Dolly / Crane / Tracking",
        (
            CameraMotion.DOLLY_IN,
            CameraMotion.DOLLY_OUT,
            CameraMotion.CRANE_IN,
            CameraMotion.CRANE_OUT,
            CameraMotion.TRACKING,
            CameraMotion.FOLLOWING,
            CameraMotion.ARC_SHOT,
            CameraMotion.PUSH_IN_REVEAL,
            CameraMotion.BOOM_UP,
            CameraMotion.REVERSE_FOLLOW,
            CameraMotion.ORBIT,
            CameraMotion.DRONE_SHOT,
        ),
    ),
)

# Moves only make sense for video; hidden and ignored for still images.
VIDEO_ONLY_GROUPS = frozenset({"Pan / Tilt / Zoom", "Dolly / Crane / Tracking"})

VIDEO_ONLY_MOTIONS = frozenset(
    motion for name, motions in MOTION_GROUPS if name in VIDEO_ONLY_GROUPS for motion in motions
)


def group_available(name: str, mode: PromptMode) -> bool:
    """Whether the motion group ``name`` is offered in ``mode``."""
    return mode is PromptMode.VIDEO or name not in VIDEO_ONLY_GROUPS


# Tooltip text, in the same language as the generated brief.
MOTION_DESCRIPTIONS: Dict[Enum, str] = {
    CameraMotion.POV: "主觀視角，模擬角色的親眼所見，增強代入感。",
    CameraMotion.OTS: "過肩鏡頭，越過肩膀拍攝對話或視線互動。",
    CameraMotion.DUTCH_ANGLE: "荷蘭式傾斜，畫面歪斜營造不安、失衡或混亂感。",
    CameraMotion.HANDHELD: "手持攝影，晃動感強，增加臨場真實與緊張感。",
    CameraMotion.RACK_FOCUS: "變焦轉移，焦點在前後景物間切換，引導觀眾視線。",
    CameraMotion.LOCKED_OFF: "固定鏡頭，攝影機完全靜止不動，強調構圖或動作。",
    CameraMotion.TILT_UP: "鏡頭上仰，由下往上掃視，展現高度、崇高或權威。",
    CameraMotion.TILT_DOWN: "鏡頭下俯，由上往下掃視，展現全貌、渺小或壓抑。",
    CameraMotion.PAN_RIGHT: "鏡頭右搖，水平向右轉動攝影機，展示環境。",
    CameraMotion.PAN_LEFT: "鏡頭左搖，水平向左轉動攝影機，展示環境。",
    CameraMotion.ZOOM_IN: "變焦推進，光學放大畫面，突出細節或製造緊張感。",
    CameraMotion.ZOOM_OUT: "變焦拉遠，光學縮小畫面，展示環境關係或孤立感。",
    CameraMotion.WHIP_PAN: "甩鏡，極快速的水平搖攝，常用於轉場或強調動態。",
    CameraMotion.DOLLY_IN: "軌道前推，攝影機實體接近主體，背景透視隨之改變。",
    CameraMotion.DOLLY_OUT: "軌道後拉，攝影機實體遠離主體，背景透視隨之改變。",
    CameraMotion.CRANE_IN: "升降機下降，從高處降落接近場景，進入故事。",
    CameraMotion.CRANE_OUT: "升降機上升，從場景抽離升高，展現宏大或結束感。",
    CameraMotion.TRACKING: "橫向跟拍，與主體保持平行移動，展現行進過程。",
    CameraMotion.FOLLOWING: "跟隨拍攝，在主體後方跟隨移動，展現主體視角方向。",
    CameraMotion.ARC_SHOT: "弧形運動，圍繞主體旋轉拍攝，360度展示主體與環境。",
    CameraMotion.PUSH_IN_REVEAL: "推進揭示，向前移動並越過遮擋物，揭示新訊息。",
    CameraMotion.BOOM_UP: "吊臂上升，垂直改變攝影機高度，擴展垂直視野。",
    CameraMotion.REVERSE_FOLLOW: "倒退跟隨，在主體前方倒退拍攝，引導主體前進。",
    CameraMotion.ORBIT: "環繞拍攝，圍繞主體進行連續旋轉，展現全方位立體感。",
    CameraMotion.DRONE_SHOT: "空拍鏡頭，模擬無人機視角，進行高空或大範圍的自由穿梭。",
    CharacterPose.STANDING: "站姿，最標準的基礎姿態，適合表達穩定或一般對話。",
    CharacterPose.WALKING: "行走，雙腳交替移動，展現動態位移與生活感。",
    CharacterPose.RUNNING: "奔跑，肢體幅度大，展現急迫、運動或高能量動態。",
}


@dataclass(slots=True)
class PromptState:
    """Everything the operator has entered besides the camera placement."""

    parameters: OpticalParameters = field(default_factory=OpticalParameters)
    description: str = ""
    style: str = ""
    motions: List[CameraMotion] = field(default_factory=list)
    mode: PromptMode = PromptMode.IMAGE
    pose: CharacterPose = CharacterPose.STANDING
    include_pose: bool = False

    @property
    def terms(self) -> ClassifiedTerms:
        # Recomputed on access so it can never lag behind ``parameters``.
        return classify(self.parameters)

    @property
    def active_motions(self) -> List[CameraMotion]:
        """Selected motions that apply to the current output mode, in selection order."""
        if self.mode is PromptMode.VIDEO:
            return list(self.motions)
        return [m for m in self.motions if m not in VIDEO_ONLY_MOTIONS]

    def toggle_motion(self, motion: CameraMotion) -> bool:
        """Add or remove ``motion``; return whether it is now selected."""
        if motion in self.motions:
            self.motions.remove(motion)
            return False
        self.motions.append(motion)
        return True
