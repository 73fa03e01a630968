"""Structured text handed to the text-generation service."""
from __future__ import annotations

import math
from typing import List

from ..math.classifier import ClassifiedTerms
from ..models.optical_parameters import OpticalParameters, normalize_azimuth
from ..models.prompt_state import PromptMode, PromptState

MANNEQUIN_PREAMBLE = (
    "Reference the provided image for character placement only. The figure in the first "
    "provided image is a fake mannequin; the two black squares represent the eyes and also "
    "indicate the facing direction. Please follow the mannequin's on-screen position and orientation."
)


def _format_degrees(value: float) -> str:
    if not math.isfinite(value):
        return str(value)
    return f"{value:g}"


def side_description(azimuth: float) -> str:
    """Describe which side of the subject's face the camera sees."""
    az = normalize_azimuth(azimuth)
    if math.isnan(az):
        return "正對鏡頭 (Frontal view)"
    label = _format_degrees(round(az, 1))
    if az == 0.0:
        return "正對鏡頭 (Frontal view)"
    if az < 180.0:
        # Camera is on the subject's right-hand side.
        if az == 90.0:
            return "完全右側面 (Full Right Profile)"
        if az < 90.0:
            return f"前右側 (Front-Right / Showing Right Cheek, {label}°)"
        return f"後右側 (Back-Right View / Showing Right Ear, {label}°)"
    if az == 180.0:
        return "完全背面 (Full Back view)"
    if az == 270.0:
        return "完全左側面 (Full Left Profile)"
    if az < 270.0:
        return f"後左側 (Back-Left View / Showing Left Ear, {label}°)"
    return f"前左側 (Front-Left / Showing Left Cheek, {label}°)"


def metadata_block(params: OpticalParameters, terms: ClassifiedTerms) -> str:
    """Raw parameters plus their classification, one field per line."""
    direction, angle, size = terms.localized()
    return "\n".join(
        [
            f"Azimuth: {_format_degrees(round(params.normalized_azimuth, 1))}°",
            f"Elevation: {_format_degrees(params.elevation)}°",
            f"Distance: {_format_degrees(params.distance)} m",
            f"Facing: {side_description(params.azimuth)}",
            f"Direction: {direction} ({terms.direction.value})",
            f"Angle: {angle} ({terms.angle.value})",
            f"Shot Size: {size} ({terms.size.title})",
        ]
    )


# Face orientation bands quoted to the collaborator, in on-screen terms.
ORIENTATION_BANDS = (
    ("355 ~ 5 (Cross 0)", "正面 (Front View)"),
    ("5 ~ 85", "露出左臉 (Front-Left / Looking Screen Left)"),
    ("85 ~ 95", "正左側 (Full Left Profile)"),
    ("95 ~ 175", "左後側 (Back-Left)"),
    ("175 ~ 185", "背面 (Back View)"),
    ("185 ~ 265", "右後側 (Back-Right)"),
    ("265 ~ 275", "正右側 (Full Right Profile)"),
    ("275 ~ 355", "露出右臉 (Front-Right / Looking Screen Right)"),
)

# Judged from the attached capture, not from the distance value.
VISUAL_SHOT_SIZES = (
    ("Extreme Close Up (ECU)", "只有眼睛/嘴巴/局部。"),
    ("Close Up (CU)", "頭部充滿畫面，頂多到肩膀。"),
    ("Medium Close Up (MCU)", "胸部以上。"),
    ("Medium Shot (MS)", "腰部以上。"),
    ("Cowboy Shot (American)", "大腿/膝蓋以上。"),
    ("Full Shot (FS)", "全身完整 (頭頂到腳底)。"),
    ("Wide Shot (WS)", "人物變小，環境變多。"),
    ("Extreme Wide Shot (EWS)", "人物極小，強調大環境。"),
)


def _motion_names(state: PromptState) -> str:
    return ", ".join(m.value for m in state.active_motions)


def brief_system_instruction(state: PromptState) -> str:
    """Role, truth hierarchy and analysis rubric for the brief request."""
    azimuth = _format_degrees(round(state.parameters.normalized_azimuth, 1))
    lines: List[str] = [
        "Role: 你是專業的電影攝影師導師。",
        "Task: 分析用戶的攝影配置與「實時預覽截圖」，撰寫一份詳細的「攝影設計教學解析」(Educational Cinematography Brief)。",
        "Output Language: 繁體中文 (Traditional Chinese).",
        "",
        "CRITICAL TRUTH HIERARCHY (絕對判定權重階層)：請嚴格遵守以下判定來源，不可混淆。",
        "1. 必須依賴數值 (METADATA PRIORITY)：",
        "   - 仰角/俯角 (High/Low Angle) 必須 100% 依據 Elevation 數值。",
        "   - 面部朝向 (Face Orientation) 必須 100% 依據 Azimuth 數值。",
        "   - 禁止因為截圖的光影模糊、模型簡陋或透視不明顯而推翻數值。數值就是真理。",
        "2. 必須依賴視覺 (VISUAL PRIORITY)：",
        "   - 景別 (Shot Size) 必須 100% 依據截圖中人物在畫面的佔比，忽略 Distance 數值，只看圖。",
        "   - 構圖 (Composition)：人物在畫面的位置、留白空間，只看圖。",
        "",
        "Analysis Structure & Rules:",
        f"1. 鏡頭語言 (Camera Language)：解析用戶選擇的運鏡術語 ({_motion_names(state) or '固定鏡頭'})。",
        "2. 光軸與視角 (Optical Axis)",
        "   (A) 垂直視角 (Vertical Angle) [依據數值 Elevation]：",
        "     - Elevation > 0 (+1 ~ +80)：定義為俯角 (High Angle)。",
        "     - Elevation < 0 (-1 ~ -80)：定義為仰角 (Low Angle)。",
        "     - Elevation = 0：定義為平視 (Eye Level)。",
        "     - 進階判斷：若數值絕對值很大 (如 >60 或 <-60) 且畫面透視強烈，可加註「鳥瞰 (Overhead/God's Eye)」"
        "或「蟲視 (Worm's Eye)」，但基礎屬性必須跟隨數值正負號。",
        f"   (B) 水平朝向 (Horizontal Orientation) [依據數值 Azimuth]：請根據 Azimuth ({azimuth}°) 判斷：",
    ]
    lines.extend(f"     - {band}：{label}。" for band, label in ORIENTATION_BANDS)
    lines.append("   (C) 景別與鏡頭感 (Shot Size & Lens) [依據截圖 Visuals]：請忽略 Distance 數據，只看截圖畫面判定：")
    lines.extend(f"     - {size}：{rule}" for size, rule in VISUAL_SHOT_SIZES)
    lines.extend(
        [
            "     - 描述：目前人物在畫面中的具體位置（左/中/右）與留白感。",
            "3. 角色與場景 (Character & Scene)",
            f"   - 整合故事描述：「{state.description.strip()}」。",
            "   - 描述場景氛圍。",
            "4. 補充細節 (Details)",
            f"   - 如果使用了風格「{state.style.strip()}」，提供相應建議。",
            "",
            "Tone: 權威、精準。",
            "Output Format: 條列式重點解析。",
        ]
    )
    return "\n".join(lines)


def brief_user_prompt(state: PromptState, has_image: bool = False) -> str:
    """Serialize the operator's choices into the block sent with the brief request.

    ``has_image`` adds the line pointing the collaborator at the attached
    capture as the reference for shot size.
    """
    params = state.parameters
    sections = [
        "請撰寫攝影解析：",
        "[METADATA] (Truth for Angle/Orientation)",
        metadata_block(params, state.terms),
    ]
    if has_image:
        sections.append("[IMAGE] (Truth for Shot Size): 請看附圖。")
    sections.extend(
        [
            "[STORY]",
            f"Description: {state.description.strip() or '無'}",
            f"Style: {state.style.strip() or '無'}",
            f"Camera Motions: {_motion_names(state) or '無'}",
            f"Output Target: {state.mode.value}",
        ]
    )
    if state.include_pose:
        sections.append(f"Character Pose: {state.pose.value}")
    return "\n".join(sections)


def final_prompt_system_instruction(mode: PromptMode) -> str:
    target = (
        "Video Generation (Runway Gen-2 / Pika / Sora)"
        if mode is PromptMode.VIDEO
        else "Image Generation (Midjourney v6 / Flux)"
    )
    return "\n".join(
        [
            "Role: Expert AI Prompt Engineer (Midjourney/Runway/Sora Specialist).",
            'Task: Translate the "Cinematography Brief" into a perfect, high-fidelity ENGLISH PROMPT designed '
            "to work alongside a REFERENCE IMAGE (I2I).",
            "Input Context: The user will provide the generated prompt AND the original screenshot to the generation model.",
            f"Target Tool: {target}.",
            "",
            "CRITICAL STRATEGY for REFERENCE IMAGE WORKFLOW:",
            '1. Visual Anchor & User Guide: The user will upload the screenshot as an "Image Prompt". '
            "Explicitly instruct the downstream model on how to read that image.",
            '2. Explicit Relative Orientation: Do not just say "looking left". Say: "Reference the image for exact '
            "spatial composition: Subject is positioned on the [Left/Right/Center], with head/body oriented as shown "
            '(Azimuth). Match this framing geometry exactly."',
            f'3. Start with Instruction: The output MUST start with the exact phrase: "**{MANNEQUIN_PREAMBLE}**" '
            "followed by the description.",
            "4. No Length Limits: Do not summarize. Be exhaustively descriptive about details that might differ "
            "from standard training data.",
            '5. Hypnotic Detail: Use a dense description style. Instead of "man sitting", use "a man sitting in the '
            "bottom-left corner, body angled 45 degrees away, sharp side profile showing right eye looking up "
            'towards the top-right light source".',
            "",
            'MANDATORY "OPTICAL AXIS" TRANSLATION:',
            "1. Shot Size (CRITICAL): Include the specific cinematographic shot size term defined in the brief "
            '(e.g. "Extreme Close-Up", "Medium Shot", "Wide Shot"). This is non-negotiable.',
            "2. Eye & Face Direction (CRITICAL): Explicitly translate the gaze direction found in the brief "
            '(e.g. "Eyes staring directly into the lens", "Head turned away, no eye contact").',
            '3. Camera Geometry: Describe the geometric feeling of the shot (e.g. "Oppressive low-angle looking up '
            'from ground level", "Distant voyeuristic high-angle").',
            '4. Frame Geography: "Subject occupying the left third", "Vast empty negative space on the right".',
            "",
            'MANDATORY "STORY & AESTHETICS" INJECTION:',
            "The Story Intent from the brief is the Director's Script and the sole authority for performance.",
            "1. Define Action & Pose: The Story Intent decides whether the character is sitting, standing, running "
            "or crawling. Ignore the stiff mannequin pose in the reference image if the story contradicts it. "
            "Use the image only for where they are, not what they are doing.",
            '2. Amplify Character Details: If the story says "A weary soldier", describe dirty armor, sweat, scars '
            "and a thousand-yard stare.",
            '3. Define Performance: Describe the specific emotion and acting (e.g. "Screaming in terror", "subtle smirk").',
            "4. Enforce Style: If a style is mentioned, apply its color grading and set design keywords deeply.",
            "The reference image provides the bones (composition); the story provides the flesh, soul and action.",
            "",
            "Structure for Final Output:",
            "[Subject Action & Exact Pose & Gaze] + [Precise Frame Composition & Camera Angle] + "
            "[Lighting & Atmosphere] + [Lens & Film Esthetics] + [Motion (if Video)]",
            "",
            "Rules:",
            "- Output Format: Markdown. Use bold for key terms (e.g. **Extreme Close-Up**, **Low Angle**).",
            "- 100% English.",
            "- Prioritize GAZE DIRECTION and GEOMETRY.",
            "- The output must hold up as ground truth even if the reference image influence is weak.",
        ]
    )


def final_prompt_user_prompt(brief: str) -> str:
    return f'Here is the Cinematography Brief (in Chinese):\n"""\n{brief}\n"""\n\nGenerate the final English prompt now.'
