"""Application constants and environment overrides."""
from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Optional


@dataclass(frozen=True, slots=True)
class SolverConfig:
    """Constants used by the camera solver."""

    eye_height_m: float = 1.68
    near_distance_m: float = 2.0
    far_distance_m: float = 8.0
    far_aim_factor: float = 0.6  # aim drops to 60% of eye height for wide shots
    vertical_fov_deg: float = 15.0
    clip_near: float = 0.1
    clip_far: float = 200.0
    pole_epsilon: float = 1e-6


@dataclass(frozen=True, slots=True)
class ViewfinderConfig:
    """Geometry of the on-screen 16:9 viewfinder frame."""

    aspect_width: int = 16
    aspect_height: int = 9
    max_width_fraction: float = 0.94
    max_height_fraction: float = 0.85
    export_prefix: str = "cinematic-master"

    @property
    def aspect(self) -> float:
        return self.aspect_width / float(self.aspect_height)


@dataclass(frozen=True, slots=True)
class GizmoConfig:
    center_height_m: float = 0.9
    ring_segments: int = 64
    azimuth_color: str = "#22c55e"
    elevation_color: str = "#ec4899"
    distance_color: str = "#eab308"
    accent_color: str = "#3b82f6"


@dataclass(frozen=True, slots=True)
class GenerationConfig:
    """Settings for the external text-generation service."""

    endpoint: str = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
    model: str = "gemini-2.0-flash-exp"
    brief_temperature: float = 0.7
    prompt_temperature: float = 0.3
    timeout_s: float = 60.0


SOLVER = SolverConfig()
VIEWFINDER = ViewfinderConfig()
GIZMOS = GizmoConfig()

API_KEY_ENV = "GEMINI_API_KEY"
MODEL_ENV = "OPTICAL_AXIS_MODEL"
LOG_LEVEL_ENV = "OPTICAL_AXIS_LOG_LEVEL"

ORGANIZATION_NAME = "OpticalAxis"
APPLICATION_NAME = "Optical Axis Studio"


def generation_config() -> GenerationConfig:
    """Build the generation settings, honouring ``OPTICAL_AXIS_MODEL``."""
    model = os.environ.get(MODEL_ENV, "").strip()
    if model:
        return GenerationConfig(model=model)
    return GenerationConfig()


def env_api_key() -> Optional[str]:
    key = os.environ.get(API_KEY_ENV, "").strip()
    return key or None


def log_level() -> str:
    return os.environ.get(LOG_LEVEL_ENV, "INFO").strip().upper() or "INFO"
