"""Table-driven classification of camera placement into shot vocabulary.

The three lookups are kept as literal tables so each entry reads as a single
cinematography convention. :func:`validate_tables` runs at import time and
refuses tables that leave a gap or overlap.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math
from typing import Sequence, Tuple

from ..models.optical_parameters import OpticalParameters, normalize_azimuth


class ClassificationTableError(ValueError):
    """Raised when a classification table is not a total, ordered partition."""


class ShotDirection(Enum):
    """Which side of the subject faces the camera."""

    FRONT = "Front"
    THREE_QUARTER = "Three-quarter"
    PROFILE = "Profile"
    REAR_THREE_QUARTER = "Rear three-quarter"
    BACK = "Back"

    def __str__(self) -> str:  # pragma: no cover - convenience for UI display
        return self.value


class ShotAngle(Enum):
    """Vertical camera angle relative to the subject's eye line."""

    BIRDS_EYE = "Bird's-eye"
    HIGH = "High angle"
    LEVEL = "Eye level"
    LOW = "Low angle"
    WORMS_EYE = "Worm's-eye"

    def __str__(self) -> str:  # pragma: no cover - convenience for UI display
        return self.value


class ShotSize(Enum):
    """Standard shot sizes, tightest first."""

    EXTREME_CLOSE_UP = "ECU"
    CLOSE_UP = "CU"
    MEDIUM_CLOSE_UP = "MCU"
    MEDIUM = "MS"
    MEDIUM_LONG = "MLS"
    FULL = "FS"
    WIDE = "WS"
    LONG = "LS"
    EXTREME_LONG = "ELS"

    @property
    def abbreviation(self) -> str:
        return self.value

    @property
    def title(self) -> str:
        return _SIZE_TITLES[self]

    def __str__(self) -> str:  # pragma: no cover - convenience for UI display
        return f"{self.title} ({self.value})"


_SIZE_TITLES = {
    ShotSize.EXTREME_CLOSE_UP: "Extreme close-up",
    ShotSize.CLOSE_UP: "Close-up",
    ShotSize.MEDIUM_CLOSE_UP: "Medium close-up",
    ShotSize.MEDIUM: "Medium shot",
    ShotSize.MEDIUM_LONG: "Medium long shot",
    ShotSize.FULL: "Full shot",
    ShotSize.WIDE: "Wide shot",
    ShotSize.LONG: "Long shot",
    ShotSize.EXTREME_LONG: "Extreme long shot",
}

# Traditional Chinese vocabulary used in text handed to the generation service.
LOCALIZED_LABELS = {
    ShotDirection.FRONT: "正面",
    ShotDirection.THREE_QUARTER: "四分之三側面",
    ShotDirection.PROFILE: "側面",
    ShotDirection.REAR_THREE_QUARTER: "後側側面",
    ShotDirection.BACK: "背面",
    ShotAngle.BIRDS_EYE: "鳥瞰",
    ShotAngle.HIGH: "高角度",
    ShotAngle.LEVEL: "平視",
    ShotAngle.LOW: "低角度",
    ShotAngle.WORMS_EYE: "蟲瞻",
    ShotSize.EXTREME_CLOSE_UP: "大特寫 (ECU)",
    ShotSize.CLOSE_UP: "特寫 (CU)",
    ShotSize.MEDIUM_CLOSE_UP: "胸上景 (MCU)",
    ShotSize.MEDIUM: "半身景 (MS)",
    ShotSize.MEDIUM_LONG: "中景 (MLS)",
    ShotSize.FULL: "全景 (FS)",
    ShotSize.WIDE: "大全景 (WS)",
    ShotSize.LONG: "遠景 (LS)",
    ShotSize.EXTREME_LONG: "大遠景 (ELS)",
}


# (lower inclusive, upper exclusive, label), degrees
AZIMUTH_RANGES: Tuple[Tuple[float, float, ShotDirection], ...] = (
    (0.0, 30.0, ShotDirection.FRONT),
    (30.0, 60.0, ShotDirection.THREE_QUARTER),
    (60.0, 120.0, ShotDirection.PROFILE),
    (120.0, 150.0, ShotDirection.REAR_THREE_QUARTER),
    (150.0, 210.0, ShotDirection.BACK),
    (210.0, 240.0, ShotDirection.REAR_THREE_QUARTER),
    (240.0, 300.0, ShotDirection.PROFILE),
    (300.0, 330.0, ShotDirection.THREE_QUARTER),
    (330.0, 360.0, ShotDirection.FRONT),
)

# elevation >= threshold, evaluated top-down
ELEVATION_LADDER: Tuple[Tuple[float, ShotAngle], ...] = (
    (45.0, ShotAngle.BIRDS_EYE),
    (15.0, ShotAngle.HIGH),
    (-15.0, ShotAngle.LEVEL),
    (-45.0, ShotAngle.LOW),
    (-math.inf, ShotAngle.WORMS_EYE),
)

# distance <= threshold, evaluated bottom-up, meters
DISTANCE_LADDER: Tuple[Tuple[float, ShotSize], ...] = (
    (1.0, ShotSize.EXTREME_CLOSE_UP),
    (2.0, ShotSize.CLOSE_UP),
    (3.5, ShotSize.MEDIUM_CLOSE_UP),
    (4.5, ShotSize.MEDIUM),
    (10.0, ShotSize.MEDIUM_LONG),
    (15.0, ShotSize.FULL),
    (20.0, ShotSize.WIDE),
    (30.0, ShotSize.LONG),
    (math.inf, ShotSize.EXTREME_LONG),
)


@dataclass(frozen=True, slots=True)
class ClassifiedTerms:
    """Shot vocabulary derived from one :class:`OpticalParameters` snapshot."""

    direction: ShotDirection
    angle: ShotAngle
    size: ShotSize

    def localized(self) -> Tuple[str, str, str]:
        return (
            LOCALIZED_LABELS[self.direction],
            LOCALIZED_LABELS[self.angle],
            LOCALIZED_LABELS[self.size],
        )


def validate_tables(
    azimuth_ranges: Sequence[Tuple[float, float, ShotDirection]] = AZIMUTH_RANGES,
    elevation_ladder: Sequence[Tuple[float, ShotAngle]] = ELEVATION_LADDER,
    distance_ladder: Sequence[Tuple[float, ShotSize]] = DISTANCE_LADDER,
) -> None:
    """Check that every table is total and unambiguous.

    Raises:
        ClassificationTableError: On a gap, an overlap, an unordered ladder, or
            a ladder that does not end in an all-matching band.
    """
    if not azimuth_ranges:
        raise ClassificationTableError("Azimuth table is empty.")
    cursor = 0.0
    for lower, upper, label in azimuth_ranges:
        if lower != cursor:
            kind = "gap" if lower > cursor else "overlap"
            raise ClassificationTableError(
                f"Azimuth table has a {kind} at {cursor:g} deg (next range {label.value} starts at {lower:g})."
            )
        if upper <= lower:
            raise ClassificationTableError(f"Azimuth range for {label.value} is empty: [{lower:g}, {upper:g}).")
        cursor = upper
    if cursor != 360.0:
        raise ClassificationTableError(f"Azimuth table stops at {cursor:g} deg instead of 360.")

    _check_ladder("Elevation", [t for t, _ in elevation_ladder], descending=True)
    _check_ladder("Distance", [t for t, _ in distance_ladder], descending=False)


def _check_ladder(name: str, thresholds: Sequence[float], *, descending: bool) -> None:
    if not thresholds:
        raise ClassificationTableError(f"{name} ladder is empty.")
    for current, following in zip(thresholds, thresholds[1:]):
        ordered = following < current if descending else following > current
        if not ordered:
            direction = "descending" if descending else "ascending"
            raise ClassificationTableError(
                f"{name} ladder is not strictly {direction} at {current:g} -> {following:g}."
            )
    terminal = -math.inf if descending else math.inf
    if thresholds[-1] != terminal:
        raise ClassificationTableError(f"{name} ladder must end with {terminal} to stay total.")


def classify_direction(azimuth: float) -> ShotDirection:
    az = normalize_azimuth(azimuth)
    for lower, upper, label in AZIMUTH_RANGES:
        if lower <= az < upper:
            return label
    # Only NaN gets here.
    return ShotDirection.FRONT


def classify_angle(elevation: float) -> ShotAngle:
    for threshold, label in ELEVATION_LADDER[:-1]:
        if elevation >= threshold:
            return label
    return ELEVATION_LADDER[-1][1]


def classify_size(distance: float) -> ShotSize:
    for threshold, label in DISTANCE_LADDER[:-1]:
        if distance <= threshold:
            return label
    return DISTANCE_LADDER[-1][1]


def classify(params: OpticalParameters) -> ClassifiedTerms:
    """Map raw parameters to shot terms. Total: never raises for numeric input."""
    return ClassifiedTerms(
        direction=classify_direction(params.azimuth),
        angle=classify_angle(params.elevation),
        size=classify_size(params.distance),
    )


validate_tables()
