# src/color_season/color/contrast.py
"""
Feature contrast between skin, hair and (optionally) eye colours.

Contrast is a weighted CIEDE2000 distance pushed through a logistic curve:
  ΔE ≈ 50 → ~0.5, ΔE ≈ 100 → ~0.88
Skin–hair carries the most weight for seasonal analysis.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import math

from color_season.color.colorspace import LabColor, delta_e_2000


# ----------------------- Config -----------------------

LOGISTIC_SLOPE = 0.04
LOGISTIC_MIDPOINT = 50.0

# (skin-hair, skin-eye, hair-eye)
FEATURE_WEIGHTS = (0.5, 0.3, 0.2)


class ContrastLevel(Enum):
    LOW = "low"
    LOW_MEDIUM = "low-medium"
    MEDIUM = "medium"
    MEDIUM_HIGH = "medium-high"
    HIGH = "high"

    @classmethod
    def from_value(cls, value: float) -> "ContrastLevel":
        if value < 0.2:
            return cls.LOW
        if value < 0.4:
            return cls.LOW_MEDIUM
        if value < 0.6:
            return cls.MEDIUM
        if value < 0.8:
            return cls.MEDIUM_HIGH
        return cls.HIGH

    @property
    def description(self) -> str:
        return _LEVEL_DESCRIPTIONS[self]


_LEVEL_DESCRIPTIONS = {
    ContrastLevel.LOW: "Your features blend together with minimal contrast",
    ContrastLevel.LOW_MEDIUM: "Your features have gentle, subtle contrast",
    ContrastLevel.MEDIUM: "Your features have balanced, moderate contrast",
    ContrastLevel.MEDIUM_HIGH: "Your features show clear distinction with noticeable contrast",
    ContrastLevel.HIGH: "Your features have striking, dramatic contrast",
}


@dataclass(frozen=True)
class ContrastAnalysis:
    value: float
    level: ContrastLevel
    skin_hair: float
    skin_eye: Optional[float] = None
    hair_eye: Optional[float] = None

    @property
    def description(self) -> str:
        return self.level.description


# ----------------------- Helpers -----------------------

def normalize_contrast(de: float) -> float:
    """Map a ΔE value to 0..1 with a logistic curve."""
    value = 1.0 / (1.0 + math.exp(-LOGISTIC_SLOPE * (de - LOGISTIC_MIDPOINT)))
    return min(1.0, max(0.0, value))


def feature_contrast(skin: LabColor, hair: LabColor, eye: Optional[LabColor] = None) -> float:
    """
    Overall contrast 0..1. Without an eye colour only the skin-hair pair
    is used.
    """
    skin_hair = delta_e_2000(skin, hair)
    if eye is None:
        return normalize_contrast(skin_hair)

    w_sh, w_se, w_he = FEATURE_WEIGHTS
    weighted = (w_sh * skin_hair
                + w_se * delta_e_2000(skin, eye)
                + w_he * delta_e_2000(hair, eye))
    return normalize_contrast(weighted)


def analyze_contrast(skin: LabColor, hair: LabColor,
                     eye: Optional[LabColor] = None) -> ContrastAnalysis:
    value = feature_contrast(skin, hair, eye)
    skin_eye = hair_eye = None
    if eye is not None:
        skin_eye = normalize_contrast(delta_e_2000(skin, eye))
        hair_eye = normalize_contrast(delta_e_2000(hair, eye))
    return ContrastAnalysis(
        value=value,
        level=ContrastLevel.from_value(value),
        skin_hair=normalize_contrast(delta_e_2000(skin, hair)),
        skin_eye=skin_eye,
        hair_eye=hair_eye,
    )
