# src/color_season/color/samples.py
# Averaged skin / hair colour handed over by the segmentation step.

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple, Optional
import colorsys

from color_season.color.colorspace import LabColor, rgb_to_lab


@dataclass(frozen=True)
class ColorSample:
    """
    RGB triple in [0,1] plus its HSV (hue, saturation, value, all 0..1).
    Owned by the caller; the engine only reads it.
    """
    rgb: Tuple[float, float, float]
    hsv: Tuple[float, float, float]

    @classmethod
    def from_rgb(cls, red: float, green: float, blue: float,
                 hsv: Optional[Tuple[float, float, float]] = None) -> "ColorSample":
        rgb = tuple(min(1.0, max(0.0, float(c))) for c in (red, green, blue))
        if hsv is None:
            hsv = colorsys.rgb_to_hsv(*rgb)
        return cls(rgb=rgb, hsv=tuple(float(c) for c in hsv))

    @classmethod
    def from_rgb255(cls, red: int, green: int, blue: int) -> "ColorSample":
        return cls.from_rgb(red / 255.0, green / 255.0, blue / 255.0)

    @property
    def lab(self) -> LabColor:
        return rgb_to_lab(*self.rgb)

    @property
    def hue_deg(self) -> float:
        return self.hsv[0] * 360.0
