# src/color_season/palette/seasons.py
# The four macro seasons, their reference skin tones, and the sub-season palettes
# that belong to each. Each sub-palette holds 10 hex swatches.

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

from color_season.color.colorspace import LabColor, hex_to_lab, hex_to_rgb


@dataclass(frozen=True)
class SubPalette:
    name: str
    swatches: Tuple[str, ...]

    @property
    def rgb(self) -> List[Tuple[int, int, int]]:
        return [hex_to_rgb(c) for c in self.swatches]

    @property
    def lab(self) -> List[LabColor]:
        return [hex_to_lab(c) for c in self.swatches]


class Season(Enum):
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"
    WINTER = "winter"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def reference(self) -> LabColor:
        """Typical skin tone for the season, used for distance confirmation."""
        return SEASON_REFERENCES[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def is_warm(self) -> bool:
        return self in (Season.SPRING, Season.AUTUMN)

    @property
    def is_light(self) -> bool:
        return self in (Season.SPRING, Season.SUMMER)

    @property
    def palettes(self) -> Tuple[SubPalette, ...]:
        return SEASON_PALETTES[self]

    @classmethod
    def from_properties(cls, is_warm: bool, is_light: bool) -> "Season":
        if is_warm and is_light:
            return cls.SPRING
        if is_light:
            return cls.SUMMER
        if is_warm:
            return cls.AUTUMN
        return cls.WINTER


# Warm/cool and light/dark anchors, one per macro season
SEASON_REFERENCES: Dict[Season, LabColor] = {
    Season.SPRING: LabColor(L=75.0, a=10.0, b=25.0),   # warm, light
    Season.SUMMER: LabColor(L=70.0, a=-3.0, b=10.0),   # cool, light
    Season.AUTUMN: LabColor(L=60.0, a=8.0, b=22.0),    # warm, dark
    Season.WINTER: LabColor(L=55.0, a=-5.0, b=5.0),    # cool, dark
}

_DESCRIPTIONS = {
    Season.SPRING: "Warm and bright colors that bring energy and freshness",
    Season.SUMMER: "Cool and soft colors with blue undertones",
    Season.AUTUMN: "Warm and muted colors with golden undertones",
    Season.WINTER: "Cool and clear colors with blue undertones",
}


SEASON_PALETTES: Dict[Season, Tuple[SubPalette, ...]] = {
    Season.SPRING: (
        SubPalette("Bright Spring", (
            "#FF6F61",  # coral red
            "#FFA07A",  # light salmon
            "#FFD700",  # bright gold
            "#ADFF2F",  # chartreuse
            "#00FA9A",  # medium spring green
            "#40E0D0",  # turquoise
            "#1E90FF",  # dodger blue
            "#BA55D3",  # medium orchid
            "#FF69B4",  # hot pink
            "#FF4500",  # orange red
        )),
        SubPalette("True Spring", (
            "#FFA500", "#FFD700", "#FF7F50", "#FFB347", "#FFE135",
            "#98FB98", "#40E0D0", "#87CEEB", "#FF69B4", "#CD5C5C",
        )),
        SubPalette("Light Spring", (
            "#FFFACD", "#FFDAB9", "#FAFAD2", "#E0FFFF", "#E6E6FA",
            "#FFB6C1", "#FFE4E1", "#F5DEB3", "#F0E68C", "#B0E0E6",
        )),
    ),
    Season.SUMMER: (
        SubPalette("Light Summer", (
            "#B0E0E6", "#AFEEEE", "#E6E6FA", "#D8BFD8", "#F08080",
            "#F5DEB3", "#FFB6C1", "#87CEFA", "#D3D3D3", "#F0FFF0",
        )),
        SubPalette("True Summer", (
            "#4682B4",  # steel blue
            "#5F9EA0",  # cadet blue
            "#708090",  # slate gray
            "#6A5ACD",  # slate blue
            "#9370DB",  # medium purple
            "#DB7093",  # pale violet red
            "#C0C0C0",  # silver
            "#778899",  # light slate gray
            "#4169E1",  # royal blue
            "#8FBC8F",  # dark sea green
        )),
        SubPalette("Soft Summer", (
            "#D8BFD8", "#E0B0FF", "#C3B1E1", "#DCDCDC", "#B0C4DE",
            "#C1CDC1", "#E6E6FA", "#AFEEEE", "#DDA0DD", "#BEBEBE",
        )),
    ),
    Season.AUTUMN: (
        SubPalette("Soft Autumn", (
            "#C9A27E",  # soft camel
            "#DAB88B",  # wheat
            "#E3C565",  # muted mustard
            "#B59F3B",  # olive gold
            "#8E9A6C",  # sage
            "#6E8B74",  # soft moss
            "#A77E6B",  # dusty terracotta
            "#C27D6A",  # coral clay
            "#8AA39B",  # muted teal
            "#7A6A8E",  # dusty plum
        )),
        SubPalette("True Autumn", (
            "#C7773D", "#E0892E", "#C49A00", "#8B6B2E", "#7A8B2E",
            "#3E6B47", "#0F766E", "#2AB7CA", "#B5544D", "#9A4D82",
        )),
        SubPalette("Deep Autumn", (
            "#7A3B1A", "#9C3D18", "#B1470E", "#996515", "#556B2F",
            "#3A5A40", "#2E6E60", "#5E2B3A", "#6E3A2C", "#4A3A2C",
        )),
    ),
    Season.WINTER: (
        SubPalette("Deep Winter", (
            "#000000", "#191970", "#006A4E", "#4B0082", "#8B0000",
            "#FF0000", "#FF1493", "#2E0854", "#009999", "#8B008B",
        )),
        SubPalette("True Winter", (
            "#4169E1", "#0000FF", "#8A2BE2", "#20B2AA", "#00CED1",
            "#008080", "#DC143C", "#FF0000", "#808080", "#000000",
        )),
        SubPalette("Bright Winter", (
            "#FF1493",  # deep fuchsia
            "#DC143C",  # crimson
            "#FF69B4",  # hot pink
            "#FF0000",  # pure red
            "#00CED1",  # dark turquoise
            "#1E90FF",  # dodger blue
            "#00BFFF",  # deep sky blue
            "#7B68EE",  # medium slate blue
            "#32CD32",  # lime green
            "#FFFF00",  # vivid yellow
        )),
    ),
}
