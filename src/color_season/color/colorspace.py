# src/color_season/color/colorspace.py
"""
sRGB ↔ CIE L*a*b* conversion and perceptual colour differences.

Pipeline (D65, 2° observer):
  sRGB [0,1] → clamp → inverse gamma (linear RGB)
  → sRGB→XYZ matrix → normalize by reference white
  → CIE Lab nonlinearity → LabColor

Distances:
  delta_e       CIE76, plain Euclidean distance in Lab
  delta_e_2000  CIEDE2000 (Sharma, Wu & Dalal 2005)

All gamma / chromaticity constants live in this module.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple
import math

import numpy as np


# ----------------------- Constants -----------------------

# sRGB transfer function
SRGB_KNEE = 0.04045
SRGB_LINEAR_KNEE = 0.0031308
SRGB_SLOPE = 12.92
SRGB_OFFSET = 0.055
SRGB_GAMMA = 2.4

# Linear sRGB → XYZ (D65), rows are X, Y, Z
RGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
])
XYZ_TO_RGB = np.linalg.inv(RGB_TO_XYZ)

# D65 reference white, Y normalized to 100
D65_WHITE = (95.047, 100.0, 108.883)

# CIE Lab nonlinearity
LAB_EPSILON = 216.0 / 24389.0
LAB_KAPPA = 24389.0 / 27.0

_POW25_7 = 25.0 ** 7


# ----------------------- Lab value type -----------------------

@dataclass(frozen=True)
class LabColor:
    """CIE L*a*b* colour. L in [0,100]; a and b practically within ±130."""
    L: float
    a: float
    b: float

    @property
    def chroma(self) -> float:
        return math.hypot(self.a, self.b)

    @property
    def hue_deg(self) -> float:
        """Hue angle h_ab in degrees, resolved to [0, 360)."""
        if self.a == 0.0 and self.b == 0.0:
            return 0.0
        return math.degrees(math.atan2(self.b, self.a)) % 360.0

    def delta_e(self, other: "LabColor") -> float:
        return delta_e(self, other)

    def delta_e_2000(self, other: "LabColor") -> float:
        return delta_e_2000(self, other)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.L, self.a, self.b)

    def to_dict(self) -> dict:
        return {"L": self.L, "a": self.a, "b": self.b}


# ----------------------- Transfer helpers -----------------------

def _clamp01(x: float) -> float:
    if x != x:  # NaN
        return 0.0
    return min(1.0, max(0.0, x))


def srgb_to_linear(c):
    """sRGB (0..1) -> linear (0..1). Accepts scalars or numpy arrays."""
    if isinstance(c, np.ndarray):
        x = np.clip(np.nan_to_num(c.astype(np.float64)), 0.0, 1.0)
        return np.where(x <= SRGB_KNEE, x / SRGB_SLOPE,
                        ((x + SRGB_OFFSET) / (1.0 + SRGB_OFFSET)) ** SRGB_GAMMA)
    x = _clamp01(float(c))
    if x <= SRGB_KNEE:
        return x / SRGB_SLOPE
    return ((x + SRGB_OFFSET) / (1.0 + SRGB_OFFSET)) ** SRGB_GAMMA


def linear_to_srgb(c):
    """linear (0..1) -> sRGB (0..1). Accepts scalars or numpy arrays."""
    if isinstance(c, np.ndarray):
        x = np.clip(np.nan_to_num(c.astype(np.float64)), 0.0, 1.0)
        return np.where(x <= SRGB_LINEAR_KNEE, SRGB_SLOPE * x,
                        (1.0 + SRGB_OFFSET) * (x ** (1.0 / SRGB_GAMMA)) - SRGB_OFFSET)
    x = _clamp01(float(c))
    if x <= SRGB_LINEAR_KNEE:
        return SRGB_SLOPE * x
    return (1.0 + SRGB_OFFSET) * (x ** (1.0 / SRGB_GAMMA)) - SRGB_OFFSET


def _lab_f(t: float) -> float:
    if t > LAB_EPSILON:
        return t ** (1.0 / 3.0)
    return (LAB_KAPPA * t + 16.0) / 116.0


def _lab_f_inv(f: float) -> float:
    t = f ** 3
    if t > LAB_EPSILON:
        return t
    return (116.0 * f - 16.0) / LAB_KAPPA


# ----------------------- Conversions -----------------------

def rgb_to_lab(red: float, green: float, blue: float) -> LabColor:
    """
    sRGB channels in [0,1] -> LabColor.
    Out-of-range channels are clamped; the function never raises for numeric input.
    """
    lin = (srgb_to_linear(red), srgb_to_linear(green), srgb_to_linear(blue))

    xyz = [100.0 * sum(RGB_TO_XYZ[row][col] * lin[col] for col in range(3))
           for row in range(3)]

    fx = _lab_f(xyz[0] / D65_WHITE[0])
    fy = _lab_f(xyz[1] / D65_WHITE[1])
    fz = _lab_f(xyz[2] / D65_WHITE[2])

    L = min(100.0, max(0.0, 116.0 * fy - 16.0))
    a = 500.0 * (fx - fy)
    b = 200.0 * (fy - fz)
    return LabColor(L=L, a=a, b=b)


def rgb255_to_lab(red: int, green: int, blue: int) -> LabColor:
    """8-bit sRGB triple -> LabColor."""
    return rgb_to_lab(red / 255.0, green / 255.0, blue / 255.0)


def rgb_to_lab_array(rgb: np.ndarray) -> np.ndarray:
    """
    Vectorised sRGB (..., 3) in [0,1] -> Lab (..., 3).
    Same constants and clamping as rgb_to_lab.
    """
    lin = srgb_to_linear(np.asarray(rgb, dtype=np.float64))
    xyz = 100.0 * (lin @ RGB_TO_XYZ.T)
    t = xyz / np.asarray(D65_WHITE)
    f = np.where(t > LAB_EPSILON, np.cbrt(t), (LAB_KAPPA * t + 16.0) / 116.0)

    lab = np.empty_like(f)
    lab[..., 0] = np.clip(116.0 * f[..., 1] - 16.0, 0.0, 100.0)
    lab[..., 1] = 500.0 * (f[..., 0] - f[..., 1])
    lab[..., 2] = 200.0 * (f[..., 1] - f[..., 2])
    return lab


def lab_to_rgb(color: LabColor) -> Tuple[float, float, float]:
    """LabColor -> sRGB in [0,1]; out-of-gamut colours are clipped."""
    fy = (color.L + 16.0) / 116.0
    fx = fy + color.a / 500.0
    fz = fy - color.b / 200.0

    xyz = np.array([
        _lab_f_inv(fx) * D65_WHITE[0],
        _lab_f_inv(fy) * D65_WHITE[1],
        _lab_f_inv(fz) * D65_WHITE[2],
    ]) / 100.0
    lin = XYZ_TO_RGB @ xyz
    r, g, b = (float(linear_to_srgb(float(c))) for c in lin)
    return (r, g, b)


def hex_to_rgb(hex_code: str) -> Tuple[int, int, int]:
    """Convert hex string (e.g., '#FF5733') to an RGB tuple."""
    hex_code = hex_code.lstrip("#")
    return tuple(int(hex_code[i:i+2], 16) for i in (0, 2, 4))


def hex_to_lab(hex_code: str) -> LabColor:
    return rgb255_to_lab(*hex_to_rgb(hex_code))


# ----------------------- Colour differences -----------------------

def delta_e(c1: LabColor, c2: LabColor) -> float:
    """CIE76 colour difference."""
    dL = c1.L - c2.L
    da = c1.a - c2.a
    db = c1.b - c2.b
    return math.sqrt(dL * dL + da * da + db * db)


def _hue_prime(b: float, a_prime: float) -> float:
    if a_prime == 0.0 and b == 0.0:
        return 0.0
    return math.degrees(math.atan2(b, a_prime)) % 360.0


def delta_e_2000(c1: LabColor, c2: LabColor,
                 kL: float = 1.0, kC: float = 1.0, kH: float = 1.0) -> float:
    """
    CIEDE2000 colour difference.

    Follows the formulation in Sharma, Wu & Dalal, "The CIEDE2000
    Color-Difference Formula: Implementation Notes, Supplementary Test
    Data, and Mathematical Observations" (2005), including the hue
    wraparound rules for Δh' and the mean hue.
    """
    L1, a1, b1 = c1.L, c1.a, c1.b
    L2, a2, b2 = c2.L, c2.a, c2.b

    # 1) chroma correction of a*
    C1 = math.hypot(a1, b1)
    C2 = math.hypot(a2, b2)
    C_bar7 = ((C1 + C2) / 2.0) ** 7
    G = 0.5 * (1.0 - math.sqrt(C_bar7 / (C_bar7 + _POW25_7)))

    a1p = (1.0 + G) * a1
    a2p = (1.0 + G) * a2
    C1p = math.hypot(a1p, b1)
    C2p = math.hypot(a2p, b2)
    h1p = _hue_prime(b1, a1p)
    h2p = _hue_prime(b2, a2p)

    # 2) differences
    dLp = L2 - L1
    dCp = C2p - C1p

    chroma_product = C1p * C2p
    if chroma_product == 0.0:
        dhp = 0.0
    else:
        dh = h2p - h1p
        if abs(dh) <= 180.0:
            dhp = dh
        elif dh > 180.0:
            dhp = dh - 360.0
        else:
            dhp = dh + 360.0
    dHp = 2.0 * math.sqrt(chroma_product) * math.sin(math.radians(dhp / 2.0))

    # 3) means
    Lbp = (L1 + L2) / 2.0
    Cbp = (C1p + C2p) / 2.0
    if chroma_product == 0.0:
        hbp = h1p + h2p
    elif abs(h1p - h2p) <= 180.0:
        hbp = (h1p + h2p) / 2.0
    elif h1p + h2p < 360.0:
        hbp = (h1p + h2p + 360.0) / 2.0
    else:
        hbp = (h1p + h2p - 360.0) / 2.0

    # 4) weighting functions and rotation term
    T = (1.0
         - 0.17 * math.cos(math.radians(hbp - 30.0))
         + 0.24 * math.cos(math.radians(2.0 * hbp))
         + 0.32 * math.cos(math.radians(3.0 * hbp + 6.0))
         - 0.20 * math.cos(math.radians(4.0 * hbp - 63.0)))
    d_theta = 30.0 * math.exp(-(((hbp - 275.0) / 25.0) ** 2))
    Cbp7 = Cbp ** 7
    R_C = 2.0 * math.sqrt(Cbp7 / (Cbp7 + _POW25_7))
    L50 = (Lbp - 50.0) ** 2
    S_L = 1.0 + (0.015 * L50) / math.sqrt(20.0 + L50)
    S_C = 1.0 + 0.045 * Cbp
    S_H = 1.0 + 0.015 * Cbp * T
    R_T = -math.sin(math.radians(2.0 * d_theta)) * R_C

    tL = dLp / (kL * S_L)
    tC = dCp / (kC * S_C)
    tH = dHp / (kH * S_H)
    return math.sqrt(max(0.0, tL * tL + tC * tC + tH * tH + R_T * tC * tH))
