# src/color_season/preprocessing/frame_stats.py
"""
Pixel statistics for frame-quality scoring.

  frame (uint8 or float, gray / 3-ch / 4-ch) → luma in [0,1] (Rec.601)
  → crop to face region → mean luma + mean gradient magnitude

Gradients are central differences (cv2.Sobel with ksize=1), so a perfectly
flat region has zero gradient energy and a hard black/white edge gives 1.0.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np


@dataclass(frozen=True)
class FrameStats:
    width: int
    height: int
    mean_luma: float           # 0..1
    gradient_energy: float     # mean |∇luma|, luma in 0..1


# ----------------------- Helpers -----------------------

_GRAY_CODES = {
    ("bgr", 3): cv2.COLOR_BGR2GRAY,
    ("rgb", 3): cv2.COLOR_RGB2GRAY,
    ("bgr", 4): cv2.COLOR_BGRA2GRAY,
    ("rgb", 4): cv2.COLOR_RGBA2GRAY,
}


def to_luma(frame: np.ndarray, channel_order: str = "bgr") -> np.ndarray:
    """
    Any supported frame -> float32 luma in [0,1].
    uint8 / uint16 frames are scaled by their full range; other integer
    frames hold 8-bit values (clipped to 0..255); float frames are 0..1.
    """
    img = np.asarray(frame)
    if img.dtype in (np.uint8, np.uint16):
        img = img.astype(np.float32) / float(np.iinfo(img.dtype).max)
    elif np.issubdtype(img.dtype, np.integer):
        img = np.clip(img, 0, 255).astype(np.float32) / 255.0
    else:
        img = np.clip(np.nan_to_num(img.astype(np.float32)), 0.0, 1.0)

    if img.ndim == 2:
        return img
    if img.ndim == 3 and img.shape[2] == 1:
        return img[..., 0]
    if img.ndim == 3 and img.shape[2] in (3, 4):
        try:
            code = _GRAY_CODES[(channel_order.lower(), img.shape[2])]
        except KeyError:
            raise ValueError(f"Unsupported channel order {channel_order!r}") from None
        return cv2.cvtColor(img, code)
    raise ValueError(f"Unsupported frame shape {img.shape}")


def clip_region(region: Tuple[float, float, float, float],
                width: int, height: int) -> Optional[Tuple[int, int, int, int]]:
    """Pixel rect (x0, y0, x1, y1) clipped to the frame; None when empty."""
    x0, y0, x1, y1 = region
    x0 = int(max(0, min(width, np.floor(x0))))
    y0 = int(max(0, min(height, np.floor(y0))))
    x1 = int(max(0, min(width, np.ceil(x1))))
    y1 = int(max(0, min(height, np.ceil(y1))))
    if x1 <= x0 or y1 <= y0:
        return None
    return x0, y0, x1, y1


def mean_gradient(luma: np.ndarray) -> float:
    """Mean central-difference gradient magnitude over the interior pixels."""
    if luma.shape[0] < 3 or luma.shape[1] < 3:
        return 0.0
    gx = cv2.Sobel(luma, cv2.CV_32F, 1, 0, ksize=1)
    gy = cv2.Sobel(luma, cv2.CV_32F, 0, 1, ksize=1)
    mag = cv2.magnitude(gx, gy)[1:-1, 1:-1]
    return float(mag.mean())


# ----------------------- Core routine -----------------------

def compute_frame_stats(frame: np.ndarray,
                        region: Optional[Tuple[float, float, float, float]] = None,
                        channel_order: str = "bgr") -> FrameStats:
    """
    Statistics over `region` (pixel rect x0, y0, x1, y1) or the full frame.
    An empty region after clipping falls back to the full frame.
    """
    luma = to_luma(frame, channel_order)
    h, w = luma.shape[:2]

    roi = luma
    if region is not None:
        rect = clip_region(region, w, h)
        if rect is not None:
            x0, y0, x1, y1 = rect
            roi = luma[y0:y1, x0:x1]

    if roi.size == 0:
        return FrameStats(width=w, height=h, mean_luma=0.0, gradient_energy=0.0)

    return FrameStats(
        width=w,
        height=h,
        mean_luma=float(np.clip(roi.mean(), 0.0, 1.0)),
        gradient_energy=mean_gradient(roi),
    )
