# src/color_season/quality/frame_quality.py
"""
Frame quality scorer (class-based)
- Decides whether a camera frame is usable for seasonal colour analysis.
- Uses geometry (face size, face position) and image-quality signals
  (brightness, sharpness) over the face region.

Dependencies:
  - numpy, opencv-python

Face geometry is supplied by the caller, never detected here:
  - landmarks: (N, 2) normalized points (x, y in 0..1), preferred
  - face_box:  FaceBox(x, y, width, height), normalized
Without usable geometry the zero score is returned.

Public API:
  scorer = FrameQualityScorer(config=FrameQualityConfig())
  score = scorer.score_frame(bgr_u8, landmarks=pts)          # from pixels
  score = scorer.score(stats, face_box=FaceBox(...))         # from FrameStats
  score.overall, score.is_acceptable_for_analysis, score.feedback_message
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple
import logging
import math

import cv2
import numpy as np

from color_season.preprocessing.frame_stats import FrameStats, compute_frame_stats

logger = logging.getLogger(__name__)


# ------------------------------ Thresholds ----------------------------------------

MINIMUM_QUALITY_SCORE_FOR_ANALYSIS = 0.7
MINIMUM_FACE_SIZE_SCORE_FOR_ANALYSIS = 0.6
MINIMUM_FACE_POSITION_SCORE_FOR_ANALYSIS = 0.7
MINIMUM_BRIGHTNESS_SCORE_FOR_ANALYSIS = 0.6

# feedback-only thresholds
MINIMUM_SHARPNESS_SCORE_FOR_FEEDBACK = 0.5
HOLISTIC_FEEDBACK_BELOW = 0.3
SEVERE_LIGHTING_BELOW = 0.3


@dataclass(frozen=True)
class QualityThresholds:
    overall: float = MINIMUM_QUALITY_SCORE_FOR_ANALYSIS
    face_size: float = MINIMUM_FACE_SIZE_SCORE_FOR_ANALYSIS
    face_position: float = MINIMUM_FACE_POSITION_SCORE_FOR_ANALYSIS
    brightness: float = MINIMUM_BRIGHTNESS_SCORE_FOR_ANALYSIS
    sharpness_feedback: float = MINIMUM_SHARPNESS_SCORE_FOR_FEEDBACK

    def __post_init__(self):
        for name in ("overall", "face_size", "face_position", "brightness", "sharpness_feedback"):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise ValueError(f"{name} threshold must be between 0 and 1")


DEFAULT_THRESHOLDS = QualityThresholds()


# ------------------------------ Feedback messages ---------------------------------

FEEDBACK_POOR_FRAME = "Frame quality is too low. Face the camera in good light"
FEEDBACK_TOO_DARK = "Lighting too dark, please move to a brighter area"
FEEDBACK_TOO_BRIGHT = "Lighting too bright, please reduce direct light"
FEEDBACK_LIGHTING = "Find better lighting"
FEEDBACK_TOO_SMALL = "Move closer to the camera"
FEEDBACK_TOO_LARGE = "Move back from the camera"
FEEDBACK_CENTER = "Center your face in the frame"
FEEDBACK_BLUR = "Hold still to reduce blur"
FEEDBACK_GENERIC = "Improve capture quality"


# ------------------------------ Config --------------------------------------------

@dataclass
class FrameQualityConfig:
    # Weights for the overall score (must sum to 1)
    w_face_size: float = 0.25
    w_face_position: float = 0.25
    w_brightness: float = 0.30
    w_sharpness: float = 0.20

    # Face area as a fraction of the frame
    size_min_ratio: float = 0.05          # below: too small, steep fall-off
    size_ideal_low: float = 0.15
    size_ideal_high: float = 0.35
    size_max_ratio: float = 0.60          # above: too large, steep fall-off

    # Horizontal centring matters more than vertical
    position_x_weight: float = 0.6

    # Mean luma (0..1) of the face region
    luma_dark: float = 0.2
    luma_ideal_low: float = 0.4
    luma_ideal_high: float = 0.7
    luma_bright: float = 0.8

    # Mean |∇luma| treated as "in focus"
    sharpness_reference: float = 0.1

    thresholds: QualityThresholds = field(default_factory=QualityThresholds)

    def __post_init__(self):
        weights = (self.w_face_size, self.w_face_position, self.w_brightness, self.w_sharpness)
        if any(w < 0.0 for w in weights):
            raise ValueError("quality weights must be non-negative")
        if not math.isclose(sum(weights), 1.0, abs_tol=1e-6):
            raise ValueError("quality weights must sum to 1")
        if not (0.0 < self.size_min_ratio < self.size_ideal_low
                <= self.size_ideal_high < self.size_max_ratio < 1.0):
            raise ValueError("face size ratios must be increasing within (0, 1)")
        if not (0.0 < self.luma_dark < self.luma_ideal_low
                <= self.luma_ideal_high < self.luma_bright < 1.0):
            raise ValueError("luma breakpoints must be increasing within (0, 1)")
        if not 0.0 <= self.position_x_weight <= 1.0:
            raise ValueError("position_x_weight must be between 0 and 1")
        if self.sharpness_reference <= 0.0:
            raise ValueError("sharpness_reference must be positive")


# ------------------------------ Values --------------------------------------------

def _clip01(x: float) -> float:
    x = float(x)
    if math.isnan(x):
        return 0.0
    return min(1.0, max(0.0, x))


@dataclass(frozen=True)
class FaceBox:
    """Normalized face rectangle (origin top-left, all values relative to the frame)."""
    x: float
    y: float
    width: float
    height: float

    def is_valid(self) -> bool:
        vals = (self.x, self.y, self.width, self.height)
        return all(math.isfinite(v) for v in vals) and self.width > 0.0 and self.height > 0.0

    def clipped(self) -> Optional["FaceBox"]:
        """Intersection with the unit frame, or None if nothing is left."""
        if not self.is_valid():
            return None
        x0, y0 = max(0.0, self.x), max(0.0, self.y)
        x1, y1 = min(1.0, self.x + self.width), min(1.0, self.y + self.height)
        if x1 <= x0 or y1 <= y0:
            return None
        return FaceBox(x0, y0, x1 - x0, y1 - y0)

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True)
class QualityScore:
    overall: float
    face_size: float
    face_position: float
    brightness: float
    sharpness: float

    # diagnostics (None when not measured)
    face_area_ratio: Optional[float] = None
    mean_luma: Optional[float] = None

    thresholds: QualityThresholds = field(default=DEFAULT_THRESHOLDS, repr=False)

    def __post_init__(self):
        for name in ("overall", "face_size", "face_position", "brightness", "sharpness"):
            object.__setattr__(self, name, _clip01(getattr(self, name)))

    @classmethod
    def zero(cls, thresholds: QualityThresholds = DEFAULT_THRESHOLDS) -> "QualityScore":
        return cls(0.0, 0.0, 0.0, 0.0, 0.0, thresholds=thresholds)

    @property
    def is_acceptable_for_analysis(self) -> bool:
        t = self.thresholds
        return (self.overall >= t.overall and
                self.face_size >= t.face_size and
                self.face_position >= t.face_position and
                self.brightness >= t.brightness)

    @property
    def feedback_message(self) -> Optional[str]:
        """One prioritized hint, or None when the frame is acceptable."""
        if self.is_acceptable_for_analysis:
            return None
        t = self.thresholds

        if self.overall < HOLISTIC_FEEDBACK_BELOW:
            return FEEDBACK_POOR_FRAME

        if self.brightness < t.brightness:
            if self.brightness < SEVERE_LIGHTING_BELOW:
                if self.mean_luma is not None and self.mean_luma > 0.5:
                    return FEEDBACK_TOO_BRIGHT
                return FEEDBACK_TOO_DARK
            return FEEDBACK_LIGHTING

        if self.face_size < t.face_size:
            if self.face_area_ratio is not None and self.face_area_ratio > 0.5:
                return FEEDBACK_TOO_LARGE
            return FEEDBACK_TOO_SMALL

        if self.face_position < t.face_position:
            return FEEDBACK_CENTER

        if self.sharpness < t.sharpness_feedback:
            return FEEDBACK_BLUR

        return FEEDBACK_GENERIC

    def to_dict(self) -> dict:
        return {
            "overall": self.overall,
            "face_size": self.face_size,
            "face_position": self.face_position,
            "brightness": self.brightness,
            "sharpness": self.sharpness,
            "is_acceptable_for_analysis": self.is_acceptable_for_analysis,
            "feedback_message": self.feedback_message,
        }


# ------------------------------ Sub-score curves ----------------------------------

def face_size_score(ratio: float, cfg: FrameQualityConfig) -> float:
    """Face-area ratio -> 0..1. Plateau at 1.0 across the ideal band."""
    r = float(ratio)
    if not math.isfinite(r) or r <= 0.0:
        return 0.0
    if r < cfg.size_min_ratio:
        return _clip01(0.8 * r / cfg.size_min_ratio)
    if r < cfg.size_ideal_low:
        return _clip01(0.8 + 0.2 * (r - cfg.size_min_ratio) / (cfg.size_ideal_low - cfg.size_min_ratio))
    if r <= cfg.size_ideal_high:
        return 1.0
    if r <= cfg.size_max_ratio:
        return _clip01(1.0 - 0.2 * (r - cfg.size_ideal_high) / (cfg.size_max_ratio - cfg.size_ideal_high))
    return _clip01(0.8 * (1.0 - (r - cfg.size_max_ratio) / (1.0 - cfg.size_max_ratio)))


def face_position_score(center: Tuple[float, float], cfg: FrameQualityConfig) -> float:
    """Normalized face centre -> 0..1 (1 = centred, 0 = at a corner)."""
    cx, cy = center
    dx = min(1.0, abs(cx - 0.5) * 2.0)
    dy = min(1.0, abs(cy - 0.5) * 2.0)
    wx = cfg.position_x_weight
    return _clip01(wx * (1.0 - dx) + (1.0 - wx) * (1.0 - dy))


def brightness_score(luma: float, cfg: FrameQualityConfig) -> float:
    """Mean luma -> 0..1, peaking across the ideal band."""
    y = _clip01(luma)
    if y < cfg.luma_dark:
        return _clip01(0.7 * y / cfg.luma_dark)
    if y < cfg.luma_ideal_low:
        return _clip01(0.7 + 0.3 * (y - cfg.luma_dark) / (cfg.luma_ideal_low - cfg.luma_dark))
    if y <= cfg.luma_ideal_high:
        return 1.0
    if y <= cfg.luma_bright:
        return _clip01(0.7 + 0.3 * (cfg.luma_bright - y) / (cfg.luma_bright - cfg.luma_ideal_high))
    return _clip01(0.7 * (1.0 - (y - cfg.luma_bright) / (1.0 - cfg.luma_bright)))


def sharpness_score(gradient_energy: float, cfg: FrameQualityConfig) -> float:
    return _clip01(gradient_energy / cfg.sharpness_reference)


def combine_scores(face_size: float, face_position: float, brightness: float,
                   sharpness: float, cfg: FrameQualityConfig) -> float:
    return _clip01(cfg.w_face_size * face_size +
                   cfg.w_face_position * face_position +
                   cfg.w_brightness * brightness +
                   cfg.w_sharpness * sharpness)


# ------------------------------ Geometry helpers ----------------------------------

def _landmark_array(landmarks) -> Optional[np.ndarray]:
    """(N, 2) float array of finite points clipped to [0,1], or None if < 3 remain."""
    if landmarks is None:
        return None
    try:
        if len(landmarks) and hasattr(landmarks[0], "x"):
            pts = np.array([[p.x, p.y] for p in landmarks], dtype=np.float64)
        else:
            pts = np.asarray(landmarks, dtype=np.float64)
    except (TypeError, ValueError):
        logger.warning("Discarding landmarks that could not be read as points")
        return None

    if pts.ndim != 2 or pts.shape[0] == 0 or pts.shape[1] < 2:
        return None
    pts = pts[:, :2]
    pts = pts[np.isfinite(pts).all(axis=1)]
    if pts.shape[0] < 3:
        return None
    return np.clip(pts, 0.0, 1.0)


def _landmark_geometry(pts: np.ndarray) -> Tuple[float, Tuple[float, float], FaceBox]:
    """Convex-hull area ratio, hull-box centre and bounding box of the points."""
    hull = cv2.convexHull(pts.astype(np.float32))
    area = float(cv2.contourArea(hull))
    x0, y0 = pts.min(axis=0)
    x1, y1 = pts.max(axis=0)
    box = FaceBox(float(x0), float(y0), float(x1 - x0), float(y1 - y0))
    return area, box.center, box


# ------------------------------ Main class ----------------------------------------

class FrameQualityScorer:
    MINIMUM_QUALITY_SCORE_FOR_ANALYSIS = MINIMUM_QUALITY_SCORE_FOR_ANALYSIS
    MINIMUM_FACE_SIZE_SCORE_FOR_ANALYSIS = MINIMUM_FACE_SIZE_SCORE_FOR_ANALYSIS
    MINIMUM_FACE_POSITION_SCORE_FOR_ANALYSIS = MINIMUM_FACE_POSITION_SCORE_FOR_ANALYSIS
    MINIMUM_BRIGHTNESS_SCORE_FOR_ANALYSIS = MINIMUM_BRIGHTNESS_SCORE_FOR_ANALYSIS

    def __init__(self, config: Optional[FrameQualityConfig] = None):
        self.cfg = config or FrameQualityConfig()

    # -------------------- Public entry points --------------------

    def score_frame(self, frame: np.ndarray,
                    landmarks: Optional[Sequence] = None,
                    face_box: Optional[FaceBox] = None,
                    channel_order: str = "bgr") -> QualityScore:
        """Score a frame from its pixels. Statistics are taken over the face region."""
        geometry = self._resolve_geometry(landmarks, face_box)
        if geometry is None:
            return QualityScore.zero(self.cfg.thresholds)

        _, _, box = geometry
        h, w = np.asarray(frame).shape[:2]
        region = (box.x * w, box.y * h, (box.x + box.width) * w, (box.y + box.height) * h)
        stats = compute_frame_stats(frame, region=region, channel_order=channel_order)
        return self._score_geometry(stats, geometry)

    def score(self, stats: FrameStats,
              landmarks: Optional[Sequence] = None,
              face_box: Optional[FaceBox] = None) -> QualityScore:
        """Score from precomputed statistics (already restricted to the face region)."""
        geometry = self._resolve_geometry(landmarks, face_box)
        if geometry is None:
            return QualityScore.zero(self.cfg.thresholds)
        return self._score_geometry(stats, geometry)

    def score_from_subscores(self, face_size: float, face_position: float,
                             brightness: float, sharpness: float) -> QualityScore:
        sub = [_clip01(v) for v in (face_size, face_position, brightness, sharpness)]
        return QualityScore(
            overall=combine_scores(*sub, self.cfg),
            face_size=sub[0],
            face_position=sub[1],
            brightness=sub[2],
            sharpness=sub[3],
            thresholds=self.cfg.thresholds,
        )

    # -------------------- Subroutines --------------------------

    def _resolve_geometry(self, landmarks, face_box) -> Optional[Tuple[float, Tuple[float, float], FaceBox]]:
        pts = _landmark_array(landmarks)
        if pts is not None:
            area, center, box = _landmark_geometry(pts)
            if box.width > 0.0 and box.height > 0.0:
                return area, center, box
            logger.debug("Landmarks are degenerate, falling back to face box")

        if face_box is not None:
            box = face_box.clipped()
            if box is not None:
                return box.area, box.center, box
            logger.debug(f"Discarding unusable face box {face_box}")
        return None

    def _score_geometry(self, stats: FrameStats,
                        geometry: Tuple[float, Tuple[float, float], FaceBox]) -> QualityScore:
        area_ratio, center, _ = geometry

        size = face_size_score(area_ratio, self.cfg)
        position = face_position_score(center, self.cfg)
        bright = brightness_score(stats.mean_luma, self.cfg)
        sharp = sharpness_score(stats.gradient_energy, self.cfg)
        overall = combine_scores(size, position, bright, sharp, self.cfg)

        logger.debug(
            f"quality size={size:.3f} (ratio {area_ratio:.3f}) position={position:.3f} "
            f"brightness={bright:.3f} (luma {stats.mean_luma:.3f}) sharpness={sharp:.3f} "
            f"overall={overall:.3f}"
        )

        return QualityScore(
            overall=overall,
            face_size=size,
            face_position=position,
            brightness=bright,
            sharpness=sharp,
            face_area_ratio=area_ratio,
            mean_luma=stats.mean_luma,
            thresholds=self.cfg.thresholds,
        )
