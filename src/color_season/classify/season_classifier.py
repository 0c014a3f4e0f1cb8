# src/color_season/classify/season_classifier.py
"""
Rule-based classifier for the four macro seasons.

Primary rule (skin colour, Lab):
  warm  = b* >= warm_cool_threshold   (12.0)
  light = L* >= light_dark_threshold  (65.0)
  spring = warm & light, summer = cool & light,
  autumn = warm & dark,  winter = cool & dark

Distances to each season's reference skin tone are computed alongside the
rule. They give the nearest alternative season, the ΔE gap to it, and the
confidence. The rule alone decides the season.

Public API:
  clf = SeasonClassifier()
  result = clf.classify(skin_lab, hair_lab=None)
  result.season, result.confidence, result.next_closest_season, ...
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Dict, Optional, Tuple, List, Any
import json
import logging

from color_season.color.colorspace import LabColor, delta_e, delta_e_2000
from color_season.color.contrast import feature_contrast
from color_season.color.samples import ColorSample
from color_season.palette.seasons import Season, SEASON_REFERENCES

logger = logging.getLogger(__name__)

METRICS = {
    "cie76": delta_e,
    "ciede2000": delta_e_2000,
}

SEASON_ORDER: Tuple[Season, ...] = tuple(Season)


# ------------------------------ Config --------------------------------------------

@dataclass
class ClassifierThresholds:
    warm_cool_threshold: float = 12.0     # b*: >= warm, < cool
    light_dark_threshold: float = 65.0    # L*: >= light, < dark
    bright_threshold: float = 40.0        # chroma: >= bright
    soft_threshold: float = 35.0          # chroma: <= soft, in between = medium

    # Confidence: gap / (gap + scale), penalised when the nearest reference
    # disagrees with the rule
    confidence_scale: float = 10.0
    disagreement_penalty: float = 0.5

    metric: str = "ciede2000"

    def __post_init__(self):
        if self.metric not in METRICS:
            raise ValueError(f"Unknown distance metric '{self.metric}'")
        if self.confidence_scale <= 0.0:
            raise ValueError("confidence_scale must be positive")
        if not 0.0 <= self.disagreement_penalty <= 1.0:
            raise ValueError("disagreement_penalty must be between 0 and 1")
        if self.soft_threshold > self.bright_threshold:
            raise ValueError("soft_threshold must not exceed bright_threshold")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "ClassifierThresholds":
        if not isinstance(config_dict, dict):
            raise TypeError(f"Thresholds must be a JSON object, got {type(config_dict).__name__}")
        known = {k: v for k, v in config_dict.items() if k in cls.__dataclass_fields__}
        ignored = sorted(set(config_dict) - set(known))
        if ignored:
            logger.warning(f"Ignoring unknown threshold keys: {ignored}")
        return cls(**known)

    @classmethod
    def from_json_file(cls, filepath: str) -> "ClassifierThresholds":
        """Load thresholds from a JSON file; defaults are used if it cannot be read."""
        try:
            with open(filepath, "r") as f:
                config_dict = json.load(f)
            return cls.from_dict(config_dict)
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Failed to load thresholds from {filepath}: {e}")
            logger.info("Using default thresholds")
            return cls()

    def save_to_json(self, filepath: str):
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Thresholds saved to {filepath}")


# ------------------------------ Result --------------------------------------------

@dataclass(frozen=True)
class ClassificationResult:
    """
    delta_e_to_next_closest is always the gap between the two smallest
    reference distances. When the nearest reference is not `season`, that
    nearest reference is `next_closest_season` and the gap is measured
    from it to the runner-up, not from `season`.
    """
    season: Season
    confidence: float
    delta_e_to_next_closest: float
    next_closest_season: Season
    skin_lab: LabColor
    hair_lab: Optional[LabColor] = None

    # diagnostics
    nearest_reference_season: Optional[Season] = None
    reference_distances: Dict[Season, float] = field(default_factory=dict)
    chroma_level: str = "medium"
    contrast: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "season": self.season.value,
            "confidence": self.confidence,
            "delta_e_to_next_closest": self.delta_e_to_next_closest,
            "next_closest_season": self.next_closest_season.value,
            "skin_lab": self.skin_lab.to_dict(),
            "hair_lab": self.hair_lab.to_dict() if self.hair_lab else None,
            "nearest_reference_season": (self.nearest_reference_season.value
                                         if self.nearest_reference_season else None),
            "reference_distances": {s.value: d for s, d in self.reference_distances.items()},
            "chroma_level": self.chroma_level,
            "contrast": self.contrast,
        }


# ------------------------------ Classifier ----------------------------------------

class SeasonClassifier:
    """
    Stateless apart from its configuration; safe to share between threads.
    """

    def __init__(self,
                 thresholds: Optional[ClassifierThresholds] = None,
                 references: Optional[Dict[Season, LabColor]] = None):
        self.thresholds = thresholds or ClassifierThresholds()
        refs = dict(SEASON_REFERENCES)
        if references:
            refs.update(references)
        self.references: Dict[Season, LabColor] = refs

    # -------------------- Primary rule --------------------------

    def is_warm(self, lab: LabColor) -> bool:
        return lab.b >= self.thresholds.warm_cool_threshold

    def is_light(self, lab: LabColor) -> bool:
        return lab.L >= self.thresholds.light_dark_threshold

    def bucket(self, lab: LabColor) -> Season:
        return Season.from_properties(self.is_warm(lab), self.is_light(lab))

    def chroma_level(self, lab: LabColor) -> str:
        chroma = lab.chroma
        if chroma >= self.thresholds.bright_threshold:
            return "bright"
        if chroma <= self.thresholds.soft_threshold:
            return "soft"
        return "medium"

    # -------------------- Reference distances -------------------

    def reference_distances(self, lab: LabColor, metric: Optional[str] = None) -> Dict[Season, float]:
        """ΔE from `lab` to each season's reference colour."""
        name = metric or self.thresholds.metric
        try:
            fn = METRICS[name]
        except KeyError:
            raise ValueError(f"Unknown distance metric '{name}'") from None
        return {season: fn(lab, self.references[season]) for season in SEASON_ORDER}

    def compare_color_difference_methods(self, lab: LabColor) -> Dict[Season, Tuple[float, float]]:
        """
        Per season: (CIE76, CIEDE2000) distance to the reference.
        The two metrics may rank seasons differently near category boundaries.
        """
        return {
            season: (delta_e(lab, ref), delta_e_2000(lab, ref))
            for season, ref in ((s, self.references[s]) for s in SEASON_ORDER)
        }

    @staticmethod
    def _ranked(distances: Dict[Season, float]) -> List[Tuple[Season, float]]:
        # stable sort keeps SEASON_ORDER for ties
        return sorted(((s, distances[s]) for s in SEASON_ORDER), key=lambda item: item[1])

    def _confidence(self, gap: float, agrees: bool) -> float:
        conf = gap / (gap + self.thresholds.confidence_scale)
        if not agrees:
            conf *= self.thresholds.disagreement_penalty
        return float(min(1.0, max(0.0, conf)))

    # -------------------- Public entry points -------------------

    def classify(self, skin_lab: LabColor, hair_lab: Optional[LabColor] = None) -> ClassificationResult:
        season = self.bucket(skin_lab)

        distances = self.reference_distances(skin_lab)
        ranked = self._ranked(distances)
        nearest, nearest_de = ranked[0]
        gap = max(0.0, ranked[1][1] - nearest_de)

        next_closest = next(s for s, _ in ranked if s is not season)
        confidence = self._confidence(gap, agrees=(nearest is season))

        contrast = feature_contrast(skin_lab, hair_lab) if hair_lab is not None else None

        logger.debug(
            f"classify L={skin_lab.L:.2f} a={skin_lab.a:.2f} b={skin_lab.b:.2f} -> {season.value} "
            f"(nearest ref {nearest.value}, next {next_closest.value}, gap {gap:.3f}, conf {confidence:.3f})"
        )

        return ClassificationResult(
            season=season,
            confidence=confidence,
            delta_e_to_next_closest=gap,
            next_closest_season=next_closest,
            skin_lab=skin_lab,
            hair_lab=hair_lab,
            nearest_reference_season=nearest,
            reference_distances=distances,
            chroma_level=self.chroma_level(skin_lab),
            contrast=contrast,
        )

    def classify_samples(self, skin: ColorSample, hair: Optional[ColorSample] = None) -> ClassificationResult:
        return self.classify(skin.lab, hair.lab if hair is not None else None)


def classify_season(skin_lab: LabColor, hair_lab: Optional[LabColor] = None) -> ClassificationResult:
    """Classify with the default thresholds and references."""
    return _DEFAULT_CLASSIFIER.classify(skin_lab, hair_lab)


_DEFAULT_CLASSIFIER = SeasonClassifier()
