import json
import logging

import pytest

from color_season.classify.season_classifier import (
    ClassifierThresholds,
    SeasonClassifier,
    classify_season,
)
from color_season.color.colorspace import LabColor, delta_e, delta_e_2000
from color_season.color.samples import ColorSample
from color_season.palette.seasons import SEASON_REFERENCES, Season


@pytest.fixture
def classifier():
    return SeasonClassifier()


def _grid():
    for L in range(30, 96, 5):
        for a in (-6.0, 4.0, 14.0):
            for b in range(-10, 41, 5):
                yield LabColor(float(L), a, float(b))


# ----------------------- Primary rule -----------------------

@pytest.mark.parametrize("lab, expected", [
    (LabColor(70.0, 0.0, 11.9), Season.SUMMER),
    (LabColor(70.0, 0.0, 12.0), Season.SPRING),
    (LabColor(64.9, 10.0, 20.0), Season.AUTUMN),
    (LabColor(65.0, 5.0, 15.0), Season.SPRING),
    (LabColor(40.0, -2.0, 3.0), Season.WINTER),
])
def test_threshold_boundaries(classifier, lab, expected):
    assert classifier.classify(lab).season is expected


@pytest.mark.parametrize("season", list(Season))
def test_reference_colours_classify_to_their_season(classifier, season):
    ref = SEASON_REFERENCES[season]
    result = classifier.classify(ref)
    assert result.season is season
    assert result.nearest_reference_season is season
    assert result.reference_distances[season] == pytest.approx(0.0, abs=1e-9)
    assert result.next_closest_season is not season


def test_season_depends_only_on_skin(classifier):
    skin = LabColor(72.0, 8.0, 20.0)
    dark_hair = LabColor(15.0, 2.0, 3.0)
    light_hair = LabColor(80.0, 5.0, 30.0)
    assert classifier.classify(skin).season is Season.SPRING
    assert classifier.classify(skin, dark_hair).season is Season.SPRING
    assert classifier.classify(skin, light_hair).season is Season.SPRING


# ----------------------- Next-closest, gap, confidence -----------------------

def test_next_closest_and_gap_over_grid(classifier):
    for lab in _grid():
        result = classifier.classify(lab)
        distances = result.reference_distances
        assert set(distances) == set(Season)

        ordered = sorted(distances.values())
        assert result.delta_e_to_next_closest == pytest.approx(ordered[1] - ordered[0])
        assert result.delta_e_to_next_closest >= 0.0

        assert result.next_closest_season is not result.season
        others = [d for s, d in distances.items() if s is not result.season]
        assert distances[result.next_closest_season] == min(others)

        assert distances[result.nearest_reference_season] == ordered[0]


def test_confidence_formula_and_range(classifier):
    seen_disagreement = False
    for lab in _grid():
        result = classifier.classify(lab)
        gap = result.delta_e_to_next_closest
        expected = gap / (gap + 10.0)
        if result.nearest_reference_season is not result.season:
            expected *= 0.5
            seen_disagreement = True
        assert 0.0 <= result.confidence <= 1.0
        assert result.confidence == pytest.approx(expected)
    assert seen_disagreement


def test_nearest_reference_can_disagree_with_rule(classifier):
    # warm by b*, but much closer to the cool-light reference
    result = classifier.classify(LabColor(65.0, -6.0, 15.0))
    assert result.season is Season.SPRING
    assert result.nearest_reference_season is Season.SUMMER
    assert result.next_closest_season is Season.SUMMER
    gap = result.delta_e_to_next_closest
    assert result.confidence == pytest.approx(0.5 * gap / (gap + 10.0))


def test_classification_is_deterministic(classifier):
    lab = LabColor(63.4, 12.5, 32.7)
    assert classifier.classify(lab).to_dict() == classifier.classify(lab).to_dict()


# ----------------------- Metrics -----------------------

def test_reference_distances_per_metric(classifier):
    lab = LabColor(63.4, 12.5, 32.7)
    cie76 = classifier.reference_distances(lab, metric="cie76")
    cie2000 = classifier.reference_distances(lab, metric="ciede2000")
    for season, ref in SEASON_REFERENCES.items():
        assert cie76[season] == pytest.approx(delta_e(lab, ref))
        assert cie2000[season] == pytest.approx(delta_e_2000(lab, ref))
    assert classifier.reference_distances(lab) == cie2000


def test_unknown_metric_is_rejected(classifier):
    with pytest.raises(ValueError):
        classifier.reference_distances(LabColor(50.0, 0.0, 0.0), metric="cie94")
    with pytest.raises(ValueError):
        ClassifierThresholds(metric="cie94")


def test_cie76_ranking_can_be_selected():
    clf = SeasonClassifier(ClassifierThresholds(metric="cie76"))
    lab = LabColor(58.0, 6.0, 18.0)
    result = clf.classify(lab)
    for season, ref in SEASON_REFERENCES.items():
        assert result.reference_distances[season] == pytest.approx(delta_e(lab, ref))


def test_compare_color_difference_methods(classifier):
    lab = LabColor(68.0, 9.0, 14.0)
    comparison = classifier.compare_color_difference_methods(lab)
    assert list(comparison) == list(Season)
    for season, (d76, d2000) in comparison.items():
        ref = SEASON_REFERENCES[season]
        assert d76 == pytest.approx(delta_e(lab, ref))
        assert d2000 == pytest.approx(delta_e_2000(lab, ref))


def test_custom_references_override_defaults():
    moved = LabColor(50.0, 0.0, 0.0)
    clf = SeasonClassifier(references={Season.WINTER: moved})
    assert clf.references[Season.WINTER] == moved
    assert clf.references[Season.SPRING] == SEASON_REFERENCES[Season.SPRING]
    result = clf.classify(moved)
    assert result.nearest_reference_season is Season.WINTER


# ----------------------- Chroma, contrast, samples -----------------------

@pytest.mark.parametrize("lab, level", [
    (LabColor(60.0, 30.0, 30.0), "bright"),     # chroma ~42.4
    (LabColor(60.0, 10.0, 20.0), "soft"),       # chroma ~22.4
    (LabColor(60.0, 22.0, 30.0), "medium"),     # chroma ~37.2
])
def test_chroma_level(classifier, lab, level):
    assert classifier.classify(lab).chroma_level == level


def test_hair_only_feeds_contrast(classifier):
    skin = LabColor(70.0, 10.0, 20.0)
    assert classifier.classify(skin).contrast is None

    dark = classifier.classify(skin, LabColor(15.0, 1.0, 2.0)).contrast
    close = classifier.classify(skin, LabColor(65.0, 10.0, 20.0)).contrast
    assert 0.0 <= close < dark <= 1.0


def test_classify_samples_uses_lab_of_samples(classifier):
    skin = ColorSample.from_rgb(0.94, 0.78, 0.62)
    hair = ColorSample.from_rgb(0.2, 0.12, 0.08)
    result = classifier.classify_samples(skin, hair)
    assert result.season is Season.SPRING
    assert result.skin_lab == skin.lab
    assert result.hair_lab == hair.lab


def test_module_level_classify_matches_default_instance():
    lab = LabColor(37.6, 12.6, 25.1)
    assert classify_season(lab).to_dict() == SeasonClassifier().classify(lab).to_dict()
    assert classify_season(lab).season is Season.AUTUMN


def test_result_to_dict_is_json_serializable(classifier):
    result = classifier.classify(LabColor(60.0, 8.0, 22.0), LabColor(20.0, 2.0, 5.0))
    data = json.loads(json.dumps(result.to_dict()))
    assert data["season"] == "autumn"
    assert set(data["reference_distances"]) == {"spring", "summer", "autumn", "winter"}
    assert data["skin_lab"] == {"L": 60.0, "a": 8.0, "b": 22.0}
    assert data["hair_lab"]["L"] == 20.0


# ----------------------- Threshold config -----------------------

def test_thresholds_json_roundtrip(tmp_path):
    path = tmp_path / "thresholds.json"
    custom = ClassifierThresholds(warm_cool_threshold=10.0, light_dark_threshold=60.0)
    custom.save_to_json(str(path))
    assert ClassifierThresholds.from_json_file(str(path)) == custom


def test_custom_thresholds_change_the_rule():
    clf = SeasonClassifier(ClassifierThresholds(warm_cool_threshold=10.0, light_dark_threshold=60.0))
    assert clf.classify(LabColor(62.0, 0.0, 11.0)).season is Season.SPRING
    assert SeasonClassifier().classify(LabColor(62.0, 0.0, 11.0)).season is Season.WINTER


def test_unreadable_thresholds_fall_back_to_defaults(tmp_path, caplog):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    with caplog.at_level(logging.WARNING):
        assert ClassifierThresholds.from_json_file(str(bad)) == ClassifierThresholds()
    assert "Failed to load thresholds" in caplog.text

    missing = tmp_path / "missing.json"
    assert ClassifierThresholds.from_json_file(str(missing)) == ClassifierThresholds()


def test_non_object_thresholds_file_falls_back_to_defaults(tmp_path, caplog):
    listed = tmp_path / "list.json"
    listed.write_text("[1, 2]")
    with caplog.at_level(logging.WARNING):
        assert ClassifierThresholds.from_json_file(str(listed)) == ClassifierThresholds()
    assert "Failed to load thresholds" in caplog.text

    with pytest.raises(TypeError):
        ClassifierThresholds.from_dict([1, 2])


def test_unknown_threshold_keys_are_ignored(caplog):
    with caplog.at_level(logging.WARNING):
        t = ClassifierThresholds.from_dict({"warm_cool_threshold": 11.0, "unused": 1})
    assert t.warm_cool_threshold == 11.0
    assert "unused" in caplog.text


@pytest.mark.parametrize("kwargs", [
    {"confidence_scale": 0.0},
    {"disagreement_penalty": 1.5},
    {"soft_threshold": 45.0, "bright_threshold": 40.0},
])
def test_invalid_thresholds(kwargs):
    with pytest.raises(ValueError):
        ClassifierThresholds(**kwargs)


# ----------------------- Seasons -----------------------

def test_season_properties():
    assert Season.from_properties(True, True) is Season.SPRING
    assert Season.from_properties(False, True) is Season.SUMMER
    assert Season.from_properties(True, False) is Season.AUTUMN
    assert Season.from_properties(False, False) is Season.WINTER
    for season in Season:
        assert Season.from_properties(season.is_warm, season.is_light) is season
        assert season.reference == SEASON_REFERENCES[season]
        assert season.description
        assert season.display_name == season.value.capitalize()


def test_season_palettes():
    for season in Season:
        assert len(season.palettes) == 3
        for palette in season.palettes:
            assert len(palette.swatches) == 10
            assert len(palette.rgb) == 10
            assert all(0.0 <= c.L <= 100.0 for c in palette.lab)
