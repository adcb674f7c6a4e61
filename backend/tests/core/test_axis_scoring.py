"""Axis Scoring — verifies contributions, clamping, determinism and the reporting contract.

Tests:
    - Exactly six axes in fixed order, baselines with no answers
    - Inflammation for oily acne with acne level 4 saturates at 100 / critical
    - Dry skin without concerns puts oiliness at 20 / low
    - Per-axis value/level table pins the hydration and barrier inversion
    - Clamping to [0, 100] under extreme inputs; malformed input degrades to baseline
    - Same answers -> identical axis tuple
"""

import pytest

from dermaplan.core.axis_scoring import (
    ScoringInput, axis_value, calculate_skin_axes, get_level,
)
from dermaplan.core.domain_types import AXIS_ORDER, SeverityLevel, SkinAxis


def _by_axis(answers):
    return {score.name: score for score in calculate_skin_axes(answers)}


# --- Shape & baselines ---

def test_returns_six_axes_in_fixed_order():
    axes = calculate_skin_axes({})
    assert [score.name for score in axes] == [axis.value for axis in AXIS_ORDER]


def test_baselines_without_answers():
    axes = _by_axis({})
    assert axes["oiliness"].value == 50
    assert axes["hydration"].value == 0
    assert axes["barrier"].value == 100
    assert axes["inflammation"].value == 0
    assert axes["pigmentation"].value == 0
    assert axes["photoaging"].value == 0


def test_get_level_thresholds():
    assert get_level(0) == SeverityLevel.LOW
    assert get_level(29) == SeverityLevel.LOW
    assert get_level(30) == SeverityLevel.MEDIUM
    assert get_level(54) == SeverityLevel.MEDIUM
    assert get_level(55) == SeverityLevel.HIGH
    assert get_level(79) == SeverityLevel.HIGH
    assert get_level(80) == SeverityLevel.CRITICAL
    assert get_level(100) == SeverityLevel.CRITICAL


# --- Concrete scenarios ---

def test_oily_acne_inflammation_is_critical():
    axes = _by_axis({
        "skinType": "oily",
        "concerns": ["Акне"],
        "diagnoses": ["акне"],
        "acneLevel": 4,
    })
    assert axes["inflammation"].value >= 90
    assert axes["inflammation"].value == 100
    assert axes["inflammation"].level == SeverityLevel.CRITICAL


def test_dry_skin_without_concerns_has_low_oiliness():
    axes = _by_axis({"skinType": "dry"})
    assert axes["oiliness"].value == 20
    assert axes["oiliness"].level == SeverityLevel.LOW


# --- Reporting contract (value vs level per axis) ---

@pytest.mark.parametrize("answers, axis, value, level", [
    # oiliness: direct
    ({"skinType": "oily"}, "oiliness", 90, SeverityLevel.CRITICAL),
    ({"skinType": "combo"}, "oiliness", 75, SeverityLevel.HIGH),
    # hydration: reported as dehydration, value and level both from 100 - raw
    ({}, "hydration", 0, SeverityLevel.LOW),
    ({"skinType": "dry"}, "hydration", 35, SeverityLevel.MEDIUM),
    ({"skinType": "dry", "concerns": ["dryness"]}, "hydration", 75, SeverityLevel.HIGH),
    # barrier: value is raw, level from 100 - raw
    ({}, "barrier", 100, SeverityLevel.LOW),
    ({"concerns": ["sensitivity"]}, "barrier", 70, SeverityLevel.MEDIUM),
    ({"diagnoses": ["atopic dermatitis"], "allergies": ["nuts"]}, "barrier", 25, SeverityLevel.HIGH),
    # inflammation / pigmentation / photoaging: direct
    ({"concerns": ["redness"]}, "inflammation", 25, SeverityLevel.LOW),
    ({"concerns": ["pigmentation"]}, "pigmentation", 50, SeverityLevel.MEDIUM),
    ({"age": "45+", "concerns": ["wrinkles"]}, "photoaging", 85, SeverityLevel.CRITICAL),
])
def test_axis_value_and_level_table(answers, axis, value, level):
    score = _by_axis(answers)[axis]
    assert score.value == value
    assert score.level == level


# --- Individual contributions ---

def test_placeholder_allergy_answer_is_no_evidence():
    assert _by_axis({"allergies": ["нет"]})["barrier"].value == 100


def test_melasma_sets_pigmentation_to_90():
    assert _by_axis({"diagnoses": ["мелазма"]})["pigmentation"].value == 90
    assert _by_axis({
        "diagnoses": ["Мелазма"],
        "concerns": ["Пигментация", "Неровный тон"],
        "habits": ["солнце без SPF"],
    })["pigmentation"].value == 90


def test_high_pigmentation_risk_adds_after_melasma():
    axes = _by_axis({"diagnoses": ["melasma"], "pigmentation_risk": "high"})
    assert axes["pigmentation"].value == 100


def test_uneven_tone_matches_tone_substring():
    assert _by_axis({"concerns": ["тусклый тон"]})["pigmentation"].value == 30


def test_photoaging_age_contributes_half_whenever_given():
    assert _by_axis({"age": 30})["photoaging"].value == 20
    assert _by_axis({"age": "u18"})["photoaging"].value == 5
    assert _by_axis({"age": "unknown"})["photoaging"].value == 5
    assert _by_axis({})["photoaging"].value == 0


def test_spf_never_and_smoking_raise_photoaging():
    axes = _by_axis({"spfFrequency": "never", "habits": ["Smoking"]})
    assert axes["photoaging"].value == 60


def test_seasonality_aliases_feed_the_same_contribution():
    winter = _by_axis({"seasonChange": "winter_drier"})
    legacy = _by_axis({"season_change": "winter_drier"})
    assert winter["hydration"].value == legacy["hydration"].value == 20


def test_high_sensitivity_lowers_barrier():
    assert _by_axis({"sensitivity_level": "very_high"})["barrier"].value == 70


# --- Clamping & robustness ---

def test_values_are_clamped_under_extreme_inputs():
    axes = calculate_skin_axes({
        "skinType": "oily",
        "concerns": ["oily shine", "acne", "redness", "pigmentation", "uneven tone",
                     "wrinkles", "dryness", "sensitivity"],
        "diagnoses": ["acne", "atopic", "melasma"],
        "allergies": ["pollen"],
        "habits": ["sugar", "stress", "sun without spf", "smoking", "poor sleep"],
        "retinol_reaction": "irritation",
        "sensitivity_level": "high",
        "acneLevel": 50,
        "pigmentation_risk": "high",
        "age": "45plus",
        "spfFrequency": "never",
        "seasonChange": "summer_oilier",
    })
    for score in axes:
        assert 0 <= score.value <= 100


def test_malformed_values_degrade_to_baseline():
    axes = _by_axis({"acneLevel": "lots", "skinType": {"foo": 1}, "concerns": None})
    assert axes["inflammation"].value == 0
    assert axes["oiliness"].value == 50


def test_scoring_is_deterministic():
    answers = {"skinType": "combo", "concerns": ["acne", "pigmentation"], "age": 38}
    assert calculate_skin_axes(answers) == calculate_skin_axes(answers)
    assert calculate_skin_axes(ScoringInput.from_mapping(answers)) == calculate_skin_axes(answers)


def test_axis_value_lookup():
    axes = calculate_skin_axes({"skinType": "dry"})
    assert axis_value(axes, SkinAxis.OILINESS) == 20
    assert axis_value(axes, "oiliness") == 20
    assert axis_value((), "oiliness", default=7) == 7
