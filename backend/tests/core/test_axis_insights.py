"""Axis Insights — verifies hero actives and avoid lists from axis scores.

Tests:
    - Each threshold triggers its actives; values at the threshold do not
    - Pregnancy removes retinol, keeps peptides, avoids retinoids and salicylic acid
    - Contraindications move ingredients from hero_actives to avoid
    - Deduplication keeps first-suggested order
"""

import pytest

from dermaplan.core.axis_scoring import SkinAxisScore, get_level
from dermaplan.core.axis_insights import derive_axis_insights
from dermaplan.core.domain_types import RETINOID_FAMILY, IngredientKey as I, PregnancyStatus, SkinAxis


def _axes(**values):
    defaults = {"inflammation": 10, "pigmentation": 10, "barrier": 90, "hydration": 10, "photoaging": 10}
    defaults.update(values)
    return [SkinAxisScore(SkinAxis(name), v, get_level(v)) for name, v in defaults.items()]


def test_quiet_axes_suggest_nothing():
    insights = derive_axis_insights(_axes())
    assert insights.hero_actives == ()
    assert insights.avoid == ()


@pytest.mark.parametrize("axis, value, expected", [
    ("inflammation", 66, (I.AZELAIC_ACID, I.NIACINAMIDE)),
    ("pigmentation", 66, (I.TRANEXAMIC_ACID, I.NIACINAMIDE, I.VITAMIN_C)),
    ("barrier", 49, (I.CERAMIDES,)),
    ("hydration", 61, (I.HYALURONIC_ACID,)),
    ("photoaging", 61, (I.RETINOL, I.PEPTIDES)),
])
def test_thresholds(axis, value, expected):
    assert derive_axis_insights(_axes(**{axis: value})).hero_actives == expected


@pytest.mark.parametrize("axis, value", [
    ("inflammation", 65), ("pigmentation", 65), ("barrier", 50),
    ("hydration", 60), ("photoaging", 60),
])
def test_threshold_boundaries_are_exclusive(axis, value):
    assert derive_axis_insights(_axes(**{axis: value})).hero_actives == ()


def test_niacinamide_is_deduplicated():
    insights = derive_axis_insights(_axes(inflammation=80, pigmentation=80))
    assert insights.hero_actives == (
        I.AZELAIC_ACID, I.NIACINAMIDE, I.TRANEXAMIC_ACID, I.VITAMIN_C,
    )


# --- safety ---

@pytest.mark.parametrize("status", [PregnancyStatus.PREGNANT, PregnancyStatus.BREASTFEEDING])
def test_pregnancy_blocks_retinoids(status):
    insights = derive_axis_insights(_axes(photoaging=90), status)
    assert I.RETINOL not in insights.hero_actives
    assert I.PEPTIDES in insights.hero_actives
    assert RETINOID_FAMILY <= set(insights.avoid)
    assert I.SALICYLIC_ACID in insights.avoid


def test_planning_pregnancy_keeps_retinol():
    insights = derive_axis_insights(_axes(photoaging=90), PregnancyStatus.PLANNING)
    assert I.RETINOL in insights.hero_actives


def test_contraindications_filter_heroes():
    insights = derive_axis_insights(
        _axes(inflammation=80), contraindications=["Niacinamide 10%", "unknown stuff"],
    )
    assert insights.hero_actives == (I.AZELAIC_ACID,)
    assert insights.avoid == (I.NIACINAMIDE,)


def test_missing_axes_use_neutral_defaults():
    assert derive_axis_insights([]).hero_actives == ()
