"""Domain Context — verifies assembly of the immutable read-model.

Tests:
    - Axes come from raw answers only, never from the snapshot
    - Snapshot supplies fields the batch does not carry (pregnancy carried forward)
    - Answer-derived fields override the snapshot
    - Neutral fallbacks when neither source supplies a field
    - Unresolved answer codes become trace warnings; safety flags recorded
    - Scoped axes on topic retake with prior axes; catalog references and primary focus
"""

import pytest

from dermaplan.core.axis_scoring import calculate_skin_axes
from dermaplan.core.domain_context import (
    CatalogRef, ContextMeta, ProductRef, build_domain_context, primary_focus_for,
)
from dermaplan.core.domain_types import (
    ANY, GoalKey, PregnancyStatus, PrimaryFocus, SkinTypeKey,
)
from dermaplan.core.skin_profile import SkinProfile


@pytest.fixture
def meta():
    return ContextMeta(user_id="u1", profile_version=2)


def test_axes_ignore_the_snapshot(meta):
    snapshot = {"skinType": "oily", "concerns": ["acne"]}
    context = build_domain_context(meta, {"skinType": "dry"}, snapshot)
    axes = context.axis_values()
    assert axes["oiliness"] == 20
    assert axes["inflammation"] == 0


def test_snapshot_carries_fields_not_in_batch(meta):
    snapshot = {"skinType": "dry", "pregnancyStatus": "pregnant", "mainGoals": ["barrier"]}
    context = build_domain_context(meta, {"skin_goals": ["acne"]}, snapshot)
    assert context.profile.pregnancy_status == PregnancyStatus.PREGNANT
    assert context.medical.pregnancy_status == PregnancyStatus.PREGNANT
    assert context.profile.skin_type == SkinTypeKey.DRY
    assert context.profile.main_goals == (GoalKey.ACNE,)


def test_snapshot_may_be_a_skin_profile(meta):
    snapshot = SkinProfile(skin_type=SkinTypeKey.NORMAL, main_goals=(GoalKey.PORES,))
    context = build_domain_context(meta, {}, snapshot)
    assert context.profile.skin_type == SkinTypeKey.NORMAL
    assert context.profile.main_goals == (GoalKey.PORES,)


def test_neutral_fallbacks_without_sources(meta):
    context = build_domain_context(meta, {})
    assert context.profile.skin_type == ANY
    assert context.profile.concerns == ()
    assert context.preferences.budget_segment == ANY
    assert context.medical.allergies == ()
    assert len(context.axes) == 6


def test_unresolved_codes_recorded_as_warnings(meta):
    context = build_domain_context(meta, {"mystery_code": "x", "skinType": "oily"})
    assert context.trace.warnings == ("unresolved_answer_code:mystery_code",)


def test_safety_flags(meta):
    context = build_domain_context(meta, {
        "pregnancy_breastfeeding": "breastfeeding",
        "allergies": ["nuts"],
        "current_topicals": ["tretinoin"],
    })
    assert context.trace.flags == ("pregnancy:breastfeeding", "allergies", "active_topicals")


def test_raw_answers_are_read_only(meta):
    context = build_domain_context(meta, {"skinType": "oily"})
    with pytest.raises(TypeError):
        context.raw_answers["skinType"] = "dry"


def test_full_recompute_without_topic(meta):
    previous = calculate_skin_axes({"skinType": "oily"})
    context = build_domain_context(meta, {"skinType": "dry"}, previous_axes=previous)
    assert context.trace.reasons == ("axes:full",)
    assert context.axis_values()["oiliness"] == 20


def test_scoped_recompute_with_topic_and_prior_axes():
    previous = calculate_skin_axes({"concerns": ["acne"], "skinType": "oily"})
    meta = ContextMeta(user_id="u1", topic_id="spf_sun")
    context = build_domain_context(meta, {"spfFrequency": "never"}, previous_axes=previous)
    values = context.axis_values()
    assert context.trace.reasons == ("axes:scoped:spf_sun",)
    assert values["inflammation"] == 50
    assert values["oiliness"] == 90
    assert values["photoaging"] == 25


def test_catalog_from_mappings(meta):
    context = build_domain_context(meta, {}, catalog=[
        {"id": 1, "name": "Gel", "step": "cleanser", "concerns": ["acne"], "skinTypes": ["combo"]},
    ])
    product = context.catalog.products[0]
    assert product.id == "1"
    assert set(product.skin_types) == {SkinTypeKey.COMBINATION_DRY, SkinTypeKey.COMBINATION_OILY}


def test_products_for_focus():
    catalog = CatalogRef((
        ProductRef("a", "Acne gel", "treatment", concerns=("acne",)),
        ProductRef("b", "Plain cream", "moisturizer"),
    ))
    assert [p.id for p in catalog.products_for_focus("acne")] == ["a"]
    assert [p.id for p in catalog.products_for_focus("general")] == ["a", "b"]


def test_primary_focus_from_goals_then_concerns(meta):
    by_goal = build_domain_context(meta, {"skin_goals": ["pigmentation"]})
    assert primary_focus_for(by_goal) == PrimaryFocus.PIGMENTATION
    by_concern = build_domain_context(meta, {"concerns": ["сухость"]})
    assert primary_focus_for(by_concern) == PrimaryFocus.DRYNESS
    assert primary_focus_for(build_domain_context(meta, {})) == PrimaryFocus.GENERAL
