"""Skin Profile — verifies normalization, merging and materialization of profile records.

Tests:
    - normalize_profile_data keeps only provided fields (partial updates never blank)
    - camelCase and snake_case snapshots load identically; nested medicalMarkers resolve
    - Unknown enum text degrades to the neutral default, never None
    - Placeholder answers ("нет") are dropped from free-text lists
    - profile_fields_from_answers maps answer fields to profile fields
"""

from dermaplan.core.answer_fields import resolve_answers
from dermaplan.core.domain_types import (
    ANY, ConcernKey, GoalKey, IngredientKey, PregnancyStatus, SensitivityLevel, SkinTypeKey,
)
from dermaplan.core.skin_profile import (
    MedicalMarkers, SkinProfile, build_medical_markers, build_preferences,
    build_skin_profile, merge_profile_data, normalize_profile_data,
    profile_data_from_answers, profile_fields_from_answers, profile_from_mapping,
)


# --- defaults ---

def test_default_profile_uses_neutral_values():
    profile = SkinProfile()
    assert profile.skin_type == ANY
    assert profile.pregnancy_status == PregnancyStatus.NONE
    assert profile.main_goals == ()
    assert profile.spf_habit == "never"


def test_to_dict_unwraps_enums():
    profile = SkinProfile(skin_type=SkinTypeKey.OILY, main_goals=(GoalKey.ACNE,))
    data = profile.to_dict()
    assert data["skin_type"] == "oily"
    assert data["main_goals"] == ["acne"]


# --- normalize_profile_data ---

def test_only_provided_fields_are_present():
    data = normalize_profile_data({"skinType": "oily"})
    assert data == {"skin_type": SkinTypeKey.OILY}


def test_camel_and_snake_case_load_identically():
    camel = normalize_profile_data({
        "skinType": "dry", "sensitivityLevel": "high", "mainGoals": ["acne"],
        "pregnancyStatus": "pregnant",
    })
    snake = normalize_profile_data({
        "skin_type": "dry", "sensitivity": "high", "main_goals": ["acne"],
        "pregnancy_status": "pregnant",
    })
    assert camel == snake
    assert camel["sensitivity"] == SensitivityLevel.HIGH


def test_nested_medical_markers_resolve():
    data = normalize_profile_data({
        "skinType": "oily",
        "medicalMarkers": {"allergies": ["Pollen"], "pregnancyStatus": "breastfeeding"},
    })
    markers = build_medical_markers(data)
    assert markers.allergies == ("pollen",)
    assert markers.pregnancy_status == PregnancyStatus.BREASTFEEDING


def test_unknown_enum_text_becomes_neutral_default():
    data = normalize_profile_data({"skin_type": "purple", "pregnancy_status": "maybe"})
    assert data["skin_type"] == ANY
    assert data["pregnancy_status"] == PregnancyStatus.NONE


def test_placeholders_dropped_from_text_lists():
    data = normalize_profile_data({"diagnoses": ["нет"], "contraindications": ["Retinol", "none"]})
    assert data["diagnoses"] == ()
    assert data["contraindications"] == ("retinol",)


def test_lists_are_deduplicated_tuples():
    data = normalize_profile_data({"concerns": ["acne", "Акне", "pores"]})
    assert data["concerns"] == (ConcernKey.ACNE, ConcernKey.PORES)


def test_empty_input():
    assert normalize_profile_data(None) == {}
    assert normalize_profile_data({}) == {}


# --- merge / build ---

def test_merge_overlays_update_on_prior():
    prior = normalize_profile_data({"skinType": "dry", "pregnancyStatus": "pregnant"})
    update = normalize_profile_data({"skinType": "oily"})
    merged = merge_profile_data(prior, update)
    assert merged["skin_type"] == SkinTypeKey.OILY
    assert merged["pregnancy_status"] == PregnancyStatus.PREGNANT


def test_build_fills_missing_fields_with_defaults():
    profile = build_skin_profile({"skin_type": SkinTypeKey.NORMAL, "allergies": ("x",)})
    assert profile.skin_type == SkinTypeKey.NORMAL
    assert profile.sensitivity == ANY
    assert build_preferences({}).budget_segment == ANY
    assert build_medical_markers({}) == MedicalMarkers()


def test_profile_from_mapping():
    assert profile_from_mapping(None) is None
    profile = profile_from_mapping({"skinType": "combo", "currentTopicals": ["Adapalene 0.1%"]})
    assert profile.skin_type == SkinTypeKey.COMBINATION_OILY
    assert profile.current_topicals == (IngredientKey.ADAPALENE,)
    assert profile_from_mapping(profile) is profile


# --- answers to profile ---

def test_profile_fields_from_answers():
    resolved = resolve_answers({
        "skinType": "oily",
        "skin_goals": ["acne", "pores"],
        "pregnancy_breastfeeding": "нет",
        "avoid_ingredients": ["retinol"],
        "spf_frequency": "daily",
    })
    raw = profile_fields_from_answers(resolved)
    assert raw["skin_type"] == "oily"
    assert raw["main_goals"] == ["acne", "pores"]
    assert raw["pregnancy_status"] == "нет"
    assert raw["contraindications"] == ["retinol"]
    assert raw["spf_habit"] == "daily"
    assert "sensitivity" not in raw


def test_profile_data_from_answers_is_normalized():
    data = profile_data_from_answers(resolve_answers({"skin_goals": ["Anti-Age"], "age": 41}))
    assert data["main_goals"] == (GoalKey.ANTIAGE,)
    assert data["age_group"].value == "35_44"
