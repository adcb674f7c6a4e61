"""Profile Validation — verifies warnings and errors over normalized profile records.

Tests:
    - Complete profile: valid, no issues
    - Absent / "any" fields -> warnings, still valid
    - Present-but-empty main goals -> MAIN_GOALS_EMPTY error, invalid
    - Pregnancy without retinoid/acid contraindication -> warning
"""

from dermaplan.core.domain_types import PregnancyStatus
from dermaplan.core.profile_validation import validate_profile
from dermaplan.core.skin_profile import normalize_profile_data

COMPLETE = {
    "skin_type": "oily",
    "sensitivity": "low",
    "main_goals": ["acne"],
}


def _codes(issues):
    return [issue.code for issue in issues]


def test_complete_profile_is_valid():
    result = validate_profile(COMPLETE)
    assert result.is_valid is True
    assert result.errors == ()
    assert result.warnings == ()


def test_empty_record_only_warns():
    result = validate_profile({})
    assert result.is_valid is True
    assert _codes(result.warnings) == [
        "SKIN_TYPE_MISSING", "SENSITIVITY_MISSING", "MAIN_GOALS_MISSING",
    ]


def test_any_counts_as_missing():
    result = validate_profile({**COMPLETE, "skin_type": "any"})
    assert _codes(result.warnings) == ["SKIN_TYPE_MISSING"]


def test_empty_main_goals_is_an_error():
    result = validate_profile({**COMPLETE, "main_goals": []})
    assert result.is_valid is False
    assert _codes(result.errors) == ["MAIN_GOALS_EMPTY"]
    assert result.errors[0].field == "main_goals"


def test_unrecognized_goals_normalize_to_empty():
    data = normalize_profile_data({"skinType": "oily", "mainGoals": ["world peace"]})
    assert validate_profile(data).is_valid is False


# --- pregnancy ---

def test_pregnancy_without_contraindications_warns():
    result = validate_profile({**COMPLETE, "pregnancy_status": PregnancyStatus.PREGNANT})
    assert _codes(result.warnings) == ["PREGNANCY_CONTRAINDICATIONS_MISSING"]
    assert result.is_valid is True


def test_breastfeeding_with_retinoid_contraindication_is_clean():
    result = validate_profile({
        **COMPLETE,
        "pregnancy_status": "breastfeeding",
        "contraindications": ["Retinol 0.3%"],
    })
    assert result.warnings == ()


def test_acid_marker_satisfies_the_check():
    result = validate_profile({
        **COMPLETE, "pregnancy_status": "pregnant", "contraindications": ["salicylic acid"],
    })
    assert result.warnings == ()


def test_planning_pregnancy_is_not_checked():
    result = validate_profile({**COMPLETE, "pregnancy_status": "planning"})
    assert result.warnings == ()
