"""Rule Context — flattens a DomainContext into the profile the rule matcher reads.

Invariants:
    - Keys are canonical snake_case field names (aliases are resolved in rule documents,
      not here); axis numeric values are merged in under their axis names
    - Neutral "any" values become None so absent-field semantics apply in matching
    - Enum members are unwrapped to plain strings; lists become lists of strings
"""

from typing import Any

from dermaplan.core.domain_context import DomainContext
from dermaplan.core.domain_types import ANY, PregnancyStatus, plain

# rule document field aliases -> canonical rule profile keys
RULE_FIELD_ALIASES: dict[str, str] = {
    "skinType": "skin_type",
    "sensitivityLevel": "sensitivity",
    "sensitivity_level": "sensitivity",
    "ageGroup": "age_group",
    "age": "age_group",
    "mainGoals": "main_goals",
    "pregnancyStatus": "pregnancy_status",
    "hasPregnancy": "pregnant",
    "acneLevel": "acne_level",
    "currentTopicals": "current_topicals",
    "routineComplexity": "routine_complexity",
    "budgetSegment": "budget_segment",
}


def canonical_rule_field(name: str) -> str:
    return RULE_FIELD_ALIASES.get(name, name)


def _scalar(value: Any) -> Any:
    value = plain(value)
    return None if value == ANY else value


def build_rule_profile(context: DomainContext) -> dict[str, Any]:
    profile = context.profile
    medical = context.medical
    pregnant = medical.pregnancy_status in (
        PregnancyStatus.PREGNANT, PregnancyStatus.BREASTFEEDING,
    )
    flat: dict[str, Any] = {
        "skin_type": _scalar(profile.skin_type),
        "sensitivity": _scalar(profile.sensitivity),
        "age_group": _scalar(profile.age_group),
        "gender": _scalar(profile.gender),
        "main_goals": [plain(goal) for goal in profile.main_goals],
        "secondary_goals": [plain(goal) for goal in profile.secondary_goals],
        "concerns": [plain(concern) for concern in profile.concerns],
        "diagnoses": list(medical.diagnoses),
        "allergies": list(medical.allergies),
        "contraindications": list(profile.contraindications),
        "current_topicals": [plain(item) for item in profile.current_topicals],
        "pregnancy_status": plain(medical.pregnancy_status),
        "pregnant": pregnant,
        "routine_complexity": _scalar(profile.routine_complexity),
        "budget_segment": _scalar(profile.budget_segment),
        "care_preference": _scalar(profile.care_preference),
        "spf_habit": plain(profile.spf_habit),
        "acne_level": context.answers.acne_level,
    }
    flat.update(context.axis_values())
    return flat
