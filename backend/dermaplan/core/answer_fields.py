"""Answer Fields — resolves unstable question codes to canonical field names.

Invariants:
    - Every accepted question code maps to exactly one canonical field
    - Answer keys may be question codes or question ids; ids are translated through
      the caller-supplied question_codes mapping before lookup
    - Unknown codes are reported in ResolvedAnswers.unresolved, never raised
    - When two aliases of the same field are answered, the first one walked wins
    - Values are coerced to AnswerValue exactly once, here

Design Decisions:
    - Explicit alias table over if/elif chains: one place to add a legacy code, and the
      table itself is testable (ADR: legacy, snake_case and camelCase codes coexist in storage)
"""

from dataclasses import dataclass, field
from typing import Mapping

from dermaplan.core.answer_values import AnswerValue, coerce_answer


# ─── Alias Table ─────────────────────────────────────────────────

ANSWER_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "skin_type": ("skin_type", "skinType"),
    "age": ("age", "age_group", "ageGroup"),
    "gender": ("gender",),
    "concerns": ("concerns", "skin_concerns", "skinConcerns"),
    "main_goals": ("skin_goals", "main_goals", "mainGoals", "goals"),
    "secondary_goals": ("secondary_goals", "secondaryGoals"),
    "habits": ("habits", "lifestyle_factors", "lifestyleFactors"),
    "diagnoses": ("diagnoses", "medical_diagnoses", "medicalDiagnoses"),
    "allergies": ("allergies",),
    "seasonality": ("seasonality", "season_change", "seasonChange", "seasonal_changes"),
    "retinol_reaction": ("retinol_reaction", "retinolReaction"),
    "aha_bha_reaction": ("aha_bha_reaction", "ahaBhaReaction"),
    "spf_usage": ("spf_usage", "spf_frequency", "spfFrequency"),
    "sun_exposure": ("sun_exposure", "sunExposure"),
    "sensitivity_level": ("sensitivity_level", "sensitivityLevel", "skin_sensitivity"),
    "acne_level": ("acne_level", "acneLevel"),
    "pigmentation_risk": ("pigmentation_risk", "pigmentationRisk"),
    "pregnancy": ("pregnancy", "pregnant", "has_pregnancy", "pregnancy_breastfeeding"),
    "avoid_ingredients": ("avoid_ingredients", "avoidIngredients"),
    "current_topicals": ("current_topicals", "currentTopicals"),
    "current_oral_meds": ("current_oral_meds", "currentOralMeds"),
    "makeup_frequency": ("makeup_frequency", "makeupFrequency"),
    "budget": ("budget", "budget_segment", "budgetSegment"),
    "care_preference": ("care_preference", "carePreference"),
    "routine_complexity": ("routine_complexity", "routineComplexity"),
    "motivation": ("motivation_questions",),
}

_CODE_TO_FIELD: dict[str, str] = {
    code: field_name
    for field_name, codes in ANSWER_FIELD_ALIASES.items()
    for code in codes
}


def resolve_field(code: str) -> str | None:
    """Canonical field name for a question code, or None if the code is unknown."""
    return _CODE_TO_FIELD.get(code)


@dataclass(frozen=True)
class ResolvedAnswers:
    """Answers keyed by canonical field, plus the codes that could not be resolved."""
    fields: dict[str, AnswerValue] = field(default_factory=dict)
    source_codes: dict[str, str] = field(default_factory=dict)
    unresolved: tuple[str, ...] = ()

    def get(self, field_name: str) -> AnswerValue | None:
        return self.fields.get(field_name)

    def __contains__(self, field_name: str) -> bool:
        return field_name in self.fields


def resolve_answers(
    raw_answers: Mapping[str, object],
    question_codes: Mapping[str, str] | None = None,
) -> ResolvedAnswers:
    """Walk every answer, resolve its question to a field and coerce its value."""
    fields: dict[str, AnswerValue] = {}
    source_codes: dict[str, str] = {}
    unresolved: list[str] = []
    for key, raw in raw_answers.items():
        code = str(key)
        if question_codes is not None:
            code = question_codes.get(code, code)
        field_name = resolve_field(code)
        if field_name is None:
            unresolved.append(code)
            continue
        if field_name in fields:
            continue
        value = coerce_answer(raw)
        if value is None:
            continue
        fields[field_name] = value
        source_codes[field_name] = code
    return ResolvedAnswers(fields, source_codes, tuple(unresolved))
