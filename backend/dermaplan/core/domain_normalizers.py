"""Domain Normalizers — canonicalize free-text and legacy values into closed keys.

Invariants:
    - Every normalizer is null-safe: None, empty or unknown input returns None
      (list normalizers drop such entries), never a guessed "closest" key
    - Enum members pass through unchanged
    - Age groups are half-open buckets: <18, <25, <35, <45, 45+
    - "combo" resolves by context (oiliness > dehydration -> combination_oily, else
      combination_dry); without context it resolves to combination_oily, while
      skin_type_variants() reports both combination variants

Design Decisions:
    - Lookup tables over regex heuristics: each synonym is explicit and testable
    - Unknown skin type returns None, not "normal" (ADR: downstream treats None as "any")
"""

import re
from typing import Iterable

from dermaplan.core.domain_types import (
    AgeGroup, GoalKey, IngredientKey, PregnancyStatus, RoutineComplexity,
    SensitivityLevel, SkinTypeKey, plain,
)


def _text(value: object) -> str:
    if value is None:
        return ""
    return str(plain(value)).strip().lower()


# --- Skin type ----------------------------------------------------------------

_COMBO_TOKENS = frozenset({"combo", "combination", "комбинированная", "смешанная"})

_SKIN_TYPE_SYNONYMS: dict[str, SkinTypeKey] = {
    "dry": SkinTypeKey.DRY,
    "сухая": SkinTypeKey.DRY,
    "sensitive": SkinTypeKey.DRY,
    "чувствительная": SkinTypeKey.DRY,
    "oily": SkinTypeKey.OILY,
    "жирная": SkinTypeKey.OILY,
    "normal": SkinTypeKey.NORMAL,
    "нормальная": SkinTypeKey.NORMAL,
    "combination_dry": SkinTypeKey.COMBINATION_DRY,
    "combo_dry": SkinTypeKey.COMBINATION_DRY,
    "combination_oily": SkinTypeKey.COMBINATION_OILY,
    "combo_oily": SkinTypeKey.COMBINATION_OILY,
}


def normalize_skin_type(
    skin_type: object,
    oiliness: float | None = None,
    dehydration: float | None = None,
) -> SkinTypeKey | None:
    if isinstance(skin_type, SkinTypeKey):
        return skin_type
    text = _text(skin_type)
    if not text:
        return None
    if text in _COMBO_TOKENS:
        if oiliness is None and dehydration is None:
            return SkinTypeKey.COMBINATION_OILY
        if (oiliness or 0) > (dehydration or 0):
            return SkinTypeKey.COMBINATION_OILY
        return SkinTypeKey.COMBINATION_DRY
    return _SKIN_TYPE_SYNONYMS.get(text)


def skin_type_variants(
    skin_type: object,
    oiliness: float | None = None,
    dehydration: float | None = None,
) -> frozenset[SkinTypeKey]:
    """All canonical skin types a raw value may stand for."""
    text = _text(skin_type)
    if text in _COMBO_TOKENS and oiliness is None and dehydration is None:
        return frozenset({SkinTypeKey.COMBINATION_DRY, SkinTypeKey.COMBINATION_OILY})
    key = normalize_skin_type(skin_type, oiliness, dehydration)
    return frozenset({key}) if key is not None else frozenset()


# --- Sensitivity --------------------------------------------------------------

_SENSITIVITY_SYNONYMS: dict[str, SensitivityLevel] = {
    "low": SensitivityLevel.LOW,
    "низкая": SensitivityLevel.LOW,
    "medium": SensitivityLevel.MEDIUM,
    "средняя": SensitivityLevel.MEDIUM,
    "high": SensitivityLevel.HIGH,
    "высокая": SensitivityLevel.HIGH,
    "very_high": SensitivityLevel.VERY_HIGH,
    "very high": SensitivityLevel.VERY_HIGH,
    "very_high_sensitivity": SensitivityLevel.VERY_HIGH,
    "очень высокая": SensitivityLevel.VERY_HIGH,
}


def normalize_sensitivity(sensitivity: object) -> SensitivityLevel | None:
    if isinstance(sensitivity, SensitivityLevel):
        return sensitivity
    return _SENSITIVITY_SYNONYMS.get(_text(sensitivity))


# --- Age group ----------------------------------------------------------------

_LEADING_NUMBER = re.compile(r"^\s*(\d+)")


def _bucket_age(age: float) -> AgeGroup:
    if age < 18:
        return AgeGroup.UNDER_18
    if age < 25:
        return AgeGroup.FROM_18_TO_24
    if age < 35:
        return AgeGroup.FROM_25_TO_34
    if age < 45:
        return AgeGroup.FROM_35_TO_44
    return AgeGroup.FROM_45


def normalize_age_group(age: object) -> AgeGroup | None:
    """Bucket a canonical token, numeric age or range string ("26_30", "35-44", "45+")."""
    if age is None or isinstance(age, bool):
        return None
    if isinstance(age, AgeGroup):
        return age
    if isinstance(age, (int, float)):
        return _bucket_age(age) if age > 0 else None
    text = _text(age)
    if not text:
        return None
    try:
        return AgeGroup(text)
    except ValueError:
        pass
    match = _LEADING_NUMBER.match(text)
    if match is None:
        return None
    age_value = int(match.group(1))
    return _bucket_age(age_value) if age_value > 0 else None


# --- Ingredients --------------------------------------------------------------

_PERCENT_RANGE = re.compile(r"\s*\d+(?:[.,]\d+)?\s*[–\-]\s*\d+(?:[.,]\d+)?\s*%\+?")
_PERCENT = re.compile(r"\s*\d+(?:[.,]\d+)?\s*%\+?")

_INGREDIENT_SYNONYMS: dict[str, IngredientKey] = {
    "retinol": IngredientKey.RETINOL,
    "ретинол": IngredientKey.RETINOL,
    "retinoid": IngredientKey.RETINOID,
    "retinoids": IngredientKey.RETINOID,
    "ретиноид": IngredientKey.RETINOID,
    "ретиноиды": IngredientKey.RETINOID,
    "adapalene": IngredientKey.ADAPALENE,
    "адапален": IngredientKey.ADAPALENE,
    "tretinoin": IngredientKey.TRETINOIN,
    "третиноин": IngredientKey.TRETINOIN,
    "vitamin_c": IngredientKey.VITAMIN_C,
    "vitaminc": IngredientKey.VITAMIN_C,
    "витамин c": IngredientKey.VITAMIN_C,
    "витамин с": IngredientKey.VITAMIN_C,
    "ascorbic_acid": IngredientKey.ASCORBIC_ACID,
    "аскорбиновая кислота": IngredientKey.ASCORBIC_ACID,
    "niacinamide": IngredientKey.NIACINAMIDE,
    "ниацинамид": IngredientKey.NIACINAMIDE,
    "aha": IngredientKey.AHA,
    "aha кислоты": IngredientKey.AHA,
    "bha": IngredientKey.BHA,
    "bha кислоты": IngredientKey.BHA,
    "pha": IngredientKey.PHA,
    "salicylic_acid": IngredientKey.SALICYLIC_ACID,
    "салициловая кислота": IngredientKey.SALICYLIC_ACID,
    "glycolic_acid": IngredientKey.GLYCOLIC_ACID,
    "гликолевая кислота": IngredientKey.GLYCOLIC_ACID,
    "lactic_acid": IngredientKey.LACTIC_ACID,
    "молочная кислота": IngredientKey.LACTIC_ACID,
    "azelaic_acid": IngredientKey.AZELAIC_ACID,
    "азелаиновая кислота": IngredientKey.AZELAIC_ACID,
    "tranexamic_acid": IngredientKey.TRANEXAMIC_ACID,
    "транексамовая кислота": IngredientKey.TRANEXAMIC_ACID,
    "benzoyl_peroxide": IngredientKey.BENZOYL_PEROXIDE,
    "бензоил пероксид": IngredientKey.BENZOYL_PEROXIDE,
    "бензоилпероксид": IngredientKey.BENZOYL_PEROXIDE,
    "peptides": IngredientKey.PEPTIDES,
    "пептиды": IngredientKey.PEPTIDES,
    "ceramides": IngredientKey.CERAMIDES,
    "церамиды": IngredientKey.CERAMIDES,
    "hyaluronic_acid": IngredientKey.HYALURONIC_ACID,
    "гиалуроновая кислота": IngredientKey.HYALURONIC_ACID,
}


def clean_ingredient_name(name: str) -> str:
    """Strip percentages, parenthesized notes and trailing clauses; lower-case."""
    text = _PERCENT_RANGE.sub("", name)
    text = _PERCENT.sub("", text)
    text = text.split("(")[0].split(",")[0]
    return " ".join(text.lower().split())


def normalize_ingredient(name: object) -> IngredientKey | None:
    if isinstance(name, IngredientKey):
        return name
    if name is None:
        return None
    cleaned = clean_ingredient_name(str(plain(name)))
    if not cleaned:
        return None
    for variant in (cleaned, cleaned.replace(" ", "_"), cleaned.replace(" ", "")):
        key = _INGREDIENT_SYNONYMS.get(variant)
        if key is not None:
            return key
    return None


def normalize_ingredients(names: Iterable[object] | None) -> list[IngredientKey]:
    result: list[IngredientKey] = []
    for name in names or ():
        key = normalize_ingredient(name)
        if key is not None and key not in result:
            result.append(key)
    return result


# --- Goals --------------------------------------------------------------------

_GOAL_SYNONYMS: dict[str, GoalKey] = {
    "anti-age": GoalKey.ANTIAGE,
    "anti_age": GoalKey.ANTIAGE,
    "antiaging": GoalKey.ANTIAGE,
    "антиэйдж": GoalKey.ANTIAGE,
    "акне": GoalKey.ACNE,
    "поры": GoalKey.PORES,
    "oiliness": GoalKey.PORES,
    "пигментация": GoalKey.PIGMENTATION,
    "барьер": GoalKey.BARRIER,
    "sensitivity": GoalKey.BARRIER,
    "redness": GoalKey.BARRIER,
    "hydration": GoalKey.DEHYDRATION,
    "dryness": GoalKey.DEHYDRATION,
    "увлажнение": GoalKey.DEHYDRATION,
    "морщины": GoalKey.WRINKLES,
    "тёмные круги": GoalKey.DARK_CIRCLES,
    "темные круги": GoalKey.DARK_CIRCLES,
    "общий уход": GoalKey.GENERAL,
}


def normalize_goal_key(goal: object) -> GoalKey | None:
    if isinstance(goal, GoalKey):
        return goal
    text = _text(goal)
    if not text:
        return None
    try:
        return GoalKey(text)
    except ValueError:
        return _GOAL_SYNONYMS.get(text)


def normalize_goals(goals: Iterable[object] | str | None) -> list[GoalKey]:
    if goals is None:
        return []
    if isinstance(goals, str):
        goals = [goals]
    result: list[GoalKey] = []
    for goal in goals:
        key = normalize_goal_key(goal)
        if key is not None and key not in result:
            result.append(key)
    return result


# --- Pregnancy / routine ------------------------------------------------------

_PREGNANCY_SYNONYMS: dict[str, PregnancyStatus] = {
    "none": PregnancyStatus.NONE,
    "no": PregnancyStatus.NONE,
    "false": PregnancyStatus.NONE,
    "нет": PregnancyStatus.NONE,
    "pregnant": PregnancyStatus.PREGNANT,
    "pregnancy": PregnancyStatus.PREGNANT,
    "yes": PregnancyStatus.PREGNANT,
    "true": PregnancyStatus.PREGNANT,
    "да": PregnancyStatus.PREGNANT,
    "беременна": PregnancyStatus.PREGNANT,
    "беременность": PregnancyStatus.PREGNANT,
    "breastfeeding": PregnancyStatus.BREASTFEEDING,
    "кормлю грудью": PregnancyStatus.BREASTFEEDING,
    "гв": PregnancyStatus.BREASTFEEDING,
    "planning": PregnancyStatus.PLANNING,
    "планирую": PregnancyStatus.PLANNING,
    "планирую беременность": PregnancyStatus.PLANNING,
}


def normalize_pregnancy_status(status: object) -> PregnancyStatus | None:
    if isinstance(status, PregnancyStatus):
        return status
    if isinstance(status, bool):
        return PregnancyStatus.PREGNANT if status else PregnancyStatus.NONE
    return _PREGNANCY_SYNONYMS.get(_text(status))


_ROUTINE_SYNONYMS: dict[str, RoutineComplexity] = {
    "minimal": RoutineComplexity.MINIMAL,
    "минимальный": RoutineComplexity.MINIMAL,
    "medium": RoutineComplexity.MEDIUM,
    "standard": RoutineComplexity.MEDIUM,
    "средний": RoutineComplexity.MEDIUM,
    "maximal": RoutineComplexity.MAXIMAL,
    "advanced": RoutineComplexity.MAXIMAL,
    "максимальный": RoutineComplexity.MAXIMAL,
}


def normalize_routine_complexity(complexity: object) -> RoutineComplexity | None:
    if isinstance(complexity, RoutineComplexity):
        return complexity
    return _ROUTINE_SYNONYMS.get(_text(complexity))
