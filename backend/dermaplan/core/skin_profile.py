"""Skin Profile — normalized profile entity plus medical and preference side-cars.

Invariants:
    - Every enumeration-backed field holds an enum member or a neutral default
      (ANY / NONE / empty tuple), never a raw or legacy string, never None
    - normalize_profile_data() returns only the fields present in its input:
      a partial update never blanks fields it does not mention
    - Lists are tuples, deduplicated, order of first occurrence preserved
    - Free-text lists (diagnoses, contraindications, oral meds) are stripped and lower-cased;
      "no"/"нет"/"none" placeholder answers are dropped

Design Decisions:
    - One field table drives normalization: (aliases, normalizer) per canonical field,
      so snapshots stored as camelCase and snake_case both load (ADR: legacy storage shapes)
    - Medical markers and preferences share the table: a flat snapshot and one with a
      nested "medicalMarkers" object both resolve
    - Frozen dataclasses: the profile is a value, merges produce new instances
"""

from dataclasses import dataclass, fields
from typing import Any, Callable, Mapping

from dermaplan.core.answer_fields import ResolvedAnswers
from dermaplan.core.answer_values import first_text, text_list
from dermaplan.core.concern_taxonomy import normalize_concerns
from dermaplan.core.domain_normalizers import (
    normalize_age_group, normalize_goals, normalize_ingredients,
    normalize_pregnancy_status, normalize_routine_complexity,
    normalize_sensitivity, normalize_skin_type,
)
from dermaplan.core.domain_types import (
    ANY, NONE, AgeGroup, ConcernKey, GoalKey, IngredientKey, PregnancyStatus,
    RoutineComplexity, SensitivityLevel, SkinTypeKey, plain,
)


# --- Entities -----------------------------------------------------------------

@dataclass(frozen=True)
class SkinProfile:
    skin_type: SkinTypeKey | str = ANY
    sensitivity: SensitivityLevel | str = ANY
    main_goals: tuple[GoalKey, ...] = ()
    secondary_goals: tuple[GoalKey, ...] = ()
    concerns: tuple[ConcernKey, ...] = ()
    diagnoses: tuple[str, ...] = ()
    seasonality: str = NONE
    pregnancy_status: PregnancyStatus = PregnancyStatus.NONE
    contraindications: tuple[str, ...] = ()
    current_topicals: tuple[IngredientKey, ...] = ()
    current_oral_meds: tuple[str, ...] = ()
    spf_habit: str = "never"
    makeup_frequency: str = "rarely"
    lifestyle_factors: tuple[str, ...] = ()
    care_preference: str = ANY
    routine_complexity: RoutineComplexity | str = ANY
    budget_segment: str = ANY
    age_group: AgeGroup | str = ANY
    gender: str = ANY

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view with enum members unwrapped."""
        return _to_plain_dict(self)


@dataclass(frozen=True)
class MedicalMarkers:
    diagnoses: tuple[str, ...] = ()
    pregnancy_status: PregnancyStatus = PregnancyStatus.NONE
    allergies: tuple[str, ...] = ()
    gender: str = ANY
    rosacea_risk: str = NONE
    atopy_risk: str = NONE

    def to_dict(self) -> dict[str, Any]:
        return _to_plain_dict(self)


@dataclass(frozen=True)
class Preferences:
    budget_segment: str = ANY
    routine_complexity: RoutineComplexity | str = ANY
    care_preference: str = ANY
    disliked_ingredients: tuple[IngredientKey, ...] = ()
    preferred_textures: tuple[str, ...] = ()
    brand_blacklist: tuple[str, ...] = ()
    brand_whitelist: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return _to_plain_dict(self)


def _to_plain_dict(entity: Any) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for f in fields(entity):
        value = getattr(entity, f.name)
        if isinstance(value, tuple):
            result[f.name] = [plain(item) for item in value]
        else:
            result[f.name] = plain(value)
    return result


# --- Field normalizers --------------------------------------------------------

_PLACEHOLDERS = frozenset({"no", "none", "нет", "false", "-", "ничего"})


def _as_items(value: object) -> list[object]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def _first(value: object) -> object:
    items = _as_items(value)
    return items[0] if items else None


def _text_items(value: object) -> tuple[str, ...]:
    result: list[str] = []
    for item in _as_items(value):
        if item is None:
            continue
        text = " ".join(str(plain(item)).lower().split())
        if text and text not in _PLACEHOLDERS and text not in result:
            result.append(text)
    return tuple(result)


def _text_or(default: str) -> Callable[[object], str]:
    def normalize(value: object) -> str:
        first = _first(value)
        if first is None:
            return default
        text = " ".join(str(plain(first)).lower().split())
        return text or default
    return normalize


def _enum_or(normalizer: Callable[[object], Any], default: Any) -> Callable[[object], Any]:
    def normalize(value: object) -> Any:
        key = normalizer(_first(value))
        return key if key is not None else default
    return normalize


_FieldSpec = tuple[tuple[str, ...], Callable[[object], Any]]

PROFILE_FIELDS: dict[str, _FieldSpec] = {
    "skin_type": (("skin_type", "skinType"), _enum_or(normalize_skin_type, ANY)),
    "sensitivity": (
        ("sensitivity", "sensitivity_level", "sensitivityLevel"),
        _enum_or(normalize_sensitivity, ANY),
    ),
    "main_goals": (("main_goals", "mainGoals"), lambda v: tuple(normalize_goals(_as_items(v)))),
    "secondary_goals": (
        ("secondary_goals", "secondaryGoals"),
        lambda v: tuple(normalize_goals(_as_items(v))),
    ),
    "concerns": (("concerns", "skin_concerns"), lambda v: tuple(normalize_concerns(_as_items(v)))),
    "diagnoses": (("diagnoses",), _text_items),
    "seasonality": (("seasonality",), _text_or(NONE)),
    "pregnancy_status": (
        ("pregnancy_status", "pregnancyStatus"),
        _enum_or(normalize_pregnancy_status, PregnancyStatus.NONE),
    ),
    "contraindications": (("contraindications",), _text_items),
    "current_topicals": (
        ("current_topicals", "currentTopicals"),
        lambda v: tuple(normalize_ingredients(_as_items(v))),
    ),
    "current_oral_meds": (("current_oral_meds", "currentOralMeds"), _text_items),
    "spf_habit": (("spf_habit", "spfHabit"), _text_or("never")),
    "makeup_frequency": (("makeup_frequency", "makeupFrequency"), _text_or("rarely")),
    "lifestyle_factors": (("lifestyle_factors", "lifestyleFactors"), _text_items),
    "care_preference": (("care_preference", "carePreference"), _text_or(ANY)),
    "routine_complexity": (
        ("routine_complexity", "routineComplexity"),
        _enum_or(normalize_routine_complexity, ANY),
    ),
    "budget_segment": (("budget_segment", "budgetSegment"), _text_or(ANY)),
    "age_group": (("age_group", "ageGroup"), _enum_or(normalize_age_group, ANY)),
    "gender": (("gender",), _text_or(ANY)),
    "allergies": (("allergies",), _text_items),
    "rosacea_risk": (("rosacea_risk", "rosaceaRisk"), _text_or(NONE)),
    "atopy_risk": (("atopy_risk", "atopyRisk"), _text_or(NONE)),
    "disliked_ingredients": (
        ("disliked_ingredients", "dislikedIngredients"),
        lambda v: tuple(normalize_ingredients(_as_items(v))),
    ),
    "preferred_textures": (("preferred_textures", "preferredTextures"), _text_items),
    "brand_blacklist": (("brand_blacklist", "brandBlacklist"), _text_items),
    "brand_whitelist": (("brand_whitelist", "brandWhitelist"), _text_items),
}

_NESTED_MARKER_KEYS = ("medical_markers", "medicalMarkers")


def normalize_profile_data(raw: Mapping[str, Any] | None) -> dict[str, Any]:
    """Canonicalize a (possibly partial) profile record; absent fields stay absent."""
    if not raw:
        return {}
    sources: list[Mapping[str, Any]] = [raw]
    for key in _NESTED_MARKER_KEYS:
        nested = raw.get(key)
        if isinstance(nested, Mapping):
            sources.append(nested)
    data: dict[str, Any] = {}
    for name, (aliases, normalize) in PROFILE_FIELDS.items():
        for source in sources:
            present = next((alias for alias in aliases if alias in source), None)
            if present is not None:
                data[name] = normalize(source[present])
                break
    return data


def merge_profile_data(
    prior: Mapping[str, Any] | None, update: Mapping[str, Any],
) -> dict[str, Any]:
    """Overlay normalized update fields onto a prior normalized record."""
    merged = dict(prior or {})
    merged.update(update)
    return merged


def _build(cls: type, data: Mapping[str, Any]) -> Any:
    names = {f.name for f in fields(cls)}
    return cls(**{key: value for key, value in data.items() if key in names})


def build_skin_profile(data: Mapping[str, Any]) -> SkinProfile:
    """Materialize a normalized record; missing fields take neutral defaults."""
    return _build(SkinProfile, data)


def build_medical_markers(data: Mapping[str, Any]) -> MedicalMarkers:
    return _build(MedicalMarkers, data)


def build_preferences(data: Mapping[str, Any]) -> Preferences:
    return _build(Preferences, data)


def profile_from_mapping(raw: Mapping[str, Any] | SkinProfile | None) -> SkinProfile | None:
    """Load a stored snapshot (camelCase or snake_case) into a SkinProfile."""
    if raw is None or isinstance(raw, SkinProfile):
        return raw
    return build_skin_profile(normalize_profile_data(raw))


# --- Answers to profile fields ------------------------------------------------

# profile field <- answer field; True marks list-valued fields
_ANSWER_TO_PROFILE: dict[str, tuple[str, bool]] = {
    "skin_type": ("skin_type", False),
    "sensitivity": ("sensitivity_level", False),
    "main_goals": ("main_goals", True),
    "secondary_goals": ("secondary_goals", True),
    "concerns": ("concerns", True),
    "diagnoses": ("diagnoses", True),
    "seasonality": ("seasonality", False),
    "pregnancy_status": ("pregnancy", False),
    "contraindications": ("avoid_ingredients", True),
    "current_topicals": ("current_topicals", True),
    "current_oral_meds": ("current_oral_meds", True),
    "spf_habit": ("spf_usage", False),
    "makeup_frequency": ("makeup_frequency", False),
    "lifestyle_factors": ("habits", True),
    "care_preference": ("care_preference", False),
    "routine_complexity": ("routine_complexity", False),
    "budget_segment": ("budget", False),
    "age_group": ("age", False),
    "gender": ("gender", False),
    "allergies": ("allergies", True),
}


def profile_fields_from_answers(answers: ResolvedAnswers) -> dict[str, Any]:
    """Raw profile fields carried by an answer batch, keyed by canonical profile field."""
    raw: dict[str, Any] = {}
    for profile_field, (answer_field, is_list) in _ANSWER_TO_PROFILE.items():
        value = answers.get(answer_field)
        if value is None:
            continue
        raw[profile_field] = text_list(value) if is_list else first_text(value)
    return raw


def profile_data_from_answers(answers: ResolvedAnswers) -> dict[str, Any]:
    return normalize_profile_data(profile_fields_from_answers(answers))
