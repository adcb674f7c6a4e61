"""Axis Scoring Engine — raw answers to six physiological axis scores.

Invariants:
    - calculate_skin_axes() always returns exactly six SkinAxisScore entries in AXIS_ORDER
    - Every value is clamped to [0, 100]; every level is get_level() of the reported value,
      except barrier, whose level is get_level(100 - value)
    - Hydration is reported as dehydration: value = 100 - raw, level = get_level(100 - raw)
    - Barrier keeps value = raw while its level is taken from 100 - raw
    - Missing or malformed inputs contribute nothing (baseline), never raise
    - Same input -> identical output (no clock, no randomness, no IO)

Design Decisions:
    - Each axis is an independent pure function of ScoringInput: axes can be recomputed
      one at a time for topic-scoped retakes (see retake_recalculation)
    - Keyword matching is case-insensitive substring over Russian and English phrases,
      confined to this module; nothing downstream branches on raw answer text
    - Baselines: oiliness 50, hydration 100, barrier 100, others 0 (ADR: neutral = "no evidence")
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping

from dermaplan.core.answer_fields import ResolvedAnswers, resolve_answers
from dermaplan.core.answer_values import as_int, first_text, text_list
from dermaplan.core.domain_normalizers import (
    normalize_age_group, normalize_pregnancy_status, normalize_sensitivity,
    normalize_skin_type,
)
from dermaplan.core.domain_types import (
    AXIS_ORDER, AgeGroup, PregnancyStatus, SensitivityLevel, SeverityLevel,
    SkinAxis, SkinTypeKey, plain,
)


# --- Types --------------------------------------------------------------------

@dataclass(frozen=True)
class SkinAxisScore:
    axis: SkinAxis | str
    value: int
    level: SeverityLevel

    @property
    def name(self) -> str:
        return str(plain(self.axis))


@dataclass(frozen=True)
class ScoringInput:
    """Answer facts the scoring engine reads. Extra answer fields are ignored."""
    skin_type: str | None = None
    age: str | None = None
    concerns: tuple[str, ...] = ()
    diagnoses: tuple[str, ...] = ()
    allergies: tuple[str, ...] = ()
    habits: tuple[str, ...] = ()
    seasonality: str | None = None
    retinol_reaction: str | None = None
    pregnant: bool = False
    spf_usage: str | None = None
    sun_exposure: str | None = None
    sensitivity_level: str | None = None
    acne_level: int = 0
    pigmentation_risk: str | None = None

    @classmethod
    def from_answers(cls, answers: ResolvedAnswers) -> "ScoringInput":
        pregnancy = answers.get("pregnancy")
        status = normalize_pregnancy_status(first_text(pregnancy))
        return cls(
            skin_type=first_text(answers.get("skin_type")),
            age=first_text(answers.get("age")),
            concerns=tuple(text_list(answers.get("concerns"))),
            diagnoses=tuple(text_list(answers.get("diagnoses"))),
            allergies=tuple(_meaningful(text_list(answers.get("allergies")))),
            habits=tuple(text_list(answers.get("habits"))),
            seasonality=first_text(answers.get("seasonality")),
            retinol_reaction=first_text(answers.get("retinol_reaction")),
            pregnant=status in (PregnancyStatus.PREGNANT, PregnancyStatus.BREASTFEEDING),
            spf_usage=first_text(answers.get("spf_usage")),
            sun_exposure=first_text(answers.get("sun_exposure")),
            sensitivity_level=first_text(answers.get("sensitivity_level")),
            acne_level=max(0, as_int(answers.get("acne_level"))),
            pigmentation_risk=first_text(answers.get("pigmentation_risk")),
        )

    @classmethod
    def from_mapping(cls, answers: Mapping[str, object]) -> "ScoringInput":
        """Build from a flat answer record keyed by snake_case or camelCase field names."""
        return cls.from_answers(resolve_answers(answers))


_NEGATIVE_ANSWERS = frozenset({"no", "none", "нет", "false", "-"})


def _meaningful(items: Iterable[str]) -> list[str]:
    return [item for item in items if item.strip().lower() not in _NEGATIVE_ANSWERS]


# --- Levels -------------------------------------------------------------------

def get_level(value: float) -> SeverityLevel:
    if value < 30:
        return SeverityLevel.LOW
    if value < 55:
        return SeverityLevel.MEDIUM
    if value < 80:
        return SeverityLevel.HIGH
    return SeverityLevel.CRITICAL


def _clamp(score: float) -> int:
    return int(max(0, min(100, score)))


def _mentions(items: Iterable[str] | str | None, *keywords: str) -> bool:
    if items is None:
        return False
    if isinstance(items, str):
        items = (items,)
    lowered = [kw.lower() for kw in keywords]
    return any(kw in item.lower() for item in items for kw in lowered)


# --- Keyword groups -----------------------------------------------------------

_OILY_CONCERN = ("жирность", "блеск", "oiliness", "oily", "shine")
_DRY_CONCERN = ("сухость", "стянутость", "dryness", "tightness", "dehydration")
_SENSITIVE_CONCERN = ("чувствительность", "чувствительна", "sensitivity")
_ATOPIC = ("атопический", "атопия", "atopic", "eczema")
_ACNE = ("акне", "высыпания", "acne", "breakouts")
_ACNE_DIAGNOSIS = ("акне", "acne")
_REDNESS = ("покраснения", "покраснение", "redness")
_SUGAR = ("сладкое", "сахар", "sugar")
_STRESS = ("стресс", "stress")
_POOR_SLEEP = ("не высыпаюсь", "мало сплю", "poor sleep", "lack of sleep")
_PIGMENT_CONCERN = ("пигментация", "pigmentation")
_UNEVEN_TONE = ("неровный", "тон", "uneven")
_SUN_NO_SPF = ("солнце без spf", "без защиты", "sun without spf", "no sun protection")
_MELASMA = ("мелазма", "melasma")
_WRINKLES = ("морщины", "wrinkles")
_SMOKING = ("курю", "smok")

_AGE_PHOTOAGING = {
    AgeGroup.FROM_45: 90,
    AgeGroup.FROM_35_TO_44: 70,
    AgeGroup.FROM_25_TO_34: 40,
}


# --- Axes ---------------------------------------------------------------------

def score_oiliness(a: ScoringInput) -> int:
    score = 50
    skin_type = normalize_skin_type(a.skin_type)
    if skin_type == SkinTypeKey.OILY:
        score += 40
    if skin_type == SkinTypeKey.COMBINATION_OILY:
        score += 25
    if skin_type == SkinTypeKey.DRY:
        score -= 30
    if _mentions(a.concerns, *_OILY_CONCERN):
        score += 30
    if _mentions(a.seasonality, "summer_oilier", "лето"):
        score += 15
    return _clamp(score)


def score_hydration(a: ScoringInput) -> int:
    """Raw hydration (100 = fully hydrated); reported inverted by calculate_skin_axes."""
    score = 100
    if _mentions(a.concerns, *_DRY_CONCERN):
        score -= 40
    if normalize_skin_type(a.skin_type) == SkinTypeKey.DRY:
        score -= 35
    if _mentions(a.seasonality, "winter_drier", "зим"):
        score -= 20
    if _mentions(a.habits, *_POOR_SLEEP):
        score -= 15
    return _clamp(score)


def score_barrier(a: ScoringInput) -> int:
    score = 100
    if _mentions(a.concerns, *_SENSITIVE_CONCERN):
        score -= 30
    if _mentions(a.diagnoses, *_ATOPIC):
        score -= 50
    if a.allergies:
        score -= 25
    if _mentions(a.retinol_reaction, "irritation", "раздражение"):
        score -= 30
    if normalize_sensitivity(a.sensitivity_level) in (
        SensitivityLevel.HIGH, SensitivityLevel.VERY_HIGH,
    ):
        score -= 30
    return _clamp(score)


def score_inflammation(a: ScoringInput) -> int:
    score = 0
    if _mentions(a.concerns, *_ACNE):
        score += 50
    if _mentions(a.diagnoses, *_ACNE_DIAGNOSIS):
        score += 40
    if _mentions(a.concerns, *_REDNESS):
        score += 25
    if _mentions(a.habits, *_SUGAR):
        score += 15
    if _mentions(a.habits, *_STRESS):
        score += 20
    score += a.acne_level * 8
    return _clamp(score)


def score_pigmentation(a: ScoringInput) -> int:
    score = 0
    if _mentions(a.concerns, *_PIGMENT_CONCERN):
        score += 50
    if _mentions(a.concerns, *_UNEVEN_TONE):
        score += 30
    if _mentions(a.habits, *_SUN_NO_SPF):
        score += 40
    if _mentions(a.diagnoses, *_MELASMA):
        score = 90
    if (a.pigmentation_risk or "").strip().lower() == "high":
        score += 40
    return _clamp(score)


def score_photoaging(a: ScoringInput) -> int:
    score = 0
    if a.age:
        score += _AGE_PHOTOAGING.get(normalize_age_group(a.age), 10) // 2
    if _mentions(a.concerns, *_WRINKLES):
        score += 40
    if _mentions(a.habits, *_SUN_NO_SPF):
        score += 30
    if _mentions(a.habits, *_SMOKING):
        score += 35
    if _mentions(a.spf_usage, "never", "никогда"):
        score += 25
    return _clamp(score)


# --- Reporting ----------------------------------------------------------------

def _report_direct(raw: int) -> tuple[int, SeverityLevel]:
    return raw, get_level(raw)


def _report_dehydration(raw: int) -> tuple[int, SeverityLevel]:
    return 100 - raw, get_level(100 - raw)


def _report_barrier(raw: int) -> tuple[int, SeverityLevel]:
    return raw, get_level(100 - raw)


@dataclass(frozen=True)
class _AxisDefinition:
    score: Callable[[ScoringInput], int]
    report: Callable[[int], tuple[int, SeverityLevel]] = field(default=_report_direct)


AXIS_DEFINITIONS: dict[SkinAxis, _AxisDefinition] = {
    SkinAxis.OILINESS: _AxisDefinition(score_oiliness),
    SkinAxis.HYDRATION: _AxisDefinition(score_hydration, _report_dehydration),
    SkinAxis.BARRIER: _AxisDefinition(score_barrier, _report_barrier),
    SkinAxis.INFLAMMATION: _AxisDefinition(score_inflammation),
    SkinAxis.PIGMENTATION: _AxisDefinition(score_pigmentation),
    SkinAxis.PHOTOAGING: _AxisDefinition(score_photoaging),
}


def calculate_axis(axis: SkinAxis, answers: ScoringInput) -> SkinAxisScore:
    definition = AXIS_DEFINITIONS[axis]
    value, level = definition.report(definition.score(answers))
    return SkinAxisScore(axis, value, level)


def calculate_skin_axes(
    answers: ScoringInput | Mapping[str, object],
) -> tuple[SkinAxisScore, ...]:
    """Score all six axes. Accepts a ScoringInput or a flat answer mapping."""
    if not isinstance(answers, ScoringInput):
        answers = ScoringInput.from_mapping(answers)
    return tuple(calculate_axis(axis, answers) for axis in AXIS_ORDER)


def axes_by_name(axes: Iterable[SkinAxisScore]) -> dict[str, SkinAxisScore]:
    return {score.name: score for score in axes}


def axis_value(axes: Iterable[SkinAxisScore], axis: SkinAxis | str, default: int = 0) -> int:
    score = axes_by_name(axes).get(str(plain(axis)))
    return score.value if score is not None else default
