"""Care Plan Templates — declarative morning/evening/weekly step skeletons.

Invariants:
    - A template matches iff every populated condition field is satisfied:
      OR within a field, AND across fields; an empty field constrains nothing
    - Skin type is compared through its variant expansion: "combo" without
      oiliness/dehydration context may be either combination variant
    - Templates are tried in declared order; the first match wins
    - default_balanced has empty conditions and is last: every input matches something
    - No match means the template set lacks a catch-all: TemplateConfigurationError
    - Unknown routine complexity is treated as MEDIUM

Design Decisions:
    - Simpler sibling of the rule matcher: no priorities, no numeric ranges
      (ADR: templates ship with the code, rules ship as documents)
    - Conditions hold canonical enum sets only; raw strings are normalized in
      CarePlanInput.from_values() before matching
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from dermaplan.core.domain_context import DomainContext
from dermaplan.core.domain_normalizers import (
    normalize_goals, normalize_routine_complexity, normalize_sensitivity,
    skin_type_variants,
)
from dermaplan.core.domain_types import (
    GoalKey, RoutineComplexity, SensitivityLevel, SkinAxis, SkinTypeKey,
)
from dermaplan.core.errors import TemplateConfigurationError

DEFAULT_TEMPLATE_ID = "default_balanced"


@dataclass(frozen=True)
class TemplateConditions:
    skin_types: frozenset[SkinTypeKey] = frozenset()
    main_goals: frozenset[GoalKey] = frozenset()
    sensitivity_levels: frozenset[SensitivityLevel] = frozenset()
    routine_complexity: frozenset[RoutineComplexity] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not (
            self.skin_types or self.main_goals
            or self.sensitivity_levels or self.routine_complexity
        )


@dataclass(frozen=True)
class CarePlanTemplate:
    id: str
    conditions: TemplateConditions
    morning_steps: tuple[str, ...]
    evening_steps: tuple[str, ...]
    weekly_steps: tuple[str, ...] = ()


@dataclass(frozen=True)
class CarePlanInput:
    skin_types: frozenset[SkinTypeKey] = frozenset()
    main_goals: frozenset[GoalKey] = frozenset()
    sensitivity: SensitivityLevel | None = None
    routine_complexity: RoutineComplexity = RoutineComplexity.MEDIUM

    @classmethod
    def from_values(
        cls,
        skin_type: object = None,
        main_goals: Iterable[object] | None = None,
        sensitivity: object = None,
        routine_complexity: object = None,
        oiliness: float | None = None,
        dehydration: float | None = None,
    ) -> "CarePlanInput":
        return cls(
            skin_types=skin_type_variants(skin_type, oiliness, dehydration),
            main_goals=frozenset(normalize_goals(list(main_goals or ()))),
            sensitivity=normalize_sensitivity(sensitivity),
            routine_complexity=(
                normalize_routine_complexity(routine_complexity) or RoutineComplexity.MEDIUM
            ),
        )

    @classmethod
    def from_mapping(cls, profile: Mapping[str, Any]) -> "CarePlanInput":
        """Accepts camelCase or snake_case profile keys."""
        def pick(*keys: str) -> Any:
            return next((profile[k] for k in keys if k in profile), None)

        return cls.from_values(
            skin_type=pick("skin_type", "skinType"),
            main_goals=pick("main_goals", "mainGoals"),
            sensitivity=pick("sensitivity", "sensitivity_level", "sensitivityLevel"),
            routine_complexity=pick("routine_complexity", "routineComplexity"),
        )


def _template(
    template_id: str,
    morning: Sequence[str],
    evening: Sequence[str],
    weekly: Sequence[str] = (),
    **conditions: Iterable[Any],
) -> CarePlanTemplate:
    return CarePlanTemplate(
        id=template_id,
        conditions=TemplateConditions(**{k: frozenset(v) for k, v in conditions.items()}),
        morning_steps=tuple(morning),
        evening_steps=tuple(evening),
        weekly_steps=tuple(weekly),
    )


_MEDIUM_OR_MAXIMAL = (RoutineComplexity.MEDIUM, RoutineComplexity.MAXIMAL)

CARE_PLAN_TEMPLATES: tuple[CarePlanTemplate, ...] = (
    _template(
        "acne_oily_basic",
        morning=("cleanser_balancing", "serum_niacinamide", "moisturizer_balancing", "spf_50_oily"),
        evening=("cleanser_balancing", "treatment_acne_azelaic", "moisturizer_balancing"),
        weekly=("mask_clay",),
        skin_types=(SkinTypeKey.OILY, SkinTypeKey.COMBINATION_OILY),
        main_goals=(GoalKey.ACNE,),
        routine_complexity=_MEDIUM_OR_MAXIMAL,
    ),
    _template(
        "dry_sensitive_barrier",
        morning=("cleanser_gentle", "serum_hydrating", "moisturizer_barrier", "spf_50_sensitive"),
        evening=("cleanser_gentle", "moisturizer_barrier"),
        weekly=("mask_soothing",),
        skin_types=(SkinTypeKey.DRY, SkinTypeKey.COMBINATION_DRY, SkinTypeKey.NORMAL),
        main_goals=(GoalKey.BARRIER, GoalKey.DEHYDRATION),
        sensitivity_levels=(
            SensitivityLevel.MEDIUM, SensitivityLevel.HIGH, SensitivityLevel.VERY_HIGH,
        ),
        routine_complexity=_MEDIUM_OR_MAXIMAL,
    ),
    _template(
        "pigmentation_focus",
        morning=("cleanser_gentle", "serum_vitc", "spf_50_face"),
        evening=("cleanser_gentle", "treatment_pigmentation", "moisturizer_light"),
        weekly=("mask_hydrating",),
        main_goals=(GoalKey.PIGMENTATION,),
        routine_complexity=_MEDIUM_OR_MAXIMAL,
    ),
    _template(
        "minimalist_any_skin",
        morning=("cleanser_gentle", "spf_50_face"),
        evening=("cleanser_gentle", "moisturizer_light"),
        routine_complexity=(RoutineComplexity.MINIMAL,),
    ),
    _template(
        DEFAULT_TEMPLATE_ID,
        morning=("cleanser_gentle", "serum_hydrating", "moisturizer_light", "spf_50_face"),
        evening=("cleanser_gentle", "treatment_antiage", "moisturizer_light"),
    ),
)


def template_matches(template: CarePlanTemplate, profile: CarePlanInput) -> bool:
    cond = template.conditions
    if cond.skin_types and not (cond.skin_types & profile.skin_types):
        return False
    if cond.main_goals and not (cond.main_goals & profile.main_goals):
        return False
    if cond.sensitivity_levels and profile.sensitivity not in cond.sensitivity_levels:
        return False
    if cond.routine_complexity and profile.routine_complexity not in cond.routine_complexity:
        return False
    return True


def select_care_plan_template(
    profile: CarePlanInput | Mapping[str, Any],
    templates: Sequence[CarePlanTemplate] = CARE_PLAN_TEMPLATES,
) -> CarePlanTemplate:
    if not isinstance(profile, CarePlanInput):
        profile = CarePlanInput.from_mapping(profile)
    for template in templates:
        if template_matches(template, profile):
            return template
    raise TemplateConfigurationError(
        f"No care plan template matched and no catch-all is configured "
        f"(templates: {', '.join(t.id for t in templates) or 'none'})",
    )


def ensure_catch_all(templates: Sequence[CarePlanTemplate]) -> None:
    """Raise unless the last template has empty conditions."""
    if not templates or not templates[-1].conditions.is_empty:
        raise TemplateConfigurationError(
            "Care plan templates must end with a catch-all template with empty conditions",
        )


def care_plan_input_from_context(context: DomainContext) -> CarePlanInput:
    """Build template input from a DomainContext; raw skin type is resolved with axis context."""
    axes = context.axis_values()
    raw_skin_type = context.answers.skin_type or context.profile.skin_type
    return CarePlanInput.from_values(
        skin_type=raw_skin_type,
        main_goals=context.profile.main_goals,
        sensitivity=context.profile.sensitivity,
        routine_complexity=context.profile.routine_complexity,
        oiliness=axes.get(SkinAxis.OILINESS.value),
        dehydration=axes.get(SkinAxis.HYDRATION.value),
    )
