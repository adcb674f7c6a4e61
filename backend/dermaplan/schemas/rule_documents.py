"""Rule Documents — Pydantic models for recommendation rule and care plan template documents.

Invariants:
    - Condition values parse into the closed condition union:
      list -> in, {gte, lte} -> range, {hasSome: [...]} -> hasSome, scalar -> equals
    - Unknown object shapes, empty lists, non-numeric or inverted ranges are rejected
    - Enumeration-backed fields (skin_type, sensitivity, age_group, main_goals, concerns,
      pregnancy_status, routine_complexity, current_topicals) accept canonical values only
    - Field aliases in conditions (skinType, sensitivityLevel, ...) are canonicalized
    - Documents accept camelCase storage keys (conditionsJson, stepsJson, isActive)

Design Decisions:
    - Validation at load time over match time: a bad document fails the deploy, not a
      user request (ADR: rules are JSON documents edited outside the codebase)
    - to_rule()/to_template() return frozen core types; core never sees pydantic models
"""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from dermaplan.core.care_plan_templates import CarePlanTemplate, TemplateConditions
from dermaplan.core.domain_types import (
    AgeGroup, ConcernKey, GoalKey, IngredientKey, PregnancyStatus,
    RoutineComplexity, SensitivityLevel, SkinTypeKey,
)
from dermaplan.core.rule_context import canonical_rule_field
from dermaplan.core.rule_matching import (
    EqualsCondition, HasSomeCondition, InCondition, RangeCondition,
    RecommendationRule, RuleCondition, StepSpec,
)

# canonical rule field -> enumeration its values must belong to
ENUM_BACKED_FIELDS: dict[str, type[Enum]] = {
    "skin_type": SkinTypeKey,
    "sensitivity": SensitivityLevel,
    "age_group": AgeGroup,
    "main_goals": GoalKey,
    "secondary_goals": GoalKey,
    "concerns": ConcernKey,
    "pregnancy_status": PregnancyStatus,
    "routine_complexity": RoutineComplexity,
    "current_topicals": IngredientKey,
}

_RANGE_KEYS = frozenset({"gte", "lte"})
_HAS_SOME_KEYS = ("hasSome", "has_some")


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_enum_values(field_name: str, values: list[Any]) -> None:
    enum_type = ENUM_BACKED_FIELDS.get(field_name)
    if enum_type is None:
        return
    allowed = {member.value for member in enum_type}
    invalid = [v for v in values if v is not None and v not in allowed]
    if invalid:
        raise ValueError(
            f"condition '{field_name}' has non-canonical values {invalid!r}; "
            f"allowed: {sorted(allowed)}"
        )


def parse_condition(raw_field: str, raw: Any) -> RuleCondition:
    """Parse one condition entry of a rule document into the condition union."""
    field_name = canonical_rule_field(raw_field)
    if isinstance(raw, list):
        if not raw:
            raise ValueError(f"condition '{raw_field}' has an empty value list")
        _check_enum_values(field_name, raw)
        return InCondition(field_name, tuple(raw))
    if isinstance(raw, dict):
        has_some_key = next((k for k in _HAS_SOME_KEYS if k in raw), None)
        if has_some_key is not None:
            values = raw[has_some_key]
            if len(raw) != 1 or not isinstance(values, list) or not values:
                raise ValueError(
                    f"condition '{raw_field}' must be {{hasSome: [non-empty list]}}"
                )
            _check_enum_values(field_name, values)
            return HasSomeCondition(field_name, tuple(values))
        keys = set(raw)
        if not keys or not keys <= _RANGE_KEYS:
            raise ValueError(
                f"condition '{raw_field}' has unknown shape {sorted(keys)}; "
                "expected gte/lte or hasSome"
            )
        if any(not _is_number(raw[k]) for k in keys):
            raise ValueError(f"condition '{raw_field}' range bounds must be numbers")
        gte, lte = raw.get("gte"), raw.get("lte")
        if gte is not None and lte is not None and gte > lte:
            raise ValueError(f"condition '{raw_field}' range is inverted ({gte} > {lte})")
        return RangeCondition(field_name, gte, lte)
    if raw is None or isinstance(raw, (str, int, float, bool)):
        _check_enum_values(field_name, [raw])
        return EqualsCondition(field_name, raw)
    raise ValueError(f"condition '{raw_field}' has unsupported type {type(raw).__name__}")


def parse_conditions(raw: dict[str, Any]) -> tuple[RuleCondition, ...]:
    return tuple(parse_condition(key, value) for key, value in raw.items())


class StepSpecDocument(BaseModel):
    """One care step of a rule: product filter and item cap."""
    model_config = ConfigDict(populate_by_name=True)

    category: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("category", "categories"),
    )
    concerns: list[str] = Field(default_factory=list)
    skin_types: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("skin_types", "skinTypes"),
    )
    is_non_comedogenic: bool | None = Field(
        None, validation_alias=AliasChoices("is_non_comedogenic", "isNonComedogenic"),
    )
    is_fragrance_free: bool | None = Field(
        None, validation_alias=AliasChoices("is_fragrance_free", "isFragranceFree"),
    )
    max_items: int = Field(
        3, ge=1, validation_alias=AliasChoices("max_items", "maxItems"),
    )

    def to_step_spec(self) -> StepSpec:
        return StepSpec(
            categories=tuple(self.category),
            concerns=tuple(self.concerns),
            skin_types=tuple(self.skin_types),
            is_non_comedogenic=self.is_non_comedogenic,
            is_fragrance_free=self.is_fragrance_free,
            max_items=self.max_items,
        )


class RecommendationRuleDocument(BaseModel):
    """Stored recommendation rule — conditions are validated into the condition union."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    priority: int = 0
    is_active: bool = Field(True, validation_alias=AliasChoices("is_active", "isActive"))
    conditions: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("conditions", "conditions_json", "conditionsJson"),
    )
    steps: dict[str, StepSpecDocument] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("steps", "steps_json", "stepsJson"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("conditions")
    @classmethod
    def check_conditions(cls, v: dict[str, Any]) -> dict[str, Any]:
        fields = [canonical_rule_field(key) for key in v]
        duplicates = sorted({f for f in fields if fields.count(f) > 1})
        if duplicates:
            raise ValueError(f"conditions repeat fields under different aliases: {duplicates}")
        parse_conditions(v)
        return v

    def to_rule(self) -> RecommendationRule:
        return RecommendationRule(
            id=self.id,
            name=self.name or self.id,
            priority=self.priority,
            conditions=parse_conditions(self.conditions),
            step_spec={step: spec.to_step_spec() for step, spec in self.steps.items()},
        )


class TemplateConditionsDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    skin_types: list[SkinTypeKey] = Field(
        default_factory=list, validation_alias=AliasChoices("skin_types", "skinTypes"),
    )
    main_goals: list[GoalKey] = Field(
        default_factory=list, validation_alias=AliasChoices("main_goals", "mainGoals"),
    )
    sensitivity_levels: list[SensitivityLevel] = Field(
        default_factory=list,
        validation_alias=AliasChoices("sensitivity_levels", "sensitivityLevels"),
    )
    routine_complexity: list[RoutineComplexity] = Field(
        default_factory=list,
        validation_alias=AliasChoices("routine_complexity", "routineComplexity"),
    )


class CarePlanTemplateDocument(BaseModel):
    """Stored care plan template — morning and evening steps are required."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    conditions: TemplateConditionsDocument = Field(default_factory=TemplateConditionsDocument)
    morning: list[str] = Field(
        min_length=1, validation_alias=AliasChoices("morning", "morning_steps", "morningSteps"),
    )
    evening: list[str] = Field(
        min_length=1, validation_alias=AliasChoices("evening", "evening_steps", "eveningSteps"),
    )
    weekly: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("weekly", "weekly_steps", "weeklySteps"),
    )

    def to_template(self) -> CarePlanTemplate:
        cond = self.conditions
        return CarePlanTemplate(
            id=self.id,
            conditions=TemplateConditions(
                skin_types=frozenset(cond.skin_types),
                main_goals=frozenset(cond.main_goals),
                sensitivity_levels=frozenset(cond.sensitivity_levels),
                routine_complexity=frozenset(cond.routine_complexity),
            ),
            morning_steps=tuple(self.morning),
            evening_steps=tuple(self.evening),
            weekly_steps=tuple(self.weekly),
        )
