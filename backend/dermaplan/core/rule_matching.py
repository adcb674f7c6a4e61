"""Recommendation Rule Matcher — prioritized, condition-based rule selection.

Invariants:
    - A rule matches iff every condition predicate matches (AND); a rule with no
      conditions matches every profile
    - Conditions are a closed tagged union: Equals, In, Range, HasSome
    - A None profile value fails In, Range and HasSome, and fails Equals unless the
      expected value is itself None (a trivial condition)
    - Profile fields the rule does not mention are never inspected
    - Rules are tried by priority descending; equal priorities keep input order
      (stable sort), so the same profile and rule list always pick the same rule
    - find_matching_rule() returns None on no match; callers choose the default rule

Design Decisions:
    - Conditions are parsed from documents once (schemas.rule_documents), so match time
      never inspects JSON shapes (ADR: reject malformed rules at load time)
    - Enum members are unwrapped before comparison: a profile built from SkinProfile
      and a rule built from JSON both compare plain strings
    - Range rejects booleans and non-numeric values instead of skipping the bound
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence, Union

from dermaplan.core.domain_types import plain


# --- Conditions ---------------------------------------------------------------

def _plain_items(value: object) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return [plain(item) for item in value]
    return [plain(value)]


@dataclass(frozen=True)
class EqualsCondition:
    field: str
    value: Any

    def matches(self, profile: Mapping[str, Any]) -> bool:
        if self.value is None:
            return True
        return plain(profile.get(self.field)) == plain(self.value)


@dataclass(frozen=True)
class InCondition:
    field: str
    values: tuple[Any, ...]

    def matches(self, profile: Mapping[str, Any]) -> bool:
        actual = profile.get(self.field)
        if actual is None:
            return False
        allowed = {plain(v) for v in self.values}
        return plain(actual) in allowed


@dataclass(frozen=True)
class RangeCondition:
    field: str
    gte: float | None = None
    lte: float | None = None

    def matches(self, profile: Mapping[str, Any]) -> bool:
        actual = profile.get(self.field)
        if actual is None or isinstance(actual, bool) or not isinstance(actual, (int, float)):
            return False
        if self.gte is not None and actual < self.gte:
            return False
        if self.lte is not None and actual > self.lte:
            return False
        return True


@dataclass(frozen=True)
class HasSomeCondition:
    field: str
    values: tuple[Any, ...]

    def matches(self, profile: Mapping[str, Any]) -> bool:
        actual = profile.get(self.field)
        if actual is None:
            return False
        wanted = {plain(v) for v in self.values}
        return any(item in wanted for item in _plain_items(actual))


RuleCondition = Union[EqualsCondition, InCondition, RangeCondition, HasSomeCondition]


# --- Rules --------------------------------------------------------------------

@dataclass(frozen=True)
class StepSpec:
    """Product filter for one care step of a rule."""
    categories: tuple[str, ...] = ()
    concerns: tuple[str, ...] = ()
    skin_types: tuple[str, ...] = ()
    is_non_comedogenic: bool | None = None
    is_fragrance_free: bool | None = None
    max_items: int = 3


@dataclass(frozen=True)
class RecommendationRule:
    id: str
    name: str
    priority: int
    conditions: tuple[RuleCondition, ...] = ()
    step_spec: Mapping[str, StepSpec] = field(default_factory=dict)

    def matches(self, profile: Mapping[str, Any]) -> bool:
        return all(condition.matches(profile) for condition in self.conditions)


FALLBACK_STEPS: tuple[str, ...] = ("cleanser", "toner", "moisturizer", "spf", "serum")


def fallback_step_spec() -> dict[str, StepSpec]:
    return {step: StepSpec(categories=(step,)) for step in FALLBACK_STEPS}


# --- Matching -----------------------------------------------------------------

def matches_rule(profile: Mapping[str, Any], rule: RecommendationRule) -> bool:
    return rule.matches(profile)


def order_rules(rules: Iterable[RecommendationRule]) -> list[RecommendationRule]:
    """Priority descending, ties in declaration order."""
    return sorted(rules, key=lambda rule: -rule.priority)


def find_matching_rule(
    profile: Mapping[str, Any], rules: Sequence[RecommendationRule],
) -> RecommendationRule | None:
    for rule in order_rules(rules):
        if rule.matches(profile):
            return rule
    return None


def select_rule(
    profile: Mapping[str, Any],
    rules: Sequence[RecommendationRule],
    default_rule: RecommendationRule,
) -> tuple[RecommendationRule, bool]:
    """Matched rule and False, or the default rule and True."""
    matched = find_matching_rule(profile, rules)
    if matched is None:
        return default_rule, True
    return matched, False
