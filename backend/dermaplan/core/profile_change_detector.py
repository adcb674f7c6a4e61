"""Profile Change Detector — critical-change, safety-lock and plan-rebuild decisions.

Invariants:
    - Sequence fields compare as sets (size + membership); scalars by equality
    - Enum members and their string values compare equal (values unwrapped first)
    - No prior profile: critical change is True (profile creation), safety lock is False
    - requires_plan_rebuild precedence: TOPIC_REQUIRES_PLAN > PROFILE_CREATED >
      CRITICAL_CHANGE > NONE
    - Safety lock is independent of the rebuild decision

Design Decisions:
    - Accepts SkinProfile or raw snapshot mappings: stored snapshots are normalized
      before comparison so "combo" and "combination_oily" do not read as a change
    - changed_fields() exposes the triggering fields for observability
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from dermaplan.core.domain_types import RebuildReason, plain
from dermaplan.core.skin_profile import SkinProfile, profile_from_mapping

CRITICAL_FIELDS: tuple[str, ...] = (
    "skin_type",
    "sensitivity",
    "main_goals",
    "diagnoses",
    "pregnancy_status",
    "contraindications",
    "current_topicals",
    "current_oral_meds",
)

SAFETY_CRITICAL_FIELDS: tuple[str, ...] = (
    "pregnancy_status",
    "diagnoses",
    "contraindications",
    "current_topicals",
    "current_oral_meds",
    "sensitivity",
)


@dataclass(frozen=True)
class RebuildDecision:
    requires: bool
    reason: RebuildReason


ProfileLike = SkinProfile | Mapping[str, Any]


def _is_sequence(value: object) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def _values_differ(current: object, new: object) -> bool:
    if _is_sequence(current) or _is_sequence(new):
        current_set = {plain(item) for item in current or ()}
        new_set = {plain(item) for item in new or ()}
        return current_set != new_set
    return plain(current) != plain(new)


def changed_fields(
    current: ProfileLike | None, new: ProfileLike, field_names: Iterable[str],
) -> list[str]:
    """Fields among field_names whose values differ between the two profiles."""
    current_profile = profile_from_mapping(current)
    new_profile = profile_from_mapping(new)
    if current_profile is None:
        return list(field_names)
    return [
        name for name in field_names
        if _values_differ(getattr(current_profile, name), getattr(new_profile, name))
    ]


def profile_changed_critically(current: ProfileLike | None, new: ProfileLike) -> bool:
    if current is None:
        return True
    return bool(changed_fields(current, new, CRITICAL_FIELDS))


def requires_safety_lock(current: ProfileLike | None, new: ProfileLike) -> bool:
    if current is None:
        return False
    return bool(changed_fields(current, new, SAFETY_CRITICAL_FIELDS))


def requires_plan_rebuild(
    topic_requires_rebuild: bool, current: ProfileLike | None, new: ProfileLike,
) -> RebuildDecision:
    if topic_requires_rebuild:
        return RebuildDecision(True, RebuildReason.TOPIC_REQUIRES_PLAN)
    if current is None:
        return RebuildDecision(True, RebuildReason.PROFILE_CREATED)
    if profile_changed_critically(current, new):
        return RebuildDecision(True, RebuildReason.CRITICAL_CHANGE)
    return RebuildDecision(False, RebuildReason.NONE)
