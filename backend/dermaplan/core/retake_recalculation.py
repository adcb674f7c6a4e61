"""Retake Recalculation — topic-scoped axis recomputation and profile recreation decision.

Invariants:
    - Only the axes a topic declares are recomputed; every other axis is copied
      verbatim from the prior axis set
    - A topic declaring no axes (or no prior axes at all) recomputes every axis
    - The axis universe is the union of axis names in the new and prior sets,
      new-set order first: axes can be added without touching this module
    - Skin type, pregnancy and diagnoses/sensitivity topics, or any critical question
      code in the batch, force a full profile recreation

Design Decisions:
    - Recompute all axes then select: scoring is cheap and pure, and an axis scored
      alone is identical to the same axis scored with its siblings
"""

import logging
from typing import Iterable, Mapping, Sequence

from dermaplan.core.axis_scoring import (
    ScoringInput, SkinAxisScore, axes_by_name, calculate_skin_axes,
)
from dermaplan.core.domain_types import SkinAxis, plain
from dermaplan.core.questionnaire_topics import declared_axes_for_topic

logger = logging.getLogger(__name__)

RECREATE_PROFILE_TOPICS = frozenset({"skin_type", "pregnancy", "diagnoses_sensitivity"})

CRITICAL_QUESTION_CODES = frozenset({"skin_type", "age", "gender", "pregnancy_breastfeeding"})


def get_affected_axes_for_topic(topic_id: str | None) -> tuple[SkinAxis, ...]:
    return declared_axes_for_topic(topic_id)


def recalculate_axes_scoped(
    new_answers: ScoringInput | Mapping[str, object],
    previous_axes: Sequence[SkinAxisScore] | None,
    topic_id: str | None,
) -> tuple[SkinAxisScore, ...]:
    """Recompute the topic's declared axes from new answers, inherit the rest."""
    fresh = calculate_skin_axes(new_answers)
    affected = {str(plain(axis)) for axis in get_affected_axes_for_topic(topic_id)}
    if not affected or not previous_axes:
        if not affected:
            logger.debug(
                "No axes declared for topic, recalculating all",
                extra={"topic_id": topic_id},
            )
        return fresh

    fresh_by_name = axes_by_name(fresh)
    previous_by_name = axes_by_name(previous_axes)
    result: list[SkinAxisScore] = []
    for name in _axis_universe(fresh, previous_axes):
        if name in affected:
            result.append(fresh_by_name.get(name) or previous_by_name[name])
        else:
            result.append(previous_by_name.get(name) or fresh_by_name[name])

    logger.debug(
        "Axes recalculated scoped",
        extra={"topic_id": topic_id, "recalculated": sorted(affected)},
    )
    return tuple(result)


def _axis_universe(
    fresh: Iterable[SkinAxisScore], previous: Iterable[SkinAxisScore],
) -> list[str]:
    names: list[str] = []
    for score in (*fresh, *previous):
        if score.name not in names:
            names.append(score.name)
    return names


def should_recreate_profile_for_topic(
    topic_id: str | None, changed_answers: Mapping[str, object] | Iterable[str],
) -> bool:
    if topic_id in RECREATE_PROFILE_TOPICS:
        return True
    return any(code in CRITICAL_QUESTION_CODES for code in changed_answers)
