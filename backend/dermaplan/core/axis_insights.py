"""Axis Insights — hero actives and ingredients to avoid, derived from axis scores.

Invariants:
    - Thresholds read reported values: inflammation > 65, pigmentation > 65,
      barrier < 50, dehydration (reported hydration) > 60, photoaging > 60
    - Retinoids are never suggested for pregnant or breastfeeding profiles
    - Anything in avoid is removed from hero_actives
    - Output is deduplicated, in first-suggested order
"""

from dataclasses import dataclass
from typing import Iterable, Sequence

from dermaplan.core.axis_scoring import SkinAxisScore, axes_by_name
from dermaplan.core.domain_normalizers import normalize_ingredients
from dermaplan.core.domain_types import (
    RETINOID_FAMILY, IngredientKey, PregnancyStatus, SkinAxis,
)


@dataclass(frozen=True)
class AxisInsights:
    hero_actives: tuple[IngredientKey, ...] = ()
    avoid: tuple[IngredientKey, ...] = ()


_PREGNANCY_AVOID: tuple[IngredientKey, ...] = (
    *sorted(RETINOID_FAMILY, key=lambda k: k.value),
    IngredientKey.SALICYLIC_ACID,
)


def _value(axes: dict[str, SkinAxisScore], axis: SkinAxis, default: int) -> int:
    score = axes.get(axis.value)
    return score.value if score is not None else default


def _dedupe(items: Iterable[IngredientKey]) -> list[IngredientKey]:
    result: list[IngredientKey] = []
    for item in items:
        if item not in result:
            result.append(item)
    return result


def derive_axis_insights(
    axes: Sequence[SkinAxisScore],
    pregnancy_status: PregnancyStatus = PregnancyStatus.NONE,
    contraindications: Iterable[object] = (),
) -> AxisInsights:
    by_name = axes_by_name(axes)
    expecting = pregnancy_status in (PregnancyStatus.PREGNANT, PregnancyStatus.BREASTFEEDING)

    heroes: list[IngredientKey] = []
    if _value(by_name, SkinAxis.INFLAMMATION, 0) > 65:
        heroes += [IngredientKey.AZELAIC_ACID, IngredientKey.NIACINAMIDE]
    if _value(by_name, SkinAxis.PIGMENTATION, 0) > 65:
        heroes += [IngredientKey.TRANEXAMIC_ACID, IngredientKey.NIACINAMIDE, IngredientKey.VITAMIN_C]
    if _value(by_name, SkinAxis.BARRIER, 100) < 50:
        heroes += [IngredientKey.CERAMIDES]
    if _value(by_name, SkinAxis.HYDRATION, 0) > 60:
        heroes += [IngredientKey.HYALURONIC_ACID]
    if _value(by_name, SkinAxis.PHOTOAGING, 0) > 60:
        if not expecting:
            heroes += [IngredientKey.RETINOL]
        heroes += [IngredientKey.PEPTIDES]

    avoid = _dedupe([
        *(_PREGNANCY_AVOID if expecting else ()),
        *normalize_ingredients(list(contraindications)),
    ])
    return AxisInsights(
        hero_actives=tuple(h for h in _dedupe(heroes) if h not in avoid),
        avoid=tuple(avoid),
    )
