"""Step Products — picks catalog products for each care step of a matched rule.

Invariants:
    - A product fits a step when its step equals or starts with one of the step's
      categories (rule "cream" means catalog "moisturizer"); no categories means the step name
    - Skin-type filters widen "combo" to both combination variants, "dry" and "oily" to
      their combination counterparts; SPF steps ignore skin type
    - Concern filters keep products with overlapping concerns and products with none
    - Required flags (non-comedogenic, fragrance-free) only filter when True
    - Catalog order is kept; at most max_items per step
"""

from typing import Iterable, Mapping

from dermaplan.core.domain_context import CatalogRef, ProductRef
from dermaplan.core.domain_types import SkinTypeKey, plain
from dermaplan.core.rule_matching import RecommendationRule, StepSpec

_CATEGORY_ALIASES: dict[str, tuple[str, ...]] = {
    "cream": ("moisturizer",),
    "cleanser_oil": ("cleanser",),
}

_SKIN_TYPE_WIDENING: dict[str, tuple[str, ...]] = {
    "combo": (SkinTypeKey.COMBINATION_DRY.value, SkinTypeKey.COMBINATION_OILY.value),
    SkinTypeKey.DRY.value: (SkinTypeKey.COMBINATION_DRY.value,),
    SkinTypeKey.OILY.value: (SkinTypeKey.COMBINATION_OILY.value,),
}


def _categories(step_name: str, spec: StepSpec) -> list[str]:
    result: list[str] = []
    for category in spec.categories or (step_name,):
        for resolved in _CATEGORY_ALIASES.get(category, (category,)):
            if resolved not in result:
                result.append(resolved)
    return result


def _widen_skin_types(skin_types: Iterable[str]) -> set[str]:
    widened: set[str] = set()
    for skin_type in skin_types:
        widened.add(skin_type)
        widened.update(_SKIN_TYPE_WIDENING.get(skin_type, ()))
    return widened


def product_fits_step(product: ProductRef, step_name: str, spec: StepSpec) -> bool:
    categories = _categories(step_name, spec)
    if not any(product.step == c or product.step.startswith(c) for c in categories):
        return False
    is_spf = any("spf" in c.lower() for c in categories)
    if spec.skin_types and not is_spf:
        wanted = _widen_skin_types(spec.skin_types)
        if not wanted & {plain(t) for t in product.skin_types}:
            return False
    if spec.concerns and product.concerns:
        if not set(spec.concerns) & set(product.concerns):
            return False
    if spec.is_non_comedogenic and not product.is_non_comedogenic:
        return False
    if spec.is_fragrance_free and not product.is_fragrance_free:
        return False
    return True


def products_for_step(
    catalog: CatalogRef, step_name: str, spec: StepSpec,
) -> tuple[ProductRef, ...]:
    fitting = [p for p in catalog.products if product_fits_step(p, step_name, spec)]
    return tuple(fitting[: spec.max_items])


def select_step_products(
    rule: RecommendationRule, catalog: CatalogRef,
) -> dict[str, tuple[ProductRef, ...]]:
    """Products per step in rule step order; steps with no fitting product map to ()."""
    steps: Mapping[str, StepSpec] = rule.step_spec
    return {name: products_for_step(catalog, name, spec) for name, spec in steps.items()}
