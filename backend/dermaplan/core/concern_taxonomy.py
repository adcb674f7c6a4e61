"""Concern Taxonomy — canonical concern keys, primary focus mapping, product focus filter.

Invariants:
    - normalize_concern_key() never guesses: unknown text returns None
    - normalize_concern_key(k.value) is k for every ConcernKey k
    - Every ConcernKey maps to exactly one PrimaryFocus
    - Every PrimaryFocus except GENERAL is reached by at least one concern mapping back to it
    - normalize_concerns() deduplicates and preserves order of first occurrence

Design Decisions:
    - Explicit synonym table (English + Russian) instead of fuzzy matching: additions are
      reviewable and the round-trip test guards regressions (ADR: synonym tables grow ad hoc)
    - Matching/scoring code never sees raw concern text; it goes through this module
"""

import json
from typing import Iterable

from dermaplan.core.domain_types import ConcernKey, PrimaryFocus, plain


# ─── Synonym Table ───────────────────────────────────────────────

_CONCERN_SYNONYMS: dict[str, ConcernKey] = {
    "acne": ConcernKey.ACNE,
    "акне": ConcernKey.ACNE,
    "высыпания": ConcernKey.ACNE,
    "pores": ConcernKey.PORES,
    "enlarged pores": ConcernKey.PORES,
    "поры": ConcernKey.PORES,
    "расширенные поры": ConcernKey.PORES,
    "pigmentation": ConcernKey.PIGMENTATION,
    "пигментация": ConcernKey.PIGMENTATION,
    "пигментные пятна": ConcernKey.PIGMENTATION,
    "wrinkles": ConcernKey.WRINKLES,
    "морщины": ConcernKey.WRINKLES,
    "barrier": ConcernKey.BARRIER,
    "барьер": ConcernKey.BARRIER,
    "dehydration": ConcernKey.DEHYDRATION,
    "обезвоженность": ConcernKey.DEHYDRATION,
    "dryness": ConcernKey.DRYNESS,
    "сухость": ConcernKey.DRYNESS,
    "oiliness": ConcernKey.OILINESS,
    "жирность": ConcernKey.OILINESS,
    "sensitivity": ConcernKey.SENSITIVITY,
    "чувствительность": ConcernKey.SENSITIVITY,
    "redness": ConcernKey.REDNESS,
    "покраснения": ConcernKey.REDNESS,
    "rosacea": ConcernKey.ROSACEA,
    "розацеа": ConcernKey.ROSACEA,
}


# ─── Focus Mapping ───────────────────────────────────────────────

PRIMARY_FOCUS_TO_CONCERNS: dict[PrimaryFocus, tuple[ConcernKey, ...]] = {
    PrimaryFocus.ACNE: (ConcernKey.ACNE,),
    PrimaryFocus.PORES: (ConcernKey.PORES, ConcernKey.OILINESS),
    PrimaryFocus.PIGMENTATION: (ConcernKey.PIGMENTATION,),
    PrimaryFocus.WRINKLES: (ConcernKey.WRINKLES,),
    PrimaryFocus.BARRIER: (ConcernKey.BARRIER, ConcernKey.SENSITIVITY),
    PrimaryFocus.DEHYDRATION: (ConcernKey.DEHYDRATION, ConcernKey.DRYNESS),
    PrimaryFocus.DRYNESS: (ConcernKey.DRYNESS, ConcernKey.BARRIER),
    PrimaryFocus.GENERAL: (),
}

CONCERN_TO_PRIMARY_FOCUS: dict[ConcernKey, PrimaryFocus] = {
    ConcernKey.ACNE: PrimaryFocus.ACNE,
    ConcernKey.PORES: PrimaryFocus.PORES,
    ConcernKey.PIGMENTATION: PrimaryFocus.PIGMENTATION,
    ConcernKey.WRINKLES: PrimaryFocus.WRINKLES,
    ConcernKey.BARRIER: PrimaryFocus.BARRIER,
    ConcernKey.DEHYDRATION: PrimaryFocus.DEHYDRATION,
    ConcernKey.DRYNESS: PrimaryFocus.DRYNESS,
    ConcernKey.OILINESS: PrimaryFocus.PORES,
    ConcernKey.SENSITIVITY: PrimaryFocus.BARRIER,
    ConcernKey.REDNESS: PrimaryFocus.BARRIER,
    ConcernKey.ROSACEA: PrimaryFocus.BARRIER,
}


def normalize_concern_key(concern: object) -> ConcernKey | None:
    """Canonical concern key for free text, or None if the text is not a known synonym."""
    if concern is None:
        return None
    if isinstance(concern, ConcernKey):
        return concern
    text = str(plain(concern)).strip().lower()
    if not text:
        return None
    return _CONCERN_SYNONYMS.get(text)


def normalize_concerns(concerns: Iterable[object] | str | None) -> list[ConcernKey]:
    """Normalize a list (or JSON-encoded/single string) of concerns, dropping unmapped entries."""
    if concerns is None:
        return []
    if isinstance(concerns, str):
        concerns = _split_concern_string(concerns)
    result: list[ConcernKey] = []
    for concern in concerns:
        key = normalize_concern_key(concern)
        if key is not None and key not in result:
            result.append(key)
    return result


def _split_concern_string(text: str) -> list[str]:
    try:
        parsed = json.loads(text)
    except ValueError:
        return [text]
    if isinstance(parsed, list):
        return [str(item) for item in parsed]
    return [text]


def normalize_primary_focus(
    focus: object, concerns: Iterable[object] | None = None,
) -> PrimaryFocus:
    """Canonical focus as-is; else the focus of the first mappable concern; else GENERAL."""
    if focus is not None:
        text = str(plain(focus)).strip().lower()
        try:
            return PrimaryFocus(text)
        except ValueError:
            pass
    for concern in concerns or ():
        key = normalize_concern_key(concern)
        if key is not None:
            return CONCERN_TO_PRIMARY_FOCUS[key]
    return PrimaryFocus.GENERAL


def get_concerns_for_primary_focus(focus: object) -> tuple[ConcernKey, ...]:
    return PRIMARY_FOCUS_TO_CONCERNS[normalize_primary_focus(focus)]


def product_concerns_match_primary_focus(
    product_concerns: Iterable[object] | None, focus: object,
) -> bool:
    """Whether a product's concerns qualify it for the given primary focus.

    A product without concerns only qualifies for GENERAL; GENERAL accepts every product.
    """
    primary = normalize_primary_focus(focus)
    normalized = normalize_concerns(list(product_concerns or ()))
    if primary == PrimaryFocus.GENERAL:
        return True
    if not normalized:
        return False
    wanted = set(PRIMARY_FOCUS_TO_CONCERNS[primary])
    return any(concern in wanted for concern in normalized)
