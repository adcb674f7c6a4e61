"""Domain Context — the single immutable read-model every downstream decision consumes.

Invariants:
    - Axes are derived from raw answers only, never from the profile snapshot
    - On a topic-scoped retake with prior axes, undeclared axes are inherited
      (see retake_recalculation); otherwise all six are scored from the answers
    - The snapshot supplies medical markers, preferences, and every profile field the
      current answer batch does not carry; answer-derived fields override it
    - Every profile, medical and preference field holds a value or a neutral default
    - Unresolvable answer codes are recorded in trace.warnings, never raised

Design Decisions:
    - Frozen dataclasses: a context is assembled per decision and never mutated
      (ADR: decisions are idempotent, same inputs -> same context)
    - Catalog is a reference (tuple of ProductRef), not a repository: the core never does IO
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

from dermaplan.core.answer_fields import ResolvedAnswers, resolve_answers
from dermaplan.core.axis_scoring import ScoringInput, SkinAxisScore, calculate_skin_axes
from dermaplan.core.concern_taxonomy import (
    normalize_primary_focus, product_concerns_match_primary_focus,
)
from dermaplan.core.domain_normalizers import skin_type_variants
from dermaplan.core.domain_types import PregnancyStatus, PrimaryFocus, SkinTypeKey, plain
from dermaplan.core.retake_recalculation import recalculate_axes_scoped
from dermaplan.core.skin_profile import (
    MedicalMarkers, Preferences, SkinProfile, build_medical_markers,
    build_preferences, build_skin_profile, merge_profile_data,
    normalize_profile_data, profile_data_from_answers,
)


# --- Catalog ------------------------------------------------------------------

@dataclass(frozen=True)
class ProductRef:
    id: str
    name: str
    step: str
    concerns: tuple[str, ...] = ()
    skin_types: tuple[SkinTypeKey, ...] = ()
    is_non_comedogenic: bool = False
    is_fragrance_free: bool = False

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ProductRef":
        skin_types: list[SkinTypeKey] = []
        for value in raw.get("skin_types", raw.get("skinTypes")) or ():
            for variant in sorted(skin_type_variants(value), key=lambda k: k.value):
                if variant not in skin_types:
                    skin_types.append(variant)
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("name", "")),
            step=str(raw.get("step", raw.get("category", ""))),
            concerns=tuple(str(c) for c in raw.get("concerns") or ()),
            skin_types=tuple(skin_types),
            is_non_comedogenic=bool(
                raw.get("is_non_comedogenic", raw.get("isNonComedogenic", False))
            ),
            is_fragrance_free=bool(
                raw.get("is_fragrance_free", raw.get("isFragranceFree", False))
            ),
        )


@dataclass(frozen=True)
class CatalogRef:
    products: tuple[ProductRef, ...] = ()

    def products_for_focus(self, focus: object) -> tuple[ProductRef, ...]:
        return tuple(
            product for product in self.products
            if product_concerns_match_primary_focus(product.concerns, focus)
        )


# --- Context ------------------------------------------------------------------

@dataclass(frozen=True)
class ContextMeta:
    user_id: str
    profile_version: int | None = None
    topic_id: str | None = None


@dataclass(frozen=True)
class ContextTrace:
    flags: tuple[str, ...] = ()
    reasons: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class DomainContext:
    meta: ContextMeta
    raw_answers: Mapping[str, Any]
    profile: SkinProfile
    axes: tuple[SkinAxisScore, ...]
    medical: MedicalMarkers
    preferences: Preferences
    catalog: CatalogRef = field(default_factory=CatalogRef)
    trace: ContextTrace = field(default_factory=ContextTrace)
    answers: ScoringInput = field(default_factory=ScoringInput)

    def axis_values(self) -> dict[str, int]:
        return {score.name: score.value for score in self.axes}


def build_domain_context(
    meta: ContextMeta,
    raw_answers: Mapping[str, Any],
    profile_snapshot: SkinProfile | Mapping[str, Any] | None = None,
    catalog: CatalogRef | Iterable[Mapping[str, Any]] | None = None,
    question_codes: Mapping[str, str] | None = None,
    previous_axes: Sequence[SkinAxisScore] | None = None,
) -> DomainContext:
    """Assemble a DomainContext from one answer batch and the latest profile snapshot."""
    resolved = resolve_answers(raw_answers, question_codes)
    scoring_input = ScoringInput.from_answers(resolved)

    reasons: list[str] = []
    if meta.topic_id is not None and previous_axes:
        axes = recalculate_axes_scoped(scoring_input, previous_axes, meta.topic_id)
        reasons.append(f"axes:scoped:{meta.topic_id}")
    else:
        axes = calculate_skin_axes(scoring_input)
        reasons.append("axes:full")

    data = merge_profile_data(
        _snapshot_data(profile_snapshot), profile_data_from_answers(resolved),
    )
    profile = build_skin_profile(data)
    medical = build_medical_markers(data)
    preferences = build_preferences(data)

    return DomainContext(
        meta=meta,
        raw_answers=MappingProxyType(dict(raw_answers)),
        profile=profile,
        axes=axes,
        medical=medical,
        preferences=preferences,
        catalog=_catalog_ref(catalog),
        trace=ContextTrace(
            flags=_safety_flags(medical, profile),
            reasons=tuple(reasons),
            warnings=_answer_warnings(resolved),
        ),
        answers=scoring_input,
    )


def _snapshot_data(snapshot: SkinProfile | Mapping[str, Any] | None) -> dict[str, Any]:
    if snapshot is None:
        return {}
    if isinstance(snapshot, SkinProfile):
        return normalize_profile_data(snapshot.to_dict())
    return normalize_profile_data(snapshot)


def _catalog_ref(catalog: CatalogRef | Iterable[Mapping[str, Any]] | None) -> CatalogRef:
    if catalog is None:
        return CatalogRef()
    if isinstance(catalog, CatalogRef):
        return catalog
    return CatalogRef(tuple(ProductRef.from_mapping(item) for item in catalog))


def _safety_flags(medical: MedicalMarkers, profile: SkinProfile) -> tuple[str, ...]:
    flags: list[str] = []
    if medical.pregnancy_status in (PregnancyStatus.PREGNANT, PregnancyStatus.BREASTFEEDING):
        flags.append(f"pregnancy:{plain(medical.pregnancy_status)}")
    if medical.allergies:
        flags.append("allergies")
    if profile.current_topicals:
        flags.append("active_topicals")
    return tuple(flags)


def _answer_warnings(resolved: ResolvedAnswers) -> tuple[str, ...]:
    return tuple(f"unresolved_answer_code:{code}" for code in resolved.unresolved)


def primary_focus_for(context: DomainContext) -> PrimaryFocus:
    """Primary focus from the first main goal, else from the first mappable concern."""
    goal = context.profile.main_goals[0] if context.profile.main_goals else None
    return normalize_primary_focus(goal, context.profile.concerns)
