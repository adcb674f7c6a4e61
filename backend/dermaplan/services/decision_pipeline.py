"""Decision Pipeline — async orchestration of one questionnaire submission.

Invariants:
    - Prior profile and catalog are fetched once, before any decision is made
    - All decisions (axes, rule, template, validation, rebuild, safety lock) come from
      the pure core; this module only sequences IO around them
    - Cache writes happen after decisions and are best-effort (DecisionCache swallows failures)
    - Same prior record + same request + same rule set => equal DecisionOutcome

Design Decisions:
    - Repositories and cache injected via the constructor instead of module-level state
      (ADR: explicit dependencies, fakes in tests)
    - Profile version bumps only when the profile is recreated (no prior, recreate topic
      or critical question code); other retakes update the current version in place
    - A recreation rescores every axis from the batch (no scoped merge) and drops the
      snapshot fields its topic redefines; other snapshot fields carry forward
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from dermaplan.core.answer_fields import resolve_answers
from dermaplan.core.axis_insights import AxisInsights, derive_axis_insights
from dermaplan.core.axis_scoring import SkinAxisScore
from dermaplan.core.care_plan_templates import (
    CarePlanTemplate, care_plan_input_from_context, select_care_plan_template,
)
from dermaplan.core.domain_context import (
    ContextMeta, DomainContext, ProductRef, build_domain_context,
)
from dermaplan.core.domain_types import plain
from dermaplan.core.profile_change_detector import (
    RebuildDecision, requires_plan_rebuild, requires_safety_lock,
)
from dermaplan.core.profile_validation import ProfileValidationResult, validate_profile
from dermaplan.core.questionnaire_topics import get_topic, topic_requires_plan_rebuild
from dermaplan.core.repository_protocols import (
    CatalogRepository, ProfileRecord, ProfileRepository,
)
from dermaplan.core.retake_recalculation import should_recreate_profile_for_topic
from dermaplan.core.rule_context import build_rule_profile
from dermaplan.core.rule_matching import RecommendationRule, select_rule
from dermaplan.core.skin_profile import (
    SkinProfile, merge_profile_data, normalize_profile_data,
    profile_data_from_answers, profile_from_mapping,
)
from dermaplan.core.step_products import select_step_products
from dermaplan.infrastructure.decision_cache import DecisionCache
from dermaplan.services.rule_loader import RuleSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionRequest:
    user_id: str
    answers: Mapping[str, Any]
    topic_id: str | None = None
    question_codes: Mapping[str, str] | None = None


@dataclass(frozen=True)
class DecisionOutcome:
    """Everything one submission decides, plus the context it was decided on."""
    user_id: str
    profile_version: int
    profile_recreated: bool
    context: DomainContext
    rule: RecommendationRule
    used_default_rule: bool
    template: CarePlanTemplate
    rebuild: RebuildDecision
    safety_lock: bool
    validation: ProfileValidationResult
    insights: AxisInsights
    step_products: Mapping[str, tuple[ProductRef, ...]] = field(default_factory=dict)

    @property
    def profile(self) -> SkinProfile:
        return self.context.profile

    @property
    def axes(self) -> tuple[SkinAxisScore, ...]:
        return self.context.axes

    def plan_payload(self) -> dict[str, Any]:
        return {
            "template_id": self.template.id,
            "morning": list(self.template.morning_steps),
            "evening": list(self.template.evening_steps),
            "weekly": list(self.template.weekly_steps),
            "hero_actives": [plain(k) for k in self.insights.hero_actives],
            "avoid": [plain(k) for k in self.insights.avoid],
        }

    def recommendations_payload(self) -> dict[str, Any]:
        return {
            "rule_id": self.rule.id,
            "used_default_rule": self.used_default_rule,
            "steps": {
                step: [product.id for product in products]
                for step, products in self.step_products.items()
            },
        }


def _carried_snapshot(
    prior: ProfileRecord | None, topic_id: str | None, recreated: bool,
) -> dict[str, Any]:
    """Prior profile data a submission builds on; a recreation drops the fields its topic redefines."""
    if prior is None:
        return {}
    data = normalize_profile_data(prior.profile)
    topic = get_topic(topic_id) if recreated else None
    for name in topic.affects_fields if topic is not None else ():
        data.pop(name, None)
    return data


class ProfileDecisionService:
    def __init__(
        self,
        profiles: ProfileRepository,
        catalog: CatalogRepository,
        rule_set: RuleSet,
        cache: DecisionCache | None = None,
    ) -> None:
        self._profiles = profiles
        self._catalog = catalog
        self._rule_set = rule_set
        self._cache = cache or DecisionCache(None)

    async def evaluate(self, request: SubmissionRequest) -> DecisionOutcome:
        prior = await self._profiles.get_current(request.user_id)
        catalog = await self._catalog.get_catalog()

        outcome = self.decide(request, prior, catalog)
        await self._write_cache(outcome, prior)
        return outcome

    def decide(
        self, request: SubmissionRequest, prior: ProfileRecord | None, catalog: Any,
    ) -> DecisionOutcome:
        """Pure part of evaluate: every decision for one submission, no IO."""
        resolved = resolve_answers(request.answers, request.question_codes)
        changed_codes = list(resolved.source_codes.values())
        recreated = prior is None or should_recreate_profile_for_topic(
            request.topic_id, changed_codes,
        )
        version = 1 if prior is None else prior.version + (1 if recreated else 0)
        snapshot = _carried_snapshot(prior, request.topic_id, recreated)

        context = build_domain_context(
            ContextMeta(request.user_id, version, request.topic_id),
            request.answers,
            profile_snapshot=snapshot,
            catalog=catalog,
            question_codes=request.question_codes,
            previous_axes=None if recreated or prior is None else prior.axes,
        )

        prior_profile = profile_from_mapping(prior.profile) if prior else None
        rebuild = requires_plan_rebuild(
            topic_requires_plan_rebuild(request.topic_id), prior_profile, context.profile,
        )
        safety_lock = requires_safety_lock(prior_profile, context.profile)

        rule, used_default = select_rule(
            build_rule_profile(context), self._rule_set.rules, self._rule_set.default_rule,
        )
        if used_default:
            logger.warning(
                "No recommendation rule matched, using default",
                extra={"user_id": request.user_id, "rule_id": rule.id},
            )
        template = select_care_plan_template(
            care_plan_input_from_context(context), self._rule_set.templates,
        )

        normalized = merge_profile_data(snapshot, profile_data_from_answers(resolved))
        validation = validate_profile(normalized)
        insights = derive_axis_insights(
            context.axes,
            context.medical.pregnancy_status,
            context.profile.contraindications,
        )

        logger.info(
            "Submission evaluated",
            extra={
                "user_id": request.user_id,
                "profile_version": version,
                "topic_id": request.topic_id,
                "rule_id": rule.id,
                "template_id": template.id,
                "reason": plain(rebuild.reason),
            },
        )
        return DecisionOutcome(
            user_id=request.user_id,
            profile_version=version,
            profile_recreated=recreated,
            context=context,
            rule=rule,
            used_default_rule=used_default,
            template=template,
            rebuild=rebuild,
            safety_lock=safety_lock,
            validation=validation,
            insights=insights,
            step_products=select_step_products(rule, context.catalog),
        )

    async def _write_cache(
        self, outcome: DecisionOutcome, prior: ProfileRecord | None,
    ) -> None:
        if not self._cache.enabled:
            return
        if prior is not None and (outcome.rebuild.requires or outcome.safety_lock):
            await self._cache.invalidate_version(outcome.user_id, prior.version)
        await self._cache.set_recommendations(
            outcome.user_id, outcome.profile_version, outcome.recommendations_payload(),
        )
        if outcome.rebuild.requires or await self._cache.get_plan(
            outcome.user_id, outcome.profile_version,
        ) is None:
            await self._cache.set_plan(
                outcome.user_id, outcome.profile_version, outcome.plan_payload(),
            )

    async def invalidate_user(self, user_id: str) -> None:
        await self._cache.invalidate_user(user_id)
