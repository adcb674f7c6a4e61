"""Decision Pipeline — verifies one-submission orchestration against fakes.

Tests:
    - First submission: version 1, PROFILE_CREATED, no safety lock, matched rule and template
    - Prior profile and catalog are fetched exactly once per submission
    - decide() is deterministic for the same prior record and request
    - Pregnancy retake: profile recreated, safety lock, prior version invalidated
    - Scoped spf_sun retake: version kept, only sun axes recomputed, cached plan kept
    - Critical question code or skin_type retake: version bumped, every axis rescored
    - Recreation drops the fields its topic redefines and carries the rest forward
    - No matching rule: built-in default rule with fallback steps
    - A failing cache backend never fails a submission
"""

from dermaplan.core.axis_scoring import axes_by_name, calculate_skin_axes
from dermaplan.core.domain_types import PregnancyStatus, RebuildReason, SkinTypeKey
from dermaplan.core.errors import CacheBackendError
from dermaplan.infrastructure.decision_cache import DecisionCache
from dermaplan.services.decision_pipeline import ProfileDecisionService, SubmissionRequest

FIRST_ANSWERS = {
    "skin_type": "oily",
    "skin_goals": ["acne"],
    "skin_sensitivity": "low",
    "routine_complexity": "medium",
    "skin_concerns": ["acne", "pigmentation"],
}


async def _first(service, profiles):
    outcome = await service.evaluate(SubmissionRequest("u1", FIRST_ANSWERS))
    profiles.store(outcome)
    return outcome


# --- first submission ---

async def test_first_submission_creates_profile(service, profiles, catalog):
    outcome = await service.evaluate(SubmissionRequest("u1", FIRST_ANSWERS))

    assert outcome.profile_version == 1
    assert outcome.profile_recreated is True
    assert outcome.rebuild.requires is True
    assert outcome.rebuild.reason == RebuildReason.PROFILE_CREATED
    assert outcome.safety_lock is False
    assert outcome.rule.id == "oily_acne"
    assert outcome.used_default_rule is False
    assert outcome.template.id == "acne_oily_basic"
    assert outcome.validation.is_valid is True
    assert outcome.context.trace.reasons == ("axes:full",)
    assert profiles.calls == 1
    assert catalog.calls == 1


async def test_first_submission_selects_step_products(service):
    outcome = await service.evaluate(SubmissionRequest("u1", FIRST_ANSWERS))
    assert outcome.recommendations_payload() == {
        "rule_id": "oily_acne",
        "used_default_rule": False,
        "steps": {"cleanser": ["c1"], "serum": ["s1"]},
    }


async def test_first_submission_fills_cache(service, cache_backend):
    outcome = await service.evaluate(SubmissionRequest("u1", FIRST_ANSWERS))

    assert cache_backend.keys() == ["plan:u1:1", "recommendations:u1:1"]
    cached_plan = await service._cache.get_plan("u1", 1)
    assert cached_plan == outcome.plan_payload()
    assert cached_plan["template_id"] == "acne_oily_basic"


def test_decide_is_deterministic(service, catalog):
    request = SubmissionRequest("u1", FIRST_ANSWERS)
    a = service.decide(request, None, catalog.products)
    b = service.decide(request, None, catalog.products)
    assert a.axes == b.axes
    assert a.profile == b.profile
    assert a.plan_payload() == b.plan_payload()
    assert a.recommendations_payload() == b.recommendations_payload()
    assert (a.rebuild, a.safety_lock, a.validation) == (b.rebuild, b.safety_lock, b.validation)


# --- retakes ---

async def test_pregnancy_retake_locks_and_invalidates(service, profiles, cache_backend):
    await _first(service, profiles)

    outcome = await service.evaluate(SubmissionRequest(
        "u1", {"pregnancy_breastfeeding": "pregnant"}, topic_id="pregnancy",
    ))

    assert outcome.profile_version == 2
    assert outcome.profile_recreated is True
    assert outcome.safety_lock is True
    assert outcome.rebuild.reason == RebuildReason.TOPIC_REQUIRES_PLAN
    assert outcome.context.medical.pregnancy_status == PregnancyStatus.PREGNANT
    assert "pregnancy:pregnant" in outcome.context.trace.flags
    assert outcome.rule.id == "pregnancy_safe"
    assert outcome.recommendations_payload()["steps"] == {"moisturizer": ["m1"]}
    assert "retinol" in outcome.plan_payload()["avoid"]
    assert cache_backend.keys() == ["plan:u1:2", "recommendations:u1:2"]


async def test_pregnancy_retake_without_acid_contraindication_warns(service, profiles):
    await _first(service, profiles)
    outcome = await service.evaluate(SubmissionRequest(
        "u1", {"pregnancy_breastfeeding": "pregnant"}, topic_id="pregnancy",
    ))
    codes = [w.code for w in outcome.validation.warnings]
    assert "PREGNANCY_CONTRAINDICATIONS_MISSING" in codes


async def test_scoped_retake_keeps_version_and_other_axes(service, profiles, cache_backend):
    first = await _first(service, profiles)
    cached_plan = await service._cache.get_plan("u1", 1)

    outcome = await service.evaluate(SubmissionRequest(
        "u1", {"spf_frequency": "never"}, topic_id="spf_sun",
    ))

    assert outcome.profile_version == 1
    assert outcome.profile_recreated is False
    assert outcome.rebuild.requires is False
    assert outcome.rebuild.reason == RebuildReason.NONE
    assert outcome.safety_lock is False
    assert outcome.context.trace.reasons == ("axes:scoped:spf_sun",)

    before = axes_by_name(first.axes)
    after = axes_by_name(outcome.axes)
    fresh = axes_by_name(calculate_skin_axes({"spf_frequency": "never"}))
    for name in ("oiliness", "hydration", "barrier", "inflammation"):
        assert after[name] == before[name]
    for name in ("pigmentation", "photoaging"):
        assert after[name] == fresh[name]

    assert outcome.rule.id == "oily_acne"
    assert outcome.template.id == "acne_oily_basic"
    assert cache_backend.keys() == ["plan:u1:1", "recommendations:u1:1"]
    assert await service._cache.get_plan("u1", 1) == cached_plan


async def test_critical_question_code_recreates_profile(service, profiles):
    first_goals = (await _first(service, profiles)).profile.main_goals
    outcome = await service.evaluate(SubmissionRequest(
        "u1", {"age": "45plus"}, topic_id="spf_sun",
    ))
    assert outcome.profile_version == 2
    assert outcome.profile_recreated is True
    assert outcome.context.trace.reasons == ("axes:full",)
    assert outcome.profile.main_goals == first_goals


async def test_skin_type_retake_recreates_profile_from_scratch(service, profiles, cache_backend):
    first = await _first(service, profiles)
    assert axes_by_name(first.axes)["pigmentation"].value > 0

    outcome = await service.evaluate(SubmissionRequest(
        "u1", {"skin_type": "dry"}, topic_id="skin_type",
    ))

    assert outcome.profile_version == 2
    assert outcome.profile_recreated is True
    assert outcome.context.trace.reasons == ("axes:full",)
    assert outcome.axes == calculate_skin_axes({"skin_type": "dry"})
    assert outcome.profile.skin_type == SkinTypeKey.DRY
    assert outcome.profile.main_goals == first.profile.main_goals
    assert outcome.rebuild.reason == RebuildReason.TOPIC_REQUIRES_PLAN
    assert outcome.safety_lock is False
    assert cache_backend.keys() == ["plan:u1:2", "recommendations:u1:2"]


async def test_recreation_drops_fields_the_topic_redefines(service, profiles):
    profiles.store(await service.evaluate(SubmissionRequest(
        "u1", {**FIRST_ANSWERS, "seasonal_changes": "winter_drier"},
    )))

    outcome = await service.evaluate(SubmissionRequest(
        "u1", {"skin_type": "dry"}, topic_id="skin_type",
    ))
    assert outcome.profile.seasonality == "none"
    assert outcome.profile.sensitivity == "low"


# --- fallbacks ---

async def test_default_rule_when_nothing_matches(service):
    outcome = await service.evaluate(SubmissionRequest(
        "u2", {"skin_type": "dry", "skin_goals": ["wrinkles"]},
    ))
    assert outcome.used_default_rule is True
    assert outcome.rule.id == "default"
    assert list(outcome.step_products) == ["cleanser", "toner", "moisturizer", "spf", "serum"]
    assert outcome.template.id == "default_balanced"


async def test_failing_cache_never_fails_submission(profiles, catalog, rule_set):
    class BrokenBackend:
        async def get(self, key):
            raise CacheBackendError("down", operation="get", key=key)

        async def set(self, key, value, ttl_seconds):
            raise CacheBackendError("down", operation="set", key=key)

        async def delete(self, *keys):
            raise CacheBackendError("down", operation="delete")

    service = ProfileDecisionService(profiles, catalog, rule_set, DecisionCache(BrokenBackend()))
    outcome = await service.evaluate(SubmissionRequest("u1", FIRST_ANSWERS))
    assert outcome.profile_version == 1


async def test_service_without_cache(profiles, catalog, rule_set):
    service = ProfileDecisionService(profiles, catalog, rule_set)
    outcome = await service.evaluate(SubmissionRequest("u1", FIRST_ANSWERS))
    assert outcome.rule.id == "oily_acne"
    await service.invalidate_user("u1")


async def test_invalidate_user_clears_every_version(service, profiles, cache_backend):
    await _first(service, profiles)
    await service.evaluate(SubmissionRequest(
        "u1", {"pregnancy_breastfeeding": "pregnant"}, topic_id="pregnancy",
    ))
    await service.invalidate_user("u1")
    assert cache_backend.keys() == []
