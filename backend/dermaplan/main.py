"""Dermaplan — decision service wiring.

Invariants:
    - Logging is configured once from settings before the rule set is loaded
    - Rule and template documents are validated at wiring time: a bad document
      fails startup, not a user request
    - No redis_url configured => DecisionCache without backend (every call a no-op)

Design Decisions:
    - A factory function instead of module-level singletons: callers (HTTP handlers,
      workers, tests) own the service lifetime (ADR: explicit dependencies)
"""

import logging
from typing import Any, Iterable, Mapping

from dermaplan.config import Settings, get_settings
from dermaplan.core.repository_protocols import CacheBackend, CatalogRepository, ProfileRepository
from dermaplan.infrastructure.decision_cache import DecisionCache, RedisCacheBackend
from dermaplan.infrastructure.observability import setup_logging
from dermaplan.services.decision_pipeline import ProfileDecisionService
from dermaplan.services.rule_loader import load_rule_set

logger = logging.getLogger(__name__)


def create_decision_cache(
    settings: Settings, backend: CacheBackend | None = None,
) -> DecisionCache:
    if backend is None and settings.redis_url:
        backend = RedisCacheBackend(settings.redis_url)
    return DecisionCache(
        backend,
        plan_ttl_seconds=settings.plan_cache_ttl_seconds,
        recommendations_ttl_seconds=settings.recommendations_cache_ttl_seconds,
        max_profile_versions=settings.cache_max_profile_versions,
    )


def create_decision_service(
    profiles: ProfileRepository,
    catalog: CatalogRepository,
    rule_documents: Iterable[Mapping[str, Any]],
    template_documents: Iterable[Mapping[str, Any]] | None = None,
    settings: Settings | None = None,
    cache_backend: CacheBackend | None = None,
) -> ProfileDecisionService:
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)
    rule_set = load_rule_set(
        rule_documents, template_documents, default_rule_id=settings.default_rule_id,
    )
    cache = create_decision_cache(settings, cache_backend)
    logger.info(
        "Decision service ready",
        extra={"rule_id": rule_set.default_rule.id, "operation": "startup"},
    )
    if not cache.enabled:
        logger.info("Decision cache disabled (no redis_url)")
    return ProfileDecisionService(profiles, catalog, rule_set, cache)
