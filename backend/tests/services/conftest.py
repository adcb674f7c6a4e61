"""Service test fixtures — fresh fakes, rule set and a cached decision service.

Invariants:
    - Every test gets fresh fakes: no state leaks between tests
    - The cache runs on InMemoryCacheBackend; no network in the suite

Design Decisions:
    - Fakes satisfy the repository protocols structurally instead of patching the
      service internals (ADR: explicit dependencies)
"""

import pytest

from dermaplan.infrastructure.decision_cache import DecisionCache, InMemoryCacheBackend
from dermaplan.services.decision_pipeline import ProfileDecisionService
from dermaplan.services.rule_loader import load_rule_set

from tests.services.fakes import RULE_DOCUMENTS, FakeCatalogRepository, FakeProfileRepository


@pytest.fixture
def profiles():
    return FakeProfileRepository()


@pytest.fixture
def catalog():
    return FakeCatalogRepository()


@pytest.fixture
def cache_backend():
    return InMemoryCacheBackend()


@pytest.fixture
def rule_set():
    return load_rule_set(RULE_DOCUMENTS)


@pytest.fixture
def service(profiles, catalog, rule_set, cache_backend):
    return ProfileDecisionService(profiles, catalog, rule_set, DecisionCache(cache_backend))
