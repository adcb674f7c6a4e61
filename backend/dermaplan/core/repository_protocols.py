"""Repository Protocols — the IO contracts the decision service is constructed with.

Invariants:
    - Core modules never perform IO; profiles, catalog and cache are reached only
      through these protocols
    - A missing prior profile is None, not an error

Design Decisions:
    - typing.Protocol: fakes in tests and real adapters satisfy the contract structurally
    - Protocol methods are async; the pure functions they feed are not
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

from dermaplan.core.axis_scoring import SkinAxisScore
from dermaplan.core.domain_context import CatalogRef


@dataclass(frozen=True)
class ProfileRecord:
    """Latest stored profile snapshot for a user."""
    profile: Mapping[str, Any]
    version: int
    axes: tuple[SkinAxisScore, ...] = field(default=())


class ProfileRepository(Protocol):
    async def get_current(self, user_id: str) -> ProfileRecord | None: ...


class CatalogRepository(Protocol):
    async def get_catalog(self) -> CatalogRef: ...


class CacheBackend(Protocol):
    """String key/value store with per-key TTL in seconds."""
    async def get(self, key: str) -> str | None: ...
    async def set(self, key: str, value: str, ttl_seconds: int) -> None: ...
    async def delete(self, *keys: str) -> None: ...
