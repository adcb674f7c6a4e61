"""Decision Cache — best-effort, versioned cache of plans and recommendations.

Invariants:
    - Keys follow core.cache_keys: plan:{user}:{version}, recommendations:{user}:{version}
    - Every backend failure is logged at warning and swallowed: a decision never fails
      because the cache did
    - A corrupt (non-JSON or non-object) entry is deleted and reported as a miss
    - No backend configured means every read misses and every write is a no-op
    - A full-user wipe enumerates versions 1..max_versions (no prefix scan)

Design Decisions:
    - Backend behind the CacheBackend protocol: Redis in production, InMemoryCacheBackend
      in tests and local runs (ADR: no network in the test suite)
    - JSON payloads with sort_keys: identical decisions serialize to identical bytes
"""

import asyncio
import json
import logging
import time
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from dermaplan.core.cache_keys import (
    PLAN_TTL_SECONDS, RECOMMENDATIONS_TTL_SECONDS, all_user_cache_keys,
    plan_cache_key, recommendations_cache_key, version_cache_keys,
)
from dermaplan.core.errors import CacheBackendError
from dermaplan.core.repository_protocols import CacheBackend

logger = logging.getLogger(__name__)


# ─── Backends ───────────────────────────────────────────────────

class RedisCacheBackend:
    """CacheBackend over redis.asyncio; RedisError surfaces as CacheBackendError."""

    def __init__(
        self,
        redis_url: str,
        connect_timeout_s: float = 1.0,
        socket_timeout_s: float = 1.0,
    ) -> None:
        self._redis = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=connect_timeout_s,
            socket_timeout=socket_timeout_s,
        )

    async def get(self, key: str) -> str | None:
        try:
            return await self._redis.get(key)
        except RedisError as e:
            raise CacheBackendError(str(e), operation="get", key=key) from e

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            if ttl_seconds > 0:
                await self._redis.set(key, value, ex=ttl_seconds)
            else:
                await self._redis.set(key, value)
        except RedisError as e:
            raise CacheBackendError(str(e), operation="set", key=key) from e

    async def delete(self, *keys: str) -> None:
        if not keys:
            return
        try:
            await self._redis.delete(*keys)
        except RedisError as e:
            raise CacheBackendError(str(e), operation="delete") from e

    async def close(self) -> None:
        await self._redis.aclose()


class InMemoryCacheBackend:
    """Process-local CacheBackend with monotonic-clock expiry."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._items: dict[str, tuple[str, float | None]] = {}

    async def get(self, key: str) -> str | None:
        async with self._lock:
            record = self._items.get(key)
            if record is None:
                return None
            value, expires_at = record
            if expires_at is not None and time.monotonic() >= expires_at:
                del self._items[key]
                return None
            return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        expires_at = time.monotonic() + ttl_seconds if ttl_seconds > 0 else None
        async with self._lock:
            self._items[key] = (value, expires_at)

    async def delete(self, *keys: str) -> None:
        async with self._lock:
            for key in keys:
                self._items.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._items)


# ─── Cache ──────────────────────────────────────────────────────

def _dumps(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), sort_keys=True)


class DecisionCache:
    def __init__(
        self,
        backend: CacheBackend | None = None,
        plan_ttl_seconds: int = PLAN_TTL_SECONDS,
        recommendations_ttl_seconds: int = RECOMMENDATIONS_TTL_SECONDS,
        max_profile_versions: int = 100,
    ) -> None:
        self._backend = backend
        self._plan_ttl = plan_ttl_seconds
        self._recommendations_ttl = recommendations_ttl_seconds
        self._max_versions = max_profile_versions

    @property
    def enabled(self) -> bool:
        return self._backend is not None

    async def get_plan(self, user_id: str, profile_version: int) -> dict[str, Any] | None:
        return await self._read(plan_cache_key(user_id, profile_version))

    async def set_plan(
        self, user_id: str, profile_version: int, plan: dict[str, Any],
    ) -> None:
        await self._write(plan_cache_key(user_id, profile_version), plan, self._plan_ttl)

    async def get_recommendations(
        self, user_id: str, profile_version: int,
    ) -> dict[str, Any] | None:
        return await self._read(recommendations_cache_key(user_id, profile_version))

    async def set_recommendations(
        self, user_id: str, profile_version: int, recommendations: dict[str, Any],
    ) -> None:
        await self._write(
            recommendations_cache_key(user_id, profile_version),
            recommendations, self._recommendations_ttl,
        )

    async def invalidate_version(self, user_id: str, profile_version: int) -> None:
        await self._delete(*version_cache_keys(user_id, profile_version))

    async def invalidate_user(self, user_id: str) -> None:
        await self._delete(*all_user_cache_keys(user_id, self._max_versions))

    # --- Internals ---

    async def _read(self, key: str) -> dict[str, Any] | None:
        if self._backend is None:
            return None
        try:
            raw = await self._backend.get(key)
        except Exception as e:
            logger.warning(
                f"Cache read failed: {e}",
                extra={"cache_key": key, "operation": "get"},
            )
            return None
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError):
            payload = None
        if not isinstance(payload, dict):
            logger.warning(
                "Corrupt cache entry dropped",
                extra={"cache_key": key, "operation": "get"},
            )
            await self._delete(key)
            return None
        return payload

    async def _write(self, key: str, payload: dict[str, Any], ttl_seconds: int) -> None:
        if self._backend is None:
            return
        try:
            await self._backend.set(key, _dumps(payload), ttl_seconds)
        except Exception as e:
            logger.warning(
                f"Cache write failed: {e}",
                extra={"cache_key": key, "operation": "set"},
            )

    async def _delete(self, *keys: str) -> None:
        if self._backend is None or not keys:
            return
        try:
            await self._backend.delete(*keys)
        except Exception as e:
            logger.warning(
                f"Cache invalidation failed: {e}",
                extra={"cache_key": keys[0], "operation": "delete"},
            )
