"""Cache Keys — shape of the versioned plan/recommendation cache keys.

Invariants:
    - plan:{user_id}:{profile_version} lives ~7 days; recommendations:{user_id}:{profile_version}
      lives ~30 minutes
    - A full-user wipe enumerates versions 1..max_version: the store has no prefix scan
"""

PLAN_TTL_SECONDS = 7 * 24 * 60 * 60
RECOMMENDATIONS_TTL_SECONDS = 30 * 60


def plan_cache_key(user_id: str, profile_version: int) -> str:
    return f"plan:{user_id}:{profile_version}"


def recommendations_cache_key(user_id: str, profile_version: int) -> str:
    return f"recommendations:{user_id}:{profile_version}"


def version_cache_keys(user_id: str, profile_version: int) -> tuple[str, str]:
    return (
        plan_cache_key(user_id, profile_version),
        recommendations_cache_key(user_id, profile_version),
    )


def all_user_cache_keys(user_id: str, max_version: int) -> list[str]:
    keys: list[str] = []
    for version in range(1, max_version + 1):
        keys.extend(version_cache_keys(user_id, version))
    return keys
