"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache) — single instance per process
    - redis_url unset means the decision service runs without a cache

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Defaults provided for every setting: the service works out of the box in tests
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from dermaplan.core.cache_keys import PLAN_TTL_SECONDS, RECOMMENDATIONS_TTL_SECONDS


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Cache
    redis_url: str | None = None
    plan_cache_ttl_seconds: int = PLAN_TTL_SECONDS
    recommendations_cache_ttl_seconds: int = RECOMMENDATIONS_TTL_SECONDS
    cache_max_profile_versions: int = 100

    @field_validator("redis_url", mode="before")
    @classmethod
    def blank_redis_url_disables_cache(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    # Rules
    default_rule_id: str | None = None

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
