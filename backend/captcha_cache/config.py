"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Connection details come from environment variables (never hardcoded beyond local defaults)
    - get_settings() is cached (lru_cache) — single instance per process
    - Non-empty REDIS_CLUSTER_URLS selects cluster mode; otherwise REDIS_URL is used

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Cluster URLs as a comma-separated string: plain env var, no JSON quoting in deployments
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal

from captcha_cache.core.store_config import StoreConfig


class Settings(BaseSettings):
    """Cache-client settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Redis
    redis_url: str = "redis://localhost:6379/"
    redis_cluster_urls: str = ""
    redis_max_connections: int = 20
    redis_pool_timeout_seconds: float | None = 5.0
    redis_socket_timeout_seconds: float | None = None

    @field_validator("redis_url")
    @classmethod
    def require_redis_scheme(cls, v: str) -> str:
        """redis-py only accepts redis://, rediss:// and unix:// URLs."""
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError(f"unsupported Redis URL scheme: {v!r}")
        return v

    # Observability
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @property
    def cluster_urls(self) -> list[str]:
        return [u.strip() for u in self.redis_cluster_urls.split(",") if u.strip()]

    def store_config(self) -> StoreConfig:
        pool_options = {
            "max_connections": self.redis_max_connections,
            "pool_timeout_seconds": self.redis_pool_timeout_seconds,
            "socket_timeout_seconds": self.redis_socket_timeout_seconds,
        }
        if self.cluster_urls:
            return StoreConfig.cluster(self.cluster_urls, **pool_options)
        return StoreConfig.single(self.redis_url, **pool_options)


@lru_cache
def get_settings() -> Settings:
    return Settings()
