from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

__all__ = [
    "ConfigError",
    "LoggingSettings",
    "IntrospectionSettings",
    "CacheSettings",
    "get_settings",
]


# ─────────────────────────────────────────────────────────────
# Section configs
# ─────────────────────────────────────────────────────────────


class LoggingSettings(BaseModel):
    level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    format: str = (
        "%(asctime)-20s %(name)-40s "
        "%(levelname)-8s: %(message)s"
    )


class IntrospectionSettings(BaseModel):
    """
    Schema awareness of the cache.

    Without an introspection result the cache runs permissively: every
    field is nullable and every fragment matches every type.

    In production, override via:
    - env var:     GRAPHCACHE_INTROSPECTION__PATH
    - dotenv:      .env / .env.local
    """

    path: Path | None = Field(
        default=None,
        description="JSON introspection result loaded when a Store has no schema.",
    )
    warn_on_mismatch: bool = Field(
        True,
        description="Log a warning when a type or field is missing from the schema.",
    )


# ─────────────────────────────────────────────────────────────
# Top-level settings
# ─────────────────────────────────────────────────────────────


class CacheSettings(BaseSettings):
    """
    Canonical configuration for a graphcache Store.

    Precedence (highest → lowest):

    1. Init kwargs (tests/overrides)
    2. Environment variables
    3. .env and .env.local
    4. Defaults in this class
    """

    model_config = SettingsConfigDict(
        env_prefix="GRAPHCACHE_",  # GRAPHCACHE_LOGGING__LEVEL, GRAPHCACHE_INTROSPECTION__PATH, ...
        env_file=(".env", ".env.local"),  # .env.local overrides .env
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    # forces DEBUG on the graphcache logger regardless of logging.level
    debug: bool = False

    logging: LoggingSettings = LoggingSettings()
    introspection: IntrospectionSettings = IntrospectionSettings()

    def validate_introspection_path(self) -> None:
        """Ensure a configured introspection file actually exists."""
        path = self.introspection.path
        if path is not None and not path.is_file():
            raise ConfigError(f"Introspection file not found: {path}")


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> CacheSettings:
    """
    Cached accessor for process-wide settings.

    `overrides` are init kwargs → highest precedence (handy in tests).
    """
    settings = CacheSettings(**overrides)
    settings.validate_introspection_path()
    return settings
