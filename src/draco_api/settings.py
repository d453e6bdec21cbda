"""Draco API settings (Pydantic v2, ``DRACO_*`` environment variables)."""

from __future__ import annotations

from collections.abc import Callable
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ALLOWED_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
ALLOWED_LOG_FORMATS = frozenset({"console", "json"})
DEFAULT_DATABASE_URL = "sqlite:///./draco.sqlite"


def draco_settings_config() -> SettingsConfigDict:
    """Return the standard Draco ``BaseSettings`` config dict."""

    return SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DRACO_",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
        str_strip_whitespace=True,
    )


def create_settings_accessors[T](
    settings_type: type[T],
) -> tuple[Callable[[], T], Callable[[], T]]:
    """Create ``get_settings`` and ``reload_settings`` helpers for a settings class."""

    @lru_cache(maxsize=1)
    def _build() -> T:
        return settings_type()

    def get_settings() -> T:
        return _build()

    def reload_settings() -> T:
        _build.cache_clear()
        return _build()

    return get_settings, reload_settings


def normalize_log_format(value: str, *, env_var: str = "DRACO_LOG_FORMAT") -> str:
    normalized = value.strip().lower()
    if normalized not in ALLOWED_LOG_FORMATS:
        allowed = ", ".join(sorted(ALLOWED_LOG_FORMATS))
        raise ValueError(f"{env_var} must be one of: {allowed}.")
    return normalized


def normalize_log_level(value: str | None, *, env_var: str) -> str | None:
    if value is None:
        return None
    normalized = value.strip().upper()
    if normalized == "WARN":
        normalized = "WARNING"
    if normalized not in ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(ALLOWED_LOG_LEVELS))
        raise ValueError(f"{env_var} must be one of: {allowed}.")
    return normalized


class Settings(BaseSettings):
    """FastAPI settings loaded from DRACO_* environment variables."""

    model_config = draco_settings_config()

    # Core
    app_name: str = "Draco Sports Manager API"
    app_version: str = "unknown"
    log_format: str = "console"
    log_level: str = "INFO"
    request_log_level: str | None = None

    # Database
    database_url: str = Field(default=DEFAULT_DATABASE_URL, min_length=1)
    database_echo: bool = False
    database_log_level: str | None = None

    # Authorization
    rbac_synthesize_manager_roles: bool = True

    @model_validator(mode="after")
    def _normalize_logging(self) -> Settings:
        self.log_format = normalize_log_format(self.log_format)
        self.log_level = normalize_log_level(self.log_level, env_var="DRACO_LOG_LEVEL") or "INFO"
        self.request_log_level = normalize_log_level(
            self.request_log_level, env_var="DRACO_REQUEST_LOG_LEVEL"
        )
        self.database_log_level = normalize_log_level(
            self.database_log_level, env_var="DRACO_DATABASE_LOG_LEVEL"
        )
        return self

    @property
    def effective_request_log_level(self) -> str:
        return self.request_log_level or self.log_level


get_settings, reload_settings = create_settings_accessors(Settings)

__all__ = [
    "ALLOWED_LOG_FORMATS",
    "ALLOWED_LOG_LEVELS",
    "Settings",
    "create_settings_accessors",
    "draco_settings_config",
    "get_settings",
    "normalize_log_format",
    "normalize_log_level",
    "reload_settings",
]
