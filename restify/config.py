"""Runtime configuration sourced from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_BASE = "/restify-api"
DEFAULT_LOGS_REPOSITORY = "action-logs"
DEFAULT_REPOSITORIES_PATH = "restify_repositories"
DEFAULT_PER_PAGE = 15
DEFAULT_DATABASE_URL = "sqlite+pysqlite:///./restify.db"


@dataclass(frozen=True)
class Settings:
    base: str
    logs_repository: str
    repositories_path: str
    per_page: int
    database_url: str
    log_level: str


def _normalize_base(value: str | None) -> str:
    """Return the API base path with a single leading slash and no trailing one.

    An empty or missing value falls back to the default base.
    """
    if value is None:
        return DEFAULT_BASE
    cleaned = value.strip().strip("/")
    if not cleaned:
        return DEFAULT_BASE
    return f"/{cleaned}"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Return the cached settings sourced from the environment."""
    return Settings(
        base=_normalize_base(os.getenv("RESTIFY_BASE")),
        logs_repository=(os.getenv("RESTIFY_LOGS_REPOSITORY") or DEFAULT_LOGS_REPOSITORY).strip(),
        repositories_path=os.getenv("RESTIFY_REPOSITORIES_PATH") or DEFAULT_REPOSITORIES_PATH,
        per_page=_int_env("RESTIFY_PER_PAGE", DEFAULT_PER_PAGE),
        database_url=os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def refresh_settings_cache() -> None:
    """Invalidate cached settings (useful for tests)."""
    get_settings.cache_clear()
