from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./data/todos.db"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'database' (default) or 'memory'
    - DATABASE_URL: SQLAlchemy async URL. Default 'sqlite+aiosqlite:///./data/todos.db'
    - DATABASE_ECHO: 'true' to log every SQL statement (default: false)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: DEBUG, INFO (default), WARNING, ERROR
    - LOG_FORMAT: 'console' (default) or 'json'
    """

    persistence_backend: str = "database"
    database_url: str = DEFAULT_DATABASE_URL
    database_echo: bool = False
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    log_format: str = "console"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "database").strip().lower()
    if backend not in {"database", "memory"}:
        backend = "database"

    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()
    if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        log_level = "INFO"

    log_format = _get_env("LOG_FORMAT", "console").strip().lower()
    if log_format not in {"console", "json"}:
        log_format = "console"

    return Settings(
        persistence_backend=backend,
        database_url=_get_env("DATABASE_URL", DEFAULT_DATABASE_URL).strip(),
        database_echo=_parse_bool(_get_env("DATABASE_ECHO", "false")),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=log_level,
        log_format=log_format,
    )
