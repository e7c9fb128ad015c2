from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'mongodb' (default) or 'memory'
    - MONGODB_URI: connection string. Default 'mongodb://127.0.0.1:27017'
    - MONGODB_DATABASE: database name. Default 'tasks-app'
    - MONGODB_COLLECTION: collection holding task documents. Default 'tasks'
    - MONGODB_TIMEOUT_MS: server selection timeout in milliseconds. Default 5000
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: root log level name. Default 'INFO'
    - HOST / PORT: bind address used by the `task-api` runner. Default 0.0.0.0:9988
    """

    persistence_backend: str
    mongodb_uri: str
    mongodb_database: str
    mongodb_collection: str
    mongodb_timeout_ms: int
    cors_allow_origins: List[str]
    log_level: str
    host: str
    port: int


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
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
    backend = _get_env("PERSISTENCE_BACKEND", "mongodb").strip().lower()
    if backend not in {"mongodb", "memory"}:
        backend = "mongodb"

    return Settings(
        persistence_backend=backend,
        mongodb_uri=_get_env("MONGODB_URI", "mongodb://127.0.0.1:27017").strip(),
        mongodb_database=_get_env("MONGODB_DATABASE", "tasks-app").strip(),
        mongodb_collection=_get_env("MONGODB_COLLECTION", "tasks").strip(),
        mongodb_timeout_ms=_parse_int(_get_env("MONGODB_TIMEOUT_MS", "5000"), 5000),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        host=_get_env("HOST", "0.0.0.0").strip(),
        port=_parse_int(_get_env("PORT", "9988"), 9988),
    )
