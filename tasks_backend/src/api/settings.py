from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'sqlite'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/tasks.db'
    - SQLITE_TIMEOUT_SECONDS: busy timeout for sqlite connections. Default 5
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - JWT_KEY_DIR: directory holding private.pem and public.pem. Default './keys'
    - JWT_TTL_SECONDS: lifetime of issued tokens. Default 3600
    - BCRYPT_ROUNDS: bcrypt cost factor (4..31). Default 10
    - ENFORCE_TASK_OWNERSHIP: 'true' to reject update/delete of other users' tasks (default: false)
    - LOG_LEVEL: root log level. Default 'INFO'
    """

    persistence_backend: str
    sqlite_db_path: str
    sqlite_timeout_seconds: float
    cors_allow_origins: List[str]
    jwt_key_dir: str
    jwt_ttl_seconds: int
    bcrypt_rounds: int
    enforce_task_ownership: bool
    log_level: str


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


def _parse_int(value: str, default: int, minimum: int, maximum: int) -> int:
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return min(max(parsed, minimum), maximum)


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
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        # Fallback to memory if unsupported
        backend = "memory"

    sqlite_path = _get_env("SQLITE_DB_PATH", "./data/tasks.db").strip()
    try:
        sqlite_timeout = float(_get_env("SQLITE_TIMEOUT_SECONDS", "5"))
    except ValueError:
        sqlite_timeout = 5.0
    origins = _parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*"))

    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()

    return Settings(
        persistence_backend=backend,
        sqlite_db_path=sqlite_path,
        sqlite_timeout_seconds=sqlite_timeout,
        cors_allow_origins=origins,
        jwt_key_dir=_get_env("JWT_KEY_DIR", "./keys").strip(),
        jwt_ttl_seconds=_parse_int(_get_env("JWT_TTL_SECONDS", "3600"), 3600, 1, 7 * 24 * 3600),
        bcrypt_rounds=_parse_int(_get_env("BCRYPT_ROUNDS", "10"), 10, 4, 31),
        enforce_task_ownership=_parse_bool(_get_env("ENFORCE_TASK_OWNERSHIP", "false"), False),
        log_level=log_level,
    )
