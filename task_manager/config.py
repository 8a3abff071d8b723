"""Settings loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

ENV_PREFIX = "TASK_MANAGER"

DEFAULT_DATABASE_URL = "sqlite:///./tasks.db"
DEFAULT_PORT = 5001


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == "" else v.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def normalize_database_url(url: str) -> str:
    # Hosted Postgres providers still hand out the old scheme
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    # Client side
    api_url: str = f"http://localhost:{DEFAULT_PORT}"
    api_timeout: float = 10.0

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


def load_settings() -> Settings:
    """Build Settings from the current environment."""
    return Settings(
        database_url=normalize_database_url(_env("DATABASE_URL", DEFAULT_DATABASE_URL)),
        host=_env(_k("HOST"), "127.0.0.1"),
        port=_env_int("PORT", DEFAULT_PORT),
        cors_origins=_env_list(_k("CORS_ORIGINS"), ["*"]),
        log_level=_env(_k("LOG_LEVEL"), "INFO").upper(),
        api_url=_env(_k("API_URL"), f"http://localhost:{DEFAULT_PORT}").rstrip("/"),
        api_timeout=_env_float(_k("API_TIMEOUT"), 10.0),
    )
