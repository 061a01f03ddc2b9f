"""Settings loaded from environment variables (+ optional .env).

Every variable uses the ``MIRUTASU_`` prefix, e.g. ``MIRUTASU_DATABASE_URL``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "MIRUTASU"


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(_k(name))
    return default if v is None or v.strip() == "" else v.strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(_k(name))
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(_k(name))
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_timezone(name: str, default: str) -> str:
    tz_name = _env(name, default)
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r in %s, using %s", tz_name, _k(name), default)
        return default
    return tz_name


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(_k(name))
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


@dataclass(frozen=True)
class Settings:
    app_name: str = "Mirutasu"
    environment: str = "development"
    database_url: str = "sqlite:///./mirutasu.db"
    timezone: str = "UTC"

    # ---- Sessions / auth ----
    session_days: int = 30
    session_cookie_name: str = "auth_session"
    bcrypt_rounds: int = 12

    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:5173"])
    seed_games: bool = True

    # ---- Logging ----
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def load_settings() -> Settings:
    """Build Settings from the current environment."""
    load_dotenv(override=False)
    defaults = Settings()
    return Settings(
        app_name=_env("APP_NAME", defaults.app_name),
        environment=_env("ENVIRONMENT", defaults.environment).lower(),
        database_url=_env("DATABASE_URL", defaults.database_url),
        timezone=_env_timezone("TIMEZONE", defaults.timezone),
        session_days=max(1, _env_int("SESSION_DAYS", defaults.session_days)),
        session_cookie_name=_env("SESSION_COOKIE", defaults.session_cookie_name),
        bcrypt_rounds=_env_int("BCRYPT_ROUNDS", defaults.bcrypt_rounds),
        cors_origins=_env_list("CORS_ORIGINS", defaults.cors_origins),
        seed_games=_env_bool("SEED_GAMES", defaults.seed_games),
        log_level=_env("LOG_LEVEL", defaults.log_level).upper(),
        log_file=_env("LOG_FILE") or None,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
