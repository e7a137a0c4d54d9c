from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from infrastructure.minecraft.profile_client import DEFAULT_PROFILE_URL


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration, read from the environment (and `.env`, if any).
    """

    db_path: str = "creators.db"
    database_url: Optional[str] = None
    minecraft_profile_url: str = DEFAULT_PROFILE_URL
    minecraft_auth_timeout: float = 10.0
    translation_workers: int = 2
    translation_api_url: Optional[str] = None
    translation_api_key: Optional[str] = None
    sentry_dsn: Optional[str] = None
    sentry_environment: str = "production"
    log_level: str = "INFO"


def _positive_number(env: Mapping[str, str], key: str, default, kind):
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = kind(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}.") from None
    if value <= 0:
        raise ValueError(f"{key} must be greater than zero, got {raw!r}.")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build `Settings` from `env`, defaulting to `os.environ` after loading
    a `.env` file from the working directory.
    """

    if env is None:
        load_dotenv()
        env = os.environ

    return Settings(
        db_path=env.get("DB_PATH") or Settings.db_path,
        database_url=env.get("DATABASE_URL") or None,
        minecraft_profile_url=env.get("MINECRAFT_PROFILE_URL") or DEFAULT_PROFILE_URL,
        minecraft_auth_timeout=_positive_number(
            env, "MINECRAFT_AUTH_TIMEOUT", Settings.minecraft_auth_timeout, float
        ),
        translation_workers=_positive_number(
            env, "TRANSLATION_WORKERS", Settings.translation_workers, int
        ),
        translation_api_url=env.get("TRANSLATION_API_URL") or None,
        translation_api_key=env.get("TRANSLATION_API_KEY") or None,
        sentry_dsn=env.get("SENTRY_DSN") or None,
        sentry_environment=env.get("SENTRY_ENVIRONMENT") or Settings.sentry_environment,
        log_level=(env.get("LOG_LEVEL") or Settings.log_level).upper(),
    )
