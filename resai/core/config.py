from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

_PLACEHOLDER_SECRETS = {"", "changeme", "dev-only-jwt-secret-change-me"}


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    env: str
    api_prefix: str
    database_url: str
    jwt_secret: str
    jwt_algorithm: str
    jwt_expiration_minutes: int
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_credentials: bool
    rate_limit_enabled: bool
    ai_rate_limit: str
    admin_email: str | None
    admin_password: str | None
    free_monthly_ai_limit: int


settings = Settings(
    env=(_get_env("ENV", "dev") or "dev").strip().lower(),
    api_prefix=(_get_env("API_PREFIX", "/api") or "/api").rstrip("/"),
    database_url=_get_env("DATABASE_URL", "sqlite:///data/resai.db") or "sqlite:///data/resai.db",
    jwt_secret=_get_env("JWT_SECRET", "dev-only-jwt-secret-change-me") or "dev-only-jwt-secret-change-me",
    jwt_algorithm=_get_env("JWT_ALGORITHM", "HS256") or "HS256",
    jwt_expiration_minutes=_get_env_int("JWT_EXPIRATION_MINUTES", 60 * 24),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
        ],
    ),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", True),
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    ai_rate_limit=_get_env("AI_RATE_LIMIT", "20/minute") or "20/minute",
    admin_email=_get_env("ADMIN_EMAIL"),
    admin_password=_get_env("ADMIN_PASSWORD"),
    free_monthly_ai_limit=max(0, _get_env_int("FREE_MONTHLY_AI_LIMIT", 0)),
)

if settings.env == "prod" and settings.jwt_secret.strip().lower() in _PLACEHOLDER_SECRETS:
    raise RuntimeError("JWT_SECRET must be set when ENV=prod.")

if settings.jwt_expiration_minutes <= 0:
    raise RuntimeError("JWT_EXPIRATION_MINUTES must be a positive integer.")
