from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


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


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


DEV_JWT_SECRET = "dev-only-jwt-secret-change-me"


@dataclass(frozen=True)
class Settings:
    app_env: str
    log_level: str
    sentry_dsn: str | None
    database_path: str
    upload_dir: str
    max_upload_bytes: int
    jwt_secret: str
    jwt_algorithm: str
    jwt_expires_days: int
    ai_enabled: bool
    openai_api_key: str | None
    openai_base_url: str | None
    ai_model: str
    ai_temperature: float
    ai_timeout_s: float
    ai_max_retries: int
    rate_limit: str
    rate_limit_enabled: bool
    cors_allowed_origins: tuple[str, ...]

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


def load_settings() -> Settings:
    load_dotenv()
    app_env = (_get_env("APP_ENV", "development") or "development").strip().lower()
    if app_env not in {"development", "test", "production"}:
        raise RuntimeError("APP_ENV must be one of 'development', 'test' or 'production'.")

    jwt_secret = _get_env("JWT_SECRET")
    if not jwt_secret:
        if app_env == "production":
            raise RuntimeError("APP_ENV=production requires JWT_SECRET to be set.")
        jwt_secret = DEV_JWT_SECRET

    return Settings(
        app_env=app_env,
        log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
        sentry_dsn=_get_env("SENTRY_DSN"),
        database_path=_get_env("DATABASE_PATH", "data/resume_optimizer.db") or "data/resume_optimizer.db",
        upload_dir=_get_env("UPLOAD_DIR", "data/uploads") or "data/uploads",
        max_upload_bytes=max(1, _get_env_int("MAX_FILE_SIZE", 5 * 1024 * 1024)),
        jwt_secret=jwt_secret,
        jwt_algorithm=_get_env("JWT_ALGORITHM", "HS256") or "HS256",
        jwt_expires_days=max(1, _get_env_int("JWT_EXPIRES_DAYS", 7)),
        ai_enabled=_get_env_bool("AI_ENABLED", True),
        openai_api_key=_get_env("OPENAI_API_KEY"),
        openai_base_url=_get_env("OPENAI_BASE_URL"),
        ai_model=(_get_env("AI_MODEL") or _get_env("OPENAI_MODEL") or "gpt-4o-mini").strip(),
        ai_temperature=_get_env_float("AI_TEMPERATURE", 0.3),
        ai_timeout_s=max(1.0, _get_env_float("AI_TIMEOUT_S", 20.0)),
        ai_max_retries=max(0, _get_env_int("AI_MAX_RETRIES", 1)),
        rate_limit=_get_env("RATE_LIMIT", "30/minute") or "30/minute",
        rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
        cors_allowed_origins=_get_env_list(
            "CORS_ALLOWED_ORIGINS",
            [
                "http://localhost:5173",
                "http://127.0.0.1:5173",
                "http://localhost:3000",
            ],
        ),
    )
