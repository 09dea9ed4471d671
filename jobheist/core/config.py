from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


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


@dataclass(frozen=True)
class Settings:
    api_key: str | None
    log_level: str
    sentry_dsn: str | None
    rate_limit: str
    rate_limit_enabled: bool
    cors_allowed_origins: tuple[str, ...]
    max_upload_bytes: int
    openai_base_url: str | None
    openai_timeout_s: float
    openai_max_retries: int
    firecrawl_base_url: str
    firecrawl_timeout_s: float
    firecrawl_max_retries: int
    firecrawl_max_age_ms: int


settings = Settings(
    api_key=_get_env("API_KEY"),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    rate_limit=_get_env("RATE_LIMIT", "20/minute") or "20/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
        ],
    ),
    max_upload_bytes=_get_env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
    openai_base_url=_get_env("OPENAI_BASE_URL"),
    openai_timeout_s=_get_env_float("OPENAI_TIMEOUT_S", 120.0),
    openai_max_retries=_get_env_int("OPENAI_MAX_RETRIES", 2),
    firecrawl_base_url=_get_env("FIRECRAWL_BASE_URL", "https://api.firecrawl.dev") or "https://api.firecrawl.dev",
    firecrawl_timeout_s=_get_env_float("FIRECRAWL_TIMEOUT_S", 60.0),
    firecrawl_max_retries=_get_env_int("FIRECRAWL_MAX_RETRIES", 2),
    firecrawl_max_age_ms=_get_env_int("FIRECRAWL_MAX_AGE_MS", 3_600_000),
)
