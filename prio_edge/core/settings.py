from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from prio_edge.core.env import load_env


DEFAULT_ALLOWED_ORIGINS = (
    "https://dashboard.prioai.ca",
    "https://dash.prioai.ca",
    "https://prioai.ca",
    "https://www.prioai.ca",
    "http://localhost:3000",
    "http://localhost:8788",
    "http://127.0.0.1:8788",
)
DEFAULT_AIRTABLE_BASE_ID = "applOjDjhH0RqLtBH"
DEFAULT_AIRTABLE_TABLE_IDS = ("tblMptC862PyL7Znw", "tblLpN4wceakfNFpq")
DEFAULT_CACHE_NAME = "prio-ai-v1"


@dataclass(frozen=True)
class Settings:
    environment: str  # development, production, staging, test
    airtable_token: str
    airtable_api_base: str
    airtable_base_id: str
    airtable_table_ids: tuple[str, ...]
    openai_token: str
    openai_base_url: str
    openai_model: str
    ai_provider: str
    allowed_origins: tuple[str, ...]
    rate_limit_enabled: bool
    rate_limit: int
    rate_window_seconds: float
    rate_limit_redis_url: str
    trust_proxy_headers: bool
    upstream_timeout_seconds: float
    cache_name: str
    log_level: str
    log_json: bool
    log_file: str


def _get_int(name: str, default: int, *, minimum: Optional[int] = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except (TypeError, ValueError):
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def _get_float(name: str, default: float, *, minimum: Optional[float] = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw.strip())
    except (TypeError, ValueError):
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    return items or default


load_env()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    environment = os.getenv("ENVIRONMENT", "development").strip().lower()
    if environment not in {"development", "production", "staging", "test"}:
        environment = "development"

    ai_provider = os.getenv("AI_PROVIDER", "openai").strip().lower() or "openai"
    if ai_provider not in {"openai", "fake"}:
        ai_provider = "openai"

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

    return Settings(
        environment=environment,
        airtable_token=os.getenv("AIRTABLE_TOKEN", "").strip(),
        airtable_api_base=os.getenv("AIRTABLE_API_BASE", "https://api.airtable.com/v0").strip().rstrip("/"),
        airtable_base_id=os.getenv("AIRTABLE_BASE_ID", DEFAULT_AIRTABLE_BASE_ID).strip() or DEFAULT_AIRTABLE_BASE_ID,
        airtable_table_ids=_get_list("AIRTABLE_TABLE_IDS", DEFAULT_AIRTABLE_TABLE_IDS),
        openai_token=os.getenv("OPENAI_TOKEN", "").strip(),
        openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").strip().rstrip("/"),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4.1-mini").strip() or "gpt-4.1-mini",
        ai_provider=ai_provider,
        allowed_origins=_get_list("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS),
        rate_limit_enabled=_get_bool("RATE_LIMIT_ENABLED", default=True),
        rate_limit=_get_int("RATE_LIMIT", 1000, minimum=1),
        rate_window_seconds=_get_float("RATE_WINDOW_SECONDS", 60.0, minimum=0.001),
        rate_limit_redis_url=os.getenv("RATE_LIMIT_REDIS_URL", "").strip(),
        trust_proxy_headers=_get_bool("TRUST_PROXY_HEADERS", default=True),
        upstream_timeout_seconds=_get_float("UPSTREAM_TIMEOUT_SECONDS", 30.0, minimum=1.0),
        cache_name=os.getenv("CACHE_NAME", DEFAULT_CACHE_NAME).strip() or DEFAULT_CACHE_NAME,
        log_level=log_level,
        log_json=_get_bool("LOG_JSON", default=False),
        log_file=os.getenv("LOG_FILE", "").strip(),
    )


__all__ = [
    "DEFAULT_AIRTABLE_BASE_ID",
    "DEFAULT_AIRTABLE_TABLE_IDS",
    "DEFAULT_ALLOWED_ORIGINS",
    "DEFAULT_CACHE_NAME",
    "Settings",
    "get_settings",
]
