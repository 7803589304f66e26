"""FastAPI dependencies that read shared services from ``app.state``."""

from __future__ import annotations

from fastapi import Request

from prio_edge.core.rate_limit import RateLimitStore
from prio_edge.core.settings import Settings
from prio_edge.domain.airtable import AirtablePathPolicy, AirtableProxy
from prio_edge.domain.scoring import IntentScorer


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_limiter(request: Request) -> RateLimitStore:
    return request.app.state.rate_limiter


def get_airtable_proxy(request: Request) -> AirtableProxy:
    settings = get_app_settings(request)
    return AirtableProxy(
        client=request.app.state.airtable_client,
        limiter=get_rate_limiter(request),
        policy=AirtablePathPolicy.from_settings(settings),
        token=settings.airtable_token,
        api_base=settings.airtable_api_base,
    )


def get_intent_scorer(request: Request) -> IntentScorer:
    settings = get_app_settings(request)
    provider = request.app.state.ai_provider
    return IntentScorer(
        provider=provider,
        model=settings.openai_model,
        configured=bool(settings.openai_token) or provider.name == "fake",
        timeout_seconds=settings.upstream_timeout_seconds,
    )


__all__ = ["get_airtable_proxy", "get_app_settings", "get_intent_scorer", "get_rate_limiter"]
