"""FastAPI application wiring for the dashboard edge API."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from prio_edge.apps.edge_api.middleware import RequestContextMiddleware
from prio_edge.apps.edge_api.routers import airtable, intent_score, system
from prio_edge.core.ai.providers import AIProvider, FakeProvider, OpenAIProvider
from prio_edge.core.logging import configure_logging
from prio_edge.core.rate_limit import RateLimitStore, build_rate_limiter
from prio_edge.core.settings import Settings, get_settings
from prio_edge.domain.airtable import AiohttpAirtableClient, AirtableClient

configure_logging()
logger = logging.getLogger(__name__)


def _build_ai_provider(settings: Settings) -> AIProvider:
    if settings.ai_provider == "fake":
        logger.warning("AI_PROVIDER=fake: intent scores are stubbed")
        return FakeProvider()
    return OpenAIProvider(api_key=settings.openai_token, base_url=settings.openai_base_url)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting edge API (environment=%s, ai_provider=%s)",
        app.state.settings.environment,
        app.state.ai_provider.name,
        extra={"environment": app.state.settings.environment, "ai_provider": app.state.ai_provider.name},
    )
    try:
        yield
    finally:
        logger.info("Shutting down edge API...")
        try:
            await app.state.airtable_client.close()
        except Exception as exc:
            logger.error("Error closing Airtable client: %s", exc)
        try:
            await app.state.rate_limiter.close()
        except Exception as exc:
            logger.error("Error closing rate limiter: %s", exc)


def create_app(
    *,
    settings: Optional[Settings] = None,
    rate_limiter: Optional[RateLimitStore] = None,
    airtable_client: Optional[AirtableClient] = None,
    ai_provider: Optional[AIProvider] = None,
) -> FastAPI:
    """Build the app. Collaborators may be injected; missing ones come from settings."""

    settings = settings or get_settings()
    app = FastAPI(
        title="Prio Edge API",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.rate_limiter = rate_limiter if rate_limiter is not None else build_rate_limiter(settings)
    if airtable_client is None:
        airtable_client = AiohttpAirtableClient(timeout_seconds=settings.upstream_timeout_seconds)
    app.state.airtable_client = airtable_client
    app.state.ai_provider = ai_provider if ai_provider is not None else _build_ai_provider(settings)

    app.add_middleware(RequestContextMiddleware)

    app.include_router(system.router)
    app.include_router(airtable.router)
    app.include_router(intent_score.router)

    return app


__all__ = ["create_app", "lifespan"]
