import dataclasses
import os
from dataclasses import dataclass
from typing import Optional

import pytest

TEST_ENV = {
    "ENVIRONMENT": "test",
    "AIRTABLE_TOKEN": "test-airtable-token",
    "OPENAI_TOKEN": "test-openai-token",
    "AI_PROVIDER": "fake",
    "RATE_LIMIT_ENABLED": "true",
    "RATE_LIMIT_REDIS_URL": "",
    "TRUST_PROXY_HEADERS": "true",
    "LOG_JSON": "false",
    "LOG_FILE": "",
}
# Fall back to built-in defaults for these.
UNSET_ENV = (
    "ALLOWED_ORIGINS",
    "AIRTABLE_API_BASE",
    "AIRTABLE_BASE_ID",
    "AIRTABLE_TABLE_IDS",
    "OPENAI_MODEL",
    "OPENAI_BASE_URL",
    "RATE_LIMIT",
    "RATE_WINDOW_SECONDS",
    "CACHE_NAME",
)

for key, value in TEST_ENV.items():
    os.environ[key] = value
for key in UNSET_ENV:
    os.environ.pop(key, None)

from prio_edge.apps.edge_api.app import create_app  # noqa: E402
from prio_edge.core import settings as settings_module  # noqa: E402
from prio_edge.core.ai.providers import FakeProvider  # noqa: E402
from prio_edge.domain.airtable import UpstreamResponse  # noqa: E402

BASE_ID = "applOjDjhH0RqLtBH"
LEADS_TABLE = "tblMptC862PyL7Znw"
DASHBOARD_ORIGIN = "https://dashboard.prioai.ca"


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Every test starts from the TEST_ENV settings."""
    settings_module.get_settings.cache_clear()
    yield
    settings_module.get_settings.cache_clear()


@dataclass
class SentRequest:
    method: str
    url: str
    token: str
    body: Optional[bytes]


class FakeAirtableClient:
    """Records forwarded requests and replays canned upstream responses."""

    def __init__(self) -> None:
        self.calls: list[SentRequest] = []
        self.responses: list[UpstreamResponse] = []
        self.default = UpstreamResponse(status=200, data={"records": []})
        self.error: Optional[Exception] = None
        self.closed = False

    async def send(self, method, url, *, token, body=None):
        self.calls.append(SentRequest(method=method, url=url, token=token, body=body))
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return self.default

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def airtable_client() -> FakeAirtableClient:
    return FakeAirtableClient()


@pytest.fixture
def make_app(airtable_client):
    """Build the edge app with fakes; settings fields can be overridden."""

    def _factory(*, rate_limiter=None, ai_provider=None, **overrides):
        settings = dataclasses.replace(settings_module.get_settings(), **overrides)
        return create_app(
            settings=settings,
            rate_limiter=rate_limiter,
            airtable_client=airtable_client,
            ai_provider=ai_provider if ai_provider is not None else FakeProvider(),
        )

    return _factory
