"""
Tests for the /api/airtable pass-through.

Tests cover:
- CORS origin resolution and preflight
- Rate limiting (429 before anything else runs)
- Path validation and configuration errors
- Upstream error masking
- Query re-encoding and token handling
"""

from urllib.parse import urlencode

import pytest
from httpx import ASGITransport, AsyncClient

from prio_edge.core.rate_limit import InMemoryRateLimitStore
from prio_edge.domain.airtable import AirtableUpstreamError, UpstreamResponse

BASE_ID = "applOjDjhH0RqLtBH"
LEADS_TABLE = "tblMptC862PyL7Znw"
DASHBOARD_ORIGIN = "https://dashboard.prioai.ca"
LEADS_PATH = f"{BASE_ID}/{LEADS_TABLE}"


def _url(path: str) -> str:
    return "/api/airtable?" + urlencode({"path": path})


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_get_forwards_to_airtable(make_app, airtable_client):
    airtable_client.default = UpstreamResponse(status=200, data={"records": [{"id": "rec1"}]})
    app = make_app()

    async with _client(app) as client:
        response = await client.get(_url(LEADS_PATH), headers={"Origin": DASHBOARD_ORIGIN})

    assert response.status_code == 200
    assert response.json() == {"records": [{"id": "rec1"}]}
    assert response.headers["access-control-allow-origin"] == DASHBOARD_ORIGIN
    assert response.headers["access-control-allow-credentials"] == "true"
    assert response.headers["vary"] == "Origin"

    [sent] = airtable_client.calls
    assert sent.method == "GET"
    assert sent.url == f"https://api.airtable.com/v0/{LEADS_PATH}"
    assert sent.body is None


@pytest.mark.asyncio
async def test_unknown_origin_gets_primary_origin(make_app):
    app = make_app()

    async with _client(app) as client:
        allowed = await client.get(_url(LEADS_PATH), headers={"Origin": "http://localhost:3000"})
        foreign = await client.get(_url(LEADS_PATH), headers={"Origin": "https://evil.example"})
        missing = await client.get(_url(LEADS_PATH))

    assert allowed.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert foreign.headers["access-control-allow-origin"] == DASHBOARD_ORIGIN
    assert missing.headers["access-control-allow-origin"] == DASHBOARD_ORIGIN


@pytest.mark.asyncio
async def test_preflight_returns_cors_policy(make_app, airtable_client):
    app = make_app()

    async with _client(app) as client:
        response = await client.options("/api/airtable", headers={"Origin": "https://prioai.ca"})

    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "https://prioai.ca"
    assert response.headers["access-control-allow-methods"] == "GET, POST, PATCH, DELETE, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type, Authorization"
    assert response.headers["access-control-max-age"] == "86400"
    assert airtable_client.calls == []


@pytest.mark.asyncio
async def test_rate_limit_returns_429(make_app, airtable_client, caplog):
    app = make_app(rate_limiter=InMemoryRateLimitStore(limit=2))

    async with _client(app) as client:
        statuses = [
            (await client.get(_url(LEADS_PATH), headers={"X-Forwarded-For": "203.0.113.5"})).status_code
            for _ in range(2)
        ]
        blocked = await client.get(_url(LEADS_PATH), headers={"X-Forwarded-For": "203.0.113.5"})
        other_ip = await client.get(_url(LEADS_PATH), headers={"X-Forwarded-For": "203.0.113.6"})

    assert statuses == [200, 200]
    assert blocked.status_code == 429
    assert blocked.json() == {"error": "Rate limit exceeded. Please try again later."}
    assert blocked.headers["access-control-allow-origin"] == DASHBOARD_ORIGIN
    assert other_ip.status_code == 200
    assert len(airtable_client.calls) == 3
    [record] = [r for r in caplog.records if r.getMessage().startswith("Rate limit exceeded")]
    assert record.getMessage() == "Rate limit exceeded for 203.0.113.5"
    assert record.client_key == "203.0.113.5"


@pytest.mark.asyncio
async def test_rate_limit_ignores_forwarded_header_when_untrusted(make_app):
    app = make_app(rate_limiter=InMemoryRateLimitStore(limit=1), trust_proxy_headers=False)

    async with _client(app) as client:
        first = await client.get(_url(LEADS_PATH), headers={"X-Forwarded-For": "203.0.113.5"})
        second = await client.get(_url(LEADS_PATH), headers={"X-Forwarded-For": "203.0.113.6"})

    assert first.status_code == 200
    assert second.status_code == 429


@pytest.mark.asyncio
async def test_unsupported_method_returns_405(make_app, airtable_client):
    app = make_app()

    async with _client(app) as client:
        response = await client.put(_url(LEADS_PATH), json={})

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}
    assert airtable_client.calls == []


@pytest.mark.asyncio
async def test_missing_path_returns_400(make_app):
    app = make_app()

    async with _client(app) as client:
        response = await client.get("/api/airtable")

    assert response.status_code == 400
    assert response.json() == {"error": "Missing path parameter"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path, error",
    [
        (f"appSomeoneElse/{LEADS_TABLE}", "Invalid base"),
        (f"{BASE_ID}/tblNotAllowed", "Invalid table"),
        (f"{BASE_ID}/../{LEADS_TABLE}", "Invalid path characters"),
        (f"{LEADS_PATH}/bad-id", "Invalid record ID format"),
    ],
)
async def test_invalid_path_returns_400(make_app, airtable_client, path, error):
    app = make_app()

    async with _client(app) as client:
        response = await client.get(_url(path))

    assert response.status_code == 400
    assert response.json() == {"error": error}
    assert airtable_client.calls == []


@pytest.mark.asyncio
async def test_missing_token_returns_500(make_app, airtable_client):
    app = make_app(airtable_token="")

    async with _client(app) as client:
        response = await client.get(_url(LEADS_PATH))

    assert response.status_code == 500
    assert response.json() == {"error": "Server configuration error"}
    assert airtable_client.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "upstream_status, expected_status",
    [(404, 404), (422, 422), (401, 401), (500, 502), (503, 502)],
)
async def test_upstream_errors_are_masked(make_app, airtable_client, upstream_status, expected_status):
    airtable_client.default = UpstreamResponse(
        status=upstream_status,
        data={"error": {"type": "INVALID_PERMISSIONS", "message": "secret details"}},
    )
    app = make_app()

    async with _client(app) as client:
        response = await client.get(_url(LEADS_PATH))

    assert response.status_code == expected_status
    assert response.json() == {"error": "Database request failed"}
    assert "secret" not in response.text


@pytest.mark.asyncio
async def test_unreachable_upstream_returns_500(make_app, airtable_client):
    airtable_client.error = AirtableUpstreamError("connection reset")
    app = make_app()

    async with _client(app) as client:
        response = await client.get(_url(LEADS_PATH))

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


@pytest.mark.asyncio
async def test_query_is_reencoded_with_percent20(make_app, airtable_client):
    app = make_app()
    path = f"{LEADS_PATH}?filterByFormula={{Status}}='New Lead'&pageSize=50"

    async with _client(app) as client:
        response = await client.get(_url(path))

    assert response.status_code == 200
    [sent] = airtable_client.calls
    assert sent.url == (
        f"https://api.airtable.com/v0/{LEADS_PATH}"
        "?filterByFormula=%7BStatus%7D%3D'New%20Lead'&pageSize=50"
    )


@pytest.mark.asyncio
async def test_server_token_is_used_and_body_forwarded(make_app, airtable_client):
    airtable_client.default = UpstreamResponse(status=200, data={"id": "rec9"})
    app = make_app()

    async with _client(app) as client:
        response = await client.patch(
            _url(f"{LEADS_PATH}/rec9"),
            content=b'{"fields": {"Status": "Booked"}}',
            headers={"Authorization": "Bearer client-supplied", "Content-Type": "application/json"},
        )

    assert response.status_code == 200
    [sent] = airtable_client.calls
    assert sent.method == "PATCH"
    assert sent.token == "test-airtable-token"
    assert sent.body == b'{"fields": {"Status": "Booked"}}'


@pytest.mark.asyncio
async def test_identical_gets_are_not_cached(make_app, airtable_client):
    app = make_app()

    async with _client(app) as client:
        await client.get(_url(LEADS_PATH))
        await client.get(_url(LEADS_PATH))

    assert len(airtable_client.calls) == 2


@pytest.mark.asyncio
async def test_request_id_is_echoed(make_app):
    app = make_app()

    async with _client(app) as client:
        response = await client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["x-request-id"] == "req-123"


@pytest.mark.asyncio
async def test_lifespan_closes_clients(make_app, airtable_client):
    app = make_app()

    async with app.router.lifespan_context(app):
        pass

    assert airtable_client.closed is True
