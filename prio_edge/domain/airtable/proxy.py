"""Airtable pass-through pipeline.

rate limit → method check → path presence → path validation → token →
upstream URL → forward → mask errors. Each step either continues or returns a
``Failure(ProxyError)``; routers only format the outcome.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from prio_edge.core.errors import (
    ProxyError,
    bad_request,
    internal_error,
    method_not_allowed,
    rate_limited,
    server_misconfig,
    upstream_failure,
)
from prio_edge.core.rate_limit import RateLimitStore
from prio_edge.core.result import Result, failure, success

from .client import AirtableClient, AirtableUpstreamError
from .paths import AirtablePathPolicy, build_upstream_url

logger = logging.getLogger(__name__)

FORWARDED_METHODS = frozenset({"GET", "POST", "PATCH", "DELETE"})


@dataclass(frozen=True)
class ProxyRequest:
    method: str
    client_key: str
    path: Optional[str]
    body: Optional[bytes] = None


class AirtableProxy:
    def __init__(
        self,
        *,
        client: AirtableClient,
        limiter: RateLimitStore,
        policy: AirtablePathPolicy,
        token: str,
        api_base: str = "https://api.airtable.com/v0",
    ) -> None:
        self._client = client
        self._limiter = limiter
        self._policy = policy
        self._token = token
        self._api_base = api_base

    async def handle(self, request: ProxyRequest) -> Result[Any, ProxyError]:
        method = request.method.upper()

        if not await self._limiter.allow(request.client_key):
            logger.warning(
                "Rate limit exceeded for %s", request.client_key, extra={"client_key": request.client_key}
            )
            return failure(rate_limited())

        if method not in FORWARDED_METHODS:
            return failure(method_not_allowed())

        if not request.path:
            return failure(bad_request("Missing path parameter"))

        check = self._policy.validate(request.path)
        if not check.valid:
            logger.info("airtable.proxy.invalid_path: %s", check.error)
            return failure(bad_request(check.error or "Invalid path"))

        if not self._token:
            logger.error("AIRTABLE_TOKEN is not configured; refusing to forward")
            return failure(server_misconfig())

        url = build_upstream_url(self._api_base, request.path)
        body = request.body if method != "GET" else None
        try:
            upstream = await self._client.send(method, url, token=self._token, body=body)
        except AirtableUpstreamError:
            logger.exception("airtable.proxy.upstream_unreachable")
            return failure(internal_error())

        if not upstream.ok:
            logger.error("Airtable error (HTTP %s): %s", upstream.status, upstream.data)
            return failure(upstream_failure("Database request failed", upstream.status))

        return success(upstream.data)


__all__ = ["AirtableProxy", "FORWARDED_METHODS", "ProxyRequest"]
