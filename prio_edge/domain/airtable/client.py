from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import aiohttp

logger = logging.getLogger(__name__)


class AirtableUpstreamError(RuntimeError):
    """Raised when Airtable cannot be reached or returns an unreadable body."""


@dataclass(frozen=True)
class UpstreamResponse:
    status: int
    data: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class AirtableClient(Protocol):
    async def send(
        self,
        method: str,
        url: str,
        *,
        token: str,
        body: Optional[bytes] = None,
    ) -> UpstreamResponse:
        """Send one request to Airtable and return the decoded JSON body."""

    async def close(self) -> None:
        ...


class AiohttpAirtableClient:
    """Airtable transport over a shared aiohttp session."""

    def __init__(self, *, timeout_seconds: float = 30.0) -> None:
        self._timeout = aiohttp.ClientTimeout(total=float(timeout_seconds))
        self._session: Optional[aiohttp.ClientSession] = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def send(
        self,
        method: str,
        url: str,
        *,
        token: str,
        body: Optional[bytes] = None,
    ) -> UpstreamResponse:
        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
        session = self._get_session()
        try:
            async with session.request(method, url, headers=headers, data=body) as resp:
                raw = await resp.text()
                status = resp.status
        except aiohttp.ClientError as exc:
            raise AirtableUpstreamError(f"Airtable request failed: {exc}") from exc

        try:
            data = json.loads(raw) if raw else None
        except ValueError as exc:
            if 200 <= status < 300:
                raise AirtableUpstreamError(f"Invalid JSON from Airtable (HTTP {status})") from exc
            # Error pages are only ever logged, so keep a bounded excerpt.
            data = {"raw": raw[:2000]}
        return UpstreamResponse(status=status, data=data)

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None


__all__ = ["AiohttpAirtableClient", "AirtableClient", "AirtableUpstreamError", "UpstreamResponse"]
