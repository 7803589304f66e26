"""Request/response values and the network fetcher used by the offline layer."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol
from urllib.parse import urlsplit

import aiohttp

logger = logging.getLogger(__name__)


class NetworkError(RuntimeError):
    """The network could not produce a response (offline, DNS, reset, timeout)."""


def _lower_keys(headers: Optional[Mapping[str, str]]) -> dict[str, str]:
    return {key.lower(): value for key, value in (headers or {}).items()}


@dataclass(frozen=True)
class FetchRequest:
    url: str
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _lower_keys(self.headers))

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())

    @property
    def origin(self) -> str:
        return origin_of(self.url)

    @property
    def path(self) -> str:
        return urlsplit(self.url).path or "/"

    @property
    def hostname(self) -> str:
        return (urlsplit(self.url).hostname or "").lower()


@dataclass(frozen=True)
class FetchResponse:
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def origin_of(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}"


class Fetcher(Protocol):
    async def __call__(self, request: FetchRequest) -> FetchResponse:
        """Fetch from the network, raising NetworkError when no response arrives."""


class AiohttpFetcher:
    """Network fetcher backed by one aiohttp session."""

    def __init__(self, *, timeout_seconds: float = 30.0) -> None:
        self._timeout = aiohttp.ClientTimeout(total=float(timeout_seconds))
        self._session: Optional[aiohttp.ClientSession] = None

    async def __call__(self, request: FetchRequest) -> FetchResponse:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        try:
            async with self._session.request(
                request.method, request.url, headers=dict(request.headers)
            ) as resp:
                body = await resp.read()
                return FetchResponse(status=resp.status, headers=dict(resp.headers), body=body)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.debug("fetch failed for %s: %s", request.url, exc)
            raise NetworkError(str(exc) or exc.__class__.__name__) from exc

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None


__all__ = ["AiohttpFetcher", "FetchRequest", "FetchResponse", "Fetcher", "NetworkError", "origin_of"]
