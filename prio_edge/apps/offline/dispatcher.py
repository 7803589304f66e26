"""Per-request cache policy for the dashboard's offline layer.

| request                                   | policy                       |
|-------------------------------------------|------------------------------|
| non-GET                                   | pass through                 |
| cross-origin, not a font host             | pass through                 |
| cross-origin font host                    | cache first, fill on miss    |
| same-origin under the API prefix          | network only                 |
| same-origin, Accept includes text/html    | network first                |
| any other same-origin request             | cache first, fill on 200     |

``handle()`` returns None for pass-through and network-only requests: the
caller sends those to the network itself and nothing is cached.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Optional

from .config import OfflineConfig
from .http import FetchRequest, FetchResponse, Fetcher, NetworkError
from .storage import CacheStorage

logger = logging.getLogger(__name__)

OFFLINE_DOCUMENT = (
    b"<!doctype html><html><head><meta charset=\"utf-8\"><title>Offline</title></head>"
    b"<body><h1>You are offline</h1><p>Reconnect and reload to continue.</p></body></html>"
)


class CachePolicy(str, enum.Enum):
    PASS_THROUGH = "pass_through"
    NETWORK_ONLY = "network_only"
    NETWORK_FIRST = "network_first"
    CACHE_FIRST = "cache_first"
    FONT_CACHE_FIRST = "font_cache_first"


def offline_response() -> FetchResponse:
    return FetchResponse(
        status=503,
        headers={"Content-Type": "text/html; charset=utf-8"},
        body=OFFLINE_DOCUMENT,
    )


def select_policy(request: FetchRequest, config: OfflineConfig) -> CachePolicy:
    if request.method.upper() != "GET":
        return CachePolicy.PASS_THROUGH

    if request.origin != config.origin:
        if request.hostname in config.font_hosts:
            return CachePolicy.FONT_CACHE_FIRST
        return CachePolicy.PASS_THROUGH

    if request.path.startswith(config.api_prefix):
        return CachePolicy.NETWORK_ONLY

    if "text/html" in (request.header("accept") or ""):
        return CachePolicy.NETWORK_FIRST

    return CachePolicy.CACHE_FIRST


class CacheDispatcher:
    def __init__(self, config: OfflineConfig, *, storage: CacheStorage, fetcher: Fetcher) -> None:
        self._config = config
        self._storage = storage
        self._fetcher = fetcher
        self._pending: set[asyncio.Task] = set()

    async def handle(self, request: FetchRequest) -> Optional[FetchResponse]:
        policy = select_policy(request, self._config)
        if policy in (CachePolicy.PASS_THROUGH, CachePolicy.NETWORK_ONLY):
            return None
        if policy is CachePolicy.NETWORK_FIRST:
            return await self._network_first(request)
        if policy is CachePolicy.FONT_CACHE_FIRST:
            return await self._cache_first(request, store_any_status=True)
        return await self._cache_first(request, store_any_status=False)

    async def _network_first(self, request: FetchRequest) -> FetchResponse:
        try:
            response = await self._fetcher(request)
        except NetworkError:
            logger.info("Network unavailable for %s; serving cached copy", request.url)
            cached = await self._storage.match(request.url)
            if cached is None:
                cached = await self._storage.match(self._config.root_url)
            return cached if cached is not None else offline_response()

        self._store_later(request.url, response)
        return response

    async def _cache_first(self, request: FetchRequest, *, store_any_status: bool) -> FetchResponse:
        cached = await self._storage.match(request.url)
        if cached is not None:
            return cached

        response = await self._fetcher(request)
        if store_any_status or response.status == 200:
            self._store_later(request.url, response)
        return response

    def _store_later(self, url: str, response: FetchResponse) -> None:
        task = asyncio.create_task(self._store(url, response), name="offline_cache_put")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _store(self, url: str, response: FetchResponse) -> None:
        try:
            cache = await self._storage.open(self._config.cache_name)
            await cache.put(url, response)
        except Exception:
            logger.exception("Failed to cache response for %s", url)

    async def drain(self) -> None:
        """Wait for every background cache write scheduled so far."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


__all__ = ["CacheDispatcher", "CachePolicy", "OFFLINE_DOCUMENT", "offline_response", "select_policy"]
