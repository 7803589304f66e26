"""Named response caches, modelled on the browser Cache Storage API.

Entries are keyed by absolute URL and overwritten on every put (last write
wins). ``CacheStorage.match`` searches every cache in creation order.
"""

from __future__ import annotations

import abc
import asyncio
import logging
from typing import Iterable, Optional

from .http import FetchRequest, FetchResponse, Fetcher, NetworkError

logger = logging.getLogger(__name__)


class CacheAddError(RuntimeError):
    """``add_all`` failed; nothing was stored."""


class Cache(abc.ABC):
    def __init__(self, name: str) -> None:
        self.name = name

    @abc.abstractmethod
    async def match(self, url: str) -> Optional[FetchResponse]:
        """Return the stored response for ``url``."""

    @abc.abstractmethod
    async def put(self, url: str, response: FetchResponse) -> None:
        """Store (or overwrite) the response for ``url``."""

    @abc.abstractmethod
    async def delete(self, url: str) -> bool:
        """Evict ``url``; report whether something was removed."""

    @abc.abstractmethod
    async def keys(self) -> list[str]:
        ...

    async def add_all(self, urls: Iterable[str], fetcher: Fetcher) -> None:
        """Fetch every URL and store them all, or store none.

        Any network failure or non-2xx response aborts the whole batch.
        """
        url_list = list(urls)
        results = await asyncio.gather(
            *(fetcher(FetchRequest(url=url)) for url in url_list),
            return_exceptions=True,
        )
        for url, result in zip(url_list, results):
            if isinstance(result, NetworkError):
                raise CacheAddError(f"Request for {url} failed: {result}") from result
            if isinstance(result, BaseException):
                raise result
            if not result.ok:
                raise CacheAddError(f"Request for {url} returned HTTP {result.status}")
        for url, result in zip(url_list, results):
            await self.put(url, result)


class CacheStorage(abc.ABC):
    @abc.abstractmethod
    async def open(self, name: str) -> Cache:
        """Return the cache called ``name``, creating it if needed."""

    @abc.abstractmethod
    async def keys(self) -> list[str]:
        """Names of every cache, in creation order."""

    @abc.abstractmethod
    async def delete(self, name: str) -> bool:
        ...

    async def match(self, url: str) -> Optional[FetchResponse]:
        for name in await self.keys():
            cache = await self.open(name)
            response = await cache.match(url)
            if response is not None:
                return response
        return None


class InMemoryCache(Cache):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._entries: dict[str, FetchResponse] = {}

    async def match(self, url: str) -> Optional[FetchResponse]:
        return self._entries.get(url)

    async def put(self, url: str, response: FetchResponse) -> None:
        self._entries[url] = response

    async def delete(self, url: str) -> bool:
        return self._entries.pop(url, None) is not None

    async def keys(self) -> list[str]:
        return list(self._entries)


class InMemoryCacheStorage(CacheStorage):
    """Process-local cache storage; dict insertion order is creation order."""

    def __init__(self) -> None:
        self._caches: dict[str, InMemoryCache] = {}

    async def open(self, name: str) -> Cache:
        cache = self._caches.get(name)
        if cache is None:
            cache = InMemoryCache(name)
            self._caches[name] = cache
        return cache

    async def keys(self) -> list[str]:
        return list(self._caches)

    async def delete(self, name: str) -> bool:
        removed = self._caches.pop(name, None) is not None
        if removed:
            logger.info("Deleted cache %s", name)
        return removed


__all__ = ["Cache", "CacheAddError", "CacheStorage", "InMemoryCache", "InMemoryCacheStorage"]
