"""Offline worker lifecycle: install, activate, fetch, push, notificationclick."""

from __future__ import annotations

import logging
from typing import Optional, Union

from .config import OfflineConfig
from .dispatcher import CacheDispatcher
from .http import AiohttpFetcher, FetchRequest, FetchResponse, Fetcher
from .notifications import (
    Clients,
    InMemoryClients,
    InMemoryNotificationCenter,
    Notification,
    NotificationCenter,
    WindowClient,
    build_notification,
    focus_or_open,
)
from .storage import CacheStorage, InMemoryCacheStorage

logger = logging.getLogger(__name__)


class OfflineWorker:
    def __init__(
        self,
        config: OfflineConfig,
        *,
        storage: CacheStorage,
        fetcher: Fetcher,
        clients: Clients,
        notifications: NotificationCenter,
    ) -> None:
        self.config = config
        self.storage = storage
        self.clients = clients
        self.notifications = notifications
        self.dispatcher = CacheDispatcher(config, storage=storage, fetcher=fetcher)
        self._fetcher = fetcher
        self.skip_waiting_requested = False

    async def install(self) -> None:
        """Pre-cache the shell assets into the current cache.

        Skip-waiting is requested up front, so a new version activates as soon
        as installation completes instead of waiting for old tabs to close.
        """
        self.skip_waiting_requested = True
        cache = await self.storage.open(self.config.cache_name)
        await cache.add_all(self.config.shell_urls(), self._fetcher)
        logger.info("Installed %d shell assets into %s", len(self.config.shell_assets), self.config.cache_name)

    async def activate(self) -> list[str]:
        """Drop caches from other versions and take control of open clients."""
        stale = [name for name in await self.storage.keys() if name != self.config.cache_name]
        for name in stale:
            await self.storage.delete(name)
        await self.clients.claim()
        if stale:
            logger.info("Activated %s; removed caches: %s", self.config.cache_name, ", ".join(stale))
        return stale

    async def fetch(self, request: FetchRequest) -> Optional[FetchResponse]:
        return await self.dispatcher.handle(request)

    async def push(self, payload: Union[bytes, str, None]) -> Notification:
        notification = build_notification(payload, self.config)
        await self.notifications.show(notification)
        return notification

    async def notification_click(self, notification: Notification) -> Optional[WindowClient]:
        return await focus_or_open(notification, self.clients, self.config)

    async def drain(self) -> None:
        await self.dispatcher.drain()

    async def close(self) -> None:
        await self.drain()
        closer = getattr(self._fetcher, "close", None)
        if closer is not None:
            await closer()


def build_offline_worker(settings, *, origin: str) -> OfflineWorker:
    """Worker over a real network fetcher and in-process storage and clients."""
    config = OfflineConfig.from_settings(settings, origin=origin)
    return OfflineWorker(
        config,
        storage=InMemoryCacheStorage(),
        fetcher=AiohttpFetcher(timeout_seconds=settings.upstream_timeout_seconds),
        clients=InMemoryClients(config.origin),
        notifications=InMemoryNotificationCenter(),
    )


__all__ = ["OfflineWorker", "build_offline_worker"]
