"""Offline cache layer for the dashboard.

Models the dashboard service worker in Python over injectable collaborators:
- ``CacheStorage`` for named response caches,
- ``Fetcher`` for the network,
- ``Clients`` / ``NotificationCenter`` for windows and notifications.
"""

from .config import OfflineConfig
from .dispatcher import CacheDispatcher, CachePolicy, select_policy
from .http import AiohttpFetcher, FetchRequest, FetchResponse, NetworkError
from .notifications import InMemoryClients, InMemoryNotificationCenter, Notification
from .storage import CacheAddError, InMemoryCacheStorage
from .worker import OfflineWorker, build_offline_worker

__all__ = [
    "AiohttpFetcher",
    "CacheAddError",
    "CacheDispatcher",
    "CachePolicy",
    "FetchRequest",
    "FetchResponse",
    "InMemoryCacheStorage",
    "InMemoryClients",
    "InMemoryNotificationCenter",
    "NetworkError",
    "Notification",
    "OfflineConfig",
    "OfflineWorker",
    "build_offline_worker",
    "select_policy",
]
