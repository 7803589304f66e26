"""Push notification display and click handling."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Union
from urllib.parse import urljoin

from .config import OfflineConfig

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    title: str
    body: str = ""
    icon: str = ""
    badge: str = ""
    data: str = "/"
    vibrate: tuple[int, ...] = ()
    closed: bool = False

    def close(self) -> None:
        self.closed = True


class NotificationCenter(Protocol):
    async def show(self, notification: Notification) -> None:
        ...


class WindowClient(Protocol):
    url: str

    async def navigate(self, url: str) -> None:
        ...

    async def focus(self) -> None:
        ...


class Clients(Protocol):
    async def match_all(self, *, include_uncontrolled: bool = False) -> list[WindowClient]:
        ...

    async def open_window(self, url: str) -> Optional[WindowClient]:
        ...

    async def claim(self) -> None:
        ...


def parse_push_payload(payload: Union[bytes, str, None], *, default_title: str) -> dict[str, Any]:
    """Decode a push payload: a JSON object, else plain text used as the body."""
    if payload is None:
        return {}
    text = payload.decode("utf-8", errors="replace") if isinstance(payload, bytes) else payload
    try:
        data = json.loads(text)
    except ValueError:
        return {"title": default_title, "body": text}
    return data if isinstance(data, dict) else {}


def build_notification(payload: Union[bytes, str, None], config: OfflineConfig) -> Notification:
    data = parse_push_payload(payload, default_title=config.app_name)
    return Notification(
        title=str(data.get("title") or config.app_name),
        body=str(data.get("body") or ""),
        icon=config.notification_icon,
        badge=config.notification_badge,
        data=str(data.get("url") or "/"),
        vibrate=config.notification_vibrate,
    )


async def focus_or_open(notification: Notification, clients: Clients, config: OfflineConfig) -> Optional[WindowClient]:
    """Close the notification, then reuse an open dashboard window or open one."""
    notification.close()
    url = notification.data or "/"
    for client in await clients.match_all(include_uncontrolled=True):
        if config.origin in client.url:
            await client.navigate(url)
            await client.focus()
            return client
    return await clients.open_window(url)


@dataclass
class InMemoryWindowClient:
    url: str
    focused: bool = False
    history: list[str] = field(default_factory=list)

    async def navigate(self, url: str) -> None:
        self.history.append(self.url)
        self.url = urljoin(self.url, url)

    async def focus(self) -> None:
        self.focused = True


class InMemoryClients:
    """Window registry for running the worker outside a browser."""

    def __init__(self, origin: str, windows: Optional[list[InMemoryWindowClient]] = None) -> None:
        self._origin = origin.rstrip("/")
        self.windows: list[InMemoryWindowClient] = list(windows or [])
        self.claimed = False

    async def match_all(self, *, include_uncontrolled: bool = False) -> list[WindowClient]:
        return list(self.windows)

    async def open_window(self, url: str) -> Optional[WindowClient]:
        window = InMemoryWindowClient(url=urljoin(self._origin + "/", url), focused=True)
        self.windows.append(window)
        return window

    async def claim(self) -> None:
        self.claimed = True


class InMemoryNotificationCenter:
    def __init__(self) -> None:
        self.shown: list[Notification] = []

    async def show(self, notification: Notification) -> None:
        logger.debug("Showing notification %r", notification.title)
        self.shown.append(notification)


__all__ = [
    "Clients",
    "InMemoryClients",
    "InMemoryNotificationCenter",
    "InMemoryWindowClient",
    "Notification",
    "NotificationCenter",
    "WindowClient",
    "build_notification",
    "focus_or_open",
    "parse_push_payload",
]
