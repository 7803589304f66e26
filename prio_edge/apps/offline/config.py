from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urljoin

from prio_edge.core.settings import DEFAULT_CACHE_NAME

from .http import origin_of

SHELL_ASSETS = (
    "/",
    "/assets/styles.css",
    "/assets/auth.css",
    "/assets/favicon.png",
    "/assets/logo_white.png",
    "/assets/icon-192.png",
    "/assets/icon-512.png",
    "/manifest.json",
)
FONT_HOSTS = ("fonts.googleapis.com", "fonts.gstatic.com")


@dataclass(frozen=True)
class OfflineConfig:
    """Everything the offline worker needs to know about the deployment.

    ``cache_name`` is the cache generation tag: bumping it makes the next
    activation drop every cache built by older versions.
    """

    origin: str
    cache_name: str = DEFAULT_CACHE_NAME
    shell_assets: tuple[str, ...] = SHELL_ASSETS
    font_hosts: tuple[str, ...] = FONT_HOSTS
    api_prefix: str = "/api/"
    root_path: str = "/"
    app_name: str = "Prio AI"
    notification_icon: str = "/assets/icon-192.png"
    notification_badge: str = "/assets/favicon.png"
    notification_vibrate: tuple[int, ...] = (200, 100, 200)

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", origin_of(self.origin))

    @classmethod
    def from_settings(cls, settings, *, origin: str) -> "OfflineConfig":
        return cls(origin=origin, cache_name=settings.cache_name)

    def resolve(self, path: str) -> str:
        return urljoin(self.origin + "/", path)

    @property
    def root_url(self) -> str:
        return self.resolve(self.root_path)

    def shell_urls(self) -> list[str]:
        return [self.resolve(asset) for asset in self.shell_assets]


__all__ = ["FONT_HOSTS", "OfflineConfig", "SHELL_ASSETS"]
