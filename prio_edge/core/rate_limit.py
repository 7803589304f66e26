"""Fixed-window rate limiting behind a small store interface.

Backends:
- ``InMemoryRateLimitStore``: per-process table, lost on restart and not
  shared between instances.
- ``RedisRateLimitStore``: one counter key per client and window, shared by
  every instance pointing at the same Redis.
- ``AllowAllRateLimitStore``: used when RATE_LIMIT_ENABLED=false.

Limits are advisory: ``allow()`` never blocks or queues, callers turn a
``False`` into a 429.
"""

from __future__ import annotations

import abc
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urlparse

from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 1000
DEFAULT_WINDOW_SECONDS = 60.0
CLEANUP_THRESHOLD = 10_000


class RateLimitStore(abc.ABC):
    """Answers whether one more request from ``key`` fits in its window."""

    def __init__(self, *, limit: int = DEFAULT_LIMIT, window_seconds: float = DEFAULT_WINDOW_SECONDS) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abc.abstractmethod
    async def allow(self, key: str) -> bool:
        """Count one request for ``key`` and report whether it is within the limit."""

    async def close(self) -> None:  # pragma: no cover - optional override
        return None


class AllowAllRateLimitStore(RateLimitStore):
    async def allow(self, key: str) -> bool:
        return True


@dataclass
class RateRecord:
    count: int
    reset_at: float


class InMemoryRateLimitStore(RateLimitStore):
    """In-process fixed window per key.

    Expired keys are only pruned once the table grows past
    ``cleanup_threshold`` entries.
    """

    def __init__(
        self,
        *,
        limit: int = DEFAULT_LIMIT,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        cleanup_threshold: int = CLEANUP_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(limit=limit, window_seconds=window_seconds)
        self.cleanup_threshold = cleanup_threshold
        self._clock = clock
        self._records: dict[str, RateRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def get(self, key: str) -> Optional[RateRecord]:
        return self._records.get(key)

    def hit(self, key: str) -> bool:
        if not key:
            return True
        now = self._clock()
        record = self._records.get(key)
        if record is None:
            record = RateRecord(count=0, reset_at=now + self.window_seconds)

        if now > record.reset_at:
            record.count = 1
            record.reset_at = now + self.window_seconds
        else:
            record.count += 1

        self._records[key] = record

        if len(self._records) > self.cleanup_threshold:
            self._prune(now)

        return record.count <= self.limit

    async def allow(self, key: str) -> bool:
        return self.hit(key)

    def _prune(self, now: float) -> None:
        expired = [key for key, record in self._records.items() if now > record.reset_at]
        for key in expired:
            del self._records[key]
        if expired:
            self._logger.debug("Pruned %d expired rate-limit records", len(expired))


class RedisRateLimitStore(RateLimitStore):
    """Fixed-window counter in Redis: INCR, and PEXPIRE on the window's first hit.

    Redis errors fail open so an outage of the limiter does not take the
    proxy down with it.
    """

    def __init__(
        self,
        redis,
        *,
        limit: int = DEFAULT_LIMIT,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        prefix: str = "ratelimit:",
    ) -> None:
        super().__init__(limit=limit, window_seconds=window_seconds)
        self._redis = redis
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisRateLimitStore":
        from redis.asyncio import Redis

        parsed = urlparse(url)
        logger.info(
            "Rate limiter Redis target: redis://%s:%s/%s",
            parsed.hostname or "localhost",
            parsed.port or 6379,
            parsed.path.strip("/") or "0",
        )
        return cls(Redis.from_url(url), **kwargs)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def allow(self, key: str) -> bool:
        if not key:
            return True
        redis_key = self._key(key)
        window_ms = max(1, int(self.window_seconds * 1000))
        try:
            count = int(await self._redis.incr(redis_key))
            if count == 1:
                await self._redis.pexpire(redis_key, window_ms)
            elif await self._redis.pttl(redis_key) == -1:
                # Counter survived without a TTL (crash between INCR and PEXPIRE).
                await self._redis.pexpire(redis_key, window_ms)
        except RedisError:
            self._logger.warning("Rate limit check failed; allowing request", exc_info=True)
            return True
        return count <= self.limit

    async def close(self) -> None:
        # redis-py < 5 only has close()
        closer = getattr(self._redis, "aclose", None) or self._redis.close
        await closer()


def build_rate_limiter(settings) -> RateLimitStore:
    """Pick the rate limit backend from settings."""

    if not settings.rate_limit_enabled:
        logger.info("Rate limiting disabled (RATE_LIMIT_ENABLED=false)")
        return AllowAllRateLimitStore(limit=settings.rate_limit, window_seconds=settings.rate_window_seconds)

    if settings.rate_limit_redis_url:
        logger.info("Rate limiter using Redis storage")
        return RedisRateLimitStore.from_url(
            settings.rate_limit_redis_url,
            limit=settings.rate_limit,
            window_seconds=settings.rate_window_seconds,
        )

    if settings.environment == "production":
        logger.warning(
            "Rate limiter using in-memory storage: limits are per instance and reset on restart. "
            "Set RATE_LIMIT_REDIS_URL to share limits across instances."
        )
    return InMemoryRateLimitStore(limit=settings.rate_limit, window_seconds=settings.rate_window_seconds)


__all__ = [
    "AllowAllRateLimitStore",
    "CLEANUP_THRESHOLD",
    "InMemoryRateLimitStore",
    "RateLimitStore",
    "RateRecord",
    "RedisRateLimitStore",
    "build_rate_limiter",
]
