from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Protocol

import redis

_LOG = logging.getLogger("devcamper.rate_limit")


@dataclass(frozen=True)
class WindowUsage:
    """Counter state for one client after a request was counted."""

    limit: int
    hits: int
    reset_after_seconds: int

    @property
    def allowed(self) -> bool:
        return self.hits <= self.limit

    @property
    def remaining(self) -> int:
        return max(self.limit - self.hits, 0)


class RateLimiter(Protocol):
    def hit(self, client_key: str) -> WindowUsage:
        ...


class InMemoryRateLimiter:
    """Fixed-window counter kept in process memory."""

    def __init__(self, limit: int, window_seconds: int, clock=time.monotonic):
        self.limit = int(limit)
        self.window_seconds = max(int(window_seconds), 1)
        self._clock = clock
        self._windows: dict[str, tuple[int, float]] = {}
        self._lock = Lock()

    def hit(self, client_key: str) -> WindowUsage:
        now = self._clock()
        with self._lock:
            hits, window_end = self._windows.get(client_key, (0, now))
            if window_end <= now:
                hits, window_end = 0, now + self.window_seconds
            hits += 1
            self._windows[client_key] = (hits, window_end)
        return WindowUsage(self.limit, hits, max(int(window_end - now), 0))


class RedisRateLimiter:
    """Fixed-window counter shared between workers through Redis.

    When Redis stops answering, requests are counted in process memory until
    it comes back.
    """

    def __init__(self, client: redis.Redis, limit: int, window_seconds: int, prefix: str = "devcamper:rate:"):
        self.client = client
        self.limit = int(limit)
        self.window_seconds = max(int(window_seconds), 1)
        self.prefix = prefix
        self.fallback = InMemoryRateLimiter(limit, window_seconds)

    def hit(self, client_key: str) -> WindowUsage:
        try:
            return self._hit_redis(self.prefix + client_key)
        except redis.RedisError as exc:
            _LOG.warning("Redis limiter error (%s); counting %s in memory", exc, client_key)
            return self.fallback.hit(client_key)

    def _hit_redis(self, key: str) -> WindowUsage:
        pipe = self.client.pipeline()
        pipe.incr(key)
        pipe.ttl(key)
        hits, ttl = pipe.execute()
        ttl = int(ttl)
        if ttl < 0:
            # first hit of the window, or a key that lost its expiry
            self.client.expire(key, self.window_seconds)
            ttl = self.window_seconds
        return WindowUsage(self.limit, int(hits), ttl)


def build_rate_limiter(redis_url: str, *, limit: int, window_seconds: int) -> RateLimiter:
    if not str(redis_url or "").strip():
        return InMemoryRateLimiter(limit, window_seconds)
    try:
        client = redis.Redis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=0.4,
            socket_connect_timeout=0.4,
        )
        client.ping()
    except redis.RedisError:
        _LOG.warning("Redis at %s unreachable; counting requests in memory", redis_url)
        return InMemoryRateLimiter(limit, window_seconds)
    return RedisRateLimiter(client, limit, window_seconds)
