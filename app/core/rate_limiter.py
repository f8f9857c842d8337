"""Per-identity request rate limiting.

Two fixed-window implementations share the :class:`RateLimiter` interface.
``InMemoryRateLimiter`` keeps its counters in process memory, so each worker
enforces the limit on its own; use it for single-instance deployments and
tests. ``RedisRateLimiter`` keeps the counters in Redis and enforces one limit
across every instance.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Protocol

import redis.asyncio as redis

from app.core.config import RateLimitBackendEnum, settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after: int = 0


class RateLimiter(Protocol):
    async def check(self, key: str) -> RateLimitDecision: ...


class InMemoryRateLimiter:
    """Fixed-window counter per key, held in process memory.

    Expired windows are swept at most once per window length, so idle keys
    do not accumulate.
    """

    def __init__(self, limit: int, window_seconds: int, clock=time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, tuple[int, float]] = {}
        self._next_sweep = 0.0
        self._lock = asyncio.Lock()

    def _sweep(self, now: float) -> None:
        if now < self._next_sweep:
            return
        self._windows = {key: window for key, window in self._windows.items() if window[1] > now}
        self._next_sweep = now + self.window_seconds

    async def check(self, key: str) -> RateLimitDecision:
        async with self._lock:
            now = self._clock()
            self._sweep(now)
            count, reset_at = self._windows.get(key, (0, 0.0))

            if now >= reset_at:
                self._windows[key] = (1, now + self.window_seconds)
                return RateLimitDecision(allowed=True)

            if count >= self.limit:
                return RateLimitDecision(allowed=False, retry_after=max(1, int(reset_at - now)))

            self._windows[key] = (count + 1, reset_at)
            return RateLimitDecision(allowed=True)

    def reset(self) -> None:
        self._windows.clear()


class RedisRateLimiter:
    """Fixed-window counter per key, shared through Redis."""

    def __init__(self, client: redis.Redis, limit: int, window_seconds: int, prefix: str = "chat_rate"):
        self._client = client
        self.limit = limit
        self.window_seconds = window_seconds
        self.prefix = prefix

    async def check(self, key: str) -> RateLimitDecision:
        window = int(time.time() // self.window_seconds)
        redis_key = f"{self.prefix}:{key}:{window}"

        pipe = self._client.pipeline(transaction=True)
        pipe.incr(redis_key)
        pipe.expire(redis_key, self.window_seconds + 5)
        count, _ = await pipe.execute()

        if int(count) > self.limit:
            retry_after = self.window_seconds - int(time.time() % self.window_seconds)
            return RateLimitDecision(allowed=False, retry_after=max(1, retry_after))
        return RateLimitDecision(allowed=True)


_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Return the process-wide limiter for the configured backend."""
    global _limiter
    if _limiter is not None:
        return _limiter

    if settings.rate_limit_backend == RateLimitBackendEnum.redis:
        client = redis.from_url(settings.redis_url, decode_responses=True)
        _limiter = RedisRateLimiter(client, settings.ai_rate_limit_requests, settings.ai_rate_limit_period)
    else:
        _limiter = InMemoryRateLimiter(settings.ai_rate_limit_requests, settings.ai_rate_limit_period)

    logger.info(f"Rate limiter initialized: {settings.rate_limit_backend.value}")
    return _limiter
