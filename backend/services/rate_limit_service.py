"""
Fixed-window rate limiting for requests that use the server's API key.

Each identifier gets one counter per window. The counter key embeds the
window index, so a new window always starts from zero and old counters
simply expire.
"""

import time
from threading import Lock
from typing import Callable, Optional

from cachetools import TLRUCache

from config.settings import settings
from core.redis import get_redis
from models.generate_image import RateLimitResult


class RedisCounterStore:
    """Counters kept in Redis, shared across all server processes."""

    async def incr(self, key: str, ttl_seconds: int) -> int:
        client = get_redis()
        # One MULTI/EXEC round trip, so a counter never outlives its expiry.
        # Refreshing the TTL on every hit is harmless: the key already
        # carries the window index.
        async with client.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.expire(key, ttl_seconds)
            count, _ = await pipe.execute()
        return int(count)


class MemoryCounterStore:
    """
    Process-local counters for development without Redis.

    Each counter expires ttl_seconds after its latest hit. The store holds at
    most max_size counters (RATE_LIMIT_MEMORY_MAX_KEYS) and evicts the least
    recently used once full. A flood of new identifiers can therefore push
    out a live counter and reset that client's allowance. Use the Redis
    backend anywhere that matters.
    """

    def __init__(self, max_size: int):
        self._counters: TLRUCache = TLRUCache(maxsize=max_size, ttu=_expires_at)
        self._lock = Lock()

    async def incr(self, key: str, ttl_seconds: int) -> int:
        with self._lock:
            count = self._counters.get(key, (0, ttl_seconds))[0] + 1
            self._counters[key] = (count, ttl_seconds)
            return count


def _expires_at(_key, value, now):
    return now + value[1]


class RateLimitService:
    def __init__(
        self,
        store,
        max_requests: int,
        window_seconds: int,
        prefix: str,
        clock: Callable[[], float] = time.time
    ):
        self.store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.prefix = prefix
        self.clock = clock

    def _window(self) -> int:
        return int(self.clock() // self.window_seconds)

    async def limit(self, identifier: str) -> RateLimitResult:
        """Count one request for identifier and report whether it is allowed"""
        window = self._window()
        key = f"{self.prefix}:{identifier}:{window}"

        count = await self.store.incr(key, self.window_seconds)

        return RateLimitResult(
            success=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset=(window + 1) * self.window_seconds
        )


class RateLimiter:
    _instance: Optional[RateLimitService] = None
    _backend: Optional[str] = None

    @classmethod
    def get_limiter(cls) -> Optional[RateLimitService]:
        backend = settings.rate_limit_backend()
        if backend is None:
            return None

        if cls._instance is None or cls._backend != backend:
            if backend == "redis":
                store = RedisCounterStore()
            else:
                store = MemoryCounterStore(max_size=settings.RATE_LIMIT_MEMORY_MAX_KEYS)

            cls._instance = RateLimitService(
                store,
                max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
                window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
                prefix=settings.RATE_LIMIT_PREFIX
            )
            cls._backend = backend

        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None
        cls._backend = None


def get_rate_limiter() -> Optional[RateLimitService]:
    return RateLimiter.get_limiter()
