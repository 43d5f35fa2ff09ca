"""Redis client singleton for the external rate-limit counter."""

from typing import Optional
from redis.asyncio import Redis

from config.settings import settings


class RedisClient:
    _instance: Optional[Redis] = None

    @classmethod
    def get_client(cls) -> Redis:
        if cls._instance is None:
            redis_url = settings.RATE_LIMIT_REDIS_URL

            if not redis_url:
                raise ValueError("RATE_LIMIT_REDIS_URL (or UPSTASH_REDIS_URL) must be set in environment variables")

            cls._instance = Redis.from_url(redis_url, decode_responses=True)

        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None


# Convenience function to get the client
def get_redis() -> Redis:
    return RedisClient.get_client()
