"""
Seeded generation cache.

Iterative mode pins the seed, so a prompt rendered with the same model and
parameters always comes back as the same image. The route keeps those
images here for server-key requests and skips the provider on a repeat.
"""

from cachetools import TTLCache
from threading import Lock
from typing import Optional, Dict, Any

from config.settings import settings
from models.generate_image import GeneratedImage

CACHE_TTL_SECONDS = settings.GENERATION_CACHE_TTL_SECONDS
CACHE_MAX_SIZE = settings.GENERATION_CACHE_MAX_SIZE

_generation_cache: TTLCache = TTLCache(maxsize=CACHE_MAX_SIZE, ttl=CACHE_TTL_SECONDS)
_cache_lock = Lock()


def get_cached(key: str) -> Optional[GeneratedImage]:
    """Image stored under key, or None once it has expired or been evicted."""
    with _cache_lock:
        return _generation_cache.get(key)


def set_cached(key: str, image: GeneratedImage) -> None:
    with _cache_lock:
        _generation_cache[key] = image


def clear_all() -> int:
    """Drop every stored image and return how many there were."""
    with _cache_lock:
        count = len(_generation_cache)
        _generation_cache.clear()
        return count


def make_generation_cache_key(
    prompt: str,
    model: str,
    width: int,
    height: int,
    steps: int,
    seed: int
) -> str:
    """
    Key for one seeded render.

    Every parameter that changes the pixels is part of the key. The prompt
    goes last and verbatim, so prompts differing only in whitespace stay
    distinct.
    """
    parts = [
        "gen",
        f"m:{model}",
        f"{width}x{height}",
        f"st:{steps}",
        f"sd:{seed}",
        f"p:{prompt}"
    ]
    return ":".join(parts)


def get_cache_stats() -> Dict[str, Any]:
    """Occupancy and limits, reported by the generateImage health check."""
    with _cache_lock:
        return {
            "current_size": len(_generation_cache),
            "max_size": CACHE_MAX_SIZE,
            "ttl_seconds": CACHE_TTL_SECONDS
        }
