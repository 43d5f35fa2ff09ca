"""
Shared pytest fixtures and configuration for all tests
"""
import pytest
import sys
from pathlib import Path

# Add backend to Python path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from config.settings import settings
from core import cache
from core.redis import RedisClient
from services.rate_limit_service import RateLimiter


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Give every test a known configuration and fresh shared state"""
    monkeypatch.setattr(settings, "TOGETHER_API_KEY", "server-key")
    monkeypatch.setattr(settings, "HELICONE_API_KEY", None)
    monkeypatch.setattr(settings, "RATE_LIMIT_REDIS_URL", None)
    monkeypatch.setattr(settings, "RATE_LIMIT_IN_MEMORY", False)
    monkeypatch.setattr(settings, "RATE_LIMIT_MAX_REQUESTS", 100)
    monkeypatch.setattr(settings, "RATE_LIMIT_WINDOW_SECONDS", 86400)
    monkeypatch.setattr(settings, "RATE_LIMIT_MEMORY_MAX_KEYS", 10000)
    cache.clear_all()
    RateLimiter.reset()
    RedisClient.reset()
    yield settings
    cache.clear_all()
    RateLimiter.reset()
    RedisClient.reset()


@pytest.fixture
def in_memory_rate_limit(monkeypatch):
    """Enable the process-local fixed-window limiter"""
    monkeypatch.setattr(settings, "RATE_LIMIT_IN_MEMORY", True)
    return settings


@pytest.fixture
def sample_payload():
    """Provide a valid generation request body"""
    return {
        "prompt": "a lighthouse on a cliff at sunset",
        "iterativeMode": False
    }


@pytest.fixture
def sample_image_data():
    """Provider response item for a single generated image"""
    return {
        "index": 0,
        "b64_json": "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg==",
        "timings": {"inference": 0.412}
    }
