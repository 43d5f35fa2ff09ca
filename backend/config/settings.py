from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List

class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # API Settings
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "Imagen API"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server Settings
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # Together AI
    TOGETHER_API_KEY: Optional[str] = None
    TOGETHER_BASE_URL: str = "https://api.together.xyz/v1"
    REQUEST_TIMEOUT: float = 60.0

    # Helicone proxy (observability in front of Together)
    HELICONE_API_KEY: Optional[str] = None
    HELICONE_BASE_URL: str = "https://together.helicone.ai/v1"

    # Generation parameters
    IMAGE_MODEL: str = "black-forest-labs/FLUX.1-schnell"
    IMAGE_WIDTH: int = 1024
    IMAGE_HEIGHT: int = 768
    IMAGE_STEPS: int = 3
    ITERATIVE_SEED: int = 123

    # Rate limiting (fixed window per client IP)
    RATE_LIMIT_REDIS_URL: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("RATE_LIMIT_REDIS_URL", "UPSTASH_REDIS_URL"),
    )
    RATE_LIMIT_IN_MEMORY: bool = False
    RATE_LIMIT_MAX_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 24 * 60 * 60  # 1440 minutes
    RATE_LIMIT_PREFIX: str = "imagen"
    RATE_LIMIT_MEMORY_MAX_KEYS: int = 10000

    # Seeded generation cache
    GENERATION_CACHE_TTL_SECONDS: int = 3600
    GENERATION_CACHE_MAX_SIZE: int = 256

    # CORS Settings
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173"
    ]

    def rate_limit_backend(self) -> Optional[str]:
        """Name of the active counter backend, or None when rate limiting is off."""
        if self.RATE_LIMIT_REDIS_URL:
            return "redis"
        if self.RATE_LIMIT_IN_MEMORY:
            return "memory"
        return None

    def together_base_url(self) -> str:
        """Requests go through Helicone whenever a Helicone key is configured."""
        if self.HELICONE_API_KEY:
            return self.HELICONE_BASE_URL.rstrip('/')
        return self.TOGETHER_BASE_URL.rstrip('/')

# Global settings instance
settings = Settings()
