import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import redis.asyncio as redis
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Backing store
    backend: str = os.getenv("CORTEX_BACKEND", "file")  # file, redis or memory
    data_dir: str = os.getenv("CORTEX_DATA_DIR", "./cortex_data")
    base_path: str = os.getenv("CORTEX_BASE_PATH", "cortex/entities")
    compression: str = os.getenv("CORTEX_COMPRESSION", "gzip")

    # Catalog
    catalog_path: str = os.getenv("CORTEX_CATALOG_PATH", "./cortex_data/catalog.json")
    avg_entity_bytes: int = int(os.getenv("CORTEX_AVG_ENTITY_BYTES", "5000"))

    # Cache
    cache_size: int = int(os.getenv("CORTEX_CACHE_SIZE", "100"))

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    key_prefix: str = os.getenv("CORTEX_KEY_PREFIX", "cortex")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.backend not in ("file", "redis", "memory"):
            raise ValueError(f"CORTEX_BACKEND must be one of [file, redis, memory], got {self.backend}")

        if self.compression not in ("gzip", "none"):
            raise ValueError(f"CORTEX_COMPRESSION must be 'gzip' or 'none', got {self.compression}")

        if self.cache_size < 1:
            raise ValueError("CORTEX_CACHE_SIZE must be at least 1")

        if self.avg_entity_bytes < 1:
            raise ValueError("CORTEX_AVG_ENTITY_BYTES must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_redis_client(settings: Settings | None = None) -> redis.Redis:
    """Create an asyncio Redis client instance."""
    settings = settings or get_settings()
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )


def configure_logging(level: str | None = None) -> None:
    """Install a basic stderr handler for the cortex_cache loggers."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
