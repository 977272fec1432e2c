from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Remote product store
    remote_api_url: str = "http://localhost:8080"
    remote_timeout_seconds: float = 10.0

    # Query cache freshness windows (seconds)
    price_stale_seconds: float = 30.0
    insight_stale_seconds: float = 30.0
    cache_gc_seconds: float | None = 300.0  # Evict entries unused this long; None keeps them

    # Application
    environment: str = "development"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    # Admin API Key (for seeding and cache maintenance)
    admin_api_key: str | None = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    return Settings()
