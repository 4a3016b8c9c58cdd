from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "contestpulse-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "ContestPulse")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/contestpulse_dev")
    redis_url: str = os.getenv("REDIS_URL", "redis://redis:6379/0")

    # External stats provider (TikTok scrape endpoint)
    stats_provider_url: str = os.getenv("STATS_PROVIDER_URL", "")
    stats_provider_timeout_seconds: float = float(os.getenv("STATS_PROVIDER_TIMEOUT_SECONDS", "15"))

    # Metrics sync
    sync_max_concurrency: int = int(os.getenv("SYNC_MAX_CONCURRENCY", "4"))
    sync_deadline_seconds: float = float(os.getenv("SYNC_DEADLINE_SECONDS", "0"))  # 0 = no deadline
    sync_lock_enabled: bool = os.getenv("SYNC_LOCK_ENABLED", "0") == "1"
    sync_lock_ttl_seconds: int = int(os.getenv("SYNC_LOCK_TTL_SECONDS", "600"))
    sync_queue_name: str = os.getenv("SYNC_QUEUE_NAME", "default")

settings = Settings()
