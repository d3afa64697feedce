from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (or a .env file).
    """
    APP_NAME: str = "Dreampuff Stock Service"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./dreampuff.db"

    # Redis cache
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_TTL: int = 300
    CACHE_ENABLED: bool = True

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"

    # Shared secret for the workflow integration (Authorization: Bearer ...)
    API_KEY: Optional[str] = None

    # Daily work session boundary
    TIMEZONE: str = "Asia/Jakarta"
    DAILY_RESET_HOUR: int = 4

    # External collaborators
    PROMPT_SERVICE_URL: str = "http://localhost:3400/createResponseFlow"
    PROMPT_SERVICE_TIMEOUT: float = 30.0
    NOTIFY_WEBHOOK_URL: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
