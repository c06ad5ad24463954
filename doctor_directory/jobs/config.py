from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Celery worker configuration.

    The worker reads referrals through the API's ``DATABASE_URL``.
    """

    redis_url: str = "redis://redis:6379/0"
    timezone: str = "UTC"
    pending_backlog_hours: int = 72

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
