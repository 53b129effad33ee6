from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_DB: str
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432

    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE: int = 300
    DB_CREATE_TABLES: bool = False

    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_PUBSUB_CHANNEL: str = "support.routing"

    CORS_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    OUTBOX_POLL_INTERVAL: float = 1.0
    OUTBOX_BATCH_SIZE: int = 50
    OUTBOX_MAX_ATTEMPTS: int = 5

    # "memory" keeps the queue in-process (lost on restart); "database" persists it.
    QUEUE_BACKEND: Literal["memory", "database"] = "memory"
    CLEAR_LANGUAGE_ON_SESSION_END: bool = False

    SUPPORTED_LANGUAGES: list[str] = ["uz", "ru", "en"]
    START_TOKENS: list[str] = ["/start", "Start support"]
    STOP_TOKENS: list[str] = ["/stop", "Stop support"]
    REGISTER_TOKEN: str = "/operator"
    AVAILABLE_TOKEN: str = "Available"
    BUSY_TOKEN: str = "Busy"

    @field_validator("SUPPORTED_LANGUAGES")
    @classmethod
    def _lowercase_languages(cls, value: list[str]) -> list[str]:
        return [code.strip().lower() for code in value if code.strip()]

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.POSTGRES_DB}"
        )

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()  # type: ignore[call-arg]
