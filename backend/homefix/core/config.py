# backend/homefix/core/config.py
import logging
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    environment: Literal["local", "test", "staging", "production"] = "local"

    database_url: str = Field(
        default="sqlite:///./homefix.db",
        description="SQLAlchemy URL for the primary store",
    )
    database_echo: bool = False

    # Redis backs the per-booking mutex, the rating locks and realtime pub/sub.
    # Leaving it unset keeps the app usable on a single node: locks fail open
    # and realtime events are only logged.
    redis_url: Optional[str] = Field(default=None, description="Redis connection URL")
    redis_namespace: str = "homefix"

    booking_lock_ttl_s: int = Field(default=90, ge=1)
    rating_lock_ttl_s: int = Field(default=30, ge=1)

    security_pin_length: int = Field(default=6, ge=4, le=10)
    review_text_max_length: int = 1000

    log_level: str = "INFO"
    slow_operation_threshold_s: float = 1.0

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("redis_url")
    @classmethod
    def _blank_redis_url_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = (value or "INFO").upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
