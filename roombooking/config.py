"""Runtime configuration for the booking engine.

Values are read from ``ROOMBOOKING_*`` environment variables through
``pydantic-settings``. Import ``settings`` rather than instantiating
``Settings`` again.
"""

from __future__ import annotations

from datetime import time

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(env_prefix="ROOMBOOKING_", extra="ignore")

    debounce_ms: int = Field(
        default=500,
        ge=0,
        description="Quiescence window for realtime conflict checks.",
    )
    default_duration_minutes: int = Field(
        default=60,
        gt=0,
        description="Length of an emergency booking when the caller gives none.",
    )
    business_day_end: time = Field(
        default=time(17, 0),
        description="Latest end time an emergency booking is stretched to.",
    )
    max_recurrence_occurrences: int = Field(
        default=366,
        ge=1,
        description="Upper bound on candidates produced by one recurrence expansion.",
    )
    cache_ttl_seconds: float = Field(default=60.0, ge=0)
    emergency_booker: str = Field(default="Emergency booking")
    log_level: str = Field(default="INFO")

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000


settings = Settings()
