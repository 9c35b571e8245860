# backend/app/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

from .constants import (
    BRAND_NAME,
    DEFAULT_CANCELLATION_NOTICE_HOURS,
    DEFAULT_CLASS_CAPACITY,
    DEFAULT_CLASS_DURATION_MINUTES,
    DEFAULT_MIN_LEAD_MINUTES,
    DEFAULT_OPERATIONAL_TIMEZONE,
)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    """Runtime configuration for the booking backend."""

    app_name: str = f"{BRAND_NAME} API"
    app_version: str = "1.0.0"

    environment: str = Field(
        default="development",
        description="Deployment environment (development, staging, production)",
    )
    is_testing: bool = False  # Set to True when running tests
    log_level: str = "INFO"

    # Database
    database_url: str = Field(
        default="sqlite:///./lingua_booking.db",
        description="SQLAlchemy database URL for the single process-wide pool",
    )
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 5

    # Auth (bearer tokens only; issuing is handled elsewhere)
    secret_key: SecretStr = Field(
        default=SecretStr("dev-secret-key-change-me"),
        description="Key used to verify HS256 access tokens",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 720  # 12 hours

    # Booking rules
    operational_timezone: str = Field(
        default=DEFAULT_OPERATIONAL_TIMEZONE,
        description="Timezone in which teacher availability wall-clock times are declared",
    )
    booking_min_lead_minutes: int = Field(default=DEFAULT_MIN_LEAD_MINUTES, ge=0)
    class_capacity: int = Field(default=DEFAULT_CLASS_CAPACITY, ge=1)
    default_class_duration_minutes: int = Field(default=DEFAULT_CLASS_DURATION_MINUTES, ge=15)
    cancellation_notice_hours: int = Field(default=DEFAULT_CANCELLATION_NOTICE_HOURS, ge=0)
    slot_interval_minutes: int = Field(default=60, ge=15)
    max_slot_query_days: int = Field(default=31, ge=1)

    # Calendar / meeting integration
    calendar_provider: Literal["google", "fake"] = Field(
        default="fake",
        description="Use the in-memory fake outside production",
    )
    google_client_id: Optional[str] = None
    google_client_secret: Optional[SecretStr] = None
    google_calendar_base_url: str = "https://www.googleapis.com/calendar/v3"
    google_token_url: str = "https://oauth2.googleapis.com/token"
    calendar_event_timezone: str = DEFAULT_OPERATIONAL_TIMEZONE
    calendar_timeout_seconds: float = Field(default=10.0, gt=0)

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("operational_timezone", "calendar_event_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @model_validator(mode="after")
    def _require_google_credentials(self) -> "Settings":
        if self.calendar_provider == "google" and not (
            self.google_client_id and self.google_client_secret
        ):
            logger.warning(
                "calendar_provider=google without client credentials; calendar sync will be skipped"
            )
        return self

    @property
    def google_credentials_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)


settings = Settings()

if is_running_tests():
    settings.is_testing = True
