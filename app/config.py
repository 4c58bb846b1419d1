from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_REMINDER_INTERVAL_HOURS = 3
ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"
    PORT: int = 3000

    # MongoDB settings
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "Coved-Tutor-Test"
    MONGO_MENTEE_COLLECTION: str = "mentees"
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = 5000

    # Firebase settings
    FIREBASE_CREDENTIALS_PATH: str | None = None
    FIREBASE_DATABASE_URL: str | None = None

    # SMTP settings
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_START_TLS: bool = True
    EMAIL_FROM: str = "noreply@coved.org"
    EMAIL_FROM_NAME: str = "CovEd"
    PRIVACY_POLICY_URL: str = "https://coved.org/privacy"

    # =================================================================
    # PRIVACY REMINDER JOB SETTINGS
    # =================================================================
    REMINDER_SCHEDULER_ENABLED: bool = True
    REMINDER_INTERVAL_HOURS: int = 3
    REMINDER_DELAY_DAYS: float = 3.0
    REMINDER_MAX_CONCURRENCY: int = 10
    REMINDER_OPERATION_TIMEOUT_SECONDS: float = 30.0

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def get_reminder_config(self) -> dict:
        """
        Get privacy reminder job configuration.

        The interval is clamped to a divisor of 24 so that the schedule
        lines up with the same wall-clock hours every day.
        """
        interval_hours = self.REMINDER_INTERVAL_HOURS
        if interval_hours < 1 or 24 % interval_hours != 0:
            logger.warning(
                "REMINDER_INTERVAL_HOURS must divide 24, using default",
                configured_hours=interval_hours,
                interval_hours=DEFAULT_REMINDER_INTERVAL_HOURS,
            )
            interval_hours = DEFAULT_REMINDER_INTERVAL_HOURS

        return {
            "interval_hours": interval_hours,
            "reminder_delay": timedelta(days=self.REMINDER_DELAY_DAYS),
            "max_concurrency": max(1, self.REMINDER_MAX_CONCURRENCY),
            "operation_timeout_seconds": self.REMINDER_OPERATION_TIMEOUT_SECONDS,
        }

    def smtp_configured(self) -> bool:
        return bool(self.SMTP_HOST and self.EMAIL_FROM)


@lru_cache
def get_settings() -> Settings:
    return Settings()
