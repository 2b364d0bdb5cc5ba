from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # === App Metadata ===
    PROJECT_NAME: str = "Slotbook"
    ENVIRONMENT: str = Field("dev")  # dev, staging, prod

    # === Security ===
    API_KEY: str = Field("super-secret-key")
    ENABLE_API_KEY_SECURITY: bool = Field(True)

    # === Logging ===
    LOG_LEVEL: str = Field("INFO")
    ENABLE_JSON_LOGS: bool = Field(False)
    ENABLE_FILE_LOGGING: bool = Field(True)
    LOG_DIR: str = Field("./logs")
    SERVICE_NAME: str = Field("slotbook")
    SENTRY_DSN: str = Field("")

    # === Database (PostgreSQL or SQLite fallback) ===
    DATABASE_URL: str = Field("sqlite:///./slotbook.db")

    # === Calendar Provider ===
    CALENDAR_BACKEND: str = Field("google")  # google, memory
    CALENDAR_PROVIDER_NAME: str = Field("google")
    GOOGLE_CREDENTIALS_FILE: str = Field("secrets/gcal_service_account.json")
    GOOGLE_CALENDAR_SCOPES: List[str] = ["https://www.googleapis.com/auth/calendar"]

    # === Scheduling Defaults ===
    DEFAULT_WORK_START_HOUR: int = Field(9, ge=0, le=23)
    DEFAULT_WORK_END_HOUR: int = Field(17, ge=1, le=24)
    DEFAULT_WORK_DAYS: List[int] = [1, 2, 3, 4, 5]  # 0 = Sunday
    DEFAULT_TIMEZONE: str = Field("Africa/Johannesburg")
    DEFAULT_SLOT_INTERVAL_MINUTES: int = Field(30, gt=0)
    DEFAULT_MEETING_DURATION_MINUTES: int = Field(60, gt=0)
    DEFAULT_BUFFER_BEFORE_MINUTES: int = Field(15, ge=0)
    DEFAULT_BUFFER_AFTER_MINUTES: int = Field(15, ge=0)
    DEFAULT_MIN_NOTICE_HOURS: float = Field(24, ge=0)
    RESCHEDULE_MIN_NOTICE_HOURS: float = Field(2, ge=0)
    VALIDATION_PADDING_MINUTES: int = Field(30, ge=0)


@lru_cache()
def get_settings() -> AppConfig:
    return AppConfig()


# Global config instance
settings = get_settings()
