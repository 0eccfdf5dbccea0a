"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Participant that absorbs income redirected from ineligible ancestors
    fallback_participant_id: int = Field(
        ...,
        gt=0,
        description="Participant ID receiving redirected (extra-*) income"
    )

    # Redis (for Dramatiq and settlement locks)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/payout_engine.log"

    # Emergency stop flags
    emergency_stop_roi: bool = Field(
        default=False,
        description="Emergency stop for monthly investment ROI payouts"
    )
    emergency_stop_bonus_release: bool = Field(
        default=False,
        description="Emergency stop for pending investment bonus releases"
    )

    # Scheduler (UTC)
    settlement_day: int = Field(
        default=1, ge=1, le=28,
        description="Day of month the settlement jobs run"
    )
    settlement_hour: int = Field(
        default=0, ge=0, le=23,
        description="Hour the settlement jobs run"
    )
    daily_reset_hour: int = Field(
        default=0, ge=0, le=23,
        description="Hour the daily pair counter reset runs"
    )
    daily_pair_retention_days: int = Field(
        default=7, ge=1,
        description="Days of daily pair counters kept by the reset task"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Validate production-specific requirements."""
        if self.environment == 'production':
            # DEBUG must be False in production
            if self.debug:
                raise ValueError(
                    'DEBUG must be False in production environment. '
                    'Set DEBUG=false in your .env file.'
                )

            if self.database_url.startswith('sqlite'):
                logger.warning(
                    'DATABASE_URL points to SQLite in production. '
                    'Row locks (FOR UPDATE) are not enforced by SQLite.'
                )

        return self

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(
            ('postgresql://', 'postgresql+asyncpg://', 'sqlite+aiosqlite://')
        ):
            raise ValueError(
                'DATABASE_URL must start with postgresql://, '
                'postgresql+asyncpg:// or sqlite+aiosqlite://'
            )
        if v.startswith('postgresql://'):
            v = v.replace('postgresql://', 'postgresql+asyncpg://', 1)
        return v


# Global settings instance
settings = Settings()
