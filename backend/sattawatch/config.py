"""Application configuration via Pydantic Settings."""

from datetime import timedelta
from typing import List, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./sattawatch.db"

    @model_validator(mode="after")
    def fix_database_url(self) -> "Settings":
        """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://"""
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            self.DATABASE_URL = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgres://"):
            self.DATABASE_URL = url.replace("postgres://", "postgresql+asyncpg://", 1)
        return self

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    PORT: int = 3001

    # Scrape target
    TARGET_URL: str = "https://spboss.in"
    NAVIGATION_TIMEOUT_SECONDS: float = Field(default=60.0, gt=0)

    # Markup selectors for the result board
    RESULT_CONTAINER_SELECTOR: str = ".satta-main-result"
    MARKET_NAME_SELECTOR: str = "h4"
    MARKET_VALUE_SELECTOR: str = "span"

    # Update cadence
    UPDATE_INTERVAL_HOURS: float = Field(default=6.0, gt=0)
    RETRY_DELAY_MINUTES: float = Field(default=5.0, gt=0)
    MAX_CONSECUTIVE_RETRIES: int = Field(default=0, ge=0)  # 0 = retry forever
    RUN_ON_STARTUP: bool = True

    # History endpoint
    HISTORY_LIMIT: int = Field(default=10, gt=0)

    # Browser
    BROWSER_EXECUTABLE_PATH: str = ""  # Empty = Playwright's bundled Chromium
    BROWSER_HEADLESS: bool = True
    USER_AGENT: str = ""  # Empty = pick a Chrome UA from the rotation pool

    # CORS
    CORS_ORIGINS: str = "*"  # Comma-separated list of origins

    @property
    def update_interval(self) -> timedelta:
        return timedelta(hours=self.UPDATE_INTERVAL_HOURS)

    @property
    def retry_delay(self) -> timedelta:
        return timedelta(minutes=self.RETRY_DELAY_MINUTES)

    def get_executable_path(self) -> Optional[str]:
        """Return the configured Chromium executable, or None for the bundled one."""
        return self.BROWSER_EXECUTABLE_PATH.strip() or None

    def get_cors_origins(self) -> List[str]:
        """Parse CORS_ORIGINS into a list of origins.

        Returns:
            List of origin strings, ["*"] if CORS_ORIGINS is not set
        """
        origins = [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]
        return origins or ["*"]


settings = Settings()
