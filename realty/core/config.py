"""
Application configuration management using Pydantic Settings.
All settings can be overridden via environment variables.
"""

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "Realty Site"
    VERSION: str = "0.1.0"
    API_PREFIX: str = "/api"
    DEBUG: bool = False

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    SESSION_MAX_AGE_MINUTES: int = 30 * 24 * 60  # 30 days
    INACTIVITY_TIMEOUT_MINUTES: int = 10
    SESSION_COOKIE_NAME: str = "session-token"
    COOKIE_SECURE: bool = False  # Switches to the __Secure- cookie name over HTTPS

    @property
    def SECURE_SESSION_COOKIE_NAME(self) -> str:
        """Cookie name used when cookies are issued with the Secure flag."""
        return f"__Secure-{self.SESSION_COOKIE_NAME}"

    @property
    def session_cookie_names(self) -> tuple[str, str]:
        """Both cookie names a session may be stored under."""
        return (self.SESSION_COOKIE_NAME, self.SECURE_SESSION_COOKIE_NAME)

    # Database
    DATABASE_URL: str | None = None  # Optional: Use this if set (e.g., sqlite:///./data/dev.db)
    POSTGRES_SERVER: str | None = None
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str | None = None
    POSTGRES_PASSWORD: str | None = None
    POSTGRES_DB: str | None = None

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Get database URI - supports both SQLite and PostgreSQL."""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        if self.POSTGRES_SERVER and self.POSTGRES_USER and self.POSTGRES_PASSWORD and self.POSTGRES_DB:
            return (
                f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )

        # Default to SQLite for local dev if nothing is configured
        return "sqlite:///./realty.db"

    @property
    def is_sqlite(self) -> bool:
        """Check if using SQLite database."""
        return self.SQLALCHEMY_DATABASE_URI.startswith("sqlite")

    # Redis (only used when RATE_LIMIT_BACKEND=redis)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0

    @property
    def REDIS_URL(self) -> str:
        """Construct Redis URL."""
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # Rate limiting
    RATE_LIMIT_BACKEND: Literal["memory", "redis"] = "memory"
    LOGIN_RATE_LIMIT_WINDOW_MS: int = 60_000
    LOGIN_RATE_LIMIT_MAX_REQUESTS: int = 10
    CONTACT_RATE_LIMIT_WINDOW_MS: int = 60_000
    CONTACT_RATE_LIMIT_MAX_REQUESTS: int = 5

    # Activity logging
    ENABLE_ACTIVITY_LOGGING: bool = True
    LOG_AUTH_ACTIONS: bool = True
    LOG_UPDATE_ACTIONS: bool = True
    LOG_MINIMAL_DATA: bool = False  # Skip IP address / user agent capture

    # First superuser (created on startup)
    DISABLE_BOOTSTRAP_USERS: bool = False  # Set to True to skip superuser creation
    FIRST_SUPERUSER_EMAIL: str = "admin@example.com"
    FIRST_SUPERUSER_PASSWORD: str = "changethis"  # Max 72 bytes for bcrypt
    FIRST_SUPERUSER_NAME: str = "Site Administrator"

    @field_validator("FIRST_SUPERUSER_PASSWORD", mode="after")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        """Validate password length for bcrypt (max 72 bytes)."""
        if v and len(v.encode('utf-8')) > 72:
            raise ValueError(
                f"FIRST_SUPERUSER_PASSWORD is too long ({len(v.encode('utf-8'))} bytes). "
                "Bcrypt has a maximum of 72 bytes. Please use a shorter password."
            )
        return v


settings = Settings()  # type: ignore
