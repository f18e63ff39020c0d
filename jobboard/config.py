"""Application configuration using Pydantic Settings."""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Job Board API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    RELOAD: bool = True

    # MongoDB
    MONGODB_URI: str = Field(default="mongodb://localhost:27017")
    MONGODB_DATABASE: str = "jobboard"
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = 5000
    MONGODB_SOCKET_TIMEOUT_MS: int = 45000

    # JWT
    SECRET_KEY: str = ""  # Required; startup aborts when empty
    ALGORITHM: str = "HS256"
    TOKEN_ISSUER: str = "jobfinder-app"
    TOKEN_AUDIENCE: str = "jobfinder-users"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 24

    # Uploads
    UPLOAD_DIR: str = "uploads"

    # Orphan file sweep
    SWEEP_ENABLED: bool = True
    SWEEP_INTERVAL_MINUTES: int = 24 * 60
    SWEEP_GRACE_SECONDS: int = 60

    # CORS (comma separated)
    BACKEND_CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Rate limiting (login and registration)
    RATE_LIMIT_ENABLED: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or console

    # Sentry
    SENTRY_DSN: str = ""
    SENTRY_ENVIRONMENT: str = "development"
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    # Seed sample users and jobs into an empty database on startup
    SEED_DATABASE: bool = False

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
