"""
Environment configuration for the scorecard engine.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application configuration
    APP_NAME: str = "Coaching Scorecard Engine"
    API_VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Database configuration
    DATABASE_URL: str = "sqlite:///./scorecards.db"
    DATABASE_ECHO: bool = False

    # Cache configuration
    CACHE_BACKEND: str = Field(default="memory")
    REDIS_URL: str = Field(default="redis://localhost:6379/0")
    SCORECARD_CACHE_NAMESPACE: str = "scorecard"
    # Metrics change rarely but edits must show up quickly.
    SCORECARD_CACHE_TTL_SECONDS: int = Field(default=120, ge=1, le=300)

    # Token verification for the principal provider
    JWT_SECRET_KEY: str = "change-me-in-production-scorecard-engine-secret"
    JWT_ALGORITHM: str = "HS256"

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"
    LOG_FILE: Optional[str] = None

    # Business logic
    PERFORMANCE_HISTORY_LIMIT: int = Field(default=6, ge=1, le=24)

    @field_validator('CACHE_BACKEND')
    @classmethod
    def validate_cache_backend(cls, v: str) -> str:
        """Only the in-process and Redis backends are supported"""
        value = v.strip().lower()
        if value not in {"memory", "redis"}:
            raise ValueError(f"Unsupported cache backend: {v}")
        return value

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        value = v.strip().upper()
        if value not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Invalid log level: {v}")
        return value

    @field_validator('LOG_FORMAT')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        value = v.strip().lower()
        if value not in {"json", "text"}:
            raise ValueError(f"Invalid log format: {v}")
        return value

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
