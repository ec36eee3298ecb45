"""Configuration management for the user store.

This module provides centralized configuration management using Pydantic settings
with environment variable support, validation, and error handling.
"""

from typing import Annotated
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support and validation."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    # Database Configuration
    database_url: Annotated[str, Field(description="Relational database connection URL")] = "sqlite:///./conferences.db"
    debug: Annotated[bool, Field(description="Enable debug mode (echoes SQL)")] = False
    log_level: Annotated[str, Field(description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")] = "INFO"

    # Connection Pool Configuration
    db_pool_size: Annotated[int, Field(description="Number of connections kept in the pool")] = 10
    db_max_overflow: Annotated[int, Field(description="Connections created on demand above pool size")] = 20
    db_pool_timeout: Annotated[int, Field(description="Seconds to wait for a pooled connection")] = 30
    db_pool_recycle: Annotated[int, Field(description="Seconds after which connections are recycled")] = 3600

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed_levels:
            raise ValueError(f"log_level must be one of {allowed_levels}")
        return v.upper()

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL format."""
        allowed_prefixes = (
            "postgresql://",
            "postgresql+psycopg2://",
            "mysql://",
            "mysql+pymysql://",
            "sqlite://",
        )
        if not v.startswith(allowed_prefixes):
            raise ValueError("database_url must be a valid PostgreSQL, MySQL or SQLite URL")
        return v

    @field_validator("db_pool_size", "db_pool_timeout")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate pool size and timeout are positive."""
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("db_max_overflow")
    @classmethod
    def validate_max_overflow(cls, v: int) -> int:
        if v < 0:
            raise ValueError("db_max_overflow must not be negative")
        return v

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured database is SQLite."""
        return self.database_url.startswith("sqlite")


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""
    pass


def get_settings() -> Settings:
    """Get application settings with error handling.

    Returns:
        Settings: Validated application settings

    Raises:
        ConfigurationError: If configuration validation fails
    """
    try:
        return Settings()
    except Exception as e:
        raise ConfigurationError(f"Configuration validation failed: {str(e)}") from e
