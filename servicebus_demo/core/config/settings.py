"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
Service Bus demo. Connection details are read once at process start and are
immutable afterwards.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with override mechanisms
"""

from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from servicebus_demo.core.config.constants import (
    CONTENT_TYPE_JSON,
    DEFAULT_ERROR_BACKOFF_SECONDS,
    DEFAULT_MAX_CONCURRENT_CALLS,
    DEFAULT_MAX_WAIT_TIME,
    DEFAULT_PREFETCH_COUNT,
    DEFAULT_SHUTDOWN_TIMEOUT_SECONDS,
    DEFAULT_STARTUP_MESSAGE,
)


class ServiceBusSettings(BaseSettings):
    """
    Azure Service Bus connection and processing configuration.

    STAGE-SB.0: Service Bus configuration

    Both the connection string and the queue name are required by the sender
    and the receiver; they are validated when those are constructed.
    """

    SERVICEBUS_CONNECTION_STRING: str | None = Field(
        default=None, description="Service Bus namespace connection string"
    )
    SERVICEBUS_QUEUE_NAME: str | None = Field(default=None, description="Queue name")
    SERVICEBUS_CONTENT_TYPE: str = Field(
        default=CONTENT_TYPE_JSON, description="Content type set on outgoing messages"
    )

    # Processor settings
    SERVICEBUS_MAX_CONCURRENT_CALLS: int = Field(
        default=DEFAULT_MAX_CONCURRENT_CALLS, ge=1, description="Messages dispatched concurrently"
    )
    SERVICEBUS_MAX_WAIT_TIME: float = Field(
        default=DEFAULT_MAX_WAIT_TIME, gt=0, description="Seconds a receive call waits"
    )
    SERVICEBUS_PREFETCH_COUNT: int = Field(
        default=DEFAULT_PREFETCH_COUNT, ge=0, description="Receiver prefetch count"
    )
    SERVICEBUS_ERROR_BACKOFF_SECONDS: float = Field(
        default=DEFAULT_ERROR_BACKOFF_SECONDS, ge=0, description="Pause after a receive failure"
    )
    SERVICEBUS_SHUTDOWN_TIMEOUT_SECONDS: float = Field(
        default=DEFAULT_SHUTDOWN_TIMEOUT_SECONDS, gt=0, description="Graceful stop timeout"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    STAGE-L: Logging configuration

    Architectural Decision: structlog for production-grade logging
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """
    General application settings.

    STAGE-APP.0: Application initialization
    """

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="Service Bus Demo", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    STARTUP_MESSAGE: str = Field(
        default=DEFAULT_STARTUP_MESSAGE, description="Message sent once on startup"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from servicebus_demo.core.config.settings import get_settings

        settings = get_settings()
        queue_name = settings.servicebus.SERVICEBUS_QUEUE_NAME
    """

    # Service Bus settings
    SERVICEBUS_CONNECTION_STRING: str | None = Field(
        default=None, description="Service Bus namespace connection string"
    )
    AZURE_SERVICEBUS_CONNECTION_STRING: str | None = Field(
        default=None, description="Service Bus connection string (alternative)"
    )
    SERVICEBUS_QUEUE_NAME: str | None = Field(default=None, description="Queue name")
    SERVICEBUS_CONTENT_TYPE: str = Field(
        default=CONTENT_TYPE_JSON, description="Content type set on outgoing messages"
    )
    SERVICEBUS_MAX_CONCURRENT_CALLS: int = Field(
        default=DEFAULT_MAX_CONCURRENT_CALLS, ge=1, description="Messages dispatched concurrently"
    )
    SERVICEBUS_MAX_WAIT_TIME: float = Field(
        default=DEFAULT_MAX_WAIT_TIME, gt=0, description="Seconds a receive call waits"
    )
    SERVICEBUS_PREFETCH_COUNT: int = Field(
        default=DEFAULT_PREFETCH_COUNT, ge=0, description="Receiver prefetch count"
    )
    SERVICEBUS_ERROR_BACKOFF_SECONDS: float = Field(
        default=DEFAULT_ERROR_BACKOFF_SECONDS, ge=0, description="Pause after a receive failure"
    )
    SERVICEBUS_SHUTDOWN_TIMEOUT_SECONDS: float = Field(
        default=DEFAULT_SHUTDOWN_TIMEOUT_SECONDS, gt=0, description="Graceful stop timeout"
    )

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application settings
    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="Service Bus Demo", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    STARTUP_MESSAGE: str = Field(
        default=DEFAULT_STARTUP_MESSAGE, description="Message sent once on startup"
    )

    @field_validator(
        "SERVICEBUS_CONNECTION_STRING",
        "AZURE_SERVICEBUS_CONNECTION_STRING",
        "SERVICEBUS_QUEUE_NAME",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v):
        """Treat blank connection values as unset."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @model_validator(mode="after")
    def merge_connection_strings(self):
        """Fall back to AZURE_SERVICEBUS_CONNECTION_STRING when the primary key is unset."""
        if self.SERVICEBUS_CONNECTION_STRING is None and self.AZURE_SERVICEBUS_CONNECTION_STRING:
            self.SERVICEBUS_CONNECTION_STRING = self.AZURE_SERVICEBUS_CONNECTION_STRING
        return self

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    # Nested configuration objects
    @property
    def servicebus(self) -> 'ServiceBusSettings':
        """Get Service Bus settings."""
        return ServiceBusSettings(
            SERVICEBUS_CONNECTION_STRING=self.SERVICEBUS_CONNECTION_STRING,
            SERVICEBUS_QUEUE_NAME=self.SERVICEBUS_QUEUE_NAME,
            SERVICEBUS_CONTENT_TYPE=self.SERVICEBUS_CONTENT_TYPE,
            SERVICEBUS_MAX_CONCURRENT_CALLS=self.SERVICEBUS_MAX_CONCURRENT_CALLS,
            SERVICEBUS_MAX_WAIT_TIME=self.SERVICEBUS_MAX_WAIT_TIME,
            SERVICEBUS_PREFETCH_COUNT=self.SERVICEBUS_PREFETCH_COUNT,
            SERVICEBUS_ERROR_BACKOFF_SECONDS=self.SERVICEBUS_ERROR_BACKOFF_SECONDS,
            SERVICEBUS_SHUTDOWN_TIMEOUT_SECONDS=self.SERVICEBUS_SHUTDOWN_TIMEOUT_SECONDS,
        )

    @property
    def logging(self) -> 'LoggingSettings':
        """Get logging settings."""
        return LoggingSettings(
            LOG_LEVEL=self.LOG_LEVEL,
            LOG_FORMAT=self.LOG_FORMAT,
        )

    @property
    def app(self) -> 'ApplicationSettings':
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            STARTUP_MESSAGE=self.STARTUP_MESSAGE,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Ignore extra environment variables
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
