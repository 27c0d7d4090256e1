"""
Centralized configuration management for the Platform Adapter.

This module provides a unified configuration system with support for:
- Environment variables
- Runtime configuration
- Validation using Pydantic
"""

import os
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from .constants import EnvironmentVariable, Limits, LogLevel, Timeouts


def _env(name: EnvironmentVariable, default: str = "") -> str:
    return os.getenv(name.value) or default


class BrokerConfig(BaseModel):
    """MQTT broker connection configuration."""

    url: str = Field(
        default_factory=lambda: _env(EnvironmentVariable.BROKER_URL, "tcp://localhost:1883"),
        description="Broker URL (tcp://host:port or ssl://host:port)",
    )
    client_id: str = Field(
        default_factory=lambda: _env(EnvironmentVariable.BROKER_CLIENT_ID, "adapter-001"),
        description="Base MQTT client id",
    )
    username: str = Field(
        default_factory=lambda: _env(EnvironmentVariable.BROKER_USERNAME),
        description="Broker username",
    )
    password: str = Field(
        default_factory=lambda: _env(EnvironmentVariable.BROKER_PASSWORD),
        description="Broker password",
    )
    qos: int = Field(default=Limits.DEFAULT_QOS, description="QoS for publish and subscribe")
    keepalive: int = Field(
        default=Limits.DEFAULT_KEEPALIVE_SECONDS, description="Keepalive interval in seconds"
    )
    connect_timeout: float = Field(
        default=Timeouts.BROKER_CONNECT, description="Connection timeout in seconds"
    )
    publish_timeout: float = Field(
        default=Timeouts.BROKER_PUBLISH, description="Publish acknowledgement timeout in seconds"
    )

    @field_validator("qos")
    def validate_qos(cls, v: int) -> int:
        """Validate QoS is one of the MQTT levels."""
        if v not in (0, 1, 2):
            raise ValueError(f"Invalid qos: {v}. Must be 0, 1 or 2")
        return v

    @property
    def host(self) -> str:
        return urlparse(self.url).hostname or "localhost"

    @property
    def port(self) -> int:
        parsed = urlparse(self.url)
        if parsed.port:
            return parsed.port
        return 8883 if parsed.scheme in ("ssl", "tls", "mqtts") else 1883

    @property
    def use_tls(self) -> bool:
        return urlparse(self.url).scheme in ("ssl", "tls", "mqtts")


class UpstreamConfig(BaseModel):
    """Canonical marketplace API configuration."""

    base_url: str = Field(
        default_factory=lambda: _env(EnvironmentVariable.MARKETPLACE_URL, "http://localhost:9000"),
        description="Marketplace API base URL",
    )
    client_id: str = Field(
        default_factory=lambda: _env(EnvironmentVariable.MARKETPLACE_CLIENT_ID),
        description="OAuth client id",
    )
    client_secret: str = Field(
        default_factory=lambda: _env(EnvironmentVariable.MARKETPLACE_CLIENT_SECRET),
        description="OAuth client secret",
    )
    redirect_uri: str = Field(
        default_factory=lambda: _env(
            EnvironmentVariable.MARKETPLACE_REDIRECT_URI, "http://localhost:3001/oauth/callback"
        ),
        description="OAuth redirect URI",
    )
    timeout: float = Field(
        default=Timeouts.EXTERNAL_API_CALL, description="HTTP timeout in seconds"
    )
    refresh_margin_seconds: int = Field(
        default=Limits.TOKEN_REFRESH_MARGIN_SECONDS,
        description="Refresh tokens that expire within this many seconds",
    )

    @field_validator("base_url")
    def strip_trailing_slash(cls, v: str) -> str:
        """Paths are appended verbatim, so drop a trailing slash."""
        return v.rstrip("/")


class MapperConfig(BaseModel):
    """Field mapper configuration."""

    cache_ttl_seconds: int = Field(
        default=Limits.DEFAULT_CACHE_TTL_SECONDS,
        description="Mapping cache time-to-live (stored, not consulted on lookup)",
    )


class WebhookConfig(BaseModel):
    """Webhook ingestion configuration."""

    secret: str = Field(
        default_factory=lambda: _env(EnvironmentVariable.WEBHOOK_SECRET),
        description="Shared HMAC-SHA256 secret",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default_factory=lambda: _env(EnvironmentVariable.LOG_LEVEL, LogLevel.INFO.value),
        description="Logging level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )
    enable_logs_queue: bool = Field(
        default_factory=lambda: _env(EnvironmentVariable.ENABLE_LOGS_QUEUE, "false").lower()
        == "true",
        description="Ship structured logs to an Azure Storage queue",
    )
    logs_queue_name: str = Field(default="logs-queue", description="Logs queue name")
    queue_connection_string: str = Field(
        default_factory=lambda: _env(EnvironmentVariable.AZURE_STORAGE_CONNECTION),
        description="Azure Storage connection string",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class AppConfig(BaseModel):
    """Main application configuration."""

    environment: str = Field(
        default_factory=lambda: _env(EnvironmentVariable.APP_ENV, "development"),
        description="Application environment",
    )
    debug: bool = Field(
        default_factory=lambda: _env(EnvironmentVariable.DEBUG, "false").lower() == "true",
        description="Debug mode",
    )

    # Sub-configurations
    broker: BrokerConfig = Field(default_factory=BrokerConfig, description="Broker configuration")
    upstream: UpstreamConfig = Field(
        default_factory=UpstreamConfig, description="Marketplace API configuration"
    )
    mapper: MapperConfig = Field(default_factory=MapperConfig, description="Mapper configuration")
    webhook: WebhookConfig = Field(
        default_factory=WebhookConfig, description="Webhook configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
