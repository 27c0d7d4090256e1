"""
Constants and enums for the Platform Adapter.

This module centralizes all magic strings and constants used throughout
the adapter to ensure consistency and maintainability.
"""

from enum import Enum


class TopicPrefix(str, Enum):
    """Top-level topic namespaces on the message broker."""

    REQUESTS = "requests"
    RESPONSES = "responses"
    ORDERS = "orders"


class Action(str, Enum):
    """Actions handled by the built-in request handlers."""

    API_REQUEST = "api_request"
    CREATE_PRODUCT = "create_product"


class ResponseErrorCode(str, Enum):
    """Error codes carried in the RPC response envelope."""

    # Protocol errors (detected by the dispatcher)
    PARSE_ERROR = "parse_error"
    UNKNOWN_ACTION = "unknown_action"

    # Handler errors
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    BAD_REQUEST = "bad_request"
    API_ERROR = "api_error"
    INTERNAL_ERROR = "internal_error"


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    AZURE_STORAGE_CONNECTION = "AzureWebJobsStorage"
    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    ENABLE_LOGS_QUEUE = "ENABLE_LOGS_QUEUE"
    DEBUG = "DEBUG"

    BROKER_URL = "BROKER_URL"
    BROKER_CLIENT_ID = "BROKER_CLIENT_ID"
    BROKER_USERNAME = "BROKER_USERNAME"
    BROKER_PASSWORD = "BROKER_PASSWORD"

    MARKETPLACE_URL = "MARKETPLACE_URL"
    MARKETPLACE_CLIENT_ID = "MARKETPLACE_CLIENT_ID"
    MARKETPLACE_CLIENT_SECRET = "MARKETPLACE_CLIENT_SECRET"
    MARKETPLACE_REDIRECT_URI = "MARKETPLACE_REDIRECT_URI"

    WEBHOOK_SECRET = "WEBHOOK_SECRET"


DEFAULT_PLATFORM_ID = "default"
WILDCARD_ACTION = "*"


# Numeric constants
class Limits:
    """System limits and thresholds."""

    DEFAULT_QOS = 1
    DEFAULT_KEEPALIVE_SECONDS = 60
    DEFAULT_CACHE_TTL_SECONDS = 300
    TOKEN_REFRESH_MARGIN_SECONDS = 300


# Time-related constants (in seconds)
class Timeouts:
    """Timeout values in seconds."""

    BROKER_CONNECT = 10
    BROKER_PUBLISH = 5
    EXTERNAL_API_CALL = 30
    RPC_RESPONSE = 30
