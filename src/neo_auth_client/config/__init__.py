"""Configuration module for neo-auth-client."""

from .constants import (
    EXPIRY_MARGIN_SECONDS,
    DEFAULT_STORAGE_KEY,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_HEADERS,
)
from .logging_config import (
    setup_logging,
    get_logger,
    LoggingConfig,
    LogFormat,
    LogLevel,
)
from .settings import AuthClientSettings

__all__ = [
    "EXPIRY_MARGIN_SECONDS",
    "DEFAULT_STORAGE_KEY",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_HEADERS",
    "setup_logging",
    "get_logger",
    "LoggingConfig",
    "LogFormat",
    "LogLevel",
    "AuthClientSettings",
]
