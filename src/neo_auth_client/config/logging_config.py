"""Logging configuration for neo-auth-client.

Provides consistent, environment controlled logging for the package logger
namespace. Applications that configure logging themselves can set
NEO_AUTH_LOG_CONFIGURE=false to leave the package loggers untouched.
"""

import logging
import logging.config
import os
from enum import Enum

PACKAGE_LOGGER = "neo_auth_client"


class LogLevel(str, Enum):
    """Supported log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log format options."""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


class LoggingConfig:
    """Logging configuration manager for the package loggers."""

    # Third-party modules that should only log errors
    ERROR_ONLY_MODULES = [
        "httpx",
        "httpcore",
    ]

    FORMATS = {
        LogFormat.SIMPLE: "%(asctime)s - %(levelname)s - %(message)s",
        LogFormat.DETAILED: "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        LogFormat.JSON: '{"time":"%(asctime)s","level":"%(levelname)s","module":"%(name)s","message":"%(message)s"}',
    }

    @classmethod
    def configure(cls) -> None:
        """Configure logging based on environment variables."""
        if os.getenv("NEO_AUTH_LOG_CONFIGURE", "true").lower() != "true":
            return

        log_level = os.getenv("NEO_AUTH_LOG_LEVEL", LogLevel.WARNING.value).upper()
        if log_level not in LogLevel.__members__:
            log_level = LogLevel.WARNING.value

        try:
            log_format = LogFormat(os.getenv("NEO_AUTH_LOG_FORMAT", "simple").lower())
        except ValueError:
            log_format = LogFormat.SIMPLE

        logging_config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": cls.FORMATS[log_format],
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": log_level,
                    "formatter": "default",
                    "stream": "ext://sys.stderr",
                },
            },
            "loggers": {
                PACKAGE_LOGGER: {
                    "level": log_level,
                    "handlers": ["console"],
                    "propagate": False,
                },
            },
        }

        for module in cls.ERROR_ONLY_MODULES:
            logging_config["loggers"][module] = {"level": "ERROR"}

        logging.config.dictConfig(logging_config)

        logger = logging.getLogger(__name__)
        logger.debug(f"Logging configured: level={log_level}, format={log_format.value}")

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger for the given module name.

        Args:
            name: Module name (usually __name__)

        Returns:
            Logger instance
        """
        return logging.getLogger(name)

    @classmethod
    def set_level(cls, level: str) -> None:
        """Change the package log level at runtime."""
        logging.getLogger(PACKAGE_LOGGER).setLevel(getattr(logging, level.upper()))


def setup_logging() -> None:
    """Setup logging configuration from environment variables.

    Called once when the package is imported.
    """
    LoggingConfig.configure()


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger."""
    return LoggingConfig.get_logger(name)
