"""
Centralized logging configuration for influxbench.

Round timings and the final statistics line are the benchmark's only output,
so every module logs through the ``influxbench`` logger hierarchy configured
here.
"""

import functools
import logging
import logging.config
import os
import sys
import time
from typing import Any, Dict


def get_log_level() -> str:
    """Get log level from environment variable or default to INFO."""
    return os.getenv("INFLUXBENCH_LOG_LEVEL", "INFO").upper()


def get_log_format() -> str:
    """Get log format based on environment."""
    env = os.getenv("INFLUXBENCH_ENV", "development").lower()

    if env == "production":
        return "%(asctime)s | %(name)s | %(levelname)s | %(message)s | %(pathname)s:%(lineno)d"
    else:
        return "%(asctime)s | %(name)-24s | %(levelname)-8s | %(message)s"


def get_logging_config() -> Dict[str, Any]:
    """Get the logging configuration dictionary."""
    log_level = get_log_level()
    log_format = get_log_format()

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": log_format,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": "%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": "standard",
                "stream": sys.stdout,
            },
        },
        "loggers": {
            "influxbench": {
                "level": log_level,
                "handlers": ["console"],
                "propagate": False,
            },
            # The client logs every HTTP exchange at DEBUG
            "influxdb_client": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
        "root": {
            "level": "WARNING",
            "handlers": ["console"],
        },
    }

    log_file = os.getenv("INFLUXBENCH_LOG_FILE")
    if log_file:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": "detailed",
            "filename": log_file,
            "maxBytes": 10 * 1024 * 1024,  # 10MB
            "backupCount": 5,
        }
        config["loggers"]["influxbench"]["handlers"].append("file")

    return config


def setup_logging() -> None:
    """Setup logging configuration for the application."""
    logging.config.dictConfig(get_logging_config())

    logger = logging.getLogger("influxbench.logging")
    logger.debug("Logging configured with level: %s", get_log_level())

    if os.getenv("INFLUXBENCH_LOG_FILE"):
        logger.info("File logging enabled: %s", os.getenv("INFLUXBENCH_LOG_FILE"))


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger namespaced under ``influxbench``.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Configured logger instance
    """
    if not name.startswith("influxbench"):
        if name == "__main__":
            name = "influxbench.main"
        else:
            name = f"influxbench.{name}"

    return logging.getLogger(name)


def log_performance(logger: logging.Logger, operation: str):
    """
    Decorator to log performance timing of operations.

    Args:
        logger: Logger instance to use
        operation: Description of the operation being timed
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration = time.perf_counter() - start_time
                logger.error("Operation '%s' failed after %.3fs: %s", operation, duration, str(e))
                raise
            duration = time.perf_counter() - start_time
            logger.debug("Operation '%s' completed in %.3fs", operation, duration)
            return result

        return wrapper

    return decorator
