"""Logging setup for the kiosk backend.

Everything goes to stdout so the kiosk's process supervisor captures it.
``LOG_LEVEL`` and ``LOG_FORMAT`` override the defaults.
"""

import logging
import os
import sys

from pydantic import BaseModel, Field, field_validator

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class LogConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = DEFAULT_FORMAT
    date_format: str = "%Y-%m-%d %H:%M:%S"
    # Libraries that log every request or statement at INFO
    quiet_loggers: list[str] = Field(default_factory=lambda: ["httpx", "uvicorn.access", "sqlalchemy.engine"])

    @field_validator("level")
    @classmethod
    def known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def from_env(cls) -> "LogConfig":
        return cls(
            level=os.getenv("LOG_LEVEL", "INFO"),
            format=os.getenv("LOG_FORMAT", DEFAULT_FORMAT),
        )


def setup_logging(config: LogConfig | None = None) -> None:
    """Configure the root logger and quieten noisy libraries."""
    config = config or LogConfig.from_env()

    logging.basicConfig(
        level=config.level,
        format=config.format,
        datefmt=config.date_format,
        stream=sys.stdout,
        force=True,
    )

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Get a logger for a specific module.

    Args:
        name: Module name (typically __name__)
        level: Explicit level, overriding LOG_LEVEL

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())
    return logger
