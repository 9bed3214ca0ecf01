"""Structured logging utilities for duracron."""

import logging
from typing import Any

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(context)s] - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ContextFilter(logging.Filter):
    """Give records logged without a ContextLogger an empty context field."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "context"):
            record.context = ""
        return True


def setup_logger(name: str = "duracron", level: int | str = logging.INFO) -> logging.Logger:
    """
    Configure the package logger.

    Calling it again for the same name returns the logger unchanged, so hosts
    that configured handlers themselves keep them.

    Args:
        name: Logger name
        level: Logging level (number or name such as "DEBUG")

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(level)
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    return logger


class ContextLogger:
    """
    Wraps a stdlib logger and renders bound context as ``key=value`` pairs.

    Example:
        >>> log = ContextLogger(setup_logger(), {"scheduler": "user-42"})
        >>> log.info("Next task scheduled", task="check-usage")
        ... - INFO - [scheduler=user-42, task=check-usage] - Next task scheduled
    """

    def __init__(self, logger: logging.Logger, context: dict[str, Any] | None = None) -> None:
        self.logger = logger
        self.context = dict(context or {})

    def render(self, extra_context: dict[str, Any] | None = None) -> str:
        merged = {**self.context, **(extra_context or {})}
        return ", ".join(f"{key}={value}" for key, value in merged.items())

    def log(
        self, level: int, message: str, exc_info: bool = False, **extra_context: Any
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        self.logger.log(
            level,
            message,
            exc_info=exc_info,
            extra={"context": self.render(extra_context)},
            stacklevel=3,
        )

    def debug(self, message: str, **extra_context: Any) -> None:
        self.log(logging.DEBUG, message, **extra_context)

    def info(self, message: str, **extra_context: Any) -> None:
        self.log(logging.INFO, message, **extra_context)

    def warning(self, message: str, **extra_context: Any) -> None:
        self.log(logging.WARNING, message, **extra_context)

    def error(self, message: str, exc_info: bool = False, **extra_context: Any) -> None:
        self.log(logging.ERROR, message, exc_info=exc_info, **extra_context)

    def with_context(self, **context: Any) -> "ContextLogger":
        """Return a logger with additional bound context."""
        return ContextLogger(self.logger, {**self.context, **context})


def get_default_logger() -> ContextLogger:
    """Return a ContextLogger bound to the package logger."""
    return ContextLogger(setup_logger())
