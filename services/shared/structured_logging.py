"""
Structured Logging Utilities

Context-aware loggers for the search services. Index and search operations log
through an adapter carrying the index name, so log lines from concurrent
requests against different indexes can be told apart.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

STRUCTURED_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] [%(context)s] %(message)s"


class _DefaultContextFilter(logging.Filter):
    """Supply an empty context for records that did not come through an adapter."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "context"):
            record.context = "none"
        return True


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds structured context to log messages.

    Usage:
        logger = get_structured_logger(__name__, index="position_openings")
        logger.info("Imported 3 documents")  # Logs with index=position_openings
    """

    def __init__(self, logger: logging.Logger, **context: Any):
        super().__init__(logger, context)

    def bind(self, **context: Any) -> StructuredLoggerAdapter:
        """Return a new adapter with additional context fields."""
        merged = {**self.extra, **context}
        return StructuredLoggerAdapter(self.logger, **merged)

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """
        Add the adapter's context to the record as ``key=value`` pairs.

        Args:
            msg: Log message
            kwargs: Logging keyword arguments

        Returns:
            Tuple of (message, updated kwargs)
        """
        context_parts = [f"{key}={value}" for key, value in self.extra.items() if value is not None]
        context_str = " | ".join(context_parts) if context_parts else "none"

        kwargs.setdefault("extra", {})["context"] = context_str
        return msg, kwargs


def get_structured_logger(name: str, **context: Any) -> StructuredLoggerAdapter:
    """
    Get a structured logger with context.

    Args:
        name: Logger name (typically __name__)
        **context: Context fields (e.g., index="position_openings")

    Returns:
        StructuredLoggerAdapter instance
    """
    return StructuredLoggerAdapter(logging.getLogger(name), **context)


def configure_logging(level: int | str = logging.INFO) -> None:
    """Install a stdout handler using STRUCTURED_FORMAT on the root logger."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(STRUCTURED_FORMAT))
    handler.addFilter(_DefaultContextFilter())

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
