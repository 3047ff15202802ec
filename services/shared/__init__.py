"""
Shared infrastructure for services.

This package contains shared building blocks used across the search services,
such as the database abstraction, configuration and structured logging.
"""

from .config import SearchConfig, build_db_connection_string
from .database import Database, PostgreSQLDatabase
from .structured_logging import configure_logging, get_structured_logger

__all__ = [
    "Database",
    "PostgreSQLDatabase",
    "SearchConfig",
    "build_db_connection_string",
    "configure_logging",
    "get_structured_logger",
]
