"""Exceptions raised by the position opening search services."""

from contextlib import contextmanager

import psycopg2
import psycopg2.errors


class PositionSearchError(Exception):
    """Base class for search and indexing failures."""


class IndexUnavailableError(PositionSearchError):
    """The search index does not exist. Distinct from an empty result."""

    def __init__(self, index_name: str):
        super().__init__(f"Search index '{index_name}' does not exist")
        self.index_name = index_name


class MalformedQueryError(PositionSearchError, ValueError):
    """Invalid search options or import records, rejected before execution."""


class TransientBackendError(PositionSearchError):
    """The index store timed out or could not be reached. Safe to retry."""


@contextmanager
def translate_backend_errors(index_name: str):
    """Re-raise psycopg2 failures as search errors for ``index_name``."""
    try:
        yield
    except psycopg2.errors.UndefinedTable as e:
        raise IndexUnavailableError(index_name) from e
    except psycopg2.OperationalError as e:
        raise TransientBackendError(f"Index store unavailable for '{index_name}': {e}") from e
