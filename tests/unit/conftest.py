"""
Pytest configuration and fixtures for unit tests.

Unit tests are fast, isolated tests that don't require external dependencies.
"""

from unittest.mock import MagicMock, Mock

import pytest
from psycopg2 import sql


@pytest.fixture
def mock_cursor():
    """Mock cursor returned by the mock database."""
    cursor = MagicMock()
    cursor.description = []
    cursor.fetchall.return_value = []
    return cursor


@pytest.fixture
def mock_database(mock_cursor):
    """Mock database whose get_cursor() yields mock_cursor."""
    db = Mock()
    db.get_cursor.return_value.__enter__ = Mock(return_value=mock_cursor)
    db.get_cursor.return_value.__exit__ = Mock(return_value=False)
    return db


def _render(composable) -> str:
    if isinstance(composable, sql.Composed):
        return "".join(_render(part) for part in composable.seq)
    if isinstance(composable, sql.SQL):
        return composable.string
    if isinstance(composable, sql.Identifier):
        return ".".join(f'"{name}"' for name in composable.strings)
    return str(composable)


@pytest.fixture
def render_sql():
    """Render psycopg2.sql objects to text without a database connection."""
    return _render


class StubOrganizationResolver:
    """Resolver returning a fixed organization id and recording lookups."""

    def __init__(self, organization_id=None, matches=None):
        self.organization_id = organization_id
        self.matches = matches
        self.lookups = []

    def resolve_organization(self, text):
        self.lookups.append(text)
        if self.matches is not None and text not in self.matches:
            return None
        return self.organization_id


class FailingOrganizationResolver:
    """Resolver whose backing store is down."""

    def resolve_organization(self, text):
        raise ConnectionError("directory unavailable")


@pytest.fixture
def stub_resolver():
    """Factory for StubOrganizationResolver instances."""
    return StubOrganizationResolver


@pytest.fixture
def failing_resolver():
    return FailingOrganizationResolver()
