"""Unit tests for PositionSearchEngine."""

import psycopg2
import psycopg2.errors
import pytest

from services.position_openings.exceptions import IndexUnavailableError, TransientBackendError
from services.position_openings.index_locks import IndexLockRegistry
from services.position_openings.query_parser import ParsedQuery
from services.position_openings.search_engine import PositionSearchEngine, escape_like


@pytest.fixture
def search_engine(mock_database, today):
    """Create a PositionSearchEngine with a fixed clock."""
    return PositionSearchEngine(
        mock_database, clock=lambda: today, lock_registry=IndexLockRegistry()
    )


class TestBuildQuery:
    """Test cases for PositionSearchEngine.build_query."""

    def test_without_keywords_orders_by_newest_id(self, search_engine, render_sql, today):
        statement, params = search_engine.build_query(ParsedQuery(), size=10, from_=0)
        query = render_sql(statement)

        assert 'FROM "position_openings"' in query
        assert "start_date <= %(today)s" in query
        assert "ORDER BY id DESC" in query
        assert "ts_rank" not in query
        assert params == {"today": today, "limit": 10, "offset": 0}

    def test_with_keywords_orders_by_relevance(self, search_engine, render_sql):
        parsed = ParsedQuery(keywords="physician nursing Practitioner")

        statement, params = search_engine.build_query(parsed, size=10, from_=0)
        query = render_sql(statement)

        assert "search_vector @@ to_tsquery(%(language)s::regconfig, %(tsquery)s)" in query
        assert "ts_rank(search_vector" in query
        assert "ORDER BY score DESC, id DESC" in query
        assert params["tsquery"] == "physician | nursing | practitioner"
        assert params["language"] == "english"

    def test_organization_prefix_filter(self, search_engine, render_sql):
        statement, params = search_engine.build_query(
            ParsedQuery(organization_id="va"), size=10, from_=0
        )

        assert "organization_id LIKE %(organization_prefix)s" in render_sql(statement)
        assert params["organization_prefix"] == "VA%"

    def test_location_conditions_share_one_location_entry(self, search_engine, render_sql):
        statement, params = search_engine.build_query(
            ParsedQuery(city="Arlington", state="md"), size=10, from_=0
        )
        query = render_sql(statement)

        assert query.count("jsonb_array_elements(locations)") == 1
        assert "plainto_tsquery('simple', %(city)s) AND loc->>'state' = %(state)s" in query
        assert params["city"] == "Arlington"
        assert params["state"] == "MD"

    def test_state_only_location(self, search_engine, render_sql):
        statement, params = search_engine.build_query(ParsedQuery(state="MD"), size=10, from_=0)

        assert "loc->>'city'" not in render_sql(statement)
        assert "city" not in params

    def test_pagination_params(self, search_engine, render_sql):
        statement, params = search_engine.build_query(ParsedQuery(), size=1, from_=1)

        assert "LIMIT %(limit)s OFFSET %(offset)s" in render_sql(statement)
        assert (params["limit"], params["offset"]) == (1, 1)


def test_escape_like():
    assert escape_like("A_B%") == "A\\_B\\%"
    assert escape_like("AF09") == "AF09"


class TestSearch:
    """Test cases for PositionSearchEngine.search."""

    def test_init_requires_database(self):
        with pytest.raises(ValueError, match="Database is required"):
            PositionSearchEngine(database=None)

    def test_returns_rows_as_dictionaries(self, search_engine, mock_cursor):
        mock_cursor.description = [("id",), ("position_title",)]
        mock_cursor.fetchall.return_value = [(2, "Physician Assistant"), (1, "Nurse")]

        hits = search_engine.search(ParsedQuery(), size=10)

        assert hits == [
            {"id": 2, "position_title": "Physician Assistant"},
            {"id": 1, "position_title": "Nurse"},
        ]
        assert mock_cursor.execute.call_args.args[1]["offset"] == 0

    def test_missing_index(self, search_engine, mock_cursor):
        mock_cursor.execute.side_effect = psycopg2.errors.UndefinedTable("relation does not exist")

        with pytest.raises(IndexUnavailableError) as exc_info:
            search_engine.search(ParsedQuery(keywords="nurse"), size=10)

        assert exc_info.value.index_name == "position_openings"

    def test_timeout_is_transient(self, search_engine, mock_cursor):
        mock_cursor.execute.side_effect = psycopg2.OperationalError("statement timeout")

        with pytest.raises(TransientBackendError):
            search_engine.search(ParsedQuery(keywords="nurse"), size=10)
