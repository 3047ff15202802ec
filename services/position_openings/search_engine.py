"""
Position Search Engine

Executes a parsed query against the position index. Hard filters (open
postings only, organization prefix, location) always apply; ordering then
follows one of two explicit branches:

- keywords present: stemmed full-text relevance, ties broken by newest id
- no keywords: newest id first, with no scoring at all
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable

from psycopg2 import sql
from shared import Database, get_structured_logger
from shared.config import DEFAULT_INDEX_NAME

from .analyzer import Analyzer
from .exceptions import translate_backend_errors
from .index_locks import IndexLockRegistry, index_locks
from .query_parser import ParsedQuery
from .queries import CITY_CONDITION, LOCATION_MATCH, SEARCH_COLUMNS, STATE_CONDITION

OPEN_CONDITION = sql.SQL("start_date <= %(today)s")
ORGANIZATION_PREFIX_CONDITION = sql.SQL("organization_id LIKE %(organization_prefix)s")
KEYWORD_CONDITION = sql.SQL("search_vector @@ to_tsquery(%(language)s::regconfig, %(tsquery)s)")
RELEVANCE_SCORE = sql.SQL(
    "ts_rank(search_vector, to_tsquery(%(language)s::regconfig, %(tsquery)s)) AS score"
)
RELEVANCE_ORDER = sql.SQL("score DESC, id DESC")
RECENCY_ORDER = sql.SQL("id DESC")


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value only matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PositionSearchEngine:
    """Filtered, ranked and paginated retrieval from a position index."""

    def __init__(
        self,
        database: Database,
        index_name: str = DEFAULT_INDEX_NAME,
        analyzer: Analyzer | None = None,
        clock: Callable[[], date] = date.today,
        lock_registry: IndexLockRegistry | None = None,
    ):
        """
        Initialize the search engine.

        Args:
            database: Database connection interface (implements Database protocol)
            index_name: Name of the index to query
            analyzer: Analyzer whose language must match the one used at import
            clock: Returns "today" for the open-posting filter
            lock_registry: Source of the index lock (process-wide registry by default)

        Raises:
            ValueError: If database is None
        """
        if not database:
            raise ValueError("Database is required")

        self.db = database
        self.index_name = index_name
        self.analyzer = analyzer or Analyzer()
        self.clock = clock
        self.lock = (lock_registry or index_locks).lock_for(index_name)
        self.logger = get_structured_logger(__name__, index=index_name)

    def build_query(
        self, parsed: ParsedQuery, size: int, from_: int
    ) -> tuple[sql.Composed, dict[str, Any]]:
        """
        Compose the SQL statement and parameters for a parsed query.

        Returns:
            Tuple of (statement, named parameters)
        """
        params: dict[str, Any] = {"today": self.clock(), "limit": size, "offset": from_}
        conditions = [OPEN_CONDITION]

        if parsed.organization_id:
            conditions.append(ORGANIZATION_PREFIX_CONDITION)
            params["organization_prefix"] = escape_like(parsed.organization_id.upper()) + "%"

        location_conditions = []
        if parsed.city:
            location_conditions.append(CITY_CONDITION)
            params["city"] = parsed.city
        if parsed.state:
            location_conditions.append(STATE_CONDITION)
            params["state"] = parsed.state.upper()
        if location_conditions:
            conditions.append(
                LOCATION_MATCH.format(conditions=sql.SQL(" AND ").join(location_conditions))
            )

        if parsed.has_keywords:
            conditions.append(KEYWORD_CONDITION)
            params["language"] = self.analyzer.language
            params["tsquery"] = self.analyzer.to_tsquery_text(parsed.keywords)
            columns = sql.SQL("{columns}, {score}").format(
                columns=SEARCH_COLUMNS, score=RELEVANCE_SCORE
            )
            order = RELEVANCE_ORDER
        else:
            columns = SEARCH_COLUMNS
            order = RECENCY_ORDER

        statement = sql.SQL(
            "{columns} FROM {table} WHERE {where} ORDER BY {order} "
            "LIMIT %(limit)s OFFSET %(offset)s"
        ).format(
            columns=columns,
            table=sql.Identifier(self.index_name),
            where=sql.SQL(" AND ").join(conditions),
            order=order,
        )
        return statement, params

    def search(self, parsed: ParsedQuery, size: int, from_: int = 0) -> list[dict[str, Any]]:
        """
        Return the ``[from_, from_ + size)`` slice of ranked hits.

        Args:
            parsed: Output of the query parser
            size: Maximum number of hits
            from_: Zero-based offset into the ranked hits

        Returns:
            Hits as dictionaries of index columns; empty when nothing matches
            or ``from_`` is past the last hit

        Raises:
            IndexUnavailableError: If the index does not exist
            TransientBackendError: If the index store cannot be reached
        """
        statement, params = self.build_query(parsed, size, from_)

        with self.lock.shared(), translate_backend_errors(self.index_name):
            with self.db.get_cursor() as cur:
                cur.execute(statement, params)
                columns = [desc[0] for desc in cur.description]
                hits = [dict(zip(columns, row)) for row in cur.fetchall()]

        self.logger.debug(
            f"Found {len(hits)} hit(s) for keywords={parsed.keywords!r} "
            f"organization_id={parsed.organization_id} city={parsed.city} state={parsed.state}"
        )
        return hits
