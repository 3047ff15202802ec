"""
Position Index Service

Owns the lifecycle of a position opening search index (create, delete,
existence check) and bulk-loads posting records into it. Each record is
validated, normalized and written as a stemmed, weighted document.
"""

from __future__ import annotations

import json
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Iterable

from locations import state_code
from psycopg2 import sql
from psycopg2.extras import execute_values
from shared import Database, get_structured_logger
from shared.config import DEFAULT_INDEX_NAME

from .analyzer import Analyzer
from .exceptions import MalformedQueryError, translate_backend_errors
from .index_locks import IndexLockRegistry, index_locks
from .queries import (
    BEGIN_TRANSACTION,
    COMMIT_TRANSACTION,
    CREATE_INDEX_TABLE,
    CREATE_ORGANIZATION_ID_INDEX,
    CREATE_SEARCH_VECTOR_INDEX,
    CREATE_START_DATE_INDEX,
    DELETE_EXPIRED,
    DROP_INDEX_TABLE,
    GET_ORGANIZATIONS,
    INDEX_EXISTS,
    UPSERT_POSITION_OPENINGS,
    UPSERT_ROW_TEMPLATE,
)

INDEX_NAME_PATTERN = re.compile(r"^[a-z_][a-z0-9_]{0,40}$")
IMPORT_PAGE_SIZE = 500


def _parse_date(value: Any, field: str, record_id: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as e:
            raise MalformedQueryError(
                f"Record {record_id}: {field} is not an ISO date: {value!r}"
            ) from e
    raise MalformedQueryError(f"Record {record_id}: {field} is required")


def _parse_pay(value: Any, field: str, record_id: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise MalformedQueryError(f"Record {record_id}: {field} must be numeric")
    try:
        return Decimal(str(value))
    except ArithmeticError as e:
        raise MalformedQueryError(
            f"Record {record_id}: {field} must be numeric, got {value!r}"
        ) from e


def _parse_locations(value: Any, record_id: Any) -> list[dict[str, str]]:
    if not isinstance(value, list) or not value:
        raise MalformedQueryError(f"Record {record_id}: at least one location is required")

    locations = []
    for entry in value:
        city = (entry.get("city") or "").strip() if isinstance(entry, dict) else ""
        state = (entry.get("state") or "").strip() if isinstance(entry, dict) else ""
        if not city or not state:
            raise MalformedQueryError(
                f"Record {record_id}: every location needs a city and a state, got {entry!r}"
            )
        code = state_code(state)
        if not code:
            raise MalformedQueryError(f"Record {record_id}: unknown state {state!r}")
        locations.append({"city": city, "state": code})
    return locations


def prepare_record(record: dict[str, Any]) -> dict[str, Any]:
    """
    Validate and normalize one posting record.

    Args:
        record: PositionOpening dictionary (extra keys such as ``type`` are ignored)

    Returns:
        Normalized record: integer id, upper-case organization id, ``date``
        values, ``Decimal`` pay bounds and locations with 2-letter state codes

    Raises:
        MalformedQueryError: If a required field is missing or invalid
    """
    raw_id = record.get("id")
    try:
        if isinstance(raw_id, bool):
            raise TypeError
        record_id = int(raw_id)
    except (TypeError, ValueError) as e:
        raise MalformedQueryError(f"Record id must be an integer, got {raw_id!r}") from e

    position_title = (record.get("position_title") or "").strip()
    if not position_title:
        raise MalformedQueryError(f"Record {record_id}: position_title is required")

    organization_id = (record.get("organization_id") or "").strip().upper()
    if not organization_id:
        raise MalformedQueryError(f"Record {record_id}: organization_id is required")

    start_date = _parse_date(record.get("start_date"), "start_date", record_id)
    end_date = _parse_date(record.get("end_date"), "end_date", record_id)
    if end_date < start_date:
        raise MalformedQueryError(f"Record {record_id}: end_date is before start_date")

    return {
        "id": record_id,
        "position_title": position_title,
        "organization_id": organization_id,
        "organization_name": (record.get("organization_name") or "").strip(),
        "start_date": start_date,
        "end_date": end_date,
        "minimum": _parse_pay(record.get("minimum"), "minimum", record_id),
        "maximum": _parse_pay(record.get("maximum"), "maximum", record_id),
        "rate_interval_code": (record.get("rate_interval_code") or None),
        "locations": _parse_locations(record.get("locations"), record_id),
    }


class PositionIndex:
    """
    Analyzer/indexer for position openings.

    The index is a PostgreSQL table named after the index. Documents carry a
    weighted ``tsvector`` (title A, organization name B) built with the
    configured snowball language, an upper-cased organization id for exact
    and prefix matching, dates, pay fields and ordered JSONB locations.
    """

    def __init__(
        self,
        database: Database,
        index_name: str = DEFAULT_INDEX_NAME,
        analyzer: Analyzer | None = None,
        lock_registry: IndexLockRegistry | None = None,
        clock: Callable[[], date] = date.today,
    ):
        """
        Initialize the position index.

        Args:
            database: Database connection interface (implements Database protocol)
            index_name: Name of the index table
            analyzer: Analyzer whose language configures stemming (english by default)
            lock_registry: Source of the index lock (process-wide registry by default)
            clock: Returns "today" for the expired purge

        Raises:
            ValueError: If database is None or index_name is not a plain identifier
        """
        if not database:
            raise ValueError("Database is required")
        if not INDEX_NAME_PATTERN.match(index_name or ""):
            raise ValueError(f"Invalid index name: {index_name!r}")

        self.db = database
        self.index_name = index_name
        self.analyzer = analyzer or Analyzer()
        self.clock = clock
        self.lock = (lock_registry or index_locks).lock_for(index_name)
        self.logger = get_structured_logger(__name__, index=index_name)

    @property
    def table(self) -> sql.Identifier:
        return sql.Identifier(self.index_name)

    def _index_identifier(self, suffix: str) -> sql.Identifier:
        return sql.Identifier(f"{self.index_name}_{suffix}")

    def _exists(self, cur) -> bool:
        cur.execute(INDEX_EXISTS, (self.index_name,))
        return bool(cur.fetchone()[0])

    def index_exists(self) -> bool:
        """Return True if the index table exists."""
        with translate_backend_errors(self.index_name), self.db.get_cursor() as cur:
            return self._exists(cur)

    def create_index(self) -> bool:
        """
        Create the index table and its secondary indexes.

        Returns:
            True if the index was created, False if it already existed
        """
        with self.lock.exclusive(), translate_backend_errors(self.index_name):
            with self.db.get_cursor() as cur:
                if self._exists(cur):
                    self.logger.warning("Index already exists, not creating it")
                    return False

                cur.execute(CREATE_INDEX_TABLE.format(table=self.table))
                cur.execute(
                    CREATE_SEARCH_VECTOR_INDEX.format(
                        index=self._index_identifier("search_vector_idx"), table=self.table
                    )
                )
                cur.execute(
                    CREATE_ORGANIZATION_ID_INDEX.format(
                        index=self._index_identifier("organization_id_idx"), table=self.table
                    )
                )
                cur.execute(
                    CREATE_START_DATE_INDEX.format(
                        index=self._index_identifier("start_date_idx"), table=self.table
                    )
                )

        self.logger.info("Created index")
        return True

    def delete_index(self) -> bool:
        """
        Drop the index table and every document in it.

        Returns:
            True if the index was dropped, False if it did not exist
        """
        with self.lock.exclusive(), translate_backend_errors(self.index_name):
            with self.db.get_cursor() as cur:
                if not self._exists(cur):
                    self.logger.warning("Index does not exist, nothing to delete")
                    return False
                cur.execute(DROP_INDEX_TABLE.format(table=self.table))

        self.logger.info("Deleted index")
        return True

    def _row(self, record: dict[str, Any]) -> tuple:
        language = self.analyzer.language
        return (
            record["id"],
            record["position_title"],
            record["organization_id"],
            record["organization_name"],
            record["start_date"],
            record["end_date"],
            record["minimum"],
            record["maximum"],
            record["rate_interval_code"],
            json.dumps(record["locations"]),
            language,
            record["position_title"],
            language,
            record["organization_name"],
        )

    def import_records(self, records: Iterable[dict[str, Any]]) -> int:
        """
        Insert or replace documents, keyed by id.

        Records are validated before anything is written; a malformed record
        rejects the whole batch. The batch is written in one transaction, so a
        failure part way leaves the index unchanged. Within a batch the last
        record for an id wins.

        Args:
            records: PositionOpening dictionaries

        Returns:
            Number of documents written

        Raises:
            MalformedQueryError: If any record is invalid
            IndexUnavailableError: If the index does not exist
        """
        prepared: dict[int, dict[str, Any]] = {}
        for record in records:
            normalized = prepare_record(record)
            prepared[normalized["id"]] = normalized

        if not prepared:
            return 0

        rows = [self._row(record) for record in prepared.values()]
        with self.lock.shared(), translate_backend_errors(self.index_name):
            with self.db.get_cursor() as cur:
                cur.execute(BEGIN_TRANSACTION)
                execute_values(
                    cur,
                    UPSERT_POSITION_OPENINGS.format(table=self.table),
                    rows,
                    template=UPSERT_ROW_TEMPLATE,
                    page_size=IMPORT_PAGE_SIZE,
                )
                cur.execute(COMMIT_TRANSACTION)

        self.logger.info(f"Imported {len(rows)} document(s)")
        return len(rows)

    def delete_expired(self, as_of: date | None = None) -> int:
        """
        Remove documents whose end_date is before ``as_of`` (default: the clock's today).

        Returns:
            Number of documents removed
        """
        as_of = as_of or self.clock()
        with self.lock.exclusive(), translate_backend_errors(self.index_name):
            with self.db.get_cursor() as cur:
                cur.execute(DELETE_EXPIRED.format(table=self.table), (as_of,))
                removed = cur.rowcount

        self.logger.info(f"Removed {removed} expired document(s) ending before {as_of}")
        return removed

    def list_organizations(self) -> list[dict[str, str]]:
        """Return the distinct organization ids and names present in the index."""
        with self.lock.shared(), translate_backend_errors(self.index_name):
            with self.db.get_cursor() as cur:
                cur.execute(GET_ORGANIZATIONS.format(table=self.table))
                columns = [desc[0] for desc in cur.description]
                organizations = [dict(zip(columns, row)) for row in cur.fetchall()]

        self.logger.debug(f"Found {len(organizations)} organization(s) in index")
        return [
            {"organization_id": org["organization_id"], "name": org["organization_name"]}
            for org in organizations
        ]
