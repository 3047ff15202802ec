"""
Position Opening Service

Entry point for searching and maintaining the position opening index. Wires
the query parser, search engine, highlighter and result formatter together
and validates caller options.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Iterable

from organizations import AgencyDirectory, OrganizationResolver
from shared import Database, PostgreSQLDatabase, SearchConfig
from shared.config import DEFAULT_INDEX_NAME, DEFAULT_RESULT_SIZE, MAX_RESULT_SIZE

from .analyzer import Analyzer
from .exceptions import MalformedQueryError
from .highlighter import Highlighter
from .position_index import PositionIndex
from .query_parser import QueryParser
from .result_formatter import format_hit
from .search_engine import PositionSearchEngine

logger = logging.getLogger(__name__)

TRUTHY_FLAGS = {"1", "true", "t", "yes", "y", "on"}


def _is_truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_FLAGS
    return bool(value)


def _parse_int_option(name: str, value: Any) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise MalformedQueryError(f"{name} must be an integer, got: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise MalformedQueryError(f"{name} must be an integer, got: {value!r}") from e


class PositionOpeningService:
    """Search and index management for position openings."""

    def __init__(
        self,
        database: Database,
        index_name: str = DEFAULT_INDEX_NAME,
        language: str = "english",
        organization_resolver: OrganizationResolver | None = None,
        default_size: int = DEFAULT_RESULT_SIZE,
        max_size: int = MAX_RESULT_SIZE,
        clock: Callable[[], date] = date.today,
    ):
        """
        Initialize the service.

        Args:
            database: Database connection interface (implements Database protocol)
            index_name: Name of the search index
            language: Snowball stemming language, shared by indexing and search
            organization_resolver: Resolver for organizations named in queries
            default_size: Result count when the caller does not pass ``size``
            max_size: Upper bound applied to ``size``
            clock: Returns "today" for the open-posting filter and the expired purge

        Raises:
            ValueError: If database is None or the size limits are inconsistent
        """
        if not database:
            raise ValueError("Database is required")
        if not 0 < default_size <= max_size:
            raise ValueError(
                f"default_size must be between 1 and max_size ({max_size}), got: {default_size}"
            )

        self.default_size = default_size
        self.max_size = max_size
        self.analyzer = Analyzer(language)
        self.index = PositionIndex(
            database, index_name=index_name, analyzer=self.analyzer, clock=clock
        )
        self.engine = PositionSearchEngine(
            database, index_name=index_name, analyzer=self.analyzer, clock=clock
        )
        self.parser = QueryParser(organization_resolver)
        self.highlighter = Highlighter(self.analyzer)

    @classmethod
    def from_config(
        cls,
        config: SearchConfig,
        organization_resolver: OrganizationResolver | None = None,
    ) -> PositionOpeningService:
        """
        Build a service backed by PostgreSQL from configuration.

        When no resolver is passed and ``config.organizations_file`` is set,
        an AgencyDirectory is loaded from that file.
        """
        database = PostgreSQLDatabase(
            config.connection_string,
            connect_timeout=config.connect_timeout,
            statement_timeout_ms=config.statement_timeout_ms,
        )
        if organization_resolver is None and config.organizations_file:
            organization_resolver = AgencyDirectory.from_json_file(config.organizations_file)
            logger.info(
                f"Loaded {len(organization_resolver)} organization name(s) "
                f"from {config.organizations_file}"
            )

        return cls(
            database,
            index_name=config.index_name,
            language=config.language,
            organization_resolver=organization_resolver,
            default_size=config.default_size,
            max_size=config.max_size,
        )

    def create_index(self) -> bool:
        return self.index.create_index()

    def delete_index(self) -> bool:
        return self.index.delete_index()

    def index_exists(self) -> bool:
        return self.index.index_exists()

    def import_records(self, records: Iterable[dict[str, Any]]) -> int:
        return self.index.import_records(records)

    def delete_expired(self, as_of: date | None = None) -> int:
        return self.index.delete_expired(as_of)

    def use_index_organizations(self, similarity_threshold: float = 0.9) -> AgencyDirectory:
        """
        Resolve organization mentions against the organizations in the index.

        Returns:
            The AgencyDirectory now used by the query parser
        """
        directory = AgencyDirectory(
            self.index.list_organizations(), similarity_threshold=similarity_threshold
        )
        self.parser.organization_resolver = directory
        return directory

    def _size(self, value: Any) -> int:
        if value is None or value == "":
            return self.default_size
        size = _parse_int_option("size", value)
        if size < 1:
            raise MalformedQueryError(f"size must be a positive integer, got: {size}")
        if size > self.max_size:
            logger.debug(f"Clamping size {size} to {self.max_size}")
            return self.max_size
        return size

    def _offset(self, value: Any) -> int:
        if value is None or value == "":
            return 0
        offset = _parse_int_option("from", value)
        if offset < 0:
            raise MalformedQueryError(f"from must be non-negative, got: {offset}")
        return offset

    def search_for(
        self, options: dict[str, Any] | None = None, **kwargs: Any
    ) -> list[dict[str, Any]]:
        """
        Search open position openings.

        Options may be passed as a dictionary, as keyword arguments, or both
        (keyword arguments win). ``from_`` is accepted as an alias for ``from``.

        Args:
            options: query (free text), organization_id (prefix filter, wins
                over organizations named in the query), size (positive
                integer, default and cap from configuration), from (zero-based
                offset, default 0), hl (truthy to highlight matched title words)

        Returns:
            Formatted results in ranked order

        Raises:
            MalformedQueryError: If an option has the wrong type or size or from
                is out of range
            IndexUnavailableError: If the index does not exist
            TransientBackendError: If the index store cannot be reached
        """
        options = {**(options or {}), **kwargs}
        if "from_" in options:
            options["from"] = options.pop("from_")

        size = self._size(options.get("size"))
        from_ = self._offset(options.get("from"))

        query = options.get("query")
        if query is not None and not isinstance(query, str):
            raise MalformedQueryError(f"query must be a string, got: {query!r}")

        organization_id = options.get("organization_id")
        if organization_id is not None and not isinstance(organization_id, str):
            raise MalformedQueryError(
                f"organization_id must be a string, got: {organization_id!r}"
            )

        parsed = self.parser.parse(query, organization_id)
        results = [format_hit(hit) for hit in self.engine.search(parsed, size, from_)]

        if _is_truthy(options.get("hl")) and parsed.has_keywords:
            matched_stems = self.analyzer.stems(parsed.keywords)
            for result in results:
                result["position_title"] = self.highlighter.highlight(
                    result["position_title"], matched_stems
                )

        return results
