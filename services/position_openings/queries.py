"""SQL queries for the position opening index.

The index is a PostgreSQL table whose name is chosen at runtime, so statements
are ``psycopg2.sql`` templates formatted with ``{table}`` (and, for the
secondary indexes, their own identifiers). Filter and ordering fragments are
composed by the search engine.
"""

from psycopg2 import sql

INDEX_EXISTS = "SELECT to_regclass(%s) IS NOT NULL"

CREATE_INDEX_TABLE = sql.SQL(
    """
    CREATE TABLE IF NOT EXISTS {table} (
        id BIGINT PRIMARY KEY,
        position_title TEXT NOT NULL,
        organization_id TEXT NOT NULL,
        organization_name TEXT NOT NULL,
        start_date DATE NOT NULL,
        end_date DATE NOT NULL,
        minimum NUMERIC,
        maximum NUMERIC,
        rate_interval_code TEXT,
        locations JSONB NOT NULL,
        search_vector TSVECTOR NOT NULL,
        indexed_at TIMESTAMP NOT NULL DEFAULT now(),
        CHECK (end_date >= start_date)
    )
"""
)

CREATE_SEARCH_VECTOR_INDEX = sql.SQL(
    "CREATE INDEX IF NOT EXISTS {index} ON {table} USING GIN (search_vector)"
)

CREATE_ORGANIZATION_ID_INDEX = sql.SQL(
    "CREATE INDEX IF NOT EXISTS {index} ON {table} (organization_id text_pattern_ops)"
)

CREATE_START_DATE_INDEX = sql.SQL(
    "CREATE INDEX IF NOT EXISTS {index} ON {table} (start_date, id DESC)"
)

DROP_INDEX_TABLE = sql.SQL("DROP TABLE IF EXISTS {table}")

# The connection runs in autocommit mode; imports wrap their pages in one transaction.
BEGIN_TRANSACTION = "BEGIN"
COMMIT_TRANSACTION = "COMMIT"

# Used with execute_values; the search vector is built by the database with
# the configured text search configuration (title weight A, organization B).
UPSERT_POSITION_OPENINGS = sql.SQL(
    """
    INSERT INTO {table} (
        id,
        position_title,
        organization_id,
        organization_name,
        start_date,
        end_date,
        minimum,
        maximum,
        rate_interval_code,
        locations,
        search_vector,
        indexed_at
    ) VALUES %s
    ON CONFLICT (id)
    DO UPDATE SET
        position_title = EXCLUDED.position_title,
        organization_id = EXCLUDED.organization_id,
        organization_name = EXCLUDED.organization_name,
        start_date = EXCLUDED.start_date,
        end_date = EXCLUDED.end_date,
        minimum = EXCLUDED.minimum,
        maximum = EXCLUDED.maximum,
        rate_interval_code = EXCLUDED.rate_interval_code,
        locations = EXCLUDED.locations,
        search_vector = EXCLUDED.search_vector,
        indexed_at = EXCLUDED.indexed_at
"""
)

UPSERT_ROW_TEMPLATE = (
    "(%s, %s, %s, %s, %s, %s, %s, %s, %s, %s::jsonb, "
    "setweight(to_tsvector(%s::regconfig, %s), 'A') || "
    "setweight(to_tsvector(%s::regconfig, %s), 'B'), "
    "now())"
)

DELETE_EXPIRED = sql.SQL("DELETE FROM {table} WHERE end_date < %s")

GET_ORGANIZATIONS = sql.SQL(
    """
    SELECT DISTINCT organization_id, organization_name
    FROM {table}
    ORDER BY organization_id, organization_name
"""
)

SEARCH_COLUMNS = sql.SQL(
    """
    SELECT
        id,
        position_title,
        organization_id,
        organization_name,
        start_date,
        end_date,
        minimum,
        maximum,
        rate_interval_code,
        locations
"""
)

# Location filter: city words and state must hold for the same location entry.
LOCATION_MATCH = sql.SQL(
    """EXISTS (
        SELECT 1
        FROM jsonb_array_elements(locations) AS loc
        WHERE {conditions}
    )"""
)

CITY_CONDITION = sql.SQL(
    "to_tsvector('simple', loc->>'city') @@ plainto_tsquery('simple', %(city)s)"
)

STATE_CONDITION = sql.SQL("loc->>'state' = %(state)s")
