"""Environment-driven configuration for the search services."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
repo_root = Path(__file__).resolve().parents[2]
environment = os.getenv("ENVIRONMENT", "development")
env_file = repo_root / f".env.{environment}"
if env_file.exists():
    load_dotenv(env_file, override=True)
else:
    env_path = repo_root / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=True)
load_dotenv()

DEFAULT_INDEX_NAME = "position_openings"
DEFAULT_SEARCH_LANGUAGE = "english"
DEFAULT_RESULT_SIZE = 10
MAX_RESULT_SIZE = 100


def build_db_connection_string() -> str:
    """
    Build PostgreSQL connection string from environment variables.

    DATABASE_URL wins when set; otherwise reads POSTGRES_HOST, POSTGRES_PORT,
    POSTGRES_USER, POSTGRES_PASSWORD and POSTGRES_DB.

    Returns:
        PostgreSQL connection string
    """
    explicit = os.getenv("DATABASE_URL", "").strip()
    if explicit:
        return explicit

    host = os.getenv("POSTGRES_HOST", "localhost")
    port = os.getenv("POSTGRES_PORT", "5432")
    user = os.getenv("POSTGRES_USER", "postgres")
    password = os.getenv("POSTGRES_PASSWORD", "postgres")
    db = os.getenv("POSTGRES_DB", "position_search_db")

    return f"postgresql://{user}:{password}@{host}:{port}/{db}"


def _int_env(name: str, default: int | None) -> int | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got: {raw!r}") from e


@dataclass(frozen=True)
class SearchConfig:
    """Settings shared by the index, the search engine and the scripts."""

    connection_string: str
    index_name: str = DEFAULT_INDEX_NAME
    language: str = DEFAULT_SEARCH_LANGUAGE
    default_size: int = DEFAULT_RESULT_SIZE
    max_size: int = MAX_RESULT_SIZE
    connect_timeout: int | None = None
    statement_timeout_ms: int | None = None
    organizations_file: str | None = None

    @classmethod
    def from_env(cls) -> SearchConfig:
        """Read settings from the process environment."""
        return cls(
            connection_string=build_db_connection_string(),
            index_name=os.getenv("POSITION_INDEX_NAME", DEFAULT_INDEX_NAME),
            language=os.getenv("SEARCH_LANGUAGE", DEFAULT_SEARCH_LANGUAGE).lower(),
            default_size=_int_env("SEARCH_DEFAULT_SIZE", DEFAULT_RESULT_SIZE),
            max_size=_int_env("SEARCH_MAX_SIZE", MAX_RESULT_SIZE),
            connect_timeout=_int_env("DB_CONNECT_TIMEOUT", None),
            statement_timeout_ms=_int_env("DB_STATEMENT_TIMEOUT_MS", None),
            organizations_file=os.getenv("ORGANIZATIONS_FILE") or None,
        )
