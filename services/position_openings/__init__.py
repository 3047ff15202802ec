"""
Position Openings

Full-text search over job position openings: query interpretation, indexing,
ranking, highlighting and result shaping.
"""

from .analyzer import Analyzer
from .exceptions import (
    IndexUnavailableError,
    MalformedQueryError,
    PositionSearchError,
    TransientBackendError,
)
from .highlighter import Highlighter
from .position_index import PositionIndex
from .position_opening_service import PositionOpeningService
from .query_parser import ParsedQuery, QueryParser
from .result_formatter import format_hit
from .search_engine import PositionSearchEngine

__all__ = [
    "Analyzer",
    "Highlighter",
    "IndexUnavailableError",
    "MalformedQueryError",
    "ParsedQuery",
    "PositionIndex",
    "PositionOpeningService",
    "PositionSearchEngine",
    "PositionSearchError",
    "QueryParser",
    "TransientBackendError",
    "format_hit",
]
