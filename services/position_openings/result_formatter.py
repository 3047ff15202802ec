"""Projection of index hits into the public result shape."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

DATE_FORMAT = "%Y-%m-%d"

RESULT_FIELDS = (
    "id",
    "position_title",
    "organization_name",
    "start_date",
    "end_date",
    "minimum",
    "maximum",
    "rate_interval_code",
    "locations",
)


def format_date(value: date | datetime | str | None) -> str | None:
    """Render a date as YYYY-MM-DD regardless of locale."""
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    return str(value)[:10]


def format_pay(value: Any) -> int | float | None:
    """Return pay bounds as int when integral, otherwise float."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def format_locations(locations: list[dict[str, str]] | None) -> list[str]:
    """Flatten location pairs to "City, ST" strings, keeping their order."""
    return [f"{loc['city']}, {loc['state']}" for loc in locations or []]


def format_hit(hit: dict[str, Any]) -> dict[str, Any]:
    """
    Project an index hit into the result shape returned to callers.

    Args:
        hit: Row from the search engine (internal columns are ignored)

    Returns:
        Dictionary with exactly the keys in RESULT_FIELDS
    """
    return {
        "id": str(hit["id"]),
        "position_title": hit["position_title"],
        "organization_name": hit["organization_name"],
        "start_date": format_date(hit["start_date"]),
        "end_date": format_date(hit["end_date"]),
        "minimum": format_pay(hit.get("minimum")),
        "maximum": format_pay(hit.get("maximum")),
        "rate_interval_code": hit.get("rate_interval_code"),
        "locations": format_locations(hit.get("locations")),
    }
