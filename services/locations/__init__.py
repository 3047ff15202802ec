"""
Locations

US state gazetteer and city/state phrase recognition used by query parsing
and record normalization.
"""

from .gazetteer import (
    Location,
    match_state_at,
    match_state_suffix,
    parse_location_phrase,
    split_city_state,
    state_code,
)

__all__ = [
    "Location",
    "match_state_at",
    "match_state_suffix",
    "parse_location_phrase",
    "split_city_state",
    "state_code",
]
