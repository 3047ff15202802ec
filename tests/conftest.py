"""
Root pytest configuration and shared fixtures.

This file contains configuration and fixtures shared across all test types.
Directory-specific conftest.py files can override or extend these fixtures.
"""

import sys
from datetime import date, timedelta
from pathlib import Path

import pytest

# Add services directory to Python path for tests
# This allows imports like "from shared import Database" to work in tests
services_path = Path(__file__).parent.parent / "services"
if str(services_path) not in sys.path:
    sys.path.insert(0, str(services_path))


@pytest.fixture
def today():
    """Fixed "today" used by clocks injected into the search engine."""
    return date(2024, 3, 15)


@pytest.fixture
def sample_position_openings(today):
    """Three postings: two open today and one starting tomorrow."""
    return [
        {
            "id": 1,
            "type": "position_opening",
            "position_title": "Deputy Special Assistant to the Chief Nurse Practitioner",
            "organization_id": "AF09",
            "organization_name": "Air Force Personnel Center",
            "start_date": today,
            "end_date": today + timedelta(days=1),
            "minimum": 80000,
            "maximum": 100000,
            "rate_interval_code": "PA",
            "locations": [
                {"city": "Andrews AFB", "state": "MD"},
                {"city": "Pentagon Arlington", "state": "VA"},
                {"city": "Air Force Academy", "state": "CO"},
            ],
        },
        {
            "id": 2,
            "type": "position_opening",
            "position_title": "Physician Assistant",
            "organization_id": "VATA",
            "organization_name": "Veterans Affairs, Veterans Health Administration",
            "start_date": today,
            "end_date": today + timedelta(days=1),
            "minimum": 17,
            "maximum": 23,
            "rate_interval_code": "PH",
            "locations": [{"city": "Fulton", "state": "MD"}],
        },
        {
            "id": 3,
            "type": "position_opening",
            "position_title": "Future Person",
            "organization_id": "FUTU",
            "organization_name": "Future Administration",
            "start_date": today + timedelta(days=1),
            "end_date": today + timedelta(days=8),
            "minimum": 17,
            "maximum": 23,
            "rate_interval_code": "PH",
            "locations": [{"city": "San Francisco", "state": "CA"}],
        },
    ]
