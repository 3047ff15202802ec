"""
Organizations

Resolution of free-text organization mentions to organization ids.
"""

from .organization_resolver import (
    AgencyDirectory,
    NullOrganizationResolver,
    OrganizationResolver,
    normalize_organization_text,
)

__all__ = [
    "AgencyDirectory",
    "NullOrganizationResolver",
    "OrganizationResolver",
    "normalize_organization_text",
]
