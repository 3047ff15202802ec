"""
Organization Resolver

Maps a natural-language organization mention ("veterans affairs", "the air
force") to an organization id. The query parser treats a miss, or any failure
inside a resolver, as "no organization constraint".
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable, Protocol

from rapidfuzz import fuzz

logger = logging.getLogger(__name__)


class OrganizationResolver(Protocol):
    """Protocol for organization lookups used by the query parser."""

    def resolve_organization(self, text: str) -> str | None:
        """Return the best-matching organization id for ``text``, or None."""
        ...


class NullOrganizationResolver:
    """Resolver that never matches; used when no directory is configured."""

    def resolve_organization(self, text: str) -> str | None:
        return None


def normalize_organization_text(text: str) -> str:
    """Lower-case, drop punctuation and a leading "the", collapse whitespace."""
    cleaned = re.sub(r"[^\w\s]", " ", text.lower())
    words = cleaned.split()
    if words and words[0] == "the":
        words = words[1:]
    return " ".join(words)


class AgencyDirectory:
    """
    In-process organization directory.

    Entries are dictionaries with ``organization_id``, ``name`` and optional
    ``aliases``. Lookups try an exact match on the normalized code, name or
    any alias, then fall back to fuzzy matching on names and aliases.
    """

    def __init__(self, entries: Iterable[dict[str, Any]], similarity_threshold: float = 0.9):
        """
        Initialize the directory.

        Args:
            entries: Organization entries
            similarity_threshold: Minimum similarity ratio (0.0-1.0) for a fuzzy
                match. Default 0.9 (90%)

        Raises:
            ValueError: If the threshold is outside (0, 1] or an entry has no
                organization_id
        """
        if not 0 < similarity_threshold <= 1:
            raise ValueError(
                f"similarity_threshold must be in (0, 1], got: {similarity_threshold}"
            )

        self.similarity_threshold = similarity_threshold
        self._exact: dict[str, str] = {}
        self._names: list[tuple[str, str]] = []

        for entry in entries:
            organization_id = (entry.get("organization_id") or "").strip().upper()
            if not organization_id:
                raise ValueError(f"Organization entry is missing organization_id: {entry}")

            self._exact.setdefault(organization_id.lower(), organization_id)
            for label in [entry.get("name"), *(entry.get("aliases") or [])]:
                if not label:
                    continue
                normalized = normalize_organization_text(label)
                if not normalized:
                    continue
                self._exact.setdefault(normalized, organization_id)
                self._names.append((normalized, organization_id))

        logger.debug(f"Loaded {len(self._names)} organization name(s) into directory")

    @classmethod
    def from_json_file(cls, path: str | Path, **kwargs: Any) -> AgencyDirectory:
        """Load entries from a JSON file holding a list of organization entries."""
        with open(path, encoding="utf-8") as f:
            entries = json.load(f)
        if not isinstance(entries, list):
            raise ValueError(f"Organization file must contain a JSON list: {path}")
        return cls(entries, **kwargs)

    def __len__(self) -> int:
        return len(self._names)

    def resolve_organization(self, text: str) -> str | None:
        """
        Resolve a mention to an organization id.

        Args:
            text: Free-text organization mention

        Returns:
            Organization id, or None if nothing is similar enough
        """
        lookup_key = normalize_organization_text(text or "")
        if not lookup_key:
            return None

        if lookup_key in self._exact:
            return self._exact[lookup_key]

        best_id = None
        best_similarity = 0.0
        for name, organization_id in self._names:
            similarity = fuzz.ratio(lookup_key, name) / 100.0
            if similarity > best_similarity:
                best_similarity = similarity
                best_id = organization_id

        if best_id and best_similarity >= self.similarity_threshold:
            logger.debug(
                f"Resolved '{text}' to {best_id} (similarity: {best_similarity:.2%})"
            )
            return best_id
        return None
