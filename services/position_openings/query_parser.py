"""
Query Parser

Splits a natural-language job query into structured filters (organization,
city, state) and residual relevance keywords. Extraction runs as ordered
passes; each pass removes the tokens it claims, so later passes only see what
is left:

1. explicit ``organization_id`` parameter
2. organization code written in the query ("AF09"), when the resolver knows it
3. location ("in Arlington, VA", "nurse jobs Fulton MD", "md jobs")
4. implicit organization mention, via the organization resolver
5. whatever remains becomes the keywords
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from locations import (
    Location,
    match_state_at,
    match_state_suffix,
    parse_location_phrase,
    split_city_state,
)
from organizations import NullOrganizationResolver, OrganizationResolver

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"[^\W_](?:[\w'&-]|\.(?=\w))*|,")
ORGANIZATION_CODE_PATTERN = re.compile(r"^(?=[A-Z0-9]*\d)[A-Z][A-Z0-9]{3}$")

LOCATION_PREPOSITIONS = {"in"}
ORGANIZATION_PREPOSITIONS = {"at", "with"}

NOISE_WORDS = {
    "a",
    "an",
    "and",
    "at",
    "career",
    "careers",
    "employment",
    "for",
    "in",
    "job",
    "jobs",
    "opening",
    "openings",
    "opportunities",
    "opportunity",
    "position",
    "positions",
    "the",
    "vacancies",
    "vacancy",
    "with",
}

# Noise words that close an "in"/"at"/"with" phrase. Articles do not, so
# "in the Bronx" stays one phrase.
PHRASE_BREAKS = (
    NOISE_WORDS - LOCATION_PREPOSITIONS - ORGANIZATION_PREPOSITIONS - {"a", "an", "the"}
)


@dataclass
class ParsedQuery:
    """Structured interpretation of a search request."""

    keywords: str = ""
    organization_id: str | None = None
    city: str | None = None
    state: str | None = None

    @property
    def has_keywords(self) -> bool:
        return bool(self.keywords)


def tokenize_query(raw_query: str) -> list[str]:
    """Split a query into words and standalone commas, dropping other punctuation."""
    return TOKEN_PATTERN.findall(raw_query or "")


def _is_noise(token: str) -> bool:
    return token == "," or token.lower() in NOISE_WORDS


def _strip_noise(tokens: list[str]) -> list[str]:
    return [token for token in tokens if not _is_noise(token)]


def _is_state_code(token: str) -> bool:
    return len(token.replace(".", "")) == 2


def _capitalized_tail(words: list[str]) -> int:
    """Index where the trailing run of capitalized words starts."""
    start = len(words)
    while start > 0 and words[start - 1][:1].isupper():
        start -= 1
    return start


@dataclass
class _Segment:
    """A run of tokens, optionally introduced by a preposition."""

    preposition: str | None
    tokens: list[str]


def _segment(tokens: list[str]) -> list[_Segment]:
    segments = [_Segment(None, [])]
    for token in tokens:
        lowered = token.lower()
        if lowered in LOCATION_PREPOSITIONS or lowered in ORGANIZATION_PREPOSITIONS:
            segments.append(_Segment(lowered, []))
        elif lowered in PHRASE_BREAKS and segments[-1].preposition:
            segments.append(_Segment(None, [token]))
        else:
            segments[-1].tokens.append(token)
    return segments


class QueryParser:
    """Parses free-text queries using the gazetteer and an organization resolver."""

    def __init__(self, organization_resolver: OrganizationResolver | None = None):
        self.organization_resolver = organization_resolver or NullOrganizationResolver()

    def parse(
        self, raw_query: str | None, explicit_organization_id: str | None = None
    ) -> ParsedQuery:
        """
        Parse a query into keywords and filters.

        Args:
            raw_query: Free text such as "nurse jobs in Arlington, VA"
            explicit_organization_id: Structured organization filter; always
                wins over organizations mentioned in the text

        Returns:
            ParsedQuery with residual keywords and any extracted filters
        """
        parsed = ParsedQuery()
        if explicit_organization_id and explicit_organization_id.strip():
            parsed.organization_id = explicit_organization_id.strip().upper()

        tokens = tokenize_query(raw_query)
        if parsed.organization_id is None:
            tokens = self._extract_organization_code(tokens, parsed)

        residual, organization_candidate = self._extract_location(tokens, parsed)

        if parsed.organization_id is None:
            residual, organization_candidate = self._resolve_organization(
                residual, organization_candidate, parsed
            )

        parsed.keywords = " ".join(_strip_noise(residual + organization_candidate))

        logger.debug(
            f"Parsed query {raw_query!r}: keywords={parsed.keywords!r}, "
            f"organization_id={parsed.organization_id}, city={parsed.city}, state={parsed.state}"
        )
        return parsed

    def _extract_organization_code(self, tokens: list[str], parsed: ParsedQuery) -> list[str]:
        """Claim the first code-shaped token the resolver maps to itself ("AF09", not "GS13")."""
        for i, token in enumerate(tokens):
            if not ORGANIZATION_CODE_PATTERN.match(token):
                continue
            organization_id = self._lookup(token)
            if organization_id and organization_id.strip().upper() == token:
                parsed.organization_id = token
                return tokens[:i] + tokens[i + 1 :]
        return tokens

    def _extract_location(
        self, tokens: list[str], parsed: ParsedQuery
    ) -> tuple[list[str], list[str]]:
        """
        Claim location tokens.

        Returns:
            Tuple of (residual tokens, organization candidate tokens). The
            candidate holds the first "at"/"with" phrase that is not a place.
        """
        residual: list[str] = []
        candidate: list[str] = []
        location: Location | None = None

        for segment in _segment(tokens):
            words = [t for t in segment.tokens if t == "," or t.lower() not in NOISE_WORDS]

            if segment.preposition in LOCATION_PREPOSITIONS and location is None:
                location = parse_location_phrase(words)
                if location:
                    continue
            elif segment.preposition in ORGANIZATION_PREPOSITIONS:
                if location is None:
                    location = split_city_state(words, allow_bare=False)
                    if location:
                        continue
                if not candidate:
                    candidate = segment.tokens
                    continue

            if segment.preposition:
                residual.append(segment.preposition)
            residual.extend(segment.tokens)

        if location is None:
            residual, location = self._extract_trailing_location(residual)
        if location is None:
            residual, location = self._extract_standalone_state(residual)

        if location:
            parsed.city = location.city
            parsed.state = location.state
        return residual, candidate

    def _extract_trailing_location(self, tokens: list[str]) -> tuple[list[str], Location | None]:
        """
        Match "City, ST" or "City ST" at the end of the query.

        The city is the run of words after the last noise word ("nurse jobs
        san francisco, ca"). With no noise word before it, the comma form takes
        the trailing capitalized words as the city when the words before them
        are lower-case ("nurse Arlington, VA"), else every preceding word. The
        bare form needs a noise word.
        """
        if not tokens:
            return tokens, None

        comma_form = len(tokens) >= 3 and "," in tokens
        suffix = match_state_suffix(tokens, allow_ambiguous=comma_form)
        if not suffix:
            return tokens, None
        state, size = suffix

        head = tokens[:-size]
        if comma_form:
            if not head or head[-1] != ",":
                return tokens, None
            head = head[:-1]

        boundary = max((i for i, t in enumerate(head) if _is_noise(t)), default=-1)
        if boundary < 0 and comma_form:
            start = _capitalized_tail(head)
            if 0 < start < len(head):
                boundary = start - 1
        city_words = head[boundary + 1 :]
        if not city_words or (boundary < 0 and not comma_form):
            return tokens, None

        return head[: boundary + 1], Location(city=" ".join(city_words), state=state)

    def _extract_standalone_state(self, tokens: list[str]) -> tuple[list[str], Location | None]:
        for i in range(len(tokens)):
            if _is_noise(tokens[i]):
                continue
            match = match_state_at(tokens, i, allow_ambiguous=False)
            if not match:
                continue
            state, size = match

            # "Washington DC": a state name directly followed by a state code is a city.
            following = match_state_at(tokens, i + size, allow_ambiguous=False)
            if following and following[1] == 1 and _is_state_code(tokens[i + size]):
                city = " ".join(tokens[i : i + size])
                return tokens[:i] + tokens[i + size + 1 :], Location(city=city, state=following[0])

            return tokens[:i] + tokens[i + size :], Location(state=state)
        return tokens, None

    def _resolve_organization(
        self, residual: list[str], candidate: list[str], parsed: ParsedQuery
    ) -> tuple[list[str], list[str]]:
        """
        Try the organization candidate, else the whole residual, against the resolver.

        A match consumes the text it was resolved from. Misses and resolver
        failures leave the tokens in place as keywords.
        """
        for text_tokens in (candidate, residual + candidate):
            text = " ".join(_strip_noise(text_tokens))
            if not text:
                continue
            organization_id = self._lookup(text)
            if organization_id:
                parsed.organization_id = organization_id.strip().upper()
                if text_tokens is candidate:
                    return residual, []
                return [], []
        return residual, candidate

    def _lookup(self, text: str) -> str | None:
        try:
            return self.organization_resolver.resolve_organization(text)
        except Exception as e:
            logger.warning(f"Organization resolution failed for {text!r}: {e}")
            return None
