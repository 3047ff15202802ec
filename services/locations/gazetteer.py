"""Location gazetteer.

Maps free-text tokens to US state codes and recognizes "City, ST" and
"City ST" patterns inside a location phrase. Functions take lists of tokens
as produced by the query parser (words, with commas as separate tokens).
"""

from __future__ import annotations

from dataclasses import dataclass

from .us_states import AMBIGUOUS_STATE_CODES, MAX_STATE_NAME_TOKENS, US_STATES

STATE_CODES_BY_NAME = {name.lower(): code for code, name in US_STATES.items()}


@dataclass(frozen=True)
class Location:
    """A city and/or state constraint. State is always a 2-letter code."""

    city: str | None = None
    state: str | None = None

    def __bool__(self) -> bool:
        return bool(self.city or self.state)


def _clean(token: str) -> str:
    return token.replace(".", "").lower()


def state_code(text: str, allow_ambiguous: bool = True) -> str | None:
    """
    Resolve a state code or full state name to its 2-letter code.

    Args:
        text: Code ("md", "D.C.") or name ("maryland", "New York"), any case
        allow_ambiguous: When False, codes listed in AMBIGUOUS_STATE_CODES
            only match if written in upper case ("IN" but not "in")

    Returns:
        Upper-case state code, or None if the text is not a state
    """
    words = [_clean(word) for word in text.split()]
    cleaned = " ".join(word for word in words if word)
    if not cleaned:
        return None

    if cleaned in STATE_CODES_BY_NAME:
        return STATE_CODES_BY_NAME[cleaned]

    code = cleaned.upper()
    if code not in US_STATES:
        return None
    if code in AMBIGUOUS_STATE_CODES and not allow_ambiguous and text.strip() != code:
        return None
    return code


def match_state_at(
    tokens: list[str], start: int, allow_ambiguous: bool = True
) -> tuple[str, int] | None:
    """
    Match the longest state name or code beginning at ``tokens[start]``.

    Returns:
        Tuple of (state code, number of tokens consumed), or None
    """
    longest = min(MAX_STATE_NAME_TOKENS, len(tokens) - start)
    for size in range(longest, 0, -1):
        span = tokens[start : start + size]
        if "," in span:
            continue
        code = state_code(" ".join(span), allow_ambiguous=allow_ambiguous)
        if code:
            return code, size
    return None


def match_state_suffix(tokens: list[str], allow_ambiguous: bool = True) -> tuple[str, int] | None:
    """
    Match the longest state name or code that ends the token list.

    Returns:
        Tuple of (state code, number of trailing tokens consumed), or None
    """
    longest = min(MAX_STATE_NAME_TOKENS, len(tokens))
    for size in range(longest, 0, -1):
        span = tokens[-size:]
        if "," in span:
            continue
        code = state_code(" ".join(span), allow_ambiguous=allow_ambiguous)
        if code:
            return code, size
    return None


def split_city_state(tokens: list[str], allow_bare: bool = True) -> Location | None:
    """
    Recognize "City, ST" or "City ST" in a token list.

    The comma form is tried first. When ``allow_bare`` is False only the comma
    form is accepted.

    Returns:
        Location with both city and state, or None
    """
    if "," in tokens:
        comma = len(tokens) - 1 - tokens[::-1].index(",")
        city_words = [t for t in tokens[:comma] if t != ","]
        state_words = [t for t in tokens[comma + 1 :] if t != ","]
        code = state_code(" ".join(state_words)) if state_words else None
        if city_words and code:
            return Location(city=" ".join(city_words), state=code)

    if not allow_bare:
        return None

    words = [t for t in tokens if t != ","]
    suffix = match_state_suffix(words)
    if suffix and len(words) > suffix[1]:
        code, size = suffix
        return Location(city=" ".join(words[:-size]), state=code)
    return None


def parse_location_phrase(tokens: list[str]) -> Location | None:
    """
    Parse a phrase that is known to name a place (e.g. the words after "in").

    Precedence: "City, ST", then "City ST", then a bare state, then a bare city.
    """
    located = split_city_state(tokens)
    if located:
        return located

    words = [t for t in tokens if t != ","]
    if not words:
        return None

    code = state_code(" ".join(words))
    if code:
        return Location(state=code)
    return Location(city=" ".join(words))
