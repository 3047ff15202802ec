"""Highlighting of matched terms in position titles."""

from __future__ import annotations

import re

from .analyzer import WORD_PATTERN, Analyzer

PRE_TAG = "<em>"
POST_TAG = "</em>"


class Highlighter:
    """Wraps words whose stem matched the query in a marker pair."""

    def __init__(self, analyzer: Analyzer, pre_tag: str = PRE_TAG, post_tag: str = POST_TAG):
        self.analyzer = analyzer
        self.pre_tag = pre_tag
        self.post_tag = post_tag

    def highlight(self, text: str, matched_stems: set[str]) -> str:
        """
        Wrap every word of ``text`` whose stem is in ``matched_stems``.

        Only word characters are replaced; casing, punctuation and whitespace
        around them are kept as they were. Each matching word is wrapped on
        its own.

        Args:
            text: Text to highlight (e.g. a position title)
            matched_stems: Stems produced by ``Analyzer.stems`` for the query

        Returns:
            Highlighted text, or ``text`` unchanged when nothing matches
        """
        if not text or not matched_stems:
            return text

        def wrap(match: re.Match) -> str:
            word = match.group(0)
            if self.analyzer.stem(word) in matched_stems:
                return f"{self.pre_tag}{word}{self.post_tag}"
            return word

        return WORD_PATTERN.sub(wrap, text)
