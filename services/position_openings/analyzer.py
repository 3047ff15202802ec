"""
Text analysis for position openings.

The index store stems with PostgreSQL's snowball configurations; this module
applies the same snowball algorithm in Python (via ``snowballstemmer``) so the
highlighter marks exactly the words the index matched.
"""

from __future__ import annotations

import re
import threading

import snowballstemmer

WORD_PATTERN = re.compile(r"[^\W_]+")

# PostgreSQL's english.stop list; these words never match in the index, so
# they are never highlighted either.
ENGLISH_STOP_WORDS = frozenset(
    """
    i me my myself we our ours ourselves you your yours yourself yourselves he
    him his himself she her hers herself it its itself they them their theirs
    themselves what which who whom this that these those am is are was were be
    been being have has had having do does did doing a an the and but if or
    because as until while of at by for with about against between into
    through during before after above below to from up down in out on off
    over under again further then once here there when where why how all any
    both each few more most other some such no nor not only own same so than
    too very s t can will just don should now
    """.split()
)

STOP_WORDS_BY_LANGUAGE = {"english": ENGLISH_STOP_WORDS}


class Analyzer:
    """Tokenizer and snowball stemmer for one language."""

    def __init__(self, language: str = "english"):
        """
        Initialize the analyzer.

        Args:
            language: Snowball language name; also the PostgreSQL text search
                configuration used by the index

        Raises:
            ValueError: If no snowball stemmer exists for the language
        """
        language = (language or "").lower()
        if language not in snowballstemmer.algorithms():
            raise ValueError(f"Unsupported search language: {language!r}")

        self.language = language
        self.stop_words = STOP_WORDS_BY_LANGUAGE.get(language, frozenset())
        # Stemmer instances keep per-call state.
        self._local = threading.local()

    @property
    def _stemmer(self):
        stemmer = getattr(self._local, "stemmer", None)
        if stemmer is None:
            stemmer = snowballstemmer.stemmer(self.language)
            self._local.stemmer = stemmer
        return stemmer

    def tokenize(self, text: str) -> list[str]:
        """Split text into lower-case word tokens."""
        return [match.group(0).lower() for match in WORD_PATTERN.finditer(text or "")]

    def stem(self, word: str) -> str:
        return self._stemmer.stemWord(word.lower())

    def stems(self, text: str) -> set[str]:
        """Stems of the searchable (non stop word) tokens in ``text``."""
        return {self.stem(token) for token in self.tokenize(text) if token not in self.stop_words}

    def to_tsquery_text(self, keywords: str) -> str:
        """
        Build ``to_tsquery`` input matching any of the keywords.

        Tokens are restricted to letters and digits, so the result never
        contains tsquery operators other than the ``|`` joining them.
        """
        terms = dict.fromkeys(self.tokenize(keywords))
        return " | ".join(terms)
