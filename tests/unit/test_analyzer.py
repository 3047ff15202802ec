"""Unit tests for Analyzer and Highlighter."""

import pytest

from services.position_openings.analyzer import Analyzer
from services.position_openings.highlighter import Highlighter


@pytest.fixture
def analyzer():
    return Analyzer("english")


class TestAnalyzer:
    """Test cases for Analyzer."""

    def test_unsupported_language(self):
        with pytest.raises(ValueError, match="Unsupported search language"):
            Analyzer("klingon")

    def test_language_is_lower_cased(self):
        assert Analyzer("English").language == "english"

    def test_tokenize_lower_cases_and_drops_punctuation(self, analyzer):
        assert analyzer.tokenize("Nurse-Practitioner, R.N.") == ["nurse", "practitioner", "r", "n"]

    def test_stem_collapses_inflections(self, analyzer):
        assert analyzer.stem("nursing") == analyzer.stem("Nurse")
        assert analyzer.stem("physicians") == analyzer.stem("physician")

    def test_stems_skip_stop_words(self, analyzer):
        assert analyzer.stems("the nurse at a clinic") == {analyzer.stem("nurse"), "clinic"}

    def test_to_tsquery_text_ors_unique_terms(self, analyzer):
        assert analyzer.to_tsquery_text("physician nursing Physician") == "physician | nursing"

    def test_to_tsquery_text_drops_operators(self, analyzer):
        assert analyzer.to_tsquery_text("nurse & !doctor") == "nurse | doctor"


class TestHighlighter:
    """Test cases for Highlighter."""

    def test_highlights_stem_matches_preserving_case(self, analyzer):
        highlighter = Highlighter(analyzer)
        title = "Deputy Special Assistant to the Chief Nurse Practitioner"

        result = highlighter.highlight(title, analyzer.stems("nursing"))

        assert result == "Deputy Special Assistant to the Chief <em>Nurse</em> Practitioner"

    def test_wraps_each_matching_word(self, analyzer):
        highlighter = Highlighter(analyzer)

        result = highlighter.highlight("Nurse, Nursing Supervisor", analyzer.stems("nurse"))

        assert result == "<em>Nurse</em>, <em>Nursing</em> Supervisor"

    def test_no_match_returns_text_unchanged(self, analyzer):
        highlighter = Highlighter(analyzer)
        assert highlighter.highlight("Physician Assistant", analyzer.stems("nurse")) == (
            "Physician Assistant"
        )

    def test_stop_words_are_not_highlighted(self, analyzer):
        highlighter = Highlighter(analyzer)
        assert highlighter.highlight("Chief of the Nurses", analyzer.stems("the nurse")) == (
            "Chief of the <em>Nurses</em>"
        )

    def test_custom_tags(self, analyzer):
        highlighter = Highlighter(analyzer, pre_tag="[", post_tag="]")
        assert highlighter.highlight("Chief Nurse", {analyzer.stem("nurse")}) == "Chief [Nurse]"
