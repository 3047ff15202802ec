"""Unit tests for QueryParser."""

import pytest

from services.position_openings.query_parser import ParsedQuery, QueryParser, tokenize_query


@pytest.fixture
def parser():
    """Create a QueryParser without an organization directory."""
    return QueryParser()


class TestTokenizeQuery:
    """Test cases for tokenize_query."""

    def test_commas_are_separate_tokens(self):
        assert tokenize_query("jobs in Arlington, VA.") == ["jobs", "in", "Arlington", ",", "VA"]

    def test_inner_periods_are_kept(self):
        assert tokenize_query("nurse, D.C.") == ["nurse", ",", "D.C"]

    def test_none_query(self):
        assert tokenize_query(None) == []


class TestQueryParser:
    """Test cases for QueryParser.parse."""

    def test_keywords_without_filters(self, parser):
        parsed = parser.parse("physician nursing Practitioner")
        assert parsed == ParsedQuery(keywords="physician nursing Practitioner")
        assert parsed.has_keywords

    def test_noise_words_are_dropped(self, parser):
        assert parser.parse("nursing jobs").keywords == "nursing"

    def test_empty_query(self, parser):
        parsed = parser.parse(None)
        assert parsed == ParsedQuery()
        assert not parsed.has_keywords

    def test_in_phrase_state_name(self, parser):
        parsed = parser.parse("jobs in maryland")
        assert parsed.state == "MD"
        assert parsed.city is None
        assert parsed.keywords == ""

    def test_in_phrase_city(self, parser):
        parsed = parser.parse("jobs in Arlington")
        assert parsed.city == "Arlington"
        assert parsed.state is None

    def test_in_phrase_city_and_state(self, parser):
        parsed = parser.parse("jobs in Arlington, va")
        assert (parsed.city, parsed.state) == ("Arlington", "VA")
        assert parsed.keywords == ""

    def test_in_phrase_bare_city_and_state(self, parser):
        parsed = parser.parse("nurse jobs in Fulton MD")
        assert (parsed.city, parsed.state) == ("Fulton", "MD")
        assert parsed.keywords == "nurse"


    def test_in_phrase_ends_at_noise_word(self, parser):
        parsed = parser.parse("jobs in Arlington for nurses")
        assert (parsed.city, parsed.state) == ("Arlington", None)
        assert parsed.keywords == "nurses"

    def test_in_phrase_keeps_article(self, parser):
        parsed = parser.parse("jobs in the Bronx, NY")
        assert parsed.state == "NY"
        assert parsed.keywords == ""
    @pytest.mark.parametrize("query", ["md jobs", "jobs md"])
    def test_standalone_state_code(self, parser, query):
        parsed = parser.parse(query)
        assert parsed.state == "MD"
        assert parsed.keywords == ""

    def test_trailing_city_state_after_noise_word(self, parser):
        parsed = parser.parse("nurse jobs san francisco, ca")
        assert (parsed.city, parsed.state) == ("san francisco", "CA")
        assert parsed.keywords == "nurse"


    def test_trailing_capitalized_city_after_keywords(self, parser):
        parsed = parser.parse("nurse Arlington, VA")
        assert (parsed.city, parsed.state) == ("Arlington", "VA")
        assert parsed.keywords == "nurse"

    def test_trailing_comma_form_without_capitals_takes_all_words(self, parser):
        parsed = parser.parse("san francisco, ca")
        assert (parsed.city, parsed.state) == ("san francisco", "CA")
        assert parsed.keywords == ""

    @pytest.mark.parametrize("query", ["Washington DC jobs", "jobs in Washington DC"])
    def test_state_name_followed_by_code_is_a_city(self, parser, query):
        parsed = parser.parse(query)
        assert (parsed.city, parsed.state) == ("Washington", "DC")
        assert parsed.keywords == ""
    def test_city_state_after_at(self, parser):
        parsed = parser.parse("nurse jobs at Fulton, MD")
        assert (parsed.city, parsed.state) == ("Fulton", "MD")
        assert parsed.keywords == "nurse"

    def test_lower_case_ambiguous_code_stays_a_keyword(self, parser):
        parsed = parser.parse("physical therapist or nurse")
        assert parsed.state is None
        assert parsed.keywords == "physical therapist or nurse"

    def test_organization_code_in_query(self, stub_resolver):
        resolver = stub_resolver("AF09", matches={"AF09"})
        parsed = QueryParser(resolver).parse("AF09 nurse")
        assert parsed.organization_id == "AF09"
        assert parsed.keywords == "nurse"
        assert resolver.lookups == ["AF09"]

    @pytest.mark.parametrize("query", ["GS13 nurse", "AF09 nurse"])
    def test_unknown_code_stays_a_keyword(self, parser, query):
        parsed = parser.parse(query)
        assert parsed.organization_id is None
        assert parsed.keywords == query

    def test_code_resolving_elsewhere_stays_a_keyword(self, stub_resolver):
        parsed = QueryParser(stub_resolver("VATA")).parse("GS13 nurse at the nsa")
        assert parsed.organization_id == "VATA"
        assert parsed.keywords == "GS13 nurse"

    def test_explicit_organization_id_is_upper_cased(self, parser):
        parsed = parser.parse("jobs", "va")
        assert parsed.organization_id == "VA"
        assert parsed.keywords == ""

    def test_explicit_organization_id_wins_over_implicit(self, stub_resolver):
        resolver = stub_resolver("VATA")
        parsed = QueryParser(resolver).parse("jobs at the nsa", "AF")
        assert parsed.organization_id == "AF"
        assert resolver.lookups == []
        assert parsed.keywords == "nsa"


class TestImplicitOrganizations:
    """Test cases for organization mentions resolved through the directory."""

    def test_at_phrase(self, stub_resolver):
        resolver = stub_resolver("VATA")
        parsed = QueryParser(resolver).parse("jobs at the nsa")
        assert parsed.organization_id == "VATA"
        assert parsed.keywords == ""
        assert resolver.lookups == ["nsa"]

    def test_mention_without_preposition(self, stub_resolver):
        parsed = QueryParser(stub_resolver("VATA")).parse("nsa employment")
        assert parsed.organization_id == "VATA"
        assert parsed.keywords == ""

    def test_unresolved_mention_stays_a_keyword(self, stub_resolver):
        resolver = stub_resolver("VATA", matches={"veterans affairs"})
        parsed = QueryParser(resolver).parse("nurse jobs at the nsa")
        assert parsed.organization_id is None
        assert parsed.keywords == "nurse nsa"

    def test_resolver_failure_means_no_constraint(self, failing_resolver):
        parsed = QueryParser(failing_resolver).parse("jobs at the nsa")
        assert parsed.organization_id is None
        assert parsed.keywords == "nsa"
