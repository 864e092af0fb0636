"""Tests for single-email enrichment."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from common.errors import ErrorKind, ProviderError
from enrichments.email.enricher import EmailEnricher, company_info_from_hits, dedupe_hits
from enrichments.email.name import is_free_email_domain, name_from_email, name_parts_from_email
from models.enrichment import Confidence
from models.lead import DataSource
from services.serper_search.schemas import SearchHit, SearchResult

PROFILE_HIT = SearchHit(
    title="Jane Doe - Director of Sales - Acme | LinkedIn",
    link="https://linkedin.com/in/janedoe",
    snippet="Jane Doe leads sales at Acme. Call (555) 123-4567.",
)


def make_search(hits):
    search = MagicMock()
    search.available = True
    search.search = AsyncMock(return_value=SearchResult(query="q", success=True, hits=hits))
    return search


def make_llm(available=True, response=None, error=None):
    llm = MagicMock()
    llm.available = available
    llm.complete_json = AsyncMock(return_value=response, side_effect=error)
    return llm


class TestNameDerivation:
    def test_first_and_last_name(self):
        assert name_parts_from_email("jane.doe42@acme.com") == ["Jane", "Doe"]

    def test_generic_mailbox(self):
        assert name_from_email("info@acme.com") == ""

    def test_single_letters_dropped(self):
        assert name_from_email("j.smith@acme.com") == "Smith"

    def test_at_most_three_tokens(self):
        assert name_from_email("a_b-carl.dan.eve.fox@acme.com") == "Carl Dan Eve"

    def test_free_email_domain(self):
        assert is_free_email_domain("Gmail.com")
        assert not is_free_email_domain("acme.com")


class TestHelpers:
    def test_dedupe_hits(self):
        hits = [SearchHit(title=str(i), link=f"https://acme.com/{i % 3}") for i in range(20)]
        assert len(dedupe_hits(hits)) == 3

    def test_company_info_keywords(self):
        hits = [SearchHit(title="Acme", link="https://acme.com", snippet="Acme is a software startup in Denver")]

        info = company_info_from_hits("acme.com", hits)

        assert info.industry == "Technology"
        assert info.size == "Small"
        assert info.description.startswith("Acme is a software startup")


class TestEmailEnricher:
    @pytest.mark.asyncio
    async def test_zero_signal_is_a_failure(self):
        search = make_search([])

        result = await EmailEnricher(search, make_llm(), delay=0).enrich("jane.doe@acme.com")

        assert result.success is False
        assert result.lead is None
        assert result.error_kind == ErrorKind.ALL_STAGES_EXHAUSTED
        assert search.search.await_count == 7

    @pytest.mark.asyncio
    async def test_free_email_skips_company_query(self):
        search = make_search([])
        await EmailEnricher(search, make_llm(), delay=0).enrich("jane.doe@gmail.com")
        assert search.search.await_count == 6

    @pytest.mark.asyncio
    async def test_basic_analysis_without_ai(self):
        result = await EmailEnricher(make_search([PROFILE_HIT]), make_llm(available=False), delay=0).enrich(
            "jane.doe@acme.com"
        )

        assert result.success
        assert result.lead.name == "Jane Doe"
        assert result.lead.title == "Director"
        assert result.lead.phone == "(555) 123-4567"
        assert result.lead.data_source == DataSource.RULE_BASED
        assert result.confidence == Confidence.LOW
        assert result.metadata.method == "rule-based"

    @pytest.mark.asyncio
    async def test_ai_synthesis(self):
        llm = make_llm(
            response={
                "name": "Jane Doe",
                "company": "Acme",
                "title": "Director of Sales",
                "seniority": "director",
                "confidence": "high",
                "sources": ["https://linkedin.com/in/janedoe"],
            }
        )

        result = await EmailEnricher(make_search([PROFILE_HIT]), llm, delay=0).enrich("jane.doe@acme.com")

        assert result.success
        assert result.confidence == Confidence.HIGH
        assert result.lead.title == "Director of Sales"
        assert result.lead.seniority == "Director"
        assert result.lead.data_source == DataSource.AI_GENERATED
        assert result.sources == ["https://linkedin.com/in/janedoe"]

    @pytest.mark.asyncio
    async def test_ai_failure_falls_back(self):
        llm = make_llm(error=ProviderError(ErrorKind.PARSE, "not json", provider="openai"))

        result = await EmailEnricher(make_search([PROFILE_HIT]), llm, delay=0).enrich("jane.doe@acme.com")

        assert result.success
        assert result.metadata.method == "rule-based"

    @pytest.mark.asyncio
    async def test_unexpected_ai_error_falls_back(self):
        llm = make_llm(error=RuntimeError("connection reset"))

        result = await EmailEnricher(make_search([PROFILE_HIT]), llm, delay=0).enrich("jane.doe@acme.com")

        assert result.success
        assert result.lead.name == "Jane Doe"
        assert result.metadata.method == "rule-based"

    @pytest.mark.asyncio
    async def test_sources_given_as_text_are_ignored(self):
        llm = make_llm(response={"name": "Jane Doe", "title": "Director of Sales", "sources": "linkedin"})

        result = await EmailEnricher(make_search([PROFILE_HIT]), llm, delay=0).enrich("jane.doe@acme.com")

        assert result.success
        assert result.sources
        assert all(source.startswith("https://") for source in result.sources)

    @pytest.mark.asyncio
    async def test_no_name_and_no_ai_is_a_failure(self):
        result = await EmailEnricher(make_search([PROFILE_HIT]), make_llm(available=False), delay=0).enrich(
            "info@acme.com"
        )
        assert not result.success
        assert result.lead is None

    @pytest.mark.asyncio
    async def test_search_unavailable(self):
        search = MagicMock()
        search.available = False
        result = await EmailEnricher(search, make_llm(), delay=0).enrich("jane.doe@acme.com")
        assert result.error_kind == ErrorKind.PROVIDER_UNAVAILABLE
