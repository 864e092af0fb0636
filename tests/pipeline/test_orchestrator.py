"""Tests for the enrichment cascade, email pipeline and CSV batch paths."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from common.config import Config
from common.errors import ErrorKind, ProviderError, http_status_for
from enrichments.classification import LeadClassifier
from enrichments.dedup.consolidation import LeadConsolidator
from models.enrichment import Confidence, EmailEnrichmentResult, ProviderResult
from models.lead import CompanyInfo, DataSource, EnrichmentMethod, Lead
from pipeline.cache import ResultCache
from pipeline.events import EventType
from pipeline.orchestrator import EnrichmentOrchestrator


def found(provider, name="Jane Doe"):
    return ProviderResult.success(provider, [Lead(id=f"{provider}-1", name=name, title="CEO")], CompanyInfo(name="Acme"))


def empty(provider, kind=ErrorKind.PROVIDER_EMPTY):
    return ProviderResult.failure(provider, kind, f"{provider} found nothing")


def fake_stage(result=None, error=None, calls=None, name=""):
    stage = MagicMock()

    async def run(domain):
        if calls is not None:
            calls.append(name)
        if error:
            raise error
        return result

    stage.run = AsyncMock(side_effect=run)
    return stage


def slow_stage(delay, result):
    stage = MagicMock()

    async def run(domain):
        await asyncio.sleep(delay)
        return result

    stage.run = run
    return stage


def make_settings(**overrides):
    values = {
        "enrichment_timeout": 5.0,
        "hybrid_stage_timeout": 1.0,
        "ai_stage_timeout": 1.0,
        "external_stage_timeout": 1.0,
        "email_enrichment_timeout": 1.0,
    }
    values.update(overrides)
    return Config(**values)


def make_orchestrator(hybrid=None, ai_direct=None, external=None, email_enricher=None, events=None, **settings):
    return EnrichmentOrchestrator(
        settings=make_settings(**settings),
        hybrid=hybrid or fake_stage(empty("hybrid")),
        ai_direct=ai_direct or fake_stage(empty("openai")),
        external=external or fake_stage(empty("external")),
        email_enricher=email_enricher or MagicMock(),
        consolidator=LeadConsolidator(),
        classifier=LeadClassifier(),
        cache=ResultCache(),
        events=events,
    )


class TestDomainCascade:
    @pytest.mark.asyncio
    async def test_stages_run_in_order(self):
        calls = []
        orchestrator = make_orchestrator(
            hybrid=fake_stage(empty("hybrid"), calls=calls, name="hybrid"),
            ai_direct=fake_stage(empty("openai"), calls=calls, name="openai"),
            external=fake_stage(found("external-hunter"), calls=calls, name="external"),
        )

        result = await orchestrator.enrich_domain("acme.com")

        assert calls == ["hybrid", "openai", "external"]
        assert result.success
        assert result.metadata.source == "external-hunter"
        assert result.metadata.attempted_stages == ["hybrid", "openai", "external"]

    @pytest.mark.asyncio
    async def test_first_success_short_circuits(self):
        ai_direct = fake_stage(found("openai"))
        external = fake_stage(found("external"))
        orchestrator = make_orchestrator(hybrid=fake_stage(found("hybrid")), ai_direct=ai_direct, external=external)

        result = await orchestrator.enrich_domain("https://www.acme.com/")

        assert result.success
        assert result.metadata.source == "hybrid"
        assert result.metadata.domain == "acme.com"
        ai_direct.run.assert_not_awaited()
        external.run.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_all_empty_never_invents_leads(self):
        orchestrator = make_orchestrator()

        result = await orchestrator.enrich_domain("acme-unknown-xyz.com")

        assert result.success is False
        assert result.leads == []
        assert result.error == "No enrichment data available for domain: acme-unknown-xyz.com"
        assert result.error_kind == ErrorKind.ALL_STAGES_EXHAUSTED
        assert http_status_for(result.error_kind) == 404
        assert set(result.metadata.stage_errors) == {"hybrid", "openai", "external"}

    @pytest.mark.asyncio
    async def test_slow_stage_falls_through(self):
        orchestrator = make_orchestrator(
            hybrid=slow_stage(2.0, found("hybrid")),
            ai_direct=fake_stage(found("openai")),
            hybrid_stage_timeout=0.05,
        )

        result = await orchestrator.enrich_domain("acme.com")

        assert result.success
        assert result.metadata.source == "openai"
        assert result.metadata.stage_errors["hybrid"].startswith("provider_timeout")

    @pytest.mark.asyncio
    async def test_overall_deadline(self):
        orchestrator = make_orchestrator(
            hybrid=slow_stage(2.0, found("hybrid")), enrichment_timeout=0.05, hybrid_stage_timeout=5.0
        )

        result = await orchestrator.enrich_domain("acme.com")

        assert not result.success
        assert result.error_kind == ErrorKind.TIMEOUT
        assert result.metadata.attempted_stages == ["hybrid"]

    @pytest.mark.asyncio
    async def test_stage_errors_are_contained(self):
        orchestrator = make_orchestrator(
            hybrid=fake_stage(error=RuntimeError("kaboom")),
            ai_direct=fake_stage(error=ProviderError(ErrorKind.PROVIDER_UNAVAILABLE, "no key")),
            external=fake_stage(found("external-apollo")),
        )

        result = await orchestrator.enrich_domain("acme.com")

        assert result.success
        assert result.metadata.stage_errors["hybrid"].startswith("provider_error")
        assert result.metadata.stage_errors["openai"].startswith("provider_unavailable")

    @pytest.mark.asyncio
    async def test_invalid_domain(self):
        hybrid = fake_stage(found("hybrid"))
        orchestrator = make_orchestrator(hybrid=hybrid)

        result = await orchestrator.enrich_domain("not a domain")

        assert result.error_kind == ErrorKind.VALIDATION
        assert http_status_for(result.error_kind) == 400
        hybrid.run.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_company_info_from_failed_stage_is_kept(self):
        external = fake_stage(
            ProviderResult.failure("external", ErrorKind.PROVIDER_EMPTY, "company only", CompanyInfo(name="Acme Corp"))
        )
        result = await make_orchestrator(external=external).enrich_domain("acme.com")
        assert not result.success
        assert result.company_info.name == "Acme Corp"


class TestDomainCache:
    @pytest.mark.asyncio
    async def test_success_is_cached(self):
        hybrid = fake_stage(found("hybrid"))
        orchestrator = make_orchestrator(hybrid=hybrid)

        first = await orchestrator.enrich_domain("acme.com")
        second = await orchestrator.enrich_domain("ACME.com")

        assert hybrid.run.await_count == 1
        assert first.metadata.cache_hit is False
        assert second.metadata.cache_hit is True
        assert [lead.id for lead in second.leads] == [lead.id for lead in first.leads]

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self):
        hybrid = fake_stage(empty("hybrid"))
        orchestrator = make_orchestrator(hybrid=hybrid)

        await orchestrator.enrich_domain("acme.com")
        await orchestrator.enrich_domain("acme.com")

        assert hybrid.run.await_count == 2
        assert orchestrator.cache.stats()["keys"] == 0


class TestSingleStage:
    @pytest.mark.asyncio
    async def test_run_single_stage(self):
        hybrid = fake_stage(found("hybrid"))
        orchestrator = make_orchestrator(hybrid=hybrid, ai_direct=fake_stage(found("openai")))

        result = await orchestrator.run_stage("openai", "acme.com")

        assert result.success
        assert result.metadata.attempted_stages == ["openai"]
        hybrid.run.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_single_stage_failure_keeps_kind(self):
        orchestrator = make_orchestrator(external=fake_stage(empty("external", ErrorKind.PROVIDER_UNAVAILABLE)))

        result = await orchestrator.run_stage("external", "acme.com")

        assert not result.success
        assert result.error_kind == ErrorKind.PROVIDER_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_unknown_stage(self):
        with pytest.raises(ValueError):
            await make_orchestrator().run_stage("magic", "acme.com")


class TestEvents:
    @pytest.mark.asyncio
    async def test_milestones_are_published(self):
        sink = MagicMock()
        orchestrator = make_orchestrator(hybrid=fake_stage(empty("hybrid")), ai_direct=fake_stage(found("openai")), events=sink)

        await orchestrator.enrich_domain("acme.com")

        published = [call.kwargs["event_type"] for call in sink.publish.call_args_list]
        assert published == [
            EventType.STAGE_STARTED,
            EventType.STAGE_FAILED,
            EventType.STAGE_STARTED,
            EventType.STAGE_COMPLETED,
            EventType.ENRICHMENT_COMPLETED,
        ]


class TestEmailPipeline:
    @pytest.mark.asyncio
    async def test_invalid_email(self):
        result = await make_orchestrator().enrich_by_email("not-an-email")
        assert result.error_kind == ErrorKind.VALIDATION

    @pytest.mark.asyncio
    async def test_zero_signal_is_not_cached(self):
        enricher = MagicMock()
        enricher.enrich = AsyncMock(
            return_value=EmailEnrichmentResult(
                success=False,
                email="jane.doe@acme.com",
                error="No enrichment data available for email: jane.doe@acme.com",
                error_kind=ErrorKind.ALL_STAGES_EXHAUSTED,
            )
        )
        orchestrator = make_orchestrator(email_enricher=enricher)

        result = await orchestrator.enrich_by_email("Jane.Doe@acme.com")

        assert result.success is False
        assert result.lead is None
        enricher.enrich.assert_awaited_once_with("jane.doe@acme.com")
        assert orchestrator.cache.stats()["keys"] == 0

    @pytest.mark.asyncio
    async def test_success_is_cached(self):
        enricher = MagicMock()
        enricher.enrich = AsyncMock(
            return_value=EmailEnrichmentResult(
                success=True,
                email="jane.doe@acme.com",
                lead=Lead(name="Jane Doe", email="jane.doe@acme.com"),
                confidence=Confidence.MEDIUM,
            )
        )
        orchestrator = make_orchestrator(email_enricher=enricher)

        await orchestrator.enrich_by_email("jane.doe@acme.com")
        cached = await orchestrator.enrich_by_email("jane.doe@acme.com")

        assert cached.metadata.cache_hit is True
        enricher.enrich.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_email_deadline(self):
        async def never_finishes(email):
            await asyncio.sleep(2)

        enricher = MagicMock()
        enricher.enrich = never_finishes
        orchestrator = make_orchestrator(email_enricher=enricher, email_enrichment_timeout=0.05)

        result = await orchestrator.enrich_by_email("jane.doe@acme.com")

        assert result.error_kind == ErrorKind.TIMEOUT


class TestBatchPaths:
    @pytest.mark.asyncio
    async def test_deduplicate_leads(self):
        sink = MagicMock()
        leads = [
            Lead(id="1", name="john smith", company="Acme", title="Manager", email="john@acme.com"),
            Lead(id="2", name="Mary Johnson", company="Globex", title="CFO"),
            Lead(id="3", name="John Smith", company="Acme Inc", title="CEO", email="john@acme.com"),
        ]

        result = await make_orchestrator(events=sink).deduplicate_leads(leads)

        assert [lead.name for lead in result.leads] == ["John Smith", "Mary Johnson"]
        merged, single = result.leads
        assert merged.title == "CEO"
        assert merged.consolidated_from == ["1", "3"]
        assert single.id == "2"
        assert single.data_source == DataSource.ORIGINAL
        assert single.enrichment_method == EnrichmentMethod.CSV_DEDUPLICATED
        assert result.metadata.duplicates_removed == 1
        published = [call.kwargs["event_type"] for call in sink.publish.call_args_list]
        assert EventType.DEDUP_GROUP_CONSOLIDATED in published

    @pytest.mark.asyncio
    async def test_enrich_leads(self):
        leads = [Lead(name="Ann Lee", title="Dentist"), Lead(name="Bo", specialty="Sales", seniority="Manager")]

        enriched = await make_orchestrator().enrich_leads(leads)

        assert enriched[0].specialty == "Dentistry"
        assert enriched[0].data_source == DataSource.RULE_BASED
        assert enriched[1] is leads[1]
