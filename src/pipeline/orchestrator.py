"""
Enrichment orchestrator: runs the domain cascade, the email pipeline and the
CSV batch paths, and publishes progress events to an optional sink.

Domain cascade (strictly sequential, first stage with >=1 lead wins):
  hybrid (search -> scrape) -> openai (direct knowledge) -> external (Hunter, Apollo, Clearbit)
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

from common.config import Config
from common.errors import ErrorKind, ProviderError
from common.logging import get_logger
from enrichments.classification import LeadClassifier
from enrichments.dedup.cleaning import clean_lead
from enrichments.dedup.consolidation import LeadConsolidator
from enrichments.dedup.similarity import find_duplicate_groups
from enrichments.domain.ai_direct import AIDirectEnricher
from enrichments.domain.external import ExternalEnricher
from enrichments.domain.hybrid import HybridEnricher
from enrichments.domain.scrape_stage import ScrapeStage
from enrichments.domain.search_stage import SearchStage
from enrichments.email.enricher import EmailEnricher
from models.enrichment import (
    DeduplicationResult,
    DeduplicationStats,
    EmailEnrichmentMetadata,
    EmailEnrichmentResult,
    EnrichmentMetadata,
    EnrichmentResult,
    ProviderResult,
)
from models.lead import DataSource, EnrichmentMethod, Lead, is_valid_domain, is_valid_email, normalize_domain
from pipeline.cache import ResultCache
from pipeline.events import EventSink, EventType
from services.contact_db.apollo import ApolloClient
from services.contact_db.clearbit import ClearbitClient
from services.contact_db.hunter import HunterClient
from services.llm.client import LLMClient
from services.serper_search.client import WebSearchService
from services.web_scraper.client import WebScraperClient

logger = get_logger(__name__)

StageRunner = Callable[[str], Awaitable[ProviderResult]]

STAGE_ORDER = ("hybrid", "openai", "external")


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class EnrichmentOrchestrator:
    """Runs enrichment stages with per-stage budgets and optional event publishing."""

    def __init__(
        self,
        settings: Config,
        hybrid: HybridEnricher,
        ai_direct: AIDirectEnricher,
        external: ExternalEnricher,
        email_enricher: EmailEnricher,
        consolidator: LeadConsolidator,
        classifier: LeadClassifier,
        cache: ResultCache | None = None,
        events: EventSink | None = None,
    ):
        self.settings = settings
        self.hybrid = hybrid
        self.ai_direct = ai_direct
        self.external = external
        self.email_enricher = email_enricher
        self.consolidator = consolidator
        self.classifier = classifier
        self.cache = cache or ResultCache.from_config(settings)
        self.events = events

        self.stages: dict[str, tuple[StageRunner, float]] = {
            "hybrid": (self.hybrid.run, settings.hybrid_stage_timeout),
            "openai": (self.ai_direct.run, settings.ai_stage_timeout),
            "external": (self.external.run, settings.external_stage_timeout),
        }

    def _publish(self, event_type: EventType, event_data: dict):
        """Publish event if a sink is configured."""
        if self.events:
            self.events.publish(event_type=event_type, event_data=event_data)

    async def _run_stage(self, name: str, domain: str) -> ProviderResult:
        """Run one cascade stage under its budget; every failure comes back as a ProviderResult."""
        runner, timeout = self.stages[name]
        self._publish(EventType.STAGE_STARTED, {"stage": name, "domain": domain})
        logger.info(f"[{name.capitalize()}] Starting for {domain} (budget {timeout}s)")

        try:
            result = await asyncio.wait_for(runner(domain), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[{name.capitalize()}] Timed out after {timeout}s for {domain}")
            result = ProviderResult.failure(name, ErrorKind.PROVIDER_TIMEOUT, f"{name} stage timed out after {timeout}s")
        except ProviderError as e:
            logger.warning(f"[{name.capitalize()}] Failed for {domain}: {e}")
            result = ProviderResult.failure(name, e.kind, e.message)
        except Exception as e:
            logger.exception(f"[{name.capitalize()}] Unexpected error for {domain}: {e}")
            result = ProviderResult.failure(name, ErrorKind.PROVIDER_ERROR, str(e) or type(e).__name__)

        if result.ok:
            logger.info(f"[{name.capitalize()}] Found {len(result.leads)} leads for {domain}")
            self._publish(EventType.STAGE_COMPLETED, {"stage": name, "domain": domain, "leads": len(result.leads)})
        else:
            self._publish(
                EventType.STAGE_FAILED,
                {"stage": name, "domain": domain, "errorKind": result.error_kind, "error": result.error},
            )
        return result

    def _validation_failure(self, domain: str, start: float) -> EnrichmentResult:
        return EnrichmentResult(
            success=False,
            error=f"Invalid domain format: {domain}",
            error_kind=ErrorKind.VALIDATION,
            metadata=EnrichmentMetadata(domain=domain, processing_time=_elapsed_ms(start)),
        )

    def _from_cache(self, endpoint: str, domain: str) -> EnrichmentResult | None:
        cached: EnrichmentResult | None = self.cache.get(endpoint, domain)
        if cached is None:
            return None
        logger.info(f"[Cache] Returning cached {endpoint} result for {domain}")
        return cached.model_copy(update={"metadata": cached.metadata.model_copy(update={"cache_hit": True})})

    async def enrich_domain(self, domain: str) -> EnrichmentResult:
        """Run the full hybrid -> openai -> external cascade for a domain."""
        start = time.perf_counter()
        domain = normalize_domain(domain or "")
        if not is_valid_domain(domain):
            return self._validation_failure(domain, start)

        cached = self._from_cache("domain", domain)
        if cached:
            return cached

        attempted: list[str] = []
        stage_errors: dict[str, str] = {}
        try:
            result = await asyncio.wait_for(
                self._cascade(domain, attempted, stage_errors, start), timeout=self.settings.enrichment_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"[Enrichment] Overall deadline of {self.settings.enrichment_timeout}s exceeded for {domain}")
            result = EnrichmentResult(
                success=False,
                error=f"Enrichment timed out after {self.settings.enrichment_timeout}s for domain: {domain}",
                error_kind=ErrorKind.TIMEOUT,
                metadata=EnrichmentMetadata(
                    domain=domain,
                    attempted_stages=attempted,
                    stage_errors=stage_errors,
                    processing_time=_elapsed_ms(start),
                ),
            )

        if result.success and result.leads:
            self.cache.set("domain", domain, result)

        self._publish(
            EventType.ENRICHMENT_COMPLETED,
            {"domain": domain, "success": result.success, "source": result.metadata.source, "leads": len(result.leads)},
        )
        return result

    async def _cascade(
        self, domain: str, attempted: list[str], stage_errors: dict[str, str], start: float
    ) -> EnrichmentResult:
        company_info = None
        for name in STAGE_ORDER:
            attempted.append(name)
            stage = await self._run_stage(name, domain)
            if stage.ok:
                logger.info(f"[Enrichment] {name} succeeded for {domain} with {len(stage.leads)} leads")
                return EnrichmentResult(
                    success=True,
                    leads=stage.leads,
                    company_info=stage.company_info or company_info,
                    metadata=EnrichmentMetadata(
                        domain=domain,
                        source=stage.provider,
                        attempted_stages=list(attempted),
                        stage_errors=dict(stage_errors),
                        processing_time=_elapsed_ms(start),
                        total_leads=len(stage.leads),
                        extra=stage.details,
                    ),
                )
            stage_errors[name] = f"{stage.error_kind.value if stage.error_kind else 'empty'}: {stage.error}"
            company_info = company_info or stage.company_info

        logger.info(f"[Enrichment] All stages exhausted for {domain}")
        return EnrichmentResult(
            success=False,
            company_info=company_info,
            error=f"No enrichment data available for domain: {domain}",
            error_kind=ErrorKind.ALL_STAGES_EXHAUSTED,
            metadata=EnrichmentMetadata(
                domain=domain,
                attempted_stages=list(attempted),
                stage_errors=dict(stage_errors),
                processing_time=_elapsed_ms(start),
            ),
        )

    async def run_stage(self, name: str, domain: str) -> EnrichmentResult:
        """Run a single named stage outside the cascade (individual endpoints)."""
        if name not in self.stages:
            raise ValueError(f"Unknown enrichment stage: {name}")

        start = time.perf_counter()
        domain = normalize_domain(domain or "")
        if not is_valid_domain(domain):
            return self._validation_failure(domain, start)

        cached = self._from_cache(name, domain)
        if cached:
            return cached

        stage = await self._run_stage(name, domain)
        metadata = EnrichmentMetadata(
            domain=domain,
            source=stage.provider,
            attempted_stages=[name],
            processing_time=_elapsed_ms(start),
            total_leads=len(stage.leads),
            extra=stage.details,
        )
        if not stage.ok:
            return EnrichmentResult(
                success=False,
                company_info=stage.company_info,
                error=stage.error or f"No leads found using {name} for domain: {domain}",
                error_kind=stage.error_kind or ErrorKind.PROVIDER_EMPTY,
                metadata=metadata.model_copy(update={"stage_errors": {name: stage.error or ""}}),
            )

        result = EnrichmentResult(success=True, leads=stage.leads, company_info=stage.company_info, metadata=metadata)
        self.cache.set(name, domain, result)
        return result

    async def enrich_by_email(self, email: str) -> EmailEnrichmentResult:
        start = time.perf_counter()
        email = (email or "").strip().lower()
        if not is_valid_email(email):
            return EmailEnrichmentResult(
                success=False,
                email=email,
                error=f"Invalid email format: {email}",
                error_kind=ErrorKind.VALIDATION,
                metadata=EmailEnrichmentMetadata(email=email),
            )

        cached: EmailEnrichmentResult | None = self.cache.get("email", email)
        if cached:
            logger.info(f"[Cache] Returning cached email result for {email}")
            return cached.model_copy(update={"metadata": cached.metadata.model_copy(update={"cache_hit": True})})

        timeout = self.settings.email_enrichment_timeout
        try:
            result = await asyncio.wait_for(self.email_enricher.enrich(email), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[Email] Deadline of {timeout}s exceeded for {email}")
            result = EmailEnrichmentResult(
                success=False,
                email=email,
                error=f"Email enrichment timed out after {timeout}s for: {email}",
                error_kind=ErrorKind.TIMEOUT,
                metadata=EmailEnrichmentMetadata(email=email),
            )

        result = result.model_copy(
            update={"metadata": result.metadata.model_copy(update={"processing_time": _elapsed_ms(start)})}
        )
        if result.success and result.lead:
            self.cache.set("email", email, result)

        self._publish(
            EventType.EMAIL_ENRICHMENT_COMPLETED,
            {"email": email, "success": result.success, "confidence": result.confidence.value},
        )
        return result

    async def deduplicate_leads(self, leads: list[Lead]) -> DeduplicationResult:
        """Group similar leads and merge each group into one consolidated lead, keeping first-seen order."""
        start = time.perf_counter()
        self._publish(EventType.DEDUP_STARTED, {"leads": len(leads)})

        groups = find_duplicate_groups(leads)
        output: list[Lead] = []
        consolidated_groups = 0
        for index, group in enumerate(groups):
            if len(group) == 1:
                output.append(
                    clean_lead(group[0]).model_copy(
                        update={
                            "data_source": group[0].data_source or DataSource.ORIGINAL,
                            "enrichment_method": EnrichmentMethod.CSV_DEDUPLICATED,
                            "duplicates_found": 0,
                        }
                    )
                )
                continue

            merged = await self.consolidator.consolidate(group)
            output.append(merged)
            consolidated_groups += 1
            self._publish(
                EventType.DEDUP_GROUP_CONSOLIDATED,
                {"group": index + 1, "totalGroups": len(groups), "size": len(group), "leadId": merged.id},
            )

        stats = DeduplicationStats(
            original_count=len(leads),
            final_count=len(output),
            duplicates_removed=len(leads) - len(output),
            groups_consolidated=consolidated_groups,
            processing_time=_elapsed_ms(start),
        )
        logger.info(
            f"[Dedup] {stats.original_count} leads -> {stats.final_count} "
            f"({stats.groups_consolidated} groups consolidated)"
        )
        self._publish(EventType.DEDUP_COMPLETED, stats.model_dump(by_alias=True))
        return DeduplicationResult(leads=output, metadata=stats)

    async def enrich_leads(self, leads: list[Lead]) -> list[Lead]:
        """Fill in missing specialty / seniority for a CSV batch."""
        enriched = []
        for index, lead in enumerate(leads):
            classified = await self.classifier.classify(lead)
            enriched.append(classified)
            self._publish(
                EventType.LEAD_CLASSIFIED,
                {"index": index + 1, "total": len(leads), "leadId": classified.id, "dataSource": classified.data_source},
            )
        return enriched

    def status(self) -> dict:
        search = self.hybrid.search_stage.search
        return {
            "strategy": "hybrid -> openai -> external",
            "providers": {
                "openai": self.ai_direct.llm.available,
                "serper": search.available,
                "scraper": True,
                **{p.name: p.available for p in self.external.providers},
            },
            "timeouts": {
                "overall": self.settings.enrichment_timeout,
                "hybrid": self.settings.hybrid_stage_timeout,
                "openai": self.settings.ai_stage_timeout,
                "external": self.settings.external_stage_timeout,
                "email": self.settings.email_enrichment_timeout,
            },
            "cache": {"ttl": self.cache.ttl, "maxSize": self.cache.max_size},
            "mockData": False,
        }


def build_orchestrator(settings: Config, events: EventSink | None = None) -> EnrichmentOrchestrator:
    """Wire every client from config."""
    llm = LLMClient(settings)
    search = WebSearchService(settings)
    scraper = WebScraperClient(settings)

    hybrid = HybridEnricher(
        SearchStage(search, llm, delay=settings.search_delay),
        ScrapeStage(scraper, llm),
    )
    external = ExternalEnricher(
        [HunterClient.from_config(settings), ApolloClient.from_config(settings), ClearbitClient.from_config(settings)]
    )
    return EnrichmentOrchestrator(
        settings=settings,
        hybrid=hybrid,
        ai_direct=AIDirectEnricher(llm),
        external=external,
        email_enricher=EmailEnricher(search, llm, delay=settings.search_delay),
        consolidator=LeadConsolidator(llm),
        classifier=LeadClassifier(llm),
        cache=ResultCache.from_config(settings),
        events=events,
    )
