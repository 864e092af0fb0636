"""
Hybrid enrichment: search engine first, company website second.

1. Search - contact-oriented web searches, leads extracted from the snippets
2. Scrape - only when search found nobody; home page fetched and parsed
3. Consolidate - search leads go through one AI consolidation pass (manual
   combine when AI is unavailable, fails, or drops every lead)
"""

from common.errors import ErrorKind, ProviderError
from common.logging import get_logger
from enrichments.domain import prompts, rules
from enrichments.domain.scrape_stage import ScrapeStage
from enrichments.domain.search_stage import SearchStage
from enrichments.domain.utils import leads_from_payload
from models.enrichment import ProviderResult
from models.lead import CompanyInfo, DataSource, Lead

logger = get_logger(__name__)


class HybridEnricher:
    name = "hybrid"

    def __init__(self, search_stage: SearchStage, scrape_stage: ScrapeStage):
        self.search_stage = search_stage
        self.scrape_stage = scrape_stage

    @property
    def llm(self):
        return self.search_stage.llm

    async def run(self, domain: str) -> ProviderResult:
        logger.info(f"[Hybrid] Starting for: {domain}")

        search = await self._best_effort(self.search_stage.name, self.search_stage.run(domain))
        if search.ok:
            logger.info(f"[Hybrid] Search found {len(search.leads)} leads, skipping website scrape")
            return await self._consolidate(domain, {"search": search})

        logger.info(f"[Hybrid] Search found nothing ({search.error}), trying website scrape")
        scrape = await self._best_effort(self.scrape_stage.name, self.scrape_stage.run(domain))
        if scrape.ok:
            leads = rules.combine_leads(scrape.leads)
            return ProviderResult.success(
                self.name,
                leads,
                scrape.company_info or CompanyInfo.for_domain(domain),
                sources=["scrape"],
                scrape_skipped=False,
                original_scrape_leads=len(scrape.leads),
            )

        return ProviderResult.failure(
            self.name,
            ErrorKind.PROVIDER_EMPTY,
            f"No enrichment data found for domain: {domain} (search: {search.error}; scrape: {scrape.error})",
        )

    async def _best_effort(self, label: str, coro) -> ProviderResult:
        try:
            return await coro
        except ProviderError as e:
            logger.warning(f"[Hybrid] {label} failed: {e}")
            return ProviderResult.failure(label, e.kind, e.message)

    async def _consolidate(self, domain: str, results: dict[str, ProviderResult]) -> ProviderResult:
        if self.llm.available:
            try:
                return await self._consolidate_with_ai(domain, results)
            except Exception as e:
                logger.warning(f"[Hybrid] AI consolidation failed, combining manually: {e}")
        return self._combine(domain, results)

    async def _consolidate_with_ai(self, domain: str, results: dict[str, ProviderResult]) -> ProviderResult:
        sources = {
            label: (r.company_info.model_dump() if r.company_info else None, r.leads) for label, r in results.items()
        }
        payload = await self.llm.complete_json(
            prompts.consolidation_prompt(domain, sources), prompts.CONSOLIDATION_SYSTEM, operation="Consolidation"
        )
        leads, company_info = leads_from_payload(
            payload,
            domain,
            prefix="hybrid",
            data_source=DataSource.HYBRID,
            description="Information consolidated from multiple sources",
        )
        if not leads:
            raise ProviderError(ErrorKind.PROVIDER_EMPTY, "Consolidation dropped every lead", provider="openai")

        logger.info(f"[Hybrid] AI consolidation kept {len(leads)} leads for {domain}")
        return ProviderResult.success(
            self.name,
            leads,
            company_info,
            sources=[*results, "openai"],
            scrape_skipped="scrape" not in results,
            consolidated_leads=len(leads),
        )

    def _combine(self, domain: str, results: dict[str, ProviderResult]) -> ProviderResult:
        lead_lists: list[list[Lead]] = [r.leads for r in results.values()]
        leads = rules.combine_leads(*lead_lists)

        # Website data describes the company better than search snippets
        company_info = next(
            (results[k].company_info for k in ("scrape", "search") if k in results and results[k].company_info),
            CompanyInfo.for_domain(domain, "Information from multiple sources"),
        )
        logger.info(f"[Hybrid] Manual combination found {len(leads)} unique leads for {domain}")
        return ProviderResult.success(
            self.name,
            leads,
            company_info,
            sources=list(results),
            scrape_skipped="scrape" not in results,
            consolidated_leads=len(leads),
        )
