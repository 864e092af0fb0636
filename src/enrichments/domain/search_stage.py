import asyncio

from common.errors import ErrorKind
from common.logging import get_logger
from enrichments.domain import prompts, rules
from enrichments.domain.utils import leads_from_payload
from models.enrichment import ProviderResult
from models.lead import CompanyInfo, DataSource
from services.llm.client import LLMClient
from services.serper_search.client import WebSearchService
from services.serper_search.schemas import SearchHit

logger = get_logger(__name__)

MAX_RESULTS = 15
RESULTS_PER_QUERY = 8


def contact_queries(domain: str) -> list[str]:
    base = domain.split(".")[0]
    return [
        f'"{domain}" CEO founder executives email contact',
        f'"{domain}" management team contact information',
        f'"{domain}" leadership email directory',
        f'"{domain}" company officers contact details',
        f'site:linkedin.com "{domain}" CEO founder',
        f'"{domain}" "team" "contact" "@{base}"',
    ]


def rank_hits(hits: list[SearchHit], limit: int = MAX_RESULTS) -> list[SearchHit]:
    """Dedupe by URL, move hits mentioning '@' / email / contact to the front (stable), keep `limit`."""
    unique: dict[str, SearchHit] = {}
    for hit in hits:
        unique.setdefault(hit.link, hit)
    ranked = sorted(unique.values(), key=lambda h: 0 if h.mentions_contact else 1)
    return ranked[:limit]


class SearchStage:
    """Search-engine sub-stage of the hybrid enrichment: contact-oriented queries, then lead extraction."""

    name = "search"

    def __init__(self, search: WebSearchService, llm: LLMClient, delay: float = 0.5):
        self.search = search
        self.llm = llm
        self.delay = delay

    async def gather(self, domain: str) -> list[SearchHit]:
        hits: list[SearchHit] = []
        for i, query in enumerate(contact_queries(domain)):
            if len(hits) >= MAX_RESULTS:
                break
            if i and self.delay:
                await asyncio.sleep(self.delay)
            result = await self.search.search(query, max_results=RESULTS_PER_QUERY)
            if result.error:
                logger.warning(f"[Search] Query failed '{query}': {result.error}")
                continue
            hits.extend(result.hits)

        ranked = rank_hits(hits)
        logger.info(f"[Search] {len(ranked)} unique results for {domain}")
        return ranked

    async def run(self, domain: str) -> ProviderResult:
        if not self.search.available:
            return ProviderResult.failure(self.name, ErrorKind.PROVIDER_UNAVAILABLE, "Search API key not configured")

        hits = await self.gather(domain)
        if not hits:
            return ProviderResult.failure(self.name, ErrorKind.PROVIDER_EMPTY, "No search results found")

        if self.llm.available:
            try:
                payload = await self.llm.complete_json(
                    prompts.search_analysis_prompt(domain, hits),
                    prompts.SEARCH_ANALYSIS_SYSTEM,
                    operation="Search analysis",
                )
                leads, company_info = leads_from_payload(
                    payload,
                    domain,
                    prefix="search",
                    data_source=DataSource.AI_GENERATED,
                    description="Information found via web search",
                )
                logger.info(f"[Search] AI analysis found {len(leads)} leads for {domain}")
                return ProviderResult.success(self.name, leads, company_info, hits=len(hits), method="ai")
            except Exception as e:
                logger.warning(f"[Search] AI analysis failed, using basic parsing: {e}")

        leads = rules.parse_search_hits(domain, hits)
        logger.info(f"[Search] Basic parsing found {len(leads)} leads for {domain}")
        company_info = CompanyInfo.for_domain(domain, "Information found via web search (basic parsing)")
        return ProviderResult.success(self.name, leads, company_info, hits=len(hits), method="rule-based")
