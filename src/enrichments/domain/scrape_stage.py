from common.errors import ErrorKind
from common.logging import get_logger
from enrichments.domain import prompts, rules
from enrichments.domain.utils import leads_from_payload
from models.enrichment import ProviderResult
from models.lead import CompanyInfo, DataSource
from services.llm.client import LLMClient
from services.web_scraper.client import WebScraperClient

logger = get_logger(__name__)

MIN_TEXT_LENGTH = 100
PROMPT_CHARS = 15_000


class ScrapeStage:
    """Website sub-stage of the hybrid enrichment: fetch the home page, then extract leads from it."""

    name = "scrape"

    def __init__(self, scraper: WebScraperClient, llm: LLMClient):
        self.scraper = scraper
        self.llm = llm

    async def run(self, domain: str) -> ProviderResult:
        page = await self.scraper.scrape_domain(domain)
        page_text = page.to_prompt_text(PROMPT_CHARS) if page.ok else ""

        if len(page_text) < MIN_TEXT_LENGTH:
            logger.info(f"[Scrape] No meaningful content from {domain}: {page.error or 'page too short'}")
            return ProviderResult.failure(
                self.name, ErrorKind.PROVIDER_EMPTY, f"Could not extract website content: {page.error or 'empty page'}"
            )

        if self.llm.available:
            try:
                payload = await self.llm.complete_json(
                    prompts.scrape_analysis_prompt(domain, page_text),
                    prompts.SCRAPE_ANALYSIS_SYSTEM,
                    operation="Scrape analysis",
                )
                leads, company_info = leads_from_payload(
                    payload,
                    domain,
                    prefix="scraped",
                    data_source=DataSource.SCRAPED,
                    description=page.meta_description or "Information extracted from website",
                )
                logger.info(f"[Scrape] AI analysis found {len(leads)} leads for {domain}")
                return ProviderResult.success(self.name, leads, company_info, method="ai", page=page.final_url)
            except Exception as e:
                logger.warning(f"[Scrape] AI analysis failed, using basic parsing: {e}")

        # Regex pass runs on the raw HTML too, mailto: links and footers included
        leads = rules.parse_page_text(domain, f"{page_text}\n{page.raw_html or ''}")
        logger.info(f"[Scrape] Basic parsing found {len(leads)} leads for {domain}")
        company_info = CompanyInfo.for_domain(
            domain, page.meta_description or "Information extracted from website (basic parsing)"
        )
        return ProviderResult.success(self.name, leads, company_info, method="rule-based", page=page.final_url)
