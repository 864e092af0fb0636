from common.errors import ErrorKind
from common.logging import get_logger
from enrichments.domain import prompts
from enrichments.domain.utils import leads_from_payload
from models.enrichment import ProviderResult
from models.lead import DataSource
from services.llm.client import LLMClient

logger = get_logger(__name__)


class AIDirectEnricher:
    """Asks the model what it knows about a domain. Accepted only when it names at least one person."""

    name = "openai"

    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def run(self, domain: str) -> ProviderResult:
        if not self.llm.available:
            return ProviderResult.failure(self.name, ErrorKind.PROVIDER_UNAVAILABLE, "OpenAI API key not configured")

        logger.info(f"[AI direct] Asking model about {domain}")
        payload = await self.llm.complete_json(
            prompts.ai_direct_prompt(domain), prompts.AI_DIRECT_SYSTEM, operation="AI direct"
        )
        leads, company_info = leads_from_payload(
            payload,
            domain,
            prefix="ai",
            data_source=DataSource.AI_GENERATED,
            description="Company information from model knowledge",
        )
        logger.info(f"[AI direct] Model returned {len(leads)} leads for {domain}")
        return ProviderResult.success(self.name, leads, company_info)
