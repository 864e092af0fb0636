from common.errors import ErrorKind
from common.logging import get_logger
from models.enrichment import ProviderResult
from services.contact_db.base import ContactDatabaseClient

logger = get_logger(__name__)


class ExternalEnricher:
    """Tries each contact database in priority order; the first one with person-level leads wins."""

    name = "external"

    def __init__(self, providers: list[ContactDatabaseClient]):
        self.providers = providers

    @property
    def available(self) -> bool:
        return any(p.available for p in self.providers)

    async def run(self, domain: str) -> ProviderResult:
        configured = [p for p in self.providers if p.available]
        if not configured:
            return ProviderResult.failure(self.name, ErrorKind.PROVIDER_UNAVAILABLE, "No external APIs configured")

        company_info = None
        errors = []
        for provider in configured:
            result = await provider.lookup(domain)
            if result.ok:
                return ProviderResult.success(
                    f"{self.name}-{provider.name}",
                    result.leads,
                    result.company_info or company_info,
                    matched_provider=provider.name,
                )
            # Company-only answers still improve the final company profile
            company_info = company_info or result.company_info
            errors.append(f"{provider.name}: {result.error}")

        return ProviderResult.failure(self.name, ErrorKind.PROVIDER_EMPTY, "; ".join(errors), company_info)
