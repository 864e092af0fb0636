from common.config import Config
from common.errors import ErrorKind
from models.enrichment import ProviderResult
from models.lead import CompanyInfo, company_size_from_employees
from services.contact_db.base import ContactDatabaseClient
from services.contact_db.schemas import ClearbitCompany


class ClearbitClient(ContactDatabaseClient):
    """
    Clearbit company lookup (bearer token).

    Clearbit only knows the organisation, never individual people, so a hit is
    reported as PROVIDER_EMPTY carrying company info.
    """

    name = "clearbit"

    @classmethod
    def from_config(cls, settings: Config) -> "ClearbitClient":
        return cls(
            settings.clearbit_base_url, settings.clearbit_api_key.get_secret_value(), settings.provider_request_timeout
        )

    async def _lookup(self, domain: str) -> ProviderResult:
        async with self._client({"Authorization": f"Bearer {self.api_key}"}) as client:
            resp = await client.get("/companies/find", params={"domain": domain})
            resp.raise_for_status()
            company = ClearbitCompany.model_validate(resp.json() or {})

        return self.normalize(domain, company)

    @classmethod
    def normalize(cls, domain: str, company: ClearbitCompany) -> ProviderResult:
        company_info = CompanyInfo.from_provider(
            {
                "name": company.name,
                "description": company.description or "Company found via Clearbit",
                "industry": company.category.industry,
                "size": company_size_from_employees(company.metrics.employees),
                "location": company.location,
            },
            domain,
        )
        return ProviderResult.failure(
            cls.name, ErrorKind.PROVIDER_EMPTY, "No individual contact data available from Clearbit", company_info
        )
