from common.config import Config
from models.enrichment import ProviderResult
from models.lead import CompanyInfo, DataSource, Lead, company_size_from_employees, new_lead_id, utc_now
from models.titles import seniority_from_level, specialty_from_department
from services.contact_db.base import ContactDatabaseClient
from services.contact_db.schemas import HunterDomainSearch, HunterResponse


class HunterClient(ContactDatabaseClient):
    """Hunter.io domain search (api_key query parameter)."""

    name = "hunter"

    @classmethod
    def from_config(cls, settings: Config) -> "HunterClient":
        return cls(settings.hunter_base_url, settings.hunter_api_key.get_secret_value(), settings.provider_request_timeout)

    async def _lookup(self, domain: str) -> ProviderResult:
        async with self._client() as client:
            resp = await client.get("/domain-search", params={"domain": domain, "api_key": self.api_key, "limit": 10})
            resp.raise_for_status()
            envelope = HunterResponse.model_validate(resp.json())

        return self.normalize(domain, envelope.data or HunterDomainSearch())

    @classmethod
    def normalize(cls, domain: str, data: HunterDomainSearch) -> ProviderResult:
        company_info = CompanyInfo.from_provider(
            {
                "name": data.organization,
                "description": data.description or "Company found via Hunter.io",
                "industry": data.industry,
                "size": company_size_from_employees(data.employee_count),
                "location": ", ".join(filter(None, [data.city, data.country])),
            },
            domain,
        )

        leads = [
            Lead(
                id=new_lead_id("hunter"),
                name=email.full_name or email.value,
                company=company_info.name,
                title=email.position,
                phone=email.phone_number,
                email=email.value,
                specialty=specialty_from_department(email.department),
                seniority=seniority_from_level(email.seniority),
                data_source=DataSource.EXTERNAL,
                processed_at=utc_now(),
            )
            for email in data.emails
            if email.value or email.full_name
        ]
        return ProviderResult.success(cls.name, leads, company_info)
