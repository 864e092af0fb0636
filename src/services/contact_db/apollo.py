from common.config import Config
from common.errors import ErrorKind
from models.enrichment import ProviderResult
from models.lead import CompanyInfo, DataSource, Lead, company_size_from_employees, new_lead_id, utc_now
from models.titles import seniority_from_title, specialty_from_industry
from services.contact_db.base import ContactDatabaseClient
from services.contact_db.schemas import ApolloOrganization, ApolloOrganizationSearch, ApolloPeopleSearch, ApolloPerson

PERSON_TITLES = ["CEO", "CTO", "CFO", "President", "Founder", "Director", "Manager"]


class ApolloClient(ContactDatabaseClient):
    """Apollo.io organisation + people search (X-Api-Key header)."""

    name = "apollo"

    @classmethod
    def from_config(cls, settings: Config) -> "ApolloClient":
        return cls(settings.apollo_base_url, settings.apollo_api_key.get_secret_value(), settings.provider_request_timeout)

    async def _lookup(self, domain: str) -> ProviderResult:
        async with self._client({"X-Api-Key": self.api_key, "Cache-Control": "no-cache"}) as client:
            org_resp = await client.post(
                "/organizations/search", json={"q_organization_domains": domain, "page": 1, "per_page": 1}
            )
            org_resp.raise_for_status()
            organizations = ApolloOrganizationSearch.model_validate(org_resp.json()).organizations or []
            if not organizations:
                return ProviderResult.failure(self.name, ErrorKind.PROVIDER_EMPTY, "No organization found in Apollo.io")

            people_resp = await client.post(
                "/mixed_people/search",
                json={
                    "q_organization_domains": domain,
                    "page": 1,
                    "per_page": 10,
                    "person_titles": PERSON_TITLES,
                },
            )
            people_resp.raise_for_status()
            people = ApolloPeopleSearch.model_validate(people_resp.json()).people or []

        return self.normalize(domain, organizations[0], people)

    @classmethod
    def normalize(cls, domain: str, org: ApolloOrganization, people: list[ApolloPerson]) -> ProviderResult:
        company_info = CompanyInfo.from_provider(
            {
                "name": org.name,
                "description": org.short_description or "Company found via Apollo.io",
                "industry": org.industry,
                "size": company_size_from_employees(org.estimated_num_employees),
                "location": org.location,
            },
            domain,
        )
        specialty = specialty_from_industry(org.industry)

        leads = [
            Lead(
                id=new_lead_id("apollo"),
                name=person.full_name or person.email,
                company=company_info.name,
                title=person.title,
                phone=person.sanitized_phone,
                email=person.email,
                specialty=specialty,
                seniority=seniority_from_title(person.title),
                data_source=DataSource.EXTERNAL,
                processed_at=utc_now(),
            )
            for person in people
            if person.full_name or person.email
        ]
        return ProviderResult.success(cls.name, leads, company_info)
