"""
Email enrichment: from a single address to one lead.

1. Derive - a candidate name from the local part, the company from the domain
2. Search - the literal address, then name + company, then the company itself
3. Synthesise - AI profile from the snippets; rule-based extraction as fallback

No search hits for the address or the name means no lead: the name guessed
from the address alone is never reported as a result.
"""

import asyncio
import re

from common.errors import ErrorKind, ProviderError
from common.logging import get_logger
from enrichments.domain.rules import PHONE_RE
from enrichments.email import prompts
from enrichments.email.name import email_domain, is_free_email_domain, name_from_email
from models.enrichment import Confidence, EmailEnrichmentMetadata, EmailEnrichmentResult
from models.lead import (
    CompanyInfo,
    CompanySize,
    DataSource,
    EnrichmentMethod,
    Lead,
    company_name_from_domain,
    new_lead_id,
    normalize_company_size,
    normalize_seniority,
    utc_now,
)
from models.titles import seniority_from_title, specialty_from_title
from services.llm.client import LLMClient
from services.serper_search.client import WebSearchService
from services.serper_search.schemas import SearchHit

logger = get_logger(__name__)

MAX_HITS_PER_GROUP = 10
HITS_PER_QUERY = 5
COMPANY_HITS = 3

TITLE_KEYWORDS = ["CEO", "CTO", "CFO", "President", "Director", "Manager", "Developer", "Engineer", "Founder"]

INDUSTRY_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("Healthcare", ("healthcare", "medical", "hospital", "clinic")),
    ("Technology", ("technology", "software", "tech", "development")),
    ("Finance", ("finance", "bank", "financial")),
    ("Education", ("education", "school", "university")),
    ("Retail", ("retail", "ecommerce", "store")),
    ("Consulting", ("consulting", "advisory")),
    ("Manufacturing", ("manufacturing", "factory")),
]

SIZE_KEYWORDS: list[tuple[CompanySize, tuple[str, ...]]] = [
    (CompanySize.SMALL, ("startup", "small")),
    (CompanySize.MEDIUM, ("medium", "mid-size")),
    (CompanySize.LARGE, ("large", "enterprise", "corporation")),
]


def dedupe_hits(hits: list[SearchHit], limit: int = MAX_HITS_PER_GROUP) -> list[SearchHit]:
    unique: dict[str, SearchHit] = {}
    for hit in hits:
        unique.setdefault(hit.link, hit)
    return list(unique.values())[:limit]


def company_info_from_hits(domain: str, hits: list[SearchHit]) -> CompanyInfo:
    """Keyword guesses at industry and size; first snippet becomes the description."""
    info = CompanyInfo.for_domain(domain, "Company information")
    if not hits:
        return info

    text = " ".join(f"{h.title} {h.snippet}" for h in hits).lower()
    industry = next((name for name, words in INDUSTRY_KEYWORDS if any(w in text for w in words)), None)
    size = next((size for size, words in SIZE_KEYWORDS if any(w in text for w in words)), None)
    snippet = hits[0].snippet
    return info.model_copy(
        update={
            "industry": industry or info.industry,
            "size": size.value if size else info.size,
            "description": f"{snippet[:150]}..." if snippet else info.description,
        }
    )


class EmailEnricher:
    def __init__(self, search: WebSearchService, llm: LLMClient, delay: float = 0.5):
        self.search = search
        self.llm = llm
        self.delay = delay

    async def _run_queries(self, label: str, queries: list[str], max_results: int = HITS_PER_QUERY) -> list[SearchHit]:
        hits: list[SearchHit] = []
        for i, query in enumerate(queries):
            if i and self.delay:
                await asyncio.sleep(self.delay)
            result = await self.search.search(query, max_results=max_results)
            if result.error:
                logger.warning(f"[Email] {label} query failed '{query}': {result.error}")
                continue
            hits.extend(result.hits)
        return hits

    async def search_by_email(self, email: str) -> list[SearchHit]:
        hits = await self._run_queries("Email", [f'"{email}"', f'"{email}" linkedin', f'"{email}" profile'])
        return dedupe_hits(hits)

    async def search_by_name(self, name: str, domain: str) -> list[SearchHit]:
        if not name:
            return []
        company = domain.split(".")[0]
        queries = [f'"{name}" "{company}"', f'"{name}" site:linkedin.com', f'"{name}" "{domain}"']
        return dedupe_hits(await self._run_queries("Name", queries))

    async def company_info(self, domain: str) -> tuple[CompanyInfo, list[SearchHit]]:
        if is_free_email_domain(domain):
            return CompanyInfo(description="Personal email provider"), []
        company = company_name_from_domain(domain)
        hits = await self._run_queries("Company", [f'"{company}" company about industry sector'], COMPANY_HITS)
        hits = hits[:COMPANY_HITS]
        return company_info_from_hits(domain, hits), hits

    async def enrich(self, email: str) -> EmailEnrichmentResult:
        domain = email_domain(email)
        derived_name = name_from_email(email)
        logger.info(f"[Email] Starting for {email} (domain: {domain}, name: {derived_name or '-'})")

        metadata = EmailEnrichmentMetadata(email=email, domain=domain, derived_name=derived_name)
        if not self.search.available:
            return self._failure(
                email, ErrorKind.PROVIDER_UNAVAILABLE, "Search API key not configured", metadata=metadata
            )

        email_hits = await self.search_by_email(email)
        name_hits = await self.search_by_name(derived_name, domain)
        company_info, company_hits = await self.company_info(domain)
        metadata = metadata.model_copy(
            update={
                "email_results": len(email_hits),
                "name_results": len(name_hits),
                "company_results": len(company_hits),
            }
        )

        if not email_hits and not name_hits:
            logger.info(f"[Email] No search signal for {email}")
            return self._failure(
                email,
                ErrorKind.ALL_STAGES_EXHAUSTED,
                f"No enrichment data available for email: {email}",
                company_info,
                metadata,
            )

        if self.llm.available:
            try:
                return await self._synthesise(email, derived_name, email_hits, name_hits, company_info, metadata)
            except Exception as e:
                logger.warning(f"[Email] AI synthesis failed, using basic analysis: {e}")

        return self._basic_analysis(email, derived_name, email_hits + name_hits, company_info, metadata)

    async def _synthesise(
        self,
        email: str,
        derived_name: str,
        email_hits: list[SearchHit],
        name_hits: list[SearchHit],
        company_info: CompanyInfo,
        metadata: EmailEnrichmentMetadata,
    ) -> EmailEnrichmentResult:
        payload = await self.llm.complete_json(
            prompts.email_synthesis_prompt(email, derived_name, email_hits, name_hits, company_info),
            prompts.EMAIL_SYNTHESIS_SYSTEM,
            max_tokens=1500,
            operation="Email synthesis",
        )
        if not isinstance(payload, dict):
            raise ProviderError(ErrorKind.PARSE, "Email synthesis did not return an object", provider="openai")

        name = str(payload.get("name") or "").strip() or derived_name
        if not name:
            raise ProviderError(ErrorKind.PROVIDER_EMPTY, "Email synthesis found no name", provider="openai")

        title = str(payload.get("title") or "").strip()
        lead = Lead(
            id=new_lead_id("email"),
            name=name,
            company=payload.get("company") or company_info.name,
            title=title,
            phone=payload.get("phone"),
            email=email,
            specialty=payload.get("specialty") or "General",
            seniority=normalize_seniority(payload.get("seniority")) or "Professional",
            data_source=DataSource.AI_GENERATED,
            enrichment_method=EnrichmentMethod.EMAIL,
            processed_at=utc_now(),
        )

        industry = payload.get("companyIndustry")
        size = normalize_company_size(payload.get("companySize"))
        company_info = company_info.model_copy(
            update={
                "industry": industry if industry and industry != "Unknown" else company_info.industry,
                "size": size if size != CompanySize.UNKNOWN.value else company_info.size,
            }
        )

        try:
            confidence = Confidence(str(payload.get("confidence", "medium")).lower())
        except ValueError:
            confidence = Confidence.LOW

        raw_sources = payload.get("sources")
        sources = [str(s) for s in raw_sources if s] if isinstance(raw_sources, list) else []
        logger.info(f"[Email] AI synthesis completed for {email} ({confidence.value})")
        return EmailEnrichmentResult(
            success=True,
            email=email,
            lead=lead,
            company_info=company_info,
            confidence=confidence,
            sources=sources or [h.link for h in (email_hits + name_hits)[:5]],
            metadata=metadata.model_copy(update={"method": "ai"}),
        )

    def _basic_analysis(
        self,
        email: str,
        derived_name: str,
        hits: list[SearchHit],
        company_info: CompanyInfo,
        metadata: EmailEnrichmentMetadata,
    ) -> EmailEnrichmentResult:
        if not derived_name:
            return self._failure(
                email,
                ErrorKind.ALL_STAGES_EXHAUSTED,
                f"Could not determine a name for email: {email}",
                company_info,
                metadata.model_copy(update={"method": "rule-based"}),
            )

        title = ""
        for hit in hits:
            text = f"{hit.title} {hit.snippet}".lower()
            title = next((k for k in TITLE_KEYWORDS if re.search(rf"\b{k.lower()}\b", text)), "")
            if title:
                break

        phone = ""
        for hit in hits:
            match = PHONE_RE.search(f"{hit.title} {hit.snippet}")
            if match:
                phone = match.group(0).strip()
                break

        lead = Lead(
            id=new_lead_id("email"),
            name=derived_name,
            company=company_info.name,
            title=title or "Professional",
            phone=phone,
            email=email,
            specialty=specialty_from_title(title),
            seniority=seniority_from_title(title) if title else "Professional",
            data_source=DataSource.RULE_BASED,
            enrichment_method=EnrichmentMethod.EMAIL,
            processed_at=utc_now(),
        )
        logger.info(f"[Email] Basic analysis completed for {email}")
        return EmailEnrichmentResult(
            success=True,
            email=email,
            lead=lead,
            company_info=company_info,
            confidence=Confidence.LOW,
            sources=["email-parsing", "domain-extraction", *[h.link for h in hits[:3]]],
            metadata=metadata.model_copy(update={"method": "rule-based"}),
        )

    @staticmethod
    def _failure(
        email: str,
        kind: ErrorKind,
        message: str,
        company_info: CompanyInfo | None = None,
        metadata: EmailEnrichmentMetadata | None = None,
    ) -> EmailEnrichmentResult:
        return EmailEnrichmentResult(
            success=False,
            email=email,
            lead=None,
            company_info=company_info,
            confidence=Confidence.LOW,
            error=message,
            error_kind=kind,
            metadata=metadata or EmailEnrichmentMetadata(email=email),
        )
