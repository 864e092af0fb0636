"""Enrichment result models returned by the orchestrator and provider adapters."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field, model_validator

from common.errors import ErrorKind
from models.lead import CamelModel, CompanyInfo, Lead, utc_now


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ProviderResult(CamelModel):
    """
    Outcome of a single provider or stage attempt.

    Either carries leads (possibly with company info) or an error kind + message.
    The orchestrator switches on `ok` / `error_kind` to drive the cascade.
    """

    provider: str
    leads: list[Lead] = Field(default_factory=list)
    company_info: CompanyInfo | None = None
    error_kind: ErrorKind | None = None
    error: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error_kind is None and len(self.leads) > 0

    @classmethod
    def success(
        cls, provider: str, leads: list[Lead], company_info: CompanyInfo | None = None, **details
    ) -> "ProviderResult":
        if not leads:
            return cls.failure(provider, ErrorKind.PROVIDER_EMPTY, f"{provider} returned no leads", company_info)
        return cls(provider=provider, leads=leads, company_info=company_info, details=details)

    @classmethod
    def failure(
        cls, provider: str, kind: ErrorKind, message: str, company_info: CompanyInfo | None = None
    ) -> "ProviderResult":
        return cls(provider=provider, error_kind=kind, error=message, company_info=company_info)


class EnrichmentMetadata(CamelModel):
    domain: str | None = None
    source: str | None = None
    attempted_stages: list[str] = Field(default_factory=list)
    stage_errors: dict[str, str] = Field(default_factory=dict)
    processing_time: int = 0  # ms
    cache_hit: bool = False
    timestamp: datetime = Field(default_factory=utc_now)
    total_leads: int = 0
    extra: dict[str, Any] = Field(default_factory=dict)


class EnrichmentResult(CamelModel):
    """Domain enrichment result. `error` is set whenever success is false or leads is empty."""

    success: bool
    leads: list[Lead] = Field(default_factory=list)
    company_info: CompanyInfo | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    metadata: EnrichmentMetadata = Field(default_factory=EnrichmentMetadata)

    @model_validator(mode="after")
    def _error_when_empty(self):
        if (not self.success or not self.leads) and not self.error:
            self.error = "No enrichment data available"
        return self

    @property
    def message(self) -> str:
        if self.success:
            return f"Found {len(self.leads)} leads"
        return self.error or "Enrichment failed"


class EmailEnrichmentMetadata(CamelModel):
    email: str | None = None
    domain: str | None = None
    derived_name: str = ""
    email_results: int = 0
    name_results: int = 0
    company_results: int = 0
    method: str | None = None
    processing_time: int = 0
    cache_hit: bool = False
    timestamp: datetime = Field(default_factory=utc_now)


class EmailEnrichmentResult(CamelModel):
    success: bool
    email: str
    lead: Lead | None = None
    company_info: CompanyInfo | None = None
    confidence: Confidence = Confidence.LOW
    sources: list[str] = Field(default_factory=list)
    error: str | None = None
    error_kind: ErrorKind | None = None
    metadata: EmailEnrichmentMetadata = Field(default_factory=EmailEnrichmentMetadata)

    @property
    def message(self) -> str:
        if self.success and self.lead:
            return f"Found {self.lead.name}"
        return self.error or "No data found for email"


class DeduplicationStats(CamelModel):
    original_count: int = 0
    final_count: int = 0
    duplicates_removed: int = 0
    groups_consolidated: int = 0
    processing_time: int = 0


class DeduplicationResult(CamelModel):
    success: bool = True
    leads: list[Lead] = Field(default_factory=list)
    metadata: DeduplicationStats = Field(default_factory=DeduplicationStats)
