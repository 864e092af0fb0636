"""
Lead and company records shared by every enrichment stage.

All string fields default to "" (never None) so that a list of leads keeps a
stable shape for tabular display and export. JSON uses camelCase aliases.
"""

import re
import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

UNKNOWN = "Unknown"

DOMAIN_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9-]{0,61}[a-zA-Z0-9]?\.[a-zA-Z]{2,}(\.[a-zA-Z]{2,})?$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class DataSource(str, Enum):
    """Where a lead's values came from."""

    AI_GENERATED = "ai-generated"
    MOCK = "mock"
    RULE_BASED = "rule-based"
    ORIGINAL = "original"
    SCRAPED = "scraped"
    CONSOLIDATED = "consolidated"
    HYBRID = "hybrid"  # search + scrape context merged by the hybrid stage
    EXTERNAL = "external"  # third-party contact database


class EnrichmentMethod(str, Enum):
    DOMAIN = "domain"
    EMAIL = "email"
    CSV_BATCH = "csv-batch"
    CSV_DEDUPLICATED = "csv-deduplicated"
    MANUAL = "manual"


class Seniority(str, Enum):
    """Conventional seniority labels. Lead.seniority is an open string field."""

    OWNER = "Owner"
    C_LEVEL = "C-Level"
    DIRECTOR = "Director"
    MANAGER = "Manager"
    SENIOR = "Senior"
    ASSOCIATE = "Associate"
    PROFESSIONAL = "Professional"
    UNKNOWN = "Unknown"


SENIORITY_ALIASES: dict[str, Seniority] = {
    "owner": Seniority.OWNER,
    "proprietor": Seniority.OWNER,
    "c-level": Seniority.C_LEVEL,
    "c level": Seniority.C_LEVEL,
    "clevel": Seniority.C_LEVEL,
    "executive": Seniority.C_LEVEL,
    "vp": Seniority.C_LEVEL,
    "director": Seniority.DIRECTOR,
    "head": Seniority.DIRECTOR,
    "manager": Seniority.MANAGER,
    "senior": Seniority.SENIOR,
    "lead": Seniority.SENIOR,
    "associate": Seniority.ASSOCIATE,
    "junior": Seniority.ASSOCIATE,
    "entry": Seniority.ASSOCIATE,
    "professional": Seniority.PROFESSIONAL,
    "specialist": Seniority.PROFESSIONAL,
    "unknown": Seniority.UNKNOWN,
}


def normalize_seniority(value: str | None) -> str:
    """Map provider seniority spellings onto the conventional labels, keep anything else verbatim."""
    if not value:
        return ""
    cleaned = value.strip()
    mapped = SENIORITY_ALIASES.get(cleaned.lower())
    return mapped.value if mapped else cleaned


def new_lead_id(prefix: str = "lead") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_domain(domain: str) -> str:
    """Strip protocol, www. and any path from a user-supplied domain."""
    value = (domain or "").strip().lower()
    value = re.sub(r"^https?://", "", value)
    value = re.sub(r"^www\.", "", value)
    return value.split("/")[0]


def is_valid_domain(domain: str) -> bool:
    return bool(DOMAIN_PATTERN.match(domain or ""))


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def company_name_from_domain(domain: str) -> str:
    """'acme-widgets.com' -> 'Acme-widgets'"""
    first = (domain or "").split(".")[0]
    return first[:1].upper() + first[1:] if first else domain


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=False)


class CompanySize(str, Enum):
    SMALL = "Small"
    MEDIUM = "Medium"
    LARGE = "Large"
    UNKNOWN = "Unknown"


class CompanyInfo(CamelModel):
    """Organisation behind a domain. Undiscovered values are 'Unknown', never omitted."""

    name: str = UNKNOWN
    description: str = UNKNOWN
    industry: str = UNKNOWN
    size: str = CompanySize.UNKNOWN.value
    location: str = UNKNOWN

    @field_validator("name", "description", "industry", "size", "location", mode="before")
    @classmethod
    def _unknown_if_blank(cls, value):
        if value is None:
            return UNKNOWN
        if isinstance(value, Enum):
            value = value.value
        value = str(value).strip()
        return value if value and value.lower() not in {"null", "none", "n/a"} else UNKNOWN

    @classmethod
    def for_domain(cls, domain: str, description: str = UNKNOWN) -> "CompanyInfo":
        return cls(name=company_name_from_domain(domain), description=description)

    @classmethod
    def from_provider(cls, data: dict | None, domain: str, description: str = UNKNOWN) -> "CompanyInfo":
        """Normalise a loosely shaped companyInfo object from an AI or provider response."""
        if not isinstance(data, dict):
            return cls.for_domain(domain, description)
        return cls(
            name=data.get("name") or company_name_from_domain(domain),
            description=data.get("description") or description,
            industry=data.get("industry"),
            size=normalize_company_size(data.get("size")),
            location=data.get("location"),
        )


def company_size_from_employees(count: int | float | None) -> str:
    """Bucket an employee count into Small / Medium / Large."""
    if not count:
        return CompanySize.UNKNOWN.value
    if count < 50:
        return CompanySize.SMALL.value
    if count < 500:
        return CompanySize.MEDIUM.value
    return CompanySize.LARGE.value


def normalize_company_size(value) -> str:
    if value is None:
        return CompanySize.UNKNOWN.value
    if isinstance(value, (int, float)):
        return company_size_from_employees(value)
    text = str(value).strip().lower()
    if not text:
        return CompanySize.UNKNOWN.value
    if any(word in text for word in ("small", "startup", "1-50", "micro")):
        return CompanySize.SMALL.value
    if any(word in text for word in ("medium", "mid", "51-")):
        return CompanySize.MEDIUM.value
    if any(word in text for word in ("large", "enterprise", "200+", "corporation")):
        return CompanySize.LARGE.value
    digits = re.sub(r"[^0-9]", "", text.split("-")[0])
    if digits:
        return company_size_from_employees(int(digits))
    return CompanySize.UNKNOWN.value


class Lead(CamelModel):
    """A single contact record (person + role + company)."""

    id: str | None = None
    name: str
    company: str = ""
    title: str = ""
    phone: str = ""
    email: str = ""
    secondary_email: str = ""

    specialty: str = ""
    seniority: str = ""

    # CRM pass-through
    source: str = ""
    lifecycle_stage: str = ""
    zip_code: str = ""
    sales_status: str = ""

    # Provenance
    data_source: DataSource | None = None
    enrichment_method: EnrichmentMethod | None = None
    processed_at: datetime | None = None
    duplicates_found: int | None = Field(None, ge=0)
    consolidated_from: list[str] | None = None

    @field_validator(
        "company",
        "title",
        "phone",
        "email",
        "secondary_email",
        "specialty",
        "seniority",
        "source",
        "lifecycle_stage",
        "zip_code",
        "sales_status",
        mode="before",
    )
    @classmethod
    def _blank_if_missing(cls, value):
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return "" if value is None else str(value).strip()

    @field_validator("consolidated_from", mode="before")
    @classmethod
    def _drop_empty_ids(cls, value):
        if value is None:
            return None
        return [str(v) for v in value if v]

    @property
    def has_contact(self) -> bool:
        """True when the record identifies a person (name or personal email)."""
        return bool(self.name or self.email)

    def export_row(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def build_lead(
    raw: dict,
    *,
    prefix: str,
    company: str,
    data_source: DataSource,
    enrichment_method: EnrichmentMethod = EnrichmentMethod.DOMAIN,
    default_specialty: str = "",
    default_seniority: str = "",
) -> Lead | None:
    """
    Normalise one provider/AI lead dict into a Lead. Returns None if it names nobody.

    Accepts English keys plus the Portuguese keys (nome, empresa, titulo, ...) some models answer with.
    """
    if not isinstance(raw, dict):
        return None
    name = _first(raw, "name", "nome", "fullName", "full_name")
    email = _first(raw, "email")
    if not name and not email:
        return None
    return Lead(
        id=new_lead_id(prefix),
        name=name or email.split("@")[0],
        company=_first(raw, "company", "empresa") or company,
        title=_first(raw, "title", "titulo", "position"),
        phone=_first(raw, "phone", "telefone"),
        email=email,
        specialty=_first(raw, "specialty", "especialidade") or default_specialty,
        seniority=normalize_seniority(_first(raw, "seniority", "grau")) or default_seniority,
        data_source=data_source,
        enrichment_method=enrichment_method,
        processed_at=utc_now(),
    )


def _first(raw: dict, *keys: str) -> str:
    for key in keys:
        value = raw.get(key)
        if value is not None and str(value).strip() and str(value).strip().lower() not in {"null", "none", "n/a"}:
            return str(value).strip()
    return ""
