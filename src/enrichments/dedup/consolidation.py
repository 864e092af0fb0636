"""
Merging a group of duplicate leads into one record.

The AI path asks the model to pick the best value per field; any value it
returns that is not one of the group's own values is replaced with the
deterministic choice. Any AI failure falls back to the deterministic merge,
so consolidation never fails for a non-empty group.
"""

import re
from collections.abc import Callable
from functools import reduce
from typing import Any

from common.errors import ErrorKind, ProviderError
from common.logging import get_logger
from enrichments.dedup import prompts
from enrichments.dedup.cleaning import clean_lead
from models.lead import DataSource, EnrichmentMethod, Lead, new_lead_id, utc_now
from services.llm.client import LLMClient

logger = get_logger(__name__)

TITLE_RANKS = ["ceo", "owner", "founder", "president", "director", "manager", "lead", "senior", "doctor", "dentist"]
LIFECYCLE_PRIORITY = ["customer", "lead", "prospect"]
SALES_STATUS_PRIORITY = ["won", "lost"]
PROPER_CASE = re.compile(r"^[A-Z][a-z]+(\s[A-Z][a-z]+)*$")

CORE_FIELDS = ("name", "company", "title", "phone", "email", "specialty")


def _either(a: str, b: str) -> str | None:
    if not a:
        return b
    if not b:
        return a
    return None


def choose_name(a: str, b: str) -> str:
    if (picked := _either(a, b)) is not None:
        return picked
    proper_a, proper_b = bool(PROPER_CASE.match(a)), bool(PROPER_CASE.match(b))
    if proper_a != proper_b:
        return a if proper_a else b
    return a if len(a) >= len(b) else b


def choose_company(a: str, b: str) -> str:
    if (picked := _either(a, b)) is not None:
        return picked
    return a if len(a) >= len(b) else b


def title_rank(title: str) -> int | None:
    lowered = title.lower()
    return next((i for i, word in enumerate(TITLE_RANKS) if word in lowered), None)


def choose_title(a: str, b: str) -> str:
    """Most senior by TITLE_RANKS; a ranked title beats an unranked one; ties go to the longer string."""
    if (picked := _either(a, b)) is not None:
        return picked
    rank_a, rank_b = title_rank(a), title_rank(b)
    if rank_a is not None and rank_b is not None and rank_a != rank_b:
        return a if rank_a < rank_b else b
    if (rank_a is None) != (rank_b is None):
        return a if rank_a is not None else b
    return a if len(a) >= len(b) else b


def choose_phone(a: str, b: str) -> str:
    if (picked := _either(a, b)) is not None:
        return picked
    parens_a, parens_b = "(" in a and ")" in a, "(" in b and ")" in b
    if parens_a != parens_b:
        return a if parens_a else b
    return a if len(a) >= len(b) else b


def choose_email(a: str, b: str) -> str:
    if (picked := _either(a, b)) is not None:
        return picked
    return a if len(a) <= len(b) else b


def choose_specialty(a: str, b: str) -> str:
    return choose_company(a, b)


CHOOSERS: dict[str, Callable[[str, str], str]] = {
    "name": choose_name,
    "company": choose_company,
    "title": choose_title,
    "phone": choose_phone,
    "email": choose_email,
    "specialty": choose_specialty,
}


def _by_priority(values: list[str], priority: list[str]) -> str:
    present = [v for v in values if v]
    for wanted in priority:
        for value in present:
            if value.strip().lower() == wanted:
                return value
    return present[0] if present else ""


def merge_pass_through(leads: list[Lead], primary_email: str) -> dict[str, str]:
    sources: list[str] = []
    for lead in leads:
        for part in lead.source.split(","):
            part = part.strip()
            if part and part.lower() not in {s.lower() for s in sources}:
                sources.append(part)

    secondary = next(
        (lead.email for lead in leads if lead.email and lead.email.lower() != primary_email.lower()),
        next((lead.secondary_email for lead in leads if lead.secondary_email), ""),
    )
    return {
        "source": ", ".join(sources),
        "lifecycle_stage": _by_priority([lead.lifecycle_stage for lead in leads], LIFECYCLE_PRIORITY),
        "sales_status": _by_priority([lead.sales_status for lead in leads], SALES_STATUS_PRIORITY),
        "zip_code": next((lead.zip_code for lead in leads if lead.zip_code), ""),
        "secondary_email": secondary,
    }


def deterministic_fields(leads: list[Lead]) -> dict[str, str]:
    """Pairwise reduce of the core fields across the group."""
    first = {field: getattr(leads[0], field) for field in CHOOSERS}
    best = reduce(
        lambda acc, lead: {field: chooser(acc[field], getattr(lead, field)) for field, chooser in CHOOSERS.items()},
        leads[1:],
        first,
    )
    return {**best, **merge_pass_through(leads, best["email"])}


def _seniority_for(leads: list[Lead], title: str) -> str:
    owner = next((lead for lead in leads if lead.title == title and lead.seniority), None)
    return owner.seniority if owner else next((lead.seniority for lead in leads if lead.seniority), "")


class LeadConsolidator:
    def __init__(self, llm: LLMClient | None = None):
        self.llm = llm

    async def consolidate(self, leads: list[Lead]) -> Lead:
        """One record for a group of duplicates. Never raises for a non-empty group."""
        if not leads:
            raise ValueError("Cannot consolidate an empty group")
        if len(leads) == 1:
            return clean_lead(leads[0]).model_copy(update={"duplicates_found": 0})

        fields = deterministic_fields(leads)
        method = "rule-based"
        if self.llm is not None and self.llm.available:
            try:
                fields = await self._ai_fields(leads, fields)
                method = "ai"
            except Exception as e:
                logger.warning(f"[Consolidation] AI consolidation failed, using rules: {e}")

        logger.info(f"[Consolidation] Merged {len(leads)} records into '{fields['name']}' ({method})")
        return self._build(leads, fields)

    def fallback_consolidate(self, leads: list[Lead]) -> Lead:
        if not leads:
            raise ValueError("Cannot consolidate an empty group")
        if len(leads) == 1:
            return clean_lead(leads[0]).model_copy(update={"duplicates_found": 0})
        return self._build(leads, deterministic_fields(leads))

    async def _ai_fields(self, leads: list[Lead], fallback: dict[str, str]) -> dict[str, str]:
        payload = await self.llm.complete_json(
            prompts.group_prompt(leads), prompts.CONSOLIDATION_SYSTEM, max_tokens=500, operation="Consolidation"
        )
        if not isinstance(payload, dict):
            raise ProviderError(ErrorKind.PARSE, "Consolidation answer is not an object", provider="openai")
        return self._accept_ai_values(leads, payload, fallback)

    @staticmethod
    def _accept_ai_values(leads: list[Lead], payload: dict[str, Any], fallback: dict[str, str]) -> dict[str, str]:
        fields = dict(fallback)

        for field in CORE_FIELDS:
            value = str(payload.get(field) or "").strip()
            allowed = {getattr(lead, field).lower() for lead in leads if getattr(lead, field)}
            if value and value.lower() in allowed:
                fields[field] = next(getattr(lead, field) for lead in leads if getattr(lead, field).lower() == value.lower())

        all_emails = {e.lower() for lead in leads for e in (lead.email, lead.secondary_email) if e}
        secondary = str(payload.get("secondaryEmail") or "").strip()
        if secondary and secondary.lower() in all_emails and secondary.lower() != fields["email"].lower():
            fields["secondary_email"] = secondary
        elif fields["secondary_email"].lower() == fields["email"].lower():
            fields["secondary_email"] = merge_pass_through(leads, fields["email"])["secondary_email"]

        for field, key in (("lifecycle_stage", "lifecycleStage"), ("sales_status", "salesStatus"), ("zip_code", "zipCode")):
            value = str(payload.get(key) or "").strip()
            if value and value.lower() in {getattr(lead, field).lower() for lead in leads if getattr(lead, field)}:
                fields[field] = value

        known_sources = {p.strip().lower() for lead in leads for p in lead.source.split(",") if p.strip()}
        source_parts = [p.strip() for p in str(payload.get("source") or "").split(",") if p.strip()]
        if source_parts and all(p.lower() in known_sources for p in source_parts):
            fields["source"] = ", ".join(source_parts)

        return fields

    @staticmethod
    def _build(leads: list[Lead], fields: dict[str, str]) -> Lead:
        consolidated = Lead(
            id=new_lead_id("consolidated"),
            **fields,
            seniority=_seniority_for(leads, fields["title"]),
            data_source=DataSource.CONSOLIDATED,
            enrichment_method=EnrichmentMethod.CSV_DEDUPLICATED,
            processed_at=utc_now(),
            duplicates_found=len(leads) - 1,
            consolidated_from=[lead.id for lead in leads if lead.id],
        )
        return clean_lead(consolidated)
