"""Rule-based lead extraction used when no AI model is configured or the model call fails."""

import re

from models.lead import DataSource, Lead, company_name_from_domain, new_lead_id, utc_now
from models.titles import seniority_from_title, specialty_from_title
from services.serper_search.schemas import SearchHit

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_RE = re.compile(r"(\+?1[-.\s]?)?\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})")
PLACEHOLDER_EMAIL_MARKERS = ("example.com", "placeholder", "noreply", "no-reply", "donotreply", "sentry", ".png", ".jpg")

NAME = r"[A-Z][a-z]+ [A-Z][a-z]+"
EXECUTIVE_TITLES = (
    r"CEO|Chief Executive Officer|President|Founder|Co-Founder|CTO|Chief Technology Officer|CFO|"
    r"Chief Financial Officer|COO|Chief Operating Officer|VP|Vice President|Managing Director|Director"
)
NAME_THEN_TITLE = re.compile(rf"({NAME}),?\s*-?\s*({EXECUTIVE_TITLES})\b")
TITLE_THEN_NAME = re.compile(rf"\b({EXECUTIVE_TITLES})[\s:,-]+({NAME})")
DOCTOR = re.compile(rf"\bDr\.?\s+({NAME})")

SEARCH_TITLES = ("CEO", "Chief Executive Officer", "Founder", "President", "CTO", "CFO")
MAX_SCRAPED_LEADS = 5
MAX_SEARCH_LEADS = 3


def find_emails(text: str) -> list[str]:
    """Unique real-looking email addresses in order of appearance."""
    seen: dict[str, None] = {}
    for email in EMAIL_RE.findall(text or ""):
        lowered = email.lower().rstrip(".")
        if any(marker in lowered for marker in PLACEHOLDER_EMAIL_MARKERS):
            continue
        seen.setdefault(lowered, None)
    return list(seen)


def find_phones(text: str, limit: int = 3) -> list[str]:
    return [m.group(0).strip() for m in PHONE_RE.finditer(text or "")][:limit]


def find_executives(text: str) -> list[tuple[str, str]]:
    """(name, title) pairs from 'Name, Title', 'Title: Name' and 'Dr. Name' patterns; first spelling of a name wins."""
    found: list[tuple[str, str]] = []
    for match in NAME_THEN_TITLE.finditer(text):
        found.append((match.group(1), match.group(2)))
    for match in TITLE_THEN_NAME.finditer(text):
        found.append((match.group(2), match.group(1)))
    for match in DOCTOR.finditer(text):
        found.append((match.group(1), "Doctor"))

    unique: dict[str, tuple[str, str]] = {}
    for name, title in found:
        name = name.strip()
        if len(name) > 3 and " " in name:
            unique.setdefault(name.lower(), (name, title.strip()))
    return list(unique.values())


def _email_for(name: str, title: str, emails: list[str]) -> str:
    first, last = name.split()[0].lower(), name.split()[-1].lower()
    for email in emails:
        local = email.split("@")[0]
        if first in local or last in local or local.startswith(title.lower()[:3]):
            return email
    return ""


def parse_page_text(domain: str, text: str) -> list[Lead]:
    """
    Basic parsing of website text.

    Executives found by name/title patterns are paired with an email whose local
    part mentions them, then with any unassigned email. With no executives, up to
    three 'Contact' leads are made from the emails themselves.
    """
    company = company_name_from_domain(domain)
    emails = find_emails(text)
    phones = find_phones(text)
    executives = find_executives(text)[:MAX_SCRAPED_LEADS]

    assigned: dict[str, str] = {name: _email_for(name, title, emails) for name, title in executives}
    remaining = [e for e in emails if e not in assigned.values()]
    for name in assigned:
        if not assigned[name] and remaining:
            assigned[name] = remaining.pop(0)

    leads = [
        Lead(
            id=new_lead_id("scraped"),
            name=name,
            company=company,
            title=title,
            phone=phones[0] if phones else "",
            email=assigned[name],
            specialty=specialty_from_title(title),
            seniority=seniority_from_title(title),
            data_source=DataSource.SCRAPED,
            processed_at=utc_now(),
        )
        for name, title in executives
    ]
    if leads:
        return leads

    return [
        Lead(
            id=new_lead_id("scraped"),
            name=re.sub(r"[._]", " ", email.split("@")[0]).title(),
            company=company,
            title="Contact",
            phone=phones[i] if i < len(phones) else "",
            email=email,
            specialty="General",
            seniority="Associate",
            data_source=DataSource.SCRAPED,
            processed_at=utc_now(),
        )
        for i, email in enumerate(emails[:3])
    ]


def parse_search_hits(domain: str, hits: list[SearchHit]) -> list[Lead]:
    """Pick 'Firstname Lastname ... CEO' style mentions out of search titles and snippets."""
    company = company_name_from_domain(domain)
    names: dict[str, str] = {}
    for hit in hits:
        text = f"{hit.title} {hit.snippet}"
        lowered = text.lower()
        for title in SEARCH_TITLES:
            if title.lower() not in lowered:
                continue
            match = re.search(rf"({NAME}).*?{re.escape(title)}", text)
            if match and match.group(1) not in names:
                names[match.group(1)] = title
        if len(names) >= MAX_SEARCH_LEADS:
            break

    domain_emails = [e for hit in hits for e in find_emails(f"{hit.title} {hit.snippet}") if e.endswith(domain)]
    leads = []
    for name, title in list(names.items())[:MAX_SEARCH_LEADS]:
        leads.append(
            Lead(
                id=new_lead_id("search"),
                name=name,
                company=company,
                title=title,
                email=_email_for(name, title, domain_emails),
                specialty="Leadership",
                seniority="C-Level",
                data_source=DataSource.RULE_BASED,
                processed_at=utc_now(),
            )
        )
    return leads


def combine_leads(*lead_lists: list[Lead]) -> list[Lead]:
    """
    Merge lead lists in order, dropping repeats by (email, name, title) and
    records with neither a name nor an email.
    """
    seen: set[tuple[str, str, str]] = set()
    unique: list[Lead] = []
    for leads in lead_lists:
        for lead in leads:
            key = (lead.email.lower(), lead.name.lower(), lead.title.lower())
            if key in seen or not lead.has_contact:
                continue
            seen.add(key)
            unique.append(lead.model_copy(update={"id": new_lead_id("hybrid"), "data_source": DataSource.HYBRID}))
    return unique
