"""Basic field clean-up applied to every lead leaving the deduplication pass."""

import re

from models.lead import Lead

NAME_PARTICLES = {"da", "de", "do", "das", "dos", "e", "van", "von", "der", "del", "la", "le"}
TITLE_MINOR_WORDS = {"of", "and", "for", "the", "in", "at", "de", "da", "do", "e"}

COMPANY_ABBREVIATIONS = {
    "llc": "LLC",
    "inc": "Inc",
    "inc.": "Inc.",
    "ltd": "Ltd",
    "ltd.": "Ltd.",
    "corp": "Corp",
    "corp.": "Corp.",
    "co.": "Co.",
    "plc": "PLC",
    "lp": "LP",
    "llp": "LLP",
    "pc": "PC",
    "pllc": "PLLC",
    "sa": "SA",
    "s/a": "S/A",
    "s.a.": "S.A.",
    "ltda": "LTDA",
}
# Kept upper-case in titles
TITLE_ACRONYMS = {"ceo", "cto", "cfo", "coo", "cmo", "cio", "vp", "hr", "it", "svp", "evp", "dds", "md"}

TITLE_EXPANSIONS = [
    (re.compile(r"\bjr\b\.?", re.IGNORECASE), "junior"),
    (re.compile(r"\bsr\b\.?", re.IGNORECASE), "senior"),
    (re.compile(r"\bmgr\b\.?", re.IGNORECASE), "manager"),
]


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:].lower() if text else text


def capitalize_name(name: str) -> str:
    """'maria da silva' -> 'Maria da Silva', 'o'brien-smith' -> "O'Brien-Smith" """
    words = re.sub(r"\s+", " ", name.strip()).lower().split(" ")

    def cap(word: str) -> str:
        return "-".join("'".join(capitalize_first(p) for p in part.split("'")) for part in word.split("-"))

    return " ".join(w if i > 0 and w in NAME_PARTICLES else cap(w) for i, w in enumerate(words))


def capitalize_company(company: str) -> str:
    words = re.sub(r"\s+", " ", company.strip()).split(" ")
    out = []
    for word in words:
        lowered = word.lower().rstrip(",")
        if lowered in COMPANY_ABBREVIATIONS:
            out.append(COMPANY_ABBREVIATIONS[lowered] + ("," if word.endswith(",") else ""))
        elif word.isupper() and len(word) <= 4:
            # already an acronym (IBM, 3M)
            out.append(word)
        else:
            out.append(capitalize_first(word))
    return " ".join(out)


def capitalize_title(title: str) -> str:
    text = title.strip()
    for pattern, replacement in TITLE_EXPANSIONS:
        text = pattern.sub(replacement, text)
    words = re.sub(r"\s+", " ", text).lower().split(" ")
    out = []
    for i, word in enumerate(words):
        if word.strip(",&/") in TITLE_ACRONYMS:
            out.append(word.upper())
        elif i > 0 and word in TITLE_MINOR_WORDS:
            out.append(word)
        else:
            out.append(capitalize_first(word))
    return " ".join(out)


def format_phone(phone: str) -> str:
    """
    Normalise to a readable format; numbers that don't fit a known shape are left as typed.

    - 10 digits: (XXX) XXX-XXXX
    - 11 digits starting with 1: +1 (XXX) XXX-XXXX
    - 55 + 10/11 digits: +55 XX XXXX(X)-XXXX
    - other numbers longer than 7 digits: +digits
    """
    digits = re.sub(r"\D", "", phone)
    if len(digits) < 8:
        return phone.strip()
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+1 ({digits[1:4]}) {digits[4:7]}-{digits[7:]}"
    if digits.startswith("55") and len(digits) in (12, 13):
        area, rest = digits[2:4], digits[4:]
        split = 5 if len(rest) == 9 else 4
        return f"+55 {area} {rest[:split]}-{rest[split:]}"
    return f"+{digits}"


def clean_lead(lead: Lead) -> Lead:
    """Copy of the lead with name, company, title, phone and specialty tidied up."""
    return lead.model_copy(
        update={
            "name": capitalize_name(lead.name) if lead.name else lead.name,
            "company": capitalize_company(lead.company) if lead.company else "",
            "title": capitalize_title(lead.title) if lead.title else "",
            "phone": format_phone(lead.phone) if lead.phone else "",
            "email": lead.email.strip().lower(),
            "secondary_email": lead.secondary_email.strip().lower(),
            "specialty": capitalize_first(lead.specialty.strip()) if lead.specialty else "",
        }
    )
