"""
Duplicate detection for lead records.

A weighted score over name (0.4), company (0.3), phone (0.2) and email (0.1).
Fields missing on either side are left out of both the sum and the weights,
so two leads with only name + company are judged on those two alone.
"""

import re
from dataclasses import dataclass

import Levenshtein

from common.logging import get_logger
from models.lead import Lead

logger = get_logger(__name__)

NAME_WEIGHT = 0.4
COMPANY_WEIGHT = 0.3
PHONE_WEIGHT = 0.2
EMAIL_WEIGHT = 0.1

DUPLICATE_THRESHOLD = 0.70

COMPANY_STOP_WORDS = (
    "llc|inc|incorporated|corp|corporation|ltd|limited|clinic|group|services|practice|care|dental|plus|"
    "solutions|solution|consulting|company|co|enterprises|enterprise|associates|associate|partners|"
    "partnership|center|centre|medical|health|healthcare|studio|studios|lab|labs|laboratory|laboratories"
)
COMPANY_STOP_RE = re.compile(rf"\b({COMPANY_STOP_WORDS})\b")


@dataclass(frozen=True)
class SimilarityBreakdown:
    name: float
    company: float | None
    phone: float | None
    email: float | None
    score: float


def normalize_name(name: str) -> str:
    return re.sub(r"\s+", " ", re.sub(r"[^a-z\s]", "", (name or "").lower())).strip()


def normalize_company(company: str) -> str:
    text = re.sub(r"[^\w\s&-]", " ", (company or "").lower())
    return re.sub(r"\s+", " ", COMPANY_STOP_RE.sub("", text)).strip()


def string_similarity(a: str, b: str) -> float:
    """1 - edit distance / length of the longer string. Two empty strings are identical."""
    longer = max(len(a), len(b))
    if longer == 0:
        return 1.0
    return (longer - Levenshtein.distance(a, b)) / longer


def phone_similarity(a: str, b: str) -> float:
    digits_a = re.sub(r"\D", "", a or "")
    digits_b = re.sub(r"\D", "", b or "")
    if not digits_a or not digits_b:
        return 0.0
    if digits_a == digits_b:
        return 1.0

    if len(digits_a) >= 7 and len(digits_b) >= 7:
        if digits_a[-7:] == digits_b[-7:]:
            return 0.9
        if digits_a[-4:] == digits_b[-4:]:
            return 0.7
        similarity = string_similarity(digits_a, digits_b)
        if similarity > 0.8:
            return similarity * 0.6
    return 0.0


def email_similarity(a: str, b: str) -> float:
    a, b = (a or "").strip().lower(), (b or "").strip().lower()
    if a == b and a:
        return 1.0

    domain_a = a.split("@")[1] if "@" in a else ""
    domain_b = b.split("@")[1] if "@" in b else ""
    if not domain_a or not domain_b:
        return 0.0
    if domain_a == domain_b:
        return 0.7
    # same base name, different TLD (acme.com vs acme.net)
    if domain_a.split(".")[0] == domain_b.split(".")[0]:
        return 0.6
    return 0.0


def compare(a: Lead, b: Lead) -> SimilarityBreakdown:
    name = string_similarity(normalize_name(a.name), normalize_name(b.name))
    total = name * NAME_WEIGHT
    weights = NAME_WEIGHT

    company = phone = email = None
    if a.company and b.company:
        company = string_similarity(normalize_company(a.company), normalize_company(b.company))
        total += company * COMPANY_WEIGHT
        weights += COMPANY_WEIGHT
    if a.phone and b.phone:
        phone = phone_similarity(a.phone, b.phone)
        total += phone * PHONE_WEIGHT
        weights += PHONE_WEIGHT
    if a.email and b.email:
        email = email_similarity(a.email, b.email)
        total += email * EMAIL_WEIGHT
        weights += EMAIL_WEIGHT

    score = total / weights

    # Near-identical name + company is strong evidence even when phone/email differ
    if name >= 0.9 and (company or 0.0) >= 0.9:
        score = max(score, 0.85)
        if name >= 0.99 and (company or 0.0) >= 0.99:
            score = max(score, 0.90)
    if name >= 0.9 and (email or 0.0) >= 0.6:
        score = max(score, 0.82)

    return SimilarityBreakdown(name=name, company=company, phone=phone, email=email, score=score)


def similarity(a: Lead, b: Lead) -> float:
    """Similarity in [0, 1] that two leads describe the same person. Symmetric."""
    return compare(a, b).score


def is_duplicate(a: Lead, b: Lead) -> bool:
    return similarity(a, b) > DUPLICATE_THRESHOLD


def find_duplicate_groups(leads: list[Lead]) -> list[list[Lead]]:
    """
    Single-pass grouping in input order.

    Each unassigned lead opens a group; every later unassigned lead is compared
    against that first member only and joins when the score clears the threshold.
    """
    groups: list[list[Lead]] = []
    assigned: set[int] = set()

    for i, anchor in enumerate(leads):
        if i in assigned:
            continue
        group = [anchor]
        assigned.add(i)
        for j in range(i + 1, len(leads)):
            if j in assigned:
                continue
            breakdown = compare(anchor, leads[j])
            if breakdown.score > DUPLICATE_THRESHOLD:
                group.append(leads[j])
                assigned.add(j)
                if breakdown.score < 0.85:
                    logger.debug(f"[Dedup] Borderline match {breakdown.score:.2f}: '{anchor.name}' ~ '{leads[j].name}'")
        groups.append(group)

    return groups
