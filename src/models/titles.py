"""Keyword mappings from job titles, departments and industries to specialty / seniority labels."""

from models.lead import Seniority

C_LEVEL_WORDS = ("ceo", "president", "founder", "chief", "cto", "cfo", "coo")


def seniority_from_title(title: str | None) -> str:
    if not title:
        return Seniority.ASSOCIATE.value
    t = title.lower()
    if "owner" in t:
        return Seniority.OWNER.value
    if any(word in t for word in C_LEVEL_WORDS):
        return Seniority.C_LEVEL.value
    if "director" in t or "vp" in t or "vice president" in t or "head of" in t:
        return Seniority.DIRECTOR.value
    if "manager" in t or "lead" in t:
        return Seniority.MANAGER.value
    if "senior" in t or t.startswith("sr"):
        return Seniority.SENIOR.value
    return Seniority.ASSOCIATE.value


def specialty_from_title(title: str | None) -> str:
    if not title:
        return "General"
    t = title.lower()
    if "ceo" in t or "president" in t or "founder" in t or "owner" in t:
        return "Executive Leadership"
    if "cto" in t or "technology" in t or "engineer" in t or "developer" in t:
        return "Technology"
    if "cfo" in t or "financ" in t:
        return "Finance"
    if "coo" in t or "operations" in t:
        return "Operations"
    if "marketing" in t:
        return "Marketing"
    if "sales" in t:
        return "Sales"
    if "doctor" in t or "dentist" in t or "physician" in t:
        return "Healthcare"
    return "General"


DEPARTMENT_SPECIALTIES = {
    "engineering": "Technology",
    "it": "Technology",
    "sales": "Sales",
    "marketing": "Marketing",
    "hr": "Human Resources",
    "finance": "Finance",
    "operations": "Operations",
    "executive": "Executive Leadership",
    "management": "Executive Leadership",
}

SENIORITY_LEVELS = {
    "senior": Seniority.SENIOR.value,
    "junior": Seniority.ASSOCIATE.value,
    "manager": Seniority.MANAGER.value,
    "director": Seniority.DIRECTOR.value,
    "vp": Seniority.C_LEVEL.value,
    "c_suite": Seniority.C_LEVEL.value,
    "c-level": Seniority.C_LEVEL.value,
    "executive": Seniority.C_LEVEL.value,
    "owner": Seniority.OWNER.value,
    "founder": Seniority.OWNER.value,
}

INDUSTRY_SPECIALTIES = {
    "technology": "Technology",
    "information technology & services": "Technology",
    "software": "Technology",
    "computer software": "Technology",
    "healthcare": "Healthcare",
    "hospital & health care": "Healthcare",
    "finance": "Finance",
    "financial services": "Finance",
    "education": "Education",
    "retail": "Retail",
    "manufacturing": "Manufacturing",
}


def specialty_from_department(department: str | None) -> str:
    return DEPARTMENT_SPECIALTIES.get((department or "").lower(), "General")


def seniority_from_level(level: str | None) -> str:
    return SENIORITY_LEVELS.get((level or "").lower(), Seniority.ASSOCIATE.value)


def specialty_from_industry(industry: str | None) -> str:
    return INDUSTRY_SPECIALTIES.get((industry or "").lower(), "General")
