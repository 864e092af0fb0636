"""
Specialty / seniority classification for uploaded leads (CSV batch path).

Leads that already carry both values are returned untouched. Otherwise the
model classifies the lead from its name, company and title; keyword rules
take over when no model is configured or the call fails.
"""

from common.logging import get_logger
from models.lead import DataSource, EnrichmentMethod, Lead, Seniority, normalize_seniority, utc_now
from services.llm.client import LLMClient

logger = get_logger(__name__)

CLASSIFICATION_SYSTEM = (
    "You classify B2B contacts. From the lead's details, determine the most appropriate "
    "specialty and seniority. Return only valid JSON, without markdown formatting."
)

DENTAL_WORDS = ("dentist", "dental", "orthodontic", "pediatric dentistry", "cosmetic dentistry", "smile", "teeth")
TECH_WORDS = ("engineer", "developer", "software", "programmer", "devops")
SALES_WORDS = ("sales", "account executive", "business development", "commercial")
FINANCE_WORDS = ("finance", "financial", "accounting", "accountant", "cfo", "controller")


def classification_prompt(lead: Lead) -> str:
    return f"""
Determine the specialty and seniority of this lead:

Name: {lead.name}
Company: {lead.company}
Title: {lead.title}
Current specialty: {lead.specialty or "Not set"}
Current seniority: {lead.seniority or "Not set"}

Specialties: for dentists Orthodontics, Pediatric Dentistry, Cosmetic Dentistry, General Dentistry;
otherwise Technology, Marketing, Sales, Finance, or Other.

Seniority: Owner (owners / CEOs), Director (directors / heads), Manager (managers),
Senior (seniors / leads), Professional (specialists, doctors and everyone else).

RESPONSE FORMAT (JSON only):
{{"specialty": "...", "seniority": "..."}}
""".strip()


def _pick(text: str, rules: list[tuple[tuple[str, ...], str]], default: str) -> str:
    return next((label for words, label in rules if any(w in text for w in words)), default)


def classify_by_rules(lead: Lead) -> tuple[str, str]:
    """(specialty, seniority) from keyword rules on title, company and existing specialty."""
    text = f"{lead.name} {lead.company} {lead.title} {lead.specialty}".lower()

    if any(w in text for w in DENTAL_WORDS):
        specialty = _pick(
            text,
            [
                (("orthodontic",), "Orthodontics"),
                (("pediatric",), "Pediatric Dentistry"),
                (("cosmetic",), "Cosmetic Dentistry"),
                (("general dentistry",), "General Dentistry"),
            ],
            "Dentistry",
        )
        seniority = _pick(
            text,
            [
                (("owner", "ceo"), Seniority.OWNER.value),
                (("head", "chief"), Seniority.DIRECTOR.value),
                (("lead dentist", "senior"), Seniority.SENIOR.value),
            ],
            Seniority.PROFESSIONAL.value,
        )
    elif any(w in text for w in TECH_WORDS):
        specialty = "Technology"
        seniority = _pick(
            text,
            [(("senior", "lead"), Seniority.SENIOR.value), (("junior",), Seniority.ASSOCIATE.value)],
            Seniority.PROFESSIONAL.value,
        )
    elif "marketing" in text:
        specialty = "Marketing"
        seniority = _pick(
            text,
            [(("director", "head"), Seniority.DIRECTOR.value), (("manager",), Seniority.MANAGER.value)],
            Seniority.PROFESSIONAL.value,
        )
    elif any(w in text for w in SALES_WORDS):
        specialty = "Sales"
        seniority = _pick(
            text,
            [(("director",), Seniority.DIRECTOR.value), (("manager",), Seniority.MANAGER.value)],
            Seniority.PROFESSIONAL.value,
        )
    elif any(w in text for w in FINANCE_WORDS):
        specialty = "Finance"
        seniority = _pick(
            text,
            [(("director", "cfo"), Seniority.DIRECTOR.value), (("manager",), Seniority.MANAGER.value)],
            Seniority.PROFESSIONAL.value,
        )
    else:
        specialty = "Other"
        seniority = _pick(
            text,
            [
                (("owner", "ceo", "founder", "president"), Seniority.OWNER.value),
                (("director", "head", "vp"), Seniority.DIRECTOR.value),
                (("manager",), Seniority.MANAGER.value),
            ],
            Seniority.UNKNOWN.value,
        )

    return lead.specialty or specialty, lead.seniority or seniority


class LeadClassifier:
    def __init__(self, llm: LLMClient | None = None):
        self.llm = llm

    async def classify(self, lead: Lead) -> Lead:
        if lead.specialty and lead.seniority:
            return lead

        if self.llm is not None and self.llm.available:
            try:
                payload = await self.llm.complete_json(
                    classification_prompt(lead), CLASSIFICATION_SYSTEM, max_tokens=200, operation="Classification"
                )
                if isinstance(payload, dict) and (payload.get("specialty") or payload.get("seniority")):
                    return lead.model_copy(
                        update={
                            "specialty": lead.specialty or str(payload.get("specialty") or "").strip() or "Other",
                            "seniority": lead.seniority
                            or normalize_seniority(str(payload.get("seniority") or ""))
                            or Seniority.UNKNOWN.value,
                            "data_source": DataSource.AI_GENERATED,
                            "enrichment_method": EnrichmentMethod.CSV_BATCH,
                            "processed_at": utc_now(),
                        }
                    )
                logger.warning(f"[Classification] Unusable answer for '{lead.name}', using rules")
            except Exception as e:
                logger.warning(f"[Classification] AI failed for '{lead.name}', using rules: {e}")

        specialty, seniority = classify_by_rules(lead)
        return lead.model_copy(
            update={
                "specialty": specialty,
                "seniority": seniority,
                "data_source": DataSource.RULE_BASED,
                "enrichment_method": EnrichmentMethod.CSV_BATCH,
                "processed_at": utc_now(),
            }
        )
