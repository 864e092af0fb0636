"""
Prompts for the AI-assisted domain enrichment stages.

Every system prompt carries the same no-fabrication rules: the model may only
report people, titles, phones and emails that appear in the supplied material
(or, for the direct stage, that it knows as fact) and must answer with an
empty list otherwise.
"""

import json

from models.lead import Lead
from services.serper_search.schemas import SearchHit

NO_FABRICATION_RULES = """
CRITICAL RULES:
- Only report information that is EXPLICITLY present in the material you are given
- NEVER invent names, titles, phone numbers or email addresses
- If there is no verifiable contact information, return "leads": []
- Be extremely conservative: an empty list is always better than a guess

Return only valid JSON, without markdown formatting.
""".strip()

LEAD_RESPONSE_FORMAT = """
RESPONSE FORMAT (JSON only):
{
  "companyInfo": {
    "name": "Company name",
    "description": "What the company does",
    "industry": "Industry",
    "size": "Small | Medium | Large | Unknown",
    "location": "City, State, Country"
  },
  "leads": [
    {
      "name": "Full name",
      "title": "Job title",
      "phone": "Phone if present",
      "email": "Email if present",
      "specialty": "Area of work based on the title",
      "seniority": "Owner | C-Level | Director | Manager | Senior | Associate | Professional"
    }
  ]
}
""".strip()

SEARCH_ANALYSIS_SYSTEM = f"""
You analyse web search results about companies. Your job is to pull out REAL
contact information that the search results mention.

{NO_FABRICATION_RULES}
""".strip()

SCRAPE_ANALYSIS_SYSTEM = f"""
You analyse the text of company websites. Your job is to extract REAL, verifiable
contact information from the page content you are given.

{NO_FABRICATION_RULES}
""".strip()

CONSOLIDATION_SYSTEM = f"""
You combine company and contact data gathered from several sources (search
results and the company website) into one consolidated profile.

- Merge and deduplicate people found by more than one source
- When sources disagree, keep the most specific and complete value
- Only keep people that appear in the source data

{NO_FABRICATION_RULES}
""".strip()

AI_DIRECT_SYSTEM = """
You are an expert on companies and their leadership. Given a web domain, report
what you reliably know about the company behind it.

CRITICAL RULES:
- Only provide information you are CERTAIN is real
- NEVER invent specific names, titles, phone numbers or email addresses
- If you do not know specific contacts, return "leads": []
- Prefer returning nothing over inventing

Return only valid JSON, without markdown formatting.
""".strip()


def search_analysis_prompt(domain: str, hits: list[SearchHit]) -> str:
    results = "\n".join(
        f"RESULT {i}:\nTitle: {hit.title}\nURL: {hit.link}\nSnippet: {hit.snippet}\n---"
        for i, hit in enumerate(hits, start=1)
    )
    return f"""
Analyse these search results about "{domain}" and extract ONLY contact information they mention explicitly.

Look for:
1. Explicit email addresses (name@{domain}, contact@{domain}, ...)
2. Executives and their titles (CEO, Founder, President, CTO, CFO, VP, Director)
3. Phone numbers and other contact details
4. Team, about-us and staff directory pages

SEARCH RESULTS:
{results}

{LEAD_RESPONSE_FORMAT}
""".strip()


def scrape_analysis_prompt(domain: str, page_text: str) -> str:
    return f"""
Analyse the website content of "{domain}" and extract ONLY contact information that is explicitly present.

Look for email addresses, people with professional titles, phone numbers, and
"About us", "Our team", "Leadership", "Staff" or "Contact" sections.

WEBSITE CONTENT:
{page_text}

{LEAD_RESPONSE_FORMAT}
""".strip()


def _describe_leads(leads: list[Lead]) -> str:
    if not leads:
        return "No leads"
    return "\n".join(f"- {lead.name} ({lead.title or 'no title'}) - {lead.email or 'no email'}" for lead in leads)


def consolidation_prompt(domain: str, sources: dict[str, tuple[dict | None, list[Lead]]]) -> str:
    """`sources` maps a source label to (companyInfo dict, leads)."""
    blocks = []
    for label, (company_info, leads) in sources.items():
        blocks.append(
            f"DATA FROM {label.upper()}:\n"
            f"Company: {json.dumps(company_info or {}, indent=2)}\n"
            f"Leads found: {len(leads)}\n"
            f"{_describe_leads(leads)}"
        )
    joined = "\n\n".join(blocks)
    return f"""
Combine the data gathered about "{domain}" into one consolidated profile.

AVAILABLE DATA:

{joined}

TASK:
1. Merge the company information from the different sources
2. Deduplicate the people (same name, same email, or obviously the same role)
3. Prefer the most specific and complete values
4. Keep people with the most contact details (email, phone)

{LEAD_RESPONSE_FORMAT}
""".strip()


def ai_direct_prompt(domain: str) -> str:
    return f"""
What do you know about the company that owns the domain "{domain}"?

Report the company profile and any executives or key contacts you KNOW to be
associated with it. Do not guess email addresses from naming conventions.

{LEAD_RESPONSE_FORMAT}
""".strip()
