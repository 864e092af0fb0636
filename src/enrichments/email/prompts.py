from models.lead import CompanyInfo
from services.serper_search.schemas import SearchHit

EMAIL_SYNTHESIS_SYSTEM = """
You build a professional profile of the person behind an email address from
web search results.

CRITICAL RULES:
- Only use information EXPLICITLY mentioned in the search results
- NEVER invent a name, title, phone number or company detail
- If the results are thin, say so with "confidence": "low" instead of guessing
- Prefer LinkedIn and official company pages over other sources

Return only valid JSON, without markdown formatting.
""".strip()


def _format_hits(label: str, hits: list[SearchHit]) -> str:
    if not hits:
        return "No results found"
    return "\n".join(
        f"{label} RESULT {i}:\nTitle: {hit.title}\nURL: {hit.link}\nSnippet: {hit.snippet}\n---"
        for i, hit in enumerate(hits, start=1)
    )


def email_synthesis_prompt(
    email: str,
    derived_name: str,
    email_hits: list[SearchHit],
    name_hits: list[SearchHit],
    company_info: CompanyInfo,
) -> str:
    return f"""
Analyse the search results for the email address "{email}" and build the person's professional profile.
Name guessed from the address: {derived_name or "none"} (only use it if the results support it).

COMPANY:
Name: {company_info.name}
Description: {company_info.description}
Industry: {company_info.industry}
Size: {company_info.size}
Location: {company_info.location}

RESULTS FOR THE EMAIL ADDRESS:
{_format_hits("EMAIL", email_hits)}

RESULTS FOR NAME + COMPANY:
{_format_hits("NAME", name_hits)}

Identify: full name, current title, phone (if mentioned), area of specialty,
seniority, and the company's industry and size if the results mention them.

RESPONSE FORMAT (JSON only):
{{
  "name": "Full name as found in the results",
  "company": "Confirmed company name",
  "title": "Current job title",
  "phone": "Phone if found",
  "specialty": "Professional specialty",
  "seniority": "C-Level | Director | Manager | Senior | Professional",
  "companyIndustry": "Industry if found, else Unknown",
  "companySize": "Small | Medium | Large | Unknown",
  "confidence": "high | medium | low",
  "sources": ["URLs that support the profile"]
}}
""".strip()
