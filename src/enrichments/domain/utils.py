from typing import Any

from models.lead import CompanyInfo, DataSource, Lead, build_lead, company_name_from_domain


def leads_from_payload(
    payload: Any,
    domain: str,
    *,
    prefix: str,
    data_source: DataSource,
    description: str,
) -> tuple[list[Lead], CompanyInfo]:
    """
    Normalise an AI `{"companyInfo": {...}, "leads": [...]}` answer.

    Entries that name nobody are dropped. A non-dict payload (or a bare list)
    is tolerated so a sloppy answer still yields what it can.
    """
    if isinstance(payload, list):
        payload = {"leads": payload}
    if not isinstance(payload, dict):
        return [], CompanyInfo.for_domain(domain, description)

    company_info = CompanyInfo.from_provider(payload.get("companyInfo"), domain, description)
    company = company_info.name if company_info.name != "Unknown" else company_name_from_domain(domain)

    leads = []
    for raw in payload.get("leads") or []:
        lead = build_lead(raw, prefix=prefix, company=company, data_source=data_source)
        if lead is not None:
            leads.append(lead)
    return leads, company_info
