import json

from models.lead import Lead

CONSOLIDATION_SYSTEM = """
You are a data cleaning specialist. You merge duplicate CRM records of the same
person into one record.

CRITICAL RULES:
- Choose each value from the values given; NEVER invent or rewrite a value
- Leave a field empty when no record has it

Return only valid JSON, without markdown formatting.
""".strip()


def group_prompt(leads: list[Lead]) -> str:
    records = [
        {
            "id": i,
            "name": lead.name,
            "company": lead.company,
            "title": lead.title,
            "phone": lead.phone,
            "email": lead.email,
            "specialty": lead.specialty,
            "source": lead.source,
            "lifecycleStage": lead.lifecycle_stage,
            "zipCode": lead.zip_code,
            "salesStatus": lead.sales_status,
        }
        for i, lead in enumerate(leads, start=1)
    ]
    return f"""
Consolidate these duplicate lead records into a single, most accurate and complete record.

DUPLICATE RECORDS:
{json.dumps(records, indent=2)}

For each field pick the most reliable value:
1. name: the best formatted (proper capitalisation)
2. company: the most complete, official name
3. title: the most specific and senior (CEO > Owner > Founder > President > Director > Manager)
4. phone: the most complete format, with area code in parentheses
5. email: the main (most official) address; secondaryEmail: another address if there is one
6. specialty: the most complete description
7. source: all marketing sources, comma separated
8. lifecycleStage: Customer > Lead > Prospect
9. salesStatus: Won > Lost

RESPOND WITH ONE JSON OBJECT:
{{
  "name": "",
  "company": "",
  "title": "",
  "phone": "",
  "email": "",
  "secondaryEmail": "",
  "specialty": "",
  "source": "",
  "lifecycleStage": "",
  "zipCode": "",
  "salesStatus": ""
}}
""".strip()
