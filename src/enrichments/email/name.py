"""Guessing a person's name and company from an email address."""

import re

GENERIC_LOCAL_PARTS = {
    "info",
    "contact",
    "admin",
    "support",
    "hello",
    "mail",
    "email",
    "sales",
    "team",
    "office",
    "noreply",
}

FREE_EMAIL_PROVIDERS = {
    "gmail.com",
    "yahoo.com",
    "hotmail.com",
    "outlook.com",
    "icloud.com",
    "mail.com",
    "protonmail.com",
    "aol.com",
    "zoho.com",
    "yandex.com",
    "gmx.com",
    "live.com",
    "msn.com",
    "proton.me",
}

MAX_NAME_TOKENS = 3


def name_parts_from_email(email: str) -> list[str]:
    """
    'jane.doe42@acme.com' -> ['Jane', 'Doe']

    Digits are dropped, '.', '_' and '-' split tokens, generic mailbox words and
    single letters are discarded, and at most three tokens are kept.
    """
    local = email.split("@")[0]
    local = re.sub(r"\d+", "", local)
    tokens = [t for t in re.split(r"[._-]", local) if t]
    return [
        t.capitalize() for t in tokens if len(t) > 1 and t.lower() not in GENERIC_LOCAL_PARTS
    ][:MAX_NAME_TOKENS]


def name_from_email(email: str) -> str:
    return " ".join(name_parts_from_email(email))


def email_domain(email: str) -> str:
    return email.split("@")[-1].lower()


def is_free_email_domain(domain: str) -> bool:
    return domain.lower() in FREE_EMAIL_PROVIDERS
