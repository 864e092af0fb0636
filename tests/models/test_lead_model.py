"""Tests for lead / company models and input normalisation."""

import pytest

from common.errors import ErrorKind
from models.enrichment import EnrichmentResult, ProviderResult
from models.lead import (
    CompanyInfo,
    DataSource,
    Lead,
    build_lead,
    company_name_from_domain,
    is_valid_domain,
    is_valid_email,
    normalize_company_size,
    normalize_domain,
)



class TestDomainInput:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("https://www.Acme.com/", "acme.com"),
            ("http://acme.co.uk/about", "acme.co.uk"),
            ("  ACME.io ", "acme.io"),
        ],
    )
    def test_normalize_domain(self, raw, expected):
        assert normalize_domain(raw) == expected

    def test_valid_domains(self):
        assert is_valid_domain("acme.com")
        assert is_valid_domain("acme-unknown-xyz.com")
        assert is_valid_domain("acme.co.uk")

    def test_invalid_domains(self):
        assert not is_valid_domain("not a domain")
        assert not is_valid_domain("acme")
        assert not is_valid_domain("")

    def test_email_validation(self):
        assert is_valid_email("jane.doe@acme.com")
        assert not is_valid_email("jane.doe@acme")
        assert not is_valid_email("jane doe@acme.com")

    def test_company_name_from_domain(self):
        assert company_name_from_domain("acme.com") == "Acme"


class TestCompanyInfo:
    def test_blank_values_become_unknown(self):
        info = CompanyInfo(name="Acme", description="", industry=None, location="null")
        assert info.description == "Unknown"
        assert info.industry == "Unknown"
        assert info.location == "Unknown"
        assert info.size == "Unknown"

    def test_from_provider_with_bad_payload(self):
        info = CompanyInfo.from_provider("not a dict", "acme.com")
        assert info.name == "Acme"

    def test_camel_case_serialisation(self):
        lead = Lead(name="Ann Lee", secondary_email="ann@acme.com", zip_code="12345")
        row = lead.export_row()
        assert row["secondaryEmail"] == "ann@acme.com"
        assert row["zipCode"] == "12345"

    @pytest.mark.parametrize(
        "value,expected",
        [(10, "Small"), (120, "Medium"), (5000, "Large"), ("51-200 employees", "Medium"), ("startup", "Small"), (None, "Unknown")],
    )
    def test_company_size(self, value, expected):
        assert normalize_company_size(value) == expected


class TestBuildLead:
    def test_portuguese_keys(self):
        lead = build_lead(
            {"nome": "Maria Silva", "titulo": "Diretora", "telefone": "11 98765-4321"},
            prefix="openai",
            company="Acme",
            data_source=DataSource.AI_GENERATED,
        )
        assert lead.name == "Maria Silva"
        assert lead.title == "Diretora"
        assert lead.company == "Acme"
        assert lead.id.startswith("openai-")

    def test_nameless_record_is_dropped(self):
        assert build_lead({"title": "CEO"}, prefix="x", company="Acme", data_source=DataSource.AI_GENERATED) is None

    def test_null_strings_are_ignored(self):
        lead = build_lead(
            {"name": "Ann Lee", "email": "null", "phone": "N/A"},
            prefix="x",
            company="Acme",
            data_source=DataSource.AI_GENERATED,
        )
        assert lead.email == ""
        assert lead.phone == ""


class TestResults:
    def test_success_without_leads_is_a_failure(self):
        result = ProviderResult.success("openai", [])
        assert not result.ok
        assert result.error_kind == ErrorKind.PROVIDER_EMPTY

    def test_failed_result_always_has_error(self):
        result = EnrichmentResult(success=False)
        assert result.error
        assert result.message == result.error
