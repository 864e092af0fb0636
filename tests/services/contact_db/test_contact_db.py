"""Tests for the Hunter / Apollo / Clearbit adapters."""

import httpx
import pytest

from common.errors import ErrorKind
from enrichments.domain.external import ExternalEnricher
from services.contact_db.apollo import ApolloClient
from services.contact_db.clearbit import ClearbitClient
from services.contact_db.hunter import HunterClient

HUNTER_PAYLOAD = {
    "data": {
        "organization": "Acme",
        "industry": "Manufacturing",
        "employee_count": 120,
        "city": "Denver",
        "country": "US",
        "emails": [
            {
                "value": "jane@acme.com",
                "first_name": "Jane",
                "last_name": "Doe",
                "position": "VP Sales",
                "department": "sales",
                "seniority": "senior",
            },
            {"value": None, "first_name": None, "last_name": None},
        ],
    }
}


def transport_for(handler):
    return httpx.MockTransport(handler)


class TestHunter:
    @pytest.mark.asyncio
    async def test_lookup_normalizes_people(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=HUNTER_PAYLOAD)

        client = HunterClient("https://api.hunter.io/v2", "secret", transport=transport_for(handler))
        result = await client.lookup("acme.com")

        assert result.ok
        assert seen["params"]["api_key"] == "secret"
        assert seen["params"]["domain"] == "acme.com"
        assert len(result.leads) == 1
        lead = result.leads[0]
        assert lead.name == "Jane Doe"
        assert lead.email == "jane@acme.com"
        assert lead.specialty == "Sales"
        assert result.company_info.size == "Medium"
        assert result.company_info.location == "Denver, US"

    @pytest.mark.asyncio
    async def test_unauthorized_maps_to_unavailable(self):
        client = HunterClient(
            "https://api.hunter.io/v2", "bad-key", transport=transport_for(lambda request: httpx.Response(401))
        )
        result = await client.lookup("acme.com")
        assert result.error_kind == ErrorKind.PROVIDER_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_server_error_maps_to_provider_error(self):
        client = HunterClient("https://api.hunter.io/v2", "key", transport=transport_for(lambda request: httpx.Response(502)))
        result = await client.lookup("acme.com")
        assert result.error_kind == ErrorKind.PROVIDER_ERROR

    @pytest.mark.asyncio
    async def test_timeout_maps_to_provider_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        client = HunterClient("https://api.hunter.io/v2", "key", transport=transport_for(handler))
        result = await client.lookup("acme.com")
        assert result.error_kind == ErrorKind.PROVIDER_TIMEOUT

    @pytest.mark.asyncio
    async def test_non_object_body_is_parse_error(self):
        client = HunterClient(
            "https://api.hunter.io/v2", "key", transport=transport_for(lambda request: httpx.Response(200, json=[]))
        )
        result = await client.lookup("acme.com")
        assert result.error_kind == ErrorKind.PARSE

    @pytest.mark.asyncio
    async def test_unconfigured(self):
        result = await HunterClient("https://api.hunter.io/v2", "").lookup("acme.com")
        assert result.error_kind == ErrorKind.PROVIDER_UNAVAILABLE


class TestApollo:
    @pytest.mark.asyncio
    async def test_lookup_uses_header_and_two_calls(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            assert request.headers["X-Api-Key"] == "apollo-key"
            if request.url.path.endswith("/organizations/search"):
                return httpx.Response(200, json={"organizations": [{"name": "Acme", "industry": "dental"}]})
            return httpx.Response(
                200, json={"people": [{"first_name": "Sam", "last_name": "Lee", "title": "CEO", "email": "sam@acme.com"}]}
            )

        client = ApolloClient("https://api.apollo.io/v1", "apollo-key", transport=transport_for(handler))
        result = await client.lookup("acme.com")

        assert calls == ["/v1/organizations/search", "/v1/mixed_people/search"]
        assert result.ok
        assert result.leads[0].name == "Sam Lee"
        assert result.leads[0].seniority == "C-Level"

    @pytest.mark.asyncio
    async def test_no_organization_is_empty(self):
        client = ApolloClient(
            "https://api.apollo.io/v1",
            "apollo-key",
            transport=transport_for(lambda request: httpx.Response(200, json={"organizations": []})),
        )
        result = await client.lookup("acme.com")
        assert result.error_kind == ErrorKind.PROVIDER_EMPTY

    @pytest.mark.asyncio
    async def test_people_body_not_an_object_is_parse_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/organizations/search"):
                return httpx.Response(200, json={"organizations": [{"name": "Acme"}]})
            return httpx.Response(200, json=["unexpected"])

        client = ApolloClient("https://api.apollo.io/v1", "apollo-key", transport=transport_for(handler))
        result = await client.lookup("acme.com")
        assert result.error_kind == ErrorKind.PARSE


class TestClearbit:
    @pytest.mark.asyncio
    async def test_company_only_is_not_a_match(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["Authorization"] == "Bearer cb-key"
            return httpx.Response(200, json={"name": "Acme", "metrics": {"employees": 20}, "geo": {"city": "Austin"}})

        client = ClearbitClient("https://company.clearbit.com/v2", "cb-key", transport=transport_for(handler))
        result = await client.lookup("acme.com")

        assert not result.ok
        assert result.error_kind == ErrorKind.PROVIDER_EMPTY
        assert result.company_info.name == "Acme"
        assert result.company_info.size == "Small"


class TestExternalEnricher:
    @pytest.mark.asyncio
    async def test_first_provider_with_people_wins(self):
        hunter = HunterClient(
            "https://api.hunter.io/v2", "key", transport=transport_for(lambda request: httpx.Response(200, json={"data": {}}))
        )
        apollo_calls = []

        def apollo_handler(request):
            apollo_calls.append(request.url.path)
            if request.url.path.endswith("/organizations/search"):
                return httpx.Response(200, json={"organizations": [{"name": "Acme"}]})
            return httpx.Response(200, json={"people": [{"first_name": "Sam", "last_name": "Lee", "title": "CTO"}]})

        apollo = ApolloClient("https://api.apollo.io/v1", "key", transport=transport_for(apollo_handler))
        clearbit = ClearbitClient("https://company.clearbit.com/v2", "")

        result = await ExternalEnricher([hunter, apollo, clearbit]).run("acme.com")

        assert result.ok
        assert result.provider == "external-apollo"
        assert result.details["matched_provider"] == "apollo"
        assert result.leads[0].name == "Sam Lee"
        assert len(apollo_calls) == 2

    @pytest.mark.asyncio
    async def test_malformed_provider_does_not_stop_the_chain(self):
        """A provider answering with a non-object body is a parse failure; the next provider still runs."""
        hunter = HunterClient(
            "https://api.hunter.io/v2", "key", transport=transport_for(lambda request: httpx.Response(200, json=[]))
        )

        def apollo_handler(request):
            if request.url.path.endswith("/organizations/search"):
                return httpx.Response(200, json={"organizations": [{"name": "Acme"}]})
            return httpx.Response(200, json={"people": [{"first_name": "Sam", "last_name": "Lee", "title": "CEO"}]})

        apollo = ApolloClient("https://api.apollo.io/v1", "key", transport=transport_for(apollo_handler))

        result = await ExternalEnricher([hunter, apollo]).run("acme.com")

        assert result.ok
        assert result.provider == "external-apollo"

    @pytest.mark.asyncio
    async def test_no_configured_providers(self):
        result = await ExternalEnricher([HunterClient("https://api.hunter.io/v2", "")]).run("acme.com")
        assert result.error_kind == ErrorKind.PROVIDER_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_company_info_carried_from_clearbit(self):
        clearbit = ClearbitClient(
            "https://company.clearbit.com/v2",
            "key",
            transport=transport_for(lambda request: httpx.Response(200, json={"name": "Acme Corp"})),
        )
        result = await ExternalEnricher([clearbit]).run("acme.com")
        assert not result.ok
        assert result.company_info.name == "Acme Corp"
