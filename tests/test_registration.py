"""Tests for the Whoxy registration lookup."""
import httpx
import pytest

from core.errors import ProviderResponseError, ProviderTransportError
from providers.whoxy import RegistrationLookup, parse_whois_payload

WHOIS_PAYLOAD = {
    "status": 1,
    "domain_name": "example.com",
    "create_date": "2024-01-10",
    "update_date": "2024-02-01",
    "expiry_date": "2025-01-10",
    "domain_registrar": {"registrar_name": "NameCheap, Inc."},
    "name_servers": ["NS1.EXAMPLE-DNS.COM", "ns2.example-dns.com"],
    "registrant_contact": {
        "full_name": "Jane Doe",
        "company_name": "Example LLC",
        "country_code": "us",
        "email_address": "jane@example.com",
    },
}


def _lookup(handler, api_key="test-key"):
    return RegistrationLookup(api_key=api_key, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_lookup_normalizes_payload():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=WHOIS_PAYLOAD)

    record = await _lookup(handler).lookup("example.com")

    assert record.registrar == "NameCheap, Inc."
    assert record.creation_date == "2024-01-10"
    assert record.expiration_date == "2025-01-10"
    assert record.updated_date == "2024-02-01"
    assert record.name_servers == ("ns1.example-dns.com", "ns2.example-dns.com")
    assert record.registrant_org == "Example LLC"
    assert record.registrant_country == "US"
    assert record.registrant_email == "jane@example.com"
    assert requests[0].url.params["key"] == "test-key"
    assert requests[0].url.params["whois"] == "example.com"


@pytest.mark.asyncio
async def test_payload_failure_status_yields_none():
    def handler(request):
        return httpx.Response(200, json={"status": 0, "status_reason": "Incorrect API Key"})

    lookup = _lookup(handler)

    assert await lookup.lookup("example.com") is None
    with pytest.raises(ProviderResponseError) as exc:
        await lookup.lookup_or_raise("example.com")
    assert exc.value.reason == "Incorrect API Key"
    assert exc.value.provider == "whoxy"


@pytest.mark.asyncio
async def test_http_error_status_yields_none():
    def handler(request):
        return httpx.Response(500, text="upstream exploded")

    lookup = _lookup(handler)

    assert await lookup.lookup("example.com") is None
    with pytest.raises(ProviderTransportError) as exc:
        await lookup.lookup_or_raise("example.com")
    assert exc.value.status_code == 500


@pytest.mark.asyncio
async def test_transport_failure_yields_none():
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    assert await _lookup(handler).lookup("example.com") is None


@pytest.mark.asyncio
async def test_invalid_json_is_a_response_error():
    def handler(request):
        return httpx.Response(200, text="<html>not json</html>")

    with pytest.raises(ProviderResponseError):
        await _lookup(handler).lookup_or_raise("example.com")


@pytest.mark.asyncio
async def test_unconfigured_lookup_makes_no_request():
    def handler(request):
        raise AssertionError("no request expected")

    lookup = _lookup(handler, api_key="")

    assert lookup.is_configured() is False
    assert await lookup.lookup("example.com") is None


def test_missing_nested_fields_never_raise():
    record = parse_whois_payload({"status": 1, "registrant_contact": None, "name_servers": "ns1"})

    assert record.registrar == "Unknown"
    assert record.has_registrar is False
    assert record.creation_date is None
    assert record.name_servers == ()
    assert record.registrant_email is None
    assert record.registrant_org is None
    assert record.registrant_country is None


def test_registrant_full_name_used_when_company_missing():
    record = parse_whois_payload({"registrant_contact": {"full_name": "Jane Doe"}})
    assert record.registrant_org == "Jane Doe"


@pytest.mark.asyncio
async def test_reverse_lookup_lists_domains():
    def handler(request):
        assert request.url.params["reverse"] == "whois"
        assert request.url.params["email"] == "jane@example.com"
        return httpx.Response(200, json={
            "status": 1,
            "search_result": [{"domain_name": "example.com"}, {"domain_name": "example.net"}, {}],
        })

    assert await _lookup(handler).reverse_lookup("jane@example.com") == ["example.com", "example.net"]


@pytest.mark.asyncio
async def test_get_balance():
    def handler(request):
        assert request.url.params["account"] == "balance"
        return httpx.Response(200, json={"status": 1, "live_whois_balance": 420})

    assert await _lookup(handler).get_balance() == 420
