"""Tests for end-to-end domain enrichment."""
import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from core.classifier import SignatureClassifier
from core.config import Settings
from core.engine import EnrichmentOrchestrator
from core.errors import InvalidDomainError, ProviderTransportError
from core.filters import FilterEvaluator
from core.waterfall import ContactDiscoveryWaterfall
from models.detection import DetectionResult
from models.enrichment import EnrichmentOptions, PreferredSource
from models.filters import FilterSpec
from models.registration import RegistrationRecord
from providers.whoxy import RegistrationLookup

WORDPRESS_HTML = '<html><head><link rel="stylesheet" href="/wp-content/themes/bakery/style.css"></head></html>'


def _page(status_code=200, text=WORDPRESS_HTML):
    response = AsyncMock()
    response.status_code = status_code
    response.text = text
    response.headers = {"content-type": "text/html"}
    return response


def _whoxy(handler, api_key="whoxy-key"):
    return RegistrationLookup(api_key=api_key, transport=httpx.MockTransport(handler))


def _orchestrator(registration, first, second, default_max_emails=5):
    return EnrichmentOrchestrator(
        classifier=SignatureClassifier(),
        registration=registration,
        waterfall=ContactDiscoveryWaterfall(first, second),
        default_max_emails=default_max_emails,
    )


@pytest.mark.asyncio
async def test_fresh_wordpress_site_scores_high(fake_provider, make_contact):
    created = (datetime.now(timezone.utc) - timedelta(days=3)).strftime("%Y-%m-%d %H:%M:%S")

    def whois(request):
        return httpx.Response(200, json={
            "status": 1,
            "create_date": created,
            "domain_registrar": {"registrar_name": "NameCheap, Inc."},
            "registrant_contact": {"country_code": "US"},
        })

    first = fake_provider("hunter", [
        make_contact("anna@fresh-bakery.com", confidence=95),
        make_contact("mark@fresh-bakery.com", confidence=88),
    ])
    second = fake_provider("snov")
    orchestrator = _orchestrator(_whoxy(whois), first, second)

    with patch('core.classifier.fetch_url') as mock_fetch:
        mock_fetch.return_value = _page()
        result = await orchestrator.enrich("https://www.Fresh-Bakery.com/menu")

    assert result.domain == "fresh-bakery.com"
    assert result.errors == ()
    assert result.tech_stack.cms == "WordPress"
    assert result.registration.registrant_country == "US"
    assert result.contact_source == "hunter"
    for factor in ("Very fresh domain (< 7 days)", "Target country: US", "Valuable CMS: WordPress", "Has 2 email(s)"):
        assert factor in result.score.factors
    assert result.score.total > 70
    assert first.calls == [("fresh-bakery.com", 5)]


@pytest.mark.asyncio
async def test_enrichment_result_feeds_lead_filters(fake_provider, make_contact):
    def whois(request):
        return httpx.Response(200, json={
            "status": 1,
            "domain_registrar": {"registrar_name": "NameCheap, Inc."},
            "registrant_contact": {"country_code": "US"},
        })

    first = fake_provider("hunter", [make_contact("anna@fresh-bakery.com", confidence=95)])
    orchestrator = _orchestrator(_whoxy(whois), first, fake_provider("snov"))

    with patch('core.classifier.fetch_url') as mock_fetch:
        mock_fetch.return_value = _page()
        result = await orchestrator.enrich("fresh-bakery.com")

    record = result.to_record()
    assert record.domain == "fresh-bakery.com"
    assert record.lead_score == result.score.total
    assert record.contacts == result.contacts

    # A scorer that would disagree proves the stored score is used
    scorer = MagicMock()
    scorer.score.return_value.total = 0
    evaluator = FilterEvaluator(scorer=scorer)
    assert evaluator.evaluate(record, FilterSpec(technologies=["wordpress"], countries=["US"], tlds=["com"])) is True
    assert evaluator.evaluate(record, FilterSpec(min_score=result.score.total)) is True
    assert evaluator.evaluate(record, FilterSpec(exclude_technologies=["wordpress"])) is False
    scorer.score.assert_not_called()


@pytest.mark.asyncio
async def test_everything_failing_still_returns_valid_aggregate(fake_provider):
    def whois(request):
        return httpx.Response(503, text="maintenance")

    orchestrator = _orchestrator(_whoxy(whois), fake_provider("hunter"), fake_provider("snov"))

    with patch('core.classifier.fetch_url') as mock_fetch:
        mock_fetch.side_effect = httpx.ReadTimeout("timed out")
        result = await orchestrator.enrich("offline.example")

    assert result.registration is None
    assert result.tech_stack is None
    assert result.contacts == ()
    assert len(result.errors) >= 2
    assert "Registration lookup returned no data" in result.errors
    assert "Tech stack detection failed (site may be offline)" in result.errors
    assert result.score.total == 0

    data = result.to_dict()
    assert set(data) == {"domain", "registration", "techStack", "contacts", "contactSource", "company", "score", "errors"}
    assert data["registration"] is None
    assert data["techStack"] is None
    assert data["contacts"] == []
    assert data["score"]["total"] == 0


@pytest.mark.asyncio
async def test_invalid_domain_raises_immediately(fake_provider):
    first = fake_provider("hunter")
    orchestrator = _orchestrator(_whoxy(lambda request: httpx.Response(500)), first, None)

    with pytest.raises(InvalidDomainError):
        await orchestrator.enrich("   ")
    assert first.calls == []


@pytest.mark.asyncio
async def test_contact_discovery_waits_for_registration_and_tech_stack(fake_provider, make_contact):
    order = []

    async def lookup(domain):
        await asyncio.sleep(0.02)
        order.append("registration")
        return RegistrationRecord(registrar="GoDaddy")

    async def detect_domain(domain):
        await asyncio.sleep(0.01)
        order.append("tech")
        return DetectionResult(cms="Ghost")

    registration = MagicMock()
    registration.is_configured.return_value = True
    registration.lookup = AsyncMock(side_effect=lookup)
    classifier = MagicMock()
    classifier.detect_domain = AsyncMock(side_effect=detect_domain)

    class RecordingProvider(fake_provider):
        async def search_domain(self, domain, limit):
            order.append("contacts")
            return await super().search_domain(domain, limit)

    provider = RecordingProvider("hunter", [make_contact("a@example.com")])
    orchestrator = EnrichmentOrchestrator(
        classifier=classifier,
        registration=registration,
        waterfall=ContactDiscoveryWaterfall(provider, None),
    )

    await orchestrator.enrich("example.com")

    assert order == ["tech", "registration", "contacts"]


@pytest.mark.asyncio
async def test_skip_options_bypass_every_step(fake_provider):
    first = fake_provider("hunter")
    registration = MagicMock()
    registration.is_configured.return_value = True
    registration.lookup = AsyncMock()
    orchestrator = _orchestrator(registration, first, None)

    with patch('core.classifier.fetch_url') as mock_fetch:
        result = await orchestrator.enrich(
            "example.com",
            EnrichmentOptions(skip_registration=True, skip_tech_stack=True, skip_contacts=True),
        )
        mock_fetch.assert_not_called()

    registration.lookup.assert_not_called()
    assert first.calls == []
    assert result.errors == ()
    assert result.contact_source is None


@pytest.mark.asyncio
async def test_unconfigured_registration_is_skipped_silently(fake_provider):
    orchestrator = _orchestrator(_whoxy(lambda request: httpx.Response(500), api_key=None), fake_provider("hunter"), None)

    with patch('core.classifier.fetch_url') as mock_fetch:
        mock_fetch.return_value = _page()
        result = await orchestrator.enrich("example.com")

    assert result.registration is None
    assert result.errors == ()


@pytest.mark.asyncio
async def test_provider_failures_are_reported(fake_provider, make_contact):
    first = fake_provider("hunter", error=ProviderTransportError("hunter", "HTTP 429 from /domain-search", 429))
    second = fake_provider("snov", [make_contact("x@example.com", source="snov")])
    orchestrator = _orchestrator(_whoxy(lambda request: httpx.Response(200, json={"status": 1})), first, second)

    with patch('core.classifier.fetch_url') as mock_fetch:
        mock_fetch.return_value = _page()
        result = await orchestrator.enrich("example.com")

    assert result.contact_source == "snov"
    assert [c.email for c in result.contacts] == ["x@example.com"]
    assert any("hunter" in e and "429" in e for e in result.errors)


@pytest.mark.asyncio
async def test_unexpected_step_exception_becomes_error_string(fake_provider):
    classifier = MagicMock()
    classifier.detect_domain = AsyncMock(side_effect=RuntimeError("boom"))
    orchestrator = EnrichmentOrchestrator(
        classifier=classifier,
        registration=_whoxy(lambda request: httpx.Response(500), api_key=None),
        waterfall=ContactDiscoveryWaterfall(fake_provider("hunter"), None),
    )

    result = await orchestrator.enrich("example.com")

    assert result.errors == ("Tech stack error: boom",)


@pytest.mark.asyncio
async def test_max_emails_and_preferred_source_are_forwarded(fake_provider, make_contact):
    first = fake_provider("hunter", [make_contact(f"p{i}@example.com") for i in range(5)])
    second = fake_provider("snov", [make_contact("s@example.com", source="snov")])
    orchestrator = _orchestrator(_whoxy(lambda request: httpx.Response(500), api_key=None), first, second, default_max_emails=3)

    with patch('core.classifier.fetch_url') as mock_fetch:
        mock_fetch.return_value = _page()
        default_run = await orchestrator.enrich("example.com")
        second_only = await orchestrator.enrich(
            "example.com", EnrichmentOptions(preferred_source=PreferredSource.SECOND, max_emails=2)
        )

    assert len(default_run.contacts) == 3
    assert first.calls == [("example.com", 3)]
    assert second.calls == [("example.com", 2)]
    assert second_only.contact_source == "snov"


def test_from_settings_injects_credentials():
    settings = Settings(hunter_api_key="h", snov_api_key="s", tech_stack_timeout_ms=1500, default_max_emails=7)

    orchestrator = EnrichmentOrchestrator.from_settings(settings)

    assert orchestrator.registration.is_configured() is False
    assert orchestrator.waterfall.first.name == "hunter"
    assert orchestrator.waterfall.first.is_configured() is True
    assert orchestrator.waterfall.second.name == "snov"
    assert orchestrator.waterfall.second.is_configured() is True
    assert orchestrator.classifier.timeout_ms == 1500
    assert orchestrator.default_max_emails == 7
    assert orchestrator.scorer.config is settings.scoring


@pytest.mark.asyncio
async def test_verify_email_delegates_to_waterfall(fake_provider, valid_verdict):
    orchestrator = _orchestrator(
        _whoxy(lambda request: httpx.Response(500), api_key=None),
        fake_provider("hunter", configured=False),
        fake_provider("snov", verdict=valid_verdict),
    )

    verification = await orchestrator.verify_email("jane@example.com")

    assert verification.valid is True
    assert verification.source == "snov"
