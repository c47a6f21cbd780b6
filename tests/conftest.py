import os
import sys
from datetime import datetime, timezone
import pytest

# Ensure project root is on sys.path for imports like `core.*`
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from models.contact import ContactRecord, DomainSearchResult, EmailVerdict, ProviderCredits
from providers.base import ContactProvider

CONFIG_ENV_VARS = (
    "WHOXY_API_KEY", "HUNTER_API_KEY", "SNOV_CLIENT_ID", "SNOV_CLIENT_SECRET", "SNOV_API_KEY",
    "TECH_STACK_TIMEOUT_MS", "DEFAULT_MAX_EMAILS", "TARGET_COUNTRIES", "VALUABLE_PLATFORMS",
    "SPAM_KEYWORDS", "SCORING_CONFIG_FILE",
)


class FakeContactProvider(ContactProvider):
    """In-memory contact provider that records how it was called."""

    def __init__(self, name, contacts=(), configured=True, company=None, total=None,
                 error=None, verdict=None, verify_error=None):
        super().__init__()
        self.name = name
        self.contacts = list(contacts)
        self.configured = configured
        self.company = company
        self.total = total
        self.error = error
        self.verdict = verdict
        self.verify_error = verify_error
        self.calls = []
        self.verify_calls = []

    def is_configured(self):
        return self.configured

    async def search_domain(self, domain, limit):
        self.calls.append((domain, limit))
        if self.error:
            raise self.error
        total = self.total if self.total is not None else len(self.contacts)
        return DomainSearchResult(contacts=tuple(self.contacts[:limit]), company=self.company, total_results=total)

    async def verify_email(self, email):
        self.verify_calls.append(email)
        if self.verify_error:
            raise self.verify_error
        return self.verdict

    async def get_credits(self):
        return ProviderCredits(provider=self.name, available=100, used=0)


@pytest.fixture
def fake_provider():
    return FakeContactProvider


@pytest.fixture
def make_contact():
    def _make(email, source="hunter", confidence=80, **kwargs):
        return ContactRecord(email=email, source=source, confidence=confidence, **kwargs)
    return _make


@pytest.fixture
def valid_verdict():
    return EmailVerdict(status="valid", score=95)


@pytest.fixture
def now():
    return datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep developer credentials and overrides out of the tests."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
