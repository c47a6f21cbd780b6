"""Snov.io contact discovery. Authenticates with an OAuth client-credentials token."""
import asyncio
from typing import Callable, List, Optional

import httpx

from core.cache import TTLCache, utcnow
from core.errors import ProviderNotConfiguredError, ProviderResponseError
from models.contact import CompanyProfile, ContactRecord, DomainSearchResult, EmailVerdict, ProviderCredits
from providers.base import DEFAULT_PROVIDER_TIMEOUT, ContactProvider, as_dict, as_int, as_list

SNOV_BASE_URL = "https://api.snov.io/v1"
# Refresh the token this many seconds before its reported expiry
TOKEN_REFRESH_MARGIN_SECONDS = 60
# Snov reports a status instead of a score; verified entries get this confidence
VALID_EMAIL_CONFIDENCE = 90
# Verification is queued server-side; wait this long before reading the result
DEFAULT_VERIFY_POLL_DELAY = 2.0

_TOKEN_KEY = "access_token"


class SnovProvider(ContactProvider):
    """Snov.io provider.

    ``api_key`` alone may serve as both client id and secret; some Snov
    accounts are issued a single key.
    """

    name = "snov"

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: str = SNOV_BASE_URL,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        verify_poll_delay: float = DEFAULT_VERIFY_POLL_DELAY,
        clock: Callable = utcnow,
    ):
        super().__init__(timeout=timeout, transport=transport)
        if not client_id and api_key:
            client_id = api_key
            client_secret = api_key
        self._client_id = client_id or None
        self._client_secret = client_secret or None
        self.base_url = base_url.rstrip("/")
        self.verify_poll_delay = verify_poll_delay
        self._tokens = TTLCache(clock=clock)

    def is_configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    async def _access_token(self) -> str:
        token = self._tokens.get(_TOKEN_KEY)
        if token:
            return token
        if not self.is_configured():
            raise ProviderNotConfiguredError(self.name, "Snov.io credentials not configured")

        data = await self._request_json(
            "POST",
            f"{self.base_url}/oauth/access_token",
            json={
                "grant_type": "client_credentials",
                "client_id": self._client_id,
                "client_secret": self._client_secret,
            },
        )
        data = as_dict(data)
        token = data.get("access_token")
        if not token:
            raise ProviderResponseError(self.name, "token response carried no access_token")

        expires_in = as_int(data.get("expires_in")) or 0
        self._tokens.set(_TOKEN_KEY, token, ttl_seconds=max(expires_in - TOKEN_REFRESH_MARGIN_SECONDS, 0))
        self.logger.debug(f"Obtained Snov.io access token (expires in {expires_in}s)")
        return token

    async def _authorized(self, method: str, path: str, **kwargs) -> dict:
        token = await self._access_token()
        headers = {"Authorization": f"Bearer {token}"}
        data = await self._request_json(method, f"{self.base_url}{path}", headers=headers, **kwargs)
        if not isinstance(data, dict):
            raise ProviderResponseError(self.name, f"unexpected payload from {path}")
        return data

    async def search_domain(self, domain: str, limit: int) -> DomainSearchResult:
        data = await self._authorized(
            "POST",
            "/get-domain-emails-with-info",
            json={"domain": domain, "type": "all", "limit": limit},
        )
        if data.get("success") is False:
            raise ProviderResponseError(self.name, str(data.get("message") or "domain search unsuccessful"))

        contacts: List[ContactRecord] = []
        for entry in as_list(data.get("emails")):
            entry = as_dict(entry)
            email = str(entry.get("email") or "").strip()
            # Only verified addresses are worth spending outreach on
            if not email or entry.get("status") != "valid":
                continue
            contacts.append(
                ContactRecord(
                    email=email,
                    source=self.name,
                    confidence=VALID_EMAIL_CONFIDENCE,
                    first_name=entry.get("firstName") or None,
                    last_name=entry.get("lastName") or None,
                    position=entry.get("position") or None,
                )
            )

        company = CompanyProfile(organization=data.get("companyName") or None)
        total = as_int(data.get("result")) or len(as_list(data.get("emails")))
        self.logger.debug(f"Snov.io found {len(contacts)} valid emails for {domain}")
        return DomainSearchResult(contacts=tuple(contacts[:limit]), company=company, total_results=total)

    async def verify_email(self, email: str) -> Optional[EmailVerdict]:
        await self._authorized("POST", "/add-emails-to-verification", json={"emails": [email]})
        await asyncio.sleep(self.verify_poll_delay)
        data = await self._authorized("POST", "/get-emails-verification-status", json={"emails": [email]})

        results = as_list(data.get("data"))
        if not data.get("success") or not results:
            return None
        status = as_dict(results[0]).get("result")
        return EmailVerdict(status=str(status)) if status else None

    async def get_credits(self) -> ProviderCredits:
        data = await self._authorized("GET", "/get-balance")
        balance = data.get("credits")
        if balance is None:
            balance = as_dict(data.get("data")).get("balance")
        return ProviderCredits(provider=self.name, available=as_int(balance) or 0)
