"""Hunter.io contact discovery. Authenticates with an API key query parameter."""
from typing import Any, List, Optional

import httpx

from core.errors import ProviderNotConfiguredError, ProviderResponseError
from models.contact import CompanyProfile, ContactRecord, DomainSearchResult, EmailVerdict, ProviderCredits
from providers.base import DEFAULT_PROVIDER_TIMEOUT, ContactProvider, as_dict, as_int, as_list

HUNTER_BASE_URL = "https://api.hunter.io/v2"
SOCIAL_FIELDS = ("linkedin", "twitter", "facebook", "instagram", "youtube")


class HunterProvider(ContactProvider):
    name = "hunter"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = HUNTER_BASE_URL,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self._api_key = api_key or None
        self.base_url = base_url.rstrip("/")

    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def search_domain(self, domain: str, limit: int) -> DomainSearchResult:
        data = await self._get("/domain-search", {"domain": domain, "limit": limit})
        result = as_dict(data.get("data"))
        if not result and "data" not in data:
            raise ProviderResponseError(self.name, "domain search returned no data section")

        contacts: List[ContactRecord] = []
        phones: List[str] = []
        for entry in as_list(result.get("emails")):
            entry = as_dict(entry)
            email = str(entry.get("value") or "").strip()
            if not email:
                continue
            phone = entry.get("phone_number") or None
            if phone and phone not in phones:
                phones.append(phone)
            contacts.append(
                ContactRecord(
                    email=email,
                    source=self.name,
                    confidence=_bounded(entry.get("confidence")),
                    first_name=entry.get("first_name") or None,
                    last_name=entry.get("last_name") or None,
                    position=entry.get("position") or None,
                    department=entry.get("department") or None,
                    linkedin=entry.get("linkedin") or None,
                    phone=phone,
                )
            )
        contacts.sort(key=lambda c: c.confidence, reverse=True)

        social = {field: result[field] for field in SOCIAL_FIELDS if result.get(field)}
        company = CompanyProfile(
            organization=result.get("organization") or None,
            industry=result.get("industry") or None,
            phones=tuple(phones),
            social_media=social,
        )
        total = as_int(as_dict(data.get("meta")).get("results")) or len(contacts)
        self.logger.debug(f"Hunter found {len(contacts)} emails for {domain} ({total} total)")
        return DomainSearchResult(contacts=tuple(contacts[:limit]), company=company, total_results=total)

    async def verify_email(self, email: str) -> Optional[EmailVerdict]:
        data = await self._get("/email-verifier", {"email": email})
        result = as_dict(data.get("data"))
        status = result.get("status") or result.get("result")
        if not status:
            return None
        return EmailVerdict(status=str(status), score=as_int(result.get("score")))

    async def get_credits(self) -> ProviderCredits:
        data = await self._get("/account", {})
        searches = as_dict(as_dict(as_dict(data.get("data")).get("requests")).get("searches"))
        return ProviderCredits(
            provider=self.name,
            available=as_int(searches.get("available")) or 0,
            used=as_int(searches.get("used")) or 0,
        )

    async def _get(self, path: str, params: dict) -> dict:
        if not self.is_configured():
            raise ProviderNotConfiguredError(self.name, "HUNTER_API_KEY not configured")
        data = await self._request_json("GET", f"{self.base_url}{path}", params={**params, "api_key": self._api_key})
        if not isinstance(data, dict):
            raise ProviderResponseError(self.name, f"unexpected payload from {path}")
        return data


def _bounded(value: Any) -> int:
    """Clamp a provider confidence into 0-100."""
    number = as_int(value) or 0
    return max(0, min(100, number))
