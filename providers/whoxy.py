"""Registration (WHOIS) lookup backed by the Whoxy API."""
from typing import Any, List, Optional

import httpx

from core.errors import ProviderError, ProviderNotConfiguredError, ProviderResponseError
from models.registration import RegistrationRecord, UNKNOWN_REGISTRAR
from providers.base import DEFAULT_PROVIDER_TIMEOUT, HttpProvider, as_dict, as_int, as_list

WHOXY_BASE_URL = "https://api.whoxy.com/"


class RegistrationLookup(HttpProvider):
    """Normalizes Whoxy WHOIS responses into RegistrationRecord.

    Whoxy reports success in the payload (``status == 1``) independently of
    the HTTP status; both are checked.
    """

    name = "whoxy"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = WHOXY_BASE_URL,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self._api_key = api_key or None
        self.base_url = base_url

    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def lookup(self, domain: str) -> Optional[RegistrationRecord]:
        """Return the registration record, or None on any failure."""
        if not self.is_configured():
            self.logger.debug("Whoxy API key not configured, skipping lookup")
            return None
        try:
            return await self.lookup_or_raise(domain)
        except ProviderResponseError as e:
            self.logger.warning(f"WHOIS lookup for {domain} rejected: {e.reason}")
        except ProviderError as e:
            self.logger.warning(f"WHOIS lookup for {domain} failed: {e.reason}")
        return None

    async def lookup_or_raise(self, domain: str) -> RegistrationRecord:
        """Like :meth:`lookup` but raises ProviderError subclasses on failure."""
        data = await self._call({"whois": domain})
        return parse_whois_payload(data)

    async def reverse_lookup(self, email: str) -> List[str]:
        """Domains registered with the given registrant email (empty on failure)."""
        if not self.is_configured():
            return []
        try:
            data = await self._call({"reverse": "whois", "email": email})
        except ProviderError as e:
            self.logger.warning(f"Reverse WHOIS lookup failed: {e.reason}")
            return []
        results = as_list(data.get("search_result"))
        return [r["domain_name"] for r in results if isinstance(r, dict) and r.get("domain_name")]

    async def get_balance(self) -> Optional[int]:
        """Remaining live WHOIS credits, or None when unknown."""
        if not self.is_configured():
            return None
        try:
            data = await self._request_json("GET", self.base_url, params={"key": self._api_key, "account": "balance"})
        except ProviderError as e:
            self.logger.warning(f"Whoxy balance check failed: {e.reason}")
            return None
        return as_int(as_dict(data).get("live_whois_balance")) or 0

    async def _call(self, params: dict) -> dict:
        if not self.is_configured():
            raise ProviderNotConfiguredError(self.name, "WHOXY_API_KEY not configured")
        data = await self._request_json("GET", self.base_url, params={"key": self._api_key, **params})
        if not isinstance(data, dict):
            raise ProviderResponseError(self.name, "unexpected payload shape")
        if as_int(data.get("status")) != 1:
            reason = data.get("status_reason") or "lookup unsuccessful"
            raise ProviderResponseError(self.name, str(reason))
        return data


def parse_whois_payload(data: Any) -> RegistrationRecord:
    """Map a successful Whoxy payload onto RegistrationRecord.

    Missing or malformed nested sections never raise; every field except the
    registrar falls back to None (registrar falls back to "Unknown").
    """
    data = as_dict(data)
    registrar = as_dict(data.get("domain_registrar"))
    registrant = as_dict(data.get("registrant_contact"))

    country = _clean(registrant.get("country_code"))
    name_servers = tuple(
        str(ns).strip().lower() for ns in as_list(data.get("name_servers")) if str(ns).strip()
    )

    return RegistrationRecord(
        registrar=_clean(registrar.get("registrar_name")) or UNKNOWN_REGISTRAR,
        creation_date=_clean(data.get("create_date")),
        expiration_date=_clean(data.get("expiry_date")),
        updated_date=_clean(data.get("update_date")),
        name_servers=name_servers,
        registrant_email=_clean(registrant.get("email_address")),
        registrant_org=_clean(registrant.get("company_name")) or _clean(registrant.get("full_name")),
        registrant_country=country.upper() if country else None,
    )


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
