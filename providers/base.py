"""Shared HTTP plumbing and the contact-provider capability."""
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from core.errors import ProviderResponseError, ProviderTransportError
from models.contact import DomainSearchResult, EmailVerdict, ProviderCredits

# Provider calls are bounded by the HTTP client timeout only
DEFAULT_PROVIDER_TIMEOUT = 30.0


class HttpProvider:
    """Base for JSON-over-HTTP providers.

    Every request opens a short-lived ``httpx.AsyncClient``. ``transport`` can
    be injected (e.g. ``httpx.MockTransport``) to run without the network.
    """

    name = "provider"

    def __init__(self, timeout: float = DEFAULT_PROVIDER_TIMEOUT, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.transport = transport
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _request_json(self, method: str, url: str, **kwargs) -> Any:
        """Perform one request and decode its JSON body.

        Raises:
            ProviderTransportError: network failure, timeout or non-2xx status
            ProviderResponseError: body is not valid JSON
        """
        try:
            async with self._client() as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise ProviderTransportError(self.name, f"timeout calling {_path(url)}: {e}") from e
        except httpx.HTTPError as e:
            raise ProviderTransportError(self.name, f"request to {_path(url)} failed: {e}") from e

        if not response.is_success:
            raise ProviderTransportError(
                self.name,
                f"HTTP {response.status_code} from {_path(url)}{_error_detail(response)}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderResponseError(self.name, f"invalid JSON from {_path(url)}") from e


class ContactProvider(HttpProvider, ABC):
    """A contact-discovery provider: search by domain, verify, report credits."""

    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials are present."""

    @abstractmethod
    async def search_domain(self, domain: str, limit: int) -> DomainSearchResult:
        """Return up to ``limit`` contacts, ordered by descending confidence."""

    @abstractmethod
    async def verify_email(self, email: str) -> Optional[EmailVerdict]:
        """Return the provider's verdict, or None when it has none."""

    @abstractmethod
    async def get_credits(self) -> ProviderCredits:
        """Remaining quota, for health reporting."""


def _path(url: str) -> str:
    # Query strings may carry API keys; keep them out of messages
    return url.split("?", 1)[0]


def _error_detail(response: httpx.Response) -> str:
    """Best-effort extraction of a provider error message."""
    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            detail = errors[0].get("details") or errors[0].get("id")
            if detail:
                return f": {detail}"
        for key in ("message", "error", "status_reason"):
            if isinstance(body.get(key), str):
                return f": {body[key]}"
    return ""


def as_dict(value: Any) -> dict:
    """Nested payload sections may be missing or null; treat them as empty."""
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def as_int(value: Any) -> Optional[int]:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None
