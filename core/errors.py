"""Exception hierarchy for the enrichment engine."""
from typing import Optional


class EnrichmentError(Exception):
    """Base class for all engine errors."""


class InvalidDomainError(EnrichmentError, ValueError):
    """Raised when a domain is blank or cannot be parsed."""


class SignatureRegistryError(EnrichmentError):
    """Raised at startup when the technology signature rules are invalid."""


class ConfigurationError(EnrichmentError):
    """Raised for malformed configuration values or override files."""


class ProviderError(EnrichmentError):
    """Base class for failures talking to an external provider."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.reason = message
        self.status_code = status_code


class ProviderNotConfiguredError(ProviderError):
    """The provider has no credentials. Degraded capability, not a failure."""


class ProviderTransportError(ProviderError):
    """Network error, timeout or non-success HTTP status."""


class ProviderResponseError(ProviderError):
    """The transport succeeded but the payload reports a failure."""
