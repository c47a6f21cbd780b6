import re

from core.errors import InvalidDomainError

_SCHEME_RE = re.compile(r'^[a-z][a-z0-9+.-]*://', re.IGNORECASE)
# Hostname labels: letters, digits and hyphens, dot separated, optional port
_HOSTNAME_RE = re.compile(r'^(?=.{1,253}$)([a-z0-9_](?:[a-z0-9_-]{0,61}[a-z0-9])?)(\.[a-z0-9_](?:[a-z0-9_-]{0,61}[a-z0-9])?)*(:\d{1,5})?$')


def normalize_domain(domain: str) -> str:
    """Reduce user input to a bare lowercase hostname.

    Strips the scheme, a leading "www.", any path/query/fragment suffix and
    surrounding whitespace. Raises InvalidDomainError for blank or
    unparseable input.

    Examples:
        - "https://www.Example.com/about" -> "example.com"
        - "  shop.example.co.uk  " -> "shop.example.co.uk"
    """
    if domain is None or not isinstance(domain, str):
        raise InvalidDomainError("Domain must be a non-empty string")

    cleaned = domain.strip().lower()
    cleaned = _SCHEME_RE.sub("", cleaned)
    cleaned = re.sub(r'^www\.', "", cleaned)
    cleaned = re.split(r'[/?#]', cleaned, maxsplit=1)[0]
    cleaned = cleaned.strip().rstrip(".")

    if not cleaned:
        raise InvalidDomainError(f"Blank domain: {domain!r}")
    if "@" in cleaned or not _HOSTNAME_RE.match(cleaned):
        raise InvalidDomainError(f"Unparseable domain: {domain!r}")
    return cleaned


def domain_tld(domain: str) -> str:
    """Return the last label with a leading dot, e.g. ".com"."""
    return "." + domain.rsplit(".", 1)[-1]
