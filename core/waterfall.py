import logging
from typing import List, Optional, Set

from core.errors import ProviderError, ProviderNotConfiguredError
from models.contact import (
    CompanyProfile,
    ContactRecord,
    DiscoveryResult,
    DomainSearchResult,
    EmailVerification,
    ProviderFailure,
)
from models.enrichment import PreferredSource
from providers.base import ContactProvider

DEFAULT_MAX_RESULTS = 5

logger = logging.getLogger(__name__)


def estimate_company_size(email_count: int) -> str:
    """Rough headcount bucket from the number of addresses a provider knows."""
    if email_count >= 50:
        return "200+ employees"
    if email_count >= 20:
        return "50-200 employees"
    if email_count >= 10:
        return "10-50 employees"
    if email_count >= 5:
        return "5-10 employees"
    return "1-5 employees"


class ContactDiscoveryWaterfall:
    """Queries two contact providers in priority order until a quota is filled.

    The second provider is only asked for the deficit left by the first.
    ``dominant_source`` names the second provider whenever it contributed at
    least one accepted contact ("which provider saved the query"), otherwise
    the first.
    """

    def __init__(self, first: Optional[ContactProvider], second: Optional[ContactProvider]):
        self.first = first
        self.second = second

    async def discover(
        self,
        domain: str,
        preferred_source: PreferredSource = PreferredSource.BOTH,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> DiscoveryResult:
        preferred_source = PreferredSource(preferred_source)
        contacts: List[ContactRecord] = []
        seen: Set[str] = set()
        failures: List[ProviderFailure] = []
        company: Optional[CompanyProfile] = None
        second_contributed = False

        if max_results <= 0:
            return DiscoveryResult(dominant_source=self._name(self.first))

        if preferred_source.wants_first and self._usable(self.first):
            result = await self._search(self.first, domain, max_results, failures)
            if result is not None:
                self._accept(result.contacts, contacts, seen, max_results)
                company = _merge_company(company, result)

        if len(contacts) < max_results and preferred_source.wants_second and self._usable(self.second):
            deficit = max_results - len(contacts)
            logger.debug(f"{len(contacts)}/{max_results} contacts for {domain}, asking {self.second.name} for {deficit}")
            result = await self._search(self.second, domain, deficit, failures)
            if result is not None:
                second_contributed = self._accept(result.contacts, contacts, seen, max_results) > 0
                company = _merge_company(company, result)

        dominant = self._name(self.second) if second_contributed else self._name(self.first)
        # Stable sort keeps provider order among equal confidences
        contacts.sort(key=lambda c: c.confidence, reverse=True)

        logger.info(f"Discovered {len(contacts)} contact(s) for {domain} (source: {dominant})")
        return DiscoveryResult(
            contacts=tuple(contacts),
            dominant_source=dominant,
            company=company,
            failures=tuple(failures),
        )

    async def verify_email(self, email: str) -> EmailVerification:
        """Ask the first provider, falling back to the second when it has no verdict.

        When nobody can verify, the answer is a definite negative with
        source "none".
        """
        for provider in (self.first, self.second):
            if not self._usable(provider):
                continue
            try:
                verdict = await provider.verify_email(email)
            except ProviderError as e:
                logger.warning(f"Email verification via {provider.name} failed: {e.reason}")
                continue
            if verdict is None:
                logger.debug(f"{provider.name} had no verdict for the address")
                continue
            return EmailVerification(
                valid=verdict.status == "valid",
                score=verdict.score,
                source=provider.name,
            )
        return EmailVerification(valid=False, source="none")

    @staticmethod
    def _usable(provider: Optional[ContactProvider]) -> bool:
        return provider is not None and provider.is_configured()

    @staticmethod
    def _name(provider: Optional[ContactProvider]) -> Optional[str]:
        return provider.name if provider is not None else None

    @staticmethod
    def _accept(candidates, contacts: List[ContactRecord], seen: Set[str], max_results: int) -> int:
        """Append unseen candidates in order until full; return how many were taken."""
        accepted = 0
        for contact in candidates:
            if len(contacts) >= max_results:
                break
            if contact.key in seen:
                continue
            seen.add(contact.key)
            contacts.append(contact)
            accepted += 1
        return accepted

    @staticmethod
    async def _search(provider: ContactProvider, domain: str, limit: int,
                      failures: List[ProviderFailure]) -> Optional[DomainSearchResult]:
        try:
            return await provider.search_domain(domain, limit)
        except ProviderNotConfiguredError:
            return None
        except ProviderError as e:
            logger.warning(f"Contact search via {provider.name} failed for {domain}: {e.reason}")
            failures.append(ProviderFailure(provider=provider.name, reason=e.reason))
            return None


def _merge_company(current: Optional[CompanyProfile], result: DomainSearchResult) -> Optional[CompanyProfile]:
    """Fill gaps in ``current`` from a later provider; earlier values win."""
    incoming = result.company
    if incoming is None or not _has_company_data(incoming):
        return current

    size = incoming.company_size
    if size is None and incoming.organization:
        size = estimate_company_size(result.total_results)

    if current is None:
        return CompanyProfile(
            organization=incoming.organization,
            industry=incoming.industry,
            company_size=size,
            phones=incoming.phones,
            social_media=dict(incoming.social_media),
        )

    phones = list(current.phones)
    phones.extend(p for p in incoming.phones if p not in phones)
    social = dict(incoming.social_media)
    social.update(current.social_media)
    return CompanyProfile(
        organization=current.organization or incoming.organization,
        industry=current.industry or incoming.industry,
        company_size=current.company_size or size,
        phones=tuple(phones),
        social_media=social,
    )


def _has_company_data(profile: CompanyProfile) -> bool:
    return bool(
        profile.organization or profile.industry or profile.company_size
        or profile.phones or any(profile.social_media.values())
    )
