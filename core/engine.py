import asyncio
import logging
from typing import List, Optional, Tuple

from core.classifier import SignatureClassifier
from core.config import DEFAULT_MAX_EMAILS, Settings
from core.domains import normalize_domain
from core.scoring import ScoringEngine
from core.waterfall import ContactDiscoveryWaterfall
from models.contact import DiscoveryResult, EmailVerification
from models.detection import DetectionResult
from models.enrichment import EnrichmentOptions, EnrichmentResult
from models.lead import LeadRecord
from models.registration import RegistrationRecord
from providers.hunter import HunterProvider
from providers.snov import SnovProvider
from providers.whoxy import RegistrationLookup


class EnrichmentOrchestrator:
    """Runs every enrichment step for one domain and scores the result.

    Registration lookup and tech stack detection run concurrently; contact
    discovery starts once both have settled. A failing step is recorded in
    ``errors`` and never stops its siblings.
    """

    def __init__(
        self,
        classifier: SignatureClassifier,
        registration: RegistrationLookup,
        waterfall: ContactDiscoveryWaterfall,
        scorer: Optional[ScoringEngine] = None,
        default_max_emails: int = DEFAULT_MAX_EMAILS,
    ):
        self.logger = logging.getLogger(__name__)
        self.classifier = classifier
        self.registration = registration
        self.waterfall = waterfall
        self.scorer = scorer or ScoringEngine()
        self.default_max_emails = default_max_emails

    @classmethod
    def from_settings(cls, settings: Settings) -> "EnrichmentOrchestrator":
        """Build all components from configuration, each with its own credentials."""
        first = HunterProvider(api_key=settings.hunter_api_key)
        second = SnovProvider(
            client_id=settings.snov_client_id,
            client_secret=settings.snov_client_secret,
            api_key=settings.snov_api_key,
        )
        return cls(
            classifier=SignatureClassifier(timeout_ms=settings.tech_stack_timeout_ms),
            registration=RegistrationLookup(api_key=settings.whoxy_api_key),
            waterfall=ContactDiscoveryWaterfall(first, second),
            scorer=ScoringEngine(settings.scoring),
            default_max_emails=settings.default_max_emails,
        )

    async def enrich(self, domain: str, options: Optional[EnrichmentOptions] = None) -> EnrichmentResult:
        """Enrich one domain.

        Raises InvalidDomainError for blank or unparseable input. Any other
        failure is reported in ``EnrichmentResult.errors``.
        """
        options = options or EnrichmentOptions()
        domain = normalize_domain(domain)
        errors: List[str] = []
        self.logger.info(f"Enriching {domain}")

        (registration, registration_errors), (tech_stack, tech_errors) = await asyncio.gather(
            self._lookup_registration(domain, options),
            self._detect_tech_stack(domain, options),
        )
        errors.extend(registration_errors)
        errors.extend(tech_errors)

        discovery = DiscoveryResult()
        if not options.skip_contacts:
            discovery, contact_errors = await self._discover_contacts(domain, options)
            errors.extend(contact_errors)

        record = LeadRecord(
            domain=domain,
            registration=registration,
            tech_stack=tech_stack,
            contacts=discovery.contacts,
            company=discovery.company,
        )
        score = self.scorer.score(record)
        self.logger.info(f"Enriched {domain}: score={score.total}, errors={len(errors)}")

        return EnrichmentResult(
            domain=domain,
            score=score,
            registration=registration,
            tech_stack=tech_stack,
            contacts=discovery.contacts,
            contact_source=discovery.dominant_source if discovery.contacts else None,
            company=discovery.company,
            errors=tuple(errors),
        )

    async def verify_email(self, email: str) -> EmailVerification:
        return await self.waterfall.verify_email(email)

    async def _lookup_registration(
        self, domain: str, options: EnrichmentOptions
    ) -> Tuple[Optional[RegistrationRecord], List[str]]:
        if options.skip_registration or not self.registration.is_configured():
            return None, []
        try:
            record = await self.registration.lookup(domain)
        except Exception as e:
            self.logger.error(f"Registration lookup for {domain} raised: {e}", exc_info=True)
            return None, [f"Registration error: {e}"]
        if record is None:
            return None, ["Registration lookup returned no data"]
        return record, []

    async def _detect_tech_stack(
        self, domain: str, options: EnrichmentOptions
    ) -> Tuple[Optional[DetectionResult], List[str]]:
        if options.skip_tech_stack:
            return None, []
        try:
            result = await self.classifier.detect_domain(domain)
        except Exception as e:
            self.logger.error(f"Tech stack detection for {domain} raised: {e}", exc_info=True)
            return None, [f"Tech stack error: {e}"]
        if result is None:
            return None, ["Tech stack detection failed (site may be offline)"]
        return result, []

    async def _discover_contacts(
        self, domain: str, options: EnrichmentOptions
    ) -> Tuple[DiscoveryResult, List[str]]:
        max_emails = options.max_emails if options.max_emails is not None else self.default_max_emails
        try:
            discovery = await self.waterfall.discover(
                domain,
                preferred_source=options.preferred_source,
                max_results=max_emails,
            )
        except Exception as e:
            self.logger.error(f"Contact discovery for {domain} raised: {e}", exc_info=True)
            return DiscoveryResult(), [f"Contact discovery error: {e}"]
        errors = [f"Contact discovery error: {failure}" for failure in discovery.failures]
        return discovery, errors
