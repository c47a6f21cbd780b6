"""Deterministic lead scoring.

Every rule adds a signed amount to one of six subscores and appends a
human-readable factor. The total is the subscore sum clamped once to
[0, 100]; clamping each subscore separately gives different totals.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Dict, List, Optional

from core.dates import parse_date
from models.lead import LeadRecord
from models.scoring import ScoreBreakdown, ScoringConfig

MIN_SCORE = 0
MAX_SCORE = 100

logger = logging.getLogger(__name__)


def days_between(start: datetime, end: datetime) -> int:
    """Whole days between two instants, rounded up."""
    seconds = abs((end - start).total_seconds())
    return math.ceil(seconds / 86400)


class _Tally:
    """Accumulates one subscore and writes factors into the shared list."""

    def __init__(self, factors: List[str]):
        self.value = 0
        self._factors = factors

    def add(self, amount: int, factor: Optional[str] = None):
        self.value += amount
        if factor:
            self._factors.append(factor)


class ScoringEngine:
    """Pure scorer over a :class:`LeadRecord`.

    The same record, config and ``now`` always produce the same breakdown,
    factor order included.
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()

    def score(self, record: LeadRecord, now: Optional[datetime] = None) -> ScoreBreakdown:
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        factors: List[str] = []
        domain_age = _Tally(factors)
        registration = _Tally(factors)
        target = _Tally(factors)
        tech = _Tally(factors)
        contact = _Tally(factors)
        spam = _Tally(factors)

        self._score_domain_age(record, now, domain_age)
        self._score_registration(record, registration, target)
        self._score_tech_stack(record, tech)
        self._score_contacts(record, contact)
        spam_hit = self._score_spam(record, spam)

        raw_total = (
            domain_age.value + registration.value + tech.value
            + contact.value + target.value + spam.value
        )
        total = max(MIN_SCORE, min(MAX_SCORE, raw_total))
        # Spam domains must land on 0 even when every other factor is maximal
        if spam_hit and self.config.penalties.spam_vetoes_total:
            total = MIN_SCORE

        logger.debug(f"Scored {record.domain}: raw={raw_total} total={total}")
        return ScoreBreakdown(
            domain_age=domain_age.value,
            registration_quality=registration.value,
            tech_stack_quality=tech.value,
            contact_quality=contact.value,
            target_match=target.value,
            spam_penalty=spam.value,
            total=total,
            factors=tuple(factors),
        )

    def _score_domain_age(self, record: LeadRecord, now: datetime, tally: _Tally):
        created = parse_date(record.registered_date)
        if created is None:
            return

        weights = self.config.domain_age
        days = days_between(created, now)
        if days < 7:
            tally.add(weights.under_7_days, "Very fresh domain (< 7 days)")
        elif days < 30:
            tally.add(weights.under_30_days, "Fresh domain (< 30 days)")
        elif days < 90:
            tally.add(weights.under_90_days, "Recent domain (< 90 days)")
        elif days < 365:
            tally.add(weights.under_1_year, "Relatively new domain (< 1 year)")
        else:
            tally.add(weights.older, "Established domain")

    def _score_registration(self, record: LeadRecord, tally: _Tally, target: _Tally):
        reg = record.registration
        if reg is None:
            return

        weights = self.config.registration
        if reg.has_registrar:
            tally.add(weights.has_registrar, f"Registrar: {reg.registrar}")
        if reg.registrant_org:
            tally.add(weights.has_org_name, f"Organization: {reg.registrant_org}")
        if reg.registrant_email:
            tally.add(weights.has_email, "Has registrant email")
            if self._is_privacy_protected(reg.registrant_email):
                tally.add(self.config.penalties.privacy_protected, "Privacy-protected WHOIS")
        if reg.registrant_country:
            country = reg.registrant_country.upper()
            tally.add(weights.has_country, f"Registrant country: {country}")
            if country in {c.upper() for c in weights.target_countries}:
                target.add(weights.target_country_bonus, f"Target country: {country}")

    def _score_tech_stack(self, record: LeadRecord, tally: _Tally):
        tech = record.tech_stack
        weights = self.config.tech_stack
        if tech is None or tech.is_empty:
            tally.add(weights.no_tech_stack, "No detectable tech stack")
            return

        if tech.cms:
            valuable = {p.lower() for p in weights.valuable_platforms}
            if tech.cms.lower() in valuable:
                tally.add(weights.valuable_platform_score, f"Valuable CMS: {tech.cms}")
            else:
                tally.add(weights.any_cms, f"CMS: {tech.cms}")
        if tech.ecommerce:
            tally.add(weights.ecommerce, f"E-commerce: {tech.ecommerce}")
        if tech.frameworks:
            tally.add(weights.has_framework, f"Frameworks: {', '.join(tech.frameworks)}")
        if tech.analytics:
            tally.add(weights.has_analytics, "Has analytics")
        if tech.marketing:
            tally.add(weights.has_marketing, f"Marketing tools: {', '.join(tech.marketing)}")
        if tech.has_contact_form:
            tally.add(weights.has_contact_form, "Has contact form")
        if tech.has_live_chat:
            tally.add(weights.has_live_chat, "Has live chat")

    def _score_contacts(self, record: LeadRecord, tally: _Tally):
        weights = self.config.contact
        emails = record.emails
        if emails:
            tally.add(weights.has_emails, f"Has {len(emails)} email(s)")
            if len(emails) > 1:
                tally.add(weights.multiple_emails, "Multiple emails")
            if any(self._is_generic(e) for e in emails):
                tally.add(self.config.penalties.generic_email, "Has generic email (info@, contact@, etc.)")

        phones = list(record.company.phones) if record.company else []
        phones.extend(c.phone for c in record.contacts if c.phone)
        if phones:
            tally.add(weights.has_phone, "Has phone number")

        social = self._social_links(record)
        if social.get("linkedin"):
            tally.add(weights.has_linkedin, "Has LinkedIn")
        if social:
            tally.add(weights.has_social_media, f"Has {len(social)} social profile(s)")

    def _score_spam(self, record: LeadRecord, tally: _Tally) -> bool:
        domain = (record.domain or "").lower()
        if any(indicator.lower() in domain for indicator in self.config.penalties.spam_indicators):
            tally.add(self.config.penalties.spam_penalty, "Spam indicator detected")
            return True
        return False

    def _is_privacy_protected(self, email: str) -> bool:
        lowered = email.lower()
        return any(indicator.lower() in lowered for indicator in self.config.penalties.privacy_indicators)

    def _is_generic(self, email: str) -> bool:
        lowered = email.strip().lower()
        return any(lowered.startswith(prefix.lower()) for prefix in self.config.penalties.generic_prefixes)

    @staticmethod
    def _social_links(record: LeadRecord) -> Dict[str, str]:
        links = {}
        if record.company:
            links = {k: v for k, v in record.company.social_media.items() if v}
        if "linkedin" not in links:
            profile = next((c.linkedin for c in record.contacts if c.linkedin), None)
            if profile:
                links["linkedin"] = profile
        return links
