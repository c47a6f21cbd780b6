import logging
from typing import Iterable, List, Optional, Sequence

from core.dates import parse_date
from core.domains import domain_tld
from core.scoring import ScoringEngine
from models.filters import DateLike, FilterSpec
from models.lead import LeadRecord

logger = logging.getLogger(__name__)


class FilterEvaluator:
    """Checks leads against a :class:`FilterSpec`.

    A record passes when every predicate set on the FilterSpec holds.
    Predicates that need evidence the record does not carry (tech stack,
    registration date) are skipped rather than failed.
    """

    def __init__(self, scorer: Optional[ScoringEngine] = None):
        self.scorer = scorer or ScoringEngine()

    def evaluate(self, record: LeadRecord, spec: FilterSpec) -> bool:
        checks = (
            self._check_tlds,
            self._check_technologies,
            self._check_excluded_technologies,
            self._check_features,
            self._check_registration_dates,
            self._check_countries,
            self._check_min_score,
            self._check_keywords,
        )
        for check in checks:
            if not check(record, spec):
                logger.debug(f"{record.domain} rejected by {check.__name__.lstrip('_')}")
                return False
        return True

    def filter_records(self, records: Iterable[LeadRecord], spec: FilterSpec) -> List[LeadRecord]:
        return [r for r in records if self.evaluate(r, spec)]

    @staticmethod
    def _check_tlds(record: LeadRecord, spec: FilterSpec) -> bool:
        if not spec.tlds:
            return True
        wanted = {t.lower() if t.startswith(".") else f".{t.lower()}" for t in spec.tlds}
        return domain_tld(record.domain or "").lower() in wanted

    @staticmethod
    def _check_technologies(record: LeadRecord, spec: FilterSpec) -> bool:
        if not spec.technologies or record.tech_stack is None:
            return True
        return _mentions_any(record.tech_stack.technologies(), spec.technologies)

    @staticmethod
    def _check_excluded_technologies(record: LeadRecord, spec: FilterSpec) -> bool:
        if not spec.exclude_technologies or record.tech_stack is None:
            return True
        return not _mentions_any(record.tech_stack.technologies(), spec.exclude_technologies)

    @staticmethod
    def _check_features(record: LeadRecord, spec: FilterSpec) -> bool:
        tech = record.tech_stack
        if tech is None:
            return True
        if spec.has_contact_form is not None and tech.has_contact_form != spec.has_contact_form:
            return False
        if spec.has_live_chat is not None and tech.has_live_chat != spec.has_live_chat:
            return False
        return True

    @staticmethod
    def _check_registration_dates(record: LeadRecord, spec: FilterSpec) -> bool:
        if spec.registered_after is None and spec.registered_before is None:
            return True
        registered = parse_date(record.registered_date)
        if registered is None:
            return True
        after = _bound(spec.registered_after, "registered_after")
        before = _bound(spec.registered_before, "registered_before")
        if after is not None and not registered > after:
            return False
        if before is not None and not registered < before:
            return False
        return True

    @staticmethod
    def _check_countries(record: LeadRecord, spec: FilterSpec) -> bool:
        if not spec.countries or record.registration is None:
            return True
        country = record.registration.registrant_country
        if not country:
            return False
        return country.upper() in {c.upper() for c in spec.countries}

    def _check_min_score(self, record: LeadRecord, spec: FilterSpec) -> bool:
        if spec.min_score is None:
            return True
        score = record.lead_score
        if score is None:
            score = self.scorer.score(record).total
        return score >= spec.min_score

    @staticmethod
    def _check_keywords(record: LeadRecord, spec: FilterSpec) -> bool:
        if not spec.keywords or not record.domain:
            return True
        domain = record.domain.lower()
        return any(k.lower() in domain for k in spec.keywords)


def _mentions_any(technologies: Sequence[str], needles: Sequence[str]) -> bool:
    lowered = [t.lower() for t in technologies]
    return any(n.lower() in tech for n in needles for tech in lowered)


def _bound(value: Optional[DateLike], label: str):
    if value is None:
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"Unparseable {label} date: {value!r}")
    return parsed
