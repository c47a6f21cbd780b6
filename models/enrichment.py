from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from models.contact import CompanyProfile, ContactRecord
from models.detection import DetectionResult
from models.lead import LeadRecord
from models.registration import RegistrationRecord
from models.scoring import ScoreBreakdown


class PreferredSource(str, Enum):
    """Which contact providers the waterfall may query."""
    FIRST = "first"
    SECOND = "second"
    BOTH = "both"

    @property
    def wants_first(self) -> bool:
        return self in (PreferredSource.FIRST, PreferredSource.BOTH)

    @property
    def wants_second(self) -> bool:
        return self in (PreferredSource.SECOND, PreferredSource.BOTH)


@dataclass(frozen=True)
class EnrichmentOptions:
    skip_registration: bool = False
    skip_tech_stack: bool = False
    skip_contacts: bool = False
    preferred_source: PreferredSource = PreferredSource.BOTH
    max_emails: Optional[int] = None # Falls back to the configured default


@dataclass(frozen=True)
class EnrichmentResult:
    """Best-effort aggregate for one domain. Always structurally valid."""
    domain: str
    score: ScoreBreakdown
    registration: Optional[RegistrationRecord] = None
    tech_stack: Optional[DetectionResult] = None
    contacts: Tuple[ContactRecord, ...] = ()
    contact_source: Optional[str] = None
    company: Optional[CompanyProfile] = None
    errors: Tuple[str, ...] = field(default_factory=tuple)

    def to_record(self) -> LeadRecord:
        return LeadRecord(
            domain=self.domain,
            registration=self.registration,
            tech_stack=self.tech_stack,
            contacts=self.contacts,
            company=self.company,
            lead_score=self.score.total,
        )

    def to_dict(self) -> Dict[str, Any]:
        contacts: List[Dict[str, Any]] = [c.to_dict() for c in self.contacts]
        return {
            "domain": self.domain,
            "registration": self.registration.to_dict() if self.registration else None,
            "techStack": self.tech_stack.to_dict() if self.tech_stack else None,
            "contacts": contacts,
            "contactSource": self.contact_source,
            "company": self.company.to_dict() if self.company else None,
            "score": self.score.to_dict(),
            "errors": list(self.errors),
        }
