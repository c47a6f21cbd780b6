from dataclasses import dataclass
from typing import Optional, Tuple

from models.contact import CompanyProfile, ContactRecord
from models.detection import DetectionResult
from models.registration import RegistrationRecord


@dataclass(frozen=True)
class LeadRecord:
    """Evidence about one domain, as consumed by scoring and filtering."""
    domain: str
    registration: Optional[RegistrationRecord] = None
    tech_stack: Optional[DetectionResult] = None
    contacts: Tuple[ContactRecord, ...] = ()
    company: Optional[CompanyProfile] = None
    lead_score: Optional[int] = None # Precomputed total, if any

    @property
    def registered_date(self) -> Optional[str]:
        return self.registration.creation_date if self.registration else None

    @property
    def emails(self) -> Tuple[str, ...]:
        return tuple(c.email for c in self.contacts)
