from dataclasses import dataclass, field
from typing import Optional, Tuple, Dict, Any, List


@dataclass(frozen=True)
class ContactRecord:
    """A discovered contact. ``email`` is the case-insensitive identity."""
    email: str
    source: str
    confidence: int = 0
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    linkedin: Optional[str] = None
    phone: Optional[str] = None

    @property
    def key(self) -> str:
        return self.email.strip().lower()

    @property
    def name(self) -> Optional[str]:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "email": self.email,
            "name": self.name,
            "position": self.position,
            "department": self.department,
            "linkedin": self.linkedin,
            "phone": self.phone,
            "source": self.source,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class CompanyProfile:
    """Company-level data returned alongside a domain search."""
    organization: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    phones: Tuple[str, ...] = ()
    social_media: Dict[str, str] = field(default_factory=dict)

    @property
    def linkedin(self) -> Optional[str]:
        return self.social_media.get("linkedin")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "organization": self.organization,
            "industry": self.industry,
            "companySize": self.company_size,
            "phones": list(self.phones),
            "socialMedia": dict(self.social_media),
        }


@dataclass(frozen=True)
class DomainSearchResult:
    """One provider's answer to a domain search."""
    contacts: Tuple[ContactRecord, ...] = ()
    company: Optional[CompanyProfile] = None
    total_results: int = 0


@dataclass(frozen=True)
class ProviderFailure:
    provider: str
    reason: str

    def __str__(self) -> str:
        return f"{self.provider}: {self.reason}"


@dataclass(frozen=True)
class DiscoveryResult:
    """Merged output of the contact discovery waterfall."""
    contacts: Tuple[ContactRecord, ...] = ()
    dominant_source: Optional[str] = None
    company: Optional[CompanyProfile] = None
    failures: Tuple[ProviderFailure, ...] = ()

    @property
    def emails(self) -> List[str]:
        return [c.email for c in self.contacts]


@dataclass(frozen=True)
class EmailVerdict:
    """A provider's raw verification answer."""
    status: str
    score: Optional[int] = None


@dataclass(frozen=True)
class EmailVerification:
    valid: bool
    source: str
    score: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"valid": self.valid, "source": self.source}
        if self.score is not None:
            data["score"] = self.score
        return data


@dataclass(frozen=True)
class ProviderCredits:
    """Remaining quota as reported by a provider."""
    provider: str
    available: Optional[int] = None
    used: Optional[int] = None
