"""Scoring weights and the score breakdown produced by the scoring engine."""
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from core.errors import ConfigurationError


@dataclass(frozen=True)
class DomainAgeWeights:
    under_7_days: int = 25
    under_30_days: int = 20
    under_90_days: int = 15
    under_1_year: int = 10
    older: int = 5


@dataclass(frozen=True)
class RegistrationWeights:
    has_registrar: int = 5
    has_org_name: int = 10
    has_email: int = 8
    has_country: int = 5
    target_countries: Tuple[str, ...] = ("US", "CA", "UK", "AU", "DE", "FR", "NL")
    target_country_bonus: int = 10


@dataclass(frozen=True)
class TechStackWeights:
    valuable_platforms: Tuple[str, ...] = ("Shopify", "WooCommerce", "Magento", "BigCommerce", "WordPress")
    valuable_platform_score: int = 15
    any_cms: int = 5
    ecommerce: int = 15
    has_framework: int = 5
    has_analytics: int = 5
    has_marketing: int = 8
    has_contact_form: int = 10
    has_live_chat: int = 5
    no_tech_stack: int = -10


@dataclass(frozen=True)
class ContactWeights:
    has_emails: int = 15
    multiple_emails: int = 5
    has_phone: int = 5
    has_social_media: int = 5
    has_linkedin: int = 8


@dataclass(frozen=True)
class PenaltyWeights:
    generic_email: int = -5
    generic_prefixes: Tuple[str, ...] = (
        "info@", "contact@", "hello@", "support@", "sales@",
        "admin@", "office@", "mail@", "team@", "help@",
    )
    privacy_protected: int = -10
    privacy_indicators: Tuple[str, ...] = (
        "whoisguard", "privacyprotect", "whoisproxy", "domainsbyproxy",
        "privacy", "protected", "redacted", "withheld",
    )
    spam_indicators: Tuple[str, ...] = ("gambling", "casino", "adult", "xxx", "porn", "crypto-scam", "fake")
    spam_penalty: int = -50
    # A plain -50 cannot bring a maximal lead to 0, so a spam hit zeroes the total
    # after the clamp. Set to false for penalty-only behaviour.
    spam_vetoes_total: bool = True


_SECTIONS = {
    "domain_age": DomainAgeWeights,
    "registration": RegistrationWeights,
    "tech_stack": TechStackWeights,
    "contact": ContactWeights,
    "penalties": PenaltyWeights,
}


@dataclass(frozen=True)
class ScoringConfig:
    """All magnitudes used by :class:`core.scoring.ScoringEngine`."""
    domain_age: DomainAgeWeights = field(default_factory=DomainAgeWeights)
    registration: RegistrationWeights = field(default_factory=RegistrationWeights)
    tech_stack: TechStackWeights = field(default_factory=TechStackWeights)
    contact: ContactWeights = field(default_factory=ContactWeights)
    penalties: PenaltyWeights = field(default_factory=PenaltyWeights)

    @classmethod
    def from_overrides(cls, overrides: Optional[Mapping[str, Any]] = None) -> "ScoringConfig":
        """Build a config from partial overrides merged onto the defaults."""
        return cls().merged(overrides)

    def merged(self, overrides: Optional[Mapping[str, Any]] = None) -> "ScoringConfig":
        """Return a copy with ``overrides`` merged section by section.

        Unknown sections or fields raise ConfigurationError. Sequence values
        are stored as tuples so the result stays hashable and immutable.
        """
        if not overrides:
            return self
        if not isinstance(overrides, Mapping):
            raise ConfigurationError("Scoring overrides must be a mapping")

        changes: Dict[str, Any] = {}
        for section_name, section_values in overrides.items():
            if section_name not in _SECTIONS:
                raise ConfigurationError(f"Unknown scoring section: {section_name}")
            if section_values is None:
                continue
            if not isinstance(section_values, Mapping):
                raise ConfigurationError(f"Scoring section '{section_name}' must be a mapping")

            current = getattr(self, section_name)
            known = {f.name: f for f in fields(current)}
            section_changes: Dict[str, Any] = {}
            for key, value in section_values.items():
                if key not in known:
                    raise ConfigurationError(f"Unknown scoring field: {section_name}.{key}")
                default = getattr(current, key)
                section_changes[key] = _coerce(f"{section_name}.{key}", value, default)
            changes[section_name] = replace(current, **section_changes)

        return replace(self, **changes)


def _coerce(path: str, value: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ConfigurationError(f"{path} must be a boolean")
        return value
    if isinstance(default, tuple):
        if isinstance(value, str) or not isinstance(value, (list, tuple, set, frozenset)):
            raise ConfigurationError(f"{path} must be a list")
        return tuple(str(v) for v in value)
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(f"{path} must be an integer")
        return value
    return value


@dataclass(frozen=True)
class ScoreBreakdown:
    """Signed subscores, the clamped total and the factors that produced them."""
    domain_age: int = 0
    registration_quality: int = 0
    tech_stack_quality: int = 0
    contact_quality: int = 0
    target_match: int = 0
    spam_penalty: int = 0
    total: int = 0
    factors: Tuple[str, ...] = ()

    @property
    def raw_total(self) -> int:
        return (
            self.domain_age + self.registration_quality + self.tech_stack_quality
            + self.contact_quality + self.target_match + self.spam_penalty
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domainAge": self.domain_age,
            "registrationQuality": self.registration_quality,
            "techStackQuality": self.tech_stack_quality,
            "contactQuality": self.contact_quality,
            "targetMatch": self.target_match,
            "spamPenalty": self.spam_penalty,
            "total": self.total,
            "factors": list(self.factors),
        }
