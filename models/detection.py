from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Any, List


@dataclass(frozen=True)
class Evidence:
    """Represents the piece of page evidence that matched a rule."""
    type: str
    name: Optional[str] = None
    pattern: Optional[str] = None
    value: Optional[str] = None


@dataclass(frozen=True)
class Detection:
    """Represents a detected technology."""
    name: str
    category: str
    evidence: Evidence
    version: Optional[str] = None


@dataclass(frozen=True)
class DetectionResult:
    """Per-category view of everything a page matched.

    Singular slots hold the first match in registry order. When no pure CMS
    matched but an e-commerce platform did, ``cms`` resolves to the
    e-commerce name.
    """
    cms: Optional[str] = None
    ecommerce: Optional[str] = None
    hosting: Optional[str] = None
    cdn: Optional[str] = None
    frameworks: Tuple[str, ...] = ()
    analytics: Tuple[str, ...] = ()
    marketing: Tuple[str, ...] = ()
    has_contact_form: bool = False
    has_live_chat: bool = False
    matches: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    detections: Tuple[Detection, ...] = ()

    def __post_init__(self):
        if not self.cms and self.ecommerce:
            object.__setattr__(self, "cms", self.ecommerce)
        object.__setattr__(self, "frameworks", tuple(self.frameworks))
        object.__setattr__(self, "analytics", tuple(self.analytics))
        object.__setattr__(self, "marketing", tuple(self.marketing))

    @property
    def is_empty(self) -> bool:
        return not (
            self.cms or self.ecommerce or self.hosting or self.cdn
            or self.frameworks or self.analytics or self.marketing
            or self.has_contact_form or self.has_live_chat
            or any(self.matches.values())
        )

    def technologies(self) -> List[str]:
        """Technology names used for include/exclude filtering."""
        names = [self.cms, self.ecommerce, *self.frameworks, *self.marketing]
        return [n for n in names if n]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cms": self.cms,
            "ecommerce": self.ecommerce,
            "hosting": self.hosting,
            "cdn": self.cdn,
            "frameworks": list(self.frameworks),
            "analytics": list(self.analytics),
            "marketing": list(self.marketing),
            "hasContactForm": self.has_contact_form,
            "hasLiveChat": self.has_live_chat,
            "versions": {d.name: d.version for d in self.detections if d.version},
        }
