from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from core.context import PageSnapshot
    from models.detection import Evidence

# Categories a signature may belong to
CATEGORIES = ("cms", "framework", "analytics", "marketing", "ecommerce", "hosting", "cdn", "feature")


@dataclass(frozen=True)
class EvidenceRule:
    """Base class for a single detection rule.

    Concrete variants live in ``analyzers`` and are registered by their YAML
    ``type`` tag in ``core.rule_registry.RuleRegistry``.
    """
    type: str
    pattern: str
    name: Optional[str] = None # Header or meta name the rule inspects

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EvidenceRule":
        raise NotImplementedError

    def match(self, page: "PageSnapshot") -> Optional["Evidence"]:
        raise NotImplementedError

    def version(self, evidence: "Evidence", technology: str) -> Optional[str]:
        return None


@dataclass(frozen=True)
class TechnologySignature:
    """A named technology and the ordered rules that identify it."""
    name: str
    category: str
    rules: Tuple[EvidenceRule, ...] = field(default_factory=tuple)

    def match(self, page: "PageSnapshot") -> Optional[Tuple[EvidenceRule, "Evidence"]]:
        """Return the first rule that matches, with its evidence (rules are OR-ed)."""
        for rule in self.rules:
            evidence = rule.match(page)
            if evidence is not None:
                return rule, evidence
        return None
