from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import regex

from core.context import PageSnapshot
from core.html_utils import compile_pattern, search
from core.rule_registry import RuleRegistry
from core.version_utils import extract_version_from_string
from models.detection import Evidence
from models.technology import EvidenceRule


@RuleRegistry.register("header")
@dataclass(frozen=True)
class HeaderRule(EvidenceRule):
    """Regex tested case-insensitively against one response header."""
    compiled: regex.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "name", (self.name or "").lower())
        object.__setattr__(self, "compiled", compile_pattern(self.pattern, ignore_case=True))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HeaderRule":
        return cls(type="header", name=data["name"], pattern=data["pattern"])

    def match(self, page: PageSnapshot) -> Optional[Evidence]:
        header_value = page.headers.get(self.name)
        if not header_value:
            return None
        if not search(self.compiled, header_value, label=f"header {self.name}"):
            return None
        return Evidence(type=self.type, name=self.name, pattern=self.pattern, value=header_value)

    def version(self, evidence: Evidence, technology: str) -> Optional[str]:
        if evidence.value and technology.lower() in evidence.value.lower():
            return extract_version_from_string(evidence.value, technology)
        return None
