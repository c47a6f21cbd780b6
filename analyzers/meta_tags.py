from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import regex

from core.context import PageSnapshot
from core.html_utils import compile_pattern, search
from core.rule_registry import RuleRegistry
from core.version_utils import extract_version_from_string
from models.detection import Evidence
from models.technology import EvidenceRule


@RuleRegistry.register("meta")
@dataclass(frozen=True)
class MetaRule(EvidenceRule):
    """Match the content of ``<meta name="X" content="Y">`` for a given X."""
    compiled: regex.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "name", (self.name or "").lower())
        object.__setattr__(self, "compiled", compile_pattern(self.pattern, ignore_case=True))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MetaRule":
        return cls(type="meta", name=data["name"], pattern=data["pattern"])

    def match(self, page: PageSnapshot) -> Optional[Evidence]:
        content = page.meta_tags.get(self.name)
        if content is None or not search(self.compiled, content, label=f"meta {self.name}"):
            return None
        return Evidence(type=self.type, name=self.name, pattern=self.pattern, value=content)

    def version(self, evidence: Evidence, technology: str) -> Optional[str]:
        return extract_version_from_string(evidence.value, technology)
