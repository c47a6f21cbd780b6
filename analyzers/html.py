from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import regex

from core.context import PageSnapshot
from core.html_utils import compile_pattern, search, truncate_html
from core.rule_registry import RuleRegistry
from core.version_utils import extract_version_from_string
from models.detection import Evidence
from models.technology import EvidenceRule

# Longest matched snippet kept as evidence
MAX_EVIDENCE_LENGTH = 200


@RuleRegistry.register("html")
@dataclass(frozen=True)
class HtmlPatternRule(EvidenceRule):
    """Regex tested against the raw HTML body, inline and external script tags included."""
    ignore_case: bool = False
    compiled: regex.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "compiled", compile_pattern(self.pattern, self.ignore_case))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HtmlPatternRule":
        return cls(
            type="html",
            pattern=data["pattern"],
            ignore_case=bool(data.get("ignore_case", False)),
        )

    def match(self, page: PageSnapshot) -> Optional[Evidence]:
        if not page.html:
            return None
        found = search(self.compiled, truncate_html(page.html), label="html")
        if not found:
            return None
        return Evidence(type=self.type, pattern=self.pattern, value=found.group(0)[:MAX_EVIDENCE_LENGTH])

    def version(self, evidence: Evidence, technology: str) -> Optional[str]:
        # Bare paths such as "wp-content" carry no version; only named matches do
        if evidence.value and technology.lower() in evidence.value.lower():
            return extract_version_from_string(evidence.value, technology)
        return None
