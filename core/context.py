from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, Mapping, Optional

from core.html_utils import extract_meta_tags, truncate_html


def normalize_headers(headers: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Lowercase header names; later duplicates win."""
    return {str(k).lower(): str(v) for k, v in (headers or {}).items()}


@dataclass(frozen=True)
class PageSnapshot:
    """Raw passive evidence from one HTML fetch."""
    html: str
    headers: Dict[str, str] = field(default_factory=dict) # Lowercased names
    url: Optional[str] = None
    status_code: Optional[int] = None

    @classmethod
    def build(cls, html: Optional[str], headers: Optional[Mapping[str, str]] = None, **kwargs) -> "PageSnapshot":
        return cls(html=html or "", headers=normalize_headers(headers), **kwargs)

    @cached_property
    def meta_tags(self) -> Dict[str, str]:
        return extract_meta_tags(truncate_html(self.html))
