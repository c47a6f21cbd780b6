from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence, Union

DateLike = Union[str, date, datetime]


@dataclass(frozen=True)
class FilterSpec:
    """Optional predicates over a lead. ``None`` means "not filtered on"."""
    technologies: Optional[Sequence[str]] = None
    exclude_technologies: Optional[Sequence[str]] = None
    has_contact_form: Optional[bool] = None
    has_live_chat: Optional[bool] = None
    registered_after: Optional[DateLike] = None
    registered_before: Optional[DateLike] = None
    countries: Optional[Sequence[str]] = None
    min_score: Optional[int] = None
    keywords: Optional[Sequence[str]] = None
    tlds: Optional[Sequence[str]] = None
