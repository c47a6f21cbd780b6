"""Folds per-signature detections into the per-category DetectionResult.

Singular slots (cms, ecommerce, hosting, cdn) take the first detection in
registry order; multi-valued slots keep every match. Feature signatures are
reduced to the has_contact_form / has_live_chat booleans.
"""
from typing import Dict, List, Sequence
import logging

from models.detection import Detection, DetectionResult
from models.technology import CATEGORIES

logger = logging.getLogger(__name__)

CONTACT_FORM_FEATURE = "Contact Form"
LIVE_CHAT_FEATURE = "Live Chat"


class DetectionAggregator:
    """Aggregates detections from one page into a DetectionResult."""

    @staticmethod
    def group_by_category(detections: Sequence[Detection]) -> Dict[str, List[str]]:
        """
        Group detected technology names by category, preserving input order.

        A technology appearing twice is only listed once.
        """
        grouped: Dict[str, List[str]] = {category: [] for category in CATEGORIES}
        for detection in detections:
            names = grouped.setdefault(detection.category, [])
            if detection.name not in names:
                names.append(detection.name)
        return grouped

    @staticmethod
    def aggregate(detections: Sequence[Detection]) -> DetectionResult:
        """
        Build the DetectionResult for one page.

        Args:
            detections: Detections in registry order

        Returns:
            DetectionResult; entirely empty when nothing matched
        """
        grouped = DetectionAggregator.group_by_category(detections)

        def first(category: str):
            names = grouped.get(category) or []
            return names[0] if names else None

        result = DetectionResult(
            cms=first("cms"),
            ecommerce=first("ecommerce"),
            hosting=first("hosting"),
            cdn=first("cdn"),
            frameworks=tuple(grouped["framework"]),
            analytics=tuple(grouped["analytics"]),
            marketing=tuple(grouped["marketing"]),
            has_contact_form=CONTACT_FORM_FEATURE in grouped["feature"],
            has_live_chat=LIVE_CHAT_FEATURE in grouped["feature"],
            matches={category: tuple(names) for category, names in grouped.items()},
            detections=tuple(detections),
        )

        if grouped["cms"] == [] and result.cms:
            logger.debug(f"No CMS matched, using e-commerce platform {result.cms} as CMS")
        return result
