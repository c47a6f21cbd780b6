import asyncio
import logging
from typing import Iterable, List, Mapping, Optional, Tuple

import httpx

from core.context import PageSnapshot
from core.detection_aggregator import DetectionAggregator
from fetch.http_client import fetch_url
from models.detection import Detection, DetectionResult
from models.technology import TechnologySignature
from rules.rules_loader import get_signature_registry

DEFAULT_FETCH_TIMEOUT_MS = 10_000


class SignatureClassifier:
    """Fingerprints a site's technology stack from its raw HTML and headers."""

    def __init__(
        self,
        signatures: Optional[Iterable[TechnologySignature]] = None,
        timeout_ms: int = DEFAULT_FETCH_TIMEOUT_MS,
    ):
        """
        Args:
            signatures: Signature registry to use (defaults to the shared YAML registry)
            timeout_ms: Total budget for the HTML fetch, in milliseconds
        """
        self.logger = logging.getLogger(__name__)
        self.signatures: Tuple[TechnologySignature, ...] = (
            tuple(signatures) if signatures is not None else get_signature_registry()
        )
        self.timeout_ms = timeout_ms
        self.logger.debug(f"Classifier ready with {len(self.signatures)} signatures")

    def detect(self, html: Optional[str], headers: Optional[Mapping[str, str]] = None) -> Optional[DetectionResult]:
        """Classify an already fetched page. ``html=None`` means the fetch failed."""
        if html is None:
            return None
        return self.classify(PageSnapshot.build(html, headers))

    def classify(self, page: PageSnapshot) -> DetectionResult:
        """Evaluate every signature independently against one page."""
        detections: List[Detection] = []
        for signature in self.signatures:
            hit = signature.match(page)
            if hit is None:
                continue
            rule, evidence = hit
            self.logger.debug(f"Matched {signature.name} ({signature.category}) on {evidence.type}")
            detections.append(
                Detection(
                    name=signature.name,
                    category=signature.category,
                    evidence=evidence,
                    version=rule.version(evidence, signature.name),
                )
            )

        self.logger.debug(f"{len(detections)} of {len(self.signatures)} signatures matched")
        return DetectionAggregator.aggregate(detections)

    async def fetch_page(self, domain: str) -> Optional[PageSnapshot]:
        """Fetch the site's landing page. Any failure yields None."""
        url = domain if domain.startswith(("http://", "https://")) else f"https://{domain}"
        timeout = self.timeout_ms / 1000

        try:
            response = await asyncio.wait_for(fetch_url(url, timeout=timeout), timeout=timeout)
        except asyncio.TimeoutError:
            self.logger.warning(f"Fetching {url} timed out after {timeout:.1f}s")
            return None
        except httpx.HTTPError as e:
            self.logger.warning(f"Fetching {url} failed: {e}")
            return None

        if not 200 <= response.status_code < 300:
            self.logger.warning(f"Fetching {url} returned HTTP {response.status_code}")
            return None

        return PageSnapshot.build(
            response.text,
            dict(response.headers.items()),
            url=url,
            status_code=response.status_code,
        )

    async def detect_domain(self, domain: str) -> Optional[DetectionResult]:
        """Fetch and classify a domain; None when the page could not be read."""
        page = await self.fetch_page(domain)
        if page is None:
            return None
        return self.classify(page)
