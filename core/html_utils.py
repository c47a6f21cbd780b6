"""Regex helpers for scanning raw HTML and header values."""
import logging
import time
from typing import Dict, Optional

import regex

# Cap HTML scanned by regex to avoid catastrophic backtracking on huge pages
MAX_HTML_SCAN_LENGTH = 1_000_000
# Hard timeout per pattern evaluation, in seconds
PATTERN_TIMEOUT = 0.8
# Warn on slow regex evaluation to surface problematic patterns
PATTERN_SLOW_THRESHOLD_SECONDS = 0.5

_META_TAG_RE = regex.compile(r'<meta\b[^>]*>', regex.IGNORECASE)
_ATTR_RE = regex.compile(r'''([a-zA-Z_:-]+)\s*=\s*(?:"([^"]*)"|'([^']*)')''')

logger = logging.getLogger(__name__)


def compile_pattern(pattern: str, ignore_case: bool = False) -> regex.Pattern:
    """Compile a rule pattern. Raises regex.error for invalid patterns."""
    flags = regex.IGNORECASE if ignore_case else 0
    return regex.compile(pattern, flags)


def truncate_html(html: str) -> str:
    if len(html) > MAX_HTML_SCAN_LENGTH:
        logger.debug(f"Truncating HTML for scanning to {MAX_HTML_SCAN_LENGTH} chars (was {len(html)})")
        return html[:MAX_HTML_SCAN_LENGTH]
    return html


def search(compiled: regex.Pattern, text: str, label: str = "pattern") -> Optional[regex.Match]:
    """Search with a timeout; a timed-out search counts as no match."""
    start = time.perf_counter()
    try:
        match = compiled.search(text, timeout=PATTERN_TIMEOUT)
    except TimeoutError:
        logger.warning(f"Pattern timeout for {label}: {compiled.pattern[:50]}")
        return None
    duration = time.perf_counter() - start
    if duration > PATTERN_SLOW_THRESHOLD_SECONDS:
        logger.warning(f"Slow pattern for {label} took {duration:.2f}s")
    return match


def extract_meta_tags(html: str) -> Dict[str, str]:
    """Map lowercased ``<meta name="X" content="Y">`` names to their content.

    Attribute order does not matter. When a name repeats, the first tag wins.
    """
    metas: Dict[str, str] = {}
    for tag in _META_TAG_RE.finditer(html):
        attrs = {}
        for attr in _ATTR_RE.finditer(tag.group(0)):
            value = attr.group(2) if attr.group(2) is not None else attr.group(3)
            attrs[attr.group(1).lower()] = value
        name = attrs.get("name")
        content = attrs.get("content")
        if name and content is not None and name.lower() not in metas:
            metas[name.lower()] = content
    return metas
