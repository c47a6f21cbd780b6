"""
Utility functions for extracting technology versions from matched evidence.
"""
import re
from typing import Optional


# Common version patterns (order matters - most specific first)
VERSION_PATTERNS = [
    # Semantic versioning with pre-release (1.2.3-beta2, 1.2.3-rc1)
    r'v?(\d+\.\d+\.\d+-[a-z]+\d*)(?=\D|$)',
    # Semantic versioning (1.2.3, v1.2.3)
    r'v?(\d+\.\d+\.\d+)',
    # Two-part versions (1.2)
    r'v?(\d+\.\d+)',
]


def extract_version_from_string(text: Optional[str], technology: Optional[str] = None) -> Optional[str]:
    """
    Extract a version from a generator meta value or header value.

    Examples:
        - "WordPress 6.4.2" -> 6.4.2
        - "Drupal 9 (https://www.drupal.org)" -> 9
        - "PHP/8.1.2" -> 8.1.2
    """
    if not text:
        return None

    if technology:
        # "<Technology> <version>" is the common generator format
        named = re.search(rf'{re.escape(technology)}[\s/v]*(\d+(?:\.\d+)*)', text, re.IGNORECASE)
        if named:
            return named.group(1)

    for pattern in VERSION_PATTERNS:
        match = re.search(pattern, text, re.IGNORECASE)
        if match:
            return match.group(1)

    return None
