"""
Validation helpers for the YAML technology rules.
"""
from collections import defaultdict
from typing import Any, Dict, Iterable, List

import regex

from models.technology import CATEGORIES

# Fields each evidence entry must carry, by rule type
REQUIRED_EVIDENCE_FIELDS = {
    "html": ("pattern",),
    "header": ("name", "pattern"),
    "meta": ("name", "pattern"),
}


def validate_rules(rules: List[Dict[str, Any]], known_types: Iterable[str]) -> List[str]:
    """
    Check raw rule dictionaries for structural problems.

    Args:
        rules: Rule dictionaries as read from YAML
        known_types: Registered evidence rule type tags

    Returns:
        Human-readable problem descriptions (empty when the rules are valid)
    """
    known = set(known_types)
    problems: List[str] = []

    for index, rule in enumerate(rules):
        if not isinstance(rule, dict):
            problems.append(f"Entry #{index} is not a mapping")
            continue

        origin = rule.get("__file__", "?")
        name = rule.get("name")
        if not name:
            problems.append(f"Entry #{index} in {origin} has no name")
            name = f"#{index}"

        category = rule.get("category")
        if category not in CATEGORIES:
            problems.append(f"{name} ({origin}): unknown category '{category}'")

        evidence = rule.get("evidence")
        if not isinstance(evidence, list) or not evidence:
            problems.append(f"{name} ({origin}): evidence must be a non-empty list")
            continue

        for position, item in enumerate(evidence):
            if not isinstance(item, dict):
                problems.append(f"{name} ({origin}): evidence #{position} is not a mapping")
                continue
            rule_type = item.get("type")
            if rule_type not in known:
                problems.append(f"{name} ({origin}): evidence #{position} has unknown type '{rule_type}'")
                continue
            for required in REQUIRED_EVIDENCE_FIELDS.get(rule_type, ("pattern",)):
                if not item.get(required):
                    problems.append(f"{name} ({origin}): {rule_type} evidence #{position} missing '{required}'")
            pattern = item.get("pattern")
            if pattern:
                try:
                    regex.compile(pattern)
                except regex.error as e:
                    problems.append(f"{name} ({origin}): invalid pattern '{pattern}': {e}")

    for name, origins in detect_duplicate_names(rules).items():
        problems.append(f"Duplicate technology name '{name}' in {', '.join(origins)}")

    return problems


def detect_duplicate_names(rules: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """Map each technology name defined more than once to the files defining it."""
    seen = defaultdict(list)
    for rule in rules:
        if isinstance(rule, dict) and rule.get("name"):
            seen[rule["name"]].append(rule.get("__file__", "?"))
    return {name: origins for name, origins in seen.items() if len(origins) > 1}


def find_shared_patterns(rules: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """
    Detect evidence patterns used by more than one technology.

    Shared patterns are allowed (every signature is evaluated independently)
    but are worth knowing about when tuning rules.
    """
    patterns_map = defaultdict(list)
    for rule in rules:
        if not isinstance(rule, dict):
            continue
        for item in rule.get("evidence") or []:
            if isinstance(item, dict) and item.get("pattern"):
                key = f"{item.get('type')}:{item['pattern']}"
                if rule.get("name") not in patterns_map[key]:
                    patterns_map[key].append(rule.get("name"))
    return {pattern: names for pattern, names in patterns_map.items() if len(names) > 1}
