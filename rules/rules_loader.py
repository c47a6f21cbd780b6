import logging
import os
from functools import lru_cache
from typing import Any, Dict, List, Tuple

import regex
import yaml

# Import rule variants to trigger @RuleRegistry.register decorators
import analyzers.html
import analyzers.headers
import analyzers.meta_tags

from core.errors import SignatureRegistryError
from core.rule_registry import RuleRegistry
from core.rules_validator import find_shared_patterns, validate_rules
from models.technology import TechnologySignature

RULES_DIR = os.path.dirname(os.path.abspath(__file__))

logger = logging.getLogger(__name__)


def read_rule_files(rules_dir: str = RULES_DIR) -> List[Dict[str, Any]]:
    """Read raw rule dictionaries from every .yaml file, in filename order."""
    raw_rules: List[Dict[str, Any]] = []
    for filename in sorted(os.listdir(rules_dir)):
        if not (filename.endswith(".yaml") or filename.endswith(".yml")):
            continue
        filepath = os.path.join(rules_dir, filename)
        with open(filepath, "r", encoding="utf-8") as f:
            try:
                rules_data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise SignatureRegistryError(f"Invalid YAML in {filename}: {e}") from e
        if not rules_data:
            continue
        if not isinstance(rules_data, list):
            raise SignatureRegistryError(f"{filename} must contain a list of technologies")
        for rule_data in rules_data:
            if isinstance(rule_data, dict):
                rule_data = {**rule_data, "__file__": filename}
            raw_rules.append(rule_data)
    return raw_rules


def build_signatures(raw_rules: List[Dict[str, Any]]) -> List[TechnologySignature]:
    """Validate raw rule dictionaries and turn them into signatures.

    Raises SignatureRegistryError listing every problem found.
    """
    problems = validate_rules(raw_rules, known_types=RuleRegistry.get_all_names())
    if problems:
        raise SignatureRegistryError("Invalid technology rules:\n  " + "\n  ".join(problems))

    for pattern, names in find_shared_patterns(raw_rules).items():
        logger.debug(f"Pattern '{pattern}' shared by: {', '.join(names)}")

    signatures: List[TechnologySignature] = []
    for rule_data in raw_rules:
        try:
            rules = tuple(RuleRegistry.build(item) for item in rule_data["evidence"])
        except regex.error as e:
            raise SignatureRegistryError(f"Invalid pattern for {rule_data['name']}: {e}") from e
        signatures.append(
            TechnologySignature(
                name=rule_data["name"],
                category=rule_data["category"],
                rules=rules,
            )
        )
    return signatures


def load_rules(rules_dir: str = RULES_DIR) -> List[TechnologySignature]:
    """
    Loads technology signatures from all .yaml files in a directory.
    """
    signatures = build_signatures(read_rule_files(rules_dir))
    logger.debug(f"Loaded {len(signatures)} technology signatures from {rules_dir}")
    return signatures


@lru_cache(maxsize=None)
def get_signature_registry() -> Tuple[TechnologySignature, ...]:
    """The process-wide, read-only signature registry (loaded on first use)."""
    return tuple(load_rules())
