"""Registry mapping YAML rule ``type`` tags to evidence rule classes."""
import logging
from typing import Any, Dict, List, Mapping, Type

from core.errors import SignatureRegistryError
from models.technology import EvidenceRule

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Registry for the tagged evidence rule variants."""

    _rule_types: Dict[str, Type[EvidenceRule]] = {}
    _order: List[str] = []  # Preserve registration order

    @classmethod
    def register(cls, type_name: str):
        """Decorator to register an evidence rule class under a YAML tag.

        Example:
            @RuleRegistry.register("header")
            class HeaderRule(EvidenceRule):
                def match(self, page: PageSnapshot) -> Optional[Evidence]:
                    ...
        """
        def decorator(rule_class: Type[EvidenceRule]):
            if type_name in cls._rule_types:
                logger.warning(f"Rule type '{type_name}' already registered, overwriting")
            else:
                cls._order.append(type_name)
            cls._rule_types[type_name] = rule_class
            logger.debug(f"Registered rule type: {type_name} -> {rule_class.__name__}")
            return rule_class
        return decorator

    @classmethod
    def get_all_names(cls) -> List[str]:
        """Get all registered rule type tags in registration order."""
        return cls._order.copy()

    @classmethod
    def build(cls, data: Mapping[str, Any]) -> EvidenceRule:
        """Instantiate the rule variant described by one YAML evidence entry."""
        type_name = data.get("type")
        rule_class = cls._rule_types.get(type_name)
        if rule_class is None:
            raise SignatureRegistryError(
                f"Unknown rule type '{type_name}' (known: {', '.join(cls._order)})"
            )
        return rule_class.from_dict(data)
