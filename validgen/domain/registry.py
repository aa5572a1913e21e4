"""
Transform registry for validgen.

A closed, read-only table mapping a custom field type (by the qualified name
written in the declaration) to the domain field it produces. The table is
fixed at process start; extra entries only come from explicit configuration.
"""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Optional

from ..constants import DEFAULT_TRANSFORM_TABLE
from ..exceptions import ConfigurationError
from .models import TransformRule


logger = logging.getLogger(__name__)


class TransformRegistry:
    """Immutable lookup of ``TransformRule`` by source type name."""

    def __init__(self, rules: Dict[str, TransformRule]):
        self._rules = MappingProxyType(dict(sorted(rules.items())))

    @classmethod
    def from_rules(cls, rules: Iterable[TransformRule]) -> "TransformRegistry":
        """Build a registry, rejecting two rules for the same source type."""
        table: Dict[str, TransformRule] = {}
        for rule in rules:
            if rule.source_type_name in table:
                raise ConfigurationError(
                    f"Duplicate transform rule for type '{rule.source_type_name}'",
                    context={"source_type_name": rule.source_type_name},
                )
            table[rule.source_type_name] = rule
        return cls(table)

    def lookup(self, qualified_type_name: str) -> Optional[TransformRule]:
        """Return the rule registered for a type name, if any."""
        return self._rules.get(qualified_type_name)

    def merged_with(self, rules: Iterable[TransformRule]) -> "TransformRegistry":
        """Return a new registry where the given rules replace same-key entries."""
        table = dict(self._rules)
        for rule in TransformRegistry.from_rules(rules):
            if rule.source_type_name in table:
                logger.info(f"Transform rule for '{rule.source_type_name}' overridden by configuration")
            table[rule.source_type_name] = rule
        return TransformRegistry(table)

    def __contains__(self, qualified_type_name: object) -> bool:
        return qualified_type_name in self._rules

    def __iter__(self) -> Iterator[TransformRule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"TransformRegistry({list(self._rules)})"


def default_registry() -> TransformRegistry:
    """The built-in table of custom field types shipped with the runtime."""
    return TransformRegistry.from_rules(
        TransformRule(
            source_type_name=source_type,
            target_field_name=target_name,
            target_field_type=target_type,
            required_capability=capability,
        )
        for source_type, (target_name, target_type, capability) in DEFAULT_TRANSFORM_TABLE.items()
    )
