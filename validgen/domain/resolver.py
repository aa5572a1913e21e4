"""
Convention resolver for validgen.

Maps an input declaration onto its domain record. Each field is classified
exactly once into a tagged convention, in fixed precedence order:

1. omitted (``json: "-"`` or ``transform: "omit"``)
2. custom transform (type name found in the transform registry)
3. hashing candidate (password field with a ``min=`` rule), always typed
   ``str``; values declared as another type are converted to text
4. direct copy

Resolution is pure and total: unrecognised tags fall through to direct copy.
"""

import logging
from typing import List, Optional

from ..constants import TagSentinels
from .models import (
    CustomTransform,
    Direct,
    DomainField,
    DomainRecord,
    FieldConvention,
    FieldDecl,
    HashCandidate,
    NamingConventions,
    Omit,
    RecordDecl,
    TransformKind,
)
from .registry import TransformRegistry


logger = logging.getLogger(__name__)


def is_omitted(field: FieldDecl) -> bool:
    return (
        field.serialize_tag.strip() == TagSentinels.SERIALIZE_OMIT
        or field.transform_tag.strip() == TagSentinels.TRANSFORM_OMIT
    )


def has_min_length_rule(field: FieldDecl) -> bool:
    return any(rule.startswith(TagSentinels.MIN_LENGTH_PREFIX) for rule in field.validation_rules)


def classify_field(
    field: FieldDecl,
    registry: TransformRegistry,
    conventions: Optional[NamingConventions] = None,
) -> FieldConvention:
    """Decide which convention applies to a field. First matching rule wins."""
    conventions = conventions or NamingConventions()

    if is_omitted(field):
        return Omit()

    rule = registry.lookup(field.type_name)
    if rule is not None:
        return CustomTransform(rule)

    if field.name == conventions.password_field_name and has_min_length_rule(field):
        return HashCandidate()

    return Direct()


def _domain_field(
    field: FieldDecl, convention: FieldConvention, conventions: NamingConventions
) -> Optional[DomainField]:
    if isinstance(convention, Omit):
        return None

    if isinstance(convention, CustomTransform):
        return DomainField(
            name=convention.rule.target_field_name,
            type_name=convention.rule.target_field_type,
            source_field_name=field.name,
            transform_kind=TransformKind.CUSTOM_TRANSFORM,
            rule=convention.rule,
        )

    if isinstance(convention, HashCandidate):
        return DomainField(
            name=conventions.password_domain_name or field.name,
            type_name="str",
            source_field_name=field.name,
            transform_kind=TransformKind.DIRECT_COPY,
            needs_hashing=True,
            coerce_text=field.type_name != "str",
        )

    return DomainField(
        name=field.name,
        type_name=field.type_name,
        source_field_name=field.name,
        transform_kind=TransformKind.DIRECT_COPY,
    )


def resolve(
    record: RecordDecl,
    registry: TransformRegistry,
    conventions: Optional[NamingConventions] = None,
) -> DomainRecord:
    """
    Derive the domain record for one input declaration.

    Args:
        record: The parsed input declaration
        registry: Transform registry consulted for custom field types
        conventions: Naming policy (suffixes, password convention)

    Returns:
        The domain record, with its required capabilities sorted and unique
    """
    conventions = conventions or NamingConventions()
    fields: List[DomainField] = []
    capabilities = set()

    for field in record.fields:
        convention = classify_field(field, registry, conventions)
        domain_field = _domain_field(field, convention, conventions)

        if domain_field is None:
            logger.debug(f"{record.name}.{field.name}: omitted")
            continue

        if isinstance(convention, CustomTransform):
            logger.debug(
                f"{record.name}.{field.name}: custom transform via '{convention.rule.source_type_name}' "
                f"-> {domain_field.name}: {domain_field.type_name}"
            )
            if convention.rule.required_capability:
                capabilities.add(convention.rule.required_capability)
        elif isinstance(convention, HashCandidate):
            logger.debug(f"{record.name}.{field.name}: hashing candidate -> {domain_field.name}: str")

        fields.append(domain_field)

    return DomainRecord(
        name=conventions.domain_name_for(record.name),
        input_name=record.name,
        fields=tuple(fields),
        required_capabilities=tuple(sorted(capabilities)),
    )
