"""
Runtime support for modules generated by validgen.

Generated code imports from here only; nothing in this package depends on the
generator itself.
"""

from .validation import (
    ConversionError,
    FieldTransformError,
    FieldViolation,
    RuleDefinitionError,
    StructValidationError,
    parse_rules,
    to_text,
    transform_field,
    validate_struct,
)

__all__ = [
    'ConversionError',
    'FieldTransformError',
    'FieldViolation',
    'RuleDefinitionError',
    'StructValidationError',
    'parse_rules',
    'to_text',
    'transform_field',
    'validate_struct',
]
