"""
Centralized constants for validgen.

Tag keys, sentinel values, naming defaults and the generated-file marker live
here so the parser, resolver, emitter and runtime agree on them.
"""

from typing import Dict, FrozenSet


# =============================================================================
# CORE CONFIGURATION
# =============================================================================

class DefaultConfig:
    """Default configuration values."""

    # Naming defaults
    INPUT_SUFFIX = "Input"
    DOMAIN_SUFFIX = "Validated"
    OUTPUT_SUFFIX = "_validation_gen"
    PASSWORD_FIELD_NAME = "password"

    # Generation options
    TEMPLATE_VARIANT = "direct"
    FORMAT_OUTPUT = True
    LINE_LENGTH = 120
    OVERWRITE_UNMARKED = False


class TemplateVariants:
    """Names of the supported emitter variants."""

    DIRECT = "direct"
    NEWTYPE = "newtype"

    ALL = [DIRECT, NEWTYPE]


# =============================================================================
# DECLARATION TAGS
# =============================================================================

class TagKeys:
    """Keys read from ``dataclasses.field(metadata=...)`` on input declarations."""

    VALIDATE = "validate"
    SERIALIZE = "json"
    TRANSFORM = "transform"

    ALL: FrozenSet[str] = frozenset({VALIDATE, SERIALIZE, TRANSFORM})


class TagSentinels:
    """The only tag values the generator itself interprets."""

    SERIALIZE_OMIT = "-"
    TRANSFORM_OMIT = "omit"
    MIN_LENGTH_PREFIX = "min="
    RULE_SEPARATOR = ","


# Callables accepted as the right-hand side of a declaration field.
FIELD_FACTORY_NAMES: FrozenSet[str] = frozenset({"field", "dataclasses.field"})


# =============================================================================
# GENERATED OUTPUT
# =============================================================================

class GeneratedFile:
    """Markers written into every generated module."""

    MARKER = "# Code generated by validgen"
    HEADER_TEMPLATE = MARKER + " from {source}; DO NOT EDIT."

    TEMPLATE_DIR_NAME = "templates"
    MODULE_TEMPLATE = "validated_module.py.j2"
    RECORD_TEMPLATE = "validated_record.py.j2"


class RuntimeNames:
    """Names the generated code imports from the runtime package."""

    MODULE = "validgen.runtime"
    VALIDATE = "validate_struct"
    TRANSFORM = "transform_field"
    TEXT = "to_text"
    STRUCT_ERROR = "StructValidationError"
    CONVERSION_ERROR = "ConversionError"

    CONVERTER_METHOD = "to_validated"
    WRAPPER_SUFFIX = "Valid"


# =============================================================================
# TRANSFORM REGISTRY DEFAULTS
# =============================================================================

FIELDTYPES_CAPABILITY = "validgen.runtime.fieldtypes"

# source type name -> (target field name, target field type, required capability)
DEFAULT_TRANSFORM_TABLE: Dict[str, tuple] = {
    "fieldtypes.DateOfBirthString": ("date_of_birth", "datetime.date", FIELDTYPES_CAPABILITY),
    "fieldtypes.PlainPassword": ("password_hash", "str", FIELDTYPES_CAPABILITY),
}
