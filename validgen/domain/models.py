"""
Core domain models for validgen.

These models describe what the generator reads (declarations), how each field
is classified (conventions), and what it emits (domain records). They are
plain frozen dataclasses: built once per run, never mutated, then discarded.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..constants import DefaultConfig, RuntimeNames, TagSentinels


# =============================================================================
# DECLARATION MODEL
# =============================================================================

@dataclass(frozen=True)
class FieldDecl:
    """
    One field of an input declaration, with its raw, unparsed tags.

    ``type_name`` is the annotation exactly as written in the source, so
    qualified names such as ``fieldtypes.DateOfBirthString`` survive intact.
    """

    name: str
    type_name: str
    validate_tag: str = ""
    serialize_tag: str = ""
    transform_tag: str = ""
    lineno: Optional[int] = None

    @property
    def validation_rules(self) -> List[str]:
        """Rule tokens of the validate tag, stripped, empty tokens dropped."""
        tokens = self.validate_tag.split(TagSentinels.RULE_SEPARATOR)
        return [token.strip() for token in tokens if token.strip()]


@dataclass(frozen=True)
class RecordDecl:
    """A discovered input class and its fields in declaration order."""

    name: str
    fields: Tuple[FieldDecl, ...] = ()
    lineno: Optional[int] = None

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]


@dataclass(frozen=True)
class DeclarationModule:
    """Everything the generator keeps from one declaration file."""

    module_name: str
    path: Optional[Path]
    imports: Tuple[str, ...] = ()
    records: Tuple[RecordDecl, ...] = ()

    @property
    def record_names(self) -> List[str]:
        return [r.name for r in self.records]


# =============================================================================
# TRANSFORM REGISTRY ENTRY
# =============================================================================

@dataclass(frozen=True)
class TransformRule:
    """Maps a custom field type onto the domain field it produces."""

    source_type_name: str
    target_field_name: str
    target_field_type: str
    required_capability: Optional[str] = None

    @property
    def converter(self) -> str:
        """Expression of the conversion callable the generated code invokes."""
        return f"{self.source_type_name}.{RuntimeNames.CONVERTER_METHOD}"


# =============================================================================
# FIELD CONVENTIONS
# =============================================================================

@dataclass(frozen=True)
class Omit:
    """Field is dropped from the domain record."""


@dataclass(frozen=True)
class CustomTransform:
    """Field is converted through a registry rule."""

    rule: TransformRule


@dataclass(frozen=True)
class HashCandidate:
    """Field follows the password naming convention; copied as ``str``."""


@dataclass(frozen=True)
class Direct:
    """Field is copied unchanged."""


FieldConvention = Union[Omit, CustomTransform, HashCandidate, Direct]


@dataclass(frozen=True)
class NamingConventions:
    """Fixed naming policy applied by the resolver and the emitter."""

    input_suffix: str = DefaultConfig.INPUT_SUFFIX
    domain_suffix: str = DefaultConfig.DOMAIN_SUFFIX
    password_field_name: str = DefaultConfig.PASSWORD_FIELD_NAME
    password_domain_name: Optional[str] = None

    def domain_name_for(self, input_name: str) -> str:
        return f"{input_name}{self.domain_suffix}"


# =============================================================================
# DOMAIN SCHEMA
# =============================================================================

class TransformKind(Enum):
    """How a domain field's value is produced from its source field."""

    DIRECT_COPY = "direct_copy"
    CUSTOM_TRANSFORM = "custom_transform"
    NEWTYPE_CAST = "newtype_cast"


@dataclass(frozen=True)
class DomainField:
    """
    A field of the generated domain record, traced to one source field.

    Hashing candidates are always typed ``str``; ``coerce_text`` is set when
    the source field was declared with another type, so the generated code
    converts the value instead of copying it.
    """

    name: str
    type_name: str
    source_field_name: str
    transform_kind: TransformKind = TransformKind.DIRECT_COPY
    rule: Optional[TransformRule] = None
    needs_hashing: bool = False
    coerce_text: bool = False


@dataclass(frozen=True)
class DomainRecord:
    """
    Derived, immutable snapshot of an input record's validated counterpart.

    ``required_capabilities`` lists the modules the generated code must import
    for custom transforms, sorted and without duplicates.
    """

    name: str
    input_name: str
    fields: Tuple[DomainField, ...] = ()
    required_capabilities: Tuple[str, ...] = ()

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    @property
    def has_custom_transforms(self) -> bool:
        return any(f.transform_kind is TransformKind.CUSTOM_TRANSFORM for f in self.fields)

    @property
    def has_text_coercions(self) -> bool:
        return any(f.coerce_text for f in self.fields)


# =============================================================================
# GENERATION RESULT
# =============================================================================

@dataclass
class GenerationResult:
    """Outcome of rendering one declaration file."""

    input_path: Path
    output_path: Path
    records: List[DomainRecord] = field(default_factory=list)
    content: str = ""

    @property
    def record_names(self) -> List[str]:
        return [r.name for r in self.records]
