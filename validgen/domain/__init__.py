"""
Domain module for validgen.

Declaration model, transform registry, convention resolver and naming rules.
Nothing here performs I/O; every function is deterministic.
"""

from .models import (
    FieldDecl,
    RecordDecl,
    DeclarationModule,
    TransformRule,
    Omit,
    CustomTransform,
    HashCandidate,
    Direct,
    FieldConvention,
    NamingConventions,
    TransformKind,
    DomainField,
    DomainRecord,
    GenerationResult,
)

from .registry import (
    TransformRegistry,
    default_registry,
)

from .resolver import (
    classify_field,
    resolve,
)

from .naming import (
    to_snake_case,
    to_pascal_case,
    conversion_function_name,
    wrapper_type_name,
    validate_python_identifier,
    import_line_for,
)

__all__ = [
    # Declaration model
    'FieldDecl',
    'RecordDecl',
    'DeclarationModule',

    # Registry
    'TransformRule',
    'TransformRegistry',
    'default_registry',

    # Conventions
    'Omit',
    'CustomTransform',
    'HashCandidate',
    'Direct',
    'FieldConvention',
    'NamingConventions',
    'classify_field',
    'resolve',

    # Domain schema
    'TransformKind',
    'DomainField',
    'DomainRecord',
    'GenerationResult',

    # Naming
    'to_snake_case',
    'to_pascal_case',
    'conversion_function_name',
    'wrapper_type_name',
    'validate_python_identifier',
    'import_line_for',
]
