"""
Naming convention utilities for validgen.

Converts between the snake_case names used for fields and functions and the
PascalCase names used for generated classes and wrapper types.
"""

import keyword
import re

from ..constants import RuntimeNames


def to_snake_case(name: str) -> str:
    """
    Convert CamelCase or PascalCase to snake_case.

    Args:
        name: The string to convert to snake_case

    Returns:
        The converted snake_case string

    Example:
        >>> to_snake_case("ProductInputValidated")
        'product_input_validated'
        >>> to_snake_case("XMLHttpRequest")
        'xml_http_request'
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")

    name = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    name = re.sub("__([A-Z])", r"_\1", name)
    name = re.sub("([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.lower()


def to_pascal_case(name: str) -> str:
    """
    Convert snake_case to PascalCase, leaving PascalCase input unchanged.

    Example:
        >>> to_pascal_case("date_of_birth")
        'DateOfBirth'
        >>> to_pascal_case("Name")
        'Name'
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")

    return "".join(word[:1].upper() + word[1:] for word in name.split("_") if word)


def conversion_function_name(domain_name: str) -> str:
    """Name of the generated validate-then-convert routine."""
    return f"to_{to_snake_case(domain_name)}"


def wrapper_type_name(field_name: str, scope: str = "") -> str:
    """
    Name of the nominal wrapper type for a domain field (newtype variant).

    ``scope`` prefixes the name, e.g. the input class name when two records
    of one module wrap different types under the same field name.

    Example:
        >>> wrapper_type_name("date_of_birth")
        'DateOfBirthValid'
        >>> wrapper_type_name("id", scope="OrderInput")
        'OrderInputIdValid'
    """
    return f"{scope}{to_pascal_case(field_name)}{RuntimeNames.WRAPPER_SUFFIX}"


def validate_python_identifier(name: str) -> bool:
    """Check if a string is a valid Python identifier and not a keyword."""
    if not name:
        return False
    return name.isidentifier() and not keyword.iskeyword(name)


def import_line_for(module_path: str) -> str:
    """
    Import statement that binds the last component of a dotted module path.

    Example:
        >>> import_line_for("validgen.runtime.fieldtypes")
        'from validgen.runtime import fieldtypes'
        >>> import_line_for("datetime")
        'import datetime'
    """
    package, _, module = module_path.rpartition(".")
    if not package:
        return f"import {module}"
    return f"from {package} import {module}"


def qualifier_root(type_name: str) -> str:
    """Leading module name of a dotted type expression, or '' when unqualified."""
    match = re.match(r"^([A-Za-z_][A-Za-z0-9_]*)\.", type_name)
    return match.group(1) if match else ""
