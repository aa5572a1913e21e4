"""
Declaration parser for validgen.

Reads a Python declaration file with the standard ``ast`` module and extracts
every top-level class whose name ends with the input suffix. Field tags come
from ``field(metadata={...})`` dict literals; anything that is not a string
literal is treated as an absent tag.
"""

import ast
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from .constants import DefaultConfig, FIELD_FACTORY_NAMES, TagKeys
from .domain.models import DeclarationModule, FieldDecl, RecordDecl
from .exceptions import DeclarationParseError


logger = logging.getLogger(__name__)


def module_name_for(path: Union[str, Path]) -> str:
    """
    Dotted import name of a declaration file.

    Walks up through parent directories that contain ``__init__.py`` so that
    ``myapp/forms/input.py`` inside packages becomes ``myapp.forms.input``.
    """
    path = Path(path).resolve()
    parts = [path.stem]
    parent = path.parent
    while (parent / "__init__.py").is_file():
        parts.append(parent.name)
        parent = parent.parent
    return ".".join(reversed(parts))


def _call_name(node: ast.expr) -> str:
    if isinstance(node, ast.Call):
        return ast.unparse(node.func)
    return ""


def _string_metadata(call: ast.Call) -> Dict[str, str]:
    """String entries of a ``metadata={...}`` dict literal; everything else is ignored."""
    tags: Dict[str, str] = {}
    for keyword in call.keywords:
        if keyword.arg != "metadata" or not isinstance(keyword.value, ast.Dict):
            continue
        for key, value in zip(keyword.value.keys, keyword.value.values):
            if not (isinstance(key, ast.Constant) and isinstance(key.value, str)):
                continue
            if not (isinstance(value, ast.Constant) and isinstance(value.value, str)):
                logger.debug(f"Ignoring non-literal '{key.value}' tag at line {value.lineno}")
                continue
            if key.value in TagKeys.ALL:
                tags[key.value] = value.value
    return tags


def _is_classvar(annotation: ast.expr) -> bool:
    target = annotation.value if isinstance(annotation, ast.Subscript) else annotation
    return ast.unparse(target) in ("ClassVar", "typing.ClassVar")


def _parse_field(statement: ast.AnnAssign) -> Optional[FieldDecl]:
    if not isinstance(statement.target, ast.Name):
        return None
    name = statement.target.id
    if name.startswith("_") or _is_classvar(statement.annotation):
        return None

    tags: Dict[str, str] = {}
    if statement.value is not None and _call_name(statement.value) in FIELD_FACTORY_NAMES:
        tags = _string_metadata(statement.value)

    return FieldDecl(
        name=name,
        type_name=ast.unparse(statement.annotation),
        validate_tag=tags.get(TagKeys.VALIDATE, ""),
        serialize_tag=tags.get(TagKeys.SERIALIZE, ""),
        transform_tag=tags.get(TagKeys.TRANSFORM, ""),
        lineno=statement.lineno,
    )


def _parse_record(node: ast.ClassDef) -> RecordDecl:
    fields = []
    for statement in node.body:
        if isinstance(statement, ast.AnnAssign):
            field = _parse_field(statement)
            if field is not None:
                fields.append(field)
    return RecordDecl(name=node.name, fields=tuple(fields), lineno=node.lineno)


def _parse_tree(source_text: str, filename: str) -> ast.Module:
    try:
        return ast.parse(source_text, filename=filename)
    except SyntaxError as e:
        raise DeclarationParseError(
            f"Invalid declaration syntax: {e.msg}",
            filename=filename,
            line=e.lineno,
            column=e.offset,
        ) from e


def _collect_records(tree: ast.Module, filename: str, input_suffix: str) -> List[RecordDecl]:
    records: List[RecordDecl] = []
    seen: Dict[str, int] = {}
    for node in tree.body:
        if not isinstance(node, ast.ClassDef) or not node.name.endswith(input_suffix):
            continue
        if node.name in seen:
            raise DeclarationParseError(
                f"Input class '{node.name}' is declared more than once (first at line {seen[node.name]})",
                filename=filename,
                line=node.lineno,
                column=node.col_offset + 1,
            )
        seen[node.name] = node.lineno
        record = _parse_record(node)
        logger.debug(f"Found input class {record.name} with {len(record.fields)} field(s)")
        records.append(record)
    return records


def _collect_imports(tree: ast.Module) -> List[str]:
    imports = []
    for node in tree.body:
        if isinstance(node, ast.ImportFrom) and node.module == "__future__":
            continue
        if isinstance(node, (ast.Import, ast.ImportFrom)):
            imports.append(ast.unparse(node))
    return imports


def parse_declarations(
    source_text: str,
    filename: str = "<string>",
    input_suffix: str = DefaultConfig.INPUT_SUFFIX,
) -> List[RecordDecl]:
    """
    Parse input record declarations from Python source.

    Args:
        source_text: Contents of the declaration file
        filename: Used in error context only
        input_suffix: Class name suffix that marks an input declaration

    Returns:
        Records in source order

    Raises:
        DeclarationParseError: On invalid syntax or a duplicated input class
    """
    tree = _parse_tree(source_text, filename)
    return _collect_records(tree, filename, input_suffix)


def parse_declaration_module(
    source_text: str,
    path: Optional[Union[str, Path]] = None,
    module_name: Optional[str] = None,
    input_suffix: str = DefaultConfig.INPUT_SUFFIX,
) -> DeclarationModule:
    """Parse a declaration file together with its top-level imports."""
    filename = str(path) if path is not None else "<string>"
    tree = _parse_tree(source_text, filename)
    records = _collect_records(tree, filename, input_suffix)

    if module_name is None:
        module_name = module_name_for(path) if path is not None else "declarations"

    logger.info(f"Parsed {len(records)} input class(es) from {filename}")
    return DeclarationModule(
        module_name=module_name,
        path=Path(path) if path is not None else None,
        imports=tuple(_collect_imports(tree)),
        records=tuple(records),
    )
