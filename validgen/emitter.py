"""
Emitter for validgen.

Renders domain records into Python source through Jinja2 templates. A single
pair of templates serves both output variants; the difference between them
lives in a small rendering strategy that decides, per field, the annotation
and the value expression the templates print.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Sequence

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    select_autoescape,
)

from .constants import GeneratedFile, RuntimeNames, TemplateVariants
from .domain.models import DeclarationModule, DomainField, DomainRecord, TransformKind
from .domain.naming import (
    conversion_function_name,
    import_line_for,
    qualifier_root,
    wrapper_type_name,
)
from .exceptions import CodeGenerationError, TemplateRenderError


logger = logging.getLogger(__name__)

# Define the path to the templates directory relative to this file
TEMPLATE_DIR = Path(__file__).parent / GeneratedFile.TEMPLATE_DIR_NAME


class TemplateVariant(Enum):
    """Output variants selectable by configuration."""

    DIRECT = TemplateVariants.DIRECT
    NEWTYPE = TemplateVariants.NEWTYPE


@dataclass(frozen=True)
class WrapperType:
    """A nominal ``NewType`` wrapper declared by the newtype variant."""

    name: str
    base_type: str


@dataclass(frozen=True)
class RenderedField:
    """What the templates print for one domain field."""

    name: str
    annotation: str
    value_expr: str
    kind: TransformKind
    wrapper: Optional[WrapperType] = None
    comment: str = ""


# ---- Rendering strategies ----

class RenderStrategy(ABC):
    """Turns a resolved domain field into template-ready text."""

    variant: TemplateVariant

    @abstractmethod
    def render_field(self, field: DomainField, scope: str = "") -> RenderedField:
        pass

    def source_expression(self, field: DomainField) -> str:
        """Expression producing the field's value from the input ``value``."""
        raw = f"value.{field.source_field_name}"
        if field.transform_kind is TransformKind.CUSTOM_TRANSFORM and field.rule is not None:
            return f"{RuntimeNames.TRANSFORM}({field.source_field_name!r}, {field.rule.converter}, {raw})"
        if field.coerce_text:
            return f"{RuntimeNames.TRANSFORM}({field.source_field_name!r}, {RuntimeNames.TEXT}, {raw})"
        return raw

    @staticmethod
    def comment_for(field: DomainField) -> str:
        return "hash before persisting" if field.needs_hashing else ""


class DirectRenderStrategy(RenderStrategy):
    """Domain fields keep their resolved type; values are copied as-is."""

    variant = TemplateVariant.DIRECT

    def render_field(self, field: DomainField, scope: str = "") -> RenderedField:
        return RenderedField(
            name=field.name,
            annotation=field.type_name,
            value_expr=self.source_expression(field),
            kind=field.transform_kind,
            comment=self.comment_for(field),
        )


class NewtypeRenderStrategy(RenderStrategy):
    """Every domain field gets its own ``<Name>Valid`` wrapper type."""

    variant = TemplateVariant.NEWTYPE

    def render_field(self, field: DomainField, scope: str = "") -> RenderedField:
        wrapper = WrapperType(name=wrapper_type_name(field.name, scope), base_type=field.type_name)
        kind = field.transform_kind
        if kind is TransformKind.DIRECT_COPY:
            kind = TransformKind.NEWTYPE_CAST
        return RenderedField(
            name=field.name,
            annotation=wrapper.name,
            value_expr=f"{wrapper.name}({self.source_expression(field)})",
            kind=kind,
            wrapper=wrapper,
            comment=self.comment_for(field),
        )


STRATEGIES: Dict[TemplateVariant, RenderStrategy] = {
    TemplateVariant.DIRECT: DirectRenderStrategy(),
    TemplateVariant.NEWTYPE: NewtypeRenderStrategy(),
}


def get_strategy(variant: TemplateVariant) -> RenderStrategy:
    return STRATEGIES[TemplateVariant(variant)]


# ---- Jinja environment ----

def setup_jinja_env(template_dir: Path = TEMPLATE_DIR) -> Environment:
    """Sets up and returns the Jinja2 environment."""
    env = Environment(
        loader=FileSystemLoader(template_dir),
        # Output is Python source, never HTML
        autoescape=select_autoescape(["html", "xml"], default_for_string=False),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["repr"] = repr
    return env


def _render(env: Environment, template_name: str, context: Dict[str, Any], record: Optional[str] = None) -> str:
    try:
        template = env.get_template(template_name)
        return template.render(context)
    except TemplateError as e:
        logger.error(f"Error rendering template '{template_name}': {e}")
        raise TemplateRenderError(
            f"Template '{template_name}' failed to render: {e}",
            template=template_name,
            record=record,
        ) from e


# ---- Context builders ----

def scoped_wrapper_names(records: Sequence[DomainRecord]) -> FrozenSet[str]:
    """
    Bare wrapper names that records of one module would use for different types.

    Fields behind these names get a wrapper prefixed with their input class
    name (``UserInputIdValid``, ``OrderInputIdValid``) so that every record
    keeps its own distinct wrapper type.
    """
    base_types: Dict[str, set] = {}
    for record in records:
        for field in record.fields:
            base_types.setdefault(wrapper_type_name(field.name), set()).add(field.type_name)
    return frozenset(name for name, types in base_types.items() if len(types) > 1)


def render_fields(
    record: DomainRecord, strategy: RenderStrategy, scoped: FrozenSet[str] = frozenset()
) -> List[RenderedField]:
    """Render every field, rejecting records whose domain field names clash."""
    seen: Dict[str, str] = {}
    rendered = []
    for field in record.fields:
        if field.name in seen:
            raise CodeGenerationError(
                f"Domain field '{field.name}' of {record.name} is produced by both "
                f"'{seen[field.name]}' and '{field.source_field_name}'",
                component="emitter",
                record=record.name,
            )
        seen[field.name] = field.source_field_name
        scope = record.input_name if wrapper_type_name(field.name) in scoped else ""
        rendered.append(strategy.render_field(field, scope))
    return rendered


def _record_context(
    record: DomainRecord, strategy: RenderStrategy, include_wrappers: bool, scoped: FrozenSet[str] = frozenset()
) -> Dict[str, Any]:
    return {
        "domain_name": record.name,
        "input_name": record.input_name,
        "function_name": conversion_function_name(record.name),
        "fields": render_fields(record, strategy, scoped),
        "wrappers": collect_wrappers([record], strategy, scoped) if include_wrappers else [],
        "include_wrappers": include_wrappers,
    }


def collect_wrappers(
    records: Sequence[DomainRecord], strategy: RenderStrategy, scoped: FrozenSet[str] = frozenset()
) -> List[WrapperType]:
    """
    Wrapper types for a whole module, each declared once.

    Records share a wrapper when the wrapped types agree. Names listed in
    ``scoped`` are already qualified per record; a name that still wraps two
    different types (two fields of one record that differ only in case)
    cannot be emitted.
    """
    wrappers: Dict[str, WrapperType] = {}
    for record in records:
        for field in render_fields(record, strategy, scoped):
            wrapper = field.wrapper
            if wrapper is None:
                continue
            existing = wrappers.get(wrapper.name)
            if existing is not None and existing.base_type != wrapper.base_type:
                raise CodeGenerationError(
                    f"Wrapper type '{wrapper.name}' would wrap both '{existing.base_type}' "
                    f"and '{wrapper.base_type}'",
                    component="emitter",
                    record=record.name,
                )
            wrappers.setdefault(wrapper.name, wrapper)
    return list(wrappers.values())


def module_imports(
    module: DeclarationModule, records: Sequence[DomainRecord], variant: TemplateVariant
) -> List[str]:
    """Sorted, de-duplicated import lines for a generated module."""
    runtime_names = [RuntimeNames.CONVERSION_ERROR, RuntimeNames.STRUCT_ERROR, RuntimeNames.VALIDATE]
    if any(record.has_custom_transforms or record.has_text_coercions for record in records):
        runtime_names.append(RuntimeNames.TRANSFORM)
    if any(record.has_text_coercions for record in records):
        runtime_names.append(RuntimeNames.TEXT)

    lines = {
        "from dataclasses import dataclass",
        f"from {RuntimeNames.MODULE} import {', '.join(sorted(runtime_names))}",
    }
    if TemplateVariant(variant) is TemplateVariant.NEWTYPE:
        lines.add("from typing import NewType")

    lines.update(module.imports)
    if records:
        lines.add(f"from {module.module_name} import {', '.join(r.input_name for r in records)}")

    for record in records:
        lines.update(import_line_for(capability) for capability in record.required_capabilities)
        for field in record.fields:
            if field.transform_kind is TransformKind.CUSTOM_TRANSFORM:
                root = qualifier_root(field.type_name)
                if root:
                    lines.add(f"import {root}")

    return sorted(lines)


# ---- Public API ----

def emit(
    record: DomainRecord,
    variant: TemplateVariant = TemplateVariant.DIRECT,
    env: Optional[Environment] = None,
) -> str:
    """
    Render one domain record: its wrapper types (newtype variant), the frozen
    dataclass, and the validate-then-convert function.

    Identical input always yields identical text.
    """
    env = env or setup_jinja_env()
    strategy = get_strategy(variant)
    context = _record_context(record, strategy, include_wrappers=True)
    return _render(env, GeneratedFile.RECORD_TEMPLATE, context, record=record.name)


def generated_header(module: DeclarationModule) -> str:
    source = module.path.name if module.path is not None else module.module_name
    return GeneratedFile.HEADER_TEMPLATE.format(source=source)


def emit_module(
    module: DeclarationModule,
    records: Sequence[DomainRecord],
    variant: TemplateVariant = TemplateVariant.DIRECT,
    env: Optional[Environment] = None,
) -> str:
    """Render a complete generated module for one declaration file."""
    env = env or setup_jinja_env()
    strategy = get_strategy(variant)
    scoped = scoped_wrapper_names(records)

    rendered_records = [
        _render(
            env,
            GeneratedFile.RECORD_TEMPLATE,
            _record_context(record, strategy, include_wrappers=False, scoped=scoped),
            record=record.name,
        )
        for record in records
    ]
    context = {
        "header": generated_header(module),
        "source": module.path.name if module.path is not None else module.module_name,
        "imports": module_imports(module, records, variant),
        "wrappers": collect_wrappers(records, strategy, scoped),
        "records": rendered_records,
    }
    logger.debug(f"Rendering module for {module.module_name} with {len(records)} record(s)")
    return _render(env, GeneratedFile.MODULE_TEMPLATE, context)
