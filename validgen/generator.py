"""
Generation pipeline for validgen.

declaration file -> parser -> resolver -> emitter -> formatter -> writer

Declaration files are processed one at a time in sorted path order. Every
file is rendered in memory before anything is written, so a failure in any
file leaves every output untouched.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from jinja2 import Environment

from .codegen_utils import format_python_code_using_black
from .colored_logging import log_progress, log_success
from .config import GeneratorConfigSchema, build_registry
from .domain.models import GenerationResult
from .domain.registry import TransformRegistry
from .domain.resolver import resolve
from .emitter import TemplateVariant, emit_module, setup_jinja_env
from .exceptions import DeclarationParseError
from .parser import parse_declaration_module
from .writer import output_path_for, write_generated_file


logger = logging.getLogger(__name__)


def _read_source(path: Path) -> str:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        raise DeclarationParseError(f"Cannot read declaration file: {e}", filename=str(path)) from e


def render_declaration_file(
    path: Union[str, Path],
    config: GeneratorConfigSchema,
    registry: Optional[TransformRegistry] = None,
    env: Optional[Environment] = None,
) -> GenerationResult:
    """
    Render the generated module for one declaration file without writing it.

    Args:
        path: Declaration file
        config: Validated generator configuration
        registry: Transform registry; built from ``config`` when omitted
        env: Jinja environment to reuse across files

    Returns:
        The rendered (and, if enabled, Black-formatted) module
    """
    path = Path(path)
    registry = registry if registry is not None else build_registry(config)
    conventions = config.naming_conventions()

    log_progress(logger, f"Processing declarations in {path}")
    module = parse_declaration_module(
        _read_source(path),
        path=path,
        module_name=config.source_module,
        input_suffix=conventions.input_suffix,
    )
    if not module.records:
        logger.warning(f"No classes ending in '{conventions.input_suffix}' found in {path}")

    records = [resolve(record, registry, conventions) for record in module.records]
    content = emit_module(module, records, TemplateVariant(config.template_variant), env=env)

    output_path = output_path_for(path, config.output_suffix)
    if config.format_output:
        content = format_python_code_using_black(output_path, content, config.line_length)

    return GenerationResult(input_path=path, output_path=output_path, records=records, content=content)


def render_all(
    config: GeneratorConfigSchema, registry: Optional[TransformRegistry] = None
) -> List[GenerationResult]:
    """Render every configured declaration file, in sorted order."""
    registry = registry if registry is not None else build_registry(config)
    env = setup_jinja_env()
    paths = sorted(Path(p) for p in config.input_files)
    return [render_declaration_file(path, config, registry, env) for path in paths]


def run_generation(
    config: GeneratorConfigSchema, registry: Optional[TransformRegistry] = None
) -> List[GenerationResult]:
    """Render all files, then write them. Nothing is written if any file fails."""
    results = render_all(config, registry)
    for result in results:
        write_generated_file(result.output_path, result.content, config.overwrite_unmarked)
        log_success(logger, f"Generated {result.output_path} ({len(result.records)} record(s))")
    return results


def check_generation(
    config: GeneratorConfigSchema, registry: Optional[TransformRegistry] = None
) -> List[Path]:
    """Return the output files that are missing or differ from a fresh render."""
    stale = []
    for result in render_all(config, registry):
        current: Optional[str] = None
        if result.output_path.is_file():
            with open(result.output_path, "r", encoding="utf-8") as f:
                current = f.read()
        if current != result.content:
            logger.warning(f"Out of date: {result.output_path}")
            stale.append(result.output_path)
        else:
            logger.debug(f"Up to date: {result.output_path}")
    return stale
