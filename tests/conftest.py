# File: tests/conftest.py
# Shared declaration sources and fixtures for writing, generating and importing modules.

import importlib
import sys
import textwrap
import uuid
from pathlib import Path
from typing import Callable, List

import pytest

from validgen.config import GeneratorConfigSchema


@pytest.fixture
def write_declarations(tmp_path: Path) -> Callable[..., Path]:
    """Writes declaration source to a uniquely named module in tmp_path."""

    def _write(source: str, stem: str = None) -> Path:
        stem = stem or f"decl_{uuid.uuid4().hex[:10]}"
        path = tmp_path / f"{stem}.py"
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_config() -> Callable[..., GeneratorConfigSchema]:
    """Builds a validated config for the given declaration files."""

    def _make(*paths: Path, **overrides) -> GeneratorConfigSchema:
        raw = {"input_files": [str(p) for p in paths]}
        raw.update(overrides)
        return GeneratorConfigSchema.model_validate(raw)

    return _make


@pytest.fixture
def import_from_path(monkeypatch):
    """Imports a module file by putting its directory on sys.path for the test."""
    imported: List[str] = []

    def _import(path: Path):
        monkeypatch.syspath_prepend(str(path.parent))
        importlib.invalidate_caches()
        imported.append(path.stem)
        return importlib.import_module(path.stem)

    yield _import

    for name in imported:
        sys.modules.pop(name, None)
