"""
Output writer for validgen.

Generated modules sit next to their declaration file with a suffixed stem and
start with a "DO NOT EDIT" marker. Writes are atomic: the content lands in a
temporary file in the same directory and replaces the target in one step.
"""

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Union

from .constants import DefaultConfig, GeneratedFile
from .exceptions import OutputWriteError


logger = logging.getLogger(__name__)


def output_path_for(input_path: Union[str, Path], suffix: str = DefaultConfig.OUTPUT_SUFFIX) -> Path:
    """``forms/input.py`` -> ``forms/input_validation_gen.py``."""
    input_path = Path(input_path)
    return input_path.with_name(f"{input_path.stem}{suffix}.py")


def is_generated_file(path: Union[str, Path]) -> bool:
    """True if the file's first line carries the generated-code marker."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            first_line = f.readline()
    except OSError:
        return False
    return first_line.startswith(GeneratedFile.MARKER)


def write_generated_file(path: Union[str, Path], content: str, overwrite_unmarked: bool = False) -> Path:
    """
    Atomically write a generated module.

    Raises:
        OutputWriteError: If the target exists without the generated marker
            (and ``overwrite_unmarked`` is off) or cannot be written
    """
    path = Path(path)
    if path.exists() and not overwrite_unmarked and not is_generated_file(path):
        raise OutputWriteError(
            f"Refusing to overwrite {path}: it was not generated by validgen",
            path=str(path),
        )

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        # mkstemp creates 0600 files; generated modules are ordinary sources
        os.chmod(tmp_name, stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP | stat.S_IROTH)
        os.replace(tmp_name, path)
    except OSError as e:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise OutputWriteError(f"Could not write {path}: {e}", path=str(path)) from e

    logger.debug(f"Generated file: {path}")
    return path
