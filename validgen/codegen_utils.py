import logging
from pathlib import Path

from black import FileMode, InvalidInput, format_str as black_format_str

from .constants import DefaultConfig
from .exceptions import CodeGenerationError


logger = logging.getLogger(__name__)


def format_python_code_using_black(
    filepath: Path, code_string: str, line_length: int = DefaultConfig.LINE_LENGTH
) -> str:
    """
    Formats the given Python code using Black.

    Black refusing the code means the generator emitted invalid Python, so
    the run is aborted instead of writing unformatted output.
    """
    try:
        formatted_code = black_format_str(code_string, mode=FileMode(line_length=line_length))
    except InvalidInput as e:
        logger.error(f"Generated code for {filepath} is not valid Python: {e}")
        raise CodeGenerationError(
            f"Generated code for {filepath} is not valid Python: {e}",
            component="formatter",
        ) from e
    logger.debug(f"Formatted code using Black: {filepath}")
    return formatted_code
