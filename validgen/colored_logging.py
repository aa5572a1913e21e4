"""
Console logging for validgen runs.

Level-based ANSI colors, plus distinct colors for the success, progress and
highlight messages the generator emits while processing declaration files.
Colors are only used when the target stream is a terminal.
"""

import logging
import sys
from typing import Optional, TextIO


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colors a record by its level, or by the prefix written by
    one of the ``log_*`` helpers below.
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }

    SPECIAL_COLORS = {
        'success': '\033[92m',    # Bright Green
        'progress': '\033[94m',   # Bright Blue
        'highlight': '\033[96m',  # Bright Cyan
    }

    RESET = '\033[0m'
    BOLD = '\033[1m'

    SUCCESS_PREFIX = '✓ '
    PROGRESS_PREFIX = '→ '
    HIGHLIGHT_PREFIX = '• '
    SECTION_RULE = '=' * 60

    DEFAULT_FORMAT = "%(levelname)s: %(message)s"

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True, stream: Optional[TextIO] = None):
        super().__init__(fmt or self.DEFAULT_FORMAT)
        stream = stream if stream is not None else sys.stderr
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()

    def _color_for(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            return self.COLORS.get(record.levelname, '')

        message = record.getMessage()
        if message.startswith(self.SUCCESS_PREFIX):
            return self.SPECIAL_COLORS['success'] + self.BOLD
        if message.startswith(self.PROGRESS_PREFIX):
            return self.SPECIAL_COLORS['progress']
        if message.startswith(self.HIGHLIGHT_PREFIX):
            return self.SPECIAL_COLORS['highlight']
        if message.strip().startswith(self.SECTION_RULE[:20]):
            return self.BOLD + self.SPECIAL_COLORS['highlight']
        if record.levelno == logging.DEBUG:
            return self.COLORS['DEBUG']
        # plain INFO
        return ''

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        if not self.use_colors:
            return text
        color = self._color_for(record)
        return f"{color}{text}{self.RESET}" if color else text


def setup_colored_logging(
    level: int = logging.INFO, use_colors: bool = True, stream: Optional[TextIO] = None
) -> logging.Handler:
    """
    Route all validgen logging to one console handler on the root logger.

    Any handlers already on the root logger are replaced, so calling this
    twice does not duplicate output.

    Returns:
        The installed handler
    """
    stream = stream if stream is not None else sys.stderr
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColoredFormatter(use_colors=use_colors, stream=stream))
    handler.setLevel(level)

    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return handler


def get_colored_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_success(logger: logging.Logger, message: str) -> None:
    logger.info(f"{ColoredFormatter.SUCCESS_PREFIX}{message}")


def log_progress(logger: logging.Logger, message: str) -> None:
    logger.info(f"{ColoredFormatter.PROGRESS_PREFIX}{message}")


def log_highlight(logger: logging.Logger, message: str) -> None:
    logger.info(f"{ColoredFormatter.HIGHLIGHT_PREFIX}{message}")


def log_section(logger: logging.Logger, section_name: str) -> None:
    """Log a banner line, the upper-cased section name, and another banner line."""
    logger.info(ColoredFormatter.SECTION_RULE)
    logger.info(f"  {section_name.upper()}")
    logger.info(ColoredFormatter.SECTION_RULE)
