"""
Exception hierarchy for validgen.

Every generation-time failure is fatal to the run. Each error carries the
context needed to locate the problem (file, line, record, component) and a
short list of things to try. Errors raised by *generated* code live in
``validgen.runtime``.
"""

from typing import Any, Dict, List, Optional


class ValidGenError(Exception):
    """
    Base exception for all validgen generation errors.

    Subclasses set ``error_code`` and ``default_suggestions``; callers may
    pass their own ``suggestions`` to replace the defaults.
    """

    error_code: Optional[str] = None
    default_suggestions: List[str] = []

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None,
    ):
        """
        Args:
            message: Human-readable error message
            context: Where the error occurred (file, line, record, ...)
            suggestions: Possible fixes, shown under the message
            error_code: Stable code for programmatic handling
        """
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})
        self.suggestions = list(suggestions or self.default_suggestions)
        if error_code is not None:
            self.error_code = error_code

    def _add_context(self, **values: Any) -> None:
        """Record the non-empty keyword values in ``context``."""
        self.context.update({key: value for key, value in values.items() if value is not None})

    def __str__(self) -> str:
        lines = [self.message]
        if self.error_code:
            lines.append(f"Error Code: {self.error_code}")
        if self.context:
            lines.append("Context:")
            lines.extend(f"  {key}: {value}" for key, value in self.context.items())
        if self.suggestions:
            lines.append("Suggestions:")
            lines.extend(f"  • {suggestion}" for suggestion in self.suggestions)
        return "\n".join(lines)


class ConfigurationError(ValidGenError):
    """Raised when configuration is invalid or missing."""

    error_code = "CONFIG_ERROR"
    default_suggestions = [
        "Check the configuration file syntax",
        "Verify all required fields are present",
        "Check the README for configuration examples",
    ]

    def __init__(self, message: str, config_file: str = None, **kwargs):
        super().__init__(message, **kwargs)
        self._add_context(config_file=config_file)


class DeclarationParseError(ValidGenError):
    """Raised when a declaration file cannot be read or parsed."""

    error_code = "PARSE_ERROR"
    default_suggestions = [
        "Check the declaration file is valid Python",
        "Make sure each input class name is declared only once",
    ]

    def __init__(self, message: str, filename: str = None, line: int = None, column: int = None, **kwargs):
        super().__init__(message, **kwargs)
        self._add_context(file=filename, line=line, column=column)
        self.filename = filename
        self.line = line
        self.column = column


class TemplateRenderError(ValidGenError):
    """Raised when a template fails to render. Always a generator defect."""

    error_code = "TEMPLATE_ERROR"
    default_suggestions = [
        "Check the template for syntax errors",
        "Verify every variable the template uses is passed in",
        "Report this as a generator bug",
    ]

    def __init__(self, message: str, template: str = None, record: str = None, **kwargs):
        super().__init__(message, **kwargs)
        self._add_context(template=template, record=record)


class CodeGenerationError(ValidGenError):
    """Raised when emitted code is inconsistent or not valid Python."""

    error_code = "CODE_GENERATION_ERROR"
    default_suggestions = [
        "Check the input declarations for clashing field names",
        "Check custom transform rules for clashing target fields",
        "Run with --stdout --verbose to inspect the rendered module",
    ]

    def __init__(self, message: str, component: str = None, record: str = None, **kwargs):
        super().__init__(message, **kwargs)
        # component is 'emitter' or 'formatter'
        self._add_context(component=component, record=record)


class OutputWriteError(ValidGenError):
    """Raised when a generated file cannot or must not be written."""

    error_code = "OUTPUT_ERROR"
    default_suggestions = [
        "Check write permissions on the output directory",
        "Move hand-written code out of the generated file path",
        "Set overwrite_unmarked: true to replace the file anyway",
    ]

    def __init__(self, message: str, path: str = None, **kwargs):
        super().__init__(message, **kwargs)
        self._add_context(path=path)
