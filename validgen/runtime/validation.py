"""
Declarative struct validation used by generated code.

Rules are read from the ``validate`` metadata of each dataclass field, e.g.
``field(metadata={"validate": "required,min=5"})``. For every input class a
pydantic model is built once; each field gets one ``AfterValidator`` that runs
its rules in order and reports the first failure as a ``PydanticCustomError``
whose type is the rule name. Pydantic collects failures across fields.
"""

import dataclasses
import functools
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Callable, Dict, List, Optional, Tuple

from pydantic import AfterValidator, ValidationError, create_model
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from ..constants import TagKeys, TagSentinels


# =============================================================================
# ERRORS
# =============================================================================

@dataclass(frozen=True)
class FieldViolation:
    """One broken rule on one field."""

    field: str
    rule: str
    message: str
    value: Any = None

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class RuleDefinitionError(TypeError):
    """A validate tag is malformed or cannot apply to the field's value."""


class StructValidationError(ValueError):
    """Raised by ``validate_struct`` with every field-level violation."""

    def __init__(self, type_name: str, violations: List[FieldViolation]):
        self.type_name = type_name
        self.violations: Tuple[FieldViolation, ...] = tuple(violations)
        super().__init__(str(self))

    @property
    def fields(self) -> List[str]:
        return [v.field for v in self.violations]

    def __str__(self) -> str:
        details = "; ".join(str(v) for v in self.violations)
        return f"{self.type_name} has {len(self.violations)} invalid field(s): {details}"


class ConversionError(ValueError):
    """Raised by generated conversion routines; no domain value was built."""

    def __init__(self, input_type: str, cause: StructValidationError):
        self.input_type = input_type
        self.cause = cause
        self.violations: Tuple[FieldViolation, ...] = cause.violations
        super().__init__(f"validation failed for {input_type}: {cause}")


# =============================================================================
# RULES
# =============================================================================

_SIZED = (str, bytes, list, tuple, dict, set, frozenset)
_NUMBER = (int, float, Decimal)


def _is_zero(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, _SIZED + _NUMBER + (bool,)):
        return not value
    return False


def _measure(value: Any, rule: str) -> Any:
    """Length for strings and collections, the value itself for numbers."""
    if isinstance(value, bool):
        raise RuleDefinitionError(f"Rule '{rule}' cannot apply to a bool value")
    if isinstance(value, _SIZED):
        return len(value)
    if isinstance(value, _NUMBER):
        return value
    raise RuleDefinitionError(f"Rule '{rule}' cannot apply to a {type(value).__name__} value")


def _number(param: str, rule: str) -> Decimal:
    try:
        bound = Decimal(param)
    except InvalidOperation:
        raise RuleDefinitionError(f"Rule '{rule}' expects a number, got '{param}'")
    if bound.is_nan():
        raise RuleDefinitionError(f"Rule '{rule}' expects a number, got '{param}'")
    return bound


def _compare(check: Callable[[Any, Decimal], bool], describe: str) -> Callable[[Any, str, str], Optional[str]]:
    def apply(value: Any, param: str, rule: str) -> Optional[str]:
        bound = _number(param, rule)
        if value is None:
            return f"is missing; must be {describe} {param}"
        measured = Decimal(str(_measure(value, rule)))
        # NaN compares neither above nor below any bound
        if measured.is_nan():
            return f"value must be {describe} {param}, got NaN"
        if check(measured, bound):
            return None
        unit = "length" if isinstance(value, _SIZED) else "value"
        return f"{unit} must be {describe} {param}"
    return apply


def _required(value: Any, param: str, rule: str) -> Optional[str]:
    return "is required" if _is_zero(value) else None


def _oneof(value: Any, param: str, rule: str) -> Optional[str]:
    allowed = param.split()
    if value is not None and str(value) in allowed:
        return None
    return f"must be one of [{', '.join(allowed)}]"


def _email(value: Any, param: str, rule: str) -> Optional[str]:
    if value is None:
        return "must be a valid email address"
    if not isinstance(value, str):
        raise RuleDefinitionError(f"Rule '{rule}' cannot apply to a {type(value).__name__} value")
    try:
        validate_email(value)
    except PydanticCustomError:
        return "must be a valid email address"
    return None


RULES: Dict[str, Callable[[Any, str, str], Optional[str]]] = {
    "required": _required,
    "min": _compare(lambda v, b: v >= b, "at least"),
    "max": _compare(lambda v, b: v <= b, "at most"),
    "len": _compare(lambda v, b: v == b, "exactly"),
    "eq": _compare(lambda v, b: v == b, "equal to"),
    "ne": _compare(lambda v, b: v != b, "different from"),
    "gt": _compare(lambda v, b: v > b, "greater than"),
    "gte": _compare(lambda v, b: v >= b, "at least"),
    "lt": _compare(lambda v, b: v < b, "less than"),
    "lte": _compare(lambda v, b: v <= b, "at most"),
    "oneof": _oneof,
    "email": _email,
}

OMITEMPTY = "omitempty"


def parse_rules(tag: str) -> List[Tuple[str, str, str]]:
    """Split a validate tag into ``(name, param, token)`` triples."""
    parsed = []
    for token in tag.split(TagSentinels.RULE_SEPARATOR):
        token = token.strip()
        if not token:
            continue
        name, _, param = token.partition("=")
        if name != OMITEMPTY and name not in RULES:
            raise RuleDefinitionError(f"Undefined validation rule '{name}' in tag '{tag}'")
        parsed.append((name, param, token))
    return parsed


def _field_validator(rules: List[Tuple[str, str, str]]) -> Callable[[Any], Any]:
    def check(value: Any) -> Any:
        for name, param, token in rules:
            if name == OMITEMPTY:
                if _is_zero(value):
                    return value
                continue
            problem = RULES[name](value, param, token)
            if problem is not None:
                raise PydanticCustomError(name, "{detail}", {"rule": token, "detail": problem})
        return value
    return check


@dataclass(frozen=True)
class _RulesModel:
    """Pydantic model for one input class plus its model-to-dataclass field names."""

    model: type
    field_names: Dict[str, str]


@functools.lru_cache(maxsize=None)
def _rules_model(cls: type) -> _RulesModel:
    # Model fields get positional names so dataclass fields like "json" or
    # "model_config" never collide with BaseModel attributes.
    definitions = {}
    field_names = {}
    for index, field in enumerate(dataclasses.fields(cls)):
        tag = field.metadata.get(TagKeys.VALIDATE, "")
        rules = parse_rules(tag) if isinstance(tag, str) else []
        if rules:
            key = f"f{index}"
            definitions[key] = (Annotated[Any, AfterValidator(_field_validator(rules))], None)
            field_names[key] = field.name
    model = create_model(f"{cls.__name__}Rules", **definitions)
    return _RulesModel(model=model, field_names=field_names)


def _violations(error: ValidationError, field_names: Dict[str, str]) -> List[FieldViolation]:
    violations = []
    for detail in error.errors():
        loc = detail.get("loc") or ("__root__",)
        ctx = detail.get("ctx") or {}
        violations.append(
            FieldViolation(
                field=field_names.get(str(loc[0]), str(loc[0])),
                rule=ctx.get("rule", detail.get("type", "")),
                message=detail.get("msg", ""),
                value=detail.get("input"),
            )
        )
    return violations


def validate_struct(value: Any) -> None:
    """
    Validate a dataclass instance against its fields' ``validate`` tags.

    Raises:
        StructValidationError: One violation per failing field
        RuleDefinitionError: If a tag names an unknown rule or a rule that
            cannot apply to the field's value
        TypeError: If ``value`` is not a dataclass instance
    """
    if not dataclasses.is_dataclass(value) or isinstance(value, type):
        raise TypeError(f"validate_struct expects a dataclass instance, got {type(value).__name__}")

    rules = _rules_model(type(value))
    data = {key: getattr(value, name) for key, name in rules.field_names.items()}
    try:
        rules.model.model_validate(data)
    except ValidationError as e:
        raise StructValidationError(type(value).__name__, _violations(e, rules.field_names)) from e


class FieldTransformError(ValueError):
    """Raised by a custom field type's ``to_validated`` when the raw value is unusable."""


def transform_field(field_name: str, converter: Callable[[Any], Any], raw: Any) -> Any:
    """Run a custom field converter, reporting failures against ``field_name``."""
    try:
        return converter(raw)
    except FieldTransformError as e:
        raise StructValidationError(
            getattr(converter, "__qualname__", "transform").split(".")[0],
            [FieldViolation(field=field_name, rule="transform", message=str(e), value=raw)],
        ) from e


def to_text(raw: Any) -> str:
    """
    Converter for hashing candidates declared with a non-``str`` type.

    ``bytes`` are decoded as UTF-8; other values go through ``str()``.
    """
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        try:
            return bytes(raw).decode("utf-8")
        except UnicodeDecodeError:
            raise FieldTransformError("value is not valid UTF-8 text") from None
    if raw is None:
        raise FieldTransformError("value is missing")
    return str(raw)
