"""
Custom field types understood by the default transform registry.

Declare an input field with one of these types to have the generated code
convert it into a richer domain value::

    from validgen.runtime import fieldtypes

    @dataclass
    class UserInput:
        date_of_birth_str: fieldtypes.DateOfBirthString = field(metadata={"validate": "required"})

Each type exposes ``to_validated(raw)`` which returns the domain value or
raises ``FieldTransformError``.
"""

import datetime

from passlib.context import CryptContext

from .validation import FieldTransformError


DATE_FORMAT = "%Y-%m-%d"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class DateOfBirthString(str):
    """A date of birth as submitted, in ``YYYY-MM-DD`` form."""

    @staticmethod
    def to_validated(raw: str) -> datetime.date:
        if not isinstance(raw, str):
            raise FieldTransformError(f"expected a date string, got {type(raw).__name__}")
        try:
            parsed = datetime.datetime.strptime(raw.strip(), DATE_FORMAT).date()
        except ValueError:
            raise FieldTransformError(f"'{raw}' is not a date in YYYY-MM-DD format") from None
        if parsed > datetime.date.today():
            raise FieldTransformError(f"date of birth {parsed.isoformat()} is in the future")
        return parsed


class PlainPassword(str):
    """A clear-text password that is hashed on conversion."""

    @staticmethod
    def to_validated(raw: str) -> str:
        if not isinstance(raw, str) or not raw:
            raise FieldTransformError("password must be a non-empty string")
        return pwd_context.hash(raw)


def verify_password(raw: str, hashed: str) -> bool:
    """Check a clear-text password against a hash produced by ``PlainPassword``."""
    return pwd_context.verify(raw, hashed)
