"""Core type definitions for schemaform.

This module defines the closed enumerations used throughout the package:
- FieldType: Input kinds a field can declare
- ValidationRuleKind: Kinds of validation rules a field can carry
- FieldErrorCode: Structured codes attached to field validation errors
- ErrorSource: Whether an error came from the synchronous or asynchronous pass

Tokens read from schema source are matched case-insensitively. Unknown tokens
raise SchemaError so that an invalid schema never gets partially constructed.
"""

from enum import Enum
from typing import Dict

from schemaform.errors import SchemaError


class FieldType(str, Enum):
    """Input kinds supported by a field schema."""
    TEXT = "text"
    NUMBER = "number"
    EMAIL = "email"
    PASSWORD = "password"
    MULTILINE = "multiline"
    DROPDOWN = "dropdown"
    CHECKBOX = "checkbox"
    SWITCH = "switch"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"

    @property
    def is_boolean(self) -> bool:
        """Whether values of this type are booleans (hydrated to False)."""
        return self in (FieldType.CHECKBOX, FieldType.SWITCH)

    @property
    def is_temporal(self) -> bool:
        """Whether values of this type represent a date and/or time."""
        return self in (FieldType.DATE, FieldType.TIME, FieldType.DATETIME)

    @property
    def is_textual(self) -> bool:
        """Whether values of this type are edited as free text."""
        return self in (
            FieldType.TEXT,
            FieldType.NUMBER,
            FieldType.EMAIL,
            FieldType.PASSWORD,
            FieldType.MULTILINE,
        )

    @classmethod
    def parse(cls, raw: str) -> "FieldType":
        """Resolve a field type token.

        Examples:
            >>> FieldType.parse("Dropdown")
            <FieldType.DROPDOWN: 'dropdown'>
            >>> FieldType.parse("switcher")
            <FieldType.SWITCH: 'switch'>
        """
        return _lookup(_FIELD_TYPE_TOKENS, raw, "field type")


class ValidationRuleKind(str, Enum):
    """Kinds of validation rules.

    Values match the tokens emitted when a rule is serialized.
    """
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    MIN = "min"
    MAX = "max"
    PATTERN = "pattern"
    ASYNC = "async"

    @property
    def needs_limit(self) -> bool:
        """Whether rules of this kind require a numeric limit."""
        return self in (
            ValidationRuleKind.MIN_LENGTH,
            ValidationRuleKind.MAX_LENGTH,
            ValidationRuleKind.MIN,
            ValidationRuleKind.MAX,
        )

    @property
    def is_length(self) -> bool:
        return self in (ValidationRuleKind.MIN_LENGTH, ValidationRuleKind.MAX_LENGTH)

    @classmethod
    def parse(cls, raw: str) -> "ValidationRuleKind":
        """Resolve a validation rule token.

        Examples:
            >>> ValidationRuleKind.parse("MINLENGTH")
            <ValidationRuleKind.MIN_LENGTH: 'minLength'>
            >>> ValidationRuleKind.parse("max_length")
            <ValidationRuleKind.MAX_LENGTH: 'maxLength'>
        """
        return _lookup(_RULE_KIND_TOKENS, raw, "validation rule")


class FieldErrorCode(str, Enum):
    """Validation error codes for individual field failures."""
    REQUIRED = "required"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    TOO_SMALL = "too_small"
    TOO_LARGE = "too_large"
    INVALID_FORMAT = "invalid_format"
    CUSTOM = "custom"


class ErrorSource(str, Enum):
    """Which validation pass produced an error."""
    SYNC = "sync"
    ASYNC = "async"


_FIELD_TYPE_TOKENS: Dict[str, FieldType] = {t.value: t for t in FieldType}
_FIELD_TYPE_TOKENS["switcher"] = FieldType.SWITCH

_RULE_KIND_TOKENS: Dict[str, ValidationRuleKind] = {
    "minlength": ValidationRuleKind.MIN_LENGTH,
    "min_length": ValidationRuleKind.MIN_LENGTH,
    "min-length": ValidationRuleKind.MIN_LENGTH,
    "maxlength": ValidationRuleKind.MAX_LENGTH,
    "max_length": ValidationRuleKind.MAX_LENGTH,
    "max-length": ValidationRuleKind.MAX_LENGTH,
    "min": ValidationRuleKind.MIN,
    "max": ValidationRuleKind.MAX,
    "pattern": ValidationRuleKind.PATTERN,
    "async": ValidationRuleKind.ASYNC,
}

# Rule kind -> error code reported by FieldSchema.check()
RULE_KIND_TO_ERROR_CODE: Dict[ValidationRuleKind, FieldErrorCode] = {
    ValidationRuleKind.MIN_LENGTH: FieldErrorCode.TOO_SHORT,
    ValidationRuleKind.MAX_LENGTH: FieldErrorCode.TOO_LONG,
    ValidationRuleKind.MIN: FieldErrorCode.TOO_SMALL,
    ValidationRuleKind.MAX: FieldErrorCode.TOO_LARGE,
    ValidationRuleKind.PATTERN: FieldErrorCode.INVALID_FORMAT,
    ValidationRuleKind.ASYNC: FieldErrorCode.CUSTOM,
}


def _lookup(table, raw, what):
    if isinstance(raw, Enum) and raw in table.values():
        return raw
    if not isinstance(raw, str):
        raise SchemaError(f"Unsupported {what}: {raw!r}", value=raw)
    token = raw.strip().lower()
    try:
        return table[token]
    except KeyError:
        raise SchemaError(f"Unsupported {what}: {raw!r}", value=raw) from None


__all__ = [
    "FieldType",
    "ValidationRuleKind",
    "FieldErrorCode",
    "ErrorSource",
    "RULE_KIND_TO_ERROR_CODE",
]
