"""Validation rules attached to field schemas.

A ValidationRule is an immutable constraint evaluated against one field value.
Every rule exposes the same contract, ``validate(field, value)``, returning an
error message or None. Rules are evaluated by FieldSchema in declaration order
and the first failure wins.

The ``async`` kind is special: its callback is supplied programmatically and is
only run by ``validate_async``. The synchronous ``validate`` path never reports
an asynchronous result.
"""

import inspect
import logging
import re
from dataclasses import dataclass, field
from numbers import Number
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional, Pattern, Union

from schemaform.codec import as_number, stringify, text_length
from schemaform.config import DEFAULT_MESSAGES, ValidationMessages
from schemaform.errors import SchemaError
from schemaform.types import ValidationRuleKind

if TYPE_CHECKING:
    from schemaform.schema import FieldSchema

logger = logging.getLogger(__name__)

AsyncValidator = Callable[[Any], Union[Optional[str], Awaitable[Optional[str]]]]
"""Callback for ``async`` rules.

Receives the field value and returns an error message, None, or an awaitable
resolving to either.
"""


@dataclass(frozen=True)
class ValidationRule:
    """A single constraint attached to a field.

    Attributes:
        kind: Which check this rule performs
        limit: Numeric limit for minLength/maxLength/min/max rules
        pattern: Regular expression source for pattern rules
        message: Optional message overriding the default template
        async_validator: Callback for async rules (never serialized)

    Examples:
        >>> rule = ValidationRule(ValidationRuleKind.MIN_LENGTH, limit=3)
        >>> rule.to_dict()
        {'type': 'minLength', 'value': 3}

        >>> ValidationRule(ValidationRuleKind.MAX)
        Traceback (most recent call last):
            ...
        schemaform.errors.SchemaError: Validation rule 'max' requires a numeric limit
    """
    kind: ValidationRuleKind
    limit: Optional[Union[int, float]] = None
    pattern: Optional[str] = None
    message: Optional[str] = None
    async_validator: Optional[AsyncValidator] = field(default=None, compare=False, repr=False)
    _regex: Optional[Pattern] = field(default=None, init=False, compare=False, repr=False)

    def __post_init__(self):
        """Enforce the payload each rule kind requires."""
        if not isinstance(self.kind, ValidationRuleKind):
            object.__setattr__(self, "kind", ValidationRuleKind.parse(self.kind))

        if self.kind.needs_limit:
            if not _is_number(self.limit):
                raise SchemaError(
                    f"Validation rule '{self.kind.value}' requires a numeric limit",
                    value=self.limit,
                )
            if self.kind.is_length:
                object.__setattr__(self, "limit", int(self.limit))

        if self.kind == ValidationRuleKind.PATTERN:
            if not isinstance(self.pattern, str):
                raise SchemaError(
                    "Validation rule 'pattern' requires a pattern",
                    value=self.pattern,
                )
            try:
                object.__setattr__(self, "_regex", re.compile(self.pattern))
            except re.error as exc:
                raise SchemaError(
                    f"Invalid regular expression {self.pattern!r}: {exc}",
                    value=self.pattern,
                ) from exc

    def validate(
        self,
        field: "FieldSchema",
        value: Any,
        messages: Optional[ValidationMessages] = None,
    ) -> Optional[str]:
        """Check ``value`` against this rule.

        A None value always passes; required-ness is checked by the field
        before any rule runs.

        Args:
            field: The field the value belongs to (its label is used in messages)
            value: The value to check
            messages: Template catalog for default messages

        Returns:
            An error message, or None if the rule is satisfied
        """
        if value is None:
            return None
        messages = messages or DEFAULT_MESSAGES

        if self.kind == ValidationRuleKind.MIN_LENGTH:
            if text_length(value) < self.limit:
                return self.message or messages.format("min_length", field.label, self.limit)
        elif self.kind == ValidationRuleKind.MAX_LENGTH:
            if text_length(value) > self.limit:
                return self.message or messages.format("max_length", field.label, self.limit)
        elif self.kind == ValidationRuleKind.MIN:
            number = as_number(value)
            if number is not None and number < self.limit:
                return self.message or messages.format("min", field.label, self.limit)
        elif self.kind == ValidationRuleKind.MAX:
            number = as_number(value)
            if number is not None and number > self.limit:
                return self.message or messages.format("max", field.label, self.limit)
        elif self.kind == ValidationRuleKind.PATTERN:
            if self._regex.search(stringify(value)) is None:
                return self.message or messages.format("pattern", field.label)
        # ASYNC rules are only evaluated by validate_async()
        return None

    async def validate_async(self, field: "FieldSchema", value: Any) -> Optional[str]:
        """Run the asynchronous callback of an ``async`` rule.

        Non-async rules, async rules without a callback and None values return
        None. When the callback reports an error without text, the rule's own
        message is used.

        Examples:
            >>> import asyncio
            >>> async def taken(value):
            ...     return "Username taken" if value == "admin" else None
            >>> rule = ValidationRule(ValidationRuleKind.ASYNC, async_validator=taken)
            >>> asyncio.run(rule.validate_async(None, "admin"))
            'Username taken'
        """
        if self.kind != ValidationRuleKind.ASYNC or self.async_validator is None:
            return None
        if value is None:
            return None
        logger.debug("Running async validator for field %s", getattr(field, "id", None))
        result = self.async_validator(value)
        if inspect.isawaitable(result):
            result = await result
        if not result:
            return None
        if isinstance(result, str):
            return result
        return self.message or stringify(result)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {"type": self.kind.value}
        if self.kind.needs_limit:
            result["value"] = self.limit
        if self.kind == ValidationRuleKind.PATTERN:
            result["pattern"] = self.pattern
        if self.message is not None:
            result["message"] = self.message
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidationRule":
        """Create a ValidationRule from a source record.

        The limit is read from ``value`` or ``limit``; a pattern rule reads
        ``pattern`` and falls back to ``value``.

        Raises:
            SchemaError: If the kind is unknown or the required payload is missing
        """
        if not isinstance(data, dict):
            raise SchemaError("Validation rule must be an object", value=data)
        if "type" not in data:
            raise SchemaError("Validation rule is missing 'type'", value=data)

        kind = ValidationRuleKind.parse(data["type"])
        message = data.get("message")
        if message is not None:
            message = str(message)

        if kind == ValidationRuleKind.PATTERN:
            pattern = data.get("pattern")
            if pattern is None:
                pattern = data.get("value")
            return cls(kind=kind, pattern=pattern, message=message)

        if kind.needs_limit:
            limit = data.get("value")
            if limit is None:
                limit = data.get("limit")
            return cls(kind=kind, limit=limit, message=message)

        return cls(kind=kind, message=message)


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


__all__ = [
    "ValidationRule",
    "AsyncValidator",
]
