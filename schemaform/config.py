"""Configuration of default validation messages.

Validation failures are strings meant for direct display, so their wording is
configuration. ValidationMessages holds one template per failure kind; templates
are interpolated with ``{label}`` (the field label) and ``{limit}`` (the rule
limit, where the rule has one). DEFAULT_MESSAGES is a fixed English catalog so
that identical input always yields identical messages.
"""

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Optional

from schemaform.errors import SchemaError


@dataclass(frozen=True)
class ValidationMessages:
    """Message templates used when a rule declares no message of its own.

    Attributes:
        required: Shown when a required field is empty
        min_length: Shown when text is shorter than ``{limit}`` code units
        max_length: Shown when text is longer than ``{limit}`` code units
        min: Shown when a number is below ``{limit}``
        max: Shown when a number is above ``{limit}``
        pattern: Shown when text does not match the rule's regular expression

    Examples:
        >>> DEFAULT_MESSAGES.format("min_length", label="Name", limit=3)
        'Field "Name" must be at least 3 characters.'
        >>> custom = DEFAULT_MESSAGES.with_overrides({"required": "{label} is required"})
        >>> custom.format("required", label="Email")
        'Email is required'
    """
    required: str = 'Please enter "{label}".'
    min_length: str = 'Field "{label}" must be at least {limit} characters.'
    max_length: str = 'Field "{label}" must be at most {limit} characters.'
    min: str = 'Field "{label}" must be greater than or equal to {limit}.'
    max: str = 'Field "{label}" must be less than or equal to {limit}.'
    pattern: str = 'Field "{label}" does not match the required format.'

    def format(self, key: str, label: str, limit: Optional[Any] = None) -> str:
        """Render the template stored under ``key``."""
        template = getattr(self, key)
        return template.format(label=label, limit=format_limit(limit))

    def with_overrides(self, overrides: Dict[str, str]) -> "ValidationMessages":
        """Return a copy with some templates replaced.

        Raises:
            SchemaError: If ``overrides`` names an unknown template
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise SchemaError(
                f"Unknown message template(s): {', '.join(unknown)}",
                value=unknown,
            )
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, str]:
        """Convert to dict for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "ValidationMessages":
        """Create a catalog from a partial mapping of templates."""
        return cls().with_overrides(data)


def format_limit(limit: Optional[Any]) -> str:
    """Render a rule limit for display (``10`` rather than ``10.0``)."""
    if limit is None:
        return ""
    if isinstance(limit, float) and limit.is_integer():
        return str(int(limit))
    return str(limit)


DEFAULT_MESSAGES = ValidationMessages()


__all__ = [
    "ValidationMessages",
    "DEFAULT_MESSAGES",
    "format_limit",
]
