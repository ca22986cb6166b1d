"""Emptiness, equality and coercion helpers for arbitrary field values.

Field values are untyped: a value may be a primitive, a list, a mapping or any
object handed in by the caller. The helpers here decide how such values are
compared and coerced by the validation rules, the option model and the
controller.
"""

from collections.abc import Mapping, Sequence, Set
from datetime import date, datetime, time
from numbers import Number
from typing import Any, Optional, Union

from dateutil import parser as date_parser


def is_empty(value: Any) -> bool:
    """Whether ``value`` counts as empty for a required field.

    Zero and False are legitimate values and are never empty.

    Examples:
        >>> is_empty(None), is_empty("  "), is_empty([]), is_empty({})
        (True, True, True, True)
        >>> is_empty(0), is_empty(False)
        (False, False)
    """
    if value is None:
        return True
    if isinstance(value, str):
        return len(value.strip()) == 0
    if isinstance(value, (Mapping, Sequence, Set)):
        return len(value) == 0
    return False


def as_number(value: Any) -> Optional[Union[int, float]]:
    """Coerce ``value`` into a number, or return None.

    Examples:
        >>> as_number(5), as_number("12"), as_number(" 1.5 ")
        (5, 12, 1.5)
        >>> as_number("abc") is None, as_number(True) is None, as_number("1_000") is None
        (True, True, True)
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Number):
        return value
    if isinstance(value, str):
        text = value.strip()
        # int() and float() accept digit separators
        if "_" in text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return None
    return None


def stringify(value: Any) -> str:
    """Display form of a value, used for length checks and loose equality."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    return str(value)


def text_length(value: Any) -> int:
    """Length of ``stringify(value)`` in UTF-16 code units.

    Lone surrogates (which JSON text can carry) count as one unit each.
    """
    return len(stringify(value).encode("utf-16-le", "surrogatepass")) // 2


def value_equals(a: Any, b: Any) -> bool:
    """Loose equality: ``==`` first, then string representations.

    Options may be declared with a number while the stored value came from a
    text input, so ``1`` and ``"1"`` compare equal.

    Examples:
        >>> value_equals(1, "1")
        True
        >>> value_equals(None, "null")
        False
    """
    if a == b:
        return True
    if a is None or b is None:
        return False
    return stringify(a) == stringify(b)


def as_datetime(value: Any) -> Optional[datetime]:
    """Coerce a stored date/time value into a datetime, or return None.

    Accepts datetime and date objects and ISO 8601 strings (the format date
    pickers store).
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        try:
            return date_parser.isoparse(value.strip())
        except (ValueError, OverflowError):
            return None
    return None


def as_date(value: Any) -> Optional[date]:
    """Coerce a stored value into a date, or return None."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    parsed = as_datetime(value)
    return parsed.date() if parsed is not None else None


def as_time(value: Any) -> Optional[time]:
    """Coerce a stored value into a time of day, or return None.

    Time pickers store ``"H:M"`` strings without zero padding (``"9:5"``),
    which are accepted alongside ISO times and datetime objects.
    """
    if isinstance(value, time):
        return value
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, str) and value.strip():
        try:
            return date_parser.parse(value.strip(), default=datetime(2000, 1, 1)).time()
        except (ValueError, OverflowError):
            return None
    return None


def to_structured(value: Any) -> Any:
    """Convert temporal values into ISO strings for JSON output.

    Intended as the ``default`` hook of ``json.dumps``; any other value that
    JSON cannot encode raises TypeError as json would.
    """
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


__all__ = [
    "is_empty",
    "as_number",
    "stringify",
    "text_length",
    "value_equals",
    "as_datetime",
    "as_date",
    "as_time",
    "to_structured",
]
