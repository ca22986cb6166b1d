"""Selectable choices for dropdown fields."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from schemaform.codec import stringify, value_equals
from schemaform.errors import SchemaError

LabelSource = Union[str, Callable[[Any], Any]]


@dataclass(frozen=True)
class FieldOption:
    """One selectable choice of a dropdown field.

    The value is deliberately untyped: it may be a primitive, a nested record or
    a list, and it is stored in the controller exactly as declared.

    Attributes:
        value: The value stored when this option is selected
        label: Display text
        is_default: Whether this option is selected when nothing else is
        metadata: Arbitrary extra data carried with the option

    Examples:
        >>> option = FieldOption.from_dict({"value": 1, "label": "One"})
        >>> option.matches("1")
        True
        >>> FieldOption.from_dict({"value": 2}).label
        '2'
    """
    value: Any
    label: str
    is_default: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    # metadata is a dict
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self):
        object.__setattr__(self, "metadata", dict(self.metadata or {}))

    def matches(self, candidate: Any) -> bool:
        """Whether ``candidate`` selects this option (loose equality)."""
        return value_equals(self.value, candidate)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "value": self.value,
            "label": self.label,
        }
        if self.is_default:
            result["default"] = True
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldOption":
        """Create FieldOption from a source record.

        The value keeps its original type. ``default`` must be exactly True for
        the option to be flagged as default.
        """
        if not isinstance(data, dict):
            raise SchemaError("Option must be an object", value=data)
        value = data.get("value")
        label = data.get("label")
        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise SchemaError("Option 'metadata' must be an object", value=metadata)
        return cls(
            value=value,
            label=stringify(value if label is None else label),
            is_default=data.get("default") is True,
            metadata=metadata,
        )

    @classmethod
    def from_source(
        cls,
        value: Any,
        label: Optional[LabelSource] = None,
        label_key: Optional[str] = None,
        is_default: bool = False,
    ) -> "FieldOption":
        """Wrap an arbitrary value as an option without flattening it.

        The label comes from ``label`` when given (a string, or a callable
        applied to the value), else from ``value[label_key]`` when the value is
        a mapping holding that key, else from the value's string form.

        Examples:
            >>> user = {"id": 7, "name": "Ada"}
            >>> option = FieldOption.from_source(user, label_key="name")
            >>> option.label, option.value is user
            ('Ada', True)
        """
        return cls(
            value=value,
            label=_resolve_label(value, label, label_key),
            is_default=is_default,
        )

    @classmethod
    def from_sources(
        cls,
        items: Iterable[Any],
        label: Optional[LabelSource] = None,
        label_key: Optional[str] = None,
    ) -> List["FieldOption"]:
        """Convert a collection of arbitrary values into options.

        Examples:
            >>> cities = [{"code": "HN", "name": "Hanoi"}, {"code": "SG", "name": "Saigon"}]
            >>> [o.label for o in FieldOption.from_sources(cities, label_key="name")]
            ['Hanoi', 'Saigon']
        """
        return [cls.from_source(item, label=label, label_key=label_key) for item in items]


def _resolve_label(value: Any, label: Optional[LabelSource], label_key: Optional[str]) -> str:
    if callable(label):
        return stringify(label(value))
    if label is not None:
        return stringify(label)
    if label_key is not None:
        if isinstance(value, Mapping) and label_key in value:
            return stringify(value[label_key])
        if not isinstance(value, Mapping) and hasattr(value, label_key):
            return stringify(getattr(value, label_key))
    return stringify(value)


__all__ = [
    "FieldOption",
    "LabelSource",
]
