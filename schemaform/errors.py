"""Error types for schemaform.

Schema problems are raised as SchemaError at the boundary where schema source is
parsed or a schema object is constructed. Invalid schemas are never partially
built: the constructing call either returns a complete object or raises.

Field validation failures are not exceptions. They are returned as plain message
strings from ``validate`` calls (or as FieldError records, see
schemaform.validation), where ``None`` means the value is valid.
"""

from typing import Any, Dict, Optional


class SchemaError(ValueError):
    """Raised when schema source or a schema object is invalid.

    Covers unrecognized field type tokens, unrecognized validation rule kinds,
    rules missing their numeric limit or pattern, malformed source records and
    form schemas without fields.

    Attributes:
        path: Dot-notation location in the source (e.g. "fields.2.validations.0"),
            empty when the error concerns the root or a programmatic object
        value: The offending value, when one is known

    Examples:
        >>> err = SchemaError("Unsupported field type: 'slider'", path="fields.0.type")
        >>> str(err)
        "fields.0.type: Unsupported field type: 'slider'"
    """

    def __init__(self, message: str, path: str = "", value: Optional[Any] = None):
        self.message = message
        self.path = path
        self.value = value
        super().__init__(f"{path}: {message}" if path else message)

    def at(self, prefix: str) -> "SchemaError":
        """Return a copy of this error located under ``prefix``.

        Used while unwinding nested parsing so the final error names the full
        path of the offending record.
        """
        path = f"{prefix}.{self.path}" if self.path else prefix
        return SchemaError(self.message, path=path, value=self.value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {"message": self.message}
        if self.path:
            result["path"] = self.path
        if self.value is not None:
            result["value"] = self.value
        return result


__all__ = [
    "SchemaError",
]
