"""Structured validation results for whole forms.

``FieldSchema.validate`` answers with a message string per field. This module
provides the structured counterpart used when a consumer needs the full picture
of a form: FieldError records carrying an error code and the pass that produced
them, and a ValidationResult combining the synchronous pass with asynchronous
results stored by the caller.

Synchronous and asynchronous errors are kept side by side. A field failing both
passes reports two FieldError entries, synchronous first, and neither source
ever replaces the other.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from schemaform.types import ErrorSource, FieldErrorCode


@dataclass(frozen=True)
class FieldError:
    """Per-field validation error details.

    Attributes:
        path: Id of the field that failed
        code: Specific validation error code
        message: Human-readable message intended for display
        source: Whether the synchronous or asynchronous pass reported it

    Examples:
        >>> err = FieldError(path="email", code=FieldErrorCode.REQUIRED, message='Please enter "Email".')
        >>> err.to_dict()["code"]
        'required'
    """
    path: str
    code: FieldErrorCode
    message: str
    source: ErrorSource = ErrorSource.SYNC

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "path": self.path,
            "code": self.code.value if isinstance(self.code, FieldErrorCode) else self.code,
            "message": self.message,
            "source": self.source.value if isinstance(self.source, ErrorSource) else self.source,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldError":
        """Create FieldError from dict."""
        code = data["code"]
        if isinstance(code, str):
            code = FieldErrorCode(code)
        source = data.get("source", ErrorSource.SYNC)
        if isinstance(source, str):
            source = ErrorSource(source)
        return cls(
            path=data["path"],
            code=code,
            message=data["message"],
            source=source,
        )


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating every field of a form.

    Attributes:
        is_valid: Whether no field reported an error from either pass
        errors: Field errors in form order, synchronous before asynchronous
        invalid_fields: Ids of failing fields, each listed once, in form order

    Examples:
        >>> result = ValidationResult.from_errors([])
        >>> result.is_valid
        True
    """
    is_valid: bool
    errors: List[FieldError] = field(default_factory=list)
    invalid_fields: List[str] = field(default_factory=list)

    __hash__ = None  # type: ignore[assignment]

    @classmethod
    def from_errors(cls, errors: Iterable[FieldError]) -> "ValidationResult":
        errors = list(errors)
        invalid_fields: List[str] = []
        for error in errors:
            if error.path not in invalid_fields:
                invalid_fields.append(error.path)
        return cls(is_valid=not errors, errors=errors, invalid_fields=invalid_fields)

    def errors_for(self, field_id: str) -> List[FieldError]:
        """All errors reported for ``field_id``."""
        return [e for e in self.errors if e.path == field_id]

    def error_for(self, field_id: str) -> Optional[str]:
        """The message to display for ``field_id``, or None if it is valid.

        The synchronous message is preferred when both passes failed.
        """
        for error in self.errors:
            if error.path == field_id:
                return error.message
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "isValid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "invalidFields": list(self.invalid_fields),
        }


def merge_field_errors(
    sync_errors: Mapping[str, Optional[FieldError]],
    async_errors: Optional[Mapping[str, Optional[Union[str, FieldError]]]] = None,
) -> List[FieldError]:
    """Combine synchronous errors with caller-stored asynchronous errors.

    Args:
        sync_errors: Field id -> synchronous FieldError (or None when valid),
            in form order
        async_errors: Field id -> asynchronous error message or FieldError
            (or None), as stored by the caller after running async rules

    Returns:
        FieldError list in form order. Async-only ids not present in
        ``sync_errors`` are appended at the end.

    Examples:
        >>> sync = {"user": FieldError("user", FieldErrorCode.TOO_SHORT, "Too short")}
        >>> merged = merge_field_errors(sync, {"user": "Username taken"})
        >>> [(e.message, e.source.value) for e in merged]
        [('Too short', 'sync'), ('Username taken', 'async')]
    """
    async_errors = async_errors or {}
    merged: List[FieldError] = []

    field_ids = list(sync_errors)
    field_ids.extend(fid for fid in async_errors if fid not in sync_errors)

    for field_id in field_ids:
        sync_error = sync_errors.get(field_id)
        if sync_error is not None:
            merged.append(sync_error)
        async_error = async_errors.get(field_id)
        if async_error is None:
            continue
        if isinstance(async_error, FieldError):
            merged.append(async_error)
        else:
            merged.append(
                FieldError(
                    path=field_id,
                    code=FieldErrorCode.CUSTOM,
                    message=async_error,
                    source=ErrorSource.ASYNC,
                )
            )
    return merged


__all__ = [
    "FieldError",
    "ValidationResult",
    "merge_field_errors",
]
