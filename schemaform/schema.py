"""Field and form schemas.

A FormSchema is the declarative, serializable description of a form: an ordered
tuple of FieldSchema objects plus form-level metadata. Schemas are immutable and
are parsed once, when the form is set up.

Parsing happens in two stages:

1. Decoding: JSON text (or any structure the caller already decoded) becomes a
   loosely-typed tree of dicts and lists.
2. Checking and conversion: the tree is checked against a JSON Schema describing
   the source format (Draft 7, via jsonschema) and then converted into the
   typed model. Every SchemaError is raised in this stage, with the dotted path
   of the offending record.

Usage:
    >>> schema = FormSchema.from_dict({
    ...     "title": "Sign up",
    ...     "fields": [
    ...         {"id": "name", "type": "text", "required": True},
    ...         {"id": "plan", "type": "dropdown", "options": [
    ...             {"value": "free", "label": "Free"},
    ...             {"value": "pro", "label": "Pro", "default": True},
    ...         ]},
    ...     ],
    ... })
    >>> schema.field_by_id("plan").default_option.value
    'pro'
    >>> schema.field_by_id("name").validate("")
    'Please enter "name".'
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import jsonschema
from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match

from schemaform.codec import is_empty, stringify, to_structured
from schemaform.config import DEFAULT_MESSAGES, ValidationMessages
from schemaform.errors import SchemaError
from schemaform.options import FieldOption
from schemaform.rules import ValidationRule
from schemaform.types import (
    RULE_KIND_TO_ERROR_CODE,
    ErrorSource,
    FieldErrorCode,
    FieldType,
    ValidationRuleKind,
)
from schemaform.validation import FieldError

logger = logging.getLogger(__name__)


# JSON Schema describing the source format of a single validation rule
RULE_SOURCE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "type": {"type": "string"},
        "value": {"type": ["number", "string"]},
        "limit": {"type": "number"},
        "pattern": {"type": "string"},
        "message": {"type": "string"},
    },
    "required": ["type"],
}

OPTION_SOURCE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "value": {},
        "label": {"type": ["string", "number", "boolean"]},
        "default": {},
        "metadata": {"type": "object"},
    },
    "required": ["value"],
}

FIELD_SOURCE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": {"type": ["string", "integer"], "minLength": 1},
        "label": {"type": ["string", "number"]},
        "type": {"type": "string"},
        "hint": {"type": "string"},
        "description": {"type": "string"},
        "required": {"type": "boolean"},
        "readOnly": {"type": "boolean"},
        "placeholder": {"type": "string"},
        "metadata": {"type": "object"},
        "initialValue": {},
        "options": {"type": "array", "items": OPTION_SOURCE_SCHEMA},
        "validations": {"type": "array", "items": RULE_SOURCE_SCHEMA},
    },
    "required": ["id", "type"],
}

FORM_SOURCE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "description": {"type": "string"},
        "metadata": {"type": "object"},
        "fields": {"type": "array", "minItems": 1, "items": FIELD_SOURCE_SCHEMA},
    },
    "required": ["fields"],
}

Draft7Validator.check_schema(FORM_SOURCE_SCHEMA)
_FIELD_VALIDATOR = Draft7Validator(FIELD_SOURCE_SCHEMA)
_FORM_VALIDATOR = Draft7Validator(FORM_SOURCE_SCHEMA)


@dataclass(frozen=True)
class FieldSchema:
    """Declarative definition of one form field.

    Attributes:
        id: Identifier, unique within the owning FormSchema
        type: Input kind of the field
        label: Display label (defaults to the id)
        hint: Optional hint text
        description: Optional helper text
        required: Whether an empty value is an error
        options: Choices, meaningful for dropdown fields only
        validations: Rules evaluated in declaration order
        read_only: Whether the UI should prevent editing
        placeholder: Optional placeholder text
        metadata: Arbitrary extra data
        initial_value: Value hydrated into a controller when none is supplied

    Examples:
        >>> from schemaform.types import ValidationRuleKind
        >>> name = FieldSchema(
        ...     id="name",
        ...     type=FieldType.TEXT,
        ...     label="Name",
        ...     required=True,
        ...     validations=[ValidationRule(ValidationRuleKind.MIN_LENGTH, limit=3)],
        ... )
        >>> name.validate(None)
        'Please enter "Name".'
        >>> name.validate("Al")
        'Field "Name" must be at least 3 characters.'
        >>> name.validate("Alice") is None
        True
    """
    id: str
    type: FieldType
    label: Optional[str] = None
    hint: Optional[str] = None
    description: Optional[str] = None
    required: bool = False
    options: Tuple[FieldOption, ...] = ()
    validations: Tuple[ValidationRule, ...] = ()
    read_only: bool = False
    placeholder: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    initial_value: Any = None

    # metadata, options and initial values may hold dicts and lists
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self):
        """Validate and normalize fields."""
        if not isinstance(self.id, str) or not self.id:
            raise SchemaError("Field id must be a non-empty string", value=self.id)
        if not isinstance(self.type, FieldType):
            object.__setattr__(self, "type", FieldType.parse(self.type))
        if self.label is None:
            object.__setattr__(self, "label", self.id)
        object.__setattr__(self, "options", tuple(self.options))
        object.__setattr__(self, "validations", tuple(self.validations))
        object.__setattr__(self, "metadata", dict(self.metadata or {}))

    def validate(self, value: Any, messages: Optional[ValidationMessages] = None) -> Optional[str]:
        """Validate ``value`` against this field.

        The required check runs first and always wins. Otherwise the rules run
        in declaration order and the first failure is returned.

        Returns:
            An error message, or None if the value is valid
        """
        error = self.check(value, messages)
        return error.message if error is not None else None

    def check(self, value: Any, messages: Optional[ValidationMessages] = None) -> Optional[FieldError]:
        """Same as validate(), returning a structured FieldError."""
        messages = messages or DEFAULT_MESSAGES
        if self.required and is_empty(value):
            return FieldError(
                path=self.id,
                code=FieldErrorCode.REQUIRED,
                message=messages.format("required", self.label),
            )

        for rule in self.validations:
            message = rule.validate(self, value, messages)
            if message is not None:
                return FieldError(
                    path=self.id,
                    code=RULE_KIND_TO_ERROR_CODE[rule.kind],
                    message=message,
                )
        return None

    async def validate_async(self, value: Any) -> Optional[str]:
        """Run this field's ``async`` rules in order.

        This is separate from validate(): the caller keeps the result and merges
        it with the synchronous one (see schemaform.validation).

        Returns:
            The first asynchronous error message, or None
        """
        for rule in self.validations:
            if rule.kind != ValidationRuleKind.ASYNC:
                continue
            message = await rule.validate_async(self, value)
            if message is not None:
                return message
        return None

    async def check_async(self, value: Any) -> Optional[FieldError]:
        """Same as validate_async(), returning a structured FieldError."""
        message = await self.validate_async(value)
        if message is None:
            return None
        return FieldError(
            path=self.id,
            code=FieldErrorCode.CUSTOM,
            message=message,
            source=ErrorSource.ASYNC,
        )

    @property
    def has_async_rules(self) -> bool:
        return any(rule.kind == ValidationRuleKind.ASYNC for rule in self.validations)

    def option_for(self, value: Any) -> Optional[FieldOption]:
        """First option selected by ``value`` under loose equality."""
        for option in self.options:
            if option.matches(value):
                return option
        return None

    @property
    def default_option(self) -> Optional[FieldOption]:
        """The option flagged as default, else the first option, else None."""
        for option in self.options:
            if option.is_default:
                return option
        return self.options[0] if self.options else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization.

        Optional keys are omitted rather than emitted as null.
        """
        result: Dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.type.value,
        }
        if self.hint is not None:
            result["hint"] = self.hint
        if self.description is not None:
            result["description"] = self.description
        if self.placeholder is not None:
            result["placeholder"] = self.placeholder
        if self.required:
            result["required"] = True
        if self.read_only:
            result["readOnly"] = True
        if self.options:
            result["options"] = [option.to_dict() for option in self.options]
        if self.validations:
            result["validations"] = [rule.to_dict() for rule in self.validations]
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        if self.initial_value is not None:
            result["initialValue"] = self.initial_value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldSchema":
        """Create FieldSchema from a source record.

        Raises:
            SchemaError: If the record is malformed, its type is unknown or any
                of its validation rules is invalid
        """
        _check_source(_FIELD_VALIDATOR, data)
        return cls._build(data)

    @classmethod
    def _build(cls, data: Dict[str, Any]) -> "FieldSchema":
        field_type = _located("type", FieldType.parse, data["type"])

        options: List[FieldOption] = []
        if field_type == FieldType.DROPDOWN:
            for index, item in enumerate(data.get("options") or []):
                options.append(_located(f"options.{index}", FieldOption.from_dict, item))

        validations: List[ValidationRule] = []
        for index, item in enumerate(data.get("validations") or []):
            validations.append(_located(f"validations.{index}", ValidationRule.from_dict, item))

        field_id = str(data["id"])
        label = data.get("label")
        return cls(
            id=field_id,
            type=field_type,
            label=field_id if label is None else stringify(label),
            hint=data.get("hint"),
            description=data.get("description"),
            required=data.get("required") is True,
            options=tuple(options),
            validations=tuple(validations),
            read_only=data.get("readOnly") is True,
            placeholder=data.get("placeholder"),
            metadata=data.get("metadata") or {},
            initial_value=data.get("initialValue"),
        )


@dataclass(frozen=True)
class FormSchema:
    """Ordered collection of field schemas plus form-level metadata.

    Attributes:
        fields: Field schemas in display order (at least one, ids unique)
        title: Optional form title
        description: Optional form description
        metadata: Arbitrary extra data

    Examples:
        >>> schema = FormSchema(fields=[FieldSchema(id="email", type=FieldType.EMAIL)])
        >>> schema.field_by_id("email").label
        'email'
        >>> schema.field_by_id("missing") is None
        True
    """
    fields: Tuple[FieldSchema, ...]
    title: Optional[str] = None
    description: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    _index: Dict[str, FieldSchema] = field(default_factory=dict, init=False, compare=False, repr=False)

    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self):
        """Enforce a non-empty field list with unique ids."""
        fields_ = tuple(self.fields or ())
        if not fields_:
            raise SchemaError("A form schema must contain at least one field", path="fields")

        index: Dict[str, FieldSchema] = {}
        for position, field_schema in enumerate(fields_):
            if not isinstance(field_schema, FieldSchema):
                raise SchemaError(
                    "Expected a FieldSchema",
                    path=f"fields.{position}",
                    value=field_schema,
                )
            if field_schema.id in index:
                raise SchemaError(
                    f"Duplicate field id '{field_schema.id}'",
                    path=f"fields.{position}.id",
                    value=field_schema.id,
                )
            index[field_schema.id] = field_schema

        object.__setattr__(self, "fields", fields_)
        object.__setattr__(self, "metadata", dict(self.metadata or {}))
        object.__setattr__(self, "_index", index)

    def field_by_id(self, field_id: str) -> Optional[FieldSchema]:
        """Look up a field by id; None if no field has that id."""
        return self._index.get(field_id)

    @property
    def field_ids(self) -> List[str]:
        return [f.id for f in self.fields]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization (inverse of from_dict)."""
        result: Dict[str, Any] = {}
        if self.title is not None:
            result["title"] = self.title
        if self.description is not None:
            result["description"] = self.description
        result["fields"] = [f.to_dict() for f in self.fields]
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        return result

    def to_json(self, indent: Optional[int] = None) -> str:
        """Serialize to JSON text; date/time values become ISO strings."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False, default=to_structured)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormSchema":
        """Create FormSchema from decoded source data.

        Raises:
            SchemaError: If the fields list is missing or empty, any field or
                rule is invalid, or two fields share an id
        """
        _check_source(_FORM_VALIDATOR, data)

        fields_ = [
            _located(f"fields.{index}", FieldSchema._build, item)
            for index, item in enumerate(data["fields"])
        ]
        schema = cls(
            fields=tuple(fields_),
            title=data.get("title"),
            description=data.get("description"),
            metadata=data.get("metadata") or {},
        )
        logger.debug("Parsed form schema %r with %d field(s)", schema.title, len(schema.fields))
        return schema

    @classmethod
    def from_json(cls, text: str) -> "FormSchema":
        """Decode JSON text and parse it as a form schema.

        Raises:
            SchemaError: If the text is not valid JSON or the schema is invalid
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SchemaError(f"Invalid JSON: {exc.msg}", value=exc.pos) from exc
        return cls.from_dict(data)


def _located(path, build, item):
    """Call ``build(item)``, prefixing any SchemaError with ``path``."""
    try:
        return build(item)
    except SchemaError as exc:
        raise exc.at(path) from exc


def _check_source(validator: Draft7Validator, data: Any) -> None:
    """Check decoded source data against a source JSON Schema."""
    error = best_match(validator.iter_errors(data))
    if error is not None:
        raise _translate_error(error)


def _translate_error(error: jsonschema.ValidationError) -> SchemaError:
    """Translate a jsonschema ValidationError into a SchemaError.

    Error mapping:
        - 'required' -> missing key, located at the record holding it
        - 'type' -> wrong type for the key
        - 'minItems' on the fields list -> form without fields
        - anything else -> jsonschema's own message
    """
    path = ".".join(str(p) for p in error.absolute_path)

    if error.validator == "required":
        missing = error.message.split("'")[1] if "'" in error.message else "key"
        if missing == "fields" and not path:
            return SchemaError("A form schema must contain at least one field", path="fields")
        return SchemaError(f"Missing required key '{missing}'", path=path)

    if error.validator == "type":
        received = type(error.instance).__name__
        return SchemaError(
            f"Invalid type: expected {error.validator_value}, got {received}",
            path=path,
            value=error.instance,
        )

    if error.validator == "minItems" and path == "fields":
        return SchemaError("A form schema must contain at least one field", path=path)

    if error.validator == "minLength" and path.endswith("id"):
        return SchemaError("Field id must be a non-empty string", path=path, value=error.instance)

    return SchemaError(error.message, path=path, value=error.instance)


__all__ = [
    "FieldSchema",
    "FormSchema",
    "FORM_SOURCE_SCHEMA",
    "FIELD_SOURCE_SCHEMA",
]
