"""Runtime value store for a form.

FormValueController holds the current value of every field, keyed by field id,
for one form instance. It is the only writer of its value map: readers get
snapshots, and every mutation goes through a controller method so that change
notification stays consistent. A notifying operation triggers exactly one
notification, however many keys it touches.

Usage:
    >>> from schemaform.schema import FormSchema
    >>> schema = FormSchema.from_dict({"fields": [
    ...     {"id": "name", "type": "text", "required": True},
    ...     {"id": "subscribe", "type": "checkbox"},
    ... ]})
    >>> controller = FormValueController(schema=schema)
    >>> controller.get("subscribe")
    False
    >>> controller.validate_field("name")
    'Please enter "name".'
    >>> controller.set("name", "Ada")
    >>> controller.validate_all()
    {'name': None, 'subscribe': None}
"""

import logging
from datetime import date, datetime, time
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from schemaform.codec import as_date, as_datetime, as_time
from schemaform.config import DEFAULT_MESSAGES, ValidationMessages
from schemaform.events import ChangeNotifier
from schemaform.schema import FormSchema
from schemaform.types import FieldType
from schemaform.validation import FieldError, ValidationResult, merge_field_errors

logger = logging.getLogger(__name__)

T = TypeVar("T")
Item = TypeVar("Item")


class FormValueController(ChangeNotifier):
    """Mutable value store with default hydration and change notification.

    Values can be of any type (strings, numbers, booleans, lists, mappings,
    arbitrary objects). On construction, and on every reset(), defaults declared
    by the schema are hydrated for fields that have no value yet.

    Attributes:
        schema: The form schema the values belong to, if any

    Examples:
        >>> controller = FormValueController()
        >>> controller.append("tags", "a")
        >>> controller.append("tags", "b")
        >>> controller.get("tags")
        ['a', 'b']
        >>> controller.set("tags", "x")
        >>> controller.append("tags", "y")
        >>> controller.get("tags")
        'y'
    """

    def __init__(
        self,
        schema: Optional[FormSchema] = None,
        values: Optional[Mapping[str, Any]] = None,
        messages: Optional[ValidationMessages] = None,
    ):
        """Initialize the controller.

        Args:
            schema: Optional form schema used for hydration and validation
            values: Optional initial values (copied, never aliased)
            messages: Message templates for default validation messages
        """
        super().__init__()
        self._schema = schema
        self._values: Dict[str, Any] = dict(values or {})
        self._messages = messages or DEFAULT_MESSAGES
        self._hydrate_defaults()

    @property
    def schema(self) -> Optional[FormSchema]:
        return self._schema

    @property
    def values(self) -> Mapping[str, Any]:
        """Read-only snapshot of all current values."""
        return MappingProxyType(dict(self._values))

    def get_all(self) -> Mapping[str, Any]:
        """Alias for the ``values`` snapshot."""
        return self.values

    # -- reads -----------------------------------------------------------

    def get(self, field_id: str) -> Any:
        """Stored value of ``field_id`` as-is, or None if absent."""
        return self._values.get(field_id)

    def value_of(self, field_id: str) -> Any:
        """Alias for get()."""
        return self.get(field_id)

    def get_typed(self, field_id: str, type_: Union[Type[T], Tuple[type, ...]]) -> Optional[T]:
        """Stored value if it is an instance of ``type_``, else None.

        Booleans only match when ``bool`` (or ``object``) is requested, so a
        checkbox value never passes as a number.

        Examples:
            >>> controller = FormValueController(values={"age": 30, "agree": True})
            >>> controller.get_typed("age", int)
            30
            >>> controller.get_typed("age", str) is None
            True
            >>> controller.get_typed("agree", int) is None
            True
        """
        value = self._values.get(field_id)
        if value is None:
            return None
        requested = type_ if isinstance(type_, tuple) else (type_,)
        if isinstance(value, bool) and bool not in requested and object not in requested:
            return None
        if isinstance(value, requested):
            return value
        return None

    def get_datetime(self, field_id: str) -> Optional[datetime]:
        """Stored value coerced to a datetime (ISO strings are parsed)."""
        return as_datetime(self._values.get(field_id))

    def get_date(self, field_id: str) -> Optional[date]:
        """Stored value coerced to a date."""
        return as_date(self._values.get(field_id))

    def get_time(self, field_id: str) -> Optional[time]:
        """Stored value coerced to a time of day (``"H:M"`` strings are parsed)."""
        return as_time(self._values.get(field_id))

    def has(self, field_id: str) -> bool:
        """Whether ``field_id`` is present with a non-None value."""
        return self._values.get(field_id) is not None

    def exists(self, field_id: str) -> bool:
        """Whether ``field_id`` is present, even with a None value."""
        return field_id in self._values

    # -- writes ----------------------------------------------------------

    def set(self, field_id: str, value: Any, notify: bool = True) -> None:
        """Store ``value`` for ``field_id``.

        Nothing happens (and nobody is notified) if the stored value already
        equals ``value`` and has the same type.
        """
        if _same_value(self._values.get(field_id), value):
            return
        self._values[field_id] = value
        self._changed(notify, "set", field_id)

    def append(self, field_id: str, value: Any, notify: bool = True) -> None:
        """Append ``value`` to the list stored for ``field_id``.

        - a stored list is copied and the copy gets ``value`` appended, so a list
          previously handed out is never modified
        - an absent (or None) value becomes ``[value]``
        - any other stored value is replaced by ``value``
        """
        current = self._values.get(field_id)
        if isinstance(current, list):
            self._values[field_id] = [*current, value]
        elif current is None:
            self._values[field_id] = [value]
        else:
            self._values[field_id] = value
        self._changed(notify, "append", field_id)

    def delete(self, field_id: str, notify: bool = True) -> None:
        """Remove ``field_id``; notifies only if it was present."""
        if field_id not in self._values:
            return
        del self._values[field_id]
        self._changed(notify, "delete", field_id)

    def clear(self, field_ids: Optional[Iterable[str]] = None, notify: bool = True) -> None:
        """Remove the given fields, or every field if ``field_ids`` is None.

        Always notifies once (when ``notify`` is set), even if nothing was
        stored.
        """
        if field_ids is None:
            self._values.clear()
        else:
            for field_id in field_ids:
                self._values.pop(field_id, None)
        self._changed(notify, "clear")

    def patch(self, values: Mapping[str, Any], notify: bool = True) -> None:
        """Apply several assignments, notifying at most once.

        Each value is compared with the stored one like set(); listeners are
        notified once if at least one value changed.
        """
        changed: List[str] = []
        for field_id, value in values.items():
            if _same_value(self._values.get(field_id), value):
                continue
            self._values[field_id] = value
            changed.append(field_id)
        if changed:
            self._changed(notify, "patch", ", ".join(changed))

    def set_values(self, values: Mapping[str, Any], notify: bool = True) -> None:
        """Alias for patch()."""
        self.patch(values, notify=notify)

    def set_from_list(
        self,
        items: Iterable[Item],
        mapper: Callable[[Item, int], Mapping[str, Any]],
        notify: bool = True,
    ) -> None:
        """Derive assignments from a list of items and apply them via patch().

        Examples:
            >>> users = [{"name": "John"}, {"name": "Jane"}]
            >>> controller = FormValueController()
            >>> controller.set_from_list(users, lambda user, i: {f"name_{i}": user["name"]})
            >>> dict(controller.values)
            {'name_0': 'John', 'name_1': 'Jane'}
        """
        new_values: Dict[str, Any] = {}
        for index, item in enumerate(items):
            new_values.update(mapper(item, index))
        self.patch(new_values, notify=notify)

    def set_from_source(
        self,
        source: Any,
        extractors: Mapping[str, Callable[[Any], Any]],
        notify: bool = True,
    ) -> None:
        """Extract field values from ``source`` and apply them via patch().

        A field whose extractor raises is left out of the batch; the other
        fields are still applied.

        Examples:
            >>> user = {"first": "John", "last": "Doe"}
            >>> controller = FormValueController()
            >>> controller.set_from_source(user, {
            ...     "name": lambda u: f"{u['first']} {u['last']}",
            ...     "age": lambda u: u["age"],
            ... })
            >>> dict(controller.values)
            {'name': 'John Doe'}
        """
        new_values: Dict[str, Any] = {}
        for field_id, extractor in extractors.items():
            try:
                new_values[field_id] = extractor(source)
            except Exception:
                logger.debug("Skipping field %r: extractor raised", field_id, exc_info=True)
        self.patch(new_values, notify=notify)

    def reset(self, values: Optional[Mapping[str, Any]] = None, notify: bool = True) -> None:
        """Replace every value with ``values`` (or nothing) and re-hydrate defaults."""
        self._values.clear()
        self._values.update(values or {})
        self._hydrate_defaults()
        self._changed(notify, "reset")

    # -- validation ------------------------------------------------------

    def validate_field(self, field_id: str) -> Optional[str]:
        """Validate the stored value of ``field_id``.

        Returns None when there is no schema or the schema has no such field.
        """
        field = self._schema.field_by_id(field_id) if self._schema is not None else None
        if field is None:
            return None
        return field.validate(self._values.get(field_id), self._messages)

    def validate_all(self) -> Dict[str, Optional[str]]:
        """Validate every schema field: field id -> message or None."""
        if self._schema is None:
            return {}
        return {
            field.id: field.validate(self._values.get(field.id), self._messages)
            for field in self._schema.fields
        }

    async def validate_field_async(self, field_id: str) -> Optional[str]:
        """Run the ``async`` rules of ``field_id`` against its stored value.

        The result is not stored: the caller keeps it and passes it to
        validate() together with the other asynchronous results.
        """
        field = self._schema.field_by_id(field_id) if self._schema is not None else None
        if field is None:
            return None
        return await field.validate_async(self._values.get(field_id))

    async def validate_all_async(self) -> Dict[str, Optional[str]]:
        """Run the ``async`` rules of every field that has any, in form order."""
        if self._schema is None:
            return {}
        results: Dict[str, Optional[str]] = {}
        for field in self._schema.fields:
            if field.has_async_rules:
                results[field.id] = await field.validate_async(self._values.get(field.id))
        return results

    def validate(self, async_errors: Optional[Mapping[str, Optional[str]]] = None) -> ValidationResult:
        """Validate the whole form, merging in stored asynchronous results.

        Args:
            async_errors: Field id -> message from a previous asynchronous run

        Returns:
            ValidationResult listing synchronous and asynchronous errors side by
            side; a field failing both passes reports both.
        """
        sync_errors: Dict[str, Optional[FieldError]] = {}
        if self._schema is not None:
            for field in self._schema.fields:
                sync_errors[field.id] = field.check(self._values.get(field.id), self._messages)
        return ValidationResult.from_errors(merge_field_errors(sync_errors, async_errors))

    # -- internals -------------------------------------------------------

    def _changed(self, notify: bool, operation: str, detail: str = "") -> None:
        if not notify:
            return
        logger.debug("Form values changed by %s %s", operation, detail)
        self.notify_listeners()

    def _hydrate_defaults(self) -> None:
        """Fill schema defaults in for fields that have no value yet.

        Order of precedence: the field's initial value, then False for checkbox
        and switch fields, then the value of the default dropdown option. Other
        fields stay absent.
        """
        if self._schema is None:
            return

        for field in self._schema.fields:
            if field.id in self._values:
                continue
            if field.initial_value is not None:
                default = field.initial_value
            elif field.type.is_boolean:
                default = False
            elif field.type == FieldType.DROPDOWN and field.default_option is not None:
                default = field.default_option.value
            else:
                default = None
            if default is None:
                continue
            self._values[field.id] = default
            logger.debug("Hydrated default for field %r", field.id)


def _same_value(current: Any, new: Any) -> bool:
    """Native equality restricted to values of the same type."""
    return type(current) is type(new) and current == new


__all__ = [
    "FormValueController",
]
