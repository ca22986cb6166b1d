"""schemaform: schema-driven form definitions and value management.

schemaform provides:
- A declarative form schema (fields, options, validation rules) parsed from
  JSON-compatible data and serializable back to it
- A validation engine returning deterministic, display-ready messages
- A form value controller holding runtime values, hydrating schema defaults and
  notifying listeners of changes

Rendering is left to the UI layer, which reads and writes the controller and
subscribes to its change notifications.

Basic usage:
    >>> from schemaform import FormSchema, FormValueController
    >>> schema = FormSchema.from_dict({
    ...     "fields": [{"id": "email", "type": "email", "required": True}]
    ... })
    >>> controller = FormValueController(schema=schema)
    >>> controller.validate_field("email")
    'Please enter "email".'
"""

__version__ = "0.1.0"
__author__ = "schemaform contributors"

# Version info
VERSION = (0, 1, 0)

# Core exports
from schemaform.config import DEFAULT_MESSAGES, ValidationMessages
from schemaform.controller import FormValueController
from schemaform.errors import SchemaError
from schemaform.events import ChangeNotifier
from schemaform.options import FieldOption
from schemaform.rules import ValidationRule
from schemaform.schema import FieldSchema, FormSchema
from schemaform.types import FieldType, ValidationRuleKind
from schemaform.validation import FieldError, ValidationResult

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "ChangeNotifier",
    "DEFAULT_MESSAGES",
    "FieldError",
    "FieldOption",
    "FieldSchema",
    "FieldType",
    "FormSchema",
    "FormValueController",
    "SchemaError",
    "ValidationMessages",
    "ValidationResult",
    "ValidationRule",
    "ValidationRuleKind",
]
