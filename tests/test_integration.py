"""Integration tests for the complete form lifecycle.

Tests cover end-to-end scenarios combining:
- Parsing a schema from JSON text
- Default hydration by the controller
- Change notification while a user fills the form
- Synchronous and asynchronous validation
- Serializing the schema back to JSON
"""

import asyncio
import dataclasses
import json

import pytest

from schemaform import (
    FieldOption,
    FormSchema,
    FormValueController,
    SchemaError,
    ValidationRule,
    ValidationRuleKind,
)


SIGNUP_JSON = """
{
  "title": "Sign up",
  "fields": [
    {"id": "username", "label": "Username", "type": "text", "required": true,
     "validations": [
       {"type": "minLength", "value": 3},
       {"type": "pattern", "value": "^[a-z0-9_]+$", "message": "Lowercase letters, digits and _ only"}
     ]},
    {"id": "email", "label": "Email", "type": "email", "required": true,
     "validations": [{"type": "pattern", "value": "^[^@]+@[^@]+$"}]},
    {"id": "age", "label": "Age", "type": "number",
     "validations": [{"type": "min", "value": 18}, {"type": "max", "value": 120}]},
    {"id": "plan", "label": "Plan", "type": "dropdown", "options": [
      {"value": "free", "label": "Free"},
      {"value": "pro", "label": "Pro", "default": true}
    ]},
    {"id": "terms", "label": "Terms", "type": "checkbox", "required": true},
    {"id": "bio", "label": "Bio", "type": "multiline",
     "validations": [{"type": "maxLength", "value": 10}]}
  ]
}
"""


class TestSignupFlow:
    """Test a user filling in a sign-up form."""

    def test_fill_and_validate(self):
        """Parse, hydrate, edit and validate a form end to end.

        This test verifies that:
        1. Defaults are hydrated from the parsed schema
        2. Every edit notifies listeners exactly once
        3. Validation reflects the values as they change
        """
        schema = FormSchema.from_json(SIGNUP_JSON)
        controller = FormValueController(schema=schema)
        snapshots = []
        controller.add_listener(lambda: snapshots.append(dict(controller.values)))

        assert dict(controller.values) == {"plan": "pro", "terms": False}

        initial = controller.validate()
        assert initial.is_valid is False
        assert initial.invalid_fields == ["username", "email"]

        controller.set("username", "Al")
        controller.patch({"email": "al@example.com", "age": "17"})
        assert len(snapshots) == 2

        errors = controller.validate_all()
        assert errors["username"] == 'Field "Username" must be at least 3 characters.'
        assert errors["email"] is None
        assert errors["age"] == 'Field "Age" must be greater than or equal to 18.'
        assert errors["plan"] is None

        controller.patch({"username": "Alice", "age": 30})
        assert controller.validate_field("username") == "Lowercase letters, digits and _ only"

        controller.set("username", "alice")
        assert controller.validate().is_valid is True
        assert len(snapshots) == 4

    def test_reset_restores_defaults(self):
        """Reset after editing brings back the schema defaults."""
        controller = FormValueController(schema=FormSchema.from_json(SIGNUP_JSON))
        controller.patch({"username": "alice", "plan": "free", "terms": True})
        controller.reset()
        assert dict(controller.values) == {"plan": "pro", "terms": False}

    def test_dropdown_text_value_selects_option(self):
        """A value stored as text still selects the matching option."""
        schema = FormSchema.from_dict({"fields": [{
            "id": "size",
            "type": "dropdown",
            "options": [{"value": 1, "label": "Small"}, {"value": 2, "label": "Large"}],
        }]})
        controller = FormValueController(schema=schema, values={"size": "2"})
        assert schema.field_by_id("size").option_for(controller.get("size")).label == "Large"

    def test_load_record_into_form(self):
        """A domain record is mapped into the form in one notification."""
        schema = FormSchema.from_json(SIGNUP_JSON)
        controller = FormValueController(schema=schema)
        calls = []
        controller.add_listener(lambda: calls.append(1))

        record = {"login": "bob", "contact": {"email": "bob@example.com"}}
        controller.set_from_source(record, {
            "username": lambda r: r["login"],
            "email": lambda r: r["contact"]["email"],
            "age": lambda r: r["age"],
        })

        assert controller.get("username") == "bob"
        assert controller.get("email") == "bob@example.com"
        assert controller.exists("age") is False
        assert calls == [1]


class TestAsyncFlow:
    """Test asynchronous validation wired into a parsed schema."""

    def test_async_rule_added_to_parsed_schema(self):
        """Async checks are attached in code and merged with sync errors."""
        taken = {"admin", "root"}

        async def available(value):
            await asyncio.sleep(0)
            return value in taken

        parsed = FormSchema.from_json(SIGNUP_JSON)
        username = parsed.field_by_id("username")
        rules = [
            *username.validations,
            ValidationRule(
                ValidationRuleKind.ASYNC,
                message="Username is taken",
                async_validator=available,
            ),
        ]
        schema = FormSchema(
            fields=[
                dataclasses.replace(f, validations=rules) if f is username else f
                for f in parsed.fields
            ],
            title=parsed.title,
        )

        controller = FormValueController(
            schema=schema,
            values={"username": "root", "email": "r@example.com", "terms": True},
        )
        async_errors = asyncio.run(controller.validate_all_async())
        assert async_errors == {"username": "Username is taken"}

        result = controller.validate(async_errors)
        assert result.is_valid is False
        assert result.invalid_fields == ["username"]

        controller.set("username", "rooty")
        async_errors = asyncio.run(controller.validate_all_async())
        assert controller.validate(async_errors).is_valid is True


class TestSchemaRoundtrip:
    """Test serializing and reparsing schemas."""

    def test_json_roundtrip(self):
        """to_json output parses back to an equal schema."""
        schema = FormSchema.from_json(SIGNUP_JSON)
        again = FormSchema.from_json(schema.to_json(indent=2))
        assert again == schema
        assert json.loads(again.to_json())["title"] == "Sign up"

    def test_options_from_records(self):
        """Options built from records survive serialization."""
        cities = [{"code": "HN", "name": "Hanoi"}, {"code": "SG", "name": "Saigon"}]
        options = FieldOption.from_sources(cities, label_key="name")
        source = {"fields": [{
            "id": "city",
            "type": "dropdown",
            "options": [o.to_dict() for o in options],
        }]}
        schema = FormSchema.from_json(json.dumps(source))
        controller = FormValueController(schema=schema)
        assert controller.get("city") == {"code": "HN", "name": "Hanoi"}

    def test_broken_schema_reports_path(self):
        """Errors deep in the source name the offending record."""
        broken = json.loads(SIGNUP_JSON)
        broken["fields"][2]["validations"][1] = {"type": "max"}
        with pytest.raises(SchemaError) as exc_info:
            FormSchema.from_dict(broken)
        assert exc_info.value.path.startswith("fields.2.validations.1")
