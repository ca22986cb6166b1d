"""Unit tests for the option model.

Tests cover:
- Parsing options from source records (type preservation, defaults)
- Wrapping arbitrary values as options (labels from keys, attributes, callables)
- Loose matching of stored values
- Serialization
"""

from dataclasses import dataclass

import pytest

from schemaform.errors import SchemaError
from schemaform.options import FieldOption


@dataclass
class City:
    code: str
    name: str


class TestOptionFromDict:
    """Test FieldOption.from_dict."""

    def test_value_type_is_preserved(self):
        """Values keep their original type."""
        assert FieldOption.from_dict({"value": 1}).value == 1
        assert FieldOption.from_dict({"value": [1, 2]}).value == [1, 2]
        assert FieldOption.from_dict({"value": {"id": 3}}).value == {"id": 3}

    def test_label_defaults_to_value_text(self):
        """Missing labels fall back to the value's text."""
        assert FieldOption.from_dict({"value": 42}).label == "42"
        assert FieldOption.from_dict({"value": True}).label == "true"

    def test_label_is_text(self):
        """Non-string labels are converted to text."""
        assert FieldOption.from_dict({"value": "a", "label": 7}).label == "7"

    def test_boolean_label_uses_value_text_form(self):
        """Boolean labels render like boolean values."""
        assert FieldOption.from_dict({"value": 1, "label": True}).label == "true"
        assert FieldOption.from_source(1, label=False).label == "false"

    def test_default_flag_must_be_true(self):
        """Only a boolean True marks the default option."""
        assert FieldOption.from_dict({"value": "a", "default": True}).is_default is True
        assert FieldOption.from_dict({"value": "a", "default": "true"}).is_default is False
        assert FieldOption.from_dict({"value": "a", "default": 1}).is_default is False
        assert FieldOption.from_dict({"value": "a"}).is_default is False

    def test_metadata(self):
        """Metadata is copied into the option."""
        option = FieldOption.from_dict({"value": "a", "metadata": {"icon": "star"}})
        assert option.metadata == {"icon": "star"}

    def test_non_object_record_raises(self):
        """Records must be objects."""
        with pytest.raises(SchemaError):
            FieldOption.from_dict(["a"])


class TestOptionFromSource:
    """Test wrapping arbitrary values as options."""

    def test_explicit_label(self):
        """An explicit label wins."""
        option = FieldOption.from_source({"name": "Ada"}, label="Admin")
        assert option.label == "Admin"
        assert option.value == {"name": "Ada"}

    def test_label_from_mapping_key(self):
        """Labels can be read from a key of a mapping value."""
        record = {"id": 1, "name": "Ada"}
        option = FieldOption.from_source(record, label_key="name")
        assert option.label == "Ada"
        assert option.value is record

    def test_label_from_attribute(self):
        """Labels can be read from an attribute of an object value."""
        option = FieldOption.from_source(City("HN", "Hanoi"), label_key="name")
        assert option.label == "Hanoi"

    def test_missing_key_falls_back_to_text(self):
        """A missing key falls back to the value's text."""
        option = FieldOption.from_source({"id": 1}, label_key="name")
        assert option.label == "{'id': 1}"

    def test_callable_label(self):
        """A callable label is applied to the value."""
        option = FieldOption.from_source(City("SG", "Saigon"), label=lambda c: c.code)
        assert option.label == "SG"

    def test_plain_value(self):
        """Plain values are labelled with their text."""
        assert FieldOption.from_source(3).label == "3"

    def test_bulk_conversion(self):
        """from_sources converts a whole collection, keeping values intact."""
        cities = [City("HN", "Hanoi"), City("SG", "Saigon")]
        options = FieldOption.from_sources(cities, label_key="name")
        assert [o.label for o in options] == ["Hanoi", "Saigon"]
        assert [o.value for o in options] == cities


class TestOptionMatching:
    """Test loose matching."""

    def test_number_option_matches_text(self):
        """A numeric option matches the text a text input produces."""
        option = FieldOption(value=1, label="One")
        assert option.matches("1")
        assert option.matches(1)
        assert not option.matches("2")

    def test_none_does_not_match(self):
        """None never selects a non-None option."""
        assert not FieldOption(value="x", label="X").matches(None)


class TestOptionToDict:
    """Test option serialization."""

    def test_minimal(self):
        """Default flag and metadata are omitted when unset."""
        assert FieldOption(value="a", label="A").to_dict() == {"value": "a", "label": "A"}

    def test_full(self):
        """All keys are written when set."""
        option = FieldOption(value=2, label="Two", is_default=True, metadata={"k": "v"})
        assert option.to_dict() == {
            "value": 2,
            "label": "Two",
            "default": True,
            "metadata": {"k": "v"},
        }

    def test_roundtrip(self):
        """from_dict(to_dict()) reproduces the option."""
        option = FieldOption(value={"id": 1}, label="One", is_default=True)
        assert FieldOption.from_dict(option.to_dict()) == option
