"""Fields & Objects — output rendering through field sets.

Tests cover:
    - generate_hash reads mappings by key and objects by attribute
    - backend accessors override the default lookup
    - null handling, arrays, nested objects and enum checks
    - validate() codes for malformed fields
"""

from types import SimpleNamespace

import pytest

from apiframe.core.arguments import ArgumentSetDefinition
from apiframe.core.enums import EnumDefinition
from apiframe.core.errors import (
    InvalidArrayValueError, InvalidEnumValueError, NullFieldValueError,
)
from apiframe.core.fields import FieldDefinition, FieldSet, ObjectDefinition
from apiframe.core.manifest_errors import ManifestErrors
from apiframe.core.scalars import INTEGER, STRING


def _user_type() -> ObjectDefinition:
    return ObjectDefinition(id="User", fields=FieldSet({
        "name": FieldDefinition("name", STRING),
        "age": FieldDefinition("age", INTEGER, null=True),
    }))


# ─── generate_hash ───────────────────────────────────────────────

def test_generate_hash_from_mapping():
    fields = _user_type().fields
    assert fields.generate_hash({"name": "Phillip", "age": 40}) == {
        "name": "Phillip", "age": 40,
    }


def test_generate_hash_from_object_attributes():
    fields = _user_type().fields
    source = SimpleNamespace(name="Adam", age=None)
    assert fields.generate_hash(source) == {"name": "Adam", "age": None}


def test_backend_overrides_default_lookup():
    fields = FieldSet({
        "name": FieldDefinition("name", STRING, backend=lambda s: s["first"] + " " + s["last"]),
    })
    assert fields.generate_hash({"first": "Ada", "last": "Lovelace"}) == {
        "name": "Ada Lovelace",
    }


def test_non_null_field_rejects_none():
    fields = _user_type().fields
    with pytest.raises(NullFieldValueError) as exc_info:
        fields.generate_hash({"age": 3})
    assert exc_info.value.field.name == "name"


def test_array_field_casts_each_item():
    fields = FieldSet({"tags": FieldDefinition("tags", STRING, array=True)})
    assert fields.generate_hash({"tags": ["a", "b"]}) == {"tags": ["a", "b"]}
    assert fields.generate_hash({"tags": ("c",)}) == {"tags": ["c"]}


@pytest.mark.parametrize("raw", ["abc", {"a": 1}, 7])
def test_array_field_rejects_non_list_values(raw):
    field = FieldDefinition("tags", STRING, array=True)
    with pytest.raises(InvalidArrayValueError) as exc_info:
        field.value({"tags": raw})
    assert exc_info.value.code == "invalid_array_value"
    assert exc_info.value.detail()["field"] == "tags"


def test_object_field_recurses():
    user = _user_type()
    fields = FieldSet({"owner": FieldDefinition("owner", user)})
    assert fields.generate_hash({"owner": {"name": "Eve", "age": 30}}) == {
        "owner": {"name": "Eve", "age": 30},
    }


def test_enum_field_rejects_unknown_value():
    status = EnumDefinition(id="Status", values=("active",))
    fields = FieldSet({"status": FieldDefinition("status", status)})
    assert fields.generate_hash({"status": "active"}) == {"status": "active"}
    with pytest.raises(InvalidEnumValueError):
        fields.generate_hash({"status": "gone"})


# ─── validate ────────────────────────────────────────────────────

def test_validate_valid_field_has_no_errors():
    field = FieldDefinition("name", STRING)
    errors = ManifestErrors()
    field.validate(errors)
    assert errors.for_definition(field) == []


def test_validate_missing_and_invalid_names():
    missing = FieldDefinition(None, STRING)
    invalid = FieldDefinition("bad name!", STRING)
    errors = ManifestErrors()
    missing.validate(errors)
    invalid.validate(errors)
    assert "MissingName" in errors.for_definition(missing)
    assert "InvalidName" in errors.for_definition(invalid)


def test_validate_type_problems():
    untyped = FieldDefinition("name")
    wrong = FieldDefinition("args", ArgumentSetDefinition(id="Args"))
    errors = ManifestErrors()
    untyped.validate(errors)
    wrong.validate(errors)
    assert "MissingType" in errors.for_definition(untyped)
    assert "InvalidType" in errors.for_definition(wrong)


def test_validate_backend_must_be_callable():
    field = FieldDefinition("name", STRING, backend="nope")
    errors = ManifestErrors()
    field.validate(errors)
    assert "InvalidBackend" in errors.for_definition(field)


def test_object_validate_covers_its_fields():
    broken = FieldDefinition("name")
    obj = ObjectDefinition(id="Thing", fields=FieldSet({"name": broken}))
    errors = ManifestErrors()
    obj.validate(errors)
    assert errors.for_definition(obj) == []
    assert errors.for_definition(broken) == ["MissingType"]
