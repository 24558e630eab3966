from datetime import date, datetime
import pytest

from typedstore.errors import InvalidSchemaError
from typedstore.types import (
    ColumnModel, TableModel, TaggedValue, ValueKind, logical_type, physical_type,
)


@pytest.mark.parametrize("logical,physical", [
    ("boolean", "BOOLEAN"), ("string", "TEXT"), ("int", "INTEGER"), ("real", "REAL"),
    ("date", "TEXT"), ("object", "TEXT"), ("array", "TEXT"), ("uuid", "TEXT"),
])
def test_physical_type_mapping(logical, physical):
    assert physical_type(logical) == physical


def test_logical_type_reverse_mapping():
    assert logical_type("INTEGER") == "int"
    assert logical_type("real") == "real"
    assert logical_type("BOOLEAN") == "boolean"
    assert logical_type("TEXT") == "string"
    assert logical_type("BLOB") == "string"


def test_column_ddl_marks_required_not_null():
    assert ColumnModel("email", "string", required=True).ddl() == '"email" TEXT NOT NULL'
    assert ColumnModel("tags", "array").ddl() == '"tags" TEXT'


def test_table_model_from_dict_freezes_columns():
    model = TableModel.coerce({"name": "t", "columns": [{"name": "a", "type": "int"}]})
    assert model.columns == (ColumnModel("a", "int", False),)
    assert model.column_names() == ["id", "a"]
    assert model.column("A").name == "a"


@pytest.mark.parametrize("raw", [
    {"columns": []},
    {"name": "t", "columns": [{"name": "a"}]},
    {"name": "t", "columns": "a int"},
    {"name": "t", "columns": [["a", "int"]]},
    "users",
])
def test_malformed_definitions_rejected(raw):
    with pytest.raises(InvalidSchemaError):
        TableModel.coerce(raw)


@pytest.mark.parametrize("value,kind", [
    (None, ValueKind.ABSENT),
    (True, ValueKind.BOOLEAN),
    ("x", ValueKind.TEXT),
    (3, ValueKind.INTEGER),
    (2.5, ValueKind.REAL),
    (datetime(2024, 1, 1), ValueKind.TIMESTAMP),
    ({"a": 1}, ValueKind.MAPPING),
    ([1, 2], ValueKind.SEQUENCE),
    ((1, 2), ValueKind.SEQUENCE),
    (b"raw", ValueKind.UNSUPPORTED),
    (date(2024, 1, 1), ValueKind.UNSUPPORTED),
])
def test_tagged_value_classification(value, kind):
    assert TaggedValue.of(value).kind is kind


def test_unsupported_value_described_by_python_type():
    assert TaggedValue.of(b"raw").describe() == "bytes"
    assert TaggedValue.of(2.5).describe() == "real"
