from datetime import datetime, timezone
import json
import pytest

from typedstore.codec import decode_row, decode_value, encode_row, encode_value
from typedstore.errors import DecodeError, InvalidColumnTypeError
from typedstore.types import ColumnModel, TableModel, TaggedValue

T = TaggedValue.of


def test_encode_structured_values_as_json_text():
    assert json.loads(encode_value(ColumnModel("o", "object"), T({"hello": "world"}))) == {"hello": "world"}
    assert encode_value(ColumnModel("a", "array"), T((1, 2, 3))) == "[1, 2, 3]"


def test_encode_date_as_iso_text():
    stamp = datetime(2024, 5, 17, 9, 30, tzinfo=timezone.utc)
    assert encode_value(ColumnModel("d", "date"), T(stamp)) == "2024-05-17T09:30:00+00:00"


def test_encode_int_drops_fraction_and_passes_natives():
    assert encode_value(ColumnModel("i", "int"), T(3.0)) == 3
    assert isinstance(encode_value(ColumnModel("i", "int"), T(3.0)), int)
    assert encode_value(ColumnModel("b", "boolean"), T(False)) is False
    assert encode_value(ColumnModel("r", "real"), T(1.5)) == 1.5
    assert encode_value(ColumnModel("s", "string"), T("it's")) == "it's"
    assert encode_value(ColumnModel("s", "string"), T(None)) is None


def test_encode_unserialisable_object_fails_type_check():
    with pytest.raises(InvalidColumnTypeError):
        encode_value(ColumnModel("o", "object"), T({"when": datetime(2024, 1, 1)}))


def test_encode_row_follows_declared_order():
    model = TableModel("t", [{"name": "a", "type": "int"}, {"name": "b", "type": "array"}])
    assert encode_row(model, {"b": T([1]), "a": T(4)}) == [4, "[1]"]
    assert encode_row(model, {}) == [None, None]


@pytest.mark.parametrize("col_type,raw,expected", [
    ("object", '{"hello": "world"}', {"hello": "world"}),
    ("array", "[1, 2, 3]", [1, 2, 3]),
    ("int", "30", 30),
    ("real", 2, 2.0),
    ("boolean", 1, True),
    ("boolean", 0, False),
    ("boolean", "true", True),
    ("date", "2024-05-17T09:30:00", datetime(2024, 5, 17, 9, 30)),
    ("uuid", "raw", "raw"),
    ("int", None, None),
])
def test_decode_value(col_type, raw, expected):
    assert decode_value(ColumnModel("c", col_type), raw) == expected


def test_decode_row_leaves_identifier_untouched():
    model = TableModel("t", [{"name": "tags", "type": "array"}])
    assert decode_row(model, {"id": 7, "tags": "[]"}) == {"id": 7, "tags": []}


def test_decode_corrupt_text_raises():
    with pytest.raises(DecodeError):
        decode_value(ColumnModel("o", "object"), "{not json")
    with pytest.raises(DecodeError):
        decode_value(ColumnModel("d", "date"), "yesterday")
