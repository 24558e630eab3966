import pytest
from typedstore.errors import TableAlreadyExistsError
from typedstore.registry import SchemaRegistry
from typedstore.types import TableModel


def test_register_lookup_unregister():
    reg = SchemaRegistry()
    users = TableModel("users", [{"name": "email", "type": "string"}])
    reg.register(users)
    assert reg.lookup("users") is users
    assert reg.lookup("USERS") is users
    assert "users" in reg and len(reg) == 1
    reg.unregister("users")
    assert reg.lookup("users") is None
    reg.unregister("users")  # idempotent
    assert len(reg) == 0


def test_register_rejects_duplicate_names():
    reg = SchemaRegistry()
    reg.register(TableModel("users"))
    with pytest.raises(TableAlreadyExistsError):
        reg.register(TableModel("Users", [{"name": "x", "type": "int"}]))


def test_enumeration_keeps_insertion_order():
    reg = SchemaRegistry()
    for name in ("b", "a", "c"):
        reg.register(TableModel(name))
    assert reg.names() == ["b", "a", "c"]
    assert [m.name for m in reg] == ["b", "a", "c"]
