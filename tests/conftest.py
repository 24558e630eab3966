import pytest
from typedstore import Database
from typedstore.sqlite_backend import BackendConfig

USERS = {
    "name": "users",
    "columns": [
        {"name": "email", "type": "string", "required": True},
        {"name": "age", "type": "int"},
    ],
}

@pytest.fixture()
def db():
    database = Database(":memory:", config=BackendConfig())
    yield database
    database.close()

@pytest.fixture()
def file_db(tmp_path):
    path = tmp_path / 'typed.db'
    database = Database(str(path), config=BackendConfig())
    yield database
    database.close()

@pytest.fixture()
def users(db):
    r = db.create_table(USERS)
    assert r['success'], r
    return db
