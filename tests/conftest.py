from typing import Any, List, Optional, Tuple

import pytest

from core.database_interface import DatabaseClient
from core.gateway import CommandGateway
from db.sqlite import SQLiteClient


class ScriptedClient(DatabaseClient):
    """
    Client double that returns whatever the test scripts and records calls.
    """

    def __init__(self, result: Any = 1, last_error: str = "", insert_id: Any = 0, last_query: str = ""):
        self.result = result
        self.last_error = last_error
        self.insert_id = insert_id
        self.last_query = last_query
        self.calls: List[Tuple[str, tuple]] = []

    def insert(self, table, data, format=None):
        self.calls.append(("insert", (table, data, format)))
        return self.result

    def update(self, table, data, where, format=None, where_format=None):
        self.calls.append(("update", (table, data, where, format, where_format)))
        return self.result

    def execute(self, statement):
        self.calls.append(("execute", (statement,)))
        return self.result

    def scalar(self, statement: Optional[str] = None, column_index: int = 0, row_index: int = 0):
        self.calls.append(("scalar", (statement, column_index, row_index)))
        return self.result


@pytest.fixture
def scripted():
    def _make(**kwargs) -> Tuple[CommandGateway, ScriptedClient]:
        client = ScriptedClient(**kwargs)
        return CommandGateway(client), client

    return _make


@pytest.fixture
def sqlite_client():
    client = SQLiteClient(":memory:")
    client.execute(
        "CREATE TABLE orders ("
        " id INTEGER PRIMARY KEY AUTOINCREMENT,"
        " customer TEXT NOT NULL UNIQUE,"
        " status TEXT,"
        " total REAL"
        ")"
    )
    yield client
    client.close()
