import sqlite3

import pytest

from core.config import DatabaseConfig
from core.db_router import DatabaseRouter
from core.gateway import CommandGateway
from core.status_codes import StatusCode
from db.sqlite import SQLiteClient


def test_sqlite_backend_returns_connected_client():
    client = DatabaseRouter(DatabaseConfig(backend="SQLite")).connect()
    try:
        assert isinstance(client, SQLiteClient)
        assert client.scalar("SELECT 1") == 1
    finally:
        client.close()


def test_gateway_wires_client(tmp_path):
    path = tmp_path / "shop.db"
    seed = SQLiteClient(str(path))
    seed.execute("CREATE TABLE orders (id INTEGER PRIMARY KEY, customer TEXT)")
    seed.close()

    gateway = DatabaseRouter(DatabaseConfig(path=str(path), required_tables=("orders",))).gateway()
    try:
        assert isinstance(gateway, CommandGateway)
        assert gateway.insert("orders", {"customer": "A"}) == 1
    finally:
        gateway.client.close()


def test_missing_required_table_fails_preflight():
    router = DatabaseRouter(DatabaseConfig(required_tables=("orders",)))

    with pytest.raises(RuntimeError) as excinfo:
        router.connect()
    assert excinfo.value.args[0] == StatusCode.DB_SCHEMA_MISSING


@pytest.mark.parametrize(
    "cfg, status",
    [
        (DatabaseConfig(backend=""), StatusCode.DB_BACKEND_NOT_SPECIFIED),
        (DatabaseConfig(backend="oracle"), StatusCode.DB_BACKEND_UNSUPPORTED),
        (DatabaseConfig(backend="mssql"), StatusCode.DB_CONFIGURATION_INVALID),
    ],
)
def test_bad_configuration_is_rejected_before_connecting(cfg, status):
    with pytest.raises(RuntimeError) as excinfo:
        DatabaseRouter(cfg).connect()
    assert excinfo.value.args[0] == status


def test_failed_ping_is_reported(monkeypatch):
    def broken_ping(self):
        raise RuntimeError(StatusCode.DB_CONNECTION_FAILED)

    monkeypatch.setattr(SQLiteClient, "ping", broken_ping)

    with pytest.raises(RuntimeError) as excinfo:
        DatabaseRouter(DatabaseConfig()).connect()
    assert excinfo.value.args[0] == StatusCode.DB_CONNECTION_FAILED


def test_failed_schema_check_closes_connection(monkeypatch):
    closed = []

    def broken_table_exists(self, table):
        raise sqlite3.OperationalError("disk I/O error")

    real_close = SQLiteClient.close

    def recording_close(self):
        closed.append(self)
        real_close(self)

    monkeypatch.setattr(SQLiteClient, "table_exists", broken_table_exists)
    monkeypatch.setattr(SQLiteClient, "close", recording_close)

    with pytest.raises(RuntimeError) as excinfo:
        DatabaseRouter(DatabaseConfig(required_tables=("orders",))).connect()

    assert excinfo.value.args[0] == StatusCode.DB_CONNECTION_FAILED
    assert isinstance(excinfo.value.__cause__, sqlite3.OperationalError)
    assert len(closed) == 1
