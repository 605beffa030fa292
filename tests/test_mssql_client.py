from decimal import Decimal

import pytest

pyodbc = pytest.importorskip("pyodbc")

from core.gateway import CommandGateway  # noqa: E402
from core.errors import QueryError  # noqa: E402
from core.status_codes import StatusCode  # noqa: E402
import db.mssql as mssql  # noqa: E402


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.description = None
        self.rowcount = -1
        self._rows = []
        self._pending = []

    def execute(self, sql, params=()):
        self.conn.executed.append((sql, params))
        if self.conn.fail_with is not None:
            raise self.conn.fail_with
        if sql.endswith("; SELECT SCOPE_IDENTITY()"):
            self.description = None
            self.rowcount = self.conn.rowcount
            self._pending = [(self.conn.identity,)]
        elif sql.lstrip().startswith("SELECT"):
            self.description = (("value",),)
            self._rows = list(self.conn.rows)
        else:
            self.description = None
            self.rowcount = self.conn.rowcount
        return self

    def nextset(self):
        if self.conn.fail_nextset is not None:
            raise self.conn.fail_nextset
        if not self._pending:
            return False
        self.description = (("id",),)
        self._rows, self._pending = self._pending, []
        return True

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)


class FakeConnection:
    def __init__(self):
        self.executed = []
        self.fail_with = None
        self.fail_nextset = None
        self.identity = Decimal("41")
        self.rowcount = 1
        self.rows = []
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def close(self):
        self.closed = True


@pytest.fixture
def conn(monkeypatch):
    fake = FakeConnection()
    seen = {}

    def fake_connect(conn_str, autocommit):
        seen["conn_str"] = conn_str
        seen["autocommit"] = autocommit
        return fake

    monkeypatch.setattr(mssql.pyodbc, "connect", fake_connect)
    fake.seen = seen
    return fake


@pytest.fixture
def client(conn):
    return mssql.MSSQLClient(server="db.local", database="shop", username="svc", password="secret")


def test_connect_uses_autocommit_and_connection_string(conn, client):
    assert conn.seen["autocommit"] is True
    assert "SERVER=db.local;" in conn.seen["conn_str"]
    assert "Encrypt=yes;" in conn.seen["conn_str"]
    assert "TrustServerCertificate=no;" in conn.seen["conn_str"]


def test_connect_failure_maps_to_status(monkeypatch):
    def refuse(conn_str, autocommit):
        raise pyodbc.InterfaceError("IM002", "Data source name not found")

    monkeypatch.setattr(mssql.pyodbc, "connect", refuse)

    with pytest.raises(RuntimeError) as excinfo:
        mssql.MSSQLClient(server="x", database="y", username="u", password="p")
    assert excinfo.value.args[0] == StatusCode.DB_CONNECTION_FAILED


def test_insert_builds_bracketed_statement_and_reads_identity(conn, client):
    assert client.insert("dbo.orders", {"customer": "A", "qty": "3"}, {"qty": "%d"}) == 1

    sql, params = conn.executed[0]
    assert sql == "INSERT INTO [dbo].[orders] ([customer], [qty]) VALUES (?, ?); SELECT SCOPE_IDENTITY()"
    assert params == ("A", 3)
    assert client.insert_id == Decimal("41")
    assert CommandGateway(client).insert("dbo.orders", {"customer": "B"}) == 41


def test_update_builds_where_clause(conn, client):
    conn.rowcount = 0

    assert CommandGateway(client).update("orders", {"status": "paid"}, {"id": 5, "deleted_at": None}) == 0

    sql, params = conn.executed[0]
    assert sql == "UPDATE [orders] SET [status] = ? WHERE [id] = ? AND [deleted_at] IS NULL"
    assert params == ("paid", 5)


def test_driver_error_becomes_query_error(conn, client):
    conn.fail_with = pyodbc.IntegrityError("23000", "Violation of UNIQUE KEY constraint")

    with pytest.raises(QueryError) as excinfo:
        CommandGateway(client).insert("orders", {"customer": "A"})

    assert "UNIQUE KEY" in excinfo.value.db_message
    assert excinfo.value.status_code == StatusCode.DB_INSERT_FAILED


def test_scalar_fetch_without_rows_is_none(conn, client):
    conn.rows = []

    assert CommandGateway(client).scalar_fetch("SELECT max(id) FROM orders") is None


def test_table_exists_queries_information_schema(conn, client):
    conn.rows = [(1,)]

    assert client.table_exists("orders") is True
    sql, params = conn.executed[-1]
    assert "INFORMATION_SCHEMA.TABLES" in sql
    assert params == ("dbo", "orders")


def test_close_is_idempotent(conn, client):
    client.close()
    client.close()

    assert conn.closed is True
    assert client.connection is None


def test_insert_reads_scope_identity_from_same_batch(conn, client):
    conn.identity = Decimal("7")

    assert CommandGateway(client).insert("orders", {"customer": "A"}) == 7
    assert len(conn.executed) == 1
    assert "@@IDENTITY" not in conn.executed[0][0]


def test_insert_without_identity_result_yields_zero(conn, client):
    conn.identity = None

    assert client.insert("orders", {"customer": "A"}) == 1
    assert client.insert_id == 0


def test_failed_identity_lookup_keeps_committed_insert(conn, client):
    conn.fail_nextset = pyodbc.Error("HY000", "Connection busy")

    assert CommandGateway(client).insert("orders", {"customer": "A"}) == 0
    assert client.last_error == ""
    assert client.rows_affected == 1
