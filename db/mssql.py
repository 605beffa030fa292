#!/usr/bin/env python3

import logging
from typing import Any

import pyodbc

from core.status_codes import StatusCode
from db.base import SentinelClient


class MSSQLClient(SentinelClient):
    """
    MSSQL backend for the sentinel client.

    Guarantees:
      - Deterministic connection behavior (autocommit, explicit timeout)
      - Driver errors surface as False / None plus last_error, never raised
      - Connection and authentication failures DO raise, with a StatusCode
    """

    driver_error = pyodbc.Error

    def __init__(
        self,
        server: str,
        database: str,
        username: str,
        password: str,
        driver: str = "ODBC Driver 18 for SQL Server",
        encrypt: bool = True,
        trust_cert: bool = False,
        timeout: int = 30,
    ):
        super().__init__()
        self.server = server
        self.database = database
        self.username = username
        self.password = password
        self.driver = driver
        self.encrypt = encrypt
        self.trust_cert = trust_cert
        self.timeout = timeout

        self.connect()

    # ------------------------------------------------------------
    # CONNECTION
    # ------------------------------------------------------------
    def connect(self) -> None:
        conn_str = (
            f"DRIVER={{{self.driver}}};"
            f"SERVER={self.server};"
            f"DATABASE={self.database};"
            f"UID={self.username};"
            f"PWD={self.password};"
            f"Encrypt={'yes' if self.encrypt else 'no'};"
            f"TrustServerCertificate={'yes' if self.trust_cert else 'no'};"
            f"Connection Timeout={self.timeout};"
        )

        try:
            logging.info("DB_CONNECT backend=mssql server=%s database=%s", self.server, self.database)
            self.connection = pyodbc.connect(conn_str, autocommit=True)
        except pyodbc.InterfaceError as e:
            logging.error("DB_INTERFACE_ERROR %s", e)
            raise RuntimeError(StatusCode.DB_CONNECTION_FAILED) from e
        except pyodbc.Error as e:
            logging.error("DB_AUTH_OR_CONNECT_ERROR %s", e)
            raise RuntimeError(StatusCode.DB_AUTH_FAILED) from e

    # ------------------------------------------------------------
    # SCHEMA INSPECTION
    # ------------------------------------------------------------
    def table_exists(self, table: str, schema: str = "dbo") -> bool:
        sql = """
        SELECT COUNT(1)
        FROM INFORMATION_SCHEMA.TABLES
        WHERE TABLE_SCHEMA = ?
          AND TABLE_NAME = ?
        """
        cursor = self.connection.cursor()
        cursor.execute(sql, (schema, table))
        row = cursor.fetchone()
        return bool(row and row[0])

    # ------------------------------------------------------------
    # DIALECT
    # ------------------------------------------------------------
    def quote_identifier(self, name: str) -> str:
        return "[" + name.replace("]", "]]") + "]"

    def _insert_statement(self, sql: str) -> str:
        # SCOPE_IDENTITY() is only visible inside the batch that inserted.
        return f"{sql}; SELECT SCOPE_IDENTITY()"

    def _fetch_insert_id(self, cursor: Any) -> Any:
        if not cursor.nextset():
            return 0
        row = cursor.fetchone()
        return row[0] if row and row[0] is not None else 0
