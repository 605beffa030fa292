#!/usr/bin/env python3

import logging
import sqlite3
from typing import Any

from core.status_codes import StatusCode
from db.base import SentinelClient


class SQLiteClient(SentinelClient):
    """
    SQLite backend for the sentinel client.

    Runs in autocommit mode; ":memory:" gives a private throwaway database.
    Single-thread only: the connection and the last_error side channel
    belong to the thread that created the client.
    """

    driver_error = sqlite3.Error

    def __init__(self, path: str = ":memory:", timeout: int = 30):
        super().__init__()
        self.path = path
        self.timeout = timeout
        self.connect()

    def connect(self) -> None:
        try:
            logging.info("DB_CONNECT backend=sqlite path=%s", self.path)
            self.connection = sqlite3.connect(
                self.path,
                timeout=self.timeout,
                isolation_level=None,
            )
        except sqlite3.Error as e:
            logging.error("DB_CONNECT_FAILED backend=sqlite %s", e)
            raise RuntimeError(StatusCode.DB_CONNECTION_FAILED) from e

    def table_exists(self, table: str) -> bool:
        cursor = self.connection.cursor()
        cursor.execute(
            "SELECT COUNT(1) FROM sqlite_master WHERE type = 'table' AND name = ?",
            (table,),
        )
        row = cursor.fetchone()
        return bool(row and row[0])

    def quote_identifier(self, name: str) -> str:
        return '"' + name.replace('"', '""') + '"'

    def _fetch_insert_id(self, cursor: Any) -> Any:
        return cursor.lastrowid or 0
