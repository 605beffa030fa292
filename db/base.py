#!/usr/bin/env python3
"""
db/base.py

DB-API backed client speaking the sentinel contract of
core.database_interface.DatabaseClient.

Behavior:
- Driver errors are caught, logged, stored on last_error and returned as
  the False / None sentinel. Nothing raises out of a command.
- last_error is cleared at the start of every call.
- Connections run in autocommit mode; there is no transaction handling here.
- Formats follow the "%s" / "%d" / "%f" convention: one string for every
  column, a sequence by position, or a mapping by column name.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Type, Union

from core.database_interface import DatabaseClient, Format
from core.errors import sql_preview
from core.status_codes import StatusCode


_FORMAT_CASTS = {
    "%s": str,
    "%d": int,
    "%f": float,
}


class SentinelClient(DatabaseClient):
    """
    Shared command implementation for DB-API backends.

    Subclasses provide the connection, identifier quoting, insert-id lookup
    and the driver's base exception class.
    """

    placeholder = "?"
    driver_error: Type[Exception] = Exception

    def __init__(self) -> None:
        self.connection: Any = None

        self.last_error = ""
        self.last_query = ""
        self.insert_id: Any = 0
        self.rows_affected = 0
        self.last_result: List[Tuple[Any, ...]] = []

    # ------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------
    @abstractmethod
    def connect(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def table_exists(self, table: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def quote_identifier(self, name: str) -> str:
        raise NotImplementedError

    def quote_table(self, name: str) -> str:
        return ".".join(self.quote_identifier(part) for part in name.split("."))

    def _insert_statement(self, sql: str) -> str:
        return sql

    @abstractmethod
    def _fetch_insert_id(self, cursor: Any) -> Any:
        raise NotImplementedError

    # ------------------------------------------------------------
    # Health / shutdown
    # ------------------------------------------------------------
    def ping(self) -> None:
        try:
            cursor = self.connection.cursor()
            cursor.execute("SELECT 1")
            cursor.fetchone()
        except Exception as e:
            logging.error("DB_PING_FAILED %s", e)
            raise RuntimeError(StatusCode.DB_CONNECTION_FAILED) from e

    def close(self) -> None:
        try:
            if self.connection:
                self.connection.close()
        except Exception as e:
            logging.error("DB_CLOSE_FAILED %s", e)
        finally:
            self.connection = None

    # ------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------
    def insert(
        self,
        table: str,
        data: Mapping[str, Any],
        format: Format = None,
    ) -> Union[int, bool]:
        self._flush()
        try:
            columns = list(data)
            values = _apply_format(data, format)
            sql = (
                f"INSERT INTO {self.quote_table(table)} "
                f"({', '.join(self.quote_identifier(c) for c in columns)}) "
                f"VALUES ({', '.join(self.placeholder for _ in columns)})"
            )
            cursor = self._run(self._insert_statement(sql), values)
            self.rows_affected = max(cursor.rowcount, 0)
        except (self.driver_error, ValueError) as e:
            return self._fail("DB_INSERT_FAILED", table, e)

        # The row is committed at this point; a failed id lookup must not undo that.
        try:
            self.insert_id = self._fetch_insert_id(cursor)
        except self.driver_error as e:
            logging.warning("DB_INSERT_ID_UNAVAILABLE table=%s %s", table, e)
            self.insert_id = 0
        return self.rows_affected

    def update(
        self,
        table: str,
        data: Mapping[str, Any],
        where: Mapping[str, Any],
        format: Format = None,
        where_format: Format = None,
    ) -> Union[int, bool]:
        self._flush()
        try:
            values = _apply_format(data, format)
            conditions, where_values = self._where_clause(where, where_format)
            assignments = ", ".join(
                f"{self.quote_identifier(c)} = {self.placeholder}" for c in data
            )
            sql = f"UPDATE {self.quote_table(table)} SET {assignments} WHERE {conditions}"
            cursor = self._run(sql, values + where_values)
            self.rows_affected = max(cursor.rowcount, 0)
            return self.rows_affected
        except (self.driver_error, ValueError) as e:
            return self._fail("DB_UPDATE_FAILED", table, e)

    def execute(self, statement: str) -> Union[int, bool]:
        self._flush()
        try:
            cursor = self._run(statement)

            # Result-producing statements report the number of rows returned.
            if cursor.description is not None:
                self.last_result = [tuple(row) for row in cursor.fetchall()]
                self.rows_affected = len(self.last_result)
                return self.rows_affected

            # DDL and friends have no row count.
            if cursor.rowcount < 0:
                return True

            self.rows_affected = cursor.rowcount
            return self.rows_affected
        except self.driver_error as e:
            return self._fail("DB_EXECUTE_FAILED", sql_preview(statement), e)

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------
    def scalar(
        self,
        statement: Optional[str] = None,
        column_index: int = 0,
        row_index: int = 0,
    ) -> Optional[Any]:
        if statement is not None:
            if self.execute(statement) is False:
                return None
        else:
            self.last_error = ""

        if row_index >= len(self.last_result):
            return None

        row = self.last_result[row_index]
        if column_index >= len(row):
            return None

        value = row[column_index]
        return None if value == "" else value

    # ------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------
    def _flush(self) -> None:
        self.last_error = ""
        self.rows_affected = 0
        self.last_result = []

    def _run(self, sql: str, params: Sequence[Any] = ()) -> Any:
        if self.connection is None:
            raise self.driver_error("not connected")
        self.last_query = sql
        cursor = self.connection.cursor()
        if params:
            cursor.execute(sql, tuple(params))
        else:
            cursor.execute(sql)
        return cursor

    def _where_clause(
        self,
        where: Mapping[str, Any],
        where_format: Format,
    ) -> Tuple[str, List[Any]]:
        values = _apply_format(where, where_format)
        parts: List[str] = []
        params: List[Any] = []
        for column, value in zip(where, values):
            if value is None:
                parts.append(f"{self.quote_identifier(column)} IS NULL")
            else:
                parts.append(f"{self.quote_identifier(column)} = {self.placeholder}")
                params.append(value)
        return " AND ".join(parts), params

    def _fail(self, event: str, target: str, error: Exception) -> bool:
        self.last_error = str(error) or error.__class__.__name__
        logging.error("%s target=%s %s", event, target, self.last_error)
        return False


# ============================================================
# Formats
# ============================================================

def _apply_format(data: Mapping[str, Any], format: Format) -> List[Any]:
    columns = list(data)

    if format is None:
        specs: List[Optional[str]] = [None] * len(columns)
    elif isinstance(format, str):
        specs = [format] * len(columns)
    elif isinstance(format, Mapping):
        specs = [format.get(c) for c in columns]
    else:
        specs = list(format)
        # Shorter format lists reuse their first entry, longer ones are cut.
        if specs and len(specs) < len(columns):
            specs = specs + [specs[0]] * (len(columns) - len(specs))
        specs = specs[: len(columns)] or [None] * len(columns)

    return [_cast(data[c], spec, c) for c, spec in zip(columns, specs)]


def _cast(value: Any, spec: Optional[str], column: str) -> Any:
    if value is None or spec is None:
        return value

    cast = _FORMAT_CASTS.get(spec)
    if cast is None:
        raise ValueError(f"Unsupported format {spec!r} for column {column}")

    try:
        return cast(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Cannot format column {column} as {spec}: {value!r}") from e
