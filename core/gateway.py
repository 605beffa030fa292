#!/usr/bin/env python3
"""
core/gateway.py

Command gateway in front of a sentinel-signaling database client.

Responsibilities:
- Delegate insert / update / execute / scalar fetch 1:1 to the client
- Classify each raw return into Success or Failure, per operation
- Raise exactly one QueryError per failed call

Non-responsibilities:
- SQL building, connections, transactions, retries
- Logging failures (the caller decides what to do with them)
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from core.database_interface import DatabaseClient, Format
from core.errors import ErrorDiagnostic, sql_preview
from core.outcome import CommandOutcome, Failure, Success, unwrap
from core.status_codes import StatusCode


class CommandGateway:
    """
    Normalizes the client's failure signaling into QueryError.

    Holds nothing but the client reference; safe to share between callers
    as long as the client itself is.
    """

    def __init__(self, client: DatabaseClient):
        self.client = client

    # ------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------
    def insert(
        self,
        table: str,
        data: Mapping[str, Any],
        format: Format = None,
    ) -> int:
        """
        Insert one row and return the generated identifier.

        Zero rows inserted is not an error; only the False sentinel is.
        """
        _require_name(table, "table")
        _require_mapping(data, "data")

        logging.debug("DB_INSERT table=%s columns=%s", table, list(data))
        result = self.client.insert(table, data, format)

        if result is False:
            outcome: CommandOutcome = Failure(
                self._diagnose(
                    "insert",
                    table,
                    StatusCode.DB_INSERT_FAILED,
                    data=data,
                    format=format,
                )
            )
        else:
            outcome = Success(_coerce_row_id(getattr(self.client, "insert_id", None)))

        return unwrap(outcome)

    def update(
        self,
        table: str,
        data: Mapping[str, Any],
        where: Mapping[str, Any],
        format: Format = None,
        where_format: Format = None,
    ) -> int:
        """
        Update matching rows and return the affected row count (0 is valid).
        """
        _require_name(table, "table")
        _require_mapping(data, "data")
        _require_mapping(where, "where")

        logging.debug("DB_UPDATE table=%s columns=%s where=%s", table, list(data), list(where))
        result = self.client.update(table, data, where, format, where_format)

        if result is False:
            outcome: CommandOutcome = Failure(
                self._diagnose(
                    "update",
                    table,
                    StatusCode.DB_UPDATE_FAILED,
                    data=data,
                    where=where,
                )
            )
        else:
            outcome = Success(_coerce_count(result))

        return unwrap(outcome)

    def execute(self, statement: str) -> Union[int, bool]:
        """
        Run a raw statement and return the client's result unchanged.

        0 rows and True are both success. Only the boolean False fails, so
        the check is by identity and never by truthiness.
        """
        _require_name(statement, "statement")

        logging.debug("DB_EXECUTE statement=%s", sql_preview(statement))
        result = self.client.execute(statement)

        if result is False:
            outcome: CommandOutcome = Failure(
                self._diagnose("execute", statement, StatusCode.DB_EXECUTE_FAILED)
            )
        else:
            outcome = Success(result)

        return unwrap(outcome)

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------
    def scalar_fetch(
        self,
        statement: Optional[str] = None,
        column_index: int = 0,
        row_index: int = 0,
    ) -> Optional[Any]:
        """
        Return a single value, or None when the query matched nothing.

        The client answers None both for "no such row/column" and for a
        failed query. last_error is what separates them: None with empty
        error text is an absent value, None with error text is a failure.
        """
        if statement is not None:
            _require_name(statement, "statement")
        _require_index(column_index, "column_index")
        _require_index(row_index, "row_index")

        logging.debug(
            "DB_SCALAR statement=%s column=%d row=%d",
            sql_preview(statement) if statement is not None else "<previous>",
            column_index,
            row_index,
        )
        result = self.client.scalar(statement, column_index, row_index)

        if result is None and self._last_error():
            outcome: CommandOutcome = Failure(
                self._diagnose("scalar_fetch", statement, StatusCode.DB_QUERY_FAILED)
            )
        else:
            outcome = Success(result)

        return unwrap(outcome)

    # ------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------
    def _last_error(self) -> str:
        return str(getattr(self.client, "last_error", "") or "")

    def _diagnose(
        self,
        operation: str,
        target: Optional[str],
        status_code: StatusCode,
        **params: Any,
    ) -> ErrorDiagnostic:
        return ErrorDiagnostic.capture(
            operation,
            target,
            self._last_error(),
            status_code,
            last_query=getattr(self.client, "last_query", None),
            **params,
        )


# ============================================================
# Validation / coercion helpers
# ============================================================

def _require_name(value: Any, name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty string")


def _require_mapping(value: Any, name: str) -> None:
    if not isinstance(value, Mapping) or not value:
        raise ValueError(f"{name} must be a non-empty mapping")


def _require_index(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer")


def _coerce_row_id(value: Any) -> int:
    """
    Parse the client's native insert-id into a non-negative int. Absent or
    unparsable ids become 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    try:
        row_id = int(str(value).strip())
    except ValueError:
        try:
            row_id = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 0
    return max(row_id, 0)


def _coerce_count(value: Any) -> int:
    if value is True:
        return 0
    try:
        return max(int(value), 0)
    except (TypeError, ValueError, OverflowError):
        return 0


__all__ = ["CommandGateway"]
