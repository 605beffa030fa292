#!/usr/bin/env python3
"""
core/errors.py

Failure contract for the command gateway.

Every delegated call that the client reports as failed surfaces as exactly
one QueryError. The error wraps an immutable ErrorDiagnostic built at the
moment the failure was detected.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from core.status_codes import StatusCode


UNKNOWN_DATABASE_ERROR = "Unknown database error"

_ACTIONS = {
    "insert": "inserting into table",
    "update": "updating table",
    "execute": "executing query",
    "scalar_fetch": "fetching value for query",
}


def stable_json(obj: Any) -> str:
    """
    Stable JSON encoding for diagnostics.

    Values JSON cannot represent (datetimes, decimals, bytes) fall back to str().
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def sql_preview(sql: str, max_len: int = 140) -> str:
    """
    Compact single-line preview for logs.
    """
    one_line = " ".join(sql.split())
    if len(one_line) <= max_len:
        return one_line
    return one_line[: max_len - 3] + "..."


@dataclass(frozen=True)
class ErrorDiagnostic:
    operation: str
    target: str
    db_message: str = UNKNOWN_DATABASE_ERROR
    params: Tuple[Tuple[str, str], ...] = ()
    last_query: str = ""
    status_code: StatusCode = StatusCode.DB_UNKNOWN

    @classmethod
    def capture(
        cls,
        operation: str,
        target: Optional[str],
        last_error: Optional[str],
        status_code: StatusCode,
        last_query: Optional[str] = None,
        **params: Any,
    ) -> "ErrorDiagnostic":
        """
        Build a diagnostic from raw client state.

        Empty driver text becomes UNKNOWN_DATABASE_ERROR. Keyword params whose
        value is None are dropped; the rest are serialized with stable_json and
        stored as (name, json) pairs so the diagnostic stays immutable.
        """
        serialized = tuple((k, stable_json(v)) for k, v in params.items() if v is not None)
        return cls(
            operation=operation,
            target="" if target is None else str(target),
            db_message=str(last_error or "") or UNKNOWN_DATABASE_ERROR,
            params=serialized,
            last_query=str(last_query or ""),
            status_code=status_code,
        )

    def describe(self) -> str:
        action = _ACTIONS.get(self.operation, self.operation)
        target = self.target or "<previous query>"
        message = f"Error {action} {target}: {self.db_message}"
        if self.params:
            details = ", ".join(f"{k.capitalize()}: {v}" for k, v in self.params)
            message = f"{message}. {details}"
        return message


class QueryError(Exception):
    """
    Raised when the underlying client reports a failed command.

    Structured fields mirror the diagnostic so callers can branch on them
    without parsing the message.
    """

    def __init__(self, diagnostic: ErrorDiagnostic):
        super().__init__(diagnostic.describe())
        self.diagnostic = diagnostic

    def __reduce__(self):
        return (QueryError, (self.diagnostic,))

    @property
    def operation(self) -> str:
        return self.diagnostic.operation

    @property
    def target(self) -> str:
        return self.diagnostic.target

    @property
    def db_message(self) -> str:
        return self.diagnostic.db_message

    @property
    def params(self) -> Dict[str, str]:
        return dict(self.diagnostic.params)

    @property
    def last_query(self) -> str:
        return self.diagnostic.last_query

    @property
    def status_code(self) -> StatusCode:
        return self.diagnostic.status_code
