#!/usr/bin/env python3
"""
core/database_interface.py

Database client contract consumed by the command gateway.

Rules:
- Interface MUST reflect real client behavior, sentinels included.
- Failures are signaled through return values plus last_error, never by raising.
- last_error is reset at the start of every call.
- All methods are synchronous.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Sequence, Union


Format = Optional[Union[str, Sequence[str], Mapping[str, str]]]


class DatabaseClient(ABC):
    """
    Canonical sentinel-signaling database client.

    The gateway depends only on the members declared here. Any object that
    exposes them is accepted; subclassing is not required.
    """

    last_error: str = ""
    """Driver error text of the most recent call. Empty when it succeeded."""

    last_query: str = ""
    """Text of the most recent statement sent to the database."""

    insert_id: Any = 0
    """Identifier generated by the most recent successful insert."""

    # ------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------
    @abstractmethod
    def insert(
        self,
        table: str,
        data: Mapping[str, Any],
        format: Format = None,
    ) -> Union[int, bool]:
        """
        Insert one row.

        Returns the number of rows inserted, or False on failure.
        The generated identifier is published on insert_id.
        """
        raise NotImplementedError

    @abstractmethod
    def update(
        self,
        table: str,
        data: Mapping[str, Any],
        where: Mapping[str, Any],
        format: Format = None,
        where_format: Format = None,
    ) -> Union[int, bool]:
        """
        Update rows matching every column in where.

        Returns the number of rows updated (possibly 0), or False on failure.
        """
        raise NotImplementedError

    @abstractmethod
    def execute(self, statement: str) -> Union[int, bool]:
        """
        Run a raw statement.

        Returns affected or selected rows, True for statements with no row
        count, or False on failure.
        """
        raise NotImplementedError

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------
    @abstractmethod
    def scalar(
        self,
        statement: Optional[str] = None,
        column_index: int = 0,
        row_index: int = 0,
    ) -> Optional[Any]:
        """
        Return one value from a result set.

        statement=None reads from the previous result set.
        Returns None both on failure and when no such row or column exists;
        only last_error tells the two apart.
        """
        raise NotImplementedError
