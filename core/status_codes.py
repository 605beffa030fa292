#!/usr/bin/env python3
"""
core/status_codes.py

Mechanical status code catalog for the command gateway.

Rules:
- Each status code represents ONE concrete runtime event.
- No code is reused for multiple failure modes.
- Descriptions are factual and operational.
"""

from enum import IntEnum


class StatusCode(IntEnum):

    # ============================================================
    # 0–9 : SUCCESS / NON-ERROR TERMINATION
    # ============================================================

    OK = 0
    """Delegated call completed successfully."""

    OK_NO_DATA = 1
    """Query completed successfully but produced no value."""

    OK_NO_CHANGES = 2
    """Statement completed successfully and affected zero rows."""

    # ============================================================
    # 10–19 : CONFIGURATION
    # ============================================================

    CONFIG_MISSING = 10
    """Required configuration file or setting was not found."""

    CONFIG_INVALID = 11
    """Configuration exists but failed validation."""

    CONFIG_UNREADABLE = 12
    """Configuration file exists but could not be read or parsed."""

    CONFIG_INCOMPLETE = 14
    """Configuration is missing required fields."""

    CONFIG_UNSUPPORTED = 16
    """Configuration specifies an unsupported option or mode."""

    # ============================================================
    # 60–69 : DATABASE CONNECTION / SCHEMA
    # ============================================================

    DB_CONNECTION_FAILED = 60
    """Connection to the database backend could not be established or was lost."""

    DB_AUTH_FAILED = 61
    """Database rejected the supplied credentials."""

    DB_SCHEMA_MISSING = 62
    """A required table does not exist."""

    DB_BACKEND_NOT_SPECIFIED = 63
    """No database backend was selected."""

    DB_BACKEND_UNSUPPORTED = 64
    """Selected database backend is not supported."""

    DB_CONFIGURATION_INVALID = 65
    """Database connection parameters are missing or invalid."""

    # ============================================================
    # 90–99 : DATABASE COMMANDS
    # ============================================================

    DB_INSERT_FAILED = 90
    """Client signaled failure for an insert."""

    DB_UPDATE_FAILED = 91
    """Client signaled failure for an update."""

    DB_EXECUTE_FAILED = 92
    """Client signaled failure for a raw statement."""

    DB_QUERY_FAILED = 93
    """Client returned no value and reported a database error for a scalar fetch."""

    DB_UNKNOWN = 99
    """Database failure that does not match any other code."""
