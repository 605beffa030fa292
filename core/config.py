#!/usr/bin/env python3
"""
core/config.py

Database configuration for the command gateway.

Precedence (highest first):
- explicit overrides passed to ConfigStore.merge()
- the "database" section of the JSON config file
- dataclass defaults
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from core.status_codes import StatusCode


DEFAULT_CONFIG_PATH = Path.home() / ".command_gateway" / "config.json"

SUPPORTED_BACKENDS = ("sqlite", "mssql")

REDACTED = "***REDACTED***"


class ConfigError(Exception):
    def __init__(self, message: str, status_code: StatusCode = StatusCode.CONFIG_INVALID):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class DatabaseConfig:
    backend: str = "sqlite"

    # sqlite
    path: str = ":memory:"

    # mssql
    server: Optional[str] = None
    database: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    driver: str = "ODBC Driver 18 for SQL Server"
    encrypt: bool = True
    trust_cert: bool = False

    timeout: int = 30
    required_tables: Tuple[str, ...] = ()

    def validate(self) -> None:
        backend = (self.backend or "").strip().lower()

        if not backend:
            raise ConfigError("database.backend is required", StatusCode.CONFIG_INCOMPLETE)

        if backend not in SUPPORTED_BACKENDS:
            raise ConfigError(
                f"database.backend must be one of {', '.join(SUPPORTED_BACKENDS)}: {self.backend}",
                StatusCode.CONFIG_UNSUPPORTED,
            )

        if not isinstance(self.timeout, int) or isinstance(self.timeout, bool) or self.timeout <= 0:
            raise ConfigError("database.timeout must be a positive integer")

        if backend == "sqlite" and not self.path:
            raise ConfigError("database.path is required for sqlite", StatusCode.CONFIG_INCOMPLETE)

        if backend == "mssql":
            missing = [
                name
                for name in ("server", "database", "username", "password")
                if not getattr(self, name)
            ]
            if missing:
                raise ConfigError(
                    f"database.{', database.'.join(missing)} required for mssql",
                    StatusCode.CONFIG_INCOMPLETE,
                )

    def redacted(self) -> Dict[str, Any]:
        data = asdict(self)
        data["required_tables"] = list(self.required_tables)
        if data.get("password"):
            data["password"] = REDACTED
        return data


class ConfigStore:
    """
    JSON-file backed configuration store.

    A missing file is not an error: load() returns defaults.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else DEFAULT_CONFIG_PATH

    def load(self) -> DatabaseConfig:
        if not self.path.exists():
            logging.debug("CONFIG_NOT_FOUND path=%s using defaults", self.path)
            return DatabaseConfig()

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigError(f"Cannot read config {self.path}: {e}", StatusCode.CONFIG_UNREADABLE) from e

        if not isinstance(raw, dict):
            raise ConfigError(f"Config {self.path} must hold a JSON object", StatusCode.CONFIG_INVALID)

        section = raw.get("database") or {}
        if not isinstance(section, dict):
            raise ConfigError("database section must be a JSON object", StatusCode.CONFIG_INVALID)

        cfg = self.merge(DatabaseConfig(), section)
        logging.info("CONFIG_LOAD_OK path=%s backend=%s", self.path, cfg.backend)
        return cfg

    def save(self, cfg: DatabaseConfig) -> None:
        raw: Dict[str, Any] = {}
        if self.path.exists():
            try:
                raw = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                raise ConfigError(f"Cannot read config {self.path}: {e}", StatusCode.CONFIG_UNREADABLE) from e

        section = asdict(cfg)
        section["required_tables"] = list(cfg.required_tables)
        raw["database"] = section

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(raw, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        logging.info("CONFIG_SAVE_OK path=%s", self.path)

    @staticmethod
    def merge(cfg: DatabaseConfig, overrides: Mapping[str, Any]) -> DatabaseConfig:
        """
        Apply non-None overrides. Unknown keys are rejected.
        """
        known = {f.name for f in fields(DatabaseConfig)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigError(f"Unknown database settings: {', '.join(unknown)}")

        updates = {k: v for k, v in overrides.items() if v is not None}
        tables = updates.get("required_tables")
        if isinstance(tables, str):
            updates["required_tables"] = (tables,)
        elif tables is not None:
            try:
                updates["required_tables"] = tuple(tables)
            except TypeError as e:
                raise ConfigError("database.required_tables must be a list of table names") from e
            if not all(isinstance(t, str) and t for t in updates["required_tables"]):
                raise ConfigError("database.required_tables must be a list of table names")
        return replace(cfg, **updates)
