#!/usr/bin/env python3

import logging

from core.config import ConfigError, DatabaseConfig
from core.database_interface import DatabaseClient
from core.gateway import CommandGateway
from core.status_codes import StatusCode


class DatabaseRouter:
    """
    Database router responsible for:
      - Selecting the correct client backend from configuration
      - Performing connection preflight
      - Handing a connected client to a CommandGateway
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.backend = (config.backend or "").strip().lower()

    # ------------------------------------------------------------
    # Public
    # ------------------------------------------------------------
    def connect(self) -> DatabaseClient:
        """
        Resolve backend and return a connected, preflighted client.
        """
        if not self.backend:
            logging.error("DB_BACKEND_NOT_SPECIFIED")
            raise RuntimeError(StatusCode.DB_BACKEND_NOT_SPECIFIED)

        try:
            self.config.validate()
        except ConfigError as e:
            logging.error("DB_CONFIGURATION_INVALID %s", e)
            if e.status_code == StatusCode.CONFIG_UNSUPPORTED:
                raise RuntimeError(StatusCode.DB_BACKEND_UNSUPPORTED) from e
            raise RuntimeError(StatusCode.DB_CONFIGURATION_INVALID) from e

        if self.backend == "sqlite":
            db = self._connect_sqlite()
        else:
            db = self._connect_mssql()

        self._preflight(db)
        return db

    def gateway(self) -> CommandGateway:
        return CommandGateway(self.connect())

    # ------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------
    def _connect_sqlite(self) -> DatabaseClient:
        from db.sqlite import SQLiteClient

        logging.info("DB_ROUTER_SELECT backend=sqlite path=%s", self.config.path)
        return SQLiteClient(path=self.config.path, timeout=self.config.timeout)

    def _connect_mssql(self) -> DatabaseClient:
        # pyodbc needs the system ODBC manager; import only when selected.
        from db.mssql import MSSQLClient

        cfg = self.config
        logging.info(
            "DB_ROUTER_SELECT backend=mssql server=%s database=%s",
            cfg.server,
            cfg.database,
        )

        try:
            return MSSQLClient(
                server=cfg.server,
                database=cfg.database,
                username=cfg.username,
                password=cfg.password,
                driver=cfg.driver,
                encrypt=cfg.encrypt,
                trust_cert=cfg.trust_cert,
                timeout=cfg.timeout,
            )
        except Exception as e:
            logging.error("DB_CONNECT_FAILED backend=mssql error=%s", e)
            raise

    # ------------------------------------------------------------
    # Preflight
    # ------------------------------------------------------------
    def _preflight(self, db) -> None:
        """
        Perform mandatory database preflight checks.
        """
        try:
            db.ping()
        except Exception as e:
            logging.error("DB_PREFLIGHT_PING_FAILED %s", e)
            db.close()
            raise RuntimeError(StatusCode.DB_CONNECTION_FAILED) from e

        try:
            missing = [t for t in self.config.required_tables if not db.table_exists(t)]
        except Exception as e:
            logging.error("DB_PREFLIGHT_SCHEMA_CHECK_FAILED %s", e)
            db.close()
            raise RuntimeError(StatusCode.DB_CONNECTION_FAILED) from e

        if missing:
            logging.error("DB_SCHEMA_MISSING tables=%s", ",".join(missing))
            db.close()
            raise RuntimeError(StatusCode.DB_SCHEMA_MISSING)

        logging.info("DB_PREFLIGHT_OK backend=%s", self.backend)
