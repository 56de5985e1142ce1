from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Set

from adapters.sql_renderer import SQLDialect, get_sql_dialect

logger = logging.getLogger(__name__)


class AdapterError(RuntimeError):
    pass


class ConfigurationError(AdapterError):
    pass


class ConnectivityError(AdapterError):
    pass


class SchemaCreationError(AdapterError):
    pass


class SchemaSyncError(AdapterError):
    pass


class TeardownError(AdapterError):
    pass


class DatabaseProvisioner(ABC):
    """Makes sure the target database exists before an engine is opened."""

    @abstractmethod
    def ensure_database(self, driver: "DatabaseDriver", data_source_name: str, db_name: str) -> None:
        raise NotImplementedError


class AutoCreateOnConnect(DatabaseProvisioner):
    def ensure_database(self, driver: "DatabaseDriver", data_source_name: str, db_name: str) -> None:
        logger.debug("Driver %s selects database %s on connect", driver.name, db_name)


class ExplicitCreate(DatabaseProvisioner):
    """Issues CREATE DATABASE IF NOT EXISTS over a throwaway server connection."""

    def ensure_database(self, driver: "DatabaseDriver", data_source_name: str, db_name: str) -> None:
        statement = driver.dialect.render_create_database(db_name)
        conn = driver.open_server_connection(data_source_name)
        try:
            cur = conn.cursor()
            cur.execute(statement)
            conn.commit()
        except Exception as exc:
            try:
                conn.close()
            except Exception:
                logger.warning("Closing the server connection also failed", exc_info=True)
            raise SchemaCreationError(f"Failed to create database {db_name!r}: {exc}") from exc
        try:
            conn.close()
        except Exception as exc:
            raise TeardownError(f"Failed to close the server connection for {db_name!r}: {exc}") from exc
        logger.info("Ensured database %s exists", db_name, extra={"driver": driver.name})


class DatabaseDriver(ABC):
    name: str = "unknown"
    provisioner: DatabaseProvisioner = AutoCreateOnConnect()

    @property
    def dialect(self) -> SQLDialect:
        return get_sql_dialect(self.name)

    @property
    def requires_explicit_create(self) -> bool:
        return isinstance(self.provisioner, ExplicitCreate)

    def ensure_database(self, data_source_name: str, db_name: str) -> None:
        self.provisioner.ensure_database(self, data_source_name, db_name)

    def open_connection(self, data_source_name: str, db_name: str):
        try:
            return self._connect(data_source_name, db_name)
        except AdapterError:
            raise
        except Exception as exc:
            raise ConnectivityError(
                f"Cannot connect to {self.name} database {db_name!r} at {self.describe_locator(data_source_name)}: {exc}"
            ) from exc

    def open_server_connection(self, data_source_name: str):
        try:
            return self._connect_server(data_source_name)
        except AdapterError:
            raise
        except Exception as exc:
            raise ConnectivityError(
                f"Cannot connect to {self.name} server at {self.describe_locator(data_source_name)}: {exc}"
            ) from exc

    def describe_locator(self, data_source_name: str) -> str:
        return data_source_name

    @abstractmethod
    def _connect(self, data_source_name: str, db_name: str):
        raise NotImplementedError

    def _connect_server(self, data_source_name: str):
        raise ConfigurationError(f"Driver {self.name} does not support server-level connections")

    @abstractmethod
    def list_tables(self, conn: Any) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    def table_columns(self, conn: Any, table_name: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def table_indexes(self, conn: Any, table_name: str) -> Set[str]:
        raise NotImplementedError
