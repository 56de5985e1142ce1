from __future__ import annotations

import logging
import weakref
from typing import Any, Dict, Iterable, Optional

from adapters.base import AdapterError
from adapters.engine import DEFAULT_POOL_SIZE, Engine
from adapters.factory import get_driver
from schema.descriptors import TableSchema
from schema.introspector.service import introspect_schema
from schema.registry import FORUM_SCHEMAS
from schema.sync import SyncReport, sync_schema
from storage.config import ConnectionConfig

logger = logging.getLogger(__name__)


def _close_leaked_engine(engine: Engine) -> None:
    if engine.closed:
        return
    logger.warning("Adapter released without close(); closing %r", engine)
    engine.close()


class Adapter:
    """Owns the process's engine handle for one configured database.

    Constructing an adapter resolves the driver, makes sure the database
    exists and opens the engine; any failure propagates. ``close()`` is the
    primary release path. A finalizer closes an engine that is still open
    when the adapter is collected or the interpreter exits, and logs it as a
    leak.
    """

    def __init__(self, driver_name: str, data_source_name: str, db_name: str, pool_size: int = DEFAULT_POOL_SIZE):
        self.driver_name = driver_name
        self.data_source_name = data_source_name
        self.db_name = db_name
        self.pool_size = pool_size
        self.driver = get_driver(driver_name)
        self.engine: Optional[Engine] = None
        self._finalizer: Optional[weakref.finalize] = None

        self.open()

    @classmethod
    def from_config(cls, config: ConnectionConfig, pool_size: int = DEFAULT_POOL_SIZE) -> "Adapter":
        return cls(config.driver_name, config.data_source_name, config.db_name, pool_size=pool_size)

    @property
    def is_open(self) -> bool:
        return self.engine is not None and not self.engine.closed

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<Adapter {self.driver.name} db={self.db_name!r} {state}>"

    def open(self) -> None:
        if self.is_open:
            return

        self.driver.ensure_database(self.data_source_name, self.db_name)
        engine = Engine(self.driver, self.data_source_name, self.db_name, pool_size=self.pool_size)
        try:
            engine.ping()
        except Exception:
            engine.close()
            raise

        if self._finalizer is not None:
            self._finalizer.detach()
        self.engine = engine
        self._finalizer = weakref.finalize(self, _close_leaked_engine, engine)
        logger.info(
            "Opened %s database %s at %s",
            self.driver.name,
            self.db_name,
            self.driver.describe_locator(self.data_source_name),
        )

    def close(self) -> None:
        engine, self.engine = self.engine, None
        if self._finalizer is not None:
            self._finalizer.detach()
            self._finalizer = None
        if engine is not None:
            engine.close()

    def create_tables(self, schemas: Iterable[TableSchema] = FORUM_SCHEMAS) -> SyncReport:
        return sync_schema(self.require_engine(), schemas)

    def introspect(self) -> Dict[str, Any]:
        return introspect_schema(self.require_engine())

    def require_engine(self) -> Engine:
        if not self.is_open:
            raise AdapterError(f"{self!r} is not open")
        return self.engine

    def __enter__(self) -> "Adapter":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
