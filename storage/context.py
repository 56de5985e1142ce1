from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from adapters.engine import Engine
from schema.descriptors import TableSchema
from schema.registry import FORUM_SCHEMAS
from schema.sync import SyncReport
from storage.adapter import Adapter
from storage.config import AppConfig, load_app_config

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything downstream code needs from startup, passed around explicitly."""

    config: AppConfig
    adapter: Adapter
    schemas: Tuple[TableSchema, ...]
    sync_report: SyncReport

    @property
    def engine(self) -> Engine:
        return self.adapter.require_engine()

    @property
    def casdoor_organization(self) -> str:
        return self.config.casdoor_organization

    @property
    def casdoor_application(self) -> str:
        return self.config.casdoor_application

    def close(self) -> None:
        self.adapter.close()

    def __enter__(self) -> "AppContext":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


def init_adapter(
    config: Optional[AppConfig] = None,
    schemas: Iterable[TableSchema] = FORUM_SCHEMAS,
) -> AppContext:
    """Bootstrap storage: open the database and sync every schema, or fail.

    Either the full sequence succeeds or nothing is left open.
    """
    if config is None:
        config = load_app_config()
    schemas = tuple(schemas)

    adapter = Adapter.from_config(config.connection)
    try:
        report = adapter.create_tables(schemas)
    except Exception as exc:
        logger.error("Schema sync failed; closing %r", adapter)
        try:
            adapter.close()
        except Exception:
            logger.exception("Closing %r after a failed sync also failed", adapter)
        raise exc

    logger.info("Storage ready", extra={"sync": report.as_dict()})
    return AppContext(config=config, adapter=adapter, schemas=schemas, sync_report=report)
