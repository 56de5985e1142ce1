from __future__ import annotations

from typing import Dict, List, Optional, Type

from adapters.base import ConfigurationError, DatabaseDriver
from adapters.mysql import MySQLDriver
from adapters.postgres import PostgresDriver
from adapters.sqlite import SQLiteDriver

_DRIVERS: Dict[str, Type[DatabaseDriver]] = {}


def register_driver(driver_cls: Type[DatabaseDriver], *aliases: str) -> None:
    for name in (driver_cls.name, *aliases):
        _DRIVERS[name.strip().lower()] = driver_cls


def supported_drivers() -> List[str]:
    return sorted(_DRIVERS)


def get_driver(driver_name: Optional[str]) -> DatabaseDriver:
    name = (driver_name or "").strip().lower()
    if not name:
        raise ConfigurationError("driverName is required")
    driver_cls = _DRIVERS.get(name)
    if driver_cls is None:
        raise ConfigurationError(f"Unsupported driverName: {driver_name!r} (supported: {', '.join(supported_drivers())})")
    return driver_cls()


register_driver(MySQLDriver)
register_driver(PostgresDriver, "postgresql")
register_driver(SQLiteDriver, "sqlite3")
