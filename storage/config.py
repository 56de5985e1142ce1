from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from adapters.base import ConfigurationError
from utils.env_loader import load_environments, read_key_values

DEFAULT_CONF_PATH = "conf/app.conf"

# attribute -> (app.conf key, environment variable)
SETTINGS = {
    "driver_name": ("driverName", "DRIVER_NAME"),
    "data_source_name": ("dataSourceName", "DATA_SOURCE_NAME"),
    "db_name": ("dbName", "DB_NAME"),
    "casdoor_organization": ("casdoorOrganization", "CASDOOR_ORGANIZATION"),
    "casdoor_application": ("casdoorApplication", "CASDOOR_APPLICATION"),
}

_DB_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+$")


@dataclass(frozen=True)
class ConnectionConfig:
    driver_name: str
    data_source_name: str
    db_name: str


@dataclass(frozen=True)
class AppConfig:
    connection: ConnectionConfig
    casdoor_organization: str
    casdoor_application: str


def load_app_config(
    source_config: Optional[Mapping[str, Any]] = None,
    conf_path: Optional[str] = None,
) -> AppConfig:
    """Resolve settings from ``source_config``, then the environment, then app.conf."""
    source_config = source_config or {}
    load_environments()
    conf_values = read_key_values(conf_path or os.getenv("APP_CONF_PATH") or DEFAULT_CONF_PATH)

    values: Dict[str, str] = {}
    for attr, (conf_key, env_var) in SETTINGS.items():
        raw = source_config.get(conf_key) or os.getenv(env_var) or conf_values.get(conf_key)
        value = str(raw).strip() if raw is not None else ""
        if not value:
            raise ConfigurationError(f"{conf_key} is required (set {env_var} or {conf_key} in app.conf)")
        values[attr] = value

    if not _DB_NAME_PATTERN.match(values["db_name"]):
        raise ConfigurationError(f"Invalid dbName: {values['db_name']!r}")

    return AppConfig(
        connection=ConnectionConfig(
            driver_name=values["driver_name"],
            data_source_name=values["data_source_name"],
            db_name=values["db_name"],
        ),
        casdoor_organization=values["casdoor_organization"],
        casdoor_application=values["casdoor_application"],
    )
