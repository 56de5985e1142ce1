from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Set

from adapters.base import AutoCreateOnConnect, ConfigurationError, DatabaseDriver

SQLITE_BUSY_TIMEOUT_MS = 30000


def resolve_db_path(data_source_name: str, db_name: str) -> Path:
    if not db_name:
        raise ConfigurationError("dbName is required for sqlite")
    db_path = Path(data_source_name or ".") / db_name
    if not db_path.suffix:
        db_path = db_path.with_suffix(".db")
    return db_path


class SQLiteDriver(DatabaseDriver):
    name = "sqlite"
    provisioner = AutoCreateOnConnect()

    def _connect(self, data_source_name: str, db_name: str) -> sqlite3.Connection:
        db_path = resolve_db_path(data_source_name, db_name)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        # Connections are pooled by the engine and may move between threads.
        conn = sqlite3.connect(str(db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute(f"PRAGMA busy_timeout = {SQLITE_BUSY_TIMEOUT_MS}")
        return conn

    def list_tables(self, conn: Any) -> List[str]:
        cur = conn.cursor()
        cur.execute(
            """
            SELECT name
            FROM sqlite_master
            WHERE type = 'table'
              AND name NOT LIKE 'sqlite_%'
            ORDER BY name
            """
        )
        return [row[0] for row in cur.fetchall()]

    def table_columns(self, conn: Any, table_name: str) -> List[Dict[str, Any]]:
        cur = conn.cursor()
        cur.execute(f'PRAGMA table_info("{table_name}")')
        return [
            {
                "column_name": col[1],
                "data_type": str(col[2] or "").lower(),
                "is_nullable": col[3] == 0,
                "ordinal_position": int(col[0]) + 1,
                "is_primary_key": col[5] >= 1,
            }
            for col in cur.fetchall()
        ]

    def table_indexes(self, conn: Any, table_name: str) -> Set[str]:
        cur = conn.cursor()
        cur.execute(f'PRAGMA index_list("{table_name}")')
        return {row[1] for row in cur.fetchall() if not str(row[1]).startswith("sqlite_autoindex")}
