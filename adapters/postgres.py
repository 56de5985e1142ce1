from __future__ import annotations

import re
from typing import Any, Dict, List, Set

from adapters.base import AutoCreateOnConnect, ConfigurationError, DatabaseDriver

_PASSWORD_KEYWORD = re.compile(r"(password\s*=\s*)(\S+)", re.IGNORECASE)
_URL_PASSWORD = re.compile(r"(://[^:/@]+:)([^@]+)(@)")


def build_conninfo(data_source_name: str, db_name: str) -> str:
    """Append the database name to a libpq conninfo string or URL."""
    dsn = (data_source_name or "").strip()
    if not dsn:
        raise ConfigurationError("Postgres dataSourceName is required")
    if dsn.endswith("dbname=") or dsn.endswith("/"):
        return dsn + db_name
    if "://" in dsn:
        raise ConfigurationError("Postgres URL dataSourceName must end with '/'")
    return f"{dsn} dbname={db_name}"


def mask_conninfo(conninfo: str) -> str:
    masked = _PASSWORD_KEYWORD.sub(r"\1***", conninfo)
    return _URL_PASSWORD.sub(r"\1***\3", masked)


class PostgresDriver(DatabaseDriver):
    name = "postgres"
    # The conninfo selects the database; it has to exist already.
    provisioner = AutoCreateOnConnect()

    def describe_locator(self, data_source_name: str) -> str:
        return mask_conninfo(data_source_name)

    def _connect(self, data_source_name: str, db_name: str):
        conninfo = build_conninfo(data_source_name, db_name)
        try:
            import psycopg  # type: ignore

            return psycopg.connect(conninfo)
        except ImportError:
            try:
                import psycopg2  # type: ignore

                return psycopg2.connect(conninfo)
            except ImportError as exc:
                raise ConfigurationError(
                    "No PostgreSQL driver found. Install one of: "
                    '`python -m pip install "psycopg[binary]"` or `python -m pip install psycopg2-binary`.'
                ) from exc

    def list_tables(self, conn: Any) -> List[str]:
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT table_name
                FROM information_schema.tables
                WHERE table_schema = current_schema()
                  AND table_type = 'BASE TABLE'
                ORDER BY table_name
                """
            )
            return [row[0] for row in cur.fetchall()]

    def table_columns(self, conn: Any, table_name: str) -> List[Dict[str, Any]]:
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT
                    column_name,
                    data_type,
                    is_nullable,
                    ordinal_position
                FROM information_schema.columns
                WHERE table_schema = current_schema()
                  AND table_name = %s
                ORDER BY ordinal_position
                """,
                (table_name,),
            )
            column_rows = cur.fetchall()

            cur.execute(
                """
                SELECT kcu.column_name
                FROM information_schema.table_constraints tc
                JOIN information_schema.key_column_usage kcu
                  ON tc.constraint_name = kcu.constraint_name
                 AND tc.table_schema = kcu.table_schema
                WHERE tc.table_schema = current_schema()
                  AND tc.table_name = %s
                  AND tc.constraint_type = 'PRIMARY KEY'
                """,
                (table_name,),
            )
            primary_keys = {row[0] for row in cur.fetchall()}

        return [
            {
                "column_name": column_name,
                "data_type": data_type,
                "is_nullable": is_nullable == "YES",
                "ordinal_position": int(ordinal),
                "is_primary_key": column_name in primary_keys,
            }
            for column_name, data_type, is_nullable, ordinal in column_rows
        ]

    def table_indexes(self, conn: Any, table_name: str) -> Set[str]:
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT indexname
                FROM pg_indexes
                WHERE schemaname = current_schema()
                  AND tablename = %s
                """,
                (table_name,),
            )
            return {row[0] for row in cur.fetchall() if not row[0].endswith("_pkey")}
