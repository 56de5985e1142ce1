from __future__ import annotations

from typing import Any, Dict, List, Optional, Set
from urllib.parse import parse_qsl

from adapters.base import ConfigurationError, DatabaseDriver, ExplicitCreate
from adapters.sql_renderer import MYSQL_CHARSET


def parse_mysql_dsn(data_source_name: str) -> Dict[str, Any]:
    """Parse ``user:pass@host:port/`` or ``user:pass@tcp(host:port)/`` into connect kwargs.

    The database part after ``/`` must be empty: the database name is
    configured separately and selected when the engine connects.
    """
    text = (data_source_name or "").strip()
    if "@" not in text:
        raise ConfigurationError("MySQL dataSourceName must look like user:password@host:port/")
    credentials, _, rest = text.rpartition("@")
    user, _, password = credentials.partition(":")
    address, slash, tail = rest.partition("/")
    if not slash:
        raise ConfigurationError("MySQL dataSourceName must end with '/'")
    database_part, _, query = tail.partition("?")
    if database_part:
        raise ConfigurationError("MySQL dataSourceName must not select a database; use dbName")
    if not user:
        raise ConfigurationError("MySQL dataSourceName is missing a user")

    params: Dict[str, Any] = {"user": user, "password": password, "charset": MYSQL_CHARSET}
    if address.startswith("unix(") and address.endswith(")"):
        params["unix_socket"] = address[len("unix(") : -1]
        return _apply_options(params, query)
    if address.startswith("tcp(") and address.endswith(")"):
        address = address[len("tcp(") : -1]
    host, _, port_raw = address.partition(":")
    try:
        port = int(port_raw) if port_raw else 3306
    except ValueError as exc:
        raise ConfigurationError(f"Invalid MySQL port: {port_raw!r}") from exc
    params["host"] = host or "127.0.0.1"
    params["port"] = port
    return _apply_options(params, query)


def _apply_options(params: Dict[str, Any], query: str) -> Dict[str, Any]:
    for key, value in parse_qsl(query):
        if key == "charset":
            params["charset"] = value
    return params


class MySQLDriver(DatabaseDriver):
    name = "mysql"
    provisioner = ExplicitCreate()

    def describe_locator(self, data_source_name: str) -> str:
        try:
            params = parse_mysql_dsn(data_source_name)
        except ConfigurationError:
            return "<invalid dataSourceName>"
        where = params.get("unix_socket") or f"{params.get('host')}:{params.get('port')}"
        return f"{params['user']}:***@{where}"

    def _connect(self, data_source_name: str, db_name: str):
        return self._open(parse_mysql_dsn(data_source_name), db_name)

    def _connect_server(self, data_source_name: str):
        return self._open(parse_mysql_dsn(data_source_name), None)

    def _open(self, params: Dict[str, Any], database: Optional[str]):
        try:
            import pymysql  # type: ignore

            return pymysql.connect(database=database, **params)
        except ImportError:
            try:
                import mysql.connector  # type: ignore

                if database is not None:
                    params = {**params, "database": database}
                return mysql.connector.connect(**params)
            except ImportError as exc:
                raise ConfigurationError(
                    "No MySQL driver found. Install one of: "
                    "`python -m pip install pymysql` or `python -m pip install mysql-connector-python`."
                ) from exc

    def list_tables(self, conn: Any) -> List[str]:
        cur = conn.cursor()
        cur.execute(
            """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = DATABASE()
              AND table_type = 'BASE TABLE'
            ORDER BY table_name
            """
        )
        return [row[0] for row in cur.fetchall()]

    def table_columns(self, conn: Any, table_name: str) -> List[Dict[str, Any]]:
        cur = conn.cursor()
        cur.execute(
            """
            SELECT
                column_name,
                data_type,
                is_nullable,
                ordinal_position,
                column_key
            FROM information_schema.columns
            WHERE table_schema = DATABASE()
              AND table_name = %s
            ORDER BY ordinal_position
            """,
            (table_name,),
        )
        return [
            {
                "column_name": row[0],
                "data_type": row[1],
                "is_nullable": str(row[2]).upper() == "YES",
                "ordinal_position": int(row[3]),
                "is_primary_key": row[4] == "PRI",
            }
            for row in cur.fetchall()
        ]

    def table_indexes(self, conn: Any, table_name: str) -> Set[str]:
        cur = conn.cursor()
        cur.execute(
            """
            SELECT DISTINCT index_name
            FROM information_schema.statistics
            WHERE table_schema = DATABASE()
              AND table_name = %s
            """,
            (table_name,),
        )
        return {row[0] for row in cur.fetchall() if row[0] != "PRIMARY"}
