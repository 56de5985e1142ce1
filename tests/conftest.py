import re
import sys
import types
from typing import Any, Dict, List, Optional, Set

import pytest

from storage.config import AppConfig, ConnectionConfig

CREATE_TABLE = re.compile(r"^CREATE TABLE IF NOT EXISTS [`\"](\w+)[`\"]")
DECLARED_COLUMN = re.compile(r"[(,] [`\"](\w+)[`\"] [A-Z]")
ADD_COLUMN = re.compile(r"^ALTER TABLE [`\"](\w+)[`\"] ADD COLUMN [`\"](\w+)[`\"]")
CREATE_INDEX = re.compile(r"INDEX [`\"](\w+)[`\"] ON [`\"](\w+)[`\"]")


class RecordingCursor:
    def __init__(self, server: "RecordingServer"):
        self.server = server
        self._rows: List[tuple] = []

    def execute(self, sql: str, params: Optional[Any] = None) -> None:
        statement = " ".join(sql.split())
        self.server.statements.append(statement)
        if self.server.fail_on and self.server.fail_on in statement:
            raise RuntimeError(f"statement rejected: {self.server.fail_on}")
        self._rows = self.server.answer(statement, params)

    def fetchall(self) -> List[tuple]:
        return list(self._rows)

    def close(self) -> None:
        return None

    def __enter__(self) -> "RecordingCursor":
        return self

    def __exit__(self, *exc: Any) -> None:
        return None


class RecordingConnection:
    def __init__(self, server: "RecordingServer", params: Dict[str, Any]):
        self.server = server
        self.params = params
        self.closed = False

    def cursor(self) -> RecordingCursor:
        return RecordingCursor(self.server)

    def commit(self) -> None:
        return None

    def rollback(self) -> None:
        return None

    def close(self) -> None:
        if self.server.fail_close:
            raise OSError("socket stuck")
        self.closed = True


class RecordingServer:
    """Stands in for a DB-API module; records every connection and statement.

    DDL is applied to an in-memory catalog, and information_schema /
    pg_indexes queries are answered from it in the row layout of ``flavor``.
    """

    def __init__(self, flavor: str = "mysql"):
        self.flavor = flavor
        self.connections: List[RecordingConnection] = []
        self.statements: List[str] = []
        self.fail_on: Optional[str] = None
        self.fail_close = False
        self.refuse_connections = False
        self.tables: Dict[str, List[str]] = {}
        self.indexes: Dict[str, Set[str]] = {}

    def connect(self, *args: Any, **kwargs: Any) -> RecordingConnection:
        if self.refuse_connections:
            raise OSError("connection refused")
        params = dict(kwargs)
        if args:
            params["conninfo"] = args[0]
        conn = RecordingConnection(self, params)
        self.connections.append(conn)
        return conn

    def ddl(self, since: int = 0) -> List[str]:
        return [s for s in self.statements[since:] if s.startswith(("CREATE TABLE", "ALTER TABLE", "CREATE INDEX", "CREATE UNIQUE"))]

    def answer(self, statement: str, params: Optional[Any]) -> List[tuple]:
        if statement == "SELECT 1":
            return [(1,)]

        match = CREATE_TABLE.match(statement)
        if match:
            self.tables.setdefault(match.group(1), DECLARED_COLUMN.findall(statement))
            return []
        match = ADD_COLUMN.match(statement)
        if match:
            self.tables[match.group(1)].append(match.group(2))
            return []
        match = CREATE_INDEX.search(statement)
        if match:
            self.indexes.setdefault(match.group(2), set()).add(match.group(1))
            return []

        if "FROM information_schema.tables" in statement:
            return [(name,) for name in sorted(self.tables)]
        if "FROM information_schema.columns" in statement:
            columns = self.tables.get(params[0], [])
            if self.flavor == "mysql":
                return [(name, "varchar", "YES", i, "") for i, name in enumerate(columns, start=1)]
            return [(name, "text", "YES", i) for i, name in enumerate(columns, start=1)]
        if "information_schema.statistics" in statement or "FROM pg_indexes" in statement:
            return [(name,) for name in sorted(self.indexes.get(params[0], set()))]
        return []


@pytest.fixture
def fake_pymysql(monkeypatch):
    server = RecordingServer("mysql")
    monkeypatch.setitem(sys.modules, "pymysql", types.SimpleNamespace(connect=server.connect))
    return server


@pytest.fixture
def fake_psycopg(monkeypatch):
    server = RecordingServer("postgres")
    monkeypatch.setitem(sys.modules, "psycopg", types.SimpleNamespace(connect=server.connect))
    return server


@pytest.fixture
def sqlite_config(tmp_path) -> AppConfig:
    return AppConfig(
        connection=ConnectionConfig(driver_name="sqlite", data_source_name=str(tmp_path / "data"), db_name="forum"),
        casdoor_organization="casbin-forum",
        casdoor_application="app-casnode",
    )
