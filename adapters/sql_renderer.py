from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from schema.descriptors import Column, TableSchema


COLUMN_TYPES: Dict[str, Dict[str, str]] = {
    "mysql": {
        "char": "CHAR",
        "varchar": "VARCHAR",
        "text": "TEXT",
        "mediumtext": "MEDIUMTEXT",
        "int": "INT",
        "bigint": "BIGINT",
        "bool": "TINYINT(1)",
        "float": "DOUBLE",
        "blob": "BLOB",
    },
    "postgres": {
        "char": "CHAR",
        "varchar": "VARCHAR",
        "text": "TEXT",
        "mediumtext": "TEXT",
        "int": "INTEGER",
        "bigint": "BIGINT",
        "bool": "BOOLEAN",
        "float": "DOUBLE PRECISION",
        "blob": "BYTEA",
    },
    "sqlite": {
        "char": "TEXT",
        "varchar": "TEXT",
        "text": "TEXT",
        "mediumtext": "TEXT",
        "int": "INTEGER",
        "bigint": "INTEGER",
        "bool": "INTEGER",
        "float": "REAL",
        "blob": "BLOB",
    },
}
SIZED_TYPES = {"char", "varchar"}
TEXT_LIKE_TYPES = {"char", "varchar", "text", "mediumtext"}
NUMERIC_LIKE_TYPES = {"int", "bigint", "float"}
DEFAULT_VARCHAR_LENGTH = 255

MYSQL_CHARSET = "utf8mb4"
MYSQL_COLLATION = "utf8mb4_general_ci"


def zero_default(column_type: str) -> Optional[Any]:
    if column_type in TEXT_LIKE_TYPES:
        return ""
    if column_type in NUMERIC_LIKE_TYPES:
        return 0
    if column_type == "bool":
        return False
    if column_type == "blob":
        return b""
    return None


@dataclass(frozen=True)
class SQLDialect:
    engine: str
    quote_char: str

    def quote(self, identifier: str) -> str:
        q = self.quote_char
        return f"{q}{identifier.replace(q, q * 2)}{q}"

    def render_literal(self, value: Any) -> str:
        if isinstance(value, bool):
            if self.engine == "postgres":
                return "TRUE" if value else "FALSE"
            return "1" if value else "0"
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, (bytes, bytearray)):
            if self.engine == "postgres":
                return f"'\\x{value.hex()}'::bytea"
            return f"X'{value.hex()}'"
        text = str(value).replace("'", "''")
        return f"'{text}'"

    def render_type(self, column: "Column") -> str:
        base = COLUMN_TYPES[self.engine][column.type]
        if column.type in SIZED_TYPES and self.engine != "sqlite":
            return f"{base}({column.length or DEFAULT_VARCHAR_LENGTH})"
        return base

    def render_column(self, column: "Column", fill_default: bool = False) -> str:
        parts = [self.quote(column.name)]
        if column.autoincrement:
            if self.engine == "sqlite":
                parts.append("INTEGER PRIMARY KEY AUTOINCREMENT")
            elif self.engine == "postgres":
                parts.append("BIGSERIAL" if column.type == "bigint" else "SERIAL")
            else:
                parts.append(f"{self.render_type(column)} NOT NULL AUTO_INCREMENT")
            return " ".join(parts)

        parts.append(self.render_type(column))
        if column.not_null or column.primary_key:
            parts.append("NOT NULL")
        default = column.default
        if default is None and fill_default and column.not_null:
            default = zero_default(column.type)
        if default is not None and not self._rejects_default(column):
            parts.append(f"DEFAULT {self.render_literal(default)}")
        return " ".join(parts)

    def _rejects_default(self, column: "Column") -> bool:
        # MySQL refuses literal defaults on TEXT/BLOB columns.
        return self.engine == "mysql" and column.type in {"text", "mediumtext", "blob"}

    def render_create_table(self, table: "TableSchema") -> str:
        lines: List[str] = [self.render_column(column) for column in table.columns]
        primary_keys = [
            self.quote(column.name)
            for column in table.columns
            if column.primary_key and not (self.engine == "sqlite" and column.autoincrement)
        ]
        if primary_keys:
            lines.append(f"PRIMARY KEY ({', '.join(primary_keys)})")
        body = ",\n  ".join(lines)
        statement = f"CREATE TABLE IF NOT EXISTS {self.quote(table.name)} (\n  {body}\n)"
        if self.engine == "mysql":
            statement += f" ENGINE=InnoDB DEFAULT CHARSET={MYSQL_CHARSET}"
        return statement

    def render_add_column(self, table_name: str, column: "Column") -> str:
        return f"ALTER TABLE {self.quote(table_name)} ADD COLUMN {self.render_column(column, fill_default=True)}"

    def index_name(self, table_name: str, column: "Column") -> str:
        prefix = "UQE" if column.unique else "IDX"
        return f"{prefix}_{table_name}_{column.name}"

    def render_create_index(self, table_name: str, column: "Column") -> str:
        unique = "UNIQUE " if column.unique else ""
        return (
            f"CREATE {unique}INDEX {self.quote(self.index_name(table_name, column))} "
            f"ON {self.quote(table_name)} ({self.quote(column.name)})"
        )

    def render_create_database(self, db_name: str) -> str:
        if self.engine == "mysql":
            return (
                f"CREATE DATABASE IF NOT EXISTS {self.quote(db_name)} "
                f"DEFAULT CHARACTER SET {MYSQL_CHARSET} COLLATE {MYSQL_COLLATION}"
            )
        raise ValueError(f"{self.engine} databases are created on connect")


def get_sql_dialect(db_engine: str) -> SQLDialect:
    engine = (db_engine or "").strip().lower()
    if engine in {"postgres", "postgresql"}:
        return SQLDialect(engine="postgres", quote_char='"')
    if engine in {"sqlite", "sqlite3"}:
        return SQLDialect(engine="sqlite", quote_char='"')
    if engine == "mysql":
        return SQLDialect(engine="mysql", quote_char="`")
    raise ValueError(f"No SQL dialect for engine: {db_engine!r}")
