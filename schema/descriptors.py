from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Set, Tuple

from adapters.base import SchemaSyncError
from adapters.sql_renderer import COLUMN_TYPES

COLUMN_TYPE_NAMES = frozenset(COLUMN_TYPES["mysql"])


@dataclass(frozen=True)
class Column:
    name: str
    type: str
    length: Optional[int] = None
    not_null: bool = False
    primary_key: bool = False
    autoincrement: bool = False
    default: Optional[Any] = None
    index: bool = False
    unique: bool = False

    @property
    def indexed(self) -> bool:
        return self.index or self.unique


@dataclass(frozen=True)
class TableSchema:
    name: str
    columns: Tuple[Column, ...]

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    def with_column(self, column: Column) -> "TableSchema":
        return TableSchema(name=self.name, columns=self.columns + (column,))


def validate_schemas(schemas: Iterable[TableSchema]) -> Tuple[TableSchema, ...]:
    items = tuple(schemas)
    if not items:
        raise SchemaSyncError("Schema registry is empty")

    seen_tables: Set[str] = set()
    for table in items:
        if not table.name:
            raise SchemaSyncError("Schema registry contains a table without a name")
        if table.name in seen_tables:
            raise SchemaSyncError(f"Duplicate table in schema registry: {table.name}")
        seen_tables.add(table.name)
        if not table.columns:
            raise SchemaSyncError(f"Table {table.name} declares no columns")

        seen_columns: Set[str] = set()
        for column in table.columns:
            if column.name in seen_columns:
                raise SchemaSyncError(f"Duplicate column {table.name}.{column.name}")
            seen_columns.add(column.name)
            if column.type not in COLUMN_TYPE_NAMES:
                raise SchemaSyncError(f"Unknown column type {column.type!r} for {table.name}.{column.name}")
            if column.autoincrement and not column.primary_key:
                raise SchemaSyncError(f"Autoincrement column {table.name}.{column.name} must be the primary key")
    return items
