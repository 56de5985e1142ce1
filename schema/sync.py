"""Additive schema reconciliation.

Creates missing tables, adds missing columns and creates missing indexes.
Nothing is ever dropped or altered, and there is no version history: the
declared schemas are the only source of truth.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Tuple

from adapters.base import AdapterError, SchemaSyncError
from adapters.engine import Engine
from schema.descriptors import TableSchema, validate_schemas

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    created_tables: List[str] = field(default_factory=list)
    added_columns: List[Tuple[str, str]] = field(default_factory=list)
    created_indexes: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.created_tables or self.added_columns or self.created_indexes)

    def as_dict(self) -> dict:
        return {
            "created_tables": list(self.created_tables),
            "added_columns": [f"{table}.{column}" for table, column in self.added_columns],
            "created_indexes": list(self.created_indexes),
        }


def sync_schema(engine: Engine, schemas: Iterable[TableSchema]) -> SyncReport:
    tables = validate_schemas(schemas)
    report = SyncReport()
    with engine.connect() as conn:
        existing = set(engine.driver.list_tables(conn))
    for table in tables:
        try:
            with engine.connect() as conn:
                _sync_table(engine, conn, table, table.name in existing, report)
        except AdapterError:
            raise
        except Exception as exc:
            raise SchemaSyncError(f"Failed to sync table {table.name}: {exc}") from exc

    logger.info(
        "Schema sync finished: %d table(s) created, %d column(s) added, %d index(es) created",
        len(report.created_tables),
        len(report.added_columns),
        len(report.created_indexes),
        extra={"driver": engine.driver.name, "db_name": engine.db_name},
    )
    return report


def _sync_table(engine: Engine, conn: Any, table: TableSchema, exists: bool, report: SyncReport) -> None:
    driver = engine.driver
    dialect = engine.dialect
    cur = conn.cursor()

    if not exists:
        cur.execute(dialect.render_create_table(table))
        report.created_tables.append(table.name)
        logger.info("Created table %s", table.name)
    else:
        present = {col["column_name"] for col in driver.table_columns(conn, table.name)}
        for column in table.columns:
            if column.name in present:
                continue
            if column.primary_key:
                raise SchemaSyncError(
                    f"Table {table.name} lacks primary key column {column.name}; it cannot be added in place"
                )
            cur.execute(dialect.render_add_column(table.name, column))
            report.added_columns.append((table.name, column.name))
            logger.info("Added column %s.%s", table.name, column.name)

    indexed = [column for column in table.columns if column.indexed and not column.primary_key]
    if not indexed:
        return
    indexes = set() if not exists else driver.table_indexes(conn, table.name)
    for column in indexed:
        name = dialect.index_name(table.name, column)
        if name in indexes:
            continue
        cur.execute(dialect.render_create_index(table.name, column))
        report.created_indexes.append(name)
