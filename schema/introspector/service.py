from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from adapters.engine import Engine
from schema.descriptors import TableSchema


def introspect_schema(engine: Engine, tables: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """Snapshot the live catalog: tables, their columns and secondary indexes."""
    driver = engine.driver
    with engine.connect() as conn:
        table_names = driver.list_tables(conn)
        if tables is not None:
            wanted = set(tables)
            table_names = [name for name in table_names if name in wanted]

        snapshot: List[Dict[str, Any]] = []
        for table_name in table_names:
            snapshot.append(
                {
                    "table_name": table_name,
                    "columns": driver.table_columns(conn, table_name),
                    "indexes": sorted(driver.table_indexes(conn, table_name)),
                }
            )

    return {
        "source": {"db_engine": driver.name, "db_name": engine.db_name},
        "profile": {"table_count": len(snapshot)},
        "tables": snapshot,
    }


def schema_status(engine: Engine, schemas: Iterable[TableSchema]) -> Dict[str, Any]:
    """Compare the declared schemas against the catalog without changing it."""
    declared = list(schemas)
    snapshot = introspect_schema(engine, tables=[table.name for table in declared])
    live = {table["table_name"]: table for table in snapshot["tables"]}

    tables: List[Dict[str, Any]] = []
    for table in declared:
        present = table.name in live
        live_columns = [col["column_name"] for col in live[table.name]["columns"]] if present else []
        tables.append(
            {
                "table_name": table.name,
                "present": present,
                "columns": live_columns,
                "missing_columns": [name for name in table.column_names if name not in live_columns],
            }
        )
    return {
        "tables": tables,
        "missing_tables": [entry["table_name"] for entry in tables if not entry["present"]],
    }
