import pytest

from adapters.base import SchemaSyncError
from adapters.engine import Engine
from adapters.sqlite import SQLiteDriver
from schema.descriptors import Column, TableSchema, validate_schemas
from schema.introspector.service import introspect_schema, schema_status
from schema.registry import FORUM_SCHEMAS, TAB, registry_table_names
from schema.sync import sync_schema


@pytest.fixture
def engine(tmp_path):
    engine = Engine(SQLiteDriver(), str(tmp_path), "forum")
    yield engine
    engine.close()


def test_fresh_database_gets_every_table(engine):
    report = sync_schema(engine, FORUM_SCHEMAS)

    assert report.created_tables == list(registry_table_names())
    assert len(report.created_tables) == 16
    snapshot = introspect_schema(engine)
    assert {t["table_name"] for t in snapshot["tables"]} >= set(registry_table_names())
    assert schema_status(engine, FORUM_SCHEMAS)["missing_tables"] == []


def test_second_sync_is_a_no_op(engine):
    sync_schema(engine, FORUM_SCHEMAS)
    before = introspect_schema(engine)

    report = sync_schema(engine, FORUM_SCHEMAS)

    assert not report.changed
    assert report.as_dict() == {"created_tables": [], "added_columns": [], "created_indexes": []}
    assert introspect_schema(engine) == before


def test_declared_indexes_are_created(engine):
    report = sync_schema(engine, FORUM_SCHEMAS)
    assert "IDX_topic_author" in report.created_indexes
    with engine.connect() as conn:
        assert "IDX_topic_author" in engine.driver.table_indexes(conn, "topic")


def test_new_column_is_added_without_touching_rows(engine):
    sync_schema(engine, FORUM_SCHEMAS)
    engine.execute("INSERT INTO tab (id, name, sorter) VALUES (?, ?, ?)", ("all", "All", 1))
    untouched = introspect_schema(engine, tables=["topic", "reply"])

    grown = tuple(
        table.with_column(Column("icon", "varchar", length=100, not_null=True)) if table.name == TAB.name else table
        for table in FORUM_SCHEMAS
    )
    report = sync_schema(engine, grown)

    assert report.added_columns == [("tab", "icon")]
    assert report.created_tables == []
    assert engine.fetchall("SELECT id, name, sorter, icon FROM tab") == [("all", "All", 1, "")]
    assert introspect_schema(engine, tables=["topic", "reply"]) == untouched


def test_not_null_blob_column_is_added_to_populated_table(engine):
    sync_schema(engine, FORUM_SCHEMAS)
    engine.execute("INSERT INTO tab (id, name, sorter) VALUES (?, ?, ?)", ("all", "All", 1))

    grown = tuple(
        table.with_column(Column("avatar", "blob", not_null=True)) if table.name == TAB.name else table
        for table in FORUM_SCHEMAS
    )
    report = sync_schema(engine, grown)

    assert report.added_columns == [("tab", "avatar")]
    assert engine.fetchall("SELECT id, avatar FROM tab") == [("all", b"")]
    assert not sync_schema(engine, grown).changed


def test_missing_primary_key_cannot_be_added(engine):
    engine.execute("CREATE TABLE widget (name TEXT)")
    widget = TableSchema("widget", (Column("id", "int", primary_key=True), Column("name", "text")))
    with pytest.raises(SchemaSyncError, match="primary key"):
        sync_schema(engine, [widget])


def test_driver_failure_names_the_table(engine):
    engine.execute("CREATE TABLE gadget (id INTEGER PRIMARY KEY)")
    engine.execute("INSERT INTO gadget (id) VALUES (1), (2)")
    gadget = TableSchema(
        "gadget",
        (
            Column("id", "int", primary_key=True),
            Column("code", "varchar", length=20, not_null=True, unique=True),
        ),
    )
    with pytest.raises(SchemaSyncError, match="gadget"):
        sync_schema(engine, [gadget])


def test_registry_validation():
    with pytest.raises(SchemaSyncError, match="empty"):
        validate_schemas([])
    with pytest.raises(SchemaSyncError, match="Duplicate table"):
        validate_schemas([TAB, TAB])
    with pytest.raises(SchemaSyncError, match="Unknown column type"):
        validate_schemas([TableSchema("odd", (Column("when", "timestamp"),))])
    with pytest.raises(SchemaSyncError, match="Duplicate column"):
        validate_schemas([TableSchema("odd", (Column("a", "int"), Column("a", "int")))])
    assert validate_schemas(FORUM_SCHEMAS) == FORUM_SCHEMAS
