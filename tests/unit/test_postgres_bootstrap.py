from schema.descriptors import Column
from schema.registry import FORUM_SCHEMAS, TAB
from storage.adapter import Adapter

DSN = "host=localhost user=forum dbname="


def test_bootstrap_creates_every_table_without_create_database(fake_psycopg):
    with Adapter("postgres", DSN, "forum") as adapter:
        report = adapter.create_tables()

    statements = fake_psycopg.statements
    assert statements[0] == "SELECT 1"
    assert not any(s.startswith("CREATE DATABASE") for s in statements)
    created = [s for s in statements if s.startswith("CREATE TABLE IF NOT EXISTS")]
    assert len(created) == len(FORUM_SCHEMAS)
    assert any(s.startswith('CREATE TABLE IF NOT EXISTS "topic" ( "id" SERIAL') for s in created)
    assert report.created_tables == [table.name for table in FORUM_SCHEMAS]

    assert {conn.params["conninfo"] for conn in fake_psycopg.connections} == {"host=localhost user=forum dbname=forum"}
    assert all(conn.closed for conn in fake_psycopg.connections)


def test_second_bootstrap_issues_no_ddl(fake_psycopg):
    with Adapter("postgresql", DSN, "forum") as adapter:
        adapter.create_tables()
    issued = len(fake_psycopg.statements)

    with Adapter("postgresql", DSN, "forum") as adapter:
        report = adapter.create_tables()

    assert not report.changed
    assert fake_psycopg.ddl(since=issued) == []


def test_grown_schema_adds_exactly_one_column(fake_psycopg):
    with Adapter("postgres", DSN, "forum") as adapter:
        adapter.create_tables()
    issued = len(fake_psycopg.statements)

    grown = tuple(
        table.with_column(Column("pinned", "bool", not_null=True)) if table.name == TAB.name else table
        for table in FORUM_SCHEMAS
    )
    with Adapter("postgres", DSN, "forum") as adapter:
        report = adapter.create_tables(grown)

    assert report.added_columns == [("tab", "pinned")]
    assert fake_psycopg.ddl(since=issued) == ['ALTER TABLE "tab" ADD COLUMN "pinned" BOOLEAN NOT NULL DEFAULT FALSE']
