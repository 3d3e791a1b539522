# todo_api/database.py
"""Async SQLite engine, per-operation session factory, and dev auto-migration using SQLModel."""

import logging
import os
from enum import Enum
from pathlib import Path

from sqlalchemy import Column, Connection, inspect, text
from sqlalchemy.dialects.sqlite import dialect as sqlite_dialect
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

# Registers the todos table on SQLModel.metadata.
from todo_api import models  # noqa: F401

logger = logging.getLogger("auto_migrate")

DB_PATH = Path(__file__).parent / "data.db"
DATABASE_URL = os.getenv("TODOS_DATABASE_URL", f"sqlite+aiosqlite:///{DB_PATH}")
DATABASE_ECHO = os.getenv("TODOS_DATABASE_ECHO", "").lower() in ("1", "true", "yes")

engine = create_async_engine(DATABASE_URL, echo=DATABASE_ECHO)
session_factory = async_sessionmaker(engine, expire_on_commit=False)


def _compile_column_type(column: Column) -> str:
    """Compile a SQLAlchemy column type to a SQLite-compatible DDL string."""
    return column.type.compile(dialect=sqlite_dialect())


def _sqlite_default_clause(column: Column) -> str:
    """DEFAULT clause that lets ALTER TABLE ADD COLUMN backfill existing rows.

    Nullable columns need none. Otherwise the model's scalar default is used,
    falling back to a zero value for the column's type affinity.
    """
    if column.nullable:
        return ""

    default = column.default
    if default is None or not default.is_scalar:
        affinity = _compile_column_type(column).upper()
        numeric = any(name in affinity for name in ("INT", "BOOL", "REAL", "FLOAT", "NUMERIC"))
        return " DEFAULT 0" if numeric else " DEFAULT ''"

    value = default.arg
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, (bool, int, float)):
        return f" DEFAULT {int(value) if isinstance(value, bool) else value}"
    return " DEFAULT '{}'".format(str(value).replace("'", "''"))


def _schema_diff(db_columns: dict, table) -> tuple[set, set, set]:
    """Columns the model adds, columns it dropped, and shared columns whose type changed."""
    model_columns = {column.name: column for column in table.columns}
    added = model_columns.keys() - db_columns.keys()
    removed = db_columns.keys() - model_columns.keys()
    retyped = {
        name
        for name in model_columns.keys() & db_columns.keys()
        if str(db_columns[name]["type"]).upper()
        != _compile_column_type(model_columns[name]).upper()
    }
    return added, removed, retyped


def auto_migrate(conn: Connection) -> None:
    """Bring existing tables in line with SQLModel metadata.

    Missing columns are added in place with ALTER TABLE ADD COLUMN. Any
    dropped or retyped column recreates the table, losing its rows, which is
    acceptable for a dev database. Tables that do not exist yet are left to
    ``create_all``. Runs on a sync connection inside ``AsyncConnection.run_sync``.
    """
    inspector = inspect(conn)
    existing_tables = set(inspector.get_table_names())

    for table_name, table in SQLModel.metadata.tables.items():
        if table_name not in existing_tables:
            continue

        db_columns = {info["name"]: info for info in inspector.get_columns(table_name)}
        added, removed, retyped = _schema_diff(db_columns, table)

        if removed or retyped:
            logger.warning(
                "Recreating table '%s' (added=%s removed=%s retyped=%s); rows are dropped",
                table_name, sorted(added), sorted(removed), sorted(retyped),
            )
            conn.execute(text(f'DROP TABLE "{table_name}"'))
            table.create(conn)
            continue

        for name in sorted(added):
            column = table.columns[name]
            not_null = "" if column.nullable else " NOT NULL"
            ddl = (
                f'ALTER TABLE "{table_name}" ADD COLUMN "{name}" '
                f"{_compile_column_type(column)}{not_null}{_sqlite_default_clause(column)}"
            )
            logger.info("Migrating '%s': %s", table_name, ddl)
            conn.execute(text(ddl))


async def create_db_and_tables(bind: AsyncEngine = engine) -> None:
    """Create all tables from SQLModel metadata, then auto-migrate schema diffs."""
    async with bind.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
        await conn.run_sync(auto_migrate)


async def ping(bind: AsyncEngine = engine) -> None:
    """Run a trivial query; raises if the database is unreachable."""
    async with bind.connect() as conn:
        await conn.execute(text("SELECT 1"))
