"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), a cursor context manager (``get_cursor``) and
``init_db`` which applies migrations on application start.  It uses
SQLite as a lightweight embedded database.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.  The
initial schema is generated from the entity registry so that the
tables always match the records produced by the in-process store.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .config import settings
from ..store.entities import BOOL, ENTITIES, INT, Entity

logger = logging.getLogger(__name__)

_SQL_TYPES = {INT: "INTEGER", BOOL: "INTEGER"}


def get_database_path(database_url: Optional[str] = None) -> str:
    """Compute the path to the SQLite database file.

    If the configured path is absolute (or the special ``:memory:``
    name), use it directly.  Otherwise resolve it relative to the
    package root.
    """
    db_url = database_url or settings.database_url
    if db_url == ":memory:" or os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # saveup_api/
    return str((base_dir / db_url).resolve())


def get_connection(database_path: Optional[str] = None) -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  Timestamps are stored as ISO-8601 text and returned as is.
    """
    conn = sqlite3.connect(database_path or get_database_path())
    conn.row_factory = sqlite3.Row
    # Foreign key enforcement is per connection in SQLite.
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor(database_path: Optional[str] = None) -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit.

    The transaction is committed when the block completes and rolled
    back when it raises.
    """
    conn = get_connection(database_path)
    try:
        yield conn.cursor()
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def create_table_sql(entity: Entity) -> str:
    """Return the ``CREATE TABLE`` statement for an entity."""
    columns = ["id INTEGER PRIMARY KEY AUTOINCREMENT"]
    for entity_field in entity.fields:
        column = f"{entity_field.column} {_SQL_TYPES.get(entity_field.kind, 'TEXT')}"
        if entity_field.required:
            column += " NOT NULL"
        if entity_field.unique:
            column += " UNIQUE"
        columns.append(column)
    body = ",\n    ".join(columns)
    return f"CREATE TABLE IF NOT EXISTS {entity.table} (\n    {body}\n);"


def _initial_schema() -> str:
    statements = [create_table_sql(entity) for entity in ENTITIES]
    statements.append("CREATE INDEX IF NOT EXISTS idx_transactions_user ON transactions (user_id, created_at);")
    statements.append("CREATE INDEX IF NOT EXISTS idx_investments_user ON investments (user_id, transaction_date);")
    statements.append("CREATE INDEX IF NOT EXISTS idx_activities_user ON activities (user_id, created_at);")
    return "\n\n".join(statements)


def get_migrations() -> List[Tuple[int, str]]:
    """Ordered ``(version, sql)`` migrations.  Append new ones at the end."""
    return [
        # Migration 1: initial schema
        (1, _initial_schema()),
        # Migration 2: one badge row per user and badge, one progress row
        # per user and education module
        (
            2,
            """
            CREATE UNIQUE INDEX IF NOT EXISTS uq_user_badges ON user_badges (user_id, badge_id);
            CREATE UNIQUE INDEX IF NOT EXISTS uq_user_education ON user_education (user_id, module_id);
            """,
        ),
    ]


def init_db(database_path: Optional[str] = None) -> int:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version and applies any newer migrations.  Returns
    the schema version after migrating.
    """
    path = database_path or get_database_path()
    with get_cursor(path) as cursor:
        cursor.execute("CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)")
        cursor.execute("SELECT MAX(version) AS version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in get_migrations():
            if version > current_version:
                logger.info("Applying migration %s to %s", version, path)
                cursor.executescript(sql)
                cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                current_version = version
    return current_version
