"""
Durable store backed by SQLite.

Each operation opens its own connection through ``core.db.get_cursor``
and builds its statement from up to three clauses: an equality
``WHERE`` filter, a descending ``ORDER BY`` and a ``LIMIT``.  Column
names always come from the entity registry, never from request data.
"""

import json
import logging
import sqlite3
from typing import Any, Dict, List, Mapping, Optional

from ..core.db import get_cursor, get_database_path, init_db
from .base import Record, ResourceStore
from .entities import BOOL, JSON, Entity

logger = logging.getLogger(__name__)


class SQLiteStore(ResourceStore):
    name = "sqlite"

    def __init__(self, database_path: Optional[str] = None):
        self.database_path = database_path or get_database_path()
        self._available = False

    @property
    def available(self) -> bool:
        return self._available

    def initialize(self) -> None:
        """Apply migrations.  On failure the store is marked unavailable."""
        try:
            version = init_db(self.database_path)
        except sqlite3.Error:
            self._available = False
            logger.exception("Could not initialise SQLite database at %s", self.database_path)
            return
        self._available = True
        logger.info("SQLite database %s ready (schema version %s)", self.database_path, version)

    # ------------------------------------------------------------------
    # Value conversion
    # ------------------------------------------------------------------

    @staticmethod
    def _to_db(entity: Entity, name: str, value: Any) -> Any:
        if value is None:
            return None
        kind = entity.get_field(name).kind
        if kind == BOOL:
            return 1 if value else 0
        if kind == JSON:
            return json.dumps(value)
        return value

    @staticmethod
    def _from_db(entity: Entity, row: sqlite3.Row) -> Record:
        record: Dict[str, Any] = {"id": row["id"]}
        for entity_field in entity.fields:
            value = row[entity_field.column]
            if value is not None:
                if entity_field.kind == BOOL:
                    value = bool(value)
                elif entity_field.kind == JSON:
                    value = json.loads(value)
            record[entity_field.name] = value
        return record

    def _column(self, entity: Entity, name: str) -> str:
        return "id" if name == "id" else entity.get_field(name).column

    # ------------------------------------------------------------------
    # Storage primitives
    # ------------------------------------------------------------------

    def _insert(self, entity: Entity, values: Record) -> Record:
        names = list(values)
        columns = ", ".join(entity.get_field(name).column for name in names)
        placeholders = ", ".join("?" for _ in names)
        params = [self._to_db(entity, name, values[name]) for name in names]
        with get_cursor(self.database_path) as cur:
            cur.execute(f"INSERT INTO {entity.table} ({columns}) VALUES ({placeholders})", params)
            new_id = cur.lastrowid
            cur.execute(f"SELECT * FROM {entity.table} WHERE id = ?", (new_id,))
            row = cur.fetchone()
        return self._from_db(entity, row)

    def _select(
        self,
        entity: Entity,
        filters: Mapping[str, Any],
        order_by: Optional[str],
        limit: Optional[int],
    ) -> List[Record]:
        query = f"SELECT * FROM {entity.table}"
        params: List[Any] = []
        if filters:
            clauses = []
            for name, value in filters.items():
                column = self._column(entity, name)
                if value is None:
                    clauses.append(f"{column} IS NULL")
                else:
                    clauses.append(f"{column} = ?")
                    params.append(value if name == "id" else self._to_db(entity, name, value))
            query += " WHERE " + " AND ".join(clauses)
        if order_by:
            column = self._column(entity, order_by)
            # NULLs last, then newest first with id as tie-breaker
            query += f" ORDER BY {column} IS NULL, {column} DESC, id DESC"
        else:
            query += " ORDER BY id DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        with get_cursor(self.database_path) as cur:
            cur.execute(query, params)
            rows = cur.fetchall()
        return [self._from_db(entity, row) for row in rows]

    def _update_row(self, entity: Entity, record_id: int, values: Record) -> Optional[Record]:
        with get_cursor(self.database_path) as cur:
            if values:
                assignments = ", ".join(f"{entity.get_field(name).column} = ?" for name in values)
                params = [self._to_db(entity, name, value) for name, value in values.items()]
                params.append(record_id)
                cur.execute(f"UPDATE {entity.table} SET {assignments} WHERE id = ?", params)
            cur.execute(f"SELECT * FROM {entity.table} WHERE id = ?", (record_id,))
            row = cur.fetchone()
        return self._from_db(entity, row) if row is not None else None
