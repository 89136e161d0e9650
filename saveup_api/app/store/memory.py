"""
In-process store.

Holds every entity in its own list in insertion order.  A single id
counter is shared by all entities, so ids are unique across the whole
store.  There is no locking: this store backs tests and the durable
store's fallback path, and concurrent writers may race.
"""

import copy
import itertools
from typing import Any, Dict, List, Mapping, Optional

from .base import Record, ResourceStore
from .entities import ENTITIES, Entity


def _sort_key(value: Any):
    # ``None`` sorts below every real value so it ends up last in a descending sort.
    return (value is not None, value if value is not None else "")


class MemoryStore(ResourceStore):
    name = "memory"

    def __init__(self):
        self._tables: Dict[str, List[Record]] = {entity.name: [] for entity in ENTITIES}
        self._ids = itertools.count(1)

    def _insert(self, entity: Entity, values: Record) -> Record:
        record = {"id": next(self._ids), **values}
        self._tables[entity.name].append(record)
        return copy.deepcopy(record)

    def _select(
        self,
        entity: Entity,
        filters: Mapping[str, Any],
        order_by: Optional[str],
        limit: Optional[int],
    ) -> List[Record]:
        rows = [
            row for row in self._tables[entity.name]
            if all(row.get(name) == value for name, value in filters.items())
        ]
        rows.sort(key=lambda row: row["id"], reverse=True)
        if order_by:
            # Stable sort keeps the id DESC tie-breaker from the pass above.
            rows.sort(key=lambda row: _sort_key(row.get(order_by)), reverse=True)
        if limit is not None:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    def _update_row(self, entity: Entity, record_id: int, values: Record) -> Optional[Record]:
        for row in self._tables[entity.name]:
            if row["id"] == record_id:
                row.update(copy.deepcopy(values))
                return copy.deepcopy(row)
        return None
