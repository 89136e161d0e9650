"""
Generic operations on owned resources.

Most SaveUp entities follow one pattern: they are created with the
caller's identity injected as the owner, listed per owner, and read or
updated by id after an ownership check.  ``ResourceService`` captures
that pattern once so the endpoint modules only name the entity.
"""

from typing import Any, Dict, List, Mapping, Optional

from ..core.access_control import authorize_ownership
from ..core.errors import NotFoundError
from ..schemas.auth import Principal
from ..store import ResourceStore
from ..store.entities import get_entity


class ResourceService:
    def __init__(self, store: ResourceStore):
        self.store = store

    async def create_owned(self, entity_name: str, data: Mapping[str, Any], owner_id: int) -> Dict[str, Any]:
        """Create a record owned by ``owner_id``.

        The owner field from the payload is always replaced, so a client
        cannot create records on behalf of another user.
        """
        values = dict(data)
        values[get_entity(entity_name).owner_field] = owner_id
        return self.store.create(entity_name, values)

    async def create(self, entity_name: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        return self.store.create(entity_name, data)

    async def list_for_owner(self, entity_name: str, owner_id: int, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        return self.store.get_by_owner(entity_name, owner_id, limit=limit)

    async def get_owned(self, entity_name: str, record_id: int, principal: Principal, label: str) -> Dict[str, Any]:
        """Load a record and check that ``principal`` owns it.

        Raises ``NotFoundError`` ("<label> not found") when the record
        does not exist and ``AuthorizationError`` when it belongs to
        someone else.
        """
        record = self.store.get(entity_name, record_id)
        if record is None:
            raise NotFoundError(f"{label} not found")
        authorize_ownership(principal, record.get(get_entity(entity_name).owner_field))
        return record

    async def update_owned(
        self,
        entity_name: str,
        record_id: int,
        updates: Mapping[str, Any],
        principal: Principal,
        label: str,
    ) -> Dict[str, Any]:
        """Partially update a record owned by ``principal``.

        Neither ``id`` nor the owner field can be changed this way.
        """
        await self.get_owned(entity_name, record_id, principal, label)
        owner_field = get_entity(entity_name).owner_field
        values = {key: value for key, value in updates.items() if key not in {"id", owner_field}}
        record = self.store.update(entity_name, record_id, values)
        if record is None:
            raise NotFoundError(f"{label} not found")
        return record

    async def list_where(self, entity_name: str, filters: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """Records matching ``filters`` in the entity's default order."""
        return self.store.find(entity_name, filters, order_by=get_entity(entity_name).order_field)

    async def list_catalog(self, entity_name: str, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Active entries of a public catalogue, optionally filtered further."""
        entity = get_entity(entity_name)
        query: Dict[str, Any] = {}
        if entity.active_field:
            query[entity.active_field] = True
        query.update({key: value for key, value in (filters or {}).items() if value is not None})
        return self.store.find(entity_name, query, order_by=entity.order_field)
