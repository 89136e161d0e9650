"""
Resource store contract.

``ResourceStore`` is the single interface the services talk to.  The
record preparation rules (defaults, required fields, value
normalisation, timestamps) live here so every strategy applies them
identically; a concrete strategy only implements the three storage
primitives ``_insert``, ``_select`` and ``_update_row``.

Records are plain dictionaries keyed by the camelCase field names of
the entity registry plus ``id``.  Stores always hand out copies.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

from ..core.errors import ValidationError
from ..core.security import hash_password, verify_password
from .entities import BOOL, DECIMAL, INT, TEXT, TIMESTAMP, Entity, get_entity

Record = Dict[str, Any]


def utcnow() -> str:
    """Current time as an ISO-8601 string (UTC, microsecond precision)."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def parse_decimal(value: Any, name: str) -> Decimal:
    """Finite ``Decimal`` from a JSON number or numeric string."""
    if isinstance(value, bool):
        raise ValidationError(f"Field '{name}' must be a decimal amount")
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Field '{name}' must be a decimal amount") from None
    if not number.is_finite():
        raise ValidationError(f"Field '{name}' must be a finite amount")
    return number


def parse_int(value: Any, name: str) -> int:
    """Integer from a JSON number or numeric string; fractions are rejected."""
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f"Field '{name}' must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"Field '{name}' must be an integer") from None


def normalize_value(entity: Entity, name: str, value: Any) -> Any:
    """Coerce an incoming value to the kind declared for the field.

    Decimals are stored as strings with the field's number of decimal
    places, so ``"10"`` becomes ``"10.00"``.
    """
    if value is None:
        return None
    entity_field = entity.get_field(name)
    kind = entity_field.kind
    if kind == DECIMAL:
        try:
            return str(parse_decimal(value, name).quantize(Decimal(1).scaleb(-entity_field.scale)))
        except InvalidOperation:
            # More digits than the decimal context can hold.
            raise ValidationError(f"Field '{name}' is out of range") from None
    if kind == INT:
        return parse_int(value, name)
    if kind == BOOL:
        if not isinstance(value, bool):
            raise ValidationError(f"Field '{name}' must be true or false")
        return value
    if kind in (TEXT, TIMESTAMP) and not isinstance(value, str):
        raise ValidationError(f"Field '{name}' must be a string")
    return value


def sanitize_user(user: Optional[Record]) -> Optional[Record]:
    """Return a copy of a user record without its password hash."""
    if user is None:
        return None
    return {key: value for key, value in user.items() if key != "passwordHash"}


class ResourceStore(ABC):
    """CRUD-per-entity access shared by every storage strategy."""

    #: Human-readable strategy name, reported by ``/health``.
    name = "abstract"

    def initialize(self) -> None:
        """Prepare the backing storage.  Called once at startup."""

    @property
    def available(self) -> bool:
        return True

    # ------------------------------------------------------------------
    # Storage primitives implemented by each strategy
    # ------------------------------------------------------------------

    @abstractmethod
    def _insert(self, entity: Entity, values: Record) -> Record:
        """Persist ``values`` under a new id and return the stored record."""

    @abstractmethod
    def _select(
        self,
        entity: Entity,
        filters: Mapping[str, Any],
        order_by: Optional[str],
        limit: Optional[int],
    ) -> List[Record]:
        """Rows matching all ``filters``, newest ``order_by`` first, at most ``limit``."""

    @abstractmethod
    def _update_row(self, entity: Entity, record_id: int, values: Record) -> Optional[Record]:
        """Merge ``values`` into row ``record_id``; ``None`` if it does not exist."""

    # ------------------------------------------------------------------
    # Record preparation
    # ------------------------------------------------------------------

    def _prepare_create(self, entity: Entity, data: Mapping[str, Any]) -> Record:
        now = utcnow()
        values: Record = {}
        for entity_field in entity.fields:
            value = data.get(entity_field.name)
            if value is None:
                value = now if entity_field.auto_now else entity_field.default
            if value is None and entity_field.required:
                raise ValidationError(f"Field '{entity_field.name}' is required")
            values[entity_field.name] = normalize_value(entity, entity_field.name, value)
        return values

    def _prepare_update(self, entity: Entity, updates: Mapping[str, Any]) -> Record:
        values: Record = {}
        for name, value in updates.items():
            if name == "id" or not entity.has_field(name):
                continue
            if value is None and entity.get_field(name).required:
                raise ValidationError(f"Field '{name}' is required")
            values[name] = normalize_value(entity, name, value)
        if entity.touch_field:
            values[entity.touch_field] = utcnow()
        return values

    def _check_filters(self, entity: Entity, filters: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        checked: Dict[str, Any] = {}
        for name, value in (filters or {}).items():
            if name != "id" and not entity.has_field(name):
                raise KeyError(f"{entity.name} has no field {name!r}")
            checked[name] = value
        return checked

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create(self, entity_name: str, data: Mapping[str, Any]) -> Record:
        """Create a record, assigning a new id and defaults for omitted fields."""
        entity = get_entity(entity_name)
        return self._insert(entity, self._prepare_create(entity, data))

    def get(self, entity_name: str, record_id: int) -> Optional[Record]:
        entity = get_entity(entity_name)
        rows = self._select(entity, {"id": record_id}, None, 1)
        return rows[0] if rows else None

    def find(
        self,
        entity_name: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Record]:
        """Equality filter, descending ``order_by`` (ties: newest id first), row limit."""
        entity = get_entity(entity_name)
        if order_by is not None and not entity.has_field(order_by):
            raise KeyError(f"{entity.name} has no field {order_by!r}")
        return self._select(entity, self._check_filters(entity, filters), order_by, limit)

    def find_one(self, entity_name: str, filters: Mapping[str, Any]) -> Optional[Record]:
        rows = self.find(entity_name, filters, limit=1)
        return rows[0] if rows else None

    def get_by_owner(self, entity_name: str, owner_id: int, limit: Optional[int] = None) -> List[Record]:
        """Records owned by ``owner_id``; inactive rows are skipped where the entity has a flag."""
        entity = get_entity(entity_name)
        if entity.owner_field is None:
            raise KeyError(f"{entity.name} has no owner")
        filters: Dict[str, Any] = {entity.owner_field: owner_id}
        if entity.active_field:
            filters[entity.active_field] = True
        return self.find(entity_name, filters, order_by=entity.order_field, limit=limit)

    def update(self, entity_name: str, record_id: int, updates: Mapping[str, Any]) -> Optional[Record]:
        """Partially update a record.  Returns ``None`` when ``record_id`` does not exist."""
        entity = get_entity(entity_name)
        return self._update_row(entity, record_id, self._prepare_update(entity, updates))

    def update_where(
        self, entity_name: str, filters: Mapping[str, Any], updates: Mapping[str, Any]
    ) -> List[Record]:
        """Apply the same partial update to every record matching ``filters``."""
        updated = []
        for row in self.find(entity_name, filters):
            record = self.update(entity_name, row["id"], updates)
            if record is not None:
                updated.append(record)
        return updated

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(self, data: Mapping[str, Any]) -> Record:
        """Create a user from a payload carrying a plain ``password``.

        The password is hashed into ``passwordHash``; the returned record
        never includes the hash.
        """
        password = data.get("password")
        if not password:
            raise ValidationError("Password is required")
        values = {key: value for key, value in data.items() if key not in {"password", "passwordHash"}}
        values["passwordHash"] = hash_password(str(password))
        return sanitize_user(self.create("users", values))

    sanitize_user = staticmethod(sanitize_user)

    def get_user_by_email(self, email: str) -> Optional[Record]:
        return self.find_one("users", {"email": email})

    def verify_user_password(self, user: Mapping[str, Any], password: str) -> bool:
        return verify_password(password, user.get("passwordHash"))
