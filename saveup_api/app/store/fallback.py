"""
Fallback decorator around two stores.

``FallbackStore`` forwards every call to its primary store.  When the
primary is unavailable, or a call on it raises anything other than a
``ValidationError``, the failure is logged and the same call is
replayed on the fallback store.  The two stores are never reconciled:
records written to the fallback only live there.
"""

import logging
from typing import Any, List, Mapping, Optional

from ..core.errors import ValidationError
from .base import Record, ResourceStore
from .entities import Entity

logger = logging.getLogger(__name__)


class FallbackStore(ResourceStore):
    def __init__(self, primary: ResourceStore, fallback: ResourceStore):
        self.primary = primary
        self.fallback = fallback

    @property
    def name(self) -> str:
        if self.primary.available:
            return self.primary.name
        return f"{self.fallback.name} (fallback)"

    def initialize(self) -> None:
        self.fallback.initialize()
        try:
            self.primary.initialize()
        except Exception:
            logger.exception("Primary %s store failed to initialise", self.primary.name)
        if not self.primary.available:
            logger.warning("Primary %s store unavailable, using %s store", self.primary.name, self.fallback.name)

    def _call(self, method: str, *args: Any) -> Any:
        if self.primary.available:
            try:
                return getattr(self.primary, method)(*args)
            except ValidationError:
                raise
            except Exception:
                logger.exception(
                    "%s store %s failed, retrying on %s store", self.primary.name, method, self.fallback.name
                )
        return getattr(self.fallback, method)(*args)

    # The primitives are routed as a unit so that each public operation
    # runs its shared preparation exactly once, here.

    def _insert(self, entity: Entity, values: Record) -> Record:
        return self._call("_insert", entity, values)

    def _select(
        self,
        entity: Entity,
        filters: Mapping[str, Any],
        order_by: Optional[str],
        limit: Optional[int],
    ) -> List[Record]:
        return self._call("_select", entity, filters, order_by, limit)

    def _update_row(self, entity: Entity, record_id: int, values: Record) -> Optional[Record]:
        return self._call("_update_row", entity, record_id, values)
