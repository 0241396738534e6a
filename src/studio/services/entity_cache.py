"""In-process entity cache.

Keyed by ``(kind, id)``. Entries never expire; they live until invalidated or
the process restarts. Only successful reads are stored, never "not found".

An entry is either ``confirmed`` (the store acknowledged it) or ``pending``
(optimistically registered before a create reached the store). Reads through
``get`` only see confirmed entries; ``peek`` exposes pending ones too.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any
from uuid import UUID

from src.studio.core.logging import get_logger
from src.studio.models import EntityKind

logger = get_logger(__name__)

CacheKey = tuple[EntityKind, UUID]


class EntryState(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"


@dataclass
class CacheEntry:
    value: Any
    state: EntryState


class EntityCache:
    """Process-wide cache with no locking.

    All mutations run synchronously between awaits on one event loop, so
    there is nothing to guard. Two overlapping fetches for the same id both
    store equivalent data and the last write wins.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, CacheEntry] = {}
        self.hits = 0
        self.misses = 0

    def get(self, kind: EntityKind, entity_id: UUID) -> Any | None:
        """Confirmed value or None."""
        entry = self._entries.get((kind, entity_id))
        if entry is None or entry.state != EntryState.CONFIRMED:
            self.misses += 1
            return None
        self.hits += 1
        return entry.value

    def peek(self, kind: EntityKind, entity_id: UUID) -> CacheEntry | None:
        """Entry in any state, without touching hit/miss counters."""
        return self._entries.get((kind, entity_id))

    def put(self, kind: EntityKind, entity_id: UUID, value: Any) -> None:
        self._entries[(kind, entity_id)] = CacheEntry(value, EntryState.CONFIRMED)

    def invalidate(self, kind: EntityKind, entity_id: UUID) -> bool:
        """Drop an entry. Returns True if one was present."""
        removed = self._entries.pop((kind, entity_id), None) is not None
        if removed:
            logger.debug("Cache entry invalidated", entity_kind=kind.value, entity_id=str(entity_id))
        return removed

    def register_pending(self, kind: EntityKind, entity_id: UUID, placeholder: Any) -> None:
        """Phase one of an optimistic create."""
        self._entries[(kind, entity_id)] = CacheEntry(placeholder, EntryState.PENDING)

    def confirm(self, kind: EntityKind, entity_id: UUID, value: Any) -> None:
        """Phase two: the write succeeded, replace the placeholder in place."""
        entry = self._entries.get((kind, entity_id))
        if entry is None:
            self.put(kind, entity_id, value)
            return
        entry.value = value
        entry.state = EntryState.CONFIRMED

    def discard_pending(self, kind: EntityKind, entity_id: UUID) -> bool:
        """Roll back a failed optimistic create. Confirmed entries are kept."""
        entry = self._entries.get((kind, entity_id))
        if entry is None or entry.state != EntryState.PENDING:
            return False
        del self._entries[(kind, entity_id)]
        return True

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
