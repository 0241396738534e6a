from src.studio.services.access_service import EntityAccessService
from src.studio.services.aggregator import Aggregate, Aggregator
from src.studio.services.entity_cache import CacheEntry, EntityCache, EntryState
from src.studio.services.fetch import (
    DefensiveFetcher,
    Resolution,
    collapse_duplicates,
    ensure_owner,
    select_canonical,
)

__all__ = [
    "Aggregate",
    "Aggregator",
    "CacheEntry",
    "DefensiveFetcher",
    "EntityAccessService",
    "EntityCache",
    "EntryState",
    "Resolution",
    "collapse_duplicates",
    "ensure_owner",
    "select_canonical",
]
