"""In-memory cache of enriched entities.

Keyed by ``(category, databank id)``. Entries live until ``clear()``; there
is no TTL and no eviction, so a cached entity is returned unchanged for the
life of the process.
"""

from collections import Counter
from typing import Dict, Optional, Tuple

from swbrowser.databank.models import EntityCategory
from swbrowser.enrichment.models import EnrichedEntity


CacheKey = Tuple[EntityCategory, str]


def cache_key(category: EntityCategory, entity_id: str) -> CacheKey:
    return EntityCategory(category), str(entity_id)


class EnrichmentCache:
    """Process-lifetime map of enriched entities."""

    def __init__(self):
        self._entries: Dict[CacheKey, EnrichedEntity] = {}
        self.hits = 0
        self.misses = 0

    def get(self, category: EntityCategory, entity_id: str) -> Optional[EnrichedEntity]:
        entry = self._entries.get(cache_key(category, entity_id))
        if entry is None:
            self.misses += 1
        else:
            self.hits += 1
        return entry

    def put(self, category: EntityCategory, entity_id: str, entity: EnrichedEntity) -> None:
        # Concurrent duplicates may both compute; last write wins.
        self._entries[cache_key(category, entity_id)] = entity

    def clear(self) -> int:
        """Drop every entry.

        Returns:
            Number of entries removed
        """
        count = len(self._entries)
        self._entries.clear()
        return count

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return cache_key(*key) in self._entries

    def stats(self) -> Dict[str, object]:
        """Counts by category plus hit/miss totals."""
        by_category = Counter(category.value for category, _ in self._entries)
        matched = sum(1 for entity in self._entries.values() if entity.matched)
        return {
            "total_cached": len(self._entries),
            "matched": matched,
            "by_category": dict(by_category),
            "hits": self.hits,
            "misses": self.misses,
        }
