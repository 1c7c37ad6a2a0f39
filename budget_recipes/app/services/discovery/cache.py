"""Cache lookup and enrichment on top of a Cache Store."""

import logging
import random
from datetime import timedelta
from typing import Iterable, List, Optional

from budget_recipes.app.services.discovery.cache_store import CacheStore, Clock, utcnow, as_utc
from budget_recipes.app.services.discovery.models import (
    VOLATILE_FIELDS,
    CacheEntry,
    CacheLookup,
    CacheStatus,
    CandidateRecipe,
    dedupe_by_url,
)

logger = logging.getLogger(__name__)


class DiscoveryCache:
    """
    Decides whether a cached result set can be reused.

    An entry is a hit when it is fresh and holds at least ``min_items``
    candidates; a fresh but smaller entry is "insufficient" and its items are
    merged into the next search round. Stale entries are deleted on read, and
    the whole store is swept for them at most once per ``sweep_interval``.
    Store failures never propagate: reads degrade to a miss, writes are dropped.
    """

    def __init__(
        self,
        store: CacheStore,
        min_items: int = 20,
        max_items: int = 200,
        ttl: timedelta = timedelta(hours=24),
        clock: Clock = utcnow,
        rng: Optional[random.Random] = None,
        sweep_interval: timedelta = timedelta(hours=1),
    ):
        self.store = store
        self.min_items = min_items
        self.max_items = max_items
        self.ttl = ttl
        self.clock = clock
        self.rng = rng or random.Random()
        self.sweep_interval = sweep_interval
        self._last_sweep = clock()

    def _maybe_sweep(self) -> None:
        now = self.clock()
        if now - self._last_sweep < self.sweep_interval:
            return
        self._last_sweep = now
        try:
            removed = self.store.evict_expired(now)
        except Exception as exc:
            logger.warning("Cache sweep failed: %s", exc)
            return
        if removed:
            logger.info("Swept %d stale cache entries", removed)

    def lookup(self, key: str) -> CacheLookup:
        self._maybe_sweep()
        try:
            entry = self.store.get(key)
        except Exception as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return CacheLookup(status=CacheStatus.MISS)
        if entry is None:
            return CacheLookup(status=CacheStatus.MISS)

        age = self.clock() - as_utc(entry.updated_at)
        if age > self.ttl:
            logger.info("Cache entry %s is stale (%s old); deleting", key, age)
            try:
                self.store.delete(key)
            except Exception as exc:
                logger.warning("Cache delete failed for %s: %s", key, exc)
            return CacheLookup(status=CacheStatus.MISS)

        if len(entry.items) >= self.min_items:
            return CacheLookup(status=CacheStatus.HIT, items=entry.items)
        if entry.items:
            return CacheLookup(status=CacheStatus.INSUFFICIENT, items=entry.items)
        return CacheLookup(status=CacheStatus.MISS)

    def sample(self, items: List[CandidateRecipe]) -> List[CandidateRecipe]:
        """Random sample of up to ``min_items`` items from a cache hit."""
        size = min(self.min_items, len(items))
        return self.rng.sample(list(items), size)

    def write(self, key: str, items: Iterable[CandidateRecipe], merge: bool = False) -> None:
        self._maybe_sweep()
        stripped = [item.model_copy(update={field: None for field in VOLATILE_FIELDS}) for item in items]
        try:
            combined = stripped
            if merge:
                existing = self._existing_items(key)
                combined = existing + stripped
            combined = dedupe_by_url(combined)
            if len(combined) > self.max_items:
                # Oldest first, so drop from the front.
                combined = combined[-self.max_items :]
            self.store.put(CacheEntry(key=key, items=combined, updated_at=self.clock()))
        except Exception as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)

    def _existing_items(self, key: str) -> List[CandidateRecipe]:
        try:
            entry = self.store.get(key)
        except Exception as exc:
            logger.warning("Cache read before merge failed for %s: %s", key, exc)
            return []
        return list(entry.items) if entry else []
