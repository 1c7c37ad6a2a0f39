"""Cache Store backends: in-memory, Redis and SQL."""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from redis import Redis

from budget_recipes.app.core.config import Settings, get_settings
from budget_recipes.app.db.models import WebSearchCache
from budget_recipes.app.services.discovery.models import CacheEntry

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CacheStore(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[CacheEntry]:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    def put(self, entry: CacheEntry) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def evict_expired(self, now: Optional[datetime] = None) -> int:
        """Drop stale entries and return how many were removed. No-op for self-expiring stores."""
        return 0


class InMemoryCacheStore(CacheStore):
    def __init__(self, ttl: timedelta = timedelta(hours=24), clock: Clock = utcnow):
        self._entries: Dict[str, CacheEntry] = {}
        self.ttl = ttl
        self.clock = clock

    def get(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        return entry.model_copy(deep=True) if entry else None

    def put(self, entry: CacheEntry) -> None:
        self._entries[entry.key] = entry.model_copy(deep=True)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def evict_expired(self, now: Optional[datetime] = None) -> int:
        cutoff = (now or self.clock()) - self.ttl
        stale = [key for key, entry in self._entries.items() if as_utc(entry.updated_at) < cutoff]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)


class RedisCacheStore(CacheStore):
    """Entries are stored as JSON strings and expire natively after the TTL."""

    def __init__(self, client: Redis, prefix: str = "budget_recipes:search:", ttl: timedelta = timedelta(hours=24)):
        self.client = client
        self.prefix = prefix
        self.ttl = ttl

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[CacheEntry]:
        raw = self.client.get(self._key(key))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return CacheEntry.model_validate_json(raw)

    def put(self, entry: CacheEntry) -> None:
        self.client.set(
            self._key(entry.key),
            entry.model_dump_json(),
            ex=int(self.ttl.total_seconds()),
        )

    def delete(self, key: str) -> None:
        self.client.delete(self._key(key))


class SqlCacheStore(CacheStore):
    """Backed by the ``web_search_cache`` table; one row per cache key."""

    def __init__(self, session_factory, ttl: timedelta = timedelta(hours=24), clock: Clock = utcnow):
        self.session_factory = session_factory
        self.ttl = ttl
        self.clock = clock

    def get(self, key: str) -> Optional[CacheEntry]:
        with self.session_factory() as db:
            row = db.get(WebSearchCache, key)
            if row is None:
                return None
            items = json.loads(row.results_json or "[]")
            return CacheEntry(key=key, items=items, updated_at=as_utc(row.updated_at))

    def put(self, entry: CacheEntry) -> None:
        payload = json.dumps([item.model_dump(mode="json") for item in entry.items])
        # Column is naive; store UTC wall time.
        updated_at = as_utc(entry.updated_at).replace(tzinfo=None)
        with self.session_factory() as db:
            row = db.get(WebSearchCache, entry.key)
            if row is None:
                row = WebSearchCache(query=entry.key, created_at=updated_at)
                db.add(row)
            row.results_json = payload
            row.updated_at = updated_at
            db.commit()

    def delete(self, key: str) -> None:
        with self.session_factory() as db:
            row = db.get(WebSearchCache, key)
            if row is not None:
                db.delete(row)
                db.commit()

    def evict_expired(self, now: Optional[datetime] = None) -> int:
        cutoff = ((now or self.clock()) - self.ttl).astimezone(timezone.utc).replace(tzinfo=None)
        with self.session_factory() as db:
            removed = (
                db.query(WebSearchCache)
                .filter(WebSearchCache.updated_at < cutoff)
                .delete(synchronize_session=False)
            )
            db.commit()
        return removed


_memory_store: Optional[InMemoryCacheStore] = None


def build_cache_store(settings: Optional[Settings] = None) -> CacheStore:
    """Create the store named by CACHE_BACKEND (memory, redis or sql)."""
    global _memory_store
    settings = settings or get_settings()
    ttl = timedelta(hours=settings.cache_ttl_hours)
    backend = (settings.cache_backend or "memory").lower()
    if backend == "redis":
        client = Redis(host=settings.redis_host, port=settings.redis_port)
        return RedisCacheStore(client, prefix=settings.redis_key_prefix, ttl=ttl)
    if backend == "sql":
        from budget_recipes.app.db.base import Base
        from budget_recipes.app.db.session import SessionLocal, engine

        Base.metadata.create_all(bind=engine, tables=[WebSearchCache.__table__])
        return SqlCacheStore(SessionLocal, ttl=ttl)
    if backend != "memory":
        raise ValueError(f"Unknown CACHE_BACKEND: {settings.cache_backend}")
    # One process-wide store so entries survive between requests.
    if _memory_store is None:
        _memory_store = InMemoryCacheStore(ttl=ttl)
    return _memory_store
