#!/usr/bin/env python
"""
Evict stale rows from the SQL search cache.

Run from cron or another external scheduler. Only the sql backend is shared
across processes: the in-memory store is swept by the service on access, and
Redis expires entries itself, so both are skipped here.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError

from budget_recipes.app.core.config import get_settings
from budget_recipes.app.services.discovery.cache_store import build_cache_store

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cache_cleanup")


def run_cache_cleanup() -> int:
    """Returns the number of cache entries removed."""
    settings = get_settings()
    backend = (settings.cache_backend or "memory").lower()
    if backend != "sql":
        logger.info("Nothing to clean for the %s cache backend", backend)
        return 0
    try:
        store = build_cache_store(settings)
        removed = store.evict_expired()
    except (SQLAlchemyError, OSError, RuntimeError):
        logger.exception("Cache cleanup failed")
        return 0
    if removed:
        logger.info("Evicted %s stale cache entries", removed)
    return removed


if __name__ == "__main__":
    run_cache_cleanup()
