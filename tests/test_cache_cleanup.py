from datetime import timedelta

from sqlalchemy.exc import OperationalError

from budget_recipes.app.services.discovery.cache_store import SqlCacheStore
from budget_recipes.app.services.discovery.models import CacheEntry
from scripts import run_cache_cleanup


def use_backend(monkeypatch, settings, backend, store=None):
    monkeypatch.setattr(run_cache_cleanup, "get_settings", lambda: settings.model_copy(update={"cache_backend": backend}))
    monkeypatch.setattr(run_cache_cleanup, "build_cache_store", lambda settings: store)


def test_cleanup_evicts_stale_sql_rows(monkeypatch, settings, sql_session_factory, clock):
    store = SqlCacheStore(sql_session_factory, clock=clock)
    store.put(CacheEntry(key="old", items=[], updated_at=clock() - timedelta(days=2)))
    store.put(CacheEntry(key="fresh", items=[], updated_at=clock()))
    use_backend(monkeypatch, settings, "sql", store)

    assert run_cache_cleanup.run_cache_cleanup() == 1
    assert store.get("old") is None
    assert store.get("fresh") is not None


def test_cleanup_skips_process_local_backends(monkeypatch, settings):
    def fail(settings):
        raise AssertionError("store should not be built")

    for backend in ["memory", "redis"]:
        monkeypatch.setattr(run_cache_cleanup, "get_settings", lambda: settings.model_copy(update={"cache_backend": backend}))
        monkeypatch.setattr(run_cache_cleanup, "build_cache_store", fail)
        assert run_cache_cleanup.run_cache_cleanup() == 0


def test_cleanup_logs_store_failures(monkeypatch, settings):
    class Broken:
        def evict_expired(self):
            raise ConnectionError("database unreachable")

    use_backend(monkeypatch, settings, "sql", Broken())
    assert run_cache_cleanup.run_cache_cleanup() == 0


def test_cleanup_logs_database_errors(monkeypatch, settings):
    class Locked:
        def evict_expired(self):
            raise OperationalError("DELETE FROM web_search_cache", {}, Exception("database is locked"))

    use_backend(monkeypatch, settings, "sql", Locked())
    assert run_cache_cleanup.run_cache_cleanup() == 0
