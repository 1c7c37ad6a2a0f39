import random

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from budget_recipes.app.api.deps import (
    get_detailed_cost_calculator,
    get_discovery_pipeline,
    get_rate_limiter,
)
from budget_recipes.app.core.config import Settings
from budget_recipes.app.db import models  # noqa: F401
from budget_recipes.app.db.base import Base
from budget_recipes.app.main import create_app
from budget_recipes.app.services.discovery.cache import DiscoveryCache
from budget_recipes.app.services.discovery.cache_store import InMemoryCacheStore
from budget_recipes.app.services.discovery.content_extractor import ContentExtractor
from budget_recipes.app.services.discovery.cost_estimator import CostEstimator
from budget_recipes.app.services.discovery.detailed_cost import DetailedCostCalculator
from budget_recipes.app.services.discovery.pipeline import DiscoveryPipeline
from budget_recipes.app.services.discovery.unit_prices import FallbackPriceLookup
from budget_recipes.app.services.rate_limit import RateLimiter
from tests.fakes import FakeClock, FakeFetcher, FakeSearchClient


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        cache_backend="memory",
        search_api_key=None,
        llm_api_key=None,
        fanout_target_unique=30,
        fanout_max_variants=8,
        fanout_batch_size=4,
    )


@pytest.fixture
def memory_store(clock):
    return InMemoryCacheStore(clock=clock)


@pytest.fixture
def discovery_cache(memory_store, clock):
    return DiscoveryCache(memory_store, clock=clock, rng=random.Random(7))


@pytest.fixture
def sql_session_factory():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
    engine.dispose()


@pytest.fixture
def fake_search():
    return FakeSearchClient()


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def pipeline(discovery_cache, fake_search, settings):
    return DiscoveryPipeline(
        cache=discovery_cache,
        search=fake_search,
        estimator=CostEstimator(),
        settings=settings,
        rng=random.Random(3),
    )


@pytest.fixture
def rate_limiter():
    return RateLimiter(max_requests=1000, window_seconds=60)


@pytest.fixture
def app(pipeline, fake_fetcher, rate_limiter):
    app = create_app()
    calculator = DetailedCostCalculator(ContentExtractor(fake_fetcher), FallbackPriceLookup())

    app.dependency_overrides[get_discovery_pipeline] = lambda: pipeline
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_detailed_cost_calculator] = lambda: calculator
    return app


@pytest.fixture
def client(app):
    return TestClient(app)
