import random
from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status

from budget_recipes.app.core.config import Settings, get_settings
from budget_recipes.app.services.discovery.cache import DiscoveryCache
from budget_recipes.app.services.discovery.cache_store import CacheStore, build_cache_store
from budget_recipes.app.services.discovery.content_extractor import ContentExtractor
from budget_recipes.app.services.discovery.cost_estimator import CostEstimator
from budget_recipes.app.services.discovery.detailed_cost import DetailedCostCalculator
from budget_recipes.app.services.discovery.fetcher import HttpxPageFetcher
from budget_recipes.app.services.discovery.llm_client import OpenAICompletionProvider
from budget_recipes.app.services.discovery.pipeline import DiscoveryPipeline
from budget_recipes.app.services.discovery.search_client import GoogleCustomSearchClient
from budget_recipes.app.services.discovery.unit_prices import FallbackPriceLookup
from budget_recipes.app.services.rate_limit import RateLimiter


def get_cache_store(settings: Settings = Depends(get_settings)) -> CacheStore:
    return build_cache_store(settings)


def get_detailed_cost_calculator(settings: Settings = Depends(get_settings)) -> DetailedCostCalculator:
    extractor = ContentExtractor(HttpxPageFetcher.from_settings(settings))
    return DetailedCostCalculator(extractor, FallbackPriceLookup())


def get_discovery_pipeline(
    settings: Settings = Depends(get_settings),
    store: CacheStore = Depends(get_cache_store),
    detailed: DetailedCostCalculator = Depends(get_detailed_cost_calculator),
) -> DiscoveryPipeline:
    rng = random.Random()
    cache = DiscoveryCache(
        store,
        min_items=settings.cache_min_items,
        max_items=settings.cache_max_items,
        ttl=timedelta(hours=settings.cache_ttl_hours),
        rng=rng,
    )
    return DiscoveryPipeline(
        cache=cache,
        search=GoogleCustomSearchClient.from_settings(settings),
        estimator=CostEstimator(OpenAICompletionProvider.from_settings(settings)),
        detailed=detailed,
        settings=settings,
        rng=rng,
    )


@lru_cache
def get_rate_limiter() -> RateLimiter:
    settings = get_settings()
    return RateLimiter(settings.rate_limit_max_requests, settings.rate_limit_window_seconds)


def client_identity(request: Request) -> str:
    client_id = request.headers.get("X-Client-Id")
    if client_id:
        return client_id.strip()
    return request.client.host if request.client else "anonymous"


def enforce_rate_limit(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> None:
    if not limiter.hit(client_identity(request)):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={"error_code": "rate_limited", "message": "Too many requests. Try again shortly."},
        )
