import json
import random

import pytest

from budget_recipes.app.services.discovery.content_extractor import ContentExtractor
from budget_recipes.app.services.discovery.cost_estimator import CostEstimator
from budget_recipes.app.services.discovery.detailed_cost import DetailedCostCalculator
from budget_recipes.app.services.discovery.models import CacheStatus, CostSource, DiscoveryRequest
from budget_recipes.app.services.discovery.pipeline import DiscoveryPipeline, backfill_servings, build_queries
from budget_recipes.app.services.discovery.query_key import normalize_query_key
from budget_recipes.app.services.discovery.unit_prices import FallbackPriceLookup
from tests.fakes import FakeFetcher, make_candidate


def hits_for(query, count=10):
    slug = query.replace(" ", "-")
    return [make_candidate(i, url=f"https://recettes.example.com/{slug}/{i}") for i in range(count)]


def key_for(request: DiscoveryRequest) -> str:
    return normalize_query_key(request.ingredients, request.budget, request.allergies, request.filters)


def test_build_queries():
    request = DiscoveryRequest(ingredients=["poulet", "riz"], budget="20", meal_type="souper")
    primary, variants = build_queries(request)
    assert primary == "recette poulet riz souper économique pas cher"
    assert variants[0] == f"{primary} facile"
    assert not any(v.endswith(" souper") for v in variants)
    assert len(variants) == 7

    primary, variants = build_queries(DiscoveryRequest(ingredients=["tofu"]), max_variants=2)
    assert primary == "recette tofu"
    assert variants == ["recette tofu facile", "recette tofu maison"]


def test_backfill_servings_from_snippet():
    items = backfill_servings([make_candidate(1, snippet="Pour 6 personnes"), make_candidate(2, servings=2)])
    assert [i.servings for i in items] == [6, 2]


@pytest.mark.asyncio
async def test_cache_hit_skips_search(pipeline, discovery_cache, fake_search):
    request = DiscoveryRequest(ingredients=["poulet"])
    discovery_cache.write(key_for(request), [make_candidate(i) for i in range(25)])

    result = await pipeline.discover(request)

    assert fake_search.calls == []
    assert result.cached
    assert result.candidate_count == 20
    assert len(result.items) == 15
    assert all(i.estimated_cost == 8.0 and i.cost_source == CostSource.RULE for i in result.items)


@pytest.mark.asyncio
async def test_miss_fans_out_until_target_and_writes_cache(pipeline, discovery_cache, fake_search):
    fake_search.default = hits_for
    request = DiscoveryRequest(ingredients=["poulet"])
    primary, variants = build_queries(request)

    result = await pipeline.discover(request)

    # 10 primary hits + one batch of four variants reaches the 30 unique target.
    assert fake_search.queries.count(primary) == 2
    assert set(fake_search.queries) == {primary, *variants[:4]}
    assert result.candidate_count == 50
    assert not result.cached
    assert 10 <= len(result.items) <= 15

    lookup = discovery_cache.lookup(key_for(request))
    assert lookup.status == CacheStatus.HIT
    assert len(lookup.items) == 50
    assert all(i.estimated_cost is None for i in lookup.items)


@pytest.mark.asyncio
async def test_insufficient_cache_is_enriched(pipeline, discovery_cache, fake_search):
    request = DiscoveryRequest(ingredients=["poulet"])
    primary, _ = build_queries(request)
    key = key_for(request)
    discovery_cache.write(key, [make_candidate(i) for i in range(19)])
    fake_search.pages[primary] = hits_for(primary, 20)

    result = await pipeline.discover(request)

    assert set(fake_search.queries) == {primary}
    assert result.candidate_count == 39
    lookup = discovery_cache.lookup(key)
    assert lookup.status == CacheStatus.HIT
    assert len(lookup.items) == 39


@pytest.mark.asyncio
async def test_funnel_and_budget_applied_to_results(pipeline, discovery_cache):
    request = DiscoveryRequest(ingredients=["poulet"], budget="9", allergies=["noix"])
    items = [make_candidate(i) for i in range(18)]
    items += [make_candidate(100 + i, title=f"Poulet aux noix {i}") for i in range(5)]
    items += [make_candidate(200 + i, title=f"Saumon grillé {i}") for i in range(5)]
    discovery_cache.write(key_for(request), items)

    result = await pipeline.discover(request)

    assert result.budget == 9.0
    assert all("noix" not in i.title for i in result.items)
    assert all(i.estimated_cost <= 9.0 for i in result.items)


@pytest.mark.asyncio
async def test_invalid_budget_raises(pipeline):
    with pytest.raises(ValueError):
        await pipeline.discover(DiscoveryRequest(ingredients=["poulet"], budget="beaucoup"))


@pytest.mark.asyncio
async def test_detailed_costs_attached_to_leading_items(discovery_cache, fake_search, settings):
    candidates = [make_candidate(i) for i in range(20)]
    page = json.dumps({"@type": "Recipe", "recipeIngredient": ["2 tasses de riz", "500 g de poulet"]})
    pages = {c.url: f'<script type="application/ld+json">{page}</script>' for c in candidates}
    calculator = DetailedCostCalculator(ContentExtractor(FakeFetcher(pages=pages)), FallbackPriceLookup())
    pipeline = DiscoveryPipeline(
        cache=discovery_cache,
        search=fake_search,
        estimator=CostEstimator(),
        detailed=calculator,
        settings=settings,
        rng=random.Random(5),
    )
    request = DiscoveryRequest(ingredients=["poulet"], detailed_cost_count=2)
    discovery_cache.write(key_for(request), candidates)

    result = await pipeline.discover(request)

    assert [i.detailed_cost is not None for i in result.items[:3]] == [True, True, False]
    assert result.items[0].detailed_cost.total_cost == pytest.approx(7.49)


class FlakyCalculator(DetailedCostCalculator):
    async def calculate(self, url, region_hint=None):
        if url.endswith("-0"):
            raise RuntimeError("extractor crashed")
        return await super().calculate(url, region_hint)


@pytest.mark.asyncio
async def test_detailed_cost_crash_keeps_the_candidate(discovery_cache, fake_search, settings):
    candidates = [make_candidate(i) for i in range(3)]
    page = json.dumps({"@type": "Recipe", "recipeIngredient": ["2 tasses de riz"]})
    pages = {c.url: f'<script type="application/ld+json">{page}</script>' for c in candidates}
    pipeline = DiscoveryPipeline(
        cache=discovery_cache,
        search=fake_search,
        estimator=CostEstimator(),
        detailed=FlakyCalculator(ContentExtractor(FakeFetcher(pages=pages)), FallbackPriceLookup()),
        settings=settings,
    )

    items = await pipeline.attach_detailed_costs(candidates, 3)

    assert [i.url for i in items] == [c.url for c in candidates]
    assert [i.detailed_cost is not None for i in items] == [False, True, True]
