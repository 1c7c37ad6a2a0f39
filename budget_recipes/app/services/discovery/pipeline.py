"""Recipe discovery: cache, search fanout, filtering, costing and budget selection."""

import asyncio
import logging
import random
from typing import List, Optional, Tuple

from budget_recipes.app.core.config import Settings, get_settings
from budget_recipes.app.services.discovery.budget_selector import parse_budget, select_by_budget
from budget_recipes.app.services.discovery.cache import DiscoveryCache
from budget_recipes.app.services.discovery.constants import QUERY_VARIANT_SUFFIXES
from budget_recipes.app.services.discovery.cost_estimator import CostEstimator
from budget_recipes.app.services.discovery.detailed_cost import DetailedCostCalculator
from budget_recipes.app.services.discovery.filters import apply_filter_funnel, effective_meal_type
from budget_recipes.app.services.discovery.ingredient_parser import parse_servings_from_text
from budget_recipes.app.services.discovery.models import (
    CandidateRecipe,
    DiscoveryRequest,
    DiscoveryResult,
    dedupe_by_url,
)
from budget_recipes.app.services.discovery.query_key import normalize_query_key
from budget_recipes.app.services.discovery.search_client import SearchProviderClient

logger = logging.getLogger(__name__)

MEAL_QUERY_WORDS = {
    "breakfast": "déjeuner",
    "lunch": "dîner",
    "dinner": "souper",
    "snack": "collation",
}


def build_queries(request: DiscoveryRequest, max_variants: int = 8) -> Tuple[str, List[str]]:
    """Primary query text and the suffixed variants used to widen the search."""
    parts = ["recette"]
    parts.extend(i.strip() for i in request.ingredients if i.strip())
    meal = effective_meal_type(request.meal_type, request.filters)
    if meal in MEAL_QUERY_WORDS:
        parts.append(MEAL_QUERY_WORDS[meal])
    if request.budget.strip():
        parts.append("économique pas cher")
    primary = " ".join(parts)
    variants = [f"{primary} {suffix}" for suffix in QUERY_VARIANT_SUFFIXES if suffix not in primary]
    return primary, variants[:max_variants]


def backfill_servings(items: List[CandidateRecipe]) -> List[CandidateRecipe]:
    out = []
    for item in items:
        if item.servings is None:
            servings = parse_servings_from_text(item.text)
            if servings is not None:
                item = item.model_copy(update={"servings": servings})
        out.append(item)
    return out


class DiscoveryPipeline:
    def __init__(
        self,
        cache: DiscoveryCache,
        search: SearchProviderClient,
        estimator: CostEstimator,
        detailed: Optional[DetailedCostCalculator] = None,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.cache = cache
        self.search = search
        self.estimator = estimator
        self.detailed = detailed
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()

    async def _search_batch(self, queries: List[str]) -> List[CandidateRecipe]:
        results = await asyncio.gather(
            *(self.search.search(q, self.settings.variant_search_count) for q in queries),
            return_exceptions=True,
        )
        found: List[CandidateRecipe] = []
        for query, result in zip(queries, results):
            if isinstance(result, Exception):
                logger.warning("Variant search %r failed: %s", query, result)
                continue
            found.extend(result)
        return found

    async def fanout(self, request: DiscoveryRequest, seed: List[CandidateRecipe]) -> List[CandidateRecipe]:
        """
        Search the primary query, then variants in concurrent batches until
        enough unique urls (including ``seed``) are collected. Returns only
        the newly found candidates.
        """
        target = self.settings.fanout_target_unique
        primary, variants = build_queries(request, self.settings.fanout_max_variants)
        found = dedupe_by_url(await self.search.search(primary, self.settings.primary_search_count))
        seen = {item.url for item in seed} | {item.url for item in found}

        batch_size = max(1, self.settings.fanout_batch_size)
        for start in range(0, len(variants), batch_size):
            if len(seen) >= target:
                break
            batch = variants[start : start + batch_size]
            for item in await self._search_batch(batch):
                if item.url not in seen:
                    seen.add(item.url)
                    found.append(item)
        logger.info("Fanout for %r collected %d new candidates (%d unique total)", primary, len(found), len(seen))
        return found

    async def attach_detailed_costs(
        self, items: List[CandidateRecipe], count: int, region_hint: Optional[str] = None
    ) -> List[CandidateRecipe]:
        if not self.detailed or count <= 0:
            return items

        async def _one(item: CandidateRecipe) -> CandidateRecipe:
            try:
                result = await self.detailed.calculate(item.url, region_hint)
            except ValueError as exc:
                logger.info("Skipping detailed cost for %s: %s", item.url, exc)
                return item
            if result.fallback:
                return item
            return item.model_copy(update={"detailed_cost": result.as_detailed_cost()})

        head = items[:count]
        results = await asyncio.gather(*(_one(item) for item in head), return_exceptions=True)
        costed: List[CandidateRecipe] = []
        for item, result in zip(head, results):
            if isinstance(result, Exception):
                logger.warning("Detailed cost for %s failed: %s", item.url, result)
                costed.append(item)
            else:
                costed.append(result)
        return costed + items[count:]

    async def discover(self, request: DiscoveryRequest) -> DiscoveryResult:
        """Raises ValueError for a malformed budget; every other failure degrades softly."""
        budget = parse_budget(request.budget)
        key = normalize_query_key(request.ingredients, request.budget, request.allergies, request.filters)
        lookup = self.cache.lookup(key)

        if lookup.use_cache:
            logger.info("Cache hit for %s (%d items)", key, len(lookup.items))
            candidates = self.cache.sample(lookup.items)
        else:
            seed = lookup.items if lookup.should_enrich else []
            found = await self.fanout(request, seed)
            if found:
                self.cache.write(key, found, merge=lookup.should_enrich)
            candidates = dedupe_by_url(seed + found)

        filtered = apply_filter_funnel(
            candidates,
            allergies=request.allergies,
            filters=request.filters,
            meal_type=request.meal_type,
            excluded_domains=self.settings.excluded_domains,
        )
        annotated = await self.estimator.annotate(backfill_servings(filtered))
        selected = select_by_budget(annotated, budget, self.rng)
        selected = await self.attach_detailed_costs(selected, request.detailed_cost_count, request.region_hint)

        return DiscoveryResult(
            items=selected,
            cached=lookup.use_cache,
            cache_key=key,
            candidate_count=len(filtered),
            budget=budget,
        )
