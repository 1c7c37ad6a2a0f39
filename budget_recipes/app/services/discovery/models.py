"""Pydantic models for recipe discovery and costing."""

from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CostSource(str, Enum):
    LLM = "llm"
    RULE = "rule"
    FALLBACK = "fallback"


class CacheStatus(str, Enum):
    HIT = "hit"
    INSUFFICIENT = "insufficient"
    MISS = "miss"


class Ingredient(BaseModel):
    """A parsed ingredient line. Quantity is kept as the raw token (e.g. "1/2")."""

    model_config = ConfigDict(frozen=True)

    name: str
    quantity: Optional[str] = None
    unit: Optional[str] = None


class CostedIngredient(BaseModel):
    name: str
    quantity: Optional[str] = None
    unit: Optional[str] = None
    price: float
    source: str


class DetailedCost(BaseModel):
    total_cost: float
    ingredients: List[CostedIngredient] = Field(default_factory=list)


class CandidateRecipe(BaseModel):
    """A recipe search hit. `url` is the identity key within a result set."""

    title: str
    url: str
    snippet: str = ""
    source_domain: Optional[str] = None
    image_url: Optional[str] = None
    servings: Optional[int] = Field(None, gt=0, le=50)
    estimated_cost: Optional[float] = Field(None, ge=0)
    cost_source: Optional[CostSource] = None
    detailed_cost: Optional[DetailedCost] = None

    @property
    def text(self) -> str:
        return f"{self.title} {self.snippet}"


# Per-request cost data; never written to the cache.
VOLATILE_FIELDS = {"estimated_cost", "cost_source", "detailed_cost"}


def dedupe_by_url(items: Iterable[CandidateRecipe]) -> List[CandidateRecipe]:
    """Keep the first candidate seen for each url, preserving order."""
    seen = set()
    unique = []
    for item in items:
        if item.url in seen:
            continue
        seen.add(item.url)
        unique.append(item)
    return unique


class CacheEntry(BaseModel):
    key: str
    items: List[CandidateRecipe] = Field(default_factory=list)
    updated_at: datetime


class CacheLookup(BaseModel):
    status: CacheStatus
    items: List[CandidateRecipe] = Field(default_factory=list)

    @property
    def use_cache(self) -> bool:
        return self.status == CacheStatus.HIT

    @property
    def should_enrich(self) -> bool:
        return self.status == CacheStatus.INSUFFICIENT


class CostEstimate(BaseModel):
    estimated_cost: float
    source: CostSource


class UnitPrice(BaseModel):
    unit_price: float
    source_label: str


class ExtractedRecipe(BaseModel):
    """Ingredient-level extraction of a single recipe page."""

    ingredients: List[Ingredient] = Field(default_factory=list)
    servings: Optional[int] = None
    source: str


class DetailedCostResult(BaseModel):
    total_cost: float
    ingredients: List[CostedIngredient] = Field(default_factory=list)
    servings: Optional[int] = None
    cost_per_serving: Optional[float] = None
    source: str
    method: str = "detailed_parsing"
    fallback: bool = False
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def as_detailed_cost(self) -> DetailedCost:
        return DetailedCost(total_cost=self.total_cost, ingredients=self.ingredients)


class DiscoveryRequest(BaseModel):
    ingredients: List[str] = Field(default_factory=list)
    budget: str = ""
    allergies: List[str] = Field(default_factory=list)
    filters: List[str] = Field(default_factory=list)
    meal_type: Optional[str] = None
    region_hint: Optional[str] = None
    detailed_cost_count: int = Field(0, ge=0, le=15)


class DiscoveryResult(BaseModel):
    items: List[CandidateRecipe] = Field(default_factory=list)
    cached: bool = False
    cache_key: str
    candidate_count: int = 0
    budget: Optional[float] = None
