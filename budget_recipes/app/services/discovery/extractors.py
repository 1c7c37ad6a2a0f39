"""Ingredient extraction strategies, tried in order until one yields ingredients."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Iterator, List, Optional

from bs4 import BeautifulSoup

from budget_recipes.app.services.discovery.ingredient_parser import clean_text, parse_ingredients, parse_servings
from budget_recipes.app.services.discovery.models import ExtractedRecipe, Ingredient

logger = logging.getLogger(__name__)


class ExtractionStrategy(ABC):
    name = "base"

    @abstractmethod
    def extract(self, soup: BeautifulSoup, url: str) -> Optional[ExtractedRecipe]:  # pragma: no cover - interface
        raise NotImplementedError


def _is_recipe(obj: dict) -> bool:
    obj_type = obj.get("@type")
    if not obj_type:
        return False
    types = [obj_type] if isinstance(obj_type, str) else obj_type
    return any(str(t).lower() == "recipe" for t in types)


def _json_ld_objects(soup: BeautifulSoup) -> Iterator[dict]:
    scripts = soup.find_all("script", attrs={"type": "application/ld+json"})
    for idx, script in enumerate(scripts):
        raw_json = script.string or script.get_text()
        if not raw_json:
            continue
        try:
            data = json.loads(raw_json)
        except json.JSONDecodeError as exc:
            logger.warning("JSON-LD block %d failed to parse: %s", idx, exc)
            continue

        candidates = []
        if isinstance(data, dict) and "@graph" in data:
            graph = data.get("@graph") or []
            if isinstance(graph, list):
                candidates.extend(graph)
        if isinstance(data, list):
            candidates.extend(data)
        elif isinstance(data, dict):
            candidates.append(data)
        for obj in candidates:
            if isinstance(obj, dict):
                yield obj


def _ingredient_lines(raw) -> List[str]:
    """Ingredient text lines from a JSON-LD value of any shape."""
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, (list, tuple)):
        return [line for line in raw if isinstance(line, str)]
    return []


class SchemaOrgIngredientStrategy(ExtractionStrategy):
    """schema.org Recipe objects embedded as JSON-LD."""

    name = "schema_org"

    def extract(self, soup: BeautifulSoup, url: str) -> Optional[ExtractedRecipe]:
        for obj in _json_ld_objects(soup):
            if not _is_recipe(obj):
                continue
            raw = obj.get("recipeIngredient") or obj.get("ingredients")
            ingredients = parse_ingredients(_ingredient_lines(raw))
            if not ingredients:
                logger.debug("Recipe JSON-LD on %s has no usable ingredients", url)
                continue
            servings = parse_servings(obj.get("recipeYield") or obj.get("yield"))
            logger.info("schema.org extraction found %d ingredients on %s", len(ingredients), url)
            return ExtractedRecipe(ingredients=ingredients, servings=servings, source=url)
        return None


MARKUP_SELECTORS = [
    "li[class*=ingredient]",
    'li[itemprop="recipeIngredient"]',
    'span[itemprop="recipeIngredient"]',
]


class MarkupPatternStrategy(ExtractionStrategy):
    """Common ingredient list markup; the first selector with matches wins."""

    name = "markup"

    def __init__(self, selectors: Optional[List[str]] = None):
        self.selectors = selectors or MARKUP_SELECTORS

    def extract(self, soup: BeautifulSoup, url: str) -> Optional[ExtractedRecipe]:
        for selector in self.selectors:
            texts = [clean_text(el.get_text(" ")) for el in soup.select(selector)]
            ingredients = _dedupe_by_name(parse_ingredients([t for t in texts if len(t) > 2]))
            if ingredients:
                logger.info("Markup extraction (%s) found %d ingredients on %s", selector, len(ingredients), url)
                return ExtractedRecipe(ingredients=ingredients, source=url)
        return None


def _dedupe_by_name(items: List[Ingredient]) -> List[Ingredient]:
    seen = set()
    out = []
    for item in items:
        key = item.name.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(item)
    return out


DEFAULT_STRATEGIES: List[ExtractionStrategy] = [SchemaOrgIngredientStrategy(), MarkupPatternStrategy()]
