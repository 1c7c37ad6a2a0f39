"""Ingredient-level cost of a single recipe page."""

import asyncio
import logging
import re
from typing import Optional, Tuple

from budget_recipes.app.services.discovery.constants import (
    COUNT_UNITS,
    COUNTABLE_INGREDIENT_HINTS,
    DEFAULT_ESTIMATED_COST,
    UNIT_CONVERSIONS,
)
from budget_recipes.app.services.discovery.content_extractor import ContentExtractor, ExtractionError
from budget_recipes.app.services.discovery.ingredient_parser import parse_quantity
from budget_recipes.app.services.discovery.models import CostedIngredient, DetailedCostResult, Ingredient
from budget_recipes.app.services.discovery.unit_prices import UnitPriceLookup

logger = logging.getLogger(__name__)

MIN_LINE_PRICE = 0.05
MAX_LINE_MULTIPLIER = 1.5
PLACEHOLDER_LINE_PRICE = 2.00
NO_QUANTITY_SHARE = 0.15
BAD_QUANTITY_SHARE = 0.10

_CONVERSION_KEYS = sorted(UNIT_CONVERSIONS, key=len, reverse=True)


def _singular(unit: str) -> str:
    words = []
    for word in unit.split(" "):
        if len(word) > 2 and word[-1] in "sx" and word not in UNIT_CONVERSIONS:
            word = word[:-1]
        words.append(word)
    return " ".join(words)


def unit_measure(unit: str) -> Optional[Tuple[str, float]]:
    """
    (kind, factor) for a unit: grams for weight, millilitres for volume,
    items for count-like units. None when the unit is unknown.
    """
    u = re.sub(r"\s+", " ", (unit or "").lower()).strip()
    if not u:
        return None
    for candidate in (u, _singular(u)):
        if candidate in UNIT_CONVERSIONS:
            return UNIT_CONVERSIONS[candidate]
        if candidate in COUNT_UNITS:
            return ("item", 1)
    singular = _singular(u)
    for key in _CONVERSION_KEYS:
        if len(key) > 2 and re.search(rf"(?<!\w){re.escape(key)}(?!\w)", singular):
            return UNIT_CONVERSIONS[key]
    if any(re.search(rf"(?<!\w){re.escape(key)}(?!\w)", singular) for key in COUNT_UNITS):
        return ("item", 1)
    return None


def adjust_price_for_unit(base_price: float, quantity: float, unit: str) -> float:
    """
    Share of a reference price used by ``quantity`` ``unit``.

    Reference prices are per kilogram, per litre, or per dozen for
    countable items; unknown units count as a twentieth each.
    """
    measure = unit_measure(unit)
    if measure is None:
        return base_price / 20 * quantity
    kind, factor = measure
    if kind in {"weight", "volume"}:
        return base_price / 1000 * factor * quantity
    if kind == "count":
        return base_price / 12 * factor * quantity
    return base_price / 12 * quantity


def _is_countable(name: str) -> bool:
    lowered = name.lower()
    return any(hint in lowered for hint in COUNTABLE_INGREDIENT_HINTS)


def line_price(base_price: float, ingredient: Ingredient) -> float:
    """Price of one ingredient line, clamped to [0.05, 1.5 x base]."""
    if not ingredient.quantity:
        price = base_price * NO_QUANTITY_SHARE
    else:
        quantity = parse_quantity(ingredient.quantity)
        if quantity is None or quantity <= 0:
            price = base_price * BAD_QUANTITY_SHARE
        else:
            q = float(quantity)
            if ingredient.unit:
                price = adjust_price_for_unit(base_price, q, ingredient.unit)
            elif _is_countable(ingredient.name) and q <= 20:
                price = base_price / 12 * q
            elif q <= 10:
                price = base_price / 10 * q
            else:
                # Large bare numbers are usually grams.
                price = base_price / 1000 * q
    upper = max(base_price * MAX_LINE_MULTIPLIER, MIN_LINE_PRICE)
    return max(MIN_LINE_PRICE, min(price, upper))


def fallback_result(
    url: str,
    error_code: Optional[str] = None,
    message: Optional[str] = None,
    servings: Optional[int] = None,
) -> DetailedCostResult:
    return DetailedCostResult(
        total_cost=DEFAULT_ESTIMATED_COST,
        ingredients=[],
        servings=servings,
        cost_per_serving=round(DEFAULT_ESTIMATED_COST / servings, 2) if servings else None,
        source=url,
        method="fallback",
        fallback=True,
        error_code=error_code,
        error_message=message,
    )


class DetailedCostCalculator:
    def __init__(self, extractor: ContentExtractor, prices: UnitPriceLookup):
        self.extractor = extractor
        self.prices = prices

    async def price_ingredient(self, ingredient: Ingredient, region_hint: Optional[str] = None) -> CostedIngredient:
        try:
            unit_price = await self.prices.lookup(ingredient.name, region_hint)
        except Exception as exc:
            logger.warning("Price lookup failed for %r: %s", ingredient.name, exc)
            unit_price = None
        if unit_price is None:
            return CostedIngredient(
                name=ingredient.name,
                quantity=ingredient.quantity,
                unit=ingredient.unit,
                price=PLACEHOLDER_LINE_PRICE,
                source="fallback",
            )
        return CostedIngredient(
            name=ingredient.name,
            quantity=ingredient.quantity,
            unit=ingredient.unit,
            price=line_price(unit_price.unit_price, ingredient),
            source=unit_price.source_label,
        )

    async def calculate(self, url: str, region_hint: Optional[str] = None) -> DetailedCostResult:
        """
        Detailed cost of the recipe at ``url``.

        Malformed or private urls raise ValueError. Every other failure
        returns the default estimate with ``fallback`` set and, for blocked,
        unreachable or slow sites, an ``error_code``.
        """
        try:
            recipe = await self.extractor.extract(url)
        except ExtractionError as exc:
            logger.warning("Detailed cost for %s fell back (%s): %s", url, exc.error_code, exc.message)
            return fallback_result(url, exc.error_code, exc.message)
        except ValueError:
            raise
        except Exception:
            logger.exception("Extraction of %s failed unexpectedly", url)
            return fallback_result(url, message="The recipe page could not be read.")

        if not recipe.ingredients:
            logger.warning("No ingredients found on %s, using the default estimate", url)
            return fallback_result(url, message="No ingredients found on the page.", servings=recipe.servings)

        costed = await asyncio.gather(*(self.price_ingredient(i, region_hint) for i in recipe.ingredients))
        total = round(sum(line.price for line in costed), 2)
        per_serving = round(total / recipe.servings, 2) if recipe.servings else None
        logger.info("Detailed cost for %s: %.2f over %d ingredients", url, total, len(costed))
        return DetailedCostResult(
            total_cost=total,
            ingredients=list(costed),
            servings=recipe.servings,
            cost_per_serving=per_serving,
            source=url,
        )
