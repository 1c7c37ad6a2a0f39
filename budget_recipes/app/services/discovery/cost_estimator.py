"""Quick recipe cost estimates from a title and snippet."""

import asyncio
import logging
import re
from typing import Iterable, List, Optional

from budget_recipes.app.services.discovery.constants import (
    BUDGET_MULTIPLIER,
    BUDGET_TERMS,
    COST_CATEGORIES,
    DEFAULT_BASE_COST,
    DEFAULT_ESTIMATED_COST,
    GOURMET_MULTIPLIER,
    GOURMET_TERMS,
    MAX_LLM_COST,
    MAX_RULE_COST,
    MIN_RULE_COST,
    PREMIUM_INGREDIENTS,
    PREMIUM_MULTIPLIER,
    PREMIUM_THRESHOLD,
    QUICK_MULTIPLIER,
    QUICK_TERMS,
)
from budget_recipes.app.services.discovery.llm_client import TextCompletionProvider
from budget_recipes.app.services.discovery.models import CandidateRecipe, CostEstimate, CostSource

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "Tu es un assistant qui estime le coût de recettes au Québec. "
    "Tu réponds uniquement avec un nombre décimal."
)

PROMPT_TEMPLATE = """Tu es un expert en estimation de coûts de recettes au Québec.

Estime le coût approximatif total (en dollars CAD) pour préparer cette recette au Québec, en te basant uniquement sur le titre et la description.

Titre: {title}
Description: {snippet}

Considérations:
- Prix moyens au Québec (épiceries comme IGA, Metro, Provigo, Maxi)
- Pour 4 personnes (portion standard)
- Inclus tous les ingrédients nécessaires
- Sois réaliste : une recette simple avec pâtes et légumes = 5-8$, un steak = 12-18$, du saumon = 15-25$

Réponds UNIQUEMENT avec un nombre décimal (ex: 12.50), sans texte, sans explication, juste le prix."""

LLM_TEMPERATURE = 0.3
LLM_MAX_TOKENS = 10


def classify_base_cost(text: str) -> float:
    """Base price of the first (cheapest) category with a matching keyword."""
    for _name, keywords, base in COST_CATEGORIES:
        if any(keyword in text for keyword in keywords):
            return base
    return DEFAULT_BASE_COST


def estimate_with_rules(title: str, snippet: str = "") -> float:
    text = f"{title} {snippet}".lower()
    base = classify_base_cost(text)

    multiplier = 1.0
    if any(term in text for term in BUDGET_TERMS):
        multiplier = BUDGET_MULTIPLIER
    # Gourmet wins over budget.
    if any(term in text for term in GOURMET_TERMS):
        multiplier = GOURMET_MULTIPLIER
    if any(term in text for term in QUICK_TERMS):
        multiplier *= QUICK_MULTIPLIER
    if sum(1 for keyword in PREMIUM_INGREDIENTS if keyword in text) >= PREMIUM_THRESHOLD:
        multiplier *= PREMIUM_MULTIPLIER

    return max(MIN_RULE_COST, min(MAX_RULE_COST, round(base * multiplier, 2)))


def parse_llm_cost(content: str) -> float:
    """First decimal number in a completion; ValueError when missing or not positive."""
    match = re.search(r"\d+(?:[.,]\d+)?", content or "")
    if not match:
        raise ValueError(f"No number in LLM response: {content!r}")
    cost = float(match.group().replace(",", "."))
    if cost <= 0:
        raise ValueError(f"Invalid LLM cost: {cost}")
    return min(cost, MAX_LLM_COST)


class CostEstimator:
    """LLM estimate when a provider is configured, rule-based otherwise or on any LLM failure."""

    def __init__(self, llm: Optional[TextCompletionProvider] = None):
        self.llm = llm

    async def _estimate_with_llm(self, title: str, snippet: str) -> float:
        prompt = PROMPT_TEMPLATE.format(title=title, snippet=snippet or "Aucune description")
        content = await self.llm.complete(
            prompt, max_tokens=LLM_MAX_TOKENS, temperature=LLM_TEMPERATURE, system=SYSTEM_PROMPT
        )
        return parse_llm_cost(content)

    async def estimate(self, title: str, snippet: str = "") -> CostEstimate:
        if not title:
            return CostEstimate(estimated_cost=DEFAULT_ESTIMATED_COST, source=CostSource.FALLBACK)
        if self.llm is not None:
            try:
                cost = await self._estimate_with_llm(title, snippet)
                return CostEstimate(estimated_cost=cost, source=CostSource.LLM)
            except Exception as exc:
                logger.warning("LLM cost estimate failed for %r, using rules: %s", title, exc)
        return CostEstimate(estimated_cost=estimate_with_rules(title, snippet), source=CostSource.RULE)

    async def _annotate_one(self, item: CandidateRecipe) -> CandidateRecipe:
        try:
            estimate = await self.estimate(item.title, item.snippet)
        except Exception:
            logger.exception("Cost estimate failed for %s", item.url)
            estimate = CostEstimate(estimated_cost=DEFAULT_ESTIMATED_COST, source=CostSource.FALLBACK)
        return item.model_copy(update={"estimated_cost": estimate.estimated_cost, "cost_source": estimate.source})

    async def annotate(self, items: Iterable[CandidateRecipe]) -> List[CandidateRecipe]:
        """Attach an estimate to every candidate, concurrently."""
        return list(await asyncio.gather(*(self._annotate_one(item) for item in items)))
