"""Budget-constrained selection of 10 to 15 candidates."""

import logging
import math
import random
from typing import List, Optional, Sequence

from budget_recipes.app.services.discovery.models import CandidateRecipe

logger = logging.getLogger(__name__)

MIN_RESULTS = 10
MAX_RESULTS = 15
RELAXED_MULTIPLIER = 1.5


def parse_budget(raw: Optional[str]) -> Optional[float]:
    """Empty means no ceiling; anything else must be a positive number."""
    if raw is None or not str(raw).strip():
        return None
    try:
        value = float(str(raw).strip().replace(",", "."))
    except ValueError as exc:
        raise ValueError(f"Invalid budget: {raw!r}") from exc
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"Invalid budget: {raw!r}")
    return value


def _within(item: CandidateRecipe, ceiling: float) -> bool:
    # Unknown cost never disqualifies a candidate.
    return item.estimated_cost is None or item.estimated_cost <= ceiling


def _cost_key(item: CandidateRecipe):
    return (item.estimated_cost is None, item.estimated_cost or 0.0)


def _take(items: List[CandidateRecipe], rng: random.Random) -> List[CandidateRecipe]:
    # Shuffle the whole eligible set so membership varies, not only order.
    if len(items) < MIN_RESULTS:
        return list(items)
    return rng.sample(items, min(MAX_RESULTS, len(items)))


def select_by_budget(
    items: Sequence[CandidateRecipe],
    budget: Optional[float],
    rng: Optional[random.Random] = None,
) -> List[CandidateRecipe]:
    """
    Pick the candidates to show for a budget.

    Without a ceiling the candidates are shuffled. With one, only candidates
    within budget are eligible; when fewer than ten fit, the ceiling is relaxed
    by half. At least ten eligible items give a random sample of 10 to 15 drawn
    from all of them; fewer come back whole, cheapest and strict-budget first.
    """
    rng = rng or random.Random()
    items = list(items)
    if budget is None:
        shuffled = list(items)
        rng.shuffle(shuffled)
        return shuffled[:MAX_RESULTS]

    strict = sorted((i for i in items if _within(i, budget)), key=_cost_key)
    if len(strict) >= MIN_RESULTS:
        return _take(strict, rng)

    relaxed_ceiling = budget * RELAXED_MULTIPLIER
    relaxed = sorted(
        (i for i in items if _within(i, relaxed_ceiling)),
        key=lambda i: (not _within(i, budget), _cost_key(i)),
    )
    logger.info(
        "Only %d candidates within %.2f; relaxed to %.2f gives %d",
        len(strict),
        budget,
        relaxed_ceiling,
        len(relaxed),
    )
    return _take(relaxed, rng)
