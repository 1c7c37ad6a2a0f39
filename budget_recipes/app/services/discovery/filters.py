"""Filtering funnel over recipe candidates. Every stage is a pure function."""

import logging
import re
from typing import Iterable, List, Optional, Sequence

from budget_recipes.app.services.discovery.constants import (
    ALLERGY_TERMS,
    COMPILATION_PATTERNS,
    DESSERT_TERMS,
    ENGLISH_RECIPE_VOCABULARY,
    FILTER_VALIDATION_TERMS,
    FRENCH_RECIPE_VOCABULARY,
    LIST_PAGE_PATTERN,
    LISTING_DOMAINS,
    LISTING_URL_PATTERNS,
    MEAL_TYPE_ALIASES,
    OPTIONAL_FILTERS,
    TIP_PAGE_PATTERNS,
)
from budget_recipes.app.services.discovery.models import CandidateRecipe

logger = logging.getLogger(__name__)

_TIP_RES = [re.compile(p, re.I) for p in TIP_PAGE_PATTERNS]
_LIST_RE = re.compile(LIST_PAGE_PATTERN, re.I)
_COMPILATION_RES = [re.compile(p, re.I) for p in COMPILATION_PATTERNS]
_LISTING_URL_RES = [re.compile(p, re.I) for p in LISTING_URL_PATTERNS]
_ENGLISH_RES = [re.compile(p, re.I) for p in ENGLISH_RECIPE_VOCABULARY]
_FRENCH_RES = [re.compile(p, re.I) for p in FRENCH_RECIPE_VOCABULARY]


def _text(item: CandidateRecipe) -> str:
    return item.text.lower()


def _contains_word(text: str, term: str) -> bool:
    return re.search(rf"(?<!\w){re.escape(term.lower())}(?!\w)", text) is not None


def filter_by_domain(items: Iterable[CandidateRecipe], excluded_domains: Sequence[str]) -> List[CandidateRecipe]:
    blocked = [d.lower() for d in excluded_domains if d]
    kept = []
    for item in items:
        haystack = f"{item.url} {item.source_domain or ''}".lower()
        if any(domain in haystack for domain in blocked):
            continue
        kept.append(item)
    return kept


def is_list_page(item: CandidateRecipe) -> bool:
    """Tip pages, "12 recettes de..." roundups and listing urls are not single recipes."""
    if not item.title and not item.snippet:
        return False
    text = _text(item)
    if any(p.search(text) for p in _TIP_RES):
        return True
    if _LIST_RE.search(text):
        return True
    if any(p.search(text) for p in _COMPILATION_RES):
        return True
    url = item.url.lower()
    if any(domain in url for domain in LISTING_DOMAINS):
        if any(p.search(url) for p in _LISTING_URL_RES):
            return True
    return False


def filter_list_pages(items: Iterable[CandidateRecipe]) -> List[CandidateRecipe]:
    return [item for item in items if not is_list_page(item)]


def filter_by_allergies(items: Iterable[CandidateRecipe], allergies: Sequence[str]) -> List[CandidateRecipe]:
    terms = []
    for allergy in allergies:
        key = allergy.strip().lower()
        terms.extend(ALLERGY_TERMS.get(key, [key] if key else []))
    if not terms:
        return list(items)
    kept = []
    for item in items:
        text = _text(item)
        if any(_contains_word(text, term) for term in terms):
            continue
        kept.append(item)
    return kept


def effective_meal_type(meal_type: Optional[str], filters: Sequence[str] = ()) -> Optional[str]:
    """
    Canonical meal type from the explicit parameter, else from filter tokens.

    Québec usage: "souper" is the evening meal (dinner) and "dîner" is lunch.
    """
    if meal_type:
        return MEAL_TYPE_ALIASES.get(meal_type.strip().lower(), meal_type.strip().lower())
    for token in filters:
        mapped = MEAL_TYPE_ALIASES.get(token.strip().lower())
        if mapped:
            return mapped
    return None


def filter_desserts_for_dinner(
    items: Iterable[CandidateRecipe], meal_type: Optional[str], filters: Sequence[str] = ()
) -> List[CandidateRecipe]:
    if meal_type != "dinner" or "dessert" in {f.strip().lower() for f in filters}:
        return list(items)
    kept = []
    for item in items:
        text = _text(item)
        if any(_contains_word(text, term) for term in DESSERT_TERMS):
            continue
        kept.append(item)
    return kept


def filter_by_validation_terms(items: Iterable[CandidateRecipe], filters: Sequence[str]) -> List[CandidateRecipe]:
    """
    Keep candidates whose text mentions every strict filter.

    Optional tags (rapide, facile, ...) describe rather than constrain, so they
    never exclude anything; unknown tags have no terms and also pass.
    """
    strict = [f.strip().lower() for f in filters if f and f.strip().lower() not in OPTIONAL_FILTERS]
    checks = [FILTER_VALIDATION_TERMS[f] for f in strict if FILTER_VALIDATION_TERMS.get(f)]
    if not checks:
        return list(items)
    kept = []
    for item in items:
        text = _text(item)
        if all(any(term.lower() in text for term in terms) for terms in checks):
            kept.append(item)
    return kept


def is_english_only(item: CandidateRecipe) -> bool:
    # Neither vocabulary present means we cannot tell; such items are kept.
    text = _text(item)
    english = any(p.search(text) for p in _ENGLISH_RES)
    french = any(p.search(text) for p in _FRENCH_RES)
    return english and not french


def filter_by_language(items: Iterable[CandidateRecipe]) -> List[CandidateRecipe]:
    return [item for item in items if not is_english_only(item)]


def apply_filter_funnel(
    items: Iterable[CandidateRecipe],
    *,
    allergies: Sequence[str] = (),
    filters: Sequence[str] = (),
    meal_type: Optional[str] = None,
    excluded_domains: Sequence[str] = (),
) -> List[CandidateRecipe]:
    """Run every stage in order. Running it again on its own output changes nothing."""
    items = list(items)
    start = len(items)
    items = filter_by_domain(items, excluded_domains)
    items = filter_list_pages(items)
    items = filter_by_allergies(items, allergies)
    items = filter_desserts_for_dinner(items, effective_meal_type(meal_type, filters), filters)
    items = filter_by_validation_terms(items, filters)
    items = filter_by_language(items)
    logger.info("Filtering funnel kept %d of %d candidates", len(items), start)
    return items
