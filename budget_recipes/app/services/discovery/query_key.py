"""Canonical cache keys for discovery requests."""

from typing import Iterable, List, Optional


def _normalize_tokens(tokens: Optional[Iterable[str]]) -> List[str]:
    cleaned = {token.strip().lower() for token in tokens or [] if token and token.strip()}
    return sorted(cleaned)


def split_csv(raw: Optional[str]) -> List[str]:
    """Split a comma-separated query parameter into trimmed, non-empty tokens."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def normalize_query_key(
    ingredients: Optional[Iterable[str]],
    budget: Optional[str],
    allergies: Optional[Iterable[str]],
    filters: Optional[Iterable[str]],
) -> str:
    """
    Build the cache key for a discovery request.

    Set-equal inputs produce the same key whatever their order or case:
    ``ingredients:<a,b>-budget:<raw>-allergies:<..>-filters:<..>``.
    """
    return "-".join(
        [
            "ingredients:" + ",".join(_normalize_tokens(ingredients)),
            "budget:" + (budget or "").strip(),
            "allergies:" + ",".join(_normalize_tokens(allergies)),
            "filters:" + ",".join(_normalize_tokens(filters)),
        ]
    )
