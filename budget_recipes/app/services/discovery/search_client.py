"""Web search for recipe candidates."""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional
from urllib.parse import urlparse

import httpx

from budget_recipes.app.core.config import Settings, get_settings
from budget_recipes.app.services.discovery.ingredient_parser import clean_text, parse_servings_from_text
from budget_recipes.app.services.discovery.models import CandidateRecipe, dedupe_by_url

logger = logging.getLogger(__name__)

PAGE_SIZE = 10


class SearchProviderClient(ABC):
    """
    Text query -> recipe candidates.

    A provider call returns at most ``PAGE_SIZE`` hits. ``search`` asks for a
    second page only when more were requested and the first page came back
    full. Failures are logged and yield an empty list; ``search`` never raises.
    """

    @abstractmethod
    async def _fetch_page(self, query: str, num: int, start: int) -> List[CandidateRecipe]:  # pragma: no cover - interface
        raise NotImplementedError

    async def _safe_fetch(self, query: str, num: int, start: int) -> List[CandidateRecipe]:
        try:
            return await self._fetch_page(query, num, start)
        except httpx.TimeoutException:
            logger.warning("Search timed out for %r (start=%s)", query, start)
        except httpx.HTTPStatusError as exc:
            logger.warning("Search returned %s for %r (start=%s)", exc.response.status_code, query, start)
        except Exception as exc:
            logger.warning("Search failed for %r (start=%s): %s", query, start, exc)
        return []

    async def search(self, query: str, count: int = PAGE_SIZE) -> List[CandidateRecipe]:
        first = await self._safe_fetch(query, min(count, PAGE_SIZE), 1)
        if count <= PAGE_SIZE or len(first) < PAGE_SIZE:
            return first
        second = await self._safe_fetch(query, min(count - PAGE_SIZE, PAGE_SIZE), PAGE_SIZE + 1)
        return dedupe_by_url(first + second)


def hit_to_candidate(item: dict) -> Optional[CandidateRecipe]:
    """Map a Custom Search result item; items without a link are dropped."""
    url = item.get("link")
    if not url:
        return None
    title = clean_text(item.get("title") or "")
    snippet = clean_text(item.get("snippet") or "")
    pagemap = item.get("pagemap") or {}
    image_url = None
    for key in ("cse_image", "cse_thumbnail"):
        images = pagemap.get(key) or []
        if images and isinstance(images[0], dict) and images[0].get("src"):
            image_url = images[0]["src"]
            break
    return CandidateRecipe(
        title=title,
        url=url,
        snippet=snippet,
        source_domain=item.get("displayLink") or urlparse(url).netloc or None,
        image_url=image_url,
        servings=parse_servings_from_text(f"{title} {snippet}"),
    )


class GoogleCustomSearchClient(SearchProviderClient):
    def __init__(
        self,
        api_key: Optional[str],
        engine_id: Optional[str],
        base_url: str = "https://customsearch.googleapis.com/customsearch/v1",
        timeout: float = 8.0,
    ):
        self.api_key = api_key
        self.engine_id = engine_id
        self.base_url = base_url
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "GoogleCustomSearchClient":
        settings = settings or get_settings()
        return cls(
            api_key=settings.search_api_key,
            engine_id=settings.search_engine_id,
            base_url=settings.search_base_url,
            timeout=settings.search_timeout_seconds,
        )

    async def _fetch_page(self, query: str, num: int, start: int) -> List[CandidateRecipe]:
        if not self.api_key or not self.engine_id:
            logger.error("SEARCH_API_KEY and SEARCH_ENGINE_ID must be set to search")
            return []
        params = {
            "key": self.api_key,
            "cx": self.engine_id,
            "q": query,
            "num": num,
            "start": start,
            "lr": "lang_fr",
            "hl": "fr",
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(self.base_url, params=params)
            resp.raise_for_status()
            data = resp.json()
        items = data.get("items") or []
        candidates = [c for c in (hit_to_candidate(item) for item in items) if c is not None]
        logger.info("Search %r (start=%s) returned %d hits", query, start, len(candidates))
        return candidates
