"""Fetch a single recipe page and pull out its ingredients and servings."""

import logging
import re
from typing import List, Optional
from urllib.robotparser import RobotFileParser

from bs4 import BeautifulSoup

from budget_recipes.app.services.discovery.extractors import DEFAULT_STRATEGIES, ExtractionStrategy
from budget_recipes.app.services.discovery.fetcher import FetchError, PageFetcher, origin_of, validate_public_url
from budget_recipes.app.services.discovery.ingredient_parser import parse_servings_from_text
from budget_recipes.app.services.discovery.models import ExtractedRecipe

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """Caller-facing extraction failure; ``error_code`` is robots_blocked, access_denied or timeout."""

    def __init__(self, error_code: str, message: str):
        super().__init__(message)
        self.error_code = error_code
        self.message = message


def robots_allows_site(robots_txt: Optional[str], origin: str) -> bool:
    """False when robots.txt keeps every crawler (``User-agent: *``) off the site root."""
    if not robots_txt:
        return True
    parser = RobotFileParser()
    parser.set_url(f"{origin}/robots.txt")
    parser.parse(robots_txt.splitlines())
    return parser.can_fetch("*", f"{origin}/")


def visible_text(soup: BeautifulSoup) -> str:
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return re.sub(r"\s+", " ", soup.get_text(" ")).strip()


class ContentExtractor:
    def __init__(self, fetcher: PageFetcher, strategies: Optional[List[ExtractionStrategy]] = None):
        self.fetcher = fetcher
        self.strategies = strategies or DEFAULT_STRATEGIES

    async def _robots_allows(self, url: str) -> bool:
        origin = origin_of(url)
        try:
            robots_txt = await self.fetcher.fetch_robots(origin)
        except Exception as exc:
            logger.info("robots.txt check failed for %s, assuming allowed: %s", origin, exc)
            return True
        return robots_allows_site(robots_txt, origin)

    async def extract(self, url: str) -> ExtractedRecipe:
        """
        Raises ValueError for malformed or private urls and ExtractionError
        when the site blocks crawling or the page cannot be fetched.
        """
        validate_public_url(url)
        if not await self._robots_allows(url):
            raise ExtractionError("robots_blocked", "Site disallows automated access.")

        try:
            html = await self.fetcher.fetch_page(url)
        except FetchError as exc:
            logger.warning("Fetching %s failed (%s): %s", url, exc.kind, exc)
            if exc.kind == "timeout":
                raise ExtractionError("timeout", "Timed out fetching the recipe page.") from exc
            raise ExtractionError("access_denied", "Recipe page could not be accessed.") from exc

        soup = BeautifulSoup(html, "lxml")
        result: Optional[ExtractedRecipe] = None
        for strategy in self.strategies:
            result = strategy.extract(soup, url)
            if result is not None:
                break
        if result is None:
            logger.info("No ingredients extracted from %s", url)
            result = ExtractedRecipe(ingredients=[], source=url)
        if result.servings is None:
            result = result.model_copy(update={"servings": parse_servings_from_text(visible_text(soup))})
        return result
