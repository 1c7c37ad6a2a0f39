from datetime import datetime, timezone
from typing import Dict, List, Optional

from budget_recipes.app.services.discovery.fetcher import FetchError, PageFetcher
from budget_recipes.app.services.discovery.llm_client import TextCompletionProvider
from budget_recipes.app.services.discovery.models import CandidateRecipe
from budget_recipes.app.services.discovery.search_client import SearchProviderClient


class FakeClock:
    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta) -> None:
        self.now = self.now + delta


class FakeSearchClient(SearchProviderClient):
    """Serves canned hits per query; unknown queries return nothing."""

    def __init__(self, pages: Optional[Dict[str, List[CandidateRecipe]]] = None, default=None):
        self.pages = pages or {}
        self.default = default
        self.calls: List[tuple] = []

    async def _fetch_page(self, query: str, num: int, start: int) -> List[CandidateRecipe]:
        self.calls.append((query, num, start))
        if query in self.pages:
            hits = self.pages[query]
        elif self.default is not None:
            hits = self.default(query)
        else:
            hits = []
        return hits[start - 1 : start - 1 + num]

    @property
    def queries(self) -> List[str]:
        return [call[0] for call in self.calls]


class FakeFetcher(PageFetcher):
    def __init__(
        self,
        pages: Optional[Dict[str, str]] = None,
        robots: Optional[str] = None,
        error: Optional[FetchError] = None,
    ):
        self.pages = pages or {}
        self.robots = robots
        self.error = error
        self.fetched: List[str] = []

    async def fetch_page(self, url: str) -> str:
        self.fetched.append(url)
        if self.error:
            raise self.error
        if url not in self.pages:
            raise FetchError("http", "Site returned status 404.", status_code=404)
        return self.pages[url]

    async def fetch_robots(self, origin: str) -> Optional[str]:
        return self.robots


class FakeLLM(TextCompletionProvider):
    def __init__(self, reply: str = "12.50", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.prompts: List[str] = []

    async def complete(self, prompt, max_tokens, temperature, system=None) -> str:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.reply


def make_candidate(idx: int, title: Optional[str] = None, snippet: str = "", **kwargs) -> CandidateRecipe:
    return CandidateRecipe(
        title=title or f"Recette de poulet {idx}",
        url=kwargs.pop("url", f"https://recettes.example.com/recette-{idx}"),
        snippet=snippet or "Une recette maison savoureuse",
        source_domain=kwargs.pop("source_domain", "recettes.example.com"),
        **kwargs,
    )
