"""Page and robots.txt fetching, plus URL validation."""

import ipaddress
import logging
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import urlparse

import httpx

from budget_recipes.app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """A page could not be fetched. ``kind`` is one of timeout, http, network."""

    def __init__(self, kind: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


def is_private_host(host: str) -> bool:
    """True for private, loopback and link-local addresses and localhost names."""
    hostname = host.split(":")[0]
    try:
        ip = ipaddress.ip_address(hostname)
        return ip.is_private or ip.is_loopback or ip.is_link_local
    except ValueError:
        return hostname.lower() in {"localhost"} or hostname.lower().endswith(".localhost")


def validate_public_url(url: str) -> str:
    """Return the url unchanged, or raise ValueError if it is malformed or points at a private host."""
    parsed = urlparse(url or "")
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("Invalid URL")
    if is_private_host(parsed.hostname or ""):
        raise ValueError("URL points to a private or disallowed host")
    return url


def origin_of(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


class PageFetcher(ABC):
    @abstractmethod
    async def fetch_page(self, url: str) -> str:  # pragma: no cover - interface
        """Raw markup, or FetchError."""
        raise NotImplementedError

    @abstractmethod
    async def fetch_robots(self, origin: str) -> Optional[str]:  # pragma: no cover - interface
        """robots.txt text, or None when unavailable."""
        raise NotImplementedError


class HttpxPageFetcher(PageFetcher):
    def __init__(self, user_agent: str, timeout: float = 8.0):
        self.user_agent = user_agent
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "HttpxPageFetcher":
        settings = settings or get_settings()
        return cls(user_agent=settings.scraper_user_agent, timeout=settings.fetch_timeout_seconds)

    def _headers(self, accept: str) -> dict:
        return {
            "User-Agent": self.user_agent,
            "Accept": accept,
            "Accept-Language": "fr-CA,fr;q=0.9,en;q=0.8",
        }

    async def fetch_page(self, url: str) -> str:
        validate_public_url(url)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                resp = await client.get(
                    url, headers=self._headers("text/html,application/xhtml+xml;q=0.9,*/*;q=0.8")
                )
        except httpx.TimeoutException as exc:
            raise FetchError("timeout", f"Timed out fetching {url}") from exc
        except httpx.HTTPError as exc:
            raise FetchError("network", f"Network error: {exc}") from exc
        if resp.status_code >= 300:
            raise FetchError("http", f"Site returned status {resp.status_code}.", status_code=resp.status_code)
        return resp.text

    async def fetch_robots(self, origin: str) -> Optional[str]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                resp = await client.get(f"{origin}/robots.txt", headers=self._headers("text/plain"))
        except httpx.HTTPError as exc:
            logger.info("robots.txt unavailable for %s: %s", origin, exc)
            return None
        if resp.status_code != 200:
            return None
        return resp.text
