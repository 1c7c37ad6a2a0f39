"""Text completion over an OpenAI-compatible chat completions endpoint."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import httpx

from budget_recipes.app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class TextCompletionProvider(ABC):
    @abstractmethod
    async def complete(
        self, prompt: str, max_tokens: int, temperature: float, system: Optional[str] = None
    ) -> str:  # pragma: no cover - interface
        raise NotImplementedError


class OpenAICompletionProvider(TextCompletionProvider):
    def __init__(self, base_url: str, api_key: str, model_name: str = "gpt-4o-mini", timeout: float = 8.0):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model_name = model_name
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> Optional["OpenAICompletionProvider"]:
        """None when no LLM_API_KEY is configured."""
        settings = settings or get_settings()
        if not settings.llm_enabled:
            return None
        return cls(
            base_url=settings.llm_base_url,
            api_key=settings.llm_api_key,
            model_name=settings.llm_model_name,
            timeout=settings.llm_timeout_seconds,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    async def complete(self, prompt: str, max_tokens: int, temperature: float, system: Optional[str] = None) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        payload = {
            "model": self.model_name,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": False,
        }
        timeout = httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0))
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.post(
                f"{self.base_url}/v1/chat/completions",
                json=payload,
                headers=self._headers(),
            )
        if resp.status_code >= 400:
            raise ValueError(f"LLM API error: {resp.status_code} - {resp.text[:200]}")
        data = resp.json()
        if isinstance(data, dict) and "error" in data:
            raise ValueError(f"LLM API error: {data['error']}")
        content = (data.get("choices") or [{}])[0].get("message", {}).get("content")
        if not content:
            raise ValueError("Empty LLM response")
        return content.strip()
