import logging
from functools import lru_cache
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_EXCLUDED_DOMAINS = [
    "pinterest.",
    "facebook.com",
    "instagram.com",
    "tiktok.com",
    "youtube.com",
    "reddit.com",
    "amazon.",
    "quora.com",
]


class Settings(BaseSettings):
    database_url: str = Field("sqlite:///./budget_recipes.db", alias="DATABASE_URL")
    cache_backend: str = Field("memory", alias="CACHE_BACKEND")
    redis_host: str = Field("localhost", alias="REDIS_HOST")
    redis_port: int = Field(6379, alias="REDIS_PORT")
    redis_key_prefix: str = Field("budget_recipes:search:", alias="REDIS_KEY_PREFIX")
    cache_ttl_hours: int = Field(24, alias="CACHE_TTL_HOURS")
    cache_min_items: int = Field(20, alias="CACHE_MIN_ITEMS")
    cache_max_items: int = Field(200, alias="CACHE_MAX_ITEMS")

    search_api_key: str | None = Field(None, alias="SEARCH_API_KEY")
    search_engine_id: str | None = Field(None, alias="SEARCH_ENGINE_ID")
    search_base_url: str = Field(
        "https://customsearch.googleapis.com/customsearch/v1", alias="SEARCH_BASE_URL"
    )
    search_timeout_seconds: float = Field(8.0, alias="SEARCH_TIMEOUT_SECONDS")

    fetch_timeout_seconds: float = Field(8.0, alias="FETCH_TIMEOUT_SECONDS")
    scraper_user_agent: str = Field(
        "BudgetRecipes/1.0 (Recipe Cost Calculator)",
        alias="SCRAPER_USER_AGENT",
    )

    llm_base_url: str = Field("https://api.openai.com", alias="LLM_BASE_URL")
    llm_api_key: str | None = Field(None, alias="LLM_API_KEY")
    llm_model_name: str = Field("gpt-4o-mini", alias="LLM_MODEL_NAME")
    llm_timeout_seconds: float = Field(8.0, alias="LLM_TIMEOUT_SECONDS")

    excluded_domains: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_DOMAINS), alias="EXCLUDED_DOMAINS"
    )
    fanout_target_unique: int = Field(30, alias="FANOUT_TARGET_UNIQUE")
    fanout_max_variants: int = Field(8, alias="FANOUT_MAX_VARIANTS")
    fanout_batch_size: int = Field(4, alias="FANOUT_BATCH_SIZE")
    primary_search_count: int = Field(20, alias="PRIMARY_SEARCH_COUNT")
    variant_search_count: int = Field(10, alias="VARIANT_SEARCH_COUNT")

    rate_limit_max_requests: int = Field(30, alias="RATE_LIMIT_MAX_REQUESTS")
    rate_limit_window_seconds: int = Field(60, alias="RATE_LIMIT_WINDOW_SECONDS")

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    @field_validator("excluded_domains", mode="before")
    @classmethod
    def _split_domains(cls, value):
        # EXCLUDED_DOMAINS=foo.com,bar.com
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @property
    def llm_enabled(self) -> bool:
        return bool(self.llm_api_key)


logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    try:
        settings = Settings()
    except PermissionError:
        logger.warning("Unable to read .env; continuing with environment variables only")
        settings = Settings(_env_file=None)
    return settings
