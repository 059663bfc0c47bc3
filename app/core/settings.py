from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_terms(raw: str) -> list[str]:
    return [term.strip() for term in raw.split(",")]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Movie Search API"
    environment: Literal["dev", "test", "prod"] = "dev"
    log_level: str = "INFO"

    omdb_api_key: str = "demo"
    omdb_base_url: str = "http://www.omdbapi.com"
    omdb_timeout_seconds: float = 10.0

    # comma separated, same format as the old frontend env vars
    quality_search_terms: str = "popular,acclaimed,award,winning,hit,successful,top,best,famous,great"
    base_search_terms: str = "movie,film,cinema,entertainment"

    max_search_terms: int = Field(default=10, ge=1, le=10)
    max_quality_terms: int = Field(default=5, ge=0, le=5)
    max_base_terms: int = Field(default=3, ge=0, le=3)
    max_fanout_terms: int = Field(default=6, ge=1, le=6)
    max_genre_candidates: int = Field(default=30, ge=1, le=30)
    popular_page_size: int = Field(default=10, ge=1, le=10)

    rate_limit_per_minute: int = 60

    max_query_chars: int = 300

    @property
    def quality_term_pool(self) -> list[str]:
        return _split_terms(self.quality_search_terms)

    @property
    def base_term_pool(self) -> list[str]:
        return _split_terms(self.base_search_terms)


@lru_cache
def get_settings() -> Settings:
    return Settings()
