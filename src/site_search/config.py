"""Centralized configuration for site-search using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SearchSettings(BaseSettings):
    """Strictly typed search configuration loaded from ``SITE_SEARCH_*`` environment variables.

    Defaults reproduce the documented ranking constants, so an unconfigured
    engine behaves exactly like the module-level ``search()`` helper.
    """

    model_config = SettingsConfigDict(
        env_prefix="SITE_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # BM25
    bm25_k1: float = Field(default=1.2, gt=0.0, description="Term-frequency saturation")
    bm25_b: float = Field(default=0.75, ge=0.0, le=1.0, description="Length-normalization strength")

    # Ranking
    max_results: int = Field(default=10, ge=1, description="Maximum results returned per query")
    title_boost: float = Field(default=10.0, ge=0.0, description="Bonus when the query appears in the title")
    tag_boost: float = Field(default=5.0, ge=0.0, description="Bonus per tag equal to the query")
    phrase_boost: float = Field(
        default=15.0, ge=0.0, description="Bonus for a quoted phrase found in content (doubled for titles)"
    )

    # Fuzzy matching
    fuzzy_enabled: bool = Field(default=True, description="Expand unknown query terms to close index terms")
    fuzzy_modifier: float = Field(default=0.7, ge=0.0, le=1.0, description="Score multiplier for fuzzy hits")
    max_edit_distance: int = Field(default=2, ge=0, le=3, description="Upper bound on fuzzy edit distance")

    # Snippets
    snippet_length: int = Field(default=150, ge=1, description="Preview length when no term matches")
    snippet_context_before: int = Field(default=60, ge=0, description="Characters kept before the first match")
    snippet_context_after: int = Field(default=90, ge=1, description="Characters kept after the first match")
    max_snippet_content_length: int = Field(default=10_000, ge=1, description="Content prefix scanned for snippets")

    # Analysis
    use_stopwords: bool = Field(default=True, description="Drop English stopwords during analysis")
    use_stemming: bool = Field(default=True, description="Apply Porter stemming during analysis")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @model_validator(mode="after")
    def validate_snippet_window(self) -> "SearchSettings":
        if self.snippet_context_before + self.snippet_context_after > self.max_snippet_content_length:
            raise ValueError("snippet window must fit inside max_snippet_content_length")
        return self


@lru_cache(maxsize=1)
def get_settings() -> SearchSettings:
    """Return the process-wide settings instance."""
    return SearchSettings()
