"""Centralized configuration for content-hub using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    All environment variables are validated at startup with proper types.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Content tree
    content_root: str = Field(default="content", description="Root directory of the .mdx content tree")
    index_path: str = Field(
        default="public/search-index.json", description="Where the search index artifact is written and read"
    )
    loader_max_workers: int = Field(default=4, ge=1, description="Thread pool size for per-file parsing")
    include_drafts: bool = Field(default=False, description="List draft documents (preview deployments)")

    # Snippets
    snippet_length: int = Field(default=200, ge=20, description="Maximum snippet length before the ellipsis")
    snippet_word_window: int = Field(
        default=40, ge=0, description="Characters before the cut point searched for a word boundary"
    )

    # Query engine
    search_default_limit: int = Field(default=12, ge=1, description="Results returned when no limit is given")
    search_max_limit: int = Field(default=25, ge=1, description="Hard cap on results per query")
    search_fuzzy: float = Field(default=0.2, ge=0.0, le=1.0, description="Fuzzy edits allowed per term character")
    search_max_fuzzy: int = Field(default=6, ge=0, description="Upper bound on fuzzy edit distance")
    search_max_variants: int = Field(default=8, ge=1, description="Maximum query expansion variants")

    # Related content
    related_limit: int = Field(default=6, ge=1, description="Related items returned by default")

    # Server settings
    host: str = Field(default="127.0.0.1", description="HTTP server host")
    port: int = Field(default=8080, ge=1, le=65535, description="HTTP server port")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @model_validator(mode="after")
    def _check_limits(self) -> "Settings":
        if self.search_default_limit > self.search_max_limit:
            raise ValueError(
                "SEARCH_DEFAULT_LIMIT must not exceed SEARCH_MAX_LIMIT "
                f"({self.search_default_limit} > {self.search_max_limit})"
            )
        return self

    def content_dir(self) -> Path:
        """Content root as a resolved path."""
        return Path(self.content_root).expanduser().resolve()

    def index_file(self) -> Path:
        """Index artifact location as a resolved path."""
        return Path(self.index_path).expanduser().resolve()
