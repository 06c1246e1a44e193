"""Domain models for search and related-content results.

Value Objects are immutable (frozen=True). Field aliases follow the
camelCase names used by the serialized index artifact and API payloads.
"""

from pydantic import BaseModel, ConfigDict, Field


class SearchIndexEntry(BaseModel):
    """Denormalized, serializable summary of one document."""

    model_config = ConfigDict(frozen=True)

    id: str
    url: str
    type: str
    title: str
    subtitle: str | None = None
    tags: tuple[str, ...] = ()
    snippet: str | None = None
    hero: str | None = None
    date: str | None = None
    updated: str | None = None
    countries: tuple[str, ...] = ()
    programs: tuple[str, ...] = ()

    @property
    def sort_date(self) -> str:
        return self.updated or self.date or ""

    def to_payload(self) -> dict:
        """JSON-ready dict with empty optional fields omitted."""
        return self.model_dump(mode="json", exclude_none=True)


class SearchHit(SearchIndexEntry):
    """Index entry rehydrated with the best score seen across query variants."""

    score: float


class SearchResponse(BaseModel):
    """Result of one query, score-descending."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    query: str
    took_ms: float = Field(default=0.0, alias="tookMs")
    count: int = 0
    items: list[SearchHit] = Field(default_factory=list)

    @classmethod
    def empty(cls, query: str = "", took_ms: float = 0.0) -> "SearchResponse":
        return cls(query=query, took_ms=took_ms, count=0, items=[])

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class IndexArtifact(BaseModel):
    """Portable search index: ``{version, generatedAt, count, docs}``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: int = 1
    generated_at: str = Field(alias="generatedAt")
    count: int
    docs: list[SearchIndexEntry] = Field(default_factory=list)

    def to_payload(self) -> dict:
        return {
            "version": self.version,
            "generatedAt": self.generated_at,
            "count": self.count,
            "docs": [entry.to_payload() for entry in self.docs],
        }


class RelatedItem(BaseModel):
    """Summary shown in a related-content panel. The ranking score is internal."""

    model_config = ConfigDict(frozen=True)

    id: str
    url: str
    type: str
    title: str
    vertical: str | None = None
    country: str | None = None
    country_name: str | None = None
    min_investment: float | None = None
    timeline_months: float | None = None
    currency: str | None = None

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
