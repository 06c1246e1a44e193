"""Domain model - normalized content documents and value objects.

Following Cosmic Python principles:
- Domain model has NO dependencies on infrastructure
- Value Objects are immutable and defined by their attributes
- Raw metadata is untyped until the load boundary; past it, every document
  is one of three strict, frozen shapes

Document identity is derived from directory placement only:
``id == f"{doc_type}:{url}"``. A slug found in metadata never changes the
URL, only ``link_slug``.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat
from pydantic.dataclasses import dataclass


class ContentHubError(Exception):
    """Base error for content loading and search failures."""


class Vertical(str, Enum):
    """Program verticals, also the top-level content directories."""

    RESIDENCY = "residency"
    CITIZENSHIP = "citizenship"
    SKILLED = "skilled"
    CORPORATE = "corporate"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class HubKind(str, Enum):
    """Editorial hub directories."""

    ARTICLES = "articles"
    NEWS = "news"
    MEDIA = "media"
    BLOG = "blog"

    @property
    def doc_type(self) -> str:
        """Index ``type`` facet for entries of this hub."""
        if self is HubKind.ARTICLES:
            return "article"
        return self.value

    @property
    def label(self) -> str:
        return self.value.capitalize()


DOCUMENT_TYPES: tuple[str, ...] = ("country", "program", "article", "news", "media", "blog")


class _DocumentBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    title: str
    link_slug: str
    tags: tuple[str, ...] = ()
    created: str | None = None
    updated: str | None = None
    summary: str = ""
    subtitle: str | None = None
    hero: str | None = None
    draft: bool = False
    body: str = ""
    source_path: str = ""

    @property
    def doc_type(self) -> str:  # pragma: no cover - overridden
        raise NotImplementedError

    @property
    def id(self) -> str:
        return f"{self.doc_type}:{self.url}"

    @property
    def sort_date(self) -> str:
        """Date used for recency ordering (updated, falling back to created)."""
        return self.updated or self.created or ""


class CountryDoc(_DocumentBase):
    """Country overview for one vertical (``<vertical>/<country>/_country.mdx``)."""

    kind: Literal["country"] = "country"
    vertical: Vertical
    country: str
    country_name: str

    @property
    def doc_type(self) -> str:
        return "country"

    @property
    def verticals(self) -> tuple[str, ...]:
        return (self.vertical.value,)

    @property
    def countries(self) -> tuple[str, ...]:
        return (self.country,)

    @property
    def programs(self) -> tuple[str, ...]:
        return ()


class ProgramDoc(_DocumentBase):
    """Investment or immigration program (``<vertical>/<country>/<program>.mdx``).

    Numeric facts are finite or absent. Structured sub-fields such as
    ``process_steps`` and ``faq`` are passed through exactly as authored.
    """

    kind: Literal["program"] = "program"
    vertical: Vertical
    country: str
    country_name: str
    program: str
    min_investment: FiniteFloat | None = None
    timeline_months: FiniteFloat | None = None
    holding_period_months: FiniteFloat | None = None
    currency: str | None = None
    benefits: tuple[str, ...] = ()
    requirements: tuple[str, ...] = ()
    process_steps: Any = None
    faq: Any = None
    prices: Any = None
    quick_facts: Any = None
    government_fees: Any = None

    @property
    def doc_type(self) -> str:
        return "program"

    @property
    def verticals(self) -> tuple[str, ...]:
        return (self.vertical.value,)

    @property
    def countries(self) -> tuple[str, ...]:
        return (self.country,)

    @property
    def programs(self) -> tuple[str, ...]:
        return (self.program,)


class HubDoc(_DocumentBase):
    """Editorial entry (``<hubKind>/<slug>.mdx``)."""

    kind: Literal["hub"] = "hub"
    hub_kind: HubKind
    slug: str
    author: str | None = None
    verticals: tuple[str, ...] = ()
    countries: tuple[str, ...] = ()
    programs: tuple[str, ...] = ()
    reading_time_mins: int = 1

    @property
    def doc_type(self) -> str:
        return self.hub_kind.doc_type


Document = Annotated[CountryDoc | ProgramDoc | HubDoc, Field(discriminator="kind")]


@dataclass(frozen=True)
class Section:
    """Keyed fragment of a document body.

    ``heading`` is the original heading line, or None for the implicit
    overview that precedes the first heading.
    """

    key: str
    title: str
    body: str
    heading: str | None = None

    @property
    def markdown(self) -> str:
        """Independently renderable markdown for this section."""
        if self.heading is None:
            return self.body
        if not self.body:
            return self.heading
        return f"{self.heading}\n{self.body}"


@dataclass(frozen=True)
class Heading:
    """Table-of-contents entry."""

    level: int
    text: str
    anchor: str


@dataclass(frozen=True)
class FreshnessStamp:
    """Cheap fingerprint of a content subtree.

    ``max_mtime_ns`` is the newest regular-file modification time. The file
    count and the digest of the sorted relative paths make removals and
    renames visible even when the newest mtime does not move.
    """

    max_mtime_ns: int = 0
    file_count: int = 0
    listing_digest: str = ""

    @classmethod
    def empty(cls) -> FreshnessStamp:
        return cls()

    def is_empty(self) -> bool:
        return self.file_count == 0
