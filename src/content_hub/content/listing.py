"""Listing helpers: facet and text filters, recency ordering, paging and facet counts."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from content_hub.domain.model import Document


class Facets(BaseModel):
    """Value counts per facet, each sorted by value."""

    model_config = ConfigDict(frozen=True)

    types: dict[str, int] = Field(default_factory=dict)
    verticals: dict[str, int] = Field(default_factory=dict)
    countries: dict[str, int] = Field(default_factory=dict)
    programs: dict[str, int] = Field(default_factory=dict)
    tags: dict[str, int] = Field(default_factory=dict)


DEFAULT_PAGE_SIZE = 12


@dataclass(frozen=True)
class ListingPage:
    """One page of a filtered listing; ``total`` counts every match."""

    items: list[Document]
    total: int
    page: int
    page_size: int


def sort_recent(documents: Iterable[Document]) -> list[Document]:
    """Newest first by (updated or created); ties by id ascending."""
    ordered = sorted(documents, key=lambda document: document.id)
    return sorted(ordered, key=lambda document: document.sort_date, reverse=True)


def _matches(value: str | None, candidates: Iterable[str]) -> bool:
    if value is None:
        return True
    wanted = value.strip().lower()
    return any(candidate.lower() == wanted for candidate in candidates)


def matches_text(document: Document, query: str | None) -> bool:
    """Case-insensitive substring match over title, summary, tags, countries and programs."""
    if query is None or not query.strip():
        return True
    needle = query.strip().lower()
    haystack = " ".join(
        part
        for part in (
            document.title,
            document.summary,
            " ".join(document.tags),
            " ".join(document.countries),
            " ".join(document.programs),
        )
        if part
    )
    return needle in haystack.lower()


def filter_documents(
    documents: Sequence[Document],
    *,
    doc_type: str | None = None,
    country: str | None = None,
    program: str | None = None,
    tag: str | None = None,
    query: str | None = None,
) -> list[Document]:
    """Keep documents matching every given facet and the text query. An unknown value matches nothing."""
    return [
        document
        for document in documents
        if _matches(doc_type, (document.doc_type,))
        and _matches(country, document.countries)
        and _matches(program, document.programs)
        and _matches(tag, document.tags)
        and matches_text(document, query)
    ]


def paginate(documents: Sequence[Document], page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> ListingPage:
    """Slice ``documents`` into 1-based pages. A page past the end is empty.

    Raises:
        ValueError: ``page`` or ``page_size`` is below 1
    """
    if page < 1 or page_size < 1:
        raise ValueError(f"page and page_size must be positive (got {page}, {page_size})")
    start = (page - 1) * page_size
    return ListingPage(
        items=list(documents[start : start + page_size]),
        total=len(documents),
        page=page,
        page_size=page_size,
    )


def _sorted_counts(counter: Counter[str]) -> dict[str, int]:
    return dict(sorted(counter.items()))


def build_facets(documents: Iterable[Document]) -> Facets:
    types: Counter[str] = Counter()
    verticals: Counter[str] = Counter()
    countries: Counter[str] = Counter()
    programs: Counter[str] = Counter()
    tags: Counter[str] = Counter()
    for document in documents:
        types[document.doc_type] += 1
        verticals.update(set(document.verticals))
        countries.update(set(document.countries))
        programs.update(set(document.programs))
        tags.update({tag.lower() for tag in document.tags})
    return Facets(
        types=_sorted_counts(types),
        verticals=_sorted_counts(verticals),
        countries=_sorted_counts(countries),
        programs=_sorted_counts(programs),
        tags=_sorted_counts(tags),
    )
