"""Related-content scoring.

A candidate earns weight for every facet it shares with the source
document (tags, verticals, countries, program slugs) and for domain
keywords present in both titles. Candidates scoring zero are dropped;
ties prefer faster, cheaper programs, then alphabetical order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
import math

from content_hub.domain.model import CountryDoc, Document, HubDoc, ProgramDoc
from content_hub.domain.search import RelatedItem
from content_hub.services.cache_service import ContentStore


logger = logging.getLogger(__name__)

TITLE_KEYWORDS: tuple[str, ...] = (
    "citizenship",
    "investment",
    "naturalization",
    "golden",
    "visa",
    "skilled",
    "talent",
    "work",
    "permit",
    "points",
    "residency",
)

DEFAULT_RELATED_LIMIT = 6


@dataclass(frozen=True)
class RelatedWeights:
    tag: float = 2.0
    vertical: float = 1.5
    country: float = 1.5
    program: float = 2.5
    keyword: float = 0.5


def _folded(values: Iterable[str]) -> set[str]:
    return {value.casefold() for value in values if value}


def _title_keywords(title: str, keywords: Iterable[str]) -> set[str]:
    folded = title.casefold()
    return {keyword for keyword in keywords if keyword in folded}


def _sort_number(value: float | None) -> float:
    return math.inf if value is None else value


def to_related_item(document: Document) -> RelatedItem:
    vertical: str | None = None
    country: str | None = None
    country_name: str | None = None
    if isinstance(document, (CountryDoc, ProgramDoc)):
        vertical = document.vertical.value
        country = document.country
        country_name = document.country_name
    elif isinstance(document, HubDoc):
        vertical = document.verticals[0] if document.verticals else None
        country = document.countries[0] if document.countries else None

    facts: dict[str, float | str | None] = {}
    if isinstance(document, ProgramDoc):
        facts = {
            "min_investment": document.min_investment,
            "timeline_months": document.timeline_months,
            "currency": document.currency,
        }
    return RelatedItem(
        id=document.id,
        url=document.url,
        type=document.doc_type,
        title=document.title,
        vertical=vertical,
        country=country,
        country_name=country_name,
        **facts,
    )


class RelatedScorer:
    """Score candidates against a source document by shared facets."""

    def __init__(
        self,
        weights: RelatedWeights | None = None,
        keywords: Iterable[str] = TITLE_KEYWORDS,
    ) -> None:
        self.weights = weights or RelatedWeights()
        self.keywords = tuple(keyword.casefold() for keyword in keywords)

    def score(self, source: Document, candidate: Document) -> float:
        weights = self.weights
        total = 0.0
        total += weights.tag * len(_folded(source.tags) & _folded(candidate.tags))
        total += weights.vertical * len(_folded(source.verticals) & _folded(candidate.verticals))
        total += weights.country * len(_folded(source.countries) & _folded(candidate.countries))
        total += weights.program * len(_folded(source.programs) & _folded(candidate.programs))
        shared_keywords = _title_keywords(source.title, self.keywords) & _title_keywords(
            candidate.title, self.keywords
        )
        total += weights.keyword * len(shared_keywords)
        return total

    def _tie_key(self, candidate: Document) -> tuple[float, float, str]:
        timeline = candidate.timeline_months if isinstance(candidate, ProgramDoc) else None
        investment = candidate.min_investment if isinstance(candidate, ProgramDoc) else None
        country = getattr(candidate, "country_name", "") or ""
        return (_sort_number(timeline), _sort_number(investment), f"{candidate.title}{country}".casefold())

    def rank(self, source: Document, pool: Iterable[Document]) -> list[tuple[Document, float]]:
        """Scored candidates, best first. The source itself and zero scores are excluded."""
        scored: list[tuple[Document, float]] = []
        seen: set[str] = {source.id}
        for candidate in pool:
            if candidate.id in seen:
                continue
            seen.add(candidate.id)
            value = self.score(source, candidate)
            if value > 0:
                scored.append((candidate, value))
        scored.sort(key=lambda pair: (-pair[1], *self._tie_key(pair[0])))
        return scored

    def related(
        self,
        source: Document,
        pool: Iterable[Document],
        limit: int = DEFAULT_RELATED_LIMIT,
    ) -> list[RelatedItem]:
        if limit <= 0:
            return []
        return [to_related_item(candidate) for candidate, _score in self.rank(source, pool)[:limit]]


class RelatedService:
    """Related items for documents of a :class:`ContentStore`."""

    def __init__(
        self,
        store: ContentStore,
        scorer: RelatedScorer | None = None,
        *,
        default_limit: int = DEFAULT_RELATED_LIMIT,
    ) -> None:
        self.store = store
        self.scorer = scorer or RelatedScorer()
        self.default_limit = default_limit

    def related(self, source: Document, limit: int | None = None) -> list[RelatedItem]:
        return self.scorer.related(source, self.store.documents(), limit or self.default_limit)

    def related_for_url(self, url: str, limit: int | None = None) -> list[RelatedItem] | None:
        """Related items for the document at ``url``; None when it does not exist."""
        source = self.store.get(url)
        if source is None:
            logger.debug("No document for related lookup: %s", url)
            return None
        return self.related(source, limit)
