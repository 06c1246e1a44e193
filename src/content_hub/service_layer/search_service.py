"""Search service orchestration layer.

Loads the index artifact lazily, expands each query into domain variants,
searches every variant independently and merges the results by best score.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
import logging
from pathlib import Path
import time

from content_hub.config import Settings
from content_hub.domain.search import SearchHit, SearchIndexEntry, SearchResponse
from content_hub.observability.metrics import SEARCH_LATENCY, SEARCH_REQUESTS
from content_hub.observability.tracing import create_span
from content_hub.search.indexer import load_artifact, sort_entries
from content_hub.search.synonyms import QueryExpander
from content_hub.search.text_index import RankedDocument, TextIndex


logger = logging.getLogger(__name__)


def merge_max_scores(result_lists: Iterable[Iterable[RankedDocument]]) -> dict[str, float]:
    """Fold ranked lists into one score per document id, keeping the maximum."""
    merged: dict[str, float] = {}
    for results in result_lists:
        for ranked in results:
            current = merged.get(ranked.doc_id)
            if current is None or ranked.score > current:
                merged[ranked.doc_id] = ranked.score
    return merged


def rank_merged(scores: Mapping[str, float]) -> list[tuple[str, float]]:
    """Score descending, id ascending on ties."""
    return sorted(scores.items(), key=lambda item: (-item[1], item[0]))


def parse_types(raw: str | Iterable[str] | None) -> frozenset[str] | None:
    """Normalize a comma-separated string or iterable of types; empty means no filter."""
    if raw is None:
        return None
    parts = raw.split(",") if isinstance(raw, str) else list(raw)
    types = frozenset(part.strip().lower() for part in parts if part and part.strip())
    return types or None


class SearchService:
    """High-level search API over one index artifact.

    The artifact is read on first use. Concurrent first queries share one
    load; :meth:`invalidate` drops the index so the next query reloads it.
    """

    def __init__(self, index_path: Path, settings: Settings | None = None) -> None:
        self.index_path = index_path
        self.settings = settings or Settings()
        self.expander = QueryExpander(max_variants=self.settings.search_max_variants)
        self._index: TextIndex | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> SearchService:
        return cls(settings.index_file(), settings)

    def clamp_limit(self, limit: int | None) -> int:
        if limit is None:
            return self.settings.search_default_limit
        return max(1, min(int(limit), self.settings.search_max_limit))

    def _build_index(self) -> TextIndex:
        entries = load_artifact(self.index_path)
        index = TextIndex(
            entries,
            fuzzy=self.settings.search_fuzzy,
            max_fuzzy=self.settings.search_max_fuzzy,
        )
        logger.info("Search index loaded: %d entries from %s", len(index), self.index_path)
        return index

    async def get_index(self) -> TextIndex:
        index = self._index
        if index is not None:
            return index
        async with self._lock:
            if self._index is None:
                self._index = await asyncio.to_thread(self._build_index)
            return self._index

    async def warm_index(self) -> None:
        """Preload the index so the first query does not pay for the load."""
        await self.get_index()

    def invalidate(self) -> None:
        """Drop the loaded index, forcing a reload on the next access."""
        self._index = None

    async def search(
        self,
        query: str,
        types: str | Iterable[str] | None = None,
        limit: int | None = None,
    ) -> SearchResponse:
        """Execute a query with domain expansion.

        Args:
            query: Raw user query; surrounding whitespace is ignored
            types: Restrict results to these entry types (comma-separated or iterable)
            limit: Maximum results; defaults and clamping come from settings

        Returns:
            SearchResponse with items ordered by score descending
        """
        start = time.perf_counter()
        trimmed = query.strip()
        if not trimmed:
            SEARCH_REQUESTS.labels(outcome="empty").inc()
            return SearchResponse.empty(query=trimmed)

        max_results = self.clamp_limit(limit)
        wanted = parse_types(types)

        with create_span("content.search", attributes={"search.query_length": len(trimmed)}) as span:
            index = await self.get_index()
            variants = self.expander.expand(trimmed)
            merged = merge_max_scores(index.search(variant, types=wanted) for variant in variants)
            ranked = rank_merged(merged)[:max_results]
            items = [self._hydrate(index, doc_id, score) for doc_id, score in ranked]
            items = [item for item in items if item is not None]
            span.set_attribute("search.variants", len(variants))
            span.set_attribute("search.results", len(items))

        elapsed = time.perf_counter() - start
        outcome = "hit" if items else "miss"
        SEARCH_LATENCY.labels(outcome=outcome).observe(elapsed)
        SEARCH_REQUESTS.labels(outcome=outcome).inc()
        logger.debug("Search %r: %d variants, %d results in %.2fms", trimmed, len(variants), len(items), elapsed * 1000)

        return SearchResponse(
            query=trimmed,
            took_ms=round(elapsed * 1000, 3),
            count=len(items),
            items=items,
        )

    async def recent(self, types: str | Iterable[str] | None = None, limit: int | None = None) -> SearchResponse:
        """Newest entries by (updated or date), each with a zero score."""
        start = time.perf_counter()
        max_results = self.clamp_limit(limit)
        wanted = parse_types(types)
        index = await self.get_index()
        entries = [entry for entry in index.entries if wanted is None or entry.type in wanted]
        items = [_with_score(entry, 0.0) for entry in sort_entries(entries)[:max_results]]
        elapsed = time.perf_counter() - start
        return SearchResponse(query="", took_ms=round(elapsed * 1000, 3), count=len(items), items=items)

    @staticmethod
    def _hydrate(index: TextIndex, doc_id: str, score: float) -> SearchHit | None:
        entry = index.get(doc_id)
        if entry is None:
            return None
        return _with_score(entry, score)


def _with_score(entry: SearchIndexEntry, score: float) -> SearchHit:
    return SearchHit(**entry.model_dump(), score=score)
