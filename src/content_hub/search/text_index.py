"""In-memory BM25F text index over search index entries.

Each query term is expanded against the index vocabulary:

- the exact term (weight 1.0)
- longer terms it is a prefix of (``PREFIX_WEIGHT``, scaled by length ratio)
- terms within the fuzzy edit budget (``FUZZY_WEIGHT``, scaled by distance)

A document matches only when every query term matches at least one of
its expansions in some field (AND semantics). Its score is the sum over
terms, fields and expansions of ``boost * idf * bm25 * weight``.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Collection, Sequence
from dataclasses import dataclass
import heapq

from content_hub.domain.search import SearchIndexEntry
from content_hub.search.analyzers import analyze_terms, get_analyzer
from content_hub.search.fuzzy import find_fuzzy_matches, find_prefix_matches, get_max_edit_distance
from content_hub.search.schema import Schema, create_default_schema
from content_hub.search.stats import FieldLengthStats, bm25, calculate_idf, compute_field_length_stats


PREFIX_WEIGHT = 0.375
FUZZY_WEIGHT = 0.45


@dataclass(frozen=True)
class RankedDocument:
    """Represents a scored document produced by the text index."""

    doc_id: str
    score: float


class TextIndex:
    """Immutable inverted index built once from a list of entries."""

    def __init__(
        self,
        entries: Sequence[SearchIndexEntry],
        *,
        schema: Schema | None = None,
        fuzzy: float = 0.2,
        max_fuzzy: int = 6,
        prefix: bool = True,
        k1: float = 1.2,
        b: float = 0.7,
    ) -> None:
        self.schema = schema or create_default_schema()
        self.fuzzy = fuzzy
        self.max_fuzzy = max_fuzzy
        self.prefix = prefix
        self.k1 = k1
        self.b = b

        self._entries: list[SearchIndexEntry] = []
        self._positions: dict[str, int] = {}
        for entry in entries:
            if entry.id in self._positions:
                # Later duplicates replace earlier ones
                self._entries[self._positions[entry.id]] = entry
                continue
            self._positions[entry.id] = len(self._entries)
            self._entries.append(entry)

        self._analyzers = {f.name: get_analyzer(f.analyzer_name) for f in self.schema}
        self._postings: dict[str, dict[str, dict[int, int]]] = {f.name: defaultdict(dict) for f in self.schema}
        field_lengths: dict[str, dict[int, int]] = {f.name: {} for f in self.schema}

        for doc_index, entry in enumerate(self._entries):
            for field in self.schema:
                tokens = [token.text for token in self._analyzers[field.name](field.extract(entry))]
                field_lengths[field.name][doc_index] = len(tokens)
                for term, frequency in Counter(tokens).items():
                    self._postings[field.name][term][doc_index] = frequency

        self._field_lengths = field_lengths
        self._field_stats: dict[str, FieldLengthStats] = compute_field_length_stats(field_lengths)
        vocabulary: set[str] = set()
        for postings in self._postings.values():
            vocabulary.update(postings)
        self._vocabulary = sorted(vocabulary)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[SearchIndexEntry]:
        return list(self._entries)

    def get(self, doc_id: str) -> SearchIndexEntry | None:
        position = self._positions.get(doc_id)
        return None if position is None else self._entries[position]

    def expand_term(self, term: str) -> dict[str, float]:
        """Vocabulary terms matching ``term`` with their match weights."""
        expansions: dict[str, float] = {}
        if self.prefix:
            for candidate in find_prefix_matches(term, self._vocabulary):
                expansions[candidate] = PREFIX_WEIGHT * len(term) / len(candidate)

        max_distance = get_max_edit_distance(len(term), self.fuzzy, self.max_fuzzy)
        for candidate, distance in find_fuzzy_matches(term, self._vocabulary, max_distance):
            weight = FUZZY_WEIGHT * len(candidate) / (len(candidate) + distance)
            if weight > expansions.get(candidate, 0.0):
                expansions[candidate] = weight

        # Exact match always carries full weight
        expansions[term] = 1.0
        return expansions

    def _score_term(self, expansions: dict[str, float], allowed: set[int] | None) -> dict[int, float]:
        scores: dict[int, float] = defaultdict(float)
        total_docs = len(self._entries)
        for field in self.schema:
            postings_by_term = self._postings[field.name]
            stats = self._field_stats[field.name]
            lengths = self._field_lengths[field.name]
            for candidate, weight in expansions.items():
                postings = postings_by_term.get(candidate)
                if not postings:
                    continue
                idf = calculate_idf(len(postings), total_docs)
                for doc_index, frequency in postings.items():
                    if allowed is not None and doc_index not in allowed:
                        continue
                    tf_weight = bm25(frequency, lengths[doc_index], stats.average_length, k1=self.k1, b=self.b)
                    scores[doc_index] += field.boost * idf * tf_weight * weight
        return scores

    def search(
        self,
        query: str,
        *,
        types: Collection[str] | None = None,
        limit: int | None = None,
    ) -> list[RankedDocument]:
        """Rank entries matching every term of ``query``.

        Args:
            query: Free text; analyzed like the indexed fields.
            types: Only consider entries whose ``type`` is in this set.
            limit: Maximum results; None returns all matches.

        Returns:
            Ranked documents, score descending then id ascending.
        """
        if not self._entries:
            return []
        terms = analyze_terms(self._analyzers[self.schema.fields[0].name], query)
        if not terms:
            return []

        allowed: set[int] | None = None
        if types:
            wanted = set(types)
            allowed = {index for index, entry in enumerate(self._entries) if entry.type in wanted}
            if not allowed:
                return []

        combined: dict[int, float] | None = None
        for term in terms:
            term_scores = self._score_term(self.expand_term(term), allowed)
            if combined is None:
                combined = dict(term_scores)
            else:
                combined = {
                    index: score + term_scores[index] for index, score in combined.items() if index in term_scores
                }
            if not combined:
                return []

        ranked = [RankedDocument(doc_id=self._entries[index].id, score=score) for index, score in combined.items()]
        if limit is not None and 0 <= limit < len(ranked):
            return heapq.nsmallest(limit, ranked, key=lambda item: (-item.score, item.doc_id))
        ranked.sort(key=lambda item: (-item.score, item.doc_id))
        return ranked
