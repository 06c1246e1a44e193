"""Statistical helpers for BM25 style scoring.

Independent of the index structure so they can be unit tested on their own.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import math


@dataclass(frozen=True)
class FieldLengthStats:
    """Aggregated term statistics for a field."""

    field: str
    total_terms: int
    document_count: int

    @property
    def average_length(self) -> float:
        if self.document_count == 0:
            return 0.0
        return self.total_terms / self.document_count


def compute_field_length_stats(field_lengths: Mapping[str, Mapping[int, int]]) -> dict[str, FieldLengthStats]:
    """Return aggregate stats per field given ``field -> {doc_index: length}``.

    Documents with an empty field do not count towards its average.
    """

    stats: dict[str, FieldLengthStats] = {}
    for field_name, lengths in field_lengths.items():
        populated = [length for length in lengths.values() if length > 0]
        stats[field_name] = FieldLengthStats(
            field=field_name,
            total_terms=sum(populated),
            document_count=len(populated),
        )
    return stats


def calculate_idf(doc_freq: int, total_docs: int, *, floor: float = 1e-6) -> float:
    """Return inverse document frequency with small-sample smoothing.

    Floored so a term present in every document still scores above zero,
    which keeps AND queries over tiny corpora rankable.
    """

    if total_docs <= 0:
        return 0.0
    df = max(0, min(doc_freq, total_docs))
    numerator = total_docs - df + 0.5
    denominator = df + 0.5
    ratio = max(numerator / denominator, floor)
    raw_idf = math.log(ratio + floor) + 1.0
    return max(raw_idf, floor)


def bm25(tf: int, doc_length: int, avg_doc_length: float, *, k1: float = 1.2, b: float = 0.7) -> float:
    """Compute the BM25 term weight without IDF.

    The length ratio is capped at 4x the field average so one very long
    snippet or tag list is not buried.
    """

    if tf <= 0:
        return 0.0
    max_length_ratio = 4.0
    raw_ratio = doc_length / max(avg_doc_length, 1e-9)
    normalized_length = min(raw_ratio, max_length_ratio)
    denominator = tf + k1 * (1 - b + b * normalized_length)
    return (tf * (k1 + 1)) / denominator
