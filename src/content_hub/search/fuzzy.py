"""Fuzzy and prefix term expansion for typo-tolerant search.

Expansion works against the sorted vocabulary of the index:

- prefix matches are found by bisecting the sorted vocabulary
- fuzzy matches are terms within ``min(round(len(term) * fuzzy), max_fuzzy)``
  edits, so short terms (one or two characters) never match fuzzily
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Sequence


def levenshtein_distance(s1: str, s2: str, max_distance: int | None = None) -> int:
    """Calculate the Levenshtein (edit) distance between two strings.

    Uses dynamic programming for O(m*n) time complexity, with optional
    early termination when distance exceeds max_distance.

    Args:
        s1: First string.
        s2: Second string.
        max_distance: If provided, return max_distance+1 early when
            distance is guaranteed to exceed this threshold.

    Returns:
        The minimum number of single-character edits (insertions,
        deletions, substitutions) needed to change s1 into s2.
        If max_distance is set and exceeded, returns max_distance+1.

    Examples:
        >>> levenshtein_distance("visa", "vias")
        2
        >>> levenshtein_distance("malta", "malte")
        1
    """
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    if len(s1) > len(s2):
        s1, s2 = s2, s1

    m, n = len(s1), len(s2)

    if max_distance is not None and n - m > max_distance:
        return max_distance + 1

    prev_row = list(range(m + 1))
    curr_row = [0] * (m + 1)

    for j in range(1, n + 1):
        curr_row[0] = j
        row_min = curr_row[0]
        for i in range(1, m + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            curr_row[i] = min(
                prev_row[i] + 1,  # deletion
                curr_row[i - 1] + 1,  # insertion
                prev_row[i - 1] + cost,  # substitution
            )
            row_min = min(row_min, curr_row[i])

        if max_distance is not None and row_min > max_distance:
            return max_distance + 1

        prev_row, curr_row = curr_row, prev_row

    return prev_row[m]


def get_max_edit_distance(term_length: int, fuzzy: float = 0.2, max_fuzzy: int = 6) -> int:
    """Edit budget for a term: a fraction of its length, capped.

    With the default ``fuzzy=0.2``: 1-2 chars get 0 edits, 3-7 chars get 1,
    8-12 chars get 2.
    """
    if fuzzy <= 0 or term_length <= 0:
        return 0
    return min(round(term_length * fuzzy), max_fuzzy)


def find_prefix_matches(prefix: str, sorted_vocabulary: Sequence[str]) -> list[str]:
    """Vocabulary terms that start with ``prefix`` and are longer than it."""
    if not prefix:
        return []
    matches: list[str] = []
    start = bisect_left(sorted_vocabulary, prefix)
    for term in sorted_vocabulary[start:]:
        if not term.startswith(prefix):
            break
        if term != prefix:
            matches.append(term)
    return matches


def find_fuzzy_matches(
    query_term: str,
    vocabulary: Sequence[str],
    max_distance: int,
) -> list[tuple[str, int]]:
    """Find vocabulary terms within ``max_distance`` edits of ``query_term``.

    Returns:
        ``(term, distance)`` pairs sorted by distance then term. The query
        term itself is excluded.
    """
    if not query_term or not vocabulary or max_distance <= 0:
        return []

    matches: list[tuple[str, int]] = []
    for term in vocabulary:
        if term == query_term or abs(len(query_term) - len(term)) > max_distance:
            continue
        distance = levenshtein_distance(query_term, term, max_distance)
        if distance <= max_distance:
            matches.append((term, distance))

    matches.sort(key=lambda item: (item[1], item[0]))
    return matches
