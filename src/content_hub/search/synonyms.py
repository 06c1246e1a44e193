"""Domain query expansion.

A raw query is expanded into a small, fixed set of variants via a lookup
table of trigger patterns. Each variant is searched independently and the
results are merged by best score, so a variant can only add recall.

Example:
    - "golden visa" also searches "residency by investment",
      "greece golden visa" and "portugal golden visa"
    - "cbi malta" also searches "citizenship by investment"
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import re


@dataclass(frozen=True)
class ExpansionRule:
    """Adds ``variants`` when ``pattern`` matches the lowercased query."""

    pattern: re.Pattern[str]
    variants: tuple[str, ...]


def _rule(pattern: str, *variants: str) -> ExpansionRule:
    return ExpansionRule(re.compile(pattern), variants)


DEFAULT_EXPANSIONS: tuple[ExpansionRule, ...] = (
    _rule(r"golden visa", "residency by investment", "greece golden visa", "portugal golden visa"),
    _rule(r"\bcbi\b", "citizenship by investment"),
    _rule(r"\brbi\b", "residency by investment"),
    _rule(r"\bebi\b", "employment based immigration"),
    _rule(r"\bep\b", "employment pass"),
    _rule(r"startup visa", "start up visa", "start-up visa"),
    _rule(r"real estate", "property investment"),
)

DEFAULT_MAX_VARIANTS = 8


class QueryExpander:
    """Expands a query into domain-synonym variants.

    The original query is always the first variant. Variants are
    deduplicated case-insensitively and capped at ``max_variants``.
    """

    def __init__(
        self,
        rules: Sequence[ExpansionRule] | None = None,
        *,
        max_variants: int = DEFAULT_MAX_VARIANTS,
    ) -> None:
        self._rules = tuple(rules) if rules is not None else DEFAULT_EXPANSIONS
        self.max_variants = max(1, max_variants)

    def expand(self, query: str) -> list[str]:
        """Return ``[query, *variants]`` for a trimmed, non-empty query."""
        query = query.strip()
        if not query:
            return []

        normalized = query.lower()
        variants = [query]
        seen = {normalized}
        for rule in self._rules:
            if not rule.pattern.search(normalized):
                continue
            for variant in rule.variants:
                key = variant.lower()
                if key in seen:
                    continue
                seen.add(key)
                variants.append(variant)
        return variants[: self.max_variants]


def expand_query(query: str, *, max_variants: int = DEFAULT_MAX_VARIANTS) -> list[str]:
    """Expand ``query`` with the default rule table."""
    return QueryExpander(max_variants=max_variants).expand(query)
