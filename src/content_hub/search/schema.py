"""
Schema definition for the search index.

Declares which SearchIndexEntry attributes are searchable and how much each
contributes to the score (BM25F field boosts). Everything else on an entry
is stored as-is and returned when a hit is rehydrated.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TextField:
    """
    Analyzed text field for full-text search.

    Args:
        name: Entry attribute (e.g., "title", "snippet")
        boost: Field weight in scoring (default: 1.0)
        analyzer_name: Name of analyzer to use (default: None = standard)
    """

    name: str
    boost: float = 1.0
    analyzer_name: str | None = None

    def extract(self, entry: Any) -> str:
        """Text to index for ``entry``; sequences are joined with spaces."""
        value = getattr(entry, self.name, None)
        if value is None:
            return ""
        if isinstance(value, (list, tuple)):
            return " ".join(str(item) for item in value)
        return str(value)


@dataclass
class Schema:
    """
    Schema definition for a search index.

    Example:
        schema = Schema(
            fields=[
                TextField("title", boost=4.0),
                TextField("snippet"),
            ],
        )
    """

    fields: list[TextField]

    def __post_init__(self) -> None:
        if len({f.name for f in self.fields}) != len(self.fields):
            msg = "Duplicate field names in schema"
            raise ValueError(msg)

    def __iter__(self) -> Iterator[TextField]:
        return iter(self.fields)


DEFAULT_FIELD_BOOSTS: dict[str, float] = {
    "title": 4.0,
    "subtitle": 2.0,
    "tags": 1.5,
    "snippet": 1.0,
}


def create_default_schema() -> Schema:
    """
    Create the default schema for content search.

    Fields:
    - title: Document title (boost=4.0)
    - subtitle: Country name or section label (boost=2.0)
    - tags: Document tags (boost=1.5)
    - snippet: Summary or body excerpt (boost=1.0)
    """
    return Schema(
        fields=[TextField(name, boost=boost) for name, boost in DEFAULT_FIELD_BOOSTS.items()],
    )
