"""Domain layer - pure business logic with no infrastructure dependencies.

This layer contains:
- Documents: the normalized tagged union produced at the load boundary
- Value Objects: sections, freshness stamps, search entries and results
"""

from content_hub.domain.model import (
    DOCUMENT_TYPES,
    ContentHubError,
    CountryDoc,
    Document,
    FreshnessStamp,
    Heading,
    HubDoc,
    HubKind,
    ProgramDoc,
    Section,
    Vertical,
)
from content_hub.domain.search import IndexArtifact, RelatedItem, SearchHit, SearchIndexEntry, SearchResponse


__all__ = [
    "DOCUMENT_TYPES",
    "ContentHubError",
    "CountryDoc",
    "Document",
    "FreshnessStamp",
    "Heading",
    "HubDoc",
    "HubKind",
    "IndexArtifact",
    "ProgramDoc",
    "RelatedItem",
    "SearchHit",
    "SearchIndexEntry",
    "SearchResponse",
    "Section",
    "Vertical",
]
