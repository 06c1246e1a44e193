"""Service layer for dependency injection and better testability."""

from .cache_service import ContentStore, StampedCache
from .related_service import RelatedScorer, RelatedService


__all__ = [
    "ContentStore",
    "RelatedScorer",
    "RelatedService",
    "StampedCache",
]
