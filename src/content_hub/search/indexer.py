"""Index artifact building and loading.

The builder derives one :class:`SearchIndexEntry` per listed document and
writes a single portable JSON artifact::

    {"version": 1, "generatedAt": "...", "count": N, "docs": [...]}

Entries are ordered by (updated or date) descending, ties by id, so a
rebuild over an unchanged tree yields byte-identical ``docs``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from pathlib import Path

import orjson
from pydantic import ValidationError

from content_hub.domain.model import ContentHubError, CountryDoc, Document, HubDoc, ProgramDoc
from content_hub.domain.search import IndexArtifact, SearchIndexEntry
from content_hub.observability.metrics import INDEX_DOC_COUNT
from content_hub.observability.tracing import create_span
from content_hub.search.snippet import DEFAULT_SNIPPET_LENGTH, DEFAULT_WORD_WINDOW, build_snippet
from content_hub.services.cache_service import ContentStore


logger = logging.getLogger(__name__)

ARTIFACT_VERSION = 1


class ArtifactError(ContentHubError):
    """Raised when an index artifact cannot be read or decoded."""


@dataclass(frozen=True)
class IndexBuildResult:
    """Outcome of an index build run."""

    documents_indexed: int
    output_path: Path
    generated_at: str


def _subtitle(document: Document) -> str | None:
    if isinstance(document, ProgramDoc):
        return document.country_name
    if document.subtitle:
        return document.subtitle
    if isinstance(document, CountryDoc):
        return document.vertical.label
    if isinstance(document, HubDoc):
        return document.hub_kind.label
    return None


def _facet(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(value.lower() for value in values if value))


def build_entry(
    document: Document,
    *,
    snippet_length: int = DEFAULT_SNIPPET_LENGTH,
    word_window: int = DEFAULT_WORD_WINDOW,
) -> SearchIndexEntry:
    """Denormalize one document into its index entry."""
    snippet = build_snippet(document.summary, document.body, limit=snippet_length, window=word_window)
    return SearchIndexEntry(
        id=document.id,
        url=document.url,
        type=document.doc_type,
        title=document.title,
        subtitle=_subtitle(document),
        tags=tuple(document.tags),
        snippet=snippet or None,
        hero=document.hero,
        date=document.created,
        updated=document.updated,
        countries=_facet(document.countries),
        programs=_facet(document.programs),
    )


def sort_entries(entries: Iterable[SearchIndexEntry]) -> list[SearchIndexEntry]:
    """Newest first by (updated or date); ties by id ascending."""
    ordered = sorted(entries, key=lambda entry: entry.id)
    return sorted(ordered, key=lambda entry: entry.sort_date, reverse=True)


def build_entries(
    documents: Iterable[Document],
    *,
    snippet_length: int = DEFAULT_SNIPPET_LENGTH,
    word_window: int = DEFAULT_WORD_WINDOW,
) -> list[SearchIndexEntry]:
    entries = [build_entry(doc, snippet_length=snippet_length, word_window=word_window) for doc in documents]
    return sort_entries(entries)


def build_artifact(entries: list[SearchIndexEntry], *, generated_at: str | None = None) -> IndexArtifact:
    stamp = generated_at or datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return IndexArtifact(version=ARTIFACT_VERSION, generated_at=stamp, count=len(entries), docs=entries)


def serialize_artifact(artifact: IndexArtifact) -> bytes:
    return orjson.dumps(artifact.to_payload())


def write_artifact(path: Path, artifact: IndexArtifact) -> Path:
    """Write the artifact atomically (temp file, then rename)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    tmp_path.write_bytes(serialize_artifact(artifact))
    tmp_path.replace(path)
    return path


def read_artifact(path: Path) -> list[SearchIndexEntry]:
    """Decode an artifact file.

    Accepts the versioned object form and a bare list of entries. Individual
    entries that fail validation are skipped with a warning.

    Raises:
        ArtifactError: The file is missing, unreadable or not an artifact
    """
    try:
        payload = orjson.loads(path.read_bytes())
    except FileNotFoundError as exc:
        raise ArtifactError(f"Index artifact not found: {path}") from exc
    except (OSError, orjson.JSONDecodeError) as exc:
        raise ArtifactError(f"Index artifact unreadable: {path}: {exc}") from exc

    if isinstance(payload, list):
        raw_docs = payload
    elif isinstance(payload, dict) and isinstance(payload.get("docs"), list):
        raw_docs = payload["docs"]
    else:
        raise ArtifactError(f"Index artifact has no docs list: {path}")

    entries: list[SearchIndexEntry] = []
    for position, raw in enumerate(raw_docs):
        try:
            entries.append(SearchIndexEntry.model_validate(raw))
        except ValidationError as exc:
            logger.warning("Skipping invalid index entry #%d in %s: %s", position, path, exc.errors()[:1])
    return entries


def load_artifact(path: Path) -> list[SearchIndexEntry]:
    """Load entries, degrading to an empty corpus when the artifact is missing or corrupt."""
    try:
        entries = read_artifact(path)
    except ArtifactError as exc:
        logger.warning("Search index unavailable, serving empty corpus: %s", exc)
        entries = []
    INDEX_DOC_COUNT.labels(source="loaded").set(len(entries))
    return entries


class IndexBuilder:
    """Build the search index artifact from a content store."""

    def __init__(
        self,
        store: ContentStore,
        *,
        snippet_length: int = DEFAULT_SNIPPET_LENGTH,
        word_window: int = DEFAULT_WORD_WINDOW,
    ) -> None:
        self.store = store
        self.snippet_length = snippet_length
        self.word_window = word_window

    def build_entries(self) -> list[SearchIndexEntry]:
        return build_entries(
            self.store.documents(),
            snippet_length=self.snippet_length,
            word_window=self.word_window,
        )

    def build(self, output: Path, *, generated_at: str | None = None) -> IndexBuildResult:
        """Build entries for every listed document and write the artifact to ``output``."""
        with create_span("content.index.build", attributes={"index.output": str(output)}) as span:
            entries = self.build_entries()
            artifact = build_artifact(entries, generated_at=generated_at)
            write_artifact(output, artifact)
            span.set_attribute("index.documents", artifact.count)

        INDEX_DOC_COUNT.labels(source="built").set(artifact.count)
        logger.info("Search index written (%d docs) -> %s", artifact.count, output)
        return IndexBuildResult(
            documents_indexed=artifact.count,
            output_path=output,
            generated_at=artifact.generated_at,
        )
