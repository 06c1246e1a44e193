"""Stamp-validated content cache.

A :class:`StampedCache` pairs one derived collection with the freshness
stamp of the subtree it was built from. Each lookup recomputes the stamp
(a directory walk, no file reads); when it matches, the cached value is
returned. Otherwise the collection is rebuilt wholesale and published by
swapping a single immutable snapshot reference, so readers see either the
previous complete snapshot or the new one.

:class:`ContentStore` is the injectable entry point for everything that
needs documents: one store per content root, one cache per subtree.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
import hashlib
import logging
import os
from pathlib import Path
import stat
import threading
import time
from types import MappingProxyType
from typing import Generic, TypeVar

from content_hub.config import Settings
from content_hub.content.listing import Facets, build_facets, filter_documents, sort_recent
from content_hub.content.loader import load_documents
from content_hub.content.sections import pick_section, split_sections
from content_hub.domain.model import Document, FreshnessStamp, Section
from content_hub.observability.metrics import CACHE_EVENTS, CACHE_REBUILD_LATENCY
from content_hub.observability.tracing import create_span
from content_hub.utils.path_builder import subtree_path


logger = logging.getLogger(__name__)

T = TypeVar("T")


def compute_stamp(root: Path) -> FreshnessStamp:
    """Compute the freshness stamp of ``root``.

    Regular files contribute their mtime, their count and their relative
    path; directories only contribute the files below them. An entry that
    vanishes or cannot be stat'ed mid-walk is skipped.
    """
    if not root.is_dir():
        return FreshnessStamp.empty()

    max_mtime_ns = 0
    relative_paths: list[str] = []

    def _on_error(exc: OSError) -> None:
        logger.debug("Skipping unreadable entry during stamp: %s", exc)

    for dirpath, _dirnames, filenames in os.walk(root, onerror=_on_error):
        for name in filenames:
            full = os.path.join(dirpath, name)
            try:
                info = os.stat(full)
            except OSError as exc:
                logger.debug("Skipping %s during stamp: %s", full, exc)
                continue
            if not stat.S_ISREG(info.st_mode):
                continue
            max_mtime_ns = max(max_mtime_ns, info.st_mtime_ns)
            relative_paths.append(os.path.relpath(full, root).replace(os.sep, "/"))

    relative_paths.sort()
    digest = hashlib.sha256("\n".join(relative_paths).encode("utf-8")).hexdigest()
    return FreshnessStamp(max_mtime_ns=max_mtime_ns, file_count=len(relative_paths), listing_digest=digest)


@dataclass(frozen=True)
class Snapshot(Generic[T]):
    """Immutable pair of a derived value and the stamp it was built from."""

    stamp: FreshnessStamp
    value: T


@dataclass
class CacheMetrics:
    hits: int = 0
    misses: int = 0
    loads: int = 0
    last_load_seconds: float = 0.0

    def to_dict(self) -> dict[str, float | int]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "loads": self.loads,
            "last_load_seconds": self.last_load_seconds,
        }


class StampedCache(Generic[T]):
    """Memoize ``builder()`` until the stamp of ``root`` changes.

    Rebuilds are serialized by a lock and re-checked under it, so two
    concurrent misses produce one rebuild. Readers never block on the
    lock when the stamp matches.
    """

    def __init__(
        self,
        root: Path,
        builder: Callable[[], T],
        *,
        name: str = "root",
        stamp_fn: Callable[[Path], FreshnessStamp] = compute_stamp,
    ) -> None:
        self.root = root
        self.name = name
        self._builder = builder
        self._stamp_fn = stamp_fn
        self._snapshot: Snapshot[T] | None = None
        self._lock = threading.Lock()
        self._metrics = CacheMetrics()

    @property
    def snapshot(self) -> Snapshot[T] | None:
        return self._snapshot

    def get(self) -> T:
        """Return the cached value, rebuilding it first when the tree changed."""
        stamp = self._stamp_fn(self.root)
        snapshot = self._snapshot
        if snapshot is not None and snapshot.stamp == stamp:
            self._metrics.hits += 1
            CACHE_EVENTS.labels(subtree=self.name, result="hit").inc()
            return snapshot.value

        with self._lock:
            snapshot = self._snapshot
            stamp = self._stamp_fn(self.root)
            if snapshot is not None and snapshot.stamp == stamp:
                self._metrics.hits += 1
                CACHE_EVENTS.labels(subtree=self.name, result="hit").inc()
                return snapshot.value

            self._metrics.misses += 1
            CACHE_EVENTS.labels(subtree=self.name, result="miss").inc()
            start = time.perf_counter()
            with create_span("content.cache.rebuild", attributes={"content.subtree": self.name}):
                value = self._builder()
            elapsed = time.perf_counter() - start

            self._snapshot = Snapshot(stamp=stamp, value=value)
            self._metrics.loads += 1
            self._metrics.last_load_seconds = elapsed
            CACHE_REBUILD_LATENCY.labels(subtree=self.name).observe(elapsed)
            logger.debug("Rebuilt content cache %s in %.3fs", self.name, elapsed)
            return value

    def invalidate(self) -> None:
        """Drop the snapshot so the next lookup rebuilds."""
        with self._lock:
            self._snapshot = None

    def metrics(self) -> dict[str, float | int]:
        return self._metrics.to_dict()


class ContentStore:
    """Stamp-cached access to the documents of one content root.

    Caches are created lazily per subtree (``None`` is the whole root).
    Drafts are excluded from listings unless ``include_drafts`` is set but
    stay resolvable through :meth:`get`.
    """

    def __init__(
        self,
        root: Path,
        *,
        max_workers: int = 1,
        include_drafts: bool = False,
        stamp_fn: Callable[[Path], FreshnessStamp] = compute_stamp,
    ) -> None:
        self.root = root
        self.max_workers = max_workers
        self.include_drafts = include_drafts
        self._stamp_fn = stamp_fn
        self._caches: dict[str | None, StampedCache[list[Document]]] = {}
        self._caches_lock = threading.Lock()
        # Split sections per document id, valid for one root snapshot
        self._sections: dict[str, tuple[Document, Mapping[str, Section]]] = {}
        self._sections_owner: object = None
        self._sections_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> ContentStore:
        return cls(
            settings.content_dir(),
            max_workers=settings.loader_max_workers,
            include_drafts=settings.include_drafts,
        )

    def _cache_for(self, subtree: str | None) -> StampedCache[list[Document]]:
        key = subtree.strip("/") if subtree else None
        cache = self._caches.get(key)
        if cache is not None:
            return cache
        with self._caches_lock:
            cache = self._caches.get(key)
            if cache is None:
                cache = StampedCache(
                    subtree_path(self.root, key),
                    lambda: load_documents(self.root, key, max_workers=self.max_workers),
                    name=key or "root",
                    stamp_fn=self._stamp_fn,
                )
                self._caches[key] = cache
        return cache

    def all_documents(self, subtree: str | None = None) -> list[Document]:
        """Every document under the subtree, drafts included."""
        return list(self._cache_for(subtree).get())

    def documents(
        self,
        subtree: str | None = None,
        *,
        include_drafts: bool | None = None,
        doc_type: str | None = None,
        country: str | None = None,
        program: str | None = None,
        tag: str | None = None,
        query: str | None = None,
    ) -> list[Document]:
        """Listing for a subtree, newest first, optionally filtered by facet and text.

        Raises:
            ValueError: ``subtree`` is not a vertical or hub directory
        """
        with_drafts = self.include_drafts if include_drafts is None else include_drafts
        documents = self._cache_for(subtree).get()
        if not with_drafts:
            documents = [document for document in documents if not document.draft]
        documents = filter_documents(
            documents, doc_type=doc_type, country=country, program=program, tag=tag, query=query
        )
        return sort_recent(documents)

    def get(self, url: str) -> Document | None:
        """Resolve a document by canonical URL. Drafts resolve too."""
        normalized = "/" + url.strip().strip("/")
        for document in self.all_documents():
            if document.url == normalized:
                return document
        return None

    def get_by_id(self, doc_id: str) -> Document | None:
        for document in self.all_documents():
            if document.id == doc_id:
                return document
        return None

    def sections_for(self, document: Document) -> Mapping[str, Section]:
        """Sections of ``document``, split once per cached snapshot of the root."""
        owner = self._cache_for(None).snapshot
        with self._sections_lock:
            if owner is not self._sections_owner:
                self._sections_owner = owner
                self._sections.clear()
            cached = self._sections.get(document.id)
            if cached is not None and cached[0] is document:
                return cached[1]

        sections = MappingProxyType(split_sections(document.body))
        with self._sections_lock:
            self._sections[document.id] = (document, sections)
        return sections

    def sections(self, url: str) -> Mapping[str, Section]:
        """Sections of the document at ``url``; empty when it does not exist."""
        document = self.get(url)
        if document is None:
            return {}
        return self.sections_for(document)

    def section(self, url: str, aliases: Sequence[str]) -> Section | None:
        """First section matching ``aliases`` in priority order."""
        return pick_section(self.sections(url), aliases)

    def urls(self) -> list[str]:
        """Canonical URLs of every listed document, sorted."""
        return sorted(document.url for document in self.documents())

    def facets(self, subtree: str | None = None) -> Facets:
        return build_facets(self.documents(subtree))

    def invalidate(self, subtrees: Iterable[str | None] | None = None) -> None:
        targets = list(self._caches) if subtrees is None else [s.strip("/") if s else None for s in subtrees]
        for key in targets:
            cache = self._caches.get(key)
            if cache is not None:
                cache.invalidate()
        with self._sections_lock:
            self._sections.clear()

    def cache_metrics(self) -> dict[str, dict[str, float | int]]:
        return {key or "root": cache.metrics() for key, cache in self._caches.items()}
