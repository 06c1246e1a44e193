"""Content tree loader.

Walks the content root, parses each file's front matter and body and
returns normalized, strongly-typed documents. A single unreadable or
unparseable file is logged and skipped; the rest of the walk proceeds.
A missing root or subtree yields an empty list.
"""

from __future__ import annotations

from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
import logging
import math
from pathlib import Path
import re
from typing import Any

from content_hub.content.normalize import COUNTRY_RULES, HUB_RULES, PROGRAM_RULES, normalize_metadata
from content_hub.domain.model import CountryDoc, Document, HubDoc, ProgramDoc
from content_hub.observability.metrics import DOCUMENTS_SKIPPED
from content_hub.utils.front_matter import FrontMatterError, parse_front_matter
from content_hub.utils.path_builder import CONTENT_SUFFIX, Route, humanize_slug, resolve_route, subtree_path


logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
_WORD = re.compile(r"\S+")


def reading_time_minutes(body: str) -> int:
    """Estimated reading time, never below one minute."""
    words = len(_WORD.findall(body))
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def discover_files(root: Path, subtree: str | None = None) -> list[Path]:
    """List candidate content files under ``root`` (or one subtree), sorted by path.

    Hidden entries are skipped. Files without a route are skipped later by
    :func:`load_document`.
    """
    try:
        base = subtree_path(root, subtree)
    except ValueError as exc:
        logger.warning("%s", exc)
        return []
    if not base.is_dir():
        logger.debug("Content subtree %s does not exist", base)
        return []

    files: list[Path] = []
    for path in base.rglob(f"*{CONTENT_SUFFIX}"):
        relative = path.relative_to(root)
        if any(part.startswith(".") for part in relative.parts):
            continue
        if path.is_file():
            files.append(path)
    files.sort(key=lambda item: item.relative_to(root).as_posix())
    return files


def _common_fields(route: Route, meta: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
    return {
        "url": route.url,
        "link_slug": meta["slug"] or (route.slug or route.program or route.country or ""),
        "tags": meta["tags"],
        "created": meta["created"],
        "updated": meta["updated"],
        "summary": meta["summary"],
        "subtitle": meta["subtitle"],
        "hero": meta["hero"],
        "draft": meta["draft"],
        "body": body,
        "source_path": path.as_posix(),
    }


def _lowered(values: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(value.lower() for value in values))


def build_document(route: Route, raw: dict[str, Any], body: str, path: Path) -> Document:
    """Convert raw metadata plus body into the document shape chosen by ``route``."""
    if route.doc_type == "country":
        meta = normalize_metadata(raw, COUNTRY_RULES)
        country_name = meta["country_name"] or humanize_slug(route.country)
        return CountryDoc(
            **_common_fields(route, meta, body, path),
            title=meta["title"] or f"{country_name} {route.vertical.value} overview",
            vertical=route.vertical,
            country=route.country,
            country_name=country_name,
        )

    if route.doc_type == "program":
        meta = normalize_metadata(raw, PROGRAM_RULES)
        return ProgramDoc(
            **_common_fields(route, meta, body, path),
            title=meta["title"] or humanize_slug(route.program),
            vertical=route.vertical,
            country=route.country,
            country_name=meta["country_name"] or humanize_slug(route.country),
            program=route.program,
            min_investment=meta["min_investment"],
            timeline_months=meta["timeline_months"],
            holding_period_months=meta["holding_period_months"],
            currency=meta["currency"],
            benefits=meta["benefits"],
            requirements=meta["requirements"],
            process_steps=meta["process_steps"],
            faq=meta["faq"],
            prices=meta["prices"],
            quick_facts=meta["quick_facts"],
            government_fees=meta["government_fees"],
        )

    meta = normalize_metadata(raw, HUB_RULES)
    return HubDoc(
        **_common_fields(route, meta, body, path),
        title=meta["title"] or humanize_slug(route.slug),
        hub_kind=route.hub_kind,
        slug=route.slug,
        author=meta["author"],
        verticals=_lowered(meta["verticals"]),
        countries=_lowered(meta["countries"]),
        programs=_lowered(meta["programs"]),
        reading_time_mins=reading_time_minutes(body),
    )


def load_document(root: Path, path: Path) -> Document | None:
    """Load one file. Returns None when the file has no route or cannot be parsed."""
    route = resolve_route(root, path)
    if route is None:
        logger.debug("Skipping %s: no route for this placement", path)
        return None

    try:
        text = path.read_text(encoding="utf-8")
        raw, body = parse_front_matter(text)
    except (OSError, UnicodeDecodeError, FrontMatterError) as exc:
        logger.warning("Skipping unparseable document %s: %s", path, exc)
        DOCUMENTS_SKIPPED.labels(reason=type(exc).__name__).inc()
        return None

    try:
        return build_document(route, raw, body, path)
    except (ValueError, OverflowError) as exc:
        # pydantic ValidationError is a ValueError
        logger.warning("Skipping invalid document %s: %s", path, exc)
        DOCUMENTS_SKIPPED.labels(reason=type(exc).__name__).inc()
        return None


def iter_documents(root: Path, subtree: str | None = None) -> Iterator[Document]:
    """Yield documents one at a time in path order."""
    for path in discover_files(root, subtree):
        document = load_document(root, path)
        if document is not None:
            yield document


def load_documents(root: Path, subtree: str | None = None, *, max_workers: int = 1) -> list[Document]:
    """Load every document under ``root`` (or one subtree), in path order.

    Args:
        root: Content root directory
        subtree: Optional vertical or hub directory name
        max_workers: Parse files on a thread pool when greater than one

    Returns:
        Documents in deterministic path order, including drafts
    """
    paths = discover_files(root, subtree)
    if max_workers <= 1 or len(paths) <= 1:
        loaded = [load_document(root, path) for path in paths]
    else:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="content-load") as pool:
            loaded = list(pool.map(lambda path: load_document(root, path), paths))

    documents = [document for document in loaded if document is not None]
    logger.debug("Loaded %d documents from %s (subtree=%s)", len(documents), root, subtree or "*")
    return documents
