"""Route resolution for the content tree.

Maps a file's placement under the content root to its canonical URL and
document type. Placement is the only source of identity:

    <root>/<vertical>/<country>/_country.mdx   -> /<vertical>/<country>
    <root>/<vertical>/<country>/<program>.mdx  -> /<vertical>/<country>/<program>
    <root>/<hubKind>/<slug>.mdx                -> /<hubKind>/<slug>

Anything else (unknown top-level directory, wrong depth, other
underscore-prefixed partials, non-.mdx files) has no route.
"""

from dataclasses import dataclass
from pathlib import Path
import re

from content_hub.domain.model import HubKind, Vertical


CONTENT_SUFFIX = ".mdx"
COUNTRY_OVERVIEW_STEM = "_country"

_VERTICALS = {vertical.value: vertical for vertical in Vertical}
_HUB_KINDS = {kind.value: kind for kind in HubKind}
_SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")


@dataclass(frozen=True)
class Route:
    """Placement-derived identity of one content file."""

    doc_type: str
    url: str
    vertical: Vertical | None = None
    country: str | None = None
    program: str | None = None
    hub_kind: HubKind | None = None
    slug: str | None = None

    @property
    def id(self) -> str:
        return f"{self.doc_type}:{self.url}"


def _valid_segment(segment: str) -> bool:
    return bool(_SEGMENT_PATTERN.match(segment))


def resolve_route(root: Path, path: Path) -> Route | None:
    """Return the route for ``path`` under ``root``, or None when it has no route."""
    try:
        relative = path.relative_to(root)
    except ValueError:
        return None

    if path.suffix.lower() != CONTENT_SUFFIX:
        return None

    parts = relative.parts
    stem = path.stem

    if len(parts) == 3 and parts[0] in _VERTICALS:
        vertical = _VERTICALS[parts[0]]
        country = parts[1]
        if not _valid_segment(country):
            return None
        if stem == COUNTRY_OVERVIEW_STEM:
            return Route(
                doc_type="country",
                url=f"/{vertical.value}/{country}",
                vertical=vertical,
                country=country,
            )
        if not _valid_segment(stem):
            return None
        return Route(
            doc_type="program",
            url=f"/{vertical.value}/{country}/{stem}",
            vertical=vertical,
            country=country,
            program=stem,
        )

    if len(parts) == 2 and parts[0] in _HUB_KINDS:
        if not _valid_segment(stem):
            return None
        hub_kind = _HUB_KINDS[parts[0]]
        return Route(
            doc_type=hub_kind.doc_type,
            url=f"/{hub_kind.value}/{stem}",
            hub_kind=hub_kind,
            slug=stem,
        )

    return None


def subtree_path(root: Path, subtree: str | None) -> Path:
    """Resolve a subtree name (vertical or hub directory) below the content root."""
    if not subtree:
        return root
    name = subtree.strip("/")
    if name not in _VERTICALS and name not in _HUB_KINDS:
        raise ValueError(f"Unknown content subtree: {subtree!r}")
    return root / name


def humanize_slug(slug: str) -> str:
    """``golden-visa`` -> ``Golden Visa``."""
    words = re.split(r"[-_\s]+", slug.strip())
    return " ".join(word[:1].upper() + word[1:] for word in words if word)
