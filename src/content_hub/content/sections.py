"""Split document bodies into addressable sections.

Bodies are split at level-3 headings (``### Title``) by a two-state
machine. Content before the first heading becomes an implicit
``overview`` section when it is not blank. Headings inside fenced code
blocks are ignored.

Example:
    >>> sections = split_sections("Intro\\n### Costs\\nA\\n### Costs\\nB")
    >>> list(sections)
    ['overview', 'costs', 'costs-2']
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
import re

from content_hub.domain.model import Heading, Section


OVERVIEW_KEY = "overview"
FALLBACK_KEY = "section"

_SECTION_HEADING = re.compile(r"^###\s+(.+?)(?:\s+#+)?\s*$")
_TOC_HEADING = re.compile(r"^(#{2,3})\s+(.+?)(?:\s+#+)?\s*$")
_FENCE = re.compile(r"^\s*(```|~~~)")
_NON_WORD = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")


def slugify_heading(text: str) -> str:
    """Slugify heading text: ``"Costs & Fees?"`` -> ``"costs-and-fees"``."""
    slug = text.lower().replace("&", "and")
    slug = _NON_WORD.sub("", slug).strip()
    slug = _WHITESPACE.sub("-", slug)
    return slug or FALLBACK_KEY


class KeyAllocator:
    """Deterministic collision counter: ``base``, ``base-2``, ``base-3``..."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._issued: set[str] = set()

    def allocate(self, base: str) -> str:
        count = self._counts.get(base, 0) + 1
        key = base if count == 1 else f"{base}-{count}"
        # A suffixed key can collide with a literal heading such as "Costs 2"
        while key in self._issued:
            count += 1
            key = f"{base}-{count}"
        self._counts[base] = count
        self._issued.add(key)
        return key


class _State(str, Enum):
    BEFORE_FIRST_HEADING = "before_first_heading"
    IN_SECTION = "in_section"


class _FenceTracker:
    def __init__(self) -> None:
        self._marker: str | None = None

    def feed(self, line: str) -> bool:
        """Return True when ``line`` is inside (or delimits) a fenced block."""
        match = _FENCE.match(line)
        if self._marker is None:
            if match:
                self._marker = match.group(1)
                return True
            return False
        if match and match.group(1) == self._marker:
            self._marker = None
        return True


def _build_section(key: str, title: str, heading: str | None, lines: list[str]) -> Section:
    return Section(key=key, title=title, heading=heading, body="\n".join(lines).strip("\n"))


def split_sections(body: str) -> dict[str, Section]:
    """Split a body into an ordered ``key -> Section`` mapping.

    For ``n`` level-3 headings the result has ``n + 1`` sections when
    non-blank content precedes the first heading, otherwise ``n``. Keys
    are unique; insertion order is document order.
    """
    sections: dict[str, Section] = {}
    keys = KeyAllocator()
    fences = _FenceTracker()

    state = _State.BEFORE_FIRST_HEADING
    preamble: list[str] = []
    current_key = ""
    current_title = ""
    current_heading: str | None = None
    buffer: list[str] = []

    for line in body.splitlines():
        in_fence = fences.feed(line)
        match = None if in_fence else _SECTION_HEADING.match(line)

        if state is _State.BEFORE_FIRST_HEADING:
            if match is None:
                preamble.append(line)
                continue
            if any(text.strip() for text in preamble):
                overview_key = keys.allocate(OVERVIEW_KEY)
                sections[overview_key] = _build_section(overview_key, "Overview", None, preamble)
            state = _State.IN_SECTION
        elif match is None:
            buffer.append(line)
            continue
        else:
            sections[current_key] = _build_section(current_key, current_title, current_heading, buffer)

        current_title = match.group(1).strip()
        current_key = keys.allocate(slugify_heading(current_title))
        current_heading = line
        buffer = []

    if state is _State.IN_SECTION:
        sections[current_key] = _build_section(current_key, current_title, current_heading, buffer)
    elif any(text.strip() for text in preamble):
        overview_key = keys.allocate(OVERVIEW_KEY)
        sections[overview_key] = _build_section(overview_key, "Overview", None, preamble)

    return sections


def pick_section(sections: Mapping[str, Section], aliases: Iterable[str]) -> Section | None:
    """Return the first section whose key matches one of ``aliases`` (in priority order)."""
    for alias in aliases:
        section = sections.get(alias.strip().lower())
        if section is not None:
            return section
    return None


def render_sections(sections: Mapping[str, Section]) -> str:
    """Concatenate sections in stored order."""
    return "\n".join(section.markdown for section in sections.values())


def extract_headings(body: str) -> list[Heading]:
    """Level-2 and level-3 headings with unique anchors, for a table of contents."""
    headings: list[Heading] = []
    anchors = KeyAllocator()
    fences = _FenceTracker()
    for line in body.splitlines():
        if fences.feed(line):
            continue
        match = _TOC_HEADING.match(line)
        if match is None:
            continue
        text = match.group(2).strip()
        headings.append(Heading(level=len(match.group(1)), text=text, anchor=anchors.allocate(slugify_heading(text))))
    return headings
