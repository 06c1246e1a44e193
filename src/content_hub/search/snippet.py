"""Plain-text snippet extraction for index entries.

Snippets are computed once, at index build time. The body is reduced to
plain text (no code fences, markup tags, images or link targets) and cut
at a word boundary near the limit.

Smart Defaults:
- 200 character limit, ellipsis appended on truncation
- the cut backs up to the last space inside the final 40 characters
- with no space in that window the cut is hard, at exactly the limit
"""

from __future__ import annotations

import re


ELLIPSIS = "…"
DEFAULT_SNIPPET_LENGTH = 200
DEFAULT_WORD_WINDOW = 40

_FENCED_CODE = re.compile(r"```.*?```|~~~.*?~~~", re.DOTALL)
_TAG = re.compile(r"<[^>]+>")
_IMAGE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
_LINK = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_INLINE_CODE = re.compile(r"`([^`]+)`")
_WHITESPACE = re.compile(r"\s+")


def strip_to_text(markdown: str) -> str:
    """Reduce markdown/MDX to a single line of plain text.

    Order matters: fenced code goes first so tags inside code blocks never
    reach the tag stripper, and images go before links so ``![alt](src)``
    is dropped rather than reduced to its alt text.
    """
    if not markdown:
        return ""
    text = _FENCED_CODE.sub(" ", markdown)
    text = _TAG.sub(" ", text)
    text = _IMAGE.sub(" ", text)
    text = _LINK.sub(lambda match: match.group(1), text)
    text = _INLINE_CODE.sub(lambda match: match.group(1), text)
    return _WHITESPACE.sub(" ", text).strip()


def truncate_snippet(text: str, limit: int = DEFAULT_SNIPPET_LENGTH, window: int = DEFAULT_WORD_WINDOW) -> str:
    """Truncate ``text`` to at most ``limit`` characters plus an ellipsis.

    Args:
        text: Plain text to truncate.
        limit: Maximum characters kept before the ellipsis.
        window: How far back from the cut point a space is searched for.

    Returns:
        ``text`` unchanged when it fits; otherwise the cut text plus ``…``.

    Examples:
        >>> truncate_snippet("alpha beta gamma", limit=12, window=8)
        'alpha beta…'
        >>> truncate_snippet("1" * 90, limit=40)
        '1111111111111111111111111111111111111111…'
    """
    if limit <= 0:
        return ""
    if len(text) <= limit:
        return text

    cut = text[:limit]
    if not text[limit].isspace():
        last_space = cut.rfind(" ")
        if last_space > 0 and last_space >= limit - window:
            cut = cut[:last_space]
    return cut.rstrip() + ELLIPSIS


def build_snippet(
    summary: str | None,
    body: str,
    *,
    limit: int = DEFAULT_SNIPPET_LENGTH,
    window: int = DEFAULT_WORD_WINDOW,
) -> str:
    """Snippet from the explicit summary when present, otherwise from the body."""
    source = strip_to_text(summary or "") or strip_to_text(body)
    return truncate_snippet(source, limit, window)
