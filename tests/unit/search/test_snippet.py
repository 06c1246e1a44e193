"""Unit tests for snippet extraction."""

import pytest

from content_hub.search.snippet import ELLIPSIS, build_snippet, strip_to_text, truncate_snippet


pytestmark = pytest.mark.unit


class TestStripToText:
    def test_drops_fenced_code(self):
        text = strip_to_text("Before\n```python\nprint('<b>x</b>')\n```\nAfter")

        assert text == "Before After"

    def test_strips_tags_and_images_and_unwraps_links(self):
        markdown = '<Callout type="info">Note</Callout> ![map](/m.png) See [the guide](/guide) and `code`.'

        assert strip_to_text(markdown) == "Note See the guide and code."

    def test_collapses_whitespace(self):
        assert strip_to_text("  a\n\n\tb   c ") == "a b c"

    def test_empty(self):
        assert strip_to_text("") == ""


class TestTruncateSnippet:
    def test_short_text_is_unchanged(self):
        assert truncate_snippet("short text", limit=40) == "short text"

    def test_digits_without_space_in_window_are_hard_cut(self):
        text = "1" * 45 + " " + "1" * 44

        snippet = truncate_snippet(text, limit=40)

        assert snippet == "1" * 40 + ELLIPSIS

    def test_backs_up_to_word_boundary(self):
        text = "alpha beta gamma delta"

        assert truncate_snippet(text, limit=13, window=8) == "alpha beta" + ELLIPSIS

    def test_cut_on_boundary_keeps_full_limit(self):
        assert truncate_snippet("alpha beta gamma", limit=10, window=8) == "alpha beta" + ELLIPSIS

    def test_space_outside_window_is_ignored(self):
        text = "ab " + "c" * 60

        assert truncate_snippet(text, limit=50, window=40) == text[:50] + ELLIPSIS

    @pytest.mark.parametrize(
        "text",
        [
            "word " * 100,
            "x" * 500,
            "Portugal golden visa " * 20,
            "a" * 199 + " tail that overflows",
        ],
    )
    def test_length_bound_and_no_mid_word_cut(self, text):
        limit = 200
        snippet = truncate_snippet(text, limit=limit)

        assert len(snippet) <= limit + 1
        if snippet.endswith(ELLIPSIS):
            kept = snippet[: -len(ELLIPSIS)]
            window_has_space = " " in text[limit - 40 : limit]
            if window_has_space and not text[limit].isspace():
                assert text[len(kept)] == " " or text[len(kept)].isspace()


class TestBuildSnippet:
    def test_summary_preferred(self):
        assert build_snippet("Explicit summary", "Body text") == "Explicit summary"

    def test_body_fallback(self):
        assert build_snippet("", "## Heading\nBody [link](/x)") == "## Heading Body link"

    def test_custom_limit(self):
        assert build_snippet(None, "one two three four", limit=9, window=5) == "one two" + ELLIPSIS
