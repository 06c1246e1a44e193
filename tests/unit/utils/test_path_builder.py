"""Unit tests for placement-derived routes."""

from pathlib import Path

import pytest

from content_hub.domain.model import HubKind, Vertical
from content_hub.utils.path_builder import humanize_slug, resolve_route, subtree_path


pytestmark = pytest.mark.unit

ROOT = Path("/content")


class TestResolveRoute:
    def test_country_overview(self):
        route = resolve_route(ROOT, ROOT / "residency" / "portugal" / "_country.mdx")

        assert route is not None
        assert route.doc_type == "country"
        assert route.url == "/residency/portugal"
        assert route.vertical is Vertical.RESIDENCY
        assert route.country == "portugal"
        assert route.id == "country:/residency/portugal"

    def test_program(self):
        route = resolve_route(ROOT, ROOT / "citizenship" / "malta" / "mein.mdx")

        assert route is not None
        assert route.doc_type == "program"
        assert route.url == "/citizenship/malta/mein"
        assert route.program == "mein"

    def test_hub_entry_maps_articles_to_article_type(self):
        route = resolve_route(ROOT, ROOT / "articles" / "portugal-guide.mdx")

        assert route is not None
        assert route.doc_type == "article"
        assert route.hub_kind is HubKind.ARTICLES
        assert route.url == "/articles/portugal-guide"

    def test_news_type(self):
        route = resolve_route(ROOT, ROOT / "news" / "update.mdx")

        assert route is not None
        assert route.doc_type == "news"

    @pytest.mark.parametrize(
        "relative",
        [
            "unknown/portugal/golden-visa.mdx",
            "residency/portugal.mdx",
            "residency/portugal/extra/golden-visa.mdx",
            "residency/portugal/golden-visa.md",
            "residency/.hidden/golden-visa.mdx",
            "articles/nested/guide.mdx",
        ],
    )
    def test_unrouted_placements(self, relative):
        assert resolve_route(ROOT, ROOT / relative) is None

    def test_path_outside_root(self):
        assert resolve_route(ROOT, Path("/elsewhere/residency/portugal/_country.mdx")) is None


class TestSubtreePath:
    def test_none_is_root(self):
        assert subtree_path(ROOT, None) == ROOT

    def test_known_subtrees(self):
        assert subtree_path(ROOT, "residency") == ROOT / "residency"
        assert subtree_path(ROOT, "/blog/") == ROOT / "blog"

    def test_unknown_subtree_raises(self):
        with pytest.raises(ValueError, match="Unknown content subtree"):
            subtree_path(ROOT, "../etc")


def test_humanize_slug():
    assert humanize_slug("golden-visa") == "Golden Visa"
    assert humanize_slug("new_zealand") == "New Zealand"
