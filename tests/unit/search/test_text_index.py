"""Unit tests for the in-memory text index."""

import pytest

from content_hub.domain.search import SearchIndexEntry
from content_hub.search.schema import DEFAULT_FIELD_BOOSTS, Schema, TextField, create_default_schema
from content_hub.search.text_index import FUZZY_WEIGHT, PREFIX_WEIGHT, TextIndex


pytestmark = pytest.mark.unit


def entry(doc_id: str, title: str, *, type_: str = "program", subtitle=None, tags=(), snippet=None):
    return SearchIndexEntry(
        id=doc_id,
        url="/" + doc_id.split(":", 1)[1].strip("/"),
        type=type_,
        title=title,
        subtitle=subtitle,
        tags=tags,
        snippet=snippet,
    )


TITLE_MATCH = entry(
    "program:/residency/portugal/golden-visa",
    "Golden Visa Residency",
    subtitle="Portugal",
    snippet="Invest in property.",
)
SNIPPET_MATCH = entry(
    "program:/residency/greece/fip",
    "Greek Residency Programme",
    subtitle="Hellenic Republic",
    snippet="The golden visa route for property buyers.",
)
ARTICLE = entry(
    "article:/articles/moving-to-malta",
    "Moving to Malta",
    type_="article",
    tags=("citizenship", "donation"),
    snippet="Citizenship by naturalisation.",
)


@pytest.fixture
def index() -> TextIndex:
    return TextIndex([TITLE_MATCH, SNIPPET_MATCH, ARTICLE])


def ids(results):
    return [result.doc_id for result in results]


class TestTextIndexSearch:
    def test_title_match_outranks_snippet_match(self, index: TextIndex):
        results = index.search("golden visa")

        assert ids(results) == [TITLE_MATCH.id, SNIPPET_MATCH.id]
        assert results[0].score > results[1].score > 0

    def test_all_terms_must_match(self, index: TextIndex):
        assert ids(index.search("golden greek")) == [SNIPPET_MATCH.id]
        assert index.search("golden naturalisation") == []

    def test_prefix_matching(self, index: TextIndex):
        assert set(ids(index.search("resid"))) == {TITLE_MATCH.id, SNIPPET_MATCH.id}

    def test_fuzzy_matching(self, index: TextIndex):
        assert set(ids(index.search("goldn"))) == {TITLE_MATCH.id, SNIPPET_MATCH.id}
        assert ids(index.search("citizenshp")) == [ARTICLE.id]

    def test_type_filter(self, index: TextIndex):
        assert ids(index.search("citizenship", types={"article"})) == [ARTICLE.id]
        assert index.search("golden", types={"article"}) == []
        assert index.search("golden", types={"podcast"}) == []

    def test_stopword_only_and_blank_queries(self, index: TextIndex):
        assert index.search("the") == []
        assert index.search("   ") == []

    def test_limit(self, index: TextIndex):
        assert ids(index.search("golden visa", limit=1)) == [TITLE_MATCH.id]

    def test_tags_are_searchable(self, index: TextIndex):
        results = index.search("donation")

        assert ids(results) == [ARTICLE.id]

    def test_empty_index(self):
        assert TextIndex([]).search("golden") == []


class TestTextIndexStructure:
    def test_later_duplicate_replaces_earlier(self):
        newer = entry(TITLE_MATCH.id, "Golden Visa Portugal 2025")

        index = TextIndex([TITLE_MATCH, ARTICLE, newer])

        assert len(index) == 2
        assert index.get(TITLE_MATCH.id).title == "Golden Visa Portugal 2025"
        assert index.search("residency") == []

    def test_expand_term_weights(self, index: TextIndex):
        expansions = index.expand_term("gold")

        assert expansions["gold"] == 1.0
        assert expansions["golden"] == pytest.approx(PREFIX_WEIGHT * 4 / 6)

    def test_fuzzy_expansion_weight(self, index: TextIndex):
        expansions = index.expand_term("greec")

        assert expansions["greek"] == pytest.approx(FUZZY_WEIGHT * 5 / 6)

    def test_default_schema_boosts(self):
        schema = create_default_schema()

        assert [field.name for field in schema] == list(DEFAULT_FIELD_BOOSTS)
        boosts = [field.boost for field in schema]
        assert boosts == sorted(boosts, reverse=True)

    def test_duplicate_schema_fields_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            Schema(fields=[TextField("title"), TextField("title", boost=2.0)])
