"""Unit tests for index artifact building and loading."""

from pathlib import Path

import orjson
import pytest

from content_hub.search.indexer import (
    ArtifactError,
    IndexBuilder,
    build_artifact,
    build_entries,
    build_entry,
    load_artifact,
    read_artifact,
    serialize_artifact,
    write_artifact,
)
from content_hub.search.snippet import ELLIPSIS
from content_hub.services.cache_service import ContentStore


pytestmark = pytest.mark.unit

EXPECTED_ORDER = [
    "article:/articles/portugal-guide",
    "program:/residency/portugal/golden-visa",
    "country:/residency/portugal",
    "program:/residency/greece/golden-visa",
    "program:/citizenship/malta/mein",
]


def entry_for(store: ContentStore, url: str):
    document = store.get(url)
    assert document is not None
    return build_entry(document)


class TestBuildEntry:
    def test_program_subtitle_is_country_name(self, store: ContentStore):
        entry = entry_for(store, "/residency/portugal/golden-visa")

        assert entry.type == "program"
        assert entry.subtitle == "Portugal"
        assert entry.tags == ("real estate", "golden visa")
        assert entry.countries == ("portugal",)
        assert entry.programs == ("golden-visa",)
        assert entry.snippet.startswith("Portugal offers residency")

    def test_country_subtitle_falls_back_to_vertical_label(self, store: ContentStore):
        entry = entry_for(store, "/residency/portugal")

        assert entry.type == "country"
        assert entry.subtitle == "Residency"
        assert entry.programs == ()

    def test_article_prefers_summary_and_lowercases_facets(self, store: ContentStore):
        entry = entry_for(store, "/articles/portugal-guide")

        assert entry.type == "article"
        assert entry.subtitle == "Articles"
        assert entry.snippet == "Everything about moving to Portugal through investment."
        assert entry.countries == ("portugal",)
        assert entry.programs == ("golden-visa",)
        assert entry.date == "2024-05-01"

    def test_empty_body_yields_no_snippet(self, tmp_path: Path, mdx_writer):
        root = tmp_path / "tree"
        mdx_writer(root, "news/blank.mdx", {"title": "Blank"}, "")
        document = ContentStore(root).get("/news/blank")

        entry = build_entry(document)

        assert entry.snippet is None
        assert "snippet" not in entry.to_payload()


class TestBuildEntries:
    def test_newest_first_and_drafts_excluded(self, store: ContentStore):
        entries = build_entries(store.documents())

        assert [entry.id for entry in entries] == EXPECTED_ORDER

    def test_docs_bytes_are_deterministic(self, store: ContentStore):
        first = build_artifact(build_entries(store.documents()), generated_at="2024-01-01T00:00:00Z")
        second = build_artifact(build_entries(reversed(store.documents())), generated_at="2024-01-01T00:00:00Z")

        assert serialize_artifact(first) == serialize_artifact(second)

    def test_generated_at_defaults_to_utc(self):
        artifact = build_artifact([])

        assert artifact.generated_at.endswith("Z")
        assert artifact.count == 0


class TestArtifactIO:
    def test_write_then_read(self, tmp_path: Path, store: ContentStore):
        path = tmp_path / "nested" / "index.json"
        artifact = build_artifact(build_entries(store.documents()), generated_at="2024-07-01T00:00:00Z")

        write_artifact(path, artifact)

        payload = orjson.loads(path.read_bytes())
        assert payload["version"] == 1
        assert payload["generatedAt"] == "2024-07-01T00:00:00Z"
        assert payload["count"] == len(EXPECTED_ORDER)
        assert [entry.id for entry in read_artifact(path)] == EXPECTED_ORDER
        assert not path.with_name("index.json.tmp").exists()

    def test_read_missing_raises(self, tmp_path: Path):
        with pytest.raises(ArtifactError, match="not found"):
            read_artifact(tmp_path / "absent.json")

    def test_read_rejects_non_artifact(self, tmp_path: Path):
        path = tmp_path / "index.json"
        path.write_text('{"version": 1}', encoding="utf-8")

        with pytest.raises(ArtifactError):
            read_artifact(path)

    def test_bare_list_accepted_and_invalid_entries_skipped(self, tmp_path: Path):
        path = tmp_path / "index.json"
        path.write_bytes(
            orjson.dumps(
                [
                    {"id": "article:/articles/a", "url": "/articles/a", "type": "article", "title": "A"},
                    {"id": "broken"},
                ]
            )
        )

        entries = read_artifact(path)

        assert [entry.id for entry in entries] == ["article:/articles/a"]

    def test_load_degrades_to_empty(self, tmp_path: Path):
        corrupt = tmp_path / "corrupt.json"
        corrupt.write_text("{not json", encoding="utf-8")

        assert load_artifact(tmp_path / "missing.json") == []
        assert load_artifact(corrupt) == []


class TestIndexBuilder:
    def test_build_writes_artifact(self, tmp_path: Path, store: ContentStore):
        output = tmp_path / "public" / "search-index.json"

        result = IndexBuilder(store).build(output, generated_at="2024-07-01T00:00:00Z")

        assert result.documents_indexed == len(EXPECTED_ORDER)
        assert result.output_path == output
        assert result.generated_at == "2024-07-01T00:00:00Z"
        ids = [entry.id for entry in load_artifact(output)]
        assert ids == EXPECTED_ORDER
        assert "news:/news/upcoming-change" not in ids

    def test_snippet_length_is_configurable(self, store: ContentStore):
        builder = IndexBuilder(store, snippet_length=20, word_window=0)

        for entry in builder.build_entries():
            if entry.snippet:
                assert len(entry.snippet) <= 20 + len(ELLIPSIS)
