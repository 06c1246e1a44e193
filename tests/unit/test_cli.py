"""Unit tests for the content-hub command line."""

import logging
from pathlib import Path

import orjson
import pytest

from content_hub.cli import build_argument_parser, main


pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def base_args(content_root: Path, tmp_path: Path) -> list[str]:
    return ["--content-root", str(content_root), "--index", str(tmp_path / "index.json")]


def run(argv: list[str], capsys) -> tuple[int, object]:
    code = main(argv)
    out = capsys.readouterr().out
    return code, orjson.loads(out) if out.strip() else None


class TestArgumentParser:
    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_argument_parser().parse_args([])

    def test_search_options(self):
        args = build_argument_parser().parse_args(["search", "golden visa", "--types", "program", "--limit", "3"])

        assert args.query == "golden visa"
        assert args.types == "program"
        assert args.limit == 3


class TestCommands:
    def test_build_index(self, base_args, tmp_path: Path, capsys):
        code, payload = run([*base_args, "build-index"], capsys)

        assert code == 0
        assert payload["documents_indexed"] == 5
        assert payload["output_path"] == str((tmp_path / "index.json").resolve())
        assert (tmp_path / "index.json").exists()

    def test_build_index_custom_output(self, base_args, tmp_path: Path, capsys):
        output = tmp_path / "elsewhere" / "search.json"

        code, payload = run([*base_args, "build-index", "--output", str(output)], capsys)

        assert code == 0
        assert output.exists()
        assert payload["output_path"] == str(output.resolve())

    def test_search_after_build(self, base_args, capsys):
        run([*base_args, "build-index"], capsys)

        code, payload = run([*base_args, "search", "golden visa", "--types", "program"], capsys)

        assert code == 0
        assert payload["count"] == 2
        assert {item["type"] for item in payload["items"]} == {"program"}

    def test_related(self, base_args, capsys):
        code, payload = run([*base_args, "related", "/residency/portugal/golden-visa", "--limit", "1"], capsys)

        assert code == 0
        assert payload["items"][0]["url"] == "/residency/greece/golden-visa"

    def test_related_unknown_url(self, base_args, capsys):
        code, payload = run([*base_args, "related", "/residency/atlantis"], capsys)

        assert code == 1
        assert payload is None

    def test_audit_reports_bad_programs(self, base_args, capsys):
        code, payload = run([*base_args, "audit"], capsys)

        assert code == 1
        assert payload["checked"] == 3
        assert payload["bad"] == 3
        assert {entry["missing"][0] for entry in payload["files"]} == {"vertical"}

    def test_audit_clean_tree(self, tmp_path: Path, mdx_writer, capsys):
        root = tmp_path / "clean"
        mdx_writer(
            root,
            "residency/spain/nomad.mdx",
            {
                "title": "Spain Digital Nomad Visa",
                "vertical": "residency",
                "country": "Spain",
                "program": "nomad",
                "minInvestment": 0,
                "timelineMonths": 2,
            },
        )

        code, payload = run(["--content-root", str(root), "audit", "--all"], capsys)

        assert code == 0
        assert payload == {"checked": 1, "bad": 0, "files": []}

    def test_invalid_configuration(self, base_args, monkeypatch, capsys):
        monkeypatch.setenv("SEARCH_DEFAULT_LIMIT", "50")

        assert main([*base_args, "search", "malta"]) == 2
        assert "Invalid configuration" in capsys.readouterr().err
