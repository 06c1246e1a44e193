"""Unit tests for the program metadata audit."""

from pathlib import Path

import pytest

from content_hub.content.audit import (
    audit_program_file,
    audit_programs,
    determine_exit_code,
    format_report,
)


pytestmark = pytest.mark.unit


@pytest.fixture
def audit_root(tmp_path: Path, mdx_writer) -> Path:
    root = tmp_path / "content"
    mdx_writer(
        root,
        "residency/portugal/golden-visa.mdx",
        {
            "vertical": "residency",
            "country": "portugal",
            "program": "golden-visa",
            "minInvestment": 500000,
            "timelineMonths": 6,
        },
    )
    mdx_writer(
        root,
        "residency/greece/golden-visa.mdx",
        {"vertical": "citizenship", "country": "greece", "minInvestment": 250000, "timelineMonths": 4},
    )
    mdx_writer(root, "residency/greece/_country.mdx", {"title": "Greece"})
    mdx_writer(root, "articles/guide.mdx", {"title": "Guide"})
    return root


def test_clean_program_passes(audit_root: Path):
    report = audit_program_file(audit_root, audit_root / "residency" / "portugal" / "golden-visa.mdx")

    assert report is not None
    assert report.ok
    assert report.to_dict()["status"] == "ok"


def test_missing_and_mismatched_placement_keys(audit_root: Path):
    report = audit_program_file(audit_root, audit_root / "residency" / "greece" / "golden-visa.mdx")

    assert report is not None
    assert report.missing == ["program"]
    assert report.mismatched == {"vertical": "citizenship"}
    assert not report.ok
    assert "mismatched=vertical:citizenship" in format_report(report)


def test_non_programs_are_not_audited(audit_root: Path):
    assert audit_program_file(audit_root, audit_root / "residency" / "greece" / "_country.mdx") is None
    assert audit_program_file(audit_root, audit_root / "articles" / "guide.mdx") is None


def test_missing_numeric_facts(tmp_path: Path, mdx_writer):
    root = tmp_path / "content"
    path = mdx_writer(
        root,
        "skilled/canada/express-entry.mdx",
        {"vertical": "skilled", "country": "canada", "program": "express-entry"},
    )

    report = audit_program_file(root, path)

    assert report is not None
    assert report.missing_facts == ["min_investment", "timeline_months"]


def test_unparseable_program_is_reported(tmp_path: Path):
    root = tmp_path / "content"
    path = root / "residency" / "spain" / "broken.mdx"
    path.parent.mkdir(parents=True)
    path.write_text("---\nkey: [x\n---\n", encoding="utf-8")

    report = audit_program_file(root, path)

    assert report is not None
    assert report.error is not None


def test_audit_programs_and_exit_code(audit_root: Path):
    reports = audit_programs(audit_root)

    assert [report.url for report in reports] == ["/residency/greece/golden-visa", "/residency/portugal/golden-visa"]
    assert determine_exit_code(reports) == 1
    assert determine_exit_code([reports[1]]) == 0
