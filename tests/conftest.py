"""Shared test fixtures and configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from content_hub.config import Settings
from content_hub.services.cache_service import ContentStore


# Every field of Settings is read from the environment; tests start clean.
SETTINGS_ENV = [name.upper() for name in Settings.model_fields]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Drop ambient configuration and keep any ``.env`` lookup inside tmp_path."""
    for key in SETTINGS_ENV:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


def write_doc(root: Path, relative: str, meta: dict[str, Any] | None = None, body: str = "") -> Path:
    """Write an .mdx file with an optional YAML front matter block."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    text = body
    if meta is not None:
        text = f"---\n{yaml.safe_dump(meta, sort_keys=False)}---\n{body}"
    path.write_text(text, encoding="utf-8")
    return path


GOLDEN_VISA_BODY = """Portugal offers residency through investment in funds.

### Eligibility
Non-EU nationals over 18.

### Costs & Fees
Government fees apply.

### Costs & Fees
Legal fees apply too.
"""


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    """A small content tree with every document kind."""
    root = tmp_path / "content"
    write_doc(
        root,
        "residency/portugal/_country.mdx",
        {"title": "Portugal Residency", "countryName": "Portugal", "tags": ["europe"], "updated": "2024-03-01"},
        "Portugal overview.\n",
    )
    write_doc(
        root,
        "residency/portugal/golden-visa.mdx",
        {
            "title": "Portugal Golden Visa",
            "countryName": "Portugal",
            "tags": ["real estate", "golden visa"],
            "minInvestment": 500000,
            "timelineMonths": 6,
            "currency": "EUR",
            "date": "2024-01-10",
            "updated": "2024-04-01",
        },
        GOLDEN_VISA_BODY,
    )
    write_doc(
        root,
        "residency/greece/golden-visa.mdx",
        {
            "title": "Greece Golden Visa",
            "countryName": "Greece",
            "tags": ["real estate", "golden visa"],
            "minInvestment": 250000,
            "timelineMonths": 4,
            "date": "2024-02-01",
        },
        "Greece grants residency permits to property buyers.\n",
    )
    write_doc(
        root,
        "citizenship/malta/mein.mdx",
        {
            "title": "Malta Citizenship by Naturalisation",
            "countryName": "Malta",
            "tags": ["donation"],
            "minInvestment": 690000,
            "timelineMonths": 14,
            "date": "2023-11-20",
        },
        "Malta grants citizenship for exceptional services by direct investment.\n",
    )
    write_doc(
        root,
        "articles/portugal-guide.mdx",
        {
            "title": "Guide to the Portugal Golden Visa",
            "summary": "Everything about moving to Portugal through investment.",
            "tags": ["golden visa"],
            "countries": ["Portugal"],
            "programs": ["golden-visa"],
            "date": "2024-05-01",
        },
        "## Background\nLong read.\n### Steps\nApply.\n",
    )
    write_doc(
        root,
        "news/upcoming-change.mdx",
        {"title": "Upcoming change", "draft": True, "date": "2024-06-01"},
        "Not yet public.\n",
    )
    return root


@pytest.fixture
def store(content_root: Path) -> ContentStore:
    return ContentStore(content_root)


@pytest.fixture
def settings(tmp_path: Path, content_root: Path) -> Settings:
    return Settings(
        content_root=str(content_root),
        index_path=str(tmp_path / "public" / "search-index.json"),
        loader_max_workers=1,
        log_json=False,
    )


@pytest.fixture
def mdx_writer():
    """Expose :func:`write_doc` to tests that build their own trees."""
    return write_doc
