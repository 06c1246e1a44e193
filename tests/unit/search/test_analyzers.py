"""Unit tests for text analyzers."""

import pytest

from content_hub.search.analyzers import StandardAnalyzer, analyze_terms, get_analyzer


pytestmark = pytest.mark.unit


def test_standard_analyzer_lowercases_and_removes_stopwords():
    tokens = StandardAnalyzer()("Residency by Investment in the EU")

    assert [token.text for token in tokens] == ["residency", "investment", "eu"]
    assert [token.position for token in tokens] == [0, 1, 2]


def test_accent_folding():
    assert analyze_terms(StandardAnalyzer(), "Curaçao São Tomé") == ["curacao", "sao", "tome"]


def test_hyphens_split_words():
    assert analyze_terms(StandardAnalyzer(), "start-up visa") == ["start", "up", "visa"]


def test_analyze_terms_deduplicates_in_order():
    assert analyze_terms(StandardAnalyzer(), "visa Visa golden visa") == ["visa", "golden"]


def test_get_analyzer_by_name():
    assert analyze_terms(get_analyzer(None), "the visa") == ["visa"]

    with pytest.raises(ValueError, match="Unknown analyzer"):
        get_analyzer("klingon")
