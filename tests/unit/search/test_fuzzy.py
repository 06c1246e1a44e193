"""Unit tests for fuzzy matching / typo correction."""

import pytest

from content_hub.search.fuzzy import (
    find_fuzzy_matches,
    find_prefix_matches,
    get_max_edit_distance,
    levenshtein_distance,
)


@pytest.mark.unit
class TestLevenshteinDistance:
    """Tests for levenshtein_distance function."""

    def test_identical_strings(self):
        assert levenshtein_distance("malta", "malta") == 0

    def test_empty_strings(self):
        assert levenshtein_distance("", "") == 0
        assert levenshtein_distance("abc", "") == 3
        assert levenshtein_distance("", "abc") == 3

    def test_single_edits(self):
        assert levenshtein_distance("visa", "visas") == 1
        assert levenshtein_distance("visas", "visa") == 1
        assert levenshtein_distance("malta", "malte") == 1

    def test_transposition_costs_two(self):
        assert levenshtein_distance("visa", "vias") == 2

    def test_common_typos(self):
        assert levenshtein_distance("portugal", "portgal") == 1
        assert levenshtein_distance("citizenship", "citizneship") == 2

    def test_early_termination(self):
        assert levenshtein_distance("residency", "xyz", max_distance=2) == 3


@pytest.mark.unit
class TestGetMaxEditDistance:
    """Tests for get_max_edit_distance function."""

    def test_very_short_terms_no_fuzzy(self):
        assert get_max_edit_distance(1) == 0
        assert get_max_edit_distance(2) == 0

    def test_scaled_by_length(self):
        assert get_max_edit_distance(3) == 1
        assert get_max_edit_distance(7) == 1
        assert get_max_edit_distance(8) == 2
        assert get_max_edit_distance(13) == 3

    def test_capped(self):
        assert get_max_edit_distance(100) == 6
        assert get_max_edit_distance(100, max_fuzzy=2) == 2

    def test_disabled(self):
        assert get_max_edit_distance(10, fuzzy=0) == 0


@pytest.mark.unit
class TestFindMatches:
    VOCAB = sorted(["golden", "gold", "goldfish", "visa", "visas", "vista", "portugal"])

    def test_prefix_matches_exclude_term_itself(self):
        assert find_prefix_matches("gold", self.VOCAB) == ["golden", "goldfish"]

    def test_prefix_no_match(self):
        assert find_prefix_matches("zzz", self.VOCAB) == []
        assert find_prefix_matches("", self.VOCAB) == []

    def test_fuzzy_sorted_by_distance_then_term(self):
        matches = find_fuzzy_matches("visa", self.VOCAB, max_distance=1)

        assert matches == [("visas", 1), ("vista", 1)]

    def test_fuzzy_zero_budget(self):
        assert find_fuzzy_matches("visa", self.VOCAB, max_distance=0) == []
