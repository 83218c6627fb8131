"""
WeDart - Dart Hit Statistics Tests
"""

import pytest

from dartscore.engine.dart_hits import (
    all_time_favorites,
    base_number,
    combine_hits,
    current_game_favorites,
    infer_notations_from_score,
    merge_dart_hits,
    merge_inferred_hits,
    ranked_notations,
)


class TestBaseNumber:

    @pytest.mark.parametrize("notation,expected", [
        ("T20", "20"),
        ("D16", "16"),
        ("19", "19"),
        ("BULL", "BULL"),
    ])
    def test_base_number(self, notation, expected):
        assert base_number(notation) == expected


class TestMergeDartHits:
    """Tests for merge_dart_hits() and merge_inferred_hits()."""

    def test_multiplied_dart_credits_base(self):
        assert merge_dart_hits({}, ["D16"]) == {"D16": 1, "16": 0.5}

    def test_single_digit_boost(self):
        assert merge_dart_hits({}, ["7"]) == {"7": 1.5}

    def test_two_digit_single_has_no_boost(self):
        assert merge_dart_hits({}, ["19"]) == {"19": 1}

    def test_adds_to_existing_table_without_mutating_it(self):
        hits = {"T20": 2}
        merged = merge_dart_hits(hits, ["T20"])
        assert merged == {"T20": 3, "20": 0.5}
        assert hits == {"T20": 2}

    def test_inferred_has_no_single_digit_boost(self):
        assert merge_inferred_hits({}, ["T20", "7"]) == {"T20": 1, "20": 0.5, "7": 1}


class TestInferNotations:
    """Tests for infer_notations_from_score()."""

    @pytest.mark.parametrize("score,expected", [
        (0, []),
        (-5, []),
        (180, ["T20", "T20", "T20"]),
        (100, ["T20", "D20"]),
        (41, ["T11", "D4"]),
        (61, ["T20", "1"]),
        (95, ["T20", "20", "15"]),
        (35, ["20", "15"]),
        (12, ["12"]),
    ])
    def test_infer(self, score, expected):
        assert infer_notations_from_score(score) == expected

    def test_common_patterns_sum_to_score(self):
        values = {"T20": 60, "D10": 20, "D20": 40, "T19": 57, "BULL": 50, "T15": 45, "T11": 33, "D4": 8}
        for score in (180, 140, 100, 60, 57, 50, 45, 41):
            assert sum(values[n] for n in infer_notations_from_score(score)) == score


class TestFavorites:
    """Tests for ranking and favorite dart selection."""

    def test_combine_hits(self):
        assert combine_hits({"T20": 1}, {"T20": 2, "19": 1}) == {"T20": 3, "19": 1}

    def test_ranked_ignores_zero_counts(self):
        assert ranked_notations({"T20": 2, "19": 0, "D16": 3}) == ["D16", "T20"]

    def test_ranked_is_stable_on_ties(self):
        assert ranked_notations({"19": 1, "T20": 1}) == ["19", "T20"]

    def test_current_game_enough_data(self):
        hits = {"T20": 4, "20": 2, "T19": 1, "19": 0.5}
        assert current_game_favorites(hits, [], limit=3) == ["T20", "20", "T19"]

    def test_current_game_includes_recent(self):
        assert current_game_favorites({"T20": 1}, ["D8", "T20"]) == ["T20", "D8", "20", "T19", "19"]

    def test_current_game_defaults(self):
        assert current_game_favorites({}, []) == ["T20", "20", "T19", "19", "D16"]

    def test_all_time_prefers_lifetime(self):
        assert all_time_favorites({"D16": 2}, {"T20": 9}) == ["D16"]

    def test_all_time_falls_back_to_game_then_defaults(self):
        assert all_time_favorites({}, {"T20": 9}) == ["T20"]
        assert all_time_favorites({}, None, limit=3) == ["T20", "T19", "D16"]
