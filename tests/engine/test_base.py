"""
WeDart - Base Classes Tests

Tests for dataclasses, enums, and validation utilities.
"""

from dataclasses import FrozenInstanceError

import pytest

from dartscore.engine.base import (
    HalveItMode,
    InputMode,
    Player,
    RoundType,
    Score,
    STANDARD_X01_TYPES,
)
from dartscore.engine.validators import (
    coerce_count,
    validate_game_type,
    validate_total_legs,
)


class TestEnums:
    """Tests for the engine enums."""

    def test_input_mode_values(self):
        assert InputMode("numeric") is InputMode.NUMERIC
        assert InputMode("dart") is InputMode.DART

    def test_halve_it_mode_values(self):
        assert HalveItMode("default") is HalveItMode.DEFAULT
        assert HalveItMode("41") is HalveItMode.FORTY_ONE

    def test_target_score_round_value(self):
        assert RoundType.TARGET_SCORE.value == "target-score"

    def test_standard_types(self):
        assert STANDARD_X01_TYPES == {"301", "501", "701"}


class TestPlayer:
    """Tests for Player dataclass."""

    def test_defaults(self):
        player = Player(id=1, name="Alice")
        assert player.games == 0
        assert player.average == 0.0
        assert player.dart_hits == {}

    def test_immutable(self):
        player = Player(id=1, name="Alice")
        with pytest.raises(FrozenInstanceError):
            player.name = "Bob"

    def test_dict_round_trip(self):
        player = Player(
            id=4, name="Dee", games=2, average=18.5,
            total_darts_thrown=60, total_points_scored=1110, dart_hits={"T20": 3.5},
        )
        assert Player.from_dict(player.to_dict()) == player

    def test_from_dict_fills_missing_stats(self):
        player = Player.from_dict({"id": "7", "name": "Eve", "dart_hits": None})
        assert player == Player(id=7, name="Eve")


class TestScore:
    """Tests for Score dataclass."""

    def test_to_dict(self):
        assert Score(60, 3).to_dict() == {"score": 60, "darts": 3}

    def test_from_dict(self):
        assert Score.from_dict({"score": "45", "darts": 2}) == Score(45, 2)


class TestCoerceCount:
    """Tests for coerce_count()."""

    @pytest.mark.parametrize("value,expected", [
        (3, 3),
        (0, 0),
        (None, 0),
        (True, 0),
        (2.0, 2),
        (2.5, 0),
        ("12", 12),
        (" 7 ", 7),
        ("-4", -4),
        ("abc", 0),
        ([1], 0),
    ])
    def test_values(self, value, expected):
        assert coerce_count(value) == expected


class TestValidateGameType:
    """Tests for validate_game_type()."""

    @pytest.mark.parametrize("value,expected", [
        ("501", "501"),
        (301, "301"),
        ("0701", "701"),
        ("1001", "1001"),
    ])
    def test_valid(self, value, expected):
        assert validate_game_type(value) == expected

    @pytest.mark.parametrize("value", ["", "abc", "0", "-501", "50.5", None])
    def test_invalid(self, value):
        with pytest.raises(ValueError, match="positive whole number"):
            validate_game_type(value)


class TestValidateTotalLegs:
    """Tests for validate_total_legs()."""

    def test_valid(self):
        assert validate_total_legs(1) == 1
        assert validate_total_legs(7) == 7

    def test_zero_raises(self):
        with pytest.raises(ValueError, match="at least 1"):
            validate_total_legs(0)

    @pytest.mark.parametrize("value", [True, "3", 2.0])
    def test_non_integer_raises(self, value):
        with pytest.raises(ValueError, match="must be an integer"):
            validate_total_legs(value)
