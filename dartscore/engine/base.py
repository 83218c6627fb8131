"""
WeDart - Game Engine Base Classes

This module defines the foundational data structures and enums shared by
the X01 and Halve-It engines. All classes are immutable (frozen dataclasses);
engines replace snapshots wholesale instead of mutating them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Protocol, Sequence


class InputMode(Enum):
    """How X01 scores are entered by the input surface."""
    NUMERIC = "numeric"  # one total per turn
    DART = "dart"        # dart-by-dart entry


class HalveItMode(Enum):
    """Available Halve-It round templates."""
    DEFAULT = "default"
    FORTY_ONE = "41"


class RoundType(Enum):
    """Scoring rule applied to a Halve-It round."""
    SCORING = "scoring"
    NUMBER = "number"
    DOUBLE = "double"
    TREBLE = "treble"
    BULL = "bull"
    TARGET_SCORE = "target-score"


STANDARD_X01_TYPES = frozenset({"301", "501", "701"})


@dataclass(frozen=True)
class Player:
    """
    Lifetime player record held by the player directory.

    Attributes:
        id: Unique player id
        name: Display name
        games: Number of finished X01 games
        average: Lifetime points per dart
        total_darts_thrown: Lifetime darts thrown
        total_points_scored: Lifetime points scored
        dart_hits: Weighted hit count per dart notation ("T20", "D16", ...)
    """
    id: int
    name: str
    games: int = 0
    average: float = 0.0
    total_darts_thrown: int = 0
    total_points_scored: int = 0
    dart_hits: Mapping[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "games": self.games,
            "average": self.average,
            "total_darts_thrown": self.total_darts_thrown,
            "total_points_scored": self.total_points_scored,
            "dart_hits": dict(self.dart_hits),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Player":
        return cls(
            id=int(data["id"]),
            name=str(data["name"]),
            games=int(data.get("games", 0)),
            average=float(data.get("average", 0.0)),
            total_darts_thrown=int(data.get("total_darts_thrown", 0)),
            total_points_scored=int(data.get("total_points_scored", 0)),
            dart_hits=dict(data.get("dart_hits") or {}),
        )


@dataclass(frozen=True)
class Score:
    """
    One committed X01 turn.

    Attributes:
        score: Points counted for the turn (0 for a bust or missed double-in)
        darts: Darts used in the turn
    """
    score: int
    darts: int

    def to_dict(self) -> dict[str, int]:
        return {"score": self.score, "darts": self.darts}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Score":
        return cls(score=int(data["score"]), darts=int(data["darts"]))


class PlayerDirectory(Protocol):
    """Lookup and write-back of lifetime player records."""

    def find_by_id(self, player_id: int) -> Player | None:
        ...

    def upsert_many(self, players: Sequence[Player]) -> None:
        ...
