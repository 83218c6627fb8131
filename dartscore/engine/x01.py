"""
WeDart - X01 Engine

Countdown darts (301/501/701 or a custom start) played as a best-of-N
legs match.

Game Rules:
- Every player counts down from the starting score; exactly 0 wins the leg
- Double-in: the first turn of a leg only counts if its last dart is a double
- Double-out: the checkout dart must be a double
- Bust (below 0, to 1 with double-out, or to 0 without the double) voids
  the turn but still consumes it
- Winning more than half of the legs wins the match

The engine owns a single immutable GameState snapshot and replaces it
wholesale on every transition. Rotation is carried by the order of the
players tuple alone; player positions are derived from it.
"""

import logging
import math
import threading
import time
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Mapping

from dartscore.config.settings import Settings, get_settings
from dartscore.engine import dart_hits
from dartscore.engine.base import (
    STANDARD_X01_TYPES,
    InputMode,
    Player,
    PlayerDirectory,
    Score,
)
from dartscore.engine.events import EventListener, EventPayload, GameEvent, emit
from dartscore.engine.validators import coerce_count, validate_game_type, validate_total_legs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class X01Player:
    """
    A player's in-game state, built from a lifetime Player snapshot.

    Attributes:
        profile: Lifetime record as it was when the game started
        score: Remaining countdown for the current leg
        initial_score: Starting score of every leg
        darts_thrown: Darts thrown this leg
        scores: Committed turns this leg, oldest first
        rounds_100_plus: Turns scoring 100-139 this leg
        rounds_140_plus: Turns scoring 140-179 this leg
        rounds_180: Turns scoring exactly 180 this leg
        avg_per_dart: Points per dart this leg
        avg_per_round: Points per three-dart round this leg
        last_round_score: Points counted for the latest turn
        dart_hits: Weighted notation hits this game
        match_darts_thrown: Darts thrown in completed legs
        match_points_scored: Points scored in completed legs
    """
    profile: Player
    score: int
    initial_score: int
    darts_thrown: int = 0
    scores: tuple[Score, ...] = ()
    rounds_100_plus: int = 0
    rounds_140_plus: int = 0
    rounds_180: int = 0
    avg_per_dart: float = 0.0
    avg_per_round: float = 0.0
    last_round_score: int = 0
    dart_hits: Mapping[str, float] = field(default_factory=dict)
    match_darts_thrown: int = 0
    match_points_scored: int = 0

    @property
    def id(self) -> int:
        return self.profile.id

    @property
    def name(self) -> str:
        return self.profile.name

    @property
    def points_scored(self) -> int:
        """Points scored this leg."""
        return sum(entry.score for entry in self.scores)

    @classmethod
    def fresh(cls, profile: Player, starting_score: int) -> "X01Player":
        return cls(profile=profile, score=starting_score, initial_score=starting_score)

    def reset_for_next_leg(self) -> "X01Player":
        """Zero the in-leg fields, folding this leg into the match totals."""
        return replace(
            X01Player.fresh(self.profile, self.initial_score),
            dart_hits=self.dart_hits,
            match_darts_thrown=self.match_darts_thrown + self.darts_thrown,
            match_points_scored=self.match_points_scored + self.points_scored,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "profile": self.profile.to_dict(),
            "score": self.score,
            "initial_score": self.initial_score,
            "darts_thrown": self.darts_thrown,
            "scores": [entry.to_dict() for entry in self.scores],
            "rounds_100_plus": self.rounds_100_plus,
            "rounds_140_plus": self.rounds_140_plus,
            "rounds_180": self.rounds_180,
            "avg_per_dart": self.avg_per_dart,
            "avg_per_round": self.avg_per_round,
            "last_round_score": self.last_round_score,
            "dart_hits": dict(self.dart_hits),
            "match_darts_thrown": self.match_darts_thrown,
            "match_points_scored": self.match_points_scored,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "X01Player":
        return cls(
            profile=Player.from_dict(data["profile"]),
            score=int(data["score"]),
            initial_score=int(data["initial_score"]),
            darts_thrown=int(data.get("darts_thrown", 0)),
            scores=tuple(Score.from_dict(entry) for entry in data.get("scores", ())),
            rounds_100_plus=int(data.get("rounds_100_plus", 0)),
            rounds_140_plus=int(data.get("rounds_140_plus", 0)),
            rounds_180=int(data.get("rounds_180", 0)),
            avg_per_dart=float(data.get("avg_per_dart", 0.0)),
            avg_per_round=float(data.get("avg_per_round", 0.0)),
            last_round_score=int(data.get("last_round_score", 0)),
            dart_hits=dict(data.get("dart_hits") or {}),
            match_darts_thrown=int(data.get("match_darts_thrown", 0)),
            match_points_scored=int(data.get("match_points_scored", 0)),
        )


@dataclass(frozen=True)
class X01GameState:
    """
    Complete state of one X01 match.

    Attributes:
        game_type: Starting score as a string ("301", "501", "701", ...)
        players: Players in rotation order, fixed at game start
        current_player_index: 0-based rotation slot of the player to throw
        is_double_out: Checkout must be on a double
        is_double_in: First turn of a leg must end on a double
        total_legs: Legs in the match (best of)
        current_leg: 1-based leg number
        legs_won: Legs won per player id
        is_game_finished: Match decided
        input_mode: Numeric (per turn) or dart-by-dart entry
    """
    game_type: str
    players: tuple[X01Player, ...]
    current_player_index: int
    is_double_out: bool
    is_double_in: bool
    total_legs: int
    legs_won: Mapping[int, int]
    current_leg: int = 1
    is_game_finished: bool = False
    input_mode: InputMode = InputMode.NUMERIC

    @property
    def starting_score(self) -> int:
        return int(self.game_type)

    @property
    def player_positions(self) -> dict[int, int]:
        """1-based rotation slot per player id."""
        return {player.id: slot for slot, player in enumerate(self.players, start=1)}

    @property
    def current_player(self) -> X01Player:
        return self.players[self.current_player_index]

    def find_player(self, player_id: int) -> X01Player | None:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def standings(self) -> list[X01Player]:
        """Players ranked by legs won, then lowest remaining score (a copy)."""
        return sorted(
            self.players,
            key=lambda p: (-self.legs_won.get(p.id, 0), p.score),
        )

    def with_player(self, index: int, player: X01Player) -> "X01GameState":
        players = list(self.players)
        players[index] = player
        return replace(self, players=tuple(players))

    def to_dict(self) -> dict[str, Any]:
        return {
            "game_type": self.game_type,
            "players": [player.to_dict() for player in self.players],
            "current_player_index": self.current_player_index,
            "is_double_out": self.is_double_out,
            "is_double_in": self.is_double_in,
            "total_legs": self.total_legs,
            "current_leg": self.current_leg,
            "legs_won": {str(pid): legs for pid, legs in self.legs_won.items()},
            "is_game_finished": self.is_game_finished,
            "input_mode": self.input_mode.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "X01GameState":
        players = tuple(X01Player.from_dict(p) for p in data["players"])
        if not players:
            raise ValueError("A stored X01 game must have at least one player.")
        current = int(data.get("current_player_index", 0))
        if not 0 <= current < len(players):
            raise ValueError(f"Current player index {current} is out of range.")
        return cls(
            game_type=validate_game_type(data["game_type"]),
            players=players,
            current_player_index=current,
            is_double_out=bool(data.get("is_double_out", True)),
            is_double_in=bool(data.get("is_double_in", False)),
            total_legs=int(data.get("total_legs", 1)),
            current_leg=int(data.get("current_leg", 1)),
            legs_won={int(pid): int(legs) for pid, legs in data.get("legs_won", {}).items()},
            is_game_finished=bool(data.get("is_game_finished", False)),
            input_mode=InputMode(data.get("input_mode", InputMode.NUMERIC.value)),
        )


@dataclass(frozen=True)
class X01Settings:
    """Settings used when starting X01 games."""
    is_double_out: bool = True
    is_double_in: bool = False
    default_legs: int = 3
    default_game_type: str = "501"
    last_custom_game_type: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "X01Settings":
        return cls(
            is_double_out=settings.x01_double_out,
            is_double_in=settings.x01_double_in,
            default_legs=settings.x01_default_legs,
            default_game_type=settings.x01_default_game_type,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_double_out": self.is_double_out,
            "is_double_in": self.is_double_in,
            "default_legs": self.default_legs,
            "default_game_type": self.default_game_type,
            "last_custom_game_type": self.last_custom_game_type,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "X01Settings":
        custom = data.get("last_custom_game_type")
        return cls(
            is_double_out=bool(data.get("is_double_out", True)),
            is_double_in=bool(data.get("is_double_in", False)),
            default_legs=validate_total_legs(int(data.get("default_legs", 3))),
            default_game_type=validate_game_type(data.get("default_game_type", "501")),
            last_custom_game_type=validate_game_type(custom) if custom else None,
        )


@dataclass(frozen=True)
class LegPlayerStats:
    """One player's figures for a finished leg."""
    id: int
    name: str
    darts_thrown: int
    avg_per_dart: float
    avg_per_round: float
    rounds_100_plus: int
    rounds_140_plus: int
    rounds_180: int
    scores: tuple[Score, ...]


@dataclass(frozen=True)
class LegStats:
    """Summary of the most recently won leg."""
    leg_number: int
    winner_id: int
    players: tuple[LegPlayerStats, ...]


class X01Engine:
    """
    Engine for one live X01 match.

    Each transition reads the current snapshot, builds a new one and swaps
    it in under a lock; calls that cannot apply return the snapshot unchanged.
    """

    GAME = "x01"
    DARTS_PER_ROUND = 3
    MAX_LEG_HISTORY = 20

    def __init__(
        self,
        directory: PlayerDirectory,
        settings: Settings | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        on_event: EventListener | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._directory = directory
        self._clock = clock
        self._on_event = on_event
        self._lock = threading.RLock()
        self._game: X01GameState | None = None
        self._game_settings = X01Settings.from_settings(self._settings)
        self._last_leg_stats: LegStats | None = None
        self._last_dart_notations: tuple[str, ...] = ()
        self._last_submission_at: float | None = None
        # (state before the leg reset, leg stats before the win), newest last
        self._leg_history: deque[tuple[X01GameState, LegStats | None]] = deque(
            maxlen=self.MAX_LEG_HISTORY
        )

    # -- Read access -------------------------------------------------------

    @property
    def current_game(self) -> X01GameState | None:
        return self._game

    @property
    def game_settings(self) -> X01Settings:
        return self._game_settings

    @property
    def last_leg_stats(self) -> LegStats | None:
        return self._last_leg_stats

    @property
    def last_dart_notations(self) -> tuple[str, ...]:
        return self._last_dart_notations

    @property
    def debounce_seconds(self) -> float:
        return self._settings.x01_debounce_ms / 1000

    # -- Rules ---------------------------------------------------------------

    @classmethod
    def is_bust(cls, new_score: int, is_double_out: bool, last_dart_multiplier: int | None) -> bool:
        """
        Check whether a turn leaving new_score is void.

        Args:
            new_score: Remaining score if the turn counted
            is_double_out: Whether the checkout needs a double
            last_dart_multiplier: 1, 2 or 3 for the last dart, if known

        Returns:
            True for a bust
        """
        if new_score < 0:
            return True
        if is_double_out and new_score == 1:
            return True
        return is_double_out and new_score == 0 and last_dart_multiplier != 2

    @classmethod
    def is_checkout(cls, new_score: int, is_double_out: bool, last_dart_multiplier: int | None) -> bool:
        """True when the turn wins the leg."""
        return new_score == 0 and (not is_double_out or last_dart_multiplier == 2)

    @classmethod
    def calculate_averages(cls, scores: Iterable[Score], darts_thrown: int) -> tuple[float, float]:
        """
        Points per dart and per three-dart round.

        Returns:
            Tuple of (avg_per_dart, avg_per_round), zeros before the first dart
        """
        if darts_thrown <= 0:
            return (0.0, 0.0)
        total = sum(entry.score for entry in scores)
        rounds = math.ceil(darts_thrown / cls.DARTS_PER_ROUND)
        return (total / darts_thrown, total / rounds)

    @classmethod
    def count_high_rounds(cls, scores: Iterable[Score]) -> tuple[int, int, int]:
        """Count turns in the 100-139, 140-179 and 180 bands."""
        r100 = r140 = r180 = 0
        for entry in scores:
            if 100 <= entry.score < 140:
                r100 += 1
            elif 140 <= entry.score < 180:
                r140 += 1
            elif entry.score == 180:
                r180 += 1
        return (r100, r140, r180)

    # -- Transitions ----------------------------------------------------------

    def start_game(
        self,
        game_type: str | int,
        player_ids: Iterable[int],
        total_legs: int | None = None,
        starting_player_index: int = 0,
    ) -> X01GameState | None:
        """
        Start a new match, replacing any live one.

        Ids missing from the directory are dropped. If none resolve, or the
        game type / leg count is invalid, nothing changes.

        Returns:
            The new snapshot, or the previous one when creation was aborted
        """
        with self._lock:
            try:
                game_type = validate_game_type(game_type)
                total_legs = validate_total_legs(
                    self._game_settings.default_legs if total_legs is None else total_legs
                )
            except ValueError as exc:
                logger.error("Cannot start X01 game: %s", exc)
                return self._game

            starting_score = int(game_type)
            players: list[X01Player] = []
            for player_id in player_ids:
                profile = self._directory.find_by_id(player_id)
                if profile is None:
                    logger.warning("Player %s not found in directory, dropping from X01 game", player_id)
                    continue
                players.append(X01Player.fresh(profile, starting_score))

            if not players:
                logger.error("No players resolved for X01 game, not starting")
                return self._game

            if game_type not in STANDARD_X01_TYPES:
                self._game_settings = replace(self._game_settings, last_custom_game_type=game_type)

            self._game = X01GameState(
                game_type=game_type,
                players=tuple(players),
                current_player_index=starting_player_index % len(players),
                is_double_out=self._game_settings.is_double_out,
                is_double_in=self._game_settings.is_double_in,
                total_legs=total_legs,
                legs_won={player.id: 0 for player in players},
            )
            self._last_leg_stats = None
            self._last_dart_notations = ()
            self._last_submission_at = None
            self._leg_history.clear()

            logger.info(
                "Started X01 %s, %d legs, players %s",
                game_type, total_legs, [p.id for p in players],
            )
            emit(self._on_event, EventPayload(
                event=GameEvent.GAME_STARTED,
                game=self.GAME,
                data={"game_type": game_type, "player_ids": [p.id for p in players]},
            ))
            return self._game

    def record_score(
        self,
        score: int,
        darts_used: int,
        last_dart_multiplier: int | None = None,
        recent_dart_notations: Iterable[str] = (),
    ) -> X01GameState | None:
        """
        Record one turn for the player whose slot is current.

        Args:
            score: Points thrown this turn
            darts_used: Darts used (1-3)
            last_dart_multiplier: Multiplier of the last dart (1, 2 or 3)
            recent_dart_notations: Notations of the darts thrown, if entered

        Returns:
            The updated snapshot (unchanged for ignored submissions)
        """
        with self._lock:
            now = self._clock()
            if (
                self._last_submission_at is not None
                and now - self._last_submission_at < self.debounce_seconds
            ):
                logger.debug("Ignoring duplicate X01 submission within debounce window")
                return self._game

            game = self._game
            if game is None:
                logger.debug("record_score called with no live X01 game")
                return None
            if game.is_game_finished:
                logger.debug("record_score called on a finished X01 match")
                return game
            self._last_submission_at = now

            score = coerce_count(score)
            darts_used = coerce_count(darts_used)
            notations = tuple(recent_dart_notations)
            self._last_dart_notations = notations

            index = game.current_player_index
            player = game.current_player

            if game.is_double_in and not player.scores and last_dart_multiplier != 2:
                self._game = self._advance(game.with_player(index, self._void_turn(player, darts_used)))
                emit(self._on_event, EventPayload(
                    event=GameEvent.DOUBLE_IN_MISSED,
                    game=self.GAME,
                    player_id=player.id,
                    data={"score": score, "darts": darts_used},
                ))
                return self._game

            new_score = player.score - score
            if self.is_bust(new_score, game.is_double_out, last_dart_multiplier):
                self._game = self._advance(game.with_player(index, self._void_turn(player, darts_used)))
                emit(self._on_event, EventPayload(
                    event=GameEvent.PLAYER_BUST,
                    game=self.GAME,
                    player_id=player.id,
                    data={"score": score, "remaining": player.score},
                ))
                return self._game

            committed = self._commit_turn(player, score, darts_used, game.input_mode, notations)
            self._game = self._advance(game.with_player(index, committed))
            emit(self._on_event, EventPayload(
                event=GameEvent.SCORE_RECORDED,
                game=self.GAME,
                player_id=player.id,
                data={"score": score, "remaining": committed.score},
            ))

            if self.is_checkout(new_score, game.is_double_out, last_dart_multiplier):
                self.handle_leg_win(player.id)
            return self._game

    def handle_leg_win(self, winner_id: int) -> X01GameState | None:
        """
        Credit a leg to winner_id and either finish the match or set up the next leg.

        Returns:
            The updated snapshot
        """
        with self._lock:
            game = self._game
            if game is None:
                return None
            if game.find_player(winner_id) is None:
                logger.warning("Leg winner %s is not in the current X01 game", winner_id)
                return game

            self._leg_history.append((game, self._last_leg_stats))
            self._last_leg_stats = self._build_leg_stats(game, winner_id)
            legs_won = dict(game.legs_won)
            legs_won[winner_id] = legs_won.get(winner_id, 0) + 1

            if legs_won[winner_id] > game.total_legs / 2:
                self._game = replace(game, legs_won=legs_won, is_game_finished=True)
                logger.info("Player %s won the X01 match", winner_id)
                emit(self._on_event, EventPayload(
                    event=GameEvent.MATCH_WON,
                    game=self.GAME,
                    player_id=winner_id,
                    data={"legs_won": dict(legs_won)},
                ))
                return self._game

            self._game = replace(
                game,
                players=tuple(player.reset_for_next_leg() for player in game.players),
                current_leg=game.current_leg + 1,
                current_player_index=game.current_leg % len(game.players),
                legs_won=legs_won,
            )
            emit(self._on_event, EventPayload(
                event=GameEvent.LEG_WON,
                game=self.GAME,
                player_id=winner_id,
                data={"leg": game.current_leg, "legs_won": dict(legs_won)},
            ))
            return self._game

    def undo_last_score(self) -> X01GameState | None:
        """
        Take back the latest turn of the player in the previous slot.

        In dart input mode only the last dart of a multi-dart turn is removed.
        Right after a leg or match was won, the state before that win is
        brought back first, so the checkout turn itself is taken back.

        Returns:
            The updated snapshot (unchanged if that player has no turns)
        """
        with self._lock:
            game = self._game
            if game is None:
                return None

            leg_just_won = game.is_game_finished or not any(p.scores for p in game.players)
            if leg_just_won and self._leg_history:
                game, self._last_leg_stats = self._leg_history.pop()
                self._game = game

            previous = (game.current_player_index - 1) % len(game.players)
            player = game.players[previous]
            if not player.scores:
                return game

            last = player.scores[-1]
            if game.input_mode is InputMode.NUMERIC or last.darts <= 1:
                scores = player.scores[:-1]
                darts_thrown = player.darts_thrown - last.darts
                restored = last.score
            else:
                dart_value = math.floor(last.score / last.darts + 0.5)
                scores = player.scores[:-1] + (Score(last.score - dart_value, last.darts - 1),)
                darts_thrown = player.darts_thrown - 1
                restored = dart_value

            legs_won = dict(game.legs_won)
            if game.is_game_finished and player.score == 0:
                legs_won[player.id] = max(0, legs_won.get(player.id, 0) - 1)
                self._last_leg_stats = None

            r100, r140, r180 = self.count_high_rounds(scores)
            avg_per_dart, avg_per_round = self.calculate_averages(scores, darts_thrown)
            undone = replace(
                player,
                score=player.score + restored,
                scores=scores,
                darts_thrown=darts_thrown,
                rounds_100_plus=r100,
                rounds_140_plus=r140,
                rounds_180=r180,
                avg_per_dart=avg_per_dart,
                avg_per_round=avg_per_round,
                last_round_score=scores[-1].score if scores else 0,
            )

            self._game = replace(
                game.with_player(previous, undone),
                current_player_index=previous,
                is_game_finished=False,
                legs_won=legs_won,
            )
            emit(self._on_event, EventPayload(
                event=GameEvent.SCORE_UNDONE,
                game=self.GAME,
                player_id=player.id,
                data={"restored": restored, "remaining": undone.score},
            ))
            return self._game

    def end_game(self) -> list[Player]:
        """
        Merge the match into each player's lifetime record and clear the game.

        Returns:
            The lifetime records written back to the directory
        """
        with self._lock:
            game = self._game
            if game is None:
                return []

            updated: list[Player] = []
            for game_player in game.players:
                darts = game_player.match_darts_thrown + game_player.darts_thrown
                if darts == 0:
                    continue
                lifetime = self._directory.find_by_id(game_player.id)
                if lifetime is None:
                    logger.warning("Player %s vanished from directory, stats not merged", game_player.id)
                    continue

                points = game_player.match_points_scored + game_player.points_scored
                total_darts = lifetime.total_darts_thrown + darts
                total_points = lifetime.total_points_scored + points
                updated.append(replace(
                    lifetime,
                    games=lifetime.games + 1,
                    average=total_points / total_darts if total_darts > 0 else 0.0,
                    total_darts_thrown=total_darts,
                    total_points_scored=total_points,
                    dart_hits=dart_hits.combine_hits(lifetime.dart_hits, game_player.dart_hits),
                ))

            if updated:
                self._directory.upsert_many(updated)

            self._game = None
            self._last_leg_stats = None
            self._last_dart_notations = ()
            self._leg_history.clear()
            logger.info("Ended X01 game, merged stats for %d players", len(updated))
            emit(self._on_event, EventPayload(
                event=GameEvent.GAME_ENDED,
                game=self.GAME,
                data={"merged_player_ids": [p.id for p in updated]},
            ))
            return updated

    # -- Settings ------------------------------------------------------------

    def update_game_settings(self, **changes: Any) -> X01Settings:
        """
        Change the settings used for the next game.

        Raises:
            ValueError: If a game type or leg count is invalid
            TypeError: If an unknown setting is passed
        """
        with self._lock:
            if "default_game_type" in changes:
                changes["default_game_type"] = validate_game_type(changes["default_game_type"])
            if "default_legs" in changes:
                changes["default_legs"] = validate_total_legs(changes["default_legs"])
            self._game_settings = replace(self._game_settings, **changes)
            return self._game_settings

    def set_input_mode(self, mode: InputMode | str) -> X01GameState | None:
        with self._lock:
            if self._game is None:
                return None
            self._game = replace(self._game, input_mode=InputMode(mode))
            return self._game

    # -- Favorite darts ------------------------------------------------------

    def most_frequent_darts(self, player_id: int, limit: int = 5) -> list[str]:
        """Favorite darts for the input surface, preferring the current game."""
        game = self._game
        game_player = game.find_player(player_id) if game else None
        if game_player is not None:
            return dart_hits.current_game_favorites(
                game_player.dart_hits, self._last_dart_notations, limit
            )

        lifetime = self._directory.find_by_id(player_id)
        if lifetime is not None and lifetime.dart_hits:
            ranked = sorted(lifetime.dart_hits.items(), key=lambda item: item[1], reverse=True)
            return [notation for notation, _ in ranked[:limit]]
        return list(dart_hits.DEFAULT_CURRENT_GAME_DARTS[:limit])

    def all_time_most_frequent_darts(self, player_id: int, limit: int = 5) -> list[str]:
        """Favorite darts from the lifetime record, then the current game."""
        lifetime = self._directory.find_by_id(player_id)
        game_player = self._game.find_player(player_id) if self._game else None
        return dart_hits.all_time_favorites(
            lifetime.dart_hits if lifetime else {},
            game_player.dart_hits if game_player else None,
            limit,
        )

    # -- Persistence -----------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        """State worth persisting across sessions."""
        with self._lock:
            return {
                "game_settings": self._game_settings.to_dict(),
                "current_game": self._game.to_dict() if self._game else None,
                "last_dart_notations": list(self._last_dart_notations),
            }

    def restore(self, data: Mapping[str, Any]) -> None:
        """
        Replace engine state with a persisted snapshot.

        Raises:
            KeyError, ValueError: If the snapshot is malformed
        """
        game_settings = X01Settings.from_dict(data.get("game_settings") or {})
        current = data.get("current_game")
        game = X01GameState.from_dict(current) if current else None
        with self._lock:
            self._game_settings = game_settings
            self._game = game
            self._last_dart_notations = tuple(data.get("last_dart_notations") or ())
            self._last_leg_stats = None
            self._last_submission_at = None
            self._leg_history.clear()

    # -- Helpers ------------------------------------------------------------

    def _advance(self, game: X01GameState) -> X01GameState:
        return replace(
            game,
            current_player_index=(game.current_player_index + 1) % len(game.players),
        )

    def _void_turn(self, player: X01Player, darts_used: int) -> X01Player:
        """Record a zero-value turn that still consumes darts."""
        scores = player.scores + (Score(0, darts_used),)
        darts_thrown = player.darts_thrown + darts_used
        avg_per_dart, avg_per_round = self.calculate_averages(scores, darts_thrown)
        return replace(
            player,
            scores=scores,
            darts_thrown=darts_thrown,
            last_round_score=0,
            avg_per_dart=avg_per_dart,
            avg_per_round=avg_per_round,
        )

    def _commit_turn(
        self,
        player: X01Player,
        score: int,
        darts_used: int,
        input_mode: InputMode,
        notations: tuple[str, ...],
    ) -> X01Player:
        scores = player.scores + (Score(score, darts_used),)
        darts_thrown = player.darts_thrown + darts_used
        r100, r140, r180 = self.count_high_rounds((Score(score, darts_used),))
        avg_per_dart, avg_per_round = self.calculate_averages(scores, darts_thrown)

        hits = player.dart_hits
        if notations:
            hits = dart_hits.merge_dart_hits(hits, notations)
        elif input_mode is InputMode.DART and score > 0:
            hits = dart_hits.merge_inferred_hits(hits, dart_hits.infer_notations_from_score(score))

        return replace(
            player,
            score=player.score - score,
            scores=scores,
            darts_thrown=darts_thrown,
            last_round_score=score,
            rounds_100_plus=player.rounds_100_plus + r100,
            rounds_140_plus=player.rounds_140_plus + r140,
            rounds_180=player.rounds_180 + r180,
            avg_per_dart=avg_per_dart,
            avg_per_round=avg_per_round,
            dart_hits=hits,
        )

    def _build_leg_stats(self, game: X01GameState, winner_id: int) -> LegStats:
        players = []
        for player in game.players:
            points = player.initial_score - player.score
            darts = player.darts_thrown
            players.append(LegPlayerStats(
                id=player.id,
                name=player.name,
                darts_thrown=darts,
                avg_per_dart=points / darts if darts > 0 else 0.0,
                avg_per_round=points / math.ceil(darts / self.DARTS_PER_ROUND) if darts > 0 else 0.0,
                rounds_100_plus=player.rounds_100_plus,
                rounds_140_plus=player.rounds_140_plus,
                rounds_180=player.rounds_180,
                scores=player.scores,
            ))
        return LegStats(leg_number=game.current_leg, winner_id=winner_id, players=tuple(players))
