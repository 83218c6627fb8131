"""
WeDart - Halve-It Engine

A fixed sequence of rounds, each with its own target. Hitting the target
adds to the running total; missing it halves the total.

Game Rules:
- "default" mode: 10 rounds (scoring, 15, 16, double, 17, 18, treble, 19, 20, bull)
- "41" mode: 8 rounds (19, 18, double, 17, exactly-41, treble, 20, bull)
- Number/bull rounds: hits x target value (bull = 25), 0 hits halves
- Scoring/double/treble rounds: points added, 0 points halves
- Target-score round: exactly 41 adds 41, anything else halves
- Halving rounds down

Each round stores the player's running total after that round, so
undoing an early round replays every later round of the same player.
Seating order is fixed at game start and never follows the scores.
"""

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping

from dartscore.engine.base import HalveItMode, PlayerDirectory, RoundType
from dartscore.engine.events import EventListener, EventPayload, GameEvent, emit
from dartscore.engine.validators import coerce_count

logger = logging.getLogger(__name__)

BULL = "Bull"
BULL_VALUE = 25
TARGET_SCORE = 41

ROUND_TEMPLATES: dict[HalveItMode, tuple[tuple[RoundType, int | str | None], ...]] = {
    HalveItMode.DEFAULT: (
        (RoundType.SCORING, None),
        (RoundType.NUMBER, 15),
        (RoundType.NUMBER, 16),
        (RoundType.DOUBLE, None),
        (RoundType.NUMBER, 17),
        (RoundType.NUMBER, 18),
        (RoundType.TREBLE, None),
        (RoundType.NUMBER, 19),
        (RoundType.NUMBER, 20),
        (RoundType.BULL, BULL),
    ),
    HalveItMode.FORTY_ONE: (
        (RoundType.NUMBER, 19),
        (RoundType.NUMBER, 18),
        (RoundType.DOUBLE, None),
        (RoundType.NUMBER, 17),
        (RoundType.TARGET_SCORE, TARGET_SCORE),
        (RoundType.TREBLE, None),
        (RoundType.NUMBER, 20),
        (RoundType.BULL, BULL),
    ),
}


@dataclass(frozen=True)
class RoundInput:
    """
    Raw submission for a round. Which field matters depends on the round type.

    Attributes:
        hits: Target hits (number and bull rounds)
        points: Points thrown (scoring, double and treble rounds)
        total_score: Turn total (target-score round)
    """
    hits: int | None = None
    points: int | None = None
    total_score: int | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RoundInput":
        """Build from {hits|points|total_score}; camelCase totalScore is accepted too."""
        total = data.get("total_score", data.get("totalScore"))
        return cls(
            hits=None if data.get("hits") is None else coerce_count(data.get("hits")),
            points=None if data.get("points") is None else coerce_count(data.get("points")),
            total_score=None if total is None else coerce_count(total),
        )

    def to_dict(self) -> dict[str, int]:
        fields = {"hits": self.hits, "points": self.points, "total_score": self.total_score}
        return {key: value for key, value in fields.items() if value is not None}


@dataclass(frozen=True)
class RoundEntry:
    """A recorded submission and the running total it produced."""
    input: RoundInput
    score: int

    def to_dict(self) -> dict[str, int]:
        return {**self.input.to_dict(), "score": self.score}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RoundEntry":
        return cls(input=RoundInput.from_mapping(data), score=int(data["score"]))


@dataclass(frozen=True)
class HalveItRound:
    """
    One round of the sequence.

    Attributes:
        round_number: 1-based position in the sequence
        round_type: Scoring rule for the round
        target: Number 15-20, "Bull", 41, or None
        player_scores: Recorded entry per player id
    """
    round_number: int
    round_type: RoundType
    target: int | str | None = None
    player_scores: Mapping[int, RoundEntry] = field(default_factory=dict)

    @property
    def target_value(self) -> int:
        """Points per hit for number and bull rounds."""
        if isinstance(self.target, int):
            return self.target
        if self.target == BULL:
            return BULL_VALUE
        return 0

    def with_entry(self, player_id: int, entry: RoundEntry | None) -> "HalveItRound":
        """Copy with a player's entry set, or removed when entry is None."""
        scores = dict(self.player_scores)
        if entry is None:
            scores.pop(player_id, None)
        else:
            scores[player_id] = entry
        return replace(self, player_scores=scores)

    def to_dict(self) -> dict[str, Any]:
        return {
            "round_number": self.round_number,
            "round_type": self.round_type.value,
            "target": self.target,
            "player_scores": {
                str(pid): entry.to_dict() for pid, entry in self.player_scores.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HalveItRound":
        return cls(
            round_number=int(data["round_number"]),
            round_type=RoundType(data["round_type"]),
            target=data.get("target"),
            player_scores={
                int(pid): RoundEntry.from_dict(entry)
                for pid, entry in (data.get("player_scores") or {}).items()
            },
        )


@dataclass(frozen=True)
class HalveItPlayer:
    """
    A seated Halve-It player.

    Attributes:
        id: Player id
        name: Display name
        total_score: Running total after the latest recorded round
        rounds: Rounds this player has completed, in sequence order
        order_index: Seat assigned at game start, never changes
    """
    id: int
    name: str
    order_index: int
    total_score: int = 0
    rounds: tuple[HalveItRound, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "order_index": self.order_index,
            "total_score": self.total_score,
        }


@dataclass(frozen=True)
class LastScore:
    """Pointer to the most recently committed entry, used by undo."""
    player_id: int
    round_index: int


@dataclass(frozen=True)
class HalveItGameState:
    """
    Complete state of one Halve-It game.

    Attributes:
        mode: Round template in use
        players: Players in seating order
        current_player_index: Seat of the player to throw
        current_round_index: 0-based round being played
        is_game_finished: Every player has played every round
        rounds: The round sequence with recorded entries
        last_score: Latest committed entry, if any
    """
    mode: HalveItMode
    players: tuple[HalveItPlayer, ...]
    rounds: tuple[HalveItRound, ...]
    current_player_index: int = 0
    current_round_index: int = 0
    is_game_finished: bool = False
    last_score: LastScore | None = None

    @property
    def current_player(self) -> HalveItPlayer:
        return self.players[self.current_player_index]

    @property
    def current_round(self) -> HalveItRound:
        return self.rounds[self.current_round_index]

    def player_index(self, player_id: int) -> int | None:
        for index, player in enumerate(self.players):
            if player.id == player_id:
                return index
        return None

    def round_complete(self, round_index: int) -> bool:
        scores = self.rounds[round_index].player_scores
        return all(player.id in scores for player in self.players)

    def all_rounds_complete(self) -> bool:
        return all(self.round_complete(i) for i in range(len(self.rounds)))

    def standings(self) -> list[HalveItPlayer]:
        """Players ranked by total score (a copy; seating order is untouched)."""
        return sorted(self.players, key=lambda p: (-p.total_score, p.order_index))

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "players": [player.to_dict() for player in self.players],
            "rounds": [round_.to_dict() for round_ in self.rounds],
            "current_player_index": self.current_player_index,
            "current_round_index": self.current_round_index,
            "is_game_finished": self.is_game_finished,
            "last_score": (
                {"player_id": self.last_score.player_id, "round_index": self.last_score.round_index}
                if self.last_score else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HalveItGameState":
        rounds = tuple(HalveItRound.from_dict(r) for r in data["rounds"])
        seats = sorted(data["players"], key=lambda p: int(p["order_index"]))
        players = tuple(
            HalveItPlayer(
                id=int(p["id"]),
                name=str(p["name"]),
                order_index=int(p["order_index"]),
                total_score=int(p.get("total_score", 0)),
                rounds=player_history(rounds, int(p["id"])),
            )
            for p in seats
        )
        if not players or not rounds:
            raise ValueError("A stored Halve-It game needs players and rounds.")
        if any(player.order_index != index for index, player in enumerate(players)):
            raise ValueError("Stored Halve-It seats are not contiguous.")
        last = data.get("last_score")
        state = cls(
            mode=HalveItMode(data["mode"]),
            players=players,
            rounds=rounds,
            current_player_index=int(data.get("current_player_index", 0)),
            current_round_index=int(data.get("current_round_index", 0)),
            is_game_finished=bool(data.get("is_game_finished", False)),
            last_score=LastScore(int(last["player_id"]), int(last["round_index"])) if last else None,
        )
        if not 0 <= state.current_player_index < len(players):
            raise ValueError("Stored current player index is out of range.")
        if not 0 <= state.current_round_index < len(rounds):
            raise ValueError("Stored current round index is out of range.")
        return state


# -- Pure scoring functions ------------------------------------------------


def build_rounds(mode: HalveItMode) -> tuple[HalveItRound, ...]:
    """Empty rounds for a mode's template."""
    return tuple(
        HalveItRound(round_number=number, round_type=round_type, target=target)
        for number, (round_type, target) in enumerate(ROUND_TEMPLATES[mode], start=1)
    )


def calculate_round_score(round_: HalveItRound, running_total: int, data: RoundInput) -> int:
    """
    Running total after playing a round.

    Args:
        round_: The round being scored
        running_total: Total entering the round
        data: The player's submission

    Returns:
        The new running total
    """
    halved = running_total // 2

    if round_.round_type in (RoundType.NUMBER, RoundType.BULL):
        hits = data.hits or 0
        if hits == 0:
            return halved
        return running_total + hits * round_.target_value

    if round_.round_type in (RoundType.SCORING, RoundType.DOUBLE, RoundType.TREBLE):
        points = data.points or 0
        if points == 0:
            return halved
        return running_total + points

    if round_.round_type is RoundType.TARGET_SCORE:
        if (data.total_score or 0) == TARGET_SCORE:
            return running_total + TARGET_SCORE
        return halved

    return running_total


def total_before_round(rounds: tuple[HalveItRound, ...], player_id: int, round_index: int) -> int:
    """A player's running total entering round_index (0 if nothing recorded before it)."""
    for index in range(round_index - 1, -1, -1):
        entry = rounds[index].player_scores.get(player_id)
        if entry is not None:
            return entry.score
    return 0


def recompute_from(
    rounds: tuple[HalveItRound, ...],
    from_index: int,
    player_id: int,
) -> tuple[tuple[HalveItRound, ...], int]:
    """
    Re-score a player's entries from from_index onwards.

    Starts from the total stored before from_index and replays every later
    round the player has an entry in, rewriting each stored running total.

    Returns:
        Tuple of (updated rounds, player's final running total)
    """
    total = total_before_round(rounds, player_id, from_index)
    updated = list(rounds)
    for index in range(from_index, len(updated)):
        round_ = updated[index]
        entry = round_.player_scores.get(player_id)
        if entry is None:
            continue
        total = calculate_round_score(round_, total, entry.input)
        if total != entry.score:
            updated[index] = round_.with_entry(player_id, replace(entry, score=total))
    return tuple(updated), total


def player_history(rounds: tuple[HalveItRound, ...], player_id: int) -> tuple[HalveItRound, ...]:
    """Rounds a player has an entry in, in sequence order."""
    return tuple(round_ for round_ in rounds if player_id in round_.player_scores)


class HalveItEngine:
    """
    Engine for one live Halve-It game.

    Scoring and advancing are separate calls: record_round_score stores the
    current player's result, finish_turn moves the pointers on.
    """

    GAME = "halve_it"

    def __init__(
        self,
        directory: PlayerDirectory,
        *,
        on_event: EventListener | None = None,
    ) -> None:
        self._directory = directory
        self._on_event = on_event
        self._lock = threading.RLock()
        self._game: HalveItGameState | None = None

    @property
    def current_game(self) -> HalveItGameState | None:
        return self._game

    def start_game(self, mode: HalveItMode | str, player_ids: Iterable[int]) -> HalveItGameState | None:
        """
        Start a game with players seated in exactly the given order.

        Returns:
            The new snapshot, or the previous one when no player resolved
        """
        with self._lock:
            try:
                mode = HalveItMode(mode)
            except ValueError:
                logger.error("Unknown Halve-It mode %r, not starting", mode)
                return self._game

            players: list[HalveItPlayer] = []
            for player_id in player_ids:
                profile = self._directory.find_by_id(player_id)
                if profile is None:
                    logger.warning("Player %s not found in directory, dropping from Halve-It game", player_id)
                    continue
                players.append(HalveItPlayer(id=profile.id, name=profile.name, order_index=len(players)))

            if not players:
                logger.error("No players resolved for Halve-It game, not starting")
                return self._game

            self._game = HalveItGameState(mode=mode, players=tuple(players), rounds=build_rounds(mode))
            logger.info("Started Halve-It %s with players %s", mode.value, [p.id for p in players])
            emit(self._on_event, EventPayload(
                event=GameEvent.GAME_STARTED,
                game=self.GAME,
                data={"mode": mode.value, "player_ids": [p.id for p in players]},
            ))
            return self._game

    def record_round_score(
        self,
        player_id: int,
        round_index: int,
        data: RoundInput | Mapping[str, Any],
    ) -> HalveItGameState | None:
        """
        Record the current player's result for the current round.

        The engine's own pointers decide who and which round is scored;
        player_id and round_index are only checked and a mismatch is logged.
        Recording again before finish_turn replaces the earlier entry.

        Args:
            player_id: Player the caller believes is throwing
            round_index: Round the caller believes is current
            data: {hits|points|total_score}; absent values count as 0

        Returns:
            The updated snapshot
        """
        with self._lock:
            game = self._game
            if game is None:
                logger.debug("record_round_score called with no live Halve-It game")
                return None
            if game.is_game_finished:
                logger.debug("record_round_score called on a finished Halve-It game")
                return game

            submission = data if isinstance(data, RoundInput) else RoundInput.from_mapping(data)
            player = game.current_player
            index = game.current_round_index
            if player_id != player.id or round_index != index:
                logger.warning(
                    "Halve-It score submitted for player %s round %s, recording for current player %s round %s",
                    player_id, round_index, player.id, index,
                )

            rounds = list(game.rounds)
            rounds[index] = rounds[index].with_entry(player.id, RoundEntry(input=submission, score=0))
            rounds, total = recompute_from(tuple(rounds), index, player.id)

            updated = replace(player, total_score=total, rounds=player_history(rounds, player.id))
            game = self._replace_player(replace(game, rounds=rounds), updated)
            game = replace(game, last_score=LastScore(player.id, index))
            game = replace(game, is_game_finished=game.all_rounds_complete())
            self._game = game

            emit(self._on_event, EventPayload(
                event=GameEvent.ROUND_SCORED,
                game=self.GAME,
                player_id=player.id,
                data={"round_index": index, "input": submission.to_dict(), "total": total},
            ))
            if game.is_game_finished:
                logger.info("Halve-It game finished")
                emit(self._on_event, EventPayload(event=GameEvent.GAME_FINISHED, game=self.GAME))
            return self._game

    def finish_turn(self) -> HalveItGameState | None:
        """
        Move to the next player, or to the next round once everyone has thrown.

        Nothing happens until the current player has a score for the current round.
        """
        with self._lock:
            game = self._game
            if game is None:
                return None

            round_index = game.current_round_index
            if game.current_player.id not in game.current_round.player_scores:
                return game

            if not game.round_complete(round_index):
                self._game = replace(
                    game,
                    current_player_index=(game.current_player_index + 1) % len(game.players),
                )
                emit(self._on_event, EventPayload(
                    event=GameEvent.TURN_ADVANCED,
                    game=self.GAME,
                    player_id=self._game.current_player.id,
                    data={"round_index": round_index},
                ))
                return self._game

            next_round = round_index + 1
            if next_round >= len(game.rounds):
                if not game.is_game_finished:
                    self._game = replace(game, is_game_finished=True)
                    emit(self._on_event, EventPayload(event=GameEvent.GAME_FINISHED, game=self.GAME))
                return self._game

            self._game = replace(game, current_round_index=next_round, current_player_index=0)
            emit(self._on_event, EventPayload(
                event=GameEvent.ROUND_ADVANCED,
                game=self.GAME,
                player_id=self._game.current_player.id,
                data={"round_index": next_round},
            ))
            return self._game

    def undo_last_score(self) -> HalveItGameState | None:
        """
        Remove the latest committed entry and replay that player's later rounds.

        Pointers move back to the undone entry; last_score moves to the
        nearest earlier entry (earlier seats in the same round, then earlier rounds).
        """
        with self._lock:
            game = self._game
            if game is None or game.last_score is None:
                return game

            player_id = game.last_score.player_id
            round_index = game.last_score.round_index
            seat = game.player_index(player_id)
            if seat is None or player_id not in game.rounds[round_index].player_scores:
                logger.warning("Halve-It undo pointer is stale, ignoring")
                return game

            rounds = list(game.rounds)
            rounds[round_index] = rounds[round_index].with_entry(player_id, None)
            rounds, total = recompute_from(tuple(rounds), round_index, player_id)

            player = game.players[seat]
            updated = replace(player, total_score=total, rounds=player_history(rounds, player_id))
            game = self._replace_player(replace(game, rounds=rounds), updated)
            self._game = replace(
                game,
                current_player_index=seat,
                current_round_index=round_index,
                is_game_finished=False,
                last_score=self._previous_entry(game, seat, round_index),
            )

            emit(self._on_event, EventPayload(
                event=GameEvent.SCORE_UNDONE,
                game=self.GAME,
                player_id=player_id,
                data={"round_index": round_index, "total": total},
            ))
            return self._game

    def end_game(self) -> None:
        """Discard the game. Halve-It results are not merged into lifetime stats."""
        with self._lock:
            if self._game is None:
                return
            self._game = None
            emit(self._on_event, EventPayload(event=GameEvent.GAME_ENDED, game=self.GAME))

    # -- Persistence -----------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {"current_game": self._game.to_dict() if self._game else None}

    def restore(self, data: Mapping[str, Any]) -> None:
        """
        Replace engine state with a persisted snapshot.

        Raises:
            KeyError, ValueError: If the snapshot is malformed
        """
        current = data.get("current_game")
        game = HalveItGameState.from_dict(current) if current else None
        with self._lock:
            self._game = game

    # -- Helpers ------------------------------------------------------------

    @staticmethod
    def _replace_player(game: HalveItGameState, player: HalveItPlayer) -> HalveItGameState:
        players = tuple(player if p.id == player.id else p for p in game.players)
        return replace(game, players=players)

    @staticmethod
    def _previous_entry(game: HalveItGameState, seat: int, round_index: int) -> LastScore | None:
        for index in range(round_index, -1, -1):
            scores = game.rounds[index].player_scores
            start = seat - 1 if index == round_index else len(game.players) - 1
            for position in range(start, -1, -1):
                candidate = game.players[position]
                if candidate.id in scores:
                    return LastScore(candidate.id, index)
        return None
