"""
WeDart - Engine Event Definitions

Event types and payloads emitted by the engines on every observable
transition.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable

logger = logging.getLogger(__name__)


class GameEvent(Enum):
    """Events that can occur during a game."""

    GAME_STARTED = auto()
    SCORE_RECORDED = auto()
    PLAYER_BUST = auto()
    DOUBLE_IN_MISSED = auto()
    LEG_WON = auto()
    MATCH_WON = auto()
    SCORE_UNDONE = auto()
    ROUND_SCORED = auto()
    TURN_ADVANCED = auto()
    ROUND_ADVANCED = auto()
    GAME_FINISHED = auto()
    GAME_ENDED = auto()


@dataclass
class EventPayload:
    """Wrapper for engine event data."""

    event: GameEvent
    game: str
    player_id: int | None = None
    data: dict[str, Any] = field(default_factory=dict)


EventListener = Callable[[EventPayload], None]


def emit(listener: EventListener | None, payload: EventPayload) -> None:
    """Deliver an event to a listener, if one is attached."""
    logger.debug("%s event %s player=%s", payload.game, payload.event.name, payload.player_id)
    if listener is not None:
        listener(payload)
