"""
WeDart Game Engine.

Pure Python scoring logic with zero UI/storage dependencies.
Handles X01 countdown matches and Halve-It round sequences.
"""

from dartscore.engine.base import (
    HalveItMode,
    InputMode,
    Player,
    PlayerDirectory,
    RoundType,
    Score,
)
from dartscore.engine.events import EventPayload, GameEvent
from dartscore.engine.halve_it import (
    HalveItEngine,
    HalveItGameState,
    HalveItPlayer,
    HalveItRound,
    RoundInput,
)
from dartscore.engine.x01 import X01Engine, X01GameState, X01Player, X01Settings

__all__ = [
    # Data Classes
    "Player",
    "Score",
    "X01Player",
    "X01GameState",
    "X01Settings",
    "HalveItPlayer",
    "HalveItRound",
    "HalveItGameState",
    "RoundInput",
    "EventPayload",
    # Enums
    "GameEvent",
    "HalveItMode",
    "InputMode",
    "RoundType",
    # Protocols
    "PlayerDirectory",
    # Engines
    "X01Engine",
    "HalveItEngine",
]
