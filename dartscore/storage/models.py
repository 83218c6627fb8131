"""
WeDart - Storage Models

Pydantic models that mirror the Supabase table schemas.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from dartscore.engine.base import Player


class PlayerRow(BaseModel):
    """Mirrors the `players` table."""

    id: int
    name: str = Field(max_length=30)
    games: int = 0
    average: float = 0.0
    total_darts_thrown: int = 0
    total_points_scored: int = 0
    dart_hits: dict[str, float] = Field(default_factory=dict)

    model_config = {"from_attributes": True}

    @classmethod
    def from_player(cls, player: Player) -> "PlayerRow":
        return cls.model_validate(player.to_dict())

    def to_player(self) -> Player:
        return Player.from_dict(self.model_dump())


class StateBlob(BaseModel):
    """Mirrors the `app_state` table: one named, versioned engine snapshot."""

    name: str
    version: int
    data: dict[str, Any] = Field(default_factory=dict)
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
