"""
WeDart - Player Directory

Lifetime player records. The engines read them at game start and X01
writes merged statistics back when a game ends.
"""

import logging
import threading
from dataclasses import replace
from typing import Sequence

from supabase import Client

from dartscore.engine.base import Player
from dartscore.storage.models import PlayerRow

logger = logging.getLogger(__name__)


class InMemoryPlayerDirectory:
    """Player directory held in process memory."""

    def __init__(self, players: Sequence[Player] = ()) -> None:
        self._players: dict[int, Player] = {player.id: player for player in players}
        self._lock = threading.Lock()

    def find_by_id(self, player_id: int) -> Player | None:
        return self._players.get(player_id)

    def list_all(self) -> list[Player]:
        """All players, ordered by id."""
        return sorted(self._players.values(), key=lambda p: p.id)

    def upsert_many(self, players: Sequence[Player]) -> None:
        with self._lock:
            for player in players:
                self._players[player.id] = player

    def add_player(self, name: str) -> Player:
        """Create a player with the next free id."""
        with self._lock:
            next_id = max(self._players, default=0) + 1
            player = Player(id=next_id, name=name)
            self._players[next_id] = player
            return player

    def rename_player(self, player_id: int, name: str) -> Player | None:
        with self._lock:
            player = self._players.get(player_id)
            if player is None:
                return None
            player = replace(player, name=name)
            self._players[player_id] = player
            return player

    def remove_player(self, player_id: int) -> None:
        with self._lock:
            self._players.pop(player_id, None)


class SupabasePlayerDirectory:
    """Player directory backed by the Supabase `players` table."""

    def __init__(self, client: Client) -> None:
        self.client = client
        self.table = client.table("players")

    def find_by_id(self, player_id: int) -> Player | None:
        """Get a single player by ID."""
        data = (
            self.table
            .select("*")
            .eq("id", player_id)
            .execute()
        )
        if data.data:
            return PlayerRow.model_validate(data.data[0]).to_player()
        return None

    def list_all(self) -> list[Player]:
        """All players, ordered by id."""
        data = (
            self.table
            .select("*")
            .order("id")
            .execute()
        )
        return [PlayerRow.model_validate(row).to_player() for row in data.data]

    def upsert_many(self, players: Sequence[Player]) -> None:
        """Insert or replace several player records."""
        if not players:
            return
        rows = [PlayerRow.from_player(player).model_dump() for player in players]
        self.table.upsert(rows).execute()
        logger.info("Upserted %d player records", len(rows))

    def add_player(self, name: str) -> Player:
        """Create a player; the table assigns the id."""
        data = (
            self.table
            .insert({"name": name})
            .execute()
        )
        return PlayerRow.model_validate(data.data[0]).to_player()

    def remove_player(self, player_id: int) -> None:
        self.table.delete().eq("id", player_id).execute()
