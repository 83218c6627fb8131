"""Tests for dartscore/storage/player.py and the player row model."""

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from dartscore.engine.base import Player
from dartscore.storage.models import PlayerRow
from dartscore.storage.player import InMemoryPlayerDirectory, SupabasePlayerDirectory


@pytest.fixture
def mock_client():
    """Mock Supabase client whose `players` table records every call."""
    return MagicMock()


@pytest.fixture
def table(mock_client):
    return mock_client.table.return_value


def _row(**overrides):
    row = {
        "id": 1,
        "name": "Alice",
        "games": 2,
        "average": 21.5,
        "total_darts_thrown": 60,
        "total_points_scored": 1290,
        "dart_hits": {"T20": 4},
    }
    row.update(overrides)
    return row


class TestPlayerRow:

    def test_round_trip(self):
        player = Player.from_dict(_row())
        assert PlayerRow.from_player(player).to_player() == player

    def test_name_length_limit(self):
        with pytest.raises(ValidationError):
            PlayerRow(id=1, name="x" * 31)

    def test_missing_stats_default(self):
        assert PlayerRow.model_validate({"id": 3, "name": "Cara"}).to_player() == Player(id=3, name="Cara")


class TestInMemoryPlayerDirectory:

    def test_find_by_id(self, directory):
        assert directory.find_by_id(2).name == "Bob"
        assert directory.find_by_id(42) is None

    def test_list_all_sorted(self):
        directory = InMemoryPlayerDirectory([Player(id=5, name="E"), Player(id=2, name="B")])
        assert [p.id for p in directory.list_all()] == [2, 5]

    def test_upsert_many_replaces_and_adds(self, directory):
        directory.upsert_many([Player(id=1, name="Alice", games=3), Player(id=9, name="Ian")])
        assert directory.find_by_id(1).games == 3
        assert directory.find_by_id(9).name == "Ian"

    def test_add_player_uses_next_id(self, directory):
        player = directory.add_player("Dee")
        assert player == Player(id=4, name="Dee")
        assert directory.find_by_id(4) == player

    def test_add_to_empty_directory(self):
        assert InMemoryPlayerDirectory().add_player("First").id == 1

    def test_rename_player(self, directory):
        assert directory.rename_player(1, "Ali").name == "Ali"
        assert directory.find_by_id(1).name == "Ali"
        assert directory.rename_player(42, "Nobody") is None

    def test_remove_player(self, directory):
        directory.remove_player(3)
        directory.remove_player(3)
        assert directory.find_by_id(3) is None


class TestSupabasePlayerDirectory:

    def test_uses_players_table(self, mock_client):
        SupabasePlayerDirectory(mock_client)
        mock_client.table.assert_called_once_with("players")

    def test_find_by_id(self, mock_client, table):
        table.select.return_value.eq.return_value.execute.return_value.data = [_row()]
        directory = SupabasePlayerDirectory(mock_client)

        player = directory.find_by_id(1)

        assert player.name == "Alice"
        assert player.dart_hits == {"T20": 4}
        table.select.assert_called_once_with("*")
        table.select.return_value.eq.assert_called_once_with("id", 1)

    def test_find_by_id_missing(self, mock_client, table):
        table.select.return_value.eq.return_value.execute.return_value.data = []
        assert SupabasePlayerDirectory(mock_client).find_by_id(1) is None

    def test_list_all(self, mock_client, table):
        table.select.return_value.order.return_value.execute.return_value.data = [
            _row(), _row(id=2, name="Bob"),
        ]
        players = SupabasePlayerDirectory(mock_client).list_all()
        assert [p.name for p in players] == ["Alice", "Bob"]
        table.select.return_value.order.assert_called_once_with("id")

    def test_upsert_many(self, mock_client, table):
        directory = SupabasePlayerDirectory(mock_client)
        directory.upsert_many([Player.from_dict(_row())])

        table.upsert.assert_called_once_with([_row()])
        table.upsert.return_value.execute.assert_called_once()

    def test_upsert_nothing(self, mock_client, table):
        SupabasePlayerDirectory(mock_client).upsert_many([])
        table.upsert.assert_not_called()

    def test_add_player(self, mock_client, table):
        table.insert.return_value.execute.return_value.data = [{"id": 12, "name": "Lou"}]
        player = SupabasePlayerDirectory(mock_client).add_player("Lou")
        assert player == Player(id=12, name="Lou")
        table.insert.assert_called_once_with({"name": "Lou"})

    def test_remove_player(self, mock_client, table):
        SupabasePlayerDirectory(mock_client).remove_player(5)
        table.delete.return_value.eq.assert_called_once_with("id", 5)
