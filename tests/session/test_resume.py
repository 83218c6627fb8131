"""Tests for dartscore/session/resume.py."""

import pytest

from dartscore.engine.halve_it import HalveItEngine
from dartscore.engine.x01 import X01Engine
from dartscore.session.resume import (
    HALVE_IT_STATE_NAME,
    X01_STATE_NAME,
    restore_halve_it,
    restore_x01,
    save_halve_it,
    save_x01,
)
from dartscore.storage.game_state import InMemoryStateStore
from dartscore.storage.models import StateBlob


@pytest.fixture
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def x01(directory, settings, ticking_clock) -> X01Engine:
    return X01Engine(directory, settings, clock=ticking_clock)


@pytest.fixture
def halve_it(directory) -> HalveItEngine:
    return HalveItEngine(directory)


class TestX01Resume:

    def test_nothing_saved(self, x01, store, settings):
        assert restore_x01(x01, store, settings) is False
        assert x01.current_game is None

    def test_round_trip_through_json(self, directory, settings, x01, store):
        x01.update_game_settings(default_legs=5)
        x01.start_game("1001", [2, 1], 5)
        x01.record_score(100, 3, 1, ["T20", "D20"])
        x01.record_score(26, 3)

        save_x01(x01, store, settings)
        resumed = X01Engine(directory, settings)

        assert restore_x01(resumed, store, settings) is True
        assert resumed.current_game == x01.current_game
        assert resumed.game_settings == x01.game_settings
        assert resumed.game_settings.last_custom_game_type == "1001"
        assert resumed.last_dart_notations == ()

    def test_blob_uses_fixed_name_and_version(self, x01, store, settings):
        save_x01(x01, store, settings)
        blob = store.load(X01_STATE_NAME)
        assert blob.version == settings.state_version
        assert blob.data["current_game"] is None

    def test_version_mismatch_discards(self, x01, store, settings):
        store.save(StateBlob(name=X01_STATE_NAME, version=settings.state_version + 1, data={}))

        assert restore_x01(x01, store, settings) is False
        assert store.load(X01_STATE_NAME) is None

    def test_unreadable_blob_discards(self, x01, store, settings, caplog):
        store.save(StateBlob(
            name=X01_STATE_NAME,
            version=settings.state_version,
            data={"current_game": {"game_type": "501"}},
        ))

        assert restore_x01(x01, store, settings) is False
        assert store.load(X01_STATE_NAME) is None
        assert "Discarding unreadable" in caplog.text

    def test_resumed_game_keeps_playing(self, directory, settings, ticking_clock, x01, store):
        x01.start_game("501", [1, 2], 3)
        x01.record_score(60, 3)
        save_x01(x01, store, settings)

        resumed = X01Engine(directory, settings, clock=ticking_clock)
        restore_x01(resumed, store, settings)
        game = resumed.record_score(45, 3)

        assert game.players[1].score == 456
        assert game.current_player_index == 0


class TestHalveItResume:

    def test_round_trip_through_json(self, directory, settings, halve_it, store):
        halve_it.start_game("41", [3, 1])
        halve_it.record_round_score(3, 0, {"hits": 2})
        halve_it.finish_turn()
        halve_it.record_round_score(1, 0, {"hits": 0})

        save_halve_it(halve_it, store, settings)
        resumed = HalveItEngine(directory)

        assert restore_halve_it(resumed, store, settings) is True
        assert resumed.current_game == halve_it.current_game

    def test_names_do_not_collide(self, x01, halve_it, store, settings):
        halve_it.start_game("default", [1])
        save_halve_it(halve_it, store, settings)

        assert restore_x01(x01, store, settings) is False
        assert store.load(HALVE_IT_STATE_NAME) is not None

    def test_bad_mode_discards(self, directory, halve_it, store, settings):
        halve_it.start_game("default", [1])
        save_halve_it(halve_it, store, settings)
        blob = store.load(HALVE_IT_STATE_NAME)
        blob.data["current_game"]["mode"] = "cricket"
        store.save(blob)

        assert restore_halve_it(HalveItEngine(directory), store, settings) is False
        assert store.load(HALVE_IT_STATE_NAME) is None
