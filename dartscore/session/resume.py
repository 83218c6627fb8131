"""
WeDart - Resume

Saves engine snapshots to a StateStore and restores them in a later
session. Each blob carries the configured state version; a blob written
under another version, or one that no longer parses, is discarded rather
than misread.
"""

import logging

from dartscore.config.settings import Settings, get_settings
from dartscore.engine.halve_it import HalveItEngine
from dartscore.engine.x01 import X01Engine
from dartscore.storage.game_state import StateStore
from dartscore.storage.models import StateBlob

logger = logging.getLogger(__name__)

X01_STATE_NAME = "wedart-x01-storage"
HALVE_IT_STATE_NAME = "wedart-halveit-storage"


def save_x01(engine: X01Engine, store: StateStore, settings: Settings | None = None) -> None:
    """Persist X01 settings, the live game and the last dart notations."""
    _save(store, X01_STATE_NAME, engine.snapshot(), settings)


def restore_x01(engine: X01Engine, store: StateStore, settings: Settings | None = None) -> bool:
    """Load a saved X01 session into the engine. Returns True if one was restored."""
    return _restore(engine, store, X01_STATE_NAME, settings)


def save_halve_it(engine: HalveItEngine, store: StateStore, settings: Settings | None = None) -> None:
    """Persist the live Halve-It game."""
    _save(store, HALVE_IT_STATE_NAME, engine.snapshot(), settings)


def restore_halve_it(engine: HalveItEngine, store: StateStore, settings: Settings | None = None) -> bool:
    """Load a saved Halve-It session into the engine. Returns True if one was restored."""
    return _restore(engine, store, HALVE_IT_STATE_NAME, settings)


def _save(store: StateStore, name: str, data: dict, settings: Settings | None) -> None:
    settings = settings or get_settings()
    store.save(StateBlob(name=name, version=settings.state_version, data=data))


def _restore(engine: X01Engine | HalveItEngine, store: StateStore, name: str, settings: Settings | None) -> bool:
    settings = settings or get_settings()
    blob = store.load(name)
    if blob is None:
        return False

    if blob.version != settings.state_version:
        logger.warning(
            "Discarding %s: stored version %d, expected %d",
            name, blob.version, settings.state_version,
        )
        store.delete(name)
        return False

    try:
        engine.restore(blob.data)
    except (KeyError, TypeError, ValueError):
        logger.warning("Discarding unreadable %s", name, exc_info=True)
        store.delete(name)
        return False

    logger.info("Restored %s", name)
    return True
