"""
WeDart Storage Layer.

Player directory and persisted engine state, in memory or on Supabase.
"""

from dartscore.storage.client import get_supabase_client
from dartscore.storage.game_state import InMemoryStateStore, StateStore, SupabaseStateStore
from dartscore.storage.models import PlayerRow, StateBlob
from dartscore.storage.player import InMemoryPlayerDirectory, SupabasePlayerDirectory

__all__ = [
    "get_supabase_client",
    "InMemoryPlayerDirectory",
    "InMemoryStateStore",
    "PlayerRow",
    "StateBlob",
    "StateStore",
    "SupabasePlayerDirectory",
    "SupabaseStateStore",
]
