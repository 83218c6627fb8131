"""
WeDart - State Store

Load/save of named, versioned engine snapshots (one per engine).
"""

import logging
import threading
from typing import Protocol

from supabase import Client

from dartscore.storage.models import StateBlob

logger = logging.getLogger(__name__)


class StateStore(Protocol):
    """Key-value storage for engine snapshots."""

    def load(self, name: str) -> StateBlob | None:
        ...

    def save(self, blob: StateBlob) -> None:
        ...

    def delete(self, name: str) -> None:
        ...


class InMemoryStateStore:
    """
    State store held in process memory.

    Blobs are kept as JSON text so that anything saved has to survive
    the same serialization a real backend applies.
    """

    def __init__(self) -> None:
        self._blobs: dict[str, str] = {}
        self._lock = threading.Lock()

    def load(self, name: str) -> StateBlob | None:
        raw = self._blobs.get(name)
        if raw is None:
            return None
        return StateBlob.model_validate_json(raw)

    def save(self, blob: StateBlob) -> None:
        with self._lock:
            self._blobs[blob.name] = blob.model_dump_json()

    def delete(self, name: str) -> None:
        with self._lock:
            self._blobs.pop(name, None)


class SupabaseStateStore:
    """State store backed by the Supabase `app_state` table."""

    def __init__(self, client: Client) -> None:
        self.client = client
        self.table = client.table("app_state")

    def load(self, name: str) -> StateBlob | None:
        """Get the stored blob for a name."""
        data = (
            self.table
            .select("*")
            .eq("name", name)
            .execute()
        )
        if data.data:
            return StateBlob.model_validate(data.data[0])
        return None

    def save(self, blob: StateBlob) -> None:
        """Insert or replace the blob for its name."""
        (
            self.table
            .upsert(blob.model_dump(mode="json", exclude={"updated_at"}), on_conflict="name")
            .execute()
        )
        logger.debug("Saved state blob %s v%d", blob.name, blob.version)

    def delete(self, name: str) -> None:
        """Delete the blob for a name."""
        self.table.delete().eq("name", name).execute()
