"""
WeDart - Auto Advance

Calls finish_turn on an engine after a fixed delay, giving the input
surface time to show the entered score. The timer runs on a background
thread; the engine's own lock serializes it with other calls.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol

from dartscore.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class TurnFinisher(Protocol):
    def finish_turn(self) -> object:
        ...


class AutoAdvance:
    """Cancellable delayed finish_turn.

    Scheduling again replaces a pending timer. A timer that was cancelled
    after it started firing does nothing.
    """

    def __init__(
        self,
        engine: TurnFinisher,
        delay: float | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._engine = engine
        self._delay = delay if delay is not None else (settings or get_settings()).auto_advance_seconds
        self._timer: threading.Timer | None = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """True while a scheduled advance has not fired or been cancelled."""
        with self._lock:
            return self._timer is not None

    def schedule(self) -> None:
        """Start (or restart) the countdown to finish_turn."""
        with self._lock:
            self._cancel_locked()
            self._generation += 1
            timer = threading.Timer(self._delay, self._fire, args=(self._generation,))
            timer.daemon = True
            timer.name = f"auto-advance-{self._generation}"
            self._timer = timer
            timer.start()

    def cancel(self) -> None:
        """Cancel a pending advance, if any."""
        with self._lock:
            self._cancel_locked()

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            self._generation += 1

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
        try:
            self._engine.finish_turn()
        except Exception:
            logger.exception("Auto-advance finish_turn failed")
