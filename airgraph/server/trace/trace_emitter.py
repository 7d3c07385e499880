"""
EvaluationEmitter: fan-out of evaluation events to registered listeners
(the Socket.IO server, loggers, tests).
"""
from __future__ import annotations

import logging
import time
from typing import Callable, List

from airgraph.server.trace.trace_types import TraceEvent

logger = logging.getLogger(__name__)


class EvaluationEmitter:
    def __init__(self) -> None:
        self._listeners: List[Callable[[TraceEvent], None]] = []

    # ------------------------------------------------------------------
    # Listener registration
    # ------------------------------------------------------------------

    def on_event(self, callback: Callable[[TraceEvent], None]) -> None:
        """Register a callback that receives every emitted event."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[TraceEvent], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # ------------------------------------------------------------------
    # Emit
    # ------------------------------------------------------------------

    def fire(self, payload: TraceEvent) -> None:
        """Stamp the payload with a millisecond timestamp and broadcast it."""
        if "ts" not in payload:
            payload["ts"] = now_ms()
        for cb in list(self._listeners):
            try:
                cb(payload)
            except Exception:
                # a broken listener must not undo the mutation that fired it
                logger.exception("Listener %r failed for %s", cb, payload.get("type"))


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

def now_ms() -> int:
    return int(time.time() * 1000)
