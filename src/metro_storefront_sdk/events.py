"""In-process session notifications.

Consumers that live outside a ``SessionContext`` (headers, carts, badges)
subscribe here to learn that credential state changed, the same way the
browser storefront listens for its global ``tokenUpdated`` event.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

TOKEN_UPDATED = "tokenUpdated"
DISPLAY_NAME_UPDATED = "displayNameUpdated"
AUTH_CHANGE = "authChange"

Handler = Callable[[Any], None]


class SessionEvents:
    def __init__(self, history_size: int = 100) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self.history: deque[dict[str, Any]] = deque(maxlen=history_size)

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        self._handlers.setdefault(event, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(event, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def emit(self, event: str, payload: Any = None) -> None:
        self.history.append({"event": event, "payload": payload})
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(payload)
            except Exception:
                logger.exception("session_event_handler_failed", extra={"event": event})

    def count(self, event: str) -> int:
        return sum(1 for entry in self.history if entry["event"] == event)
