"""Fan-out dispatcher for routing trace events."""

from __future__ import annotations

import logging

from dibea_router.constants import ERROR_TRUNCATION_CHARS
from dibea_router.observability.events import TraceEvent
from dibea_router.observability.handlers import TraceHandler

logger = logging.getLogger(__name__)


class TraceDispatcher:
    """Delivers each route event to every registered handler.

    Delivery is best-effort: a failing handler is logged with the
    request it was handling and its error never reaches the router.
    """

    def __init__(self) -> None:
        self._handlers: list[TraceHandler] = []

    def register(self, handler: TraceHandler) -> None:
        """Register a handler. Duplicates (by name) are ignored."""
        if self.get(handler.name) is None:
            self._handlers.append(handler)

    def get(self, name: str) -> TraceHandler | None:
        return next((h for h in self._handlers if h.name == name), None)

    async def emit(self, event: TraceEvent) -> None:
        """Deliver ``event`` in registration order."""
        for handler in self._handlers:
            try:
                await handler.handle(event)
            except Exception as exc:
                logger.warning(
                    "event=trace_handler_error handler=%s trace_type=%s "
                    "trace_id=%s error_type=%s error=%s",
                    handler.name,
                    event.type,
                    event.trace_id,
                    type(exc).__name__,
                    str(exc)[:ERROR_TRUNCATION_CHARS],
                )

    @property
    def handler_count(self) -> int:
        return len(self._handlers)
