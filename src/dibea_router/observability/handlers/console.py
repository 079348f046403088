"""Console trace handler: one key=value log line per route event."""

from __future__ import annotations

import logging
from typing import Any

from dibea_router.observability.events import TraceEvent, TraceEventType

logger = logging.getLogger(__name__)

_LEVELS: dict[TraceEventType, int] = {
    "route_start": logging.DEBUG,
    "route_end": logging.INFO,
    "reply_fallback": logging.WARNING,
    "error": logging.WARNING,
}


def _format_value(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.3f}"
    if isinstance(value, (list, tuple)):
        return ">".join(str(v) for v in value)
    return str(value)


def event_level(event: TraceEvent) -> int:
    """Log level for an event; a degraded route_end is a warning."""
    if event.type == "route_end" and event.data.get("degraded"):
        return logging.WARNING
    return _LEVELS.get(event.type, logging.INFO)


class ConsoleTraceHandler:
    """Logs route events as key=value messages.

    Floats keep three decimals and the state path is joined with
    ``>`` (``states=received>normalized>...``) so a single grep on
    ``trace_id`` follows one request through the router.
    """

    @property
    def name(self) -> str:
        return "console"

    async def handle(self, event: TraceEvent) -> None:
        parts = [
            f"trace_type={event.type}",
            f"trace_id={event.trace_id}",
            f"category={event.category}",
        ]
        parts.extend(
            f"{k}={_format_value(v)}" for k, v in event.data.items()
        )
        logger.log(event_level(event), " ".join(parts))
