"""Trace handler backends for routing events (console, agent metrics)."""

from __future__ import annotations

from typing import Protocol

from dibea_router.observability.events import TraceEvent


class TraceHandler(Protocol):
    """Receives every route event; looked up and deduplicated by name."""

    @property
    def name(self) -> str: ...

    async def handle(self, event: TraceEvent) -> None: ...
