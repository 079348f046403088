"""Observability layer -- event dispatcher + pluggable handlers."""

from __future__ import annotations

from dibea_router.config import Settings
from dibea_router.observability.dispatcher import TraceDispatcher
from dibea_router.observability.events import (
    TraceCategory,
    TraceEvent,
    TraceEventType,
)
from dibea_router.observability.handlers.console import (
    ConsoleTraceHandler,
)
from dibea_router.observability.handlers.metrics import (
    AgentMetrics,
    AgentMetricsHandler,
)

__all__ = [
    "AgentMetrics",
    "AgentMetricsHandler",
    "TraceCategory",
    "TraceDispatcher",
    "TraceEvent",
    "TraceEventType",
    "initialize_tracing",
]


def initialize_tracing(
    settings: Settings,
    metrics: AgentMetricsHandler | None = None,
) -> TraceDispatcher:
    """Create dispatcher and register handlers based on settings.

    The metrics handler is always registered; it backs the
    ``/api/agents/metrics`` endpoint regardless of tracing.
    """
    dispatcher = TraceDispatcher()
    dispatcher.register(metrics or AgentMetricsHandler())

    if settings.trace_enabled:
        dispatcher.register(ConsoleTraceHandler())

    return dispatcher
