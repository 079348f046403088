"""Typed application state: replaces untyped getattr() access."""

from __future__ import annotations

from dataclasses import dataclass

from dibea_router.config import Settings
from dibea_router.lexicon.store import LexiconStore
from dibea_router.logger import RouteLogger
from dibea_router.observability.dispatcher import TraceDispatcher
from dibea_router.observability.handlers.metrics import AgentMetricsHandler
from dibea_router.routing.router import AgentRouter


@dataclass
class AppState:
    """Typed container for app.state attributes."""

    settings: Settings
    store: LexiconStore
    router: AgentRouter
    dispatcher: TraceDispatcher
    metrics: AgentMetricsHandler
    route_logger: RouteLogger | None = None
