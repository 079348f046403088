"""FastAPI dependency injection for router components."""

from __future__ import annotations

from fastapi import Request

from dibea_router.api.app_state import AppState
from dibea_router.lexicon.store import LexiconStore
from dibea_router.observability.handlers.metrics import AgentMetricsHandler
from dibea_router.routing.router import AgentRouter


def get_app_state(request: Request) -> AppState:
    """Typed state set up by the lifespan (or by tests)."""
    return request.app.state.typed  # type: ignore[no-any-return]


def get_router(request: Request) -> AgentRouter:
    return get_app_state(request).router


def get_store(request: Request) -> LexiconStore:
    return get_app_state(request).store


def get_metrics(request: Request) -> AgentMetricsHandler:
    return get_app_state(request).metrics
