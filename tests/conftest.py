"""Shared test fixtures: bundled lexicon, routers, API app state."""

import os

# Pin the environment so a developer's .env or shell never selects
# a live reply backend or enables auth during tests.
os.environ["REPLY_BACKEND"] = "none"
os.environ["API_KEY"] = ""
os.environ.pop("LEXICON_PATH", None)
# Use litellm's bundled model cost map instead of fetching it over the
# network at import time (the background fetch can deadlock offline).
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")

from pathlib import Path

import pytest

from dibea_router.api.app_state import AppState
from dibea_router.config import Settings
from dibea_router.lexicon.loader import load_lexicon
from dibea_router.lexicon.schemas import Lexicon
from dibea_router.lexicon.store import LexiconStore
from dibea_router.main import app
from dibea_router.observability import (
    AgentMetricsHandler,
    TraceDispatcher,
)
from dibea_router.replies import ReplyGenerator
from dibea_router.routing.router import AgentRouter


def setup_test_app(
    *,
    settings: Settings | None = None,
    store: LexiconStore | None = None,
    reply_generator: ReplyGenerator | None = None,
) -> AppState:
    """Install typed app state directly (ASGITransport skips lifespan)."""
    settings = settings or Settings()
    store = store or LexiconStore()
    metrics = AgentMetricsHandler()
    dispatcher = TraceDispatcher()
    dispatcher.register(metrics)
    state = AppState(
        settings=settings,
        store=store,
        router=AgentRouter(store, reply_generator, dispatcher=dispatcher),
        dispatcher=dispatcher,
        metrics=metrics,
    )
    app.state.settings = settings
    app.state.typed = state
    return state


@pytest.fixture(scope="session")
def lexicon() -> Lexicon:
    """The bundled default lexicon, loaded once."""
    return load_lexicon()


@pytest.fixture
def store(lexicon: Lexicon) -> LexiconStore:
    return LexiconStore(lexicon)


@pytest.fixture
def router(store: LexiconStore) -> AgentRouter:
    """Router with canned replies only."""
    return AgentRouter(store)


@pytest.fixture
def lexicon_file(tmp_path: Path) -> Path:
    """Writable copy of the bundled lexicon."""
    from dibea_router.lexicon.loader import DEFAULT_LEXICON_PATH

    target = tmp_path / "lexicon.yaml"
    target.write_text(
        DEFAULT_LEXICON_PATH.read_text(encoding="utf-8"), encoding="utf-8"
    )
    return target
