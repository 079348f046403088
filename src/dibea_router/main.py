"""FastAPI application with lifespan startup."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

# Phase 1: logging must be configured before litellm is imported
# (the LLM reply backend reads LITELLM_LOG at import time).
from dibea_router.logging_config import setup_logging

setup_logging()

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from dibea_router import __version__  # noqa: E402
from dibea_router.api.app_state import AppState  # noqa: E402
from dibea_router.api.middleware.auth import (  # noqa: E402
    API_KEY_HEADER,
    ApiKeyMiddleware,
)
from dibea_router.api.routes import (  # noqa: E402
    chat,
    health,
    lexicon,
    metrics,
)
from dibea_router.config import Settings  # noqa: E402
from dibea_router.lexicon.store import LexiconStore  # noqa: E402
from dibea_router.logger import RouteLogger  # noqa: E402
from dibea_router.logging_config import (  # noqa: E402
    cleanup_third_party_handlers,
)
from dibea_router.observability import (  # noqa: E402
    AgentMetricsHandler,
    initialize_tracing,
)
from dibea_router.replies import build_reply_generator  # noqa: E402
from dibea_router.routing.router import AgentRouter  # noqa: E402

_logger = logging.getLogger(__name__)


def build_app_state(settings: Settings) -> AppState:
    """Wire store, reply backend, logger and tracing from settings.

    Raises ConfigurationError for a malformed lexicon or an
    incomplete reply backend configuration.
    """
    store = LexiconStore(path=settings.lexicon_path)
    reply_generator = build_reply_generator(settings)
    route_logger = RouteLogger(
        log_dir=settings.log_dir, level=settings.log_level
    )
    agent_metrics = AgentMetricsHandler()
    dispatcher = initialize_tracing(settings, metrics=agent_metrics)
    router = AgentRouter(
        store,
        reply_generator,
        route_logger=route_logger,
        dispatcher=dispatcher,
    )
    return AppState(
        settings=settings,
        store=store,
        router=router,
        dispatcher=dispatcher,
        metrics=agent_metrics,
        route_logger=route_logger,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = _settings

    # A bad lexicon raises ConfigurationError here and aborts startup.
    state = build_app_state(settings)
    app.state.settings = settings
    app.state.typed = state

    # litellm (if selected) is imported by now.
    cleanup_third_party_handlers()

    _logger.info(
        "event=startup lexicon_version=%s reply_backend=%s",
        state.store.current.version,
        settings.reply_backend,
    )
    if not settings.api_key:
        _logger.warning("event=no_api_key action=all_endpoints_public")

    yield

    aclose = getattr(state.router.reply_generator, "aclose", None)
    if aclose is not None:
        await aclose()
    if state.route_logger is not None:
        state.route_logger.close()


app = FastAPI(
    title="DIBEA Agent Router",
    description=(
        "Routes portal chat messages to the specialised agent"
        " that should handle them"
    ),
    version=__version__,
    openapi_url="/api/openapi.json",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)

# Middleware stack (Starlette LIFO: last added = outermost = runs first)
#
# Inbound request order:
#   CORSMiddleware (outermost) -> ApiKeyMiddleware -> Router
#
# CORS must be outermost so OPTIONS preflight is answered before
# ApiKeyMiddleware rejects for missing X-API-Key.
_settings = Settings()

app.add_middleware(ApiKeyMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origin_list,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", API_KEY_HEADER],
    allow_credentials=False,
)

app.include_router(health.router)
app.include_router(chat.router)
app.include_router(lexicon.router)
app.include_router(metrics.router)
