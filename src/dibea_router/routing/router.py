"""Agent router: orchestrates one message through the routing pipeline.

State machine::

    received → normalized → scored → classified → actions_built
             → response_ready

with two terminal failure states: ``rejected`` (invalid input, raised
to the caller as ValidationError) and ``fallback`` (an unexpected
error inside the pipeline, answered with the DEFAULT canned reply).

The only I/O is the optional reply-generator call, bounded by the
lexicon's ``reply_timeout_seconds``. Any collaborator failure,
timeout or cancellation is answered with the category's canned reply
and ``degraded=True``.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from dibea_router.constants import (
    ERROR_TRUNCATION_CHARS,
    ID_HEX_LENGTH,
    AgentCategory,
    RouteState,
    UserRole,
)
from dibea_router.lexicon.schemas import Lexicon
from dibea_router.lexicon.store import LexiconStore
from dibea_router.logger import RouteLogger
from dibea_router.observability.dispatcher import TraceDispatcher
from dibea_router.observability.events import (
    TraceCategory,
    TraceEvent,
    TraceEventType,
)
from dibea_router.replies import ReplyGenerator
from dibea_router.resilience.errors import (
    CollaboratorError,
    CollaboratorTimeoutError,
    CollaboratorUnavailableError,
    ValidationError,
    as_collaborator_error,
    classify_error,
    is_retryable,
)
from dibea_router.routing.actions import synthesize
from dibea_router.routing.classifier import classify, disambiguate
from dibea_router.routing.entities import extract_entities
from dibea_router.routing.normalizer import normalize
from dibea_router.routing.schemas import (
    AgentResponse,
    HistoryMessage,
    RoutingDecision,
    SuggestedAction,
    empty_scoreboard,
)
from dibea_router.routing.scorer import score

logger = logging.getLogger(__name__)


@dataclass
class RouteRun:
    """Per-call bookkeeping: ids, timings and visited states."""

    request_id: str
    session_id: str | None
    started: float = field(default_factory=time.perf_counter)
    states: list[RouteState] = field(
        default_factory=lambda: [RouteState.RECEIVED]
    )

    @property
    def state(self) -> RouteState:
        return self.states[-1]

    def elapsed_ms(self) -> float:
        return round((time.perf_counter() - self.started) * 1000, 2)


class AgentRouter:
    """Routes user messages to specialised agents.

    Stateless between calls: each ``route`` reads the current lexicon
    snapshot once and keeps it for the whole call, so a concurrent
    reload never mixes two lexicons inside one request.
    """

    def __init__(
        self,
        store: LexiconStore,
        reply_generator: ReplyGenerator | None = None,
        *,
        route_logger: RouteLogger | None = None,
        dispatcher: TraceDispatcher | None = None,
    ) -> None:
        self._store = store
        self._reply_generator = reply_generator
        self._route_logger = route_logger
        self._dispatcher = dispatcher

    @property
    def store(self) -> LexiconStore:
        return self._store

    @property
    def reply_generator(self) -> ReplyGenerator | None:
        return self._reply_generator

    async def route(
        self,
        message: str,
        history: Sequence[HistoryMessage] = (),
        session_id: str | None = None,
        role: UserRole | None = None,
    ) -> AgentResponse:
        """Classify ``message`` and build the response for the UI.

        Raises:
            ValidationError: empty or oversized message.
        """
        lexicon = self._store.current
        run = RouteRun(
            request_id=uuid.uuid4().hex[:ID_HEX_LENGTH],
            session_id=session_id,
        )
        await self._emit(
            "route_start", run, {"session_id": session_id}
        )

        self._validate(message, lexicon, run)

        try:
            decision, entities, actions = self._decide(
                message, history, lexicon, role, run
            )
        except Exception as exc:
            return await self._fallback(exc, lexicon, run)

        reply, degraded = await self._reply(
            decision.agent, message, lexicon, run
        )
        response = AgentResponse(
            agent=decision.agent,
            confidence=decision.confidence,
            reply=reply,
            actions=actions,
            degraded=degraded,
            entities=entities,
            used_context=decision.used_context,
        )
        self._advance(run, RouteState.RESPONSE_READY)
        await self._finish(response, run)
        return response

    # ── pipeline steps ───────────────────────────────────

    def _validate(
        self, message: str, lexicon: Lexicon, run: RouteRun
    ) -> None:
        limit = lexicon.settings.max_message_length
        if not isinstance(message, str) or not message.strip():
            reason = "message must not be empty"
        elif len(message) > limit:
            reason = f"message exceeds {limit} characters"
        else:
            return

        self._advance(run, RouteState.REJECTED, status="error", error=reason)
        logger.info(
            "event=route_rejected request_id=%s session_id=%s reason=%s",
            run.request_id,
            run.session_id,
            reason,
        )
        raise ValidationError(reason)

    def _decide(
        self,
        message: str,
        history: Sequence[HistoryMessage],
        lexicon: Lexicon,
        role: UserRole | None,
        run: RouteRun,
    ) -> tuple[RoutingDecision, dict[str, str], list[SuggestedAction]]:
        normalized = normalize(message)
        self._advance(run, RouteState.NORMALIZED)

        scores = score(normalized, lexicon)
        self._advance(run, RouteState.SCORED)

        decision = classify(scores, lexicon.priority)
        decision = disambiguate(decision, message, history, lexicon)
        self._advance(run, RouteState.CLASSIFIED)

        entities = extract_entities(normalized, lexicon)
        actions = synthesize(decision, lexicon, entities, role)
        self._advance(run, RouteState.ACTIONS_BUILT)

        logger.debug(
            "event=route_decided request_id=%s agent=%s confidence=%.3f "
            "used_context=%s",
            run.request_id,
            decision.agent,
            decision.confidence,
            decision.used_context,
        )
        return decision, entities, actions

    async def _reply(
        self,
        agent: AgentCategory,
        message: str,
        lexicon: Lexicon,
        run: RouteRun,
    ) -> tuple[str, bool]:
        """Collaborator reply, or the canned reply plus degraded flag."""
        canned = lexicon.reply_for(agent)
        if self._reply_generator is None:
            return canned, False

        budget = lexicon.settings.reply_timeout_seconds
        error: CollaboratorError
        try:
            async with asyncio.timeout(budget):
                text = await self._reply_generator.generate_reply(
                    agent, message, session_id=run.session_id
                )
        except TimeoutError:
            error = CollaboratorTimeoutError(
                f"no reply within {budget}s"
            )
        except asyncio.CancelledError:
            # The caller gave up waiting; answer with the canned reply.
            task = asyncio.current_task()
            if task is not None:
                task.uncancel()
            error = CollaboratorUnavailableError("reply cancelled")
        except Exception as exc:
            error = as_collaborator_error(exc)
        else:
            if isinstance(text, str) and text.strip():
                return text.strip(), False
            error = CollaboratorUnavailableError("empty reply")

        error_class = classify_error(error)
        retryable = is_retryable(error)
        logger.warning(
            "event=reply_fallback request_id=%s session_id=%s agent=%s "
            "error_type=%s error_class=%s retryable=%s error=%s",
            run.request_id,
            run.session_id,
            agent,
            type(error).__name__,
            error_class.value,
            retryable,
            str(error)[:ERROR_TRUNCATION_CHARS],
        )
        if self._route_logger is not None:
            self._route_logger.log_error(
                run.session_id,
                run.request_id,
                "reply_generator",
                f"{type(error).__name__}: {error}",
            )
        await self._emit(
            "reply_fallback",
            run,
            {
                "agent": agent.value,
                "error_type": type(error).__name__,
                "error_class": error_class.value,
                "retryable": retryable,
            },
            category="reply",
        )
        return canned, True

    async def _fallback(
        self, exc: Exception, lexicon: Lexicon, run: RouteRun
    ) -> AgentResponse:
        """DEFAULT canned response after an unexpected pipeline error."""
        self._advance(
            run, RouteState.FALLBACK, status="error", error=str(exc)
        )
        logger.error(
            "event=route_fallback request_id=%s session_id=%s error=%s",
            run.request_id,
            run.session_id,
            str(exc)[:ERROR_TRUNCATION_CHARS],
            exc_info=True,
        )
        if self._route_logger is not None:
            self._route_logger.log_error(
                run.session_id,
                run.request_id,
                "router",
                f"{type(exc).__name__}: {exc}",
            )
        await self._emit(
            "error",
            run,
            {"error_type": type(exc).__name__, "state": run.state.value},
        )

        decision = RoutingDecision(
            agent=AgentCategory.DEFAULT,
            confidence=0.0,
            scores=empty_scoreboard(),
        )
        response = AgentResponse(
            agent=AgentCategory.DEFAULT,
            confidence=0.0,
            reply=lexicon.reply_for(AgentCategory.DEFAULT),
            actions=synthesize(decision, lexicon),
            degraded=True,
        )
        await self._finish(response, run)
        return response

    # ── bookkeeping ──────────────────────────────────────

    def _advance(
        self,
        run: RouteRun,
        state: RouteState,
        *,
        status: str = "ok",
        error: str | None = None,
    ) -> None:
        run.states.append(state)
        if self._route_logger is not None:
            self._route_logger.log_stage(
                run.request_id,
                state.value,
                status,
                run.elapsed_ms(),
                error=error,
            )

    async def _finish(self, response: AgentResponse, run: RouteRun) -> None:
        duration_ms = run.elapsed_ms()
        logger.info(
            "event=route_end request_id=%s session_id=%s agent=%s "
            "confidence=%.3f degraded=%s state=%s duration_ms=%.2f",
            run.request_id,
            run.session_id,
            response.agent,
            response.confidence,
            response.degraded,
            run.state,
            duration_ms,
        )
        if self._route_logger is not None:
            self._route_logger.log_route(
                run.session_id,
                run.request_id,
                response.agent.value,
                response.confidence,
                response.degraded,
                response.used_context,
                duration_ms,
            )
        await self._emit(
            "route_end",
            run,
            {
                "agent": response.agent.value,
                "confidence": response.confidence,
                "degraded": response.degraded,
                "used_context": response.used_context,
                "duration_ms": duration_ms,
                "state": run.state.value,
                "states": [s.value for s in run.states],
            },
        )

    async def _emit(
        self,
        event_type: TraceEventType,
        run: RouteRun,
        data: dict[str, Any],
        *,
        category: TraceCategory = "routing",
    ) -> None:
        if self._dispatcher is None:
            return
        await self._dispatcher.emit(
            TraceEvent(
                type=event_type,
                trace_id=run.request_id,
                category=category,
                data=data,
            )
        )
