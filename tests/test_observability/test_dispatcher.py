"""Tests for the trace event dispatcher."""

from __future__ import annotations

import logging

import pytest

from dibea_router.observability.dispatcher import TraceDispatcher
from dibea_router.observability.events import TraceEvent
from tests.fakes import RecordingHandler


class TestTraceDispatcher:
    async def test_emit_fans_out_to_handlers(self) -> None:
        """Every registered handler receives the event."""
        first = RecordingHandler("first")
        second = RecordingHandler("second")
        dispatcher = TraceDispatcher()
        dispatcher.register(first)
        dispatcher.register(second)

        await dispatcher.emit(TraceEvent(type="route_start", trace_id="t1"))

        assert [e.trace_id for e in first.events] == ["t1"]
        assert [e.trace_id for e in second.events] == ["t1"]

    def test_duplicate_handler_ignored(self) -> None:
        """Registering the same handler name twice is a no-op."""
        original = RecordingHandler("stub")
        dispatcher = TraceDispatcher()
        dispatcher.register(original)
        dispatcher.register(RecordingHandler("stub"))

        assert dispatcher.handler_count == 1
        assert dispatcher.get("stub") is original

    def test_get_unknown_handler(self) -> None:
        assert TraceDispatcher().get("missing") is None

    async def test_handler_error_does_not_propagate(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A failing handler does not stop later handlers."""

        class BadHandler:
            @property
            def name(self) -> str:
                return "bad"

            async def handle(self, event: TraceEvent) -> None:
                msg = "boom"
                raise RuntimeError(msg)

        after = RecordingHandler()
        dispatcher = TraceDispatcher()
        dispatcher.register(BadHandler())
        dispatcher.register(after)

        with caplog.at_level(
            logging.WARNING, logger="dibea_router.observability.dispatcher"
        ):
            await dispatcher.emit(TraceEvent(type="error", trace_id="t1"))

        assert len(after.events) == 1
        [record] = caplog.records
        assert "handler=bad" in record.message
        assert "trace_id=t1" in record.message
        assert "error_type=RuntimeError error=boom" in record.message

    async def test_emit_with_no_handlers(self) -> None:
        dispatcher = TraceDispatcher()
        await dispatcher.emit(TraceEvent(type="route_end", trace_id="t1"))
