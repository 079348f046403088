"""Typed trace events emitted while routing messages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

TraceEventType = Literal[
    "route_start",
    "route_end",
    "reply_fallback",
    "error",
]

TraceCategory = Literal[
    "routing",
    "reply",
]


@dataclass(frozen=True)
class TraceEvent:
    """Immutable trace event emitted during one route call."""

    type: TraceEventType
    trace_id: str
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(UTC)
    )
    category: TraceCategory = "routing"
    data: dict[str, Any] = field(
        default_factory=lambda: dict[str, Any]()
    )
