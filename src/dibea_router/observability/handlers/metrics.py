"""Agent metrics handler -- per-agent interaction counters.

Consumes ``route_end`` events; each carries the routed agent, whether
the response was degraded and the route duration.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from dibea_router.constants import AgentCategory
from dibea_router.observability.events import TraceEvent


@dataclass
class AgentMetrics:
    """Accumulated interaction metrics for one agent."""

    total_interactions: int = 0
    successful_interactions: int = 0
    degraded_interactions: int = 0
    total_response_time_ms: float = 0.0
    last_activity: datetime | None = None

    @property
    def avg_response_time_ms(self) -> float:
        if self.total_interactions == 0:
            return 0.0
        return self.total_response_time_ms / self.total_interactions

    @property
    def success_rate(self) -> float:
        if self.total_interactions == 0:
            return 0.0
        return self.successful_interactions / self.total_interactions

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data.pop("total_response_time_ms")
        data["avg_response_time_ms"] = round(self.avg_response_time_ms, 2)
        data["success_rate"] = round(self.success_rate, 4)
        data["last_activity"] = (
            self.last_activity.isoformat() if self.last_activity else None
        )
        return data


class AgentMetricsHandler:
    """Tracks interaction counts and response times per agent."""

    def __init__(self) -> None:
        self._metrics: dict[AgentCategory, AgentMetrics] = {}

    @property
    def name(self) -> str:
        return "agent_metrics"

    async def handle(self, event: TraceEvent) -> None:
        if event.type != "route_end":
            return
        agent = AgentCategory(str(event.data["agent"]))
        metrics = self._metrics.setdefault(agent, AgentMetrics())
        metrics.total_interactions += 1
        if event.data.get("degraded", False):
            metrics.degraded_interactions += 1
        else:
            metrics.successful_interactions += 1
        metrics.total_response_time_ms += float(
            event.data.get("duration_ms", 0.0)
        )
        metrics.last_activity = event.timestamp

    def get_metrics(self, agent: AgentCategory) -> AgentMetrics:
        return self._metrics.get(agent, AgentMetrics())

    def all_metrics(self) -> dict[AgentCategory, AgentMetrics]:
        return dict(self._metrics)

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """Every agent, including idle ones, keyed by category value."""
        return {
            category.value: self.get_metrics(category).to_dict()
            for category in AgentCategory
        }

    def reset(self) -> None:
        self._metrics.clear()
