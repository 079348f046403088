"""Per-agent interaction metrics."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dibea_router.api.dependencies import get_metrics
from dibea_router.api.schemas import APIResponse
from dibea_router.observability.handlers.metrics import AgentMetricsHandler

router = APIRouter(prefix="/api/agents", tags=["agents"])


@router.get("/metrics")
async def get_agent_metrics(
    metrics: AgentMetricsHandler = Depends(get_metrics),
) -> APIResponse:
    """Interaction counts, degraded replies and response times per agent."""
    return APIResponse(success=True, data=metrics.snapshot())
