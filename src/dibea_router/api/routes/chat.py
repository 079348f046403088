"""Agent chat route: one message in, one routed AgentResponse out."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from dibea_router.api.dependencies import get_router
from dibea_router.api.schemas import APIResponse, ChatRequest
from dibea_router.resilience.errors import ValidationError
from dibea_router.routing.router import AgentRouter

router = APIRouter(prefix="/api/agents", tags=["agents"])


@router.post("/chat")
async def chat(
    body: ChatRequest,
    response: Response,
    agent_router: AgentRouter = Depends(get_router),
) -> APIResponse:
    """Route a chat message to the agent that should handle it."""
    try:
        result = await agent_router.route(
            body.message,
            body.history,
            session_id=body.session_id,
            role=body.role,
        )
    except ValidationError as exc:
        response.status_code = 422
        return APIResponse(success=False, error=str(exc))

    return APIResponse(
        success=True,
        data=result.model_dump(mode="json", by_alias=True),
        metadata={"sessionId": body.session_id},
    )
