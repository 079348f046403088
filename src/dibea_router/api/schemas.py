"""Request/response schemas for the HTTP API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from dibea_router.constants import UserRole
from dibea_router.routing.schemas import HistoryMessage


class APIResponse(BaseModel):
    """Standard response envelope for all API endpoints."""

    success: bool
    data: Any | None = None
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ChatRequest(BaseModel):
    """Request body for POST /api/agents/chat.

    Length and emptiness are checked by the router so that both
    surface as the same ValidationError.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    message: str
    history: list[HistoryMessage] = Field(
        default_factory=lambda: list[HistoryMessage]()
    )
    session_id: str | None = None
    role: UserRole | None = None

    @field_validator("role", mode="before")
    @classmethod
    def _upper_role(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper() or None
        return v
