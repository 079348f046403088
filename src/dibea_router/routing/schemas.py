"""Routing value types: internal decisions and the public response.

Internal values (ScoreBoard, RoutingDecision) are plain frozen
dataclasses; everything that crosses the API boundary is a Pydantic
model serialised with camelCase aliases for the portal UI.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from dibea_router.constants import AgentCategory, SenderRole

type ScoreBoard = dict[AgentCategory, float]


def empty_scoreboard() -> ScoreBoard:
    """Every declared category present, all at zero."""
    return {category: 0.0 for category in AgentCategory}


@dataclass(frozen=True)
class RoutingDecision:
    """Classifier output, with the full score board for auditing."""

    agent: AgentCategory
    confidence: float
    scores: ScoreBoard
    used_context: bool = False


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class HistoryMessage(_CamelModel):
    """One prior conversation turn supplied by the caller."""

    sender: SenderRole
    content: str


type ConversationContext = Sequence[HistoryMessage]


class SuggestedAction(_CamelModel):
    """A follow-up the UI can render as a button."""

    label: str
    action_key: str
    target_url: str
    payload: dict[str, str] | None = None


class AgentResponse(_CamelModel):
    """Structured answer returned by ``AgentRouter.route``."""

    agent: AgentCategory
    confidence: float = Field(ge=0.0, le=1.0)
    reply: str
    actions: list[SuggestedAction] = Field(
        default_factory=lambda: list[SuggestedAction]()
    )
    degraded: bool = False
    entities: dict[str, str] = Field(
        default_factory=lambda: dict[str, str]()
    )
    used_context: bool = False
