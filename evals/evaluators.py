"""Custom pydantic-evals evaluators for the agent router.

Deterministic (no LLM), all operating on ``AgentResponse`` output:
- AgentIs: response.agent equals the expected category
- ConfidenceAbove: response.confidence meets a threshold (returns score)
- HasAction: response suggests an action with the given action key
- EntityEquals: an extracted entity has the expected value
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic_evals.evaluators import Evaluator, EvaluatorContext

from dibea_router.constants import DEFAULT_CONFIDENCE_THRESHOLD


@dataclass
class AgentIs(Evaluator[Any, Any]):
    """Check that the message was routed to ``agent``."""

    agent: str = ""

    def evaluate(
        self, ctx: EvaluatorContext[Any, Any]
    ) -> bool:
        return str(getattr(ctx.output, "agent", "")) == self.agent


@dataclass
class ConfidenceAbove(Evaluator[Any, Any]):
    """Return the confidence as a score, or 0.0 below threshold."""

    threshold: float = DEFAULT_CONFIDENCE_THRESHOLD

    def evaluate(
        self, ctx: EvaluatorContext[Any, Any]
    ) -> float:
        value = float(getattr(ctx.output, "confidence", 0.0))
        return value if value >= self.threshold else 0.0


@dataclass
class HasAction(Evaluator[Any, Any]):
    """Check that a suggested action with ``action_key`` is present."""

    action_key: str = ""

    def evaluate(
        self, ctx: EvaluatorContext[Any, Any]
    ) -> bool:
        actions = getattr(ctx.output, "actions", [])
        return any(a.action_key == self.action_key for a in actions)


@dataclass
class EntityEquals(Evaluator[Any, Any]):
    """Check one extracted entity value."""

    key: str = ""
    value: str = ""

    def evaluate(
        self, ctx: EvaluatorContext[Any, Any]
    ) -> bool:
        entities = getattr(ctx.output, "entities", {})
        return entities.get(self.key) == self.value
