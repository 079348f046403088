"""Action synthesis: decision → ordered list of suggested actions.

Pure: builds a plan for the UI or a workflow engine to execute and
never calls anything itself.
"""

from __future__ import annotations

from collections.abc import Mapping

from dibea_router.constants import (
    ALLOWED_OPERATIONS,
    WILDCARD_OPERATION,
    AgentCategory,
    UserRole,
)
from dibea_router.lexicon.schemas import ActionTemplate, Lexicon
from dibea_router.routing.schemas import RoutingDecision, SuggestedAction


def is_operation_allowed(
    lexicon: Lexicon,
    role: UserRole,
    category: AgentCategory,
    operation: str | None,
) -> bool:
    """Whether ``role`` may perform ``operation`` on ``category``.

    Templates without an operation are navigation and always allowed.
    """
    if operation is None:
        return True
    allowed = ALLOWED_OPERATIONS[lexicon.permission(role, category)]
    return WILDCARD_OPERATION in allowed or operation in allowed


def build_action(
    template: ActionTemplate,
    entities: Mapping[str, str],
) -> SuggestedAction:
    payload = dict(template.payload)
    for key in template.entity_keys:
        if key in entities:
            payload[key] = entities[key]
    return SuggestedAction(
        label=template.label,
        action_key=template.action_key,
        target_url=template.target_url,
        payload=payload or None,
    )


def synthesize(
    decision: RoutingDecision,
    lexicon: Lexicon,
    entities: Mapping[str, str] | None = None,
    role: UserRole | None = None,
) -> list[SuggestedAction]:
    """Build the suggested actions for the winning category."""
    found = entities or {}
    actions: list[SuggestedAction] = []
    for template in lexicon.actions_for(decision.agent):
        if role is not None and not is_operation_allowed(
            lexicon, role, decision.agent, template.operation
        ):
            continue
        actions.append(build_action(template, found))
    return actions
