"""Frozen dataclasses for the routing lexicon.

A Lexicon is an immutable snapshot: it is built once by the loader
and shared read-only across concurrent route() calls.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

from dibea_router.constants import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    DEFAULT_HISTORY_LOOKBACK,
    DEFAULT_MAX_MESSAGE_LENGTH,
    DEFAULT_REPLY_TIMEOUT_SECONDS,
    PRIORITY_ORDER,
    AgentCategory,
    PermissionLevel,
    UserRole,
)


@dataclass(frozen=True)
class TriggerRule:
    """One weighted trigger phrase for a category.

    With ``prefix`` set, the last phrase token matches any message
    token that starts with it ("vacin" matches "vacinar").
    """

    category: AgentCategory
    phrase: tuple[str, ...]
    weight: float
    prefix: bool = False


@dataclass(frozen=True)
class ActionTemplate:
    """Suggested-action template attached to a category."""

    label: str
    action_key: str
    target_url: str
    payload: dict[str, str] = field(
        default_factory=lambda: dict[str, str]()
    )
    entity_keys: tuple[str, ...] = field(default_factory=tuple)
    operation: str | None = None


@dataclass(frozen=True)
class EntityPattern:
    """Phrases that map a message to one entity value."""

    key: str
    value: str
    phrases: tuple[tuple[str, ...], ...]


@dataclass(frozen=True)
class RouterSettings:
    """Router tunables shipped with the lexicon."""

    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    history_lookback: int = DEFAULT_HISTORY_LOOKBACK
    max_message_length: int = DEFAULT_MAX_MESSAGE_LENGTH
    reply_timeout_seconds: float = DEFAULT_REPLY_TIMEOUT_SECONDS


@dataclass(frozen=True)
class Lexicon:
    """Complete, validated routing configuration."""

    version: str
    rules: dict[AgentCategory, tuple[TriggerRule, ...]]
    actions: dict[AgentCategory, tuple[ActionTemplate, ...]]
    replies: dict[AgentCategory, str]
    priority: tuple[AgentCategory, ...] = PRIORITY_ORDER
    entities: tuple[EntityPattern, ...] = field(default_factory=tuple)
    permissions: dict[UserRole, dict[AgentCategory, PermissionLevel]] = (
        field(
            default_factory=lambda: dict[
                UserRole, dict[AgentCategory, PermissionLevel]
            ]()
        )
    )
    settings: RouterSettings = field(default_factory=RouterSettings)

    def rules_for(self, category: AgentCategory) -> tuple[TriggerRule, ...]:
        return self.rules.get(category, ())

    def iter_rules(self) -> Iterator[TriggerRule]:
        for category in AgentCategory:
            yield from self.rules_for(category)

    def actions_for(
        self, category: AgentCategory
    ) -> tuple[ActionTemplate, ...]:
        return self.actions.get(category, ())

    def reply_for(self, category: AgentCategory) -> str:
        return self.replies[category]

    def permission(
        self, role: UserRole, category: AgentCategory
    ) -> PermissionLevel:
        """Permission level of ``role`` on ``category``.

        An empty matrix, or the DEFAULT category, is unrestricted.
        """
        if not self.permissions or category is AgentCategory.DEFAULT:
            return PermissionLevel.ADMIN
        return self.permissions.get(role, {}).get(
            category, PermissionLevel.NONE
        )

    @cached_property
    def trigger_tokens(self) -> frozenset[str]:
        """Trigger tokens that only match a message token exactly."""
        return frozenset(
            token
            for rule in self.iter_rules()
            for token in (rule.phrase[:-1] if rule.prefix else rule.phrase)
        )

    @cached_property
    def trigger_prefixes(self) -> frozenset[str]:
        """Last tokens of prefix rules; they match any continuation."""
        return frozenset(
            rule.phrase[-1] for rule in self.iter_rules() if rule.prefix
        )

    def summary(self) -> dict[str, Any]:
        """Compact description for APIs and the CLI."""
        return {
            "version": self.version,
            "rules": {
                str(c): len(self.rules_for(c)) for c in AgentCategory
            },
            "actions": {
                str(c): len(self.actions_for(c)) for c in AgentCategory
            },
            "priority": [str(c) for c in self.priority],
            "entity_keys": sorted({e.key for e in self.entities}),
            "roles": sorted(str(r) for r in self.permissions),
            "settings": {
                "confidence_threshold": self.settings.confidence_threshold,
                "history_lookback": self.settings.history_lookback,
                "max_message_length": self.settings.max_message_length,
                "reply_timeout_seconds": (
                    self.settings.reply_timeout_seconds
                ),
            },
        }
