"""Load and validate lexicon YAML files.

Every structural problem (unknown category, non-positive weight,
missing canned reply) raises ConfigurationError at load time so a
broken lexicon can never reach a request.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from dibea_router.constants import (
    PRIORITY_ORDER,
    ROUTABLE_CATEGORIES,
    AgentCategory,
    PermissionLevel,
    UserRole,
)
from dibea_router.lexicon.schemas import (
    ActionTemplate,
    EntityPattern,
    Lexicon,
    RouterSettings,
    TriggerRule,
)
from dibea_router.resilience.errors import ConfigurationError
from dibea_router.routing.normalizer import normalize_phrase

logger = logging.getLogger(__name__)

DEFAULT_LEXICON_PATH = Path(__file__).resolve().with_name("default.yaml")


def load_lexicon(path: Path | None = None) -> Lexicon:
    """Load a lexicon from YAML (defaults to the bundled one).

    Raises ``ConfigurationError`` if the file is missing, is not
    valid YAML, or fails validation.
    """
    source = path or DEFAULT_LEXICON_PATH
    if not source.exists():
        msg = f"Lexicon not found: {source}"
        raise ConfigurationError(msg)

    try:
        raw = yaml.safe_load(source.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        msg = f"Lexicon {source} is not valid YAML: {exc}"
        raise ConfigurationError(msg) from exc

    lexicon = parse_lexicon(raw, source=str(source))
    logger.info(
        "event=lexicon_loaded version=%s source=%s rules=%d",
        lexicon.version,
        source,
        sum(1 for _ in lexicon.iter_rules()),
    )
    return lexicon


def parse_lexicon(raw: Any, *, source: str = "<memory>") -> Lexicon:
    """Validate an already-decoded YAML mapping into a Lexicon."""
    if not isinstance(raw, dict):
        msg = f"Lexicon {source} must be a mapping at top level"
        raise ConfigurationError(msg)

    version = str(raw.get("version", "")).strip()
    if not version:
        msg = f"Lexicon {source} is missing 'version'"
        raise ConfigurationError(msg)

    replies = _parse_replies(raw.get("replies"), source)
    return Lexicon(
        version=version,
        rules=_parse_triggers(raw.get("triggers"), source),
        actions=_parse_actions(raw.get("actions") or {}, source),
        replies=replies,
        priority=_parse_priority(raw.get("priority"), source),
        entities=_parse_entities(raw.get("entities") or {}, source),
        permissions=_parse_permissions(
            raw.get("permissions") or {}, source
        ),
        settings=_parse_settings(raw.get("settings") or {}, source),
    )


# ── Section parsers ─────────────────────────────────────


def _category(value: Any, source: str) -> AgentCategory:
    try:
        return AgentCategory(str(value).lower())
    except ValueError:
        msg = (
            f"Unknown agent category '{value}' in lexicon {source}. "
            f"Must be one of: {[str(c) for c in AgentCategory]}"
        )
        raise ConfigurationError(msg) from None


def _mapping(value: Any, section: str, source: str) -> dict[Any, Any]:
    if not isinstance(value, dict):
        msg = f"Section '{section}' in lexicon {source} must be a mapping"
        raise ConfigurationError(msg)
    return value


def _phrase(value: Any, where: str) -> tuple[str, ...]:
    tokens = normalize_phrase(str(value or ""))
    if not tokens:
        msg = f"Empty trigger phrase in {where}"
        raise ConfigurationError(msg)
    return tokens


def _parse_triggers(
    raw: Any, source: str
) -> dict[AgentCategory, tuple[TriggerRule, ...]]:
    section = _mapping(raw, "triggers", source)
    rules: dict[AgentCategory, tuple[TriggerRule, ...]] = {}
    for key, entries in section.items():
        category = _category(key, source)
        if category is AgentCategory.DEFAULT:
            msg = (
                f"Lexicon {source} declares triggers for 'default'; "
                "the default agent is only reachable with a zero score"
            )
            raise ConfigurationError(msg)

        parsed: list[TriggerRule] = []
        for i, entry in enumerate(entries or []):
            where = f"triggers.{category}[{i}] of {source}"
            if isinstance(entry, str):
                entry = {"phrase": entry}
            if not isinstance(entry, dict):
                msg = f"Trigger {where} must be a string or mapping"
                raise ConfigurationError(msg)
            try:
                weight = float(entry.get("weight", 1.0))
            except (TypeError, ValueError):
                msg = f"Non-numeric weight in {where}"
                raise ConfigurationError(msg) from None
            if weight <= 0:
                msg = f"weight must be positive in {where}, got {weight}"
                raise ConfigurationError(msg)
            parsed.append(
                TriggerRule(
                    category=category,
                    phrase=_phrase(entry.get("phrase"), where),
                    weight=weight,
                    prefix=bool(entry.get("prefix", False)),
                )
            )
        rules[category] = tuple(parsed)

    if not any(rules.values()):
        msg = f"Lexicon {source} declares no trigger rules"
        raise ConfigurationError(msg)
    return rules


def _parse_actions(
    raw: Any, source: str
) -> dict[AgentCategory, tuple[ActionTemplate, ...]]:
    section = _mapping(raw, "actions", source)
    actions: dict[AgentCategory, tuple[ActionTemplate, ...]] = {}
    for key, entries in section.items():
        category = _category(key, source)
        templates: list[ActionTemplate] = []
        for i, entry in enumerate(entries or []):
            where = f"actions.{category}[{i}] of {source}"
            if not isinstance(entry, dict):
                msg = f"Action {where} must be a mapping"
                raise ConfigurationError(msg)
            missing = [
                f
                for f in ("label", "action_key", "target_url")
                if not str(entry.get(f, "")).strip()
            ]
            if missing:
                msg = f"Action {where} is missing {', '.join(missing)}"
                raise ConfigurationError(msg)
            payload = _mapping(
                entry.get("payload") or {}, f"{where}.payload", source
            )
            operation = entry.get("operation")
            templates.append(
                ActionTemplate(
                    label=str(entry["label"]),
                    action_key=str(entry["action_key"]),
                    target_url=str(entry["target_url"]),
                    payload={str(k): str(v) for k, v in payload.items()},
                    entity_keys=tuple(
                        str(k) for k in entry.get("entity_keys") or []
                    ),
                    operation=str(operation) if operation else None,
                )
            )
        actions[category] = tuple(templates)

    # An explicit empty list is fine; a missing category is not.
    missing = [str(c) for c in AgentCategory if c not in actions]
    if missing:
        msg = (
            f"Lexicon {source} has no action list for: "
            f"{', '.join(missing)}"
        )
        raise ConfigurationError(msg)
    return actions


def _parse_replies(raw: Any, source: str) -> dict[AgentCategory, str]:
    section = _mapping(raw, "replies", source)
    replies = {
        _category(key, source): str(text).strip()
        for key, text in section.items()
    }
    missing = [
        str(c) for c in AgentCategory if not replies.get(c)
    ]
    if missing:
        msg = (
            f"Lexicon {source} is missing canned replies for: "
            f"{', '.join(missing)}"
        )
        raise ConfigurationError(msg)
    return replies


def _parse_priority(raw: Any, source: str) -> tuple[AgentCategory, ...]:
    if raw is None:
        return PRIORITY_ORDER
    if not isinstance(raw, list):
        msg = f"'priority' in lexicon {source} must be a list"
        raise ConfigurationError(msg)
    order = tuple(_category(v, source) for v in raw)
    if len(order) != len(ROUTABLE_CATEGORIES) or (
        set(order) != ROUTABLE_CATEGORIES
    ):
        msg = (
            f"'priority' in lexicon {source} must list each of "
            f"{[str(c) for c in PRIORITY_ORDER]} exactly once"
        )
        raise ConfigurationError(msg)
    return order


def _parse_entities(raw: Any, source: str) -> tuple[EntityPattern, ...]:
    section = _mapping(raw, "entities", source)
    patterns: list[EntityPattern] = []
    for key, values in section.items():
        for value, phrases in _mapping(
            values, f"entities.{key}", source
        ).items():
            where = f"entities.{key}.{value} of {source}"
            if not isinstance(phrases, list) or not phrases:
                msg = f"Entity {where} needs a non-empty phrase list"
                raise ConfigurationError(msg)
            patterns.append(
                EntityPattern(
                    key=str(key),
                    value=str(value),
                    phrases=tuple(_phrase(p, where) for p in phrases),
                )
            )
    return tuple(patterns)


def _parse_permissions(
    raw: Any, source: str
) -> dict[UserRole, dict[AgentCategory, PermissionLevel]]:
    section = _mapping(raw, "permissions", source)
    matrix: dict[UserRole, dict[AgentCategory, PermissionLevel]] = {}
    for role_key, levels in section.items():
        try:
            role = UserRole(str(role_key).upper())
        except ValueError:
            msg = f"Unknown role '{role_key}' in lexicon {source}"
            raise ConfigurationError(msg) from None

        row: dict[AgentCategory, PermissionLevel] = {}
        for cat_key, level_key in _mapping(
            levels, f"permissions.{role}", source
        ).items():
            category = _category(cat_key, source)
            try:
                row[category] = PermissionLevel(str(level_key).lower())
            except ValueError:
                msg = (
                    f"Unknown permission level '{level_key}' for "
                    f"{role}/{category} in lexicon {source}"
                )
                raise ConfigurationError(msg) from None

        missing = sorted(str(c) for c in ROUTABLE_CATEGORIES - set(row))
        if missing:
            msg = (
                f"Role {role} in lexicon {source} has no permission "
                f"for: {', '.join(missing)}"
            )
            raise ConfigurationError(msg)
        matrix[role] = row
    return matrix


def _parse_settings(raw: Any, source: str) -> RouterSettings:
    section = _mapping(raw, "settings", source)
    defaults = RouterSettings()
    try:
        settings = RouterSettings(
            confidence_threshold=float(
                section.get(
                    "confidence_threshold", defaults.confidence_threshold
                )
            ),
            history_lookback=int(
                section.get("history_lookback", defaults.history_lookback)
            ),
            max_message_length=int(
                section.get(
                    "max_message_length", defaults.max_message_length
                )
            ),
            reply_timeout_seconds=float(
                section.get(
                    "reply_timeout_seconds", defaults.reply_timeout_seconds
                )
            ),
        )
    except (TypeError, ValueError) as exc:
        msg = f"Invalid 'settings' in lexicon {source}: {exc}"
        raise ConfigurationError(msg) from exc

    if not 0.0 <= settings.confidence_threshold <= 1.0:
        msg = f"confidence_threshold must be within [0, 1] in {source}"
        raise ConfigurationError(msg)
    if settings.history_lookback < 0:
        msg = f"history_lookback must not be negative in {source}"
        raise ConfigurationError(msg)
    if settings.max_message_length <= 0:
        msg = f"max_message_length must be positive in {source}"
        raise ConfigurationError(msg)
    if settings.reply_timeout_seconds <= 0:
        msg = f"reply_timeout_seconds must be positive in {source}"
        raise ConfigurationError(msg)
    return settings
