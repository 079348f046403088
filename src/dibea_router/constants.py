"""Shared constants: single source of truth for cross-module values.

All magic strings and numbers that appear in 2+ files belong here.
StrEnum members are str-compatible, so downstream code (JSON, YAML,
log lines) works unchanged.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class AgentCategory(StrEnum):
    """Specialised agents a message can be routed to.

    DEFAULT is the only category reachable with a zero score and
    never carries trigger rules.
    """

    ANIMAL = "animal"
    PROCEDURE = "procedure"
    TUTOR = "tutor"
    DOCUMENT = "document"
    GENERAL = "general"
    DEFAULT = "default"


class SenderRole(StrEnum):
    """Author of a conversation history entry."""

    USER = "user"
    AGENT = "agent"


class RouteState(StrEnum):
    """Router lifecycle states.

    FALLBACK and REJECTED are terminal alongside RESPONSE_READY.
    """

    RECEIVED = "received"
    NORMALIZED = "normalized"
    SCORED = "scored"
    CLASSIFIED = "classified"
    ACTIONS_BUILT = "actions_built"
    RESPONSE_READY = "response_ready"
    FALLBACK = "fallback"
    REJECTED = "rejected"


class UserRole(StrEnum):
    """Portal roles that may talk to the router."""

    ADMIN = "ADMIN"
    VETERINARIO = "VETERINARIO"
    FUNCIONARIO = "FUNCIONARIO"
    CIDADAO = "CIDADAO"


class PermissionLevel(StrEnum):
    """Access level a role holds on one agent category."""

    NONE = "none"
    READ = "read"
    BASIC = "basic"
    FULL = "full"
    ADMIN = "admin"


class ReplyBackend(StrEnum):
    """Reply generator implementation selected by settings."""

    NONE = "none"
    WEBHOOK = "webhook"
    LLM = "llm"


# ── Classification ───────────────────────────────────────

# Tie-break order for equal non-zero scores, highest priority first.
PRIORITY_ORDER: tuple[AgentCategory, ...] = (
    AgentCategory.ANIMAL,
    AgentCategory.PROCEDURE,
    AgentCategory.TUTOR,
    AgentCategory.DOCUMENT,
    AgentCategory.GENERAL,
)

ROUTABLE_CATEGORIES = frozenset(PRIORITY_ORDER)

# ── Router Defaults (overridable by the lexicon) ─────────

DEFAULT_CONFIDENCE_THRESHOLD = 0.34
DEFAULT_HISTORY_LOOKBACK = 1
DEFAULT_MAX_MESSAGE_LENGTH = 4000
DEFAULT_REPLY_TIMEOUT_SECONDS = 5.0

# ── Permissions ──────────────────────────────────────────

WILDCARD_OPERATION = "*"

ALLOWED_OPERATIONS: dict[PermissionLevel, frozenset[str]] = {
    PermissionLevel.NONE: frozenset(),
    PermissionLevel.READ: frozenset({"search", "get", "list", "view"}),
    PermissionLevel.BASIC: frozenset(
        {"search", "get", "list", "view", "create", "update"}
    ),
    PermissionLevel.FULL: frozenset(
        {"search", "get", "list", "view", "create", "update", "delete"}
    ),
    PermissionLevel.ADMIN: frozenset({WILDCARD_OPERATION}),
}

# ── Entity Extraction ────────────────────────────────────

ANIMAL_NAME_ENTITY = "animal_name"

# Capitalised words that are never animal names.
NAME_STOPWORDS = frozenset({
    "eu",
    "ele",
    "ela",
    "o",
    "a",
    "os",
    "as",
    "um",
    "uma",
    "meu",
    "minha",
    "dibea",
    "sim",
    "nao",
})

# ── Circuit Breaker / Retry (LLM replies) ────────────────

CB_LLM_FAILURE_THRESHOLD = 5
CB_LLM_RECOVERY_TIMEOUT = 30

RETRY_MAX_ATTEMPTS = 3
RETRY_INITIAL_WAIT = 1
RETRY_MAX_WAIT = 4

LLM_MAX_OUTPUT_TOKENS = 512

# ── Misc ─────────────────────────────────────────────────

ERROR_TRUNCATION_CHARS = 200
ID_HEX_LENGTH = 12

# ── Auth Exempt Paths ────────────────────────────────────

AUTH_EXEMPT_PATHS = frozenset({
    "/api/health",
    "/api/docs",
    "/api/redoc",
    "/api/openapi.json",
})

AUTH_EXEMPT_PREFIXES = ("/api/health",)
