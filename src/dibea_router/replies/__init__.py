"""Reply generator collaborators.

The router only depends on the ``ReplyGenerator`` protocol; concrete
backends are picked from settings by ``build_reply_generator``.
"""

from __future__ import annotations

import logging
from typing import Protocol

from dibea_router.config import Settings
from dibea_router.constants import AgentCategory, ReplyBackend
from dibea_router.resilience.errors import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = ["ReplyGenerator", "build_reply_generator"]


class ReplyGenerator(Protocol):
    """Produces the natural-language reply for a routed message."""

    async def generate_reply(
        self,
        agent: AgentCategory,
        message: str,
        *,
        session_id: str | None = None,
    ) -> str: ...


def build_reply_generator(settings: Settings) -> ReplyGenerator | None:
    """Create the configured backend, or None for canned replies only."""
    backend = settings.reply_backend

    if backend is ReplyBackend.NONE:
        return None

    if backend is ReplyBackend.WEBHOOK:
        if not settings.reply_webhook_url:
            raise ConfigurationError(
                "REPLY_WEBHOOK_URL is required when REPLY_BACKEND=webhook"
            )
        from dibea_router.replies.webhook import WebhookReplyGenerator

        logger.info(
            "event=reply_backend backend=webhook url=%s",
            settings.reply_webhook_url,
        )
        return WebhookReplyGenerator(
            settings.reply_webhook_url,
            timeout=settings.reply_webhook_timeout_seconds,
        )

    # litellm is imported lazily so logging setup runs first.
    from dibea_router.replies.llm import LLMReplyGenerator

    logger.info(
        "event=reply_backend backend=llm models=%s",
        ",".join(settings.litellm_model_chain),
    )
    return LLMReplyGenerator(
        settings.litellm_model_chain,
        timeout=settings.llm_timeout_seconds,
    )
