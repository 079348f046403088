"""Workflow-engine webhook reply generator (n8n chat trigger)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from dibea_router.constants import AgentCategory
from dibea_router.resilience.errors import (
    CollaboratorTimeoutError,
    CollaboratorUnavailableError,
)

logger = logging.getLogger(__name__)

# Keys checked in order for the reply text.
REPLY_KEYS = ("output", "message", "response")


def extract_reply(data: Any) -> str | None:
    """First non-empty string among the known reply keys.

    n8n chat workflows sometimes wrap the item in a one-element list.
    """
    if isinstance(data, list) and data:
        data = data[0]
    if not isinstance(data, dict):
        return None
    for key in REPLY_KEYS:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


class WebhookReplyGenerator:
    """POSTs the routed message to a webhook and reads the reply.

    Pass ``client`` to share a connection pool (or a mock transport
    in tests); otherwise a client is created and owned here.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def generate_reply(
        self,
        agent: AgentCategory,
        message: str,
        *,
        session_id: str | None = None,
    ) -> str:
        body = {
            "chatInput": message,
            "agent": agent.value,
            "sessionId": session_id,
        }
        try:
            response = await self._client.post(self._url, json=body)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as exc:
            raise CollaboratorTimeoutError(
                f"webhook timed out: {self._url}"
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise CollaboratorUnavailableError(
                f"webhook returned {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise CollaboratorUnavailableError(
                f"webhook call failed: {exc}"
            ) from exc

        reply = extract_reply(data)
        if reply is None:
            raise CollaboratorUnavailableError(
                "webhook response has no reply text"
            )
        logger.debug(
            "event=webhook_reply agent=%s chars=%d", agent, len(reply)
        )
        return reply

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
