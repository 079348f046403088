"""Tests for the webhook reply generator."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from dibea_router.constants import AgentCategory
from dibea_router.replies.webhook import WebhookReplyGenerator, extract_reply
from dibea_router.resilience.errors import (
    CollaboratorTimeoutError,
    CollaboratorUnavailableError,
)

URL = "http://workflows.test/webhook/chat"


def _generator(
    handler: Callable[[httpx.Request], httpx.Response],
) -> WebhookReplyGenerator:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WebhookReplyGenerator(URL, client=client)


class TestExtractReply:
    def test_output_key_preferred(self) -> None:
        data = {"response": "c", "message": "b", "output": "a"}
        assert extract_reply(data) == "a"

    def test_falls_through_blank_values(self) -> None:
        assert extract_reply({"output": "  ", "message": " oi "}) == "oi"

    def test_single_item_list_unwrapped(self) -> None:
        assert extract_reply([{"response": "oi"}]) == "oi"

    @pytest.mark.parametrize(
        "data",
        [None, [], "texto solto", {"text": "oi"}, {"output": 42}],
    )
    def test_no_reply_text(self, data: Any) -> None:
        assert extract_reply(data) is None


class TestWebhookReplyGenerator:
    async def test_posts_message_and_returns_reply(self) -> None:
        seen: list[dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert str(request.url) == URL
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"output": "Vamos cadastrar!"})

        reply = await _generator(handler).generate_reply(
            AgentCategory.ANIMAL, "Quero cadastrar um gato", session_id="s-9"
        )

        assert reply == "Vamos cadastrar!"
        assert seen == [
            {
                "chatInput": "Quero cadastrar um gato",
                "agent": "animal",
                "sessionId": "s-9",
            }
        ]

    async def test_server_error_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="maintenance")

        with pytest.raises(CollaboratorUnavailableError, match="503"):
            await _generator(handler).generate_reply(
                AgentCategory.ANIMAL, "oi"
            )

    async def test_timeout_is_timeout_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow workflow", request=request)

        with pytest.raises(CollaboratorTimeoutError):
            await _generator(handler).generate_reply(
                AgentCategory.ANIMAL, "oi"
            )

    async def test_connection_error_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(CollaboratorUnavailableError, match="failed"):
            await _generator(handler).generate_reply(
                AgentCategory.ANIMAL, "oi"
            )

    async def test_non_json_body_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>ok</html>")

        with pytest.raises(CollaboratorUnavailableError):
            await _generator(handler).generate_reply(
                AgentCategory.ANIMAL, "oi"
            )

    async def test_missing_reply_text_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": "queued"})

        with pytest.raises(CollaboratorUnavailableError, match="no reply"):
            await _generator(handler).generate_reply(
                AgentCategory.ANIMAL, "oi"
            )


class TestClientOwnership:
    async def test_owned_client_closed(self) -> None:
        generator = WebhookReplyGenerator(URL)
        await generator.aclose()
        assert generator._client.is_closed

    async def test_shared_client_left_open(self) -> None:
        client = httpx.AsyncClient()
        generator = WebhookReplyGenerator(URL, client=client)
        await generator.aclose()
        assert not client.is_closed
        await client.aclose()
