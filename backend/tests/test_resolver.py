"""
Unit tests for the ResponseResolver.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

from gupai.core.exceptions import ProviderError, ProviderUnavailable
from gupai.core.fallback import KEYWORD_REPLIES
from gupai.core.resolver import HISTORY_WINDOW, ResponseResolver
from gupai.models import Message
from gupai.providers.client import CompletionClient

GREETING = dict(KEYWORD_REPLIES)["hello"]


def make_client():
    client = MagicMock(spec=CompletionClient)
    client.health = AsyncMock(return_value={"status": "OK"})
    client.complete = AsyncMock(return_value="Provider reply")
    return client


def make_history(count):
    return [
        Message(sender="user" if i % 2 == 0 else "assistant", content=f"message {i}")
        for i in range(count)
    ]


class TestResponseResolver:
    """Tests for provider-or-fallback resolution."""

    @pytest.mark.asyncio
    async def test_no_client_uses_fallback(self):
        resolver = ResponseResolver(None)
        assert await resolver.resolve("hello") == GREETING

    @pytest.mark.asyncio
    async def test_unreachable_provider_uses_greeting(self):
        client = make_client()
        client.health.side_effect = ProviderUnavailable("connection refused")
        resolver = ResponseResolver(client)

        assert await resolver.resolve("hello") == GREETING
        client.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_unreachable_provider_time_question(self):
        client = make_client()
        client.health.side_effect = ProviderUnavailable("down")
        resolver = ResponseResolver(client)

        reply = await resolver.resolve("What time is it?")
        assert reply.startswith("The current time is")

    @pytest.mark.asyncio
    async def test_healthy_provider_reply_is_returned(self):
        client = make_client()
        resolver = ResponseResolver(client)

        assert await resolver.resolve("hello") == "Provider reply"
        client.health.assert_awaited_once()
        client.complete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_history_is_trimmed_to_window(self):
        client = make_client()
        resolver = ResponseResolver(client)
        history = make_history(10)

        await resolver.resolve("next", history)

        message, sent_history = client.complete.call_args[0]
        assert message == "next"
        assert sent_history == history[-HISTORY_WINDOW:]

    @pytest.mark.asyncio
    async def test_short_history_is_sent_whole(self):
        client = make_client()
        resolver = ResponseResolver(client)
        history = make_history(3)

        await resolver.resolve("next", history)

        assert client.complete.call_args[0][1] == history

    @pytest.mark.asyncio
    async def test_provider_error_falls_back(self):
        client = make_client()
        client.complete.side_effect = ProviderError("Failed to get AI response", status_code=500)
        resolver = ResponseResolver(client)

        assert await resolver.resolve("hello") == GREETING
        assert client.complete.await_count == 1

    @pytest.mark.asyncio
    async def test_unexpected_exception_falls_back(self):
        client = make_client()
        client.complete.side_effect = RuntimeError("boom")
        resolver = ResponseResolver(client)

        assert await resolver.resolve("hello") == GREETING

    @pytest.mark.asyncio
    async def test_slow_health_probe_is_bounded(self):
        client = make_client()

        async def never_answers():
            await asyncio.sleep(10)

        client.health.side_effect = never_answers
        resolver = ResponseResolver(client, health_timeout=0.01)

        assert await resolver.resolve("hello") == GREETING
        client.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_slow_completion_is_bounded(self):
        client = make_client()

        async def never_answers(message, history):
            await asyncio.sleep(10)

        client.complete.side_effect = never_answers
        resolver = ResponseResolver(client, chat_timeout=0.01)

        assert await resolver.resolve("hello") == GREETING

    @pytest.mark.asyncio
    async def test_is_provider_healthy(self):
        client = make_client()
        assert await ResponseResolver(client).is_provider_healthy() is True

        client.health.side_effect = ProviderUnavailable("HTTP 503")
        assert await ResponseResolver(client).is_provider_healthy() is False
