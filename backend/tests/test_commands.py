"""
Tests for typed commands and the CommandDispatcher queue.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock

from gupai.core.chat_manager import ChatState
from gupai.core.commands import (
    ClearChat, CommandDispatcher, DeleteChat, ExportChat, NewChat, SearchChats, SendMessage, SwitchChat,
)


class TestDispatch:
    """Direct dispatch of each command type."""

    @pytest.mark.asyncio
    async def test_send_message_returns_reply_task(self, manager):
        session = await manager.initialize()
        dispatcher = CommandDispatcher(manager)

        task = await dispatcher.dispatch(SendMessage("hello"))
        reply = await task

        assert reply.content == "Assistant reply"
        assert len(session.messages) == 2

    @pytest.mark.asyncio
    async def test_blank_send_returns_none(self, manager):
        await manager.initialize()
        assert await CommandDispatcher(manager).dispatch(SendMessage("  ")) is None

    @pytest.mark.asyncio
    async def test_navigation_commands(self, manager):
        first = await manager.initialize()
        dispatcher = CommandDispatcher(manager)

        second = await dispatcher.dispatch(NewChat())
        assert manager.active_id == second.id

        assert await dispatcher.dispatch(SwitchChat(first.id)) is True
        assert manager.active_id == first.id

        assert await dispatcher.dispatch(DeleteChat(second.id)) is True
        assert second.id not in manager.sessions

    @pytest.mark.asyncio
    async def test_clear_honours_confirmation(self, manager):
        session = await manager.initialize()
        dispatcher = CommandDispatcher(manager)
        await manager.send_message("hello")

        assert await dispatcher.dispatch(ClearChat(confirmed=False)) is False
        assert len(session.messages) == 2
        assert await dispatcher.dispatch(ClearChat(confirmed=True)) is True
        assert session.messages == []

    @pytest.mark.asyncio
    async def test_export_and_search(self, manager, tmp_path):
        await manager.initialize()
        dispatcher = CommandDispatcher(manager)
        await manager.send_message("Tell me about Lisbon")

        path = await dispatcher.dispatch(ExportChat(str(tmp_path)))
        assert path.exists()

        results = await dispatcher.dispatch(SearchChats("lisbon"))
        assert len(results) == 1

    @pytest.mark.asyncio
    async def test_unknown_command(self, manager):
        with pytest.raises(TypeError):
            await CommandDispatcher(manager).dispatch(object())


class TestQueue:
    """The worker applies queued commands in order."""

    @pytest.mark.asyncio
    async def test_submit_resolves_in_order(self, manager):
        first = await manager.initialize()
        dispatcher = CommandDispatcher(manager)
        dispatcher.start()

        new_future = dispatcher.submit(NewChat())
        switch_future = dispatcher.submit(SwitchChat(first.id))

        second = await new_future
        assert await switch_future is True
        assert manager.active_id == first.id
        assert second.id in manager.sessions

        await dispatcher.stop()
        assert not dispatcher.running

    @pytest.mark.asyncio
    async def test_commands_run_while_reply_pending(self, manager, resolver):
        origin = await manager.initialize()
        gate = asyncio.Event()

        async def resolve(message, history):
            await gate.wait()
            return "late reply"

        resolver.resolve = AsyncMock(side_effect=resolve)
        dispatcher = CommandDispatcher(manager)
        dispatcher.start()

        task = await dispatcher.submit(SendMessage("hello"))
        assert manager.state is ChatState.AWAITING_RESPONSE

        assert await dispatcher.submit(SendMessage("again")) is None
        other = await dispatcher.submit(NewChat())
        assert manager.active_id == other.id

        gate.set()
        await task
        await dispatcher.stop()

        assert [m.content for m in origin.messages] == ["hello", "late reply"]
        assert other.messages == []

    @pytest.mark.asyncio
    async def test_failing_command_does_not_stop_worker(self, manager, notifier):
        await manager.initialize()
        manager.switch_chat = AsyncMock(side_effect=RuntimeError("boom"))
        dispatcher = CommandDispatcher(manager)
        dispatcher.start()

        assert await dispatcher.submit(SwitchChat("whatever")) is None
        assert notifier.last.level == "error"

        session = await dispatcher.submit(NewChat())
        assert manager.active_id == session.id

        await dispatcher.stop()

    @pytest.mark.asyncio
    async def test_stop_waits_for_pending_reply(self, manager):
        session = await manager.initialize()
        dispatcher = CommandDispatcher(manager)
        dispatcher.start()

        await dispatcher.submit(SendMessage("hello"))
        await dispatcher.stop()

        assert len(session.messages) == 2
        assert manager.state is ChatState.IDLE
