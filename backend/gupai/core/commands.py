"""
Typed UI commands and the single-consumer queue that applies them to the
chat session manager in submission order.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from .chat_manager import ChatSessionManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SendMessage:
    text: str


@dataclass(frozen=True)
class NewChat:
    pass


@dataclass(frozen=True)
class SwitchChat:
    session_id: str


@dataclass(frozen=True)
class DeleteChat:
    session_id: str


@dataclass(frozen=True)
class ClearChat:
    confirmed: bool = False


@dataclass(frozen=True)
class ExportChat:
    directory: Optional[str] = None


@dataclass(frozen=True)
class SearchChats:
    query: str


Command = Union[SendMessage, NewChat, SwitchChat, DeleteChat, ClearChat, ExportChat, SearchChats]


class CommandDispatcher:
    """
    Applies commands to a ChatSessionManager one at a time.

    ``SendMessage`` only starts the reply (it does not wait for it), so
    navigation commands queued behind it run while the reply is pending and
    a second ``SendMessage`` is rejected by the manager.
    """

    def __init__(self, manager: ChatSessionManager):
        self.manager = manager
        self._queue: "asyncio.Queue[tuple[Command, asyncio.Future]]" = asyncio.Queue()
        self._worker: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start(self) -> None:
        if self.running:
            return
        self._worker = asyncio.create_task(self._run(), name="gupai-command-worker")

    async def stop(self, wait_for_reply: bool = True) -> None:
        """Drain queued commands, optionally let a pending reply land, then stop the worker."""
        if self.running:
            await self._queue.join()
        pending = self.manager.pending_reply
        if wait_for_reply and pending is not None:
            await asyncio.wait([pending])
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None

    def submit(self, command: Command) -> asyncio.Future:
        """Queue ``command``; the returned future resolves to its result."""
        future = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((command, future))
        return future

    async def dispatch(self, command: Command) -> Any:
        """Apply one command immediately."""
        manager = self.manager
        if isinstance(command, SendMessage):
            return manager.submit_message(command.text)
        if isinstance(command, NewChat):
            return await manager.create_new_chat()
        if isinstance(command, SwitchChat):
            return await manager.switch_chat(command.session_id)
        if isinstance(command, DeleteChat):
            return await manager.delete_chat(command.session_id)
        if isinstance(command, ClearChat):
            return await manager.clear_current_chat(lambda: command.confirmed)
        if isinstance(command, ExportChat):
            return await manager.export_chat(command.directory)
        if isinstance(command, SearchChats):
            return manager.search_chats(command.query)
        raise TypeError(f"Unknown command: {command!r}")

    async def _run(self) -> None:
        while True:
            command, future = await self._queue.get()
            try:
                result = await self.dispatch(command)
            except Exception as e:
                logger.error(f"Command {type(command).__name__} failed: {e}", exc_info=True)
                self.manager.notifier.notify("Something went wrong. Please try again.", "error")
                result = None
            finally:
                self._queue.task_done()
            if not future.done():
                future.set_result(result)
