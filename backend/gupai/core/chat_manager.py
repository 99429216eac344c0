"""
Chat Session Manager - owns the session collection and drives the
send/reply cycle, history, search and export.

All mutation happens on the event loop thread. The only suspension point is
the reply resolution, during which the manager is AWAITING_RESPONSE and
rejects further sends. A reply is always appended to the session it was
requested from, even if the user has switched away in the meantime; if that
session has been deleted, the reply is dropped.
"""

import asyncio
import logging
import aiofiles
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .exceptions import InternalFault
from .logging_config import SessionLoggerAdapter
from .notifications import Notifier
from .resolver import HISTORY_WINDOW, ResponseResolver
from ..models import ChatSession, Message, SearchResult, make_title
from ..storage.session_store import SessionStore
from ..utils.formatting import format_datetime, format_time

logger = logging.getLogger(__name__)

APOLOGY_TEXT = "Sorry, I encountered an unexpected error. Please try again."


class ChatState(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"


class ChatSessionManager:
    """Session lifecycle and message flow for one active chat at a time."""

    def __init__(
        self,
        store: SessionStore,
        resolver: ResponseResolver,
        notifier: Optional[Notifier] = None,
        assistant_name: str = "GupAI",
        backend_label: str = "Python",
        export_dir: str = "./exports",
    ):
        self.store = store
        self.resolver = resolver
        self.notifier = notifier or Notifier()
        self.assistant_name = assistant_name
        self.backend_label = backend_label
        self.export_dir = export_dir

        self.sessions: Dict[str, ChatSession] = {}
        self.active_id: Optional[str] = None
        self.state = ChatState.IDLE
        self.is_typing = False
        self._pending: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def initialize(self) -> ChatSession:
        """Load stored chats and pick the active one (creating it if needed)."""
        self.sessions = await self.store.load()
        if not self.sessions:
            return await self.create_new_chat()

        latest = self.load_chat_history()[0]
        self.active_id = latest.id
        logger.info(f"Resumed chat {latest.id} ({len(self.sessions)} stored)")
        return latest

    @property
    def current_session(self) -> Optional[ChatSession]:
        if self.active_id is None:
            return None
        return self.sessions.get(self.active_id)

    @property
    def pending_reply(self) -> Optional[asyncio.Task]:
        return self._pending

    async def _persist(self) -> bool:
        return await self.store.persist(self.sessions)

    async def create_new_chat(self) -> ChatSession:
        """Persist the current chat and start an empty one."""
        if self.current_session is not None:
            await self._persist()

        session = ChatSession()
        self.sessions[session.id] = session
        self.active_id = session.id
        self.is_typing = False

        logger.info(f"Created chat {session.id}")
        self.notifier.notify("New chat started", "success")
        return session

    async def switch_chat(self, session_id: str) -> bool:
        if session_id == self.active_id:
            return True
        if session_id not in self.sessions:
            self.notifier.notify("Chat not found", "error")
            return False

        await self._persist()
        self.active_id = session_id
        logger.info(f"Switched to chat {session_id}")
        return True

    async def delete_chat(self, session_id: str) -> bool:
        """Remove a chat; deleting the active one starts a new chat."""
        if session_id not in self.sessions:
            return False

        del self.sessions[session_id]
        await self._persist()

        if self.active_id == session_id:
            self.active_id = None
            await self.create_new_chat()

        logger.info(f"Deleted chat {session_id}")
        self.notifier.notify("Chat deleted", "success")
        return True

    async def clear_current_chat(self, confirm: Callable[[], bool]) -> bool:
        """
        Empty the active chat's messages.

        Args:
            confirm: Asked before anything is removed; nothing happens unless it returns True
        """
        session = self.current_session
        if session is None or not confirm():
            return False

        session.messages.clear()
        await self._persist()
        self.notifier.notify("Chat cleared", "success")
        return True

    # ------------------------------------------------------------------ #
    # Sending
    # ------------------------------------------------------------------ #

    def submit_message(self, text: str) -> Optional[asyncio.Task]:
        """
        Append the user's message and start resolving the reply.

        Must be called from a running event loop.

        Returns:
            The reply task, or None if the message was rejected (blank text,
            or a reply is still pending)
        """
        content = text.strip()
        if not content:
            return None
        if self.state is ChatState.AWAITING_RESPONSE:
            logger.debug("Send rejected: still awaiting the previous reply")
            return None

        session = self.current_session
        if session is None:
            logger.warning("Send rejected: no active chat")
            return None

        session.append(Message(sender="user", content=content))
        history = session.recent_history(HISTORY_WINDOW)

        self.state = ChatState.AWAITING_RESPONSE
        self.is_typing = True
        self._pending = asyncio.create_task(self._complete_exchange(session.id, content, history))
        return self._pending

    async def send_message(self, text: str) -> Optional[Message]:
        """Send ``text`` and wait for the assistant's reply message."""
        task = self.submit_message(text)
        if task is None:
            return None
        return await task

    async def _complete_exchange(
        self, session_id: str, content: str, history: Sequence[Message]
    ) -> Optional[Message]:
        log = SessionLoggerAdapter(logger, {"session_id": session_id})
        try:
            await self._persist()

            try:
                reply = await self.resolver.resolve(content, history)
                if not reply:
                    raise InternalFault("Resolver returned an empty reply")
            except Exception as e:
                log.error(f"Chat error: {e}", exc_info=True)
                reply = APOLOGY_TEXT

            session = self.sessions.get(session_id)
            if session is None:
                log.warning("Chat was deleted before its reply arrived; reply discarded")
                return None

            message = session.append(Message(sender="assistant", content=reply))

            if len(session.messages) == 2:
                first = session.first_user_message()
                if first is not None:
                    session.title = make_title(first.content)

            await self._persist()
            log.debug(f"Reply appended ({len(reply)} chars)")
            return message
        finally:
            self.state = ChatState.IDLE
            self.is_typing = False
            self._pending = None

    # ------------------------------------------------------------------ #
    # Read-side projections
    # ------------------------------------------------------------------ #

    def load_chat_history(self) -> List[ChatSession]:
        """All chats, most recently updated first."""
        return sorted(self.sessions.values(), key=lambda s: s.updated_at, reverse=True)

    def search_chats(self, query: str) -> List[SearchResult]:
        """Messages whose content contains ``query`` (case-insensitive), grouped by chat."""
        needle = query.lower()
        results = []
        for session in self.sessions.values():
            matches = [m for m in session.messages if needle in m.content.lower()]
            if matches:
                results.append(SearchResult(session=session, matching_messages=matches))
        return results

    def display_name(self, message: Message) -> str:
        return "You" if message.sender == "user" else self.assistant_name

    def render_transcript(self, now: Optional[datetime] = None) -> Optional[str]:
        """Plain-text transcript of the active chat, or None if it has no messages."""
        session = self.current_session
        if session is None or not session.messages:
            return None

        lines = [
            f"{self.assistant_name} Chat Export\n",
            f"Date: {format_datetime(now or datetime.now())}\n",
            f"Chat: {session.title}\n",
            f"Backend: {self.backend_label}\n\n",
            "=" * 50 + "\n\n",
        ]
        for message in session.messages:
            lines.append(f"{self.display_name(message)} ({format_time(message.timestamp)}):\n")
            lines.append(f"{message.content}\n\n")
        return "".join(lines)

    def export_filename(self, now: Optional[datetime] = None) -> str:
        """Transcript file name, dated by the UTC calendar day."""
        day = (now or datetime.now(timezone.utc)).astimezone(timezone.utc).date()
        return f"{self.assistant_name.lower()}-chat-{day.isoformat()}.txt"

    async def export_chat(self, directory: Optional[str] = None) -> Optional[Path]:
        """
        Write the active chat's transcript to a text file.

        Returns:
            Path of the written file, or None if there was nothing to export
            or the write failed
        """
        now = datetime.now()
        transcript = self.render_transcript(now)
        if transcript is None:
            self.notifier.notify("No messages to export", "error")
            return None

        target_dir = Path(directory or self.export_dir)
        path = target_dir / self.export_filename()
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, 'w', encoding='utf-8') as f:
                await f.write(transcript)
        except OSError as e:
            logger.error(f"Export failed: {e}")
            self.notifier.notify("Could not export chat", "error")
            return None

        self.notifier.notify("Chat exported successfully", "success")
        return path
