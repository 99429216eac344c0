"""
Session Store - mirrors the in-memory session collection to the key-value store.
"""

import asyncio
import json
import logging
from typing import Dict, Optional
from pydantic import ValidationError

from .interface import StorageInterface
from ..models import ChatSession
from ..core.notifications import Notifier

logger = logging.getLogger(__name__)

CHATS_KEY = "chats"


class SessionStore:
    """
    Loads and persists the session collection under a single key.
    Both operations fail soft: load falls back to an empty collection and
    persist reports failures as a warning notice instead of raising.
    """

    def __init__(
        self,
        storage: StorageInterface,
        notifier: Optional[Notifier] = None,
        key: str = CHATS_KEY,
    ):
        self.storage = storage
        self.notifier = notifier
        self.key = key
        # Reply tasks and navigation commands can persist concurrently; keep writes in call order
        self._write_lock = asyncio.Lock()

    async def load(self) -> Dict[str, ChatSession]:
        """Read the collection; ``{}`` if it is absent or malformed."""
        try:
            raw = await self.storage.get(self.key)
        except Exception as e:
            logger.warning(f"Could not read '{self.key}' from storage: {e}")
            return {}

        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Stored '{self.key}' is not valid JSON, starting empty: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Stored '{self.key}' has unexpected type {type(data).__name__}, starting empty")
            return {}

        sessions: Dict[str, ChatSession] = {}
        for session_id, payload in data.items():
            if isinstance(payload, dict) and "id" not in payload:
                # Keep the collection key as the id so it is stable across loads
                payload = {"id": session_id, **payload}
            try:
                session = ChatSession.model_validate(payload)
            except ValidationError as e:
                logger.warning(f"Skipping malformed session {session_id}: {e.error_count()} error(s)")
                continue
            sessions[session.id] = session

        logger.info(f"Loaded {len(sessions)} chat session(s) from storage")
        return sessions

    async def persist(self, sessions: Dict[str, ChatSession]) -> bool:
        """
        Overwrite the stored collection.

        Returns:
            bool: False if the write failed (state stays correct in memory)
        """
        try:
            async with self._write_lock:
                payload = {session_id: s.to_storage() for session_id, s in sessions.items()}
                await self.storage.set(self.key, json.dumps(payload, ensure_ascii=False))
        except Exception as e:
            logger.error(f"Failed to persist chat sessions: {e}")
            if self.notifier:
                self.notifier.notify("Could not save chats. Changes are kept for this session only.", "warning")
            return False

        logger.debug(f"Persisted {len(sessions)} chat session(s)")
        return True
