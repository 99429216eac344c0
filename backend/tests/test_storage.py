"""
Tests for LocalStorage and SessionStore.
"""

import json
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock

from gupai.core.exceptions import PersistenceError
from gupai.models import ChatSession, Message
from gupai.storage import CHATS_KEY, SessionStore, StorageInterface


class TestLocalStorage:
    """Tests for the file-backed key-value store."""

    @pytest.mark.asyncio
    async def test_set_then_get(self, storage):
        await storage.set("chats", '{"a": 1}')
        assert await storage.get("chats") == '{"a": 1}'
        assert [p.name for p in storage.base_dir.iterdir()] == ["chats.json"]

    @pytest.mark.asyncio
    async def test_missing_key(self, storage):
        assert await storage.get("theme") is None

    @pytest.mark.asyncio
    async def test_overwrite(self, storage):
        await storage.set("theme", "light")
        await storage.set("theme", "dark")
        assert await storage.get("theme") == "dark"

    @pytest.mark.asyncio
    async def test_rejects_path_traversal(self, storage):
        with pytest.raises(ValueError):
            await storage.get("../secrets")

    @pytest.mark.asyncio
    async def test_write_failure_raises_persistence_error(self, storage):
        # A directory in the way of the target file makes the rename fail
        (storage.base_dir / "chats.json").mkdir()
        with pytest.raises(PersistenceError):
            await storage.set("chats", "{}")


class TestSessionStore:
    """Tests for loading and persisting the session collection."""

    @pytest.mark.asyncio
    async def test_load_absent_is_empty(self, session_store):
        assert await session_store.load() == {}

    @pytest.mark.asyncio
    async def test_round_trip(self, session_store):
        session = ChatSession(title="Trip planning")
        session.append(Message(sender="user", content="Where to?"))
        session.append(Message(sender="assistant", content="Lisbon."))

        assert await session_store.persist({session.id: session}) is True
        loaded = await session_store.load()

        assert list(loaded) == [session.id]
        restored = loaded[session.id]
        assert restored.title == "Trip planning"
        assert [m.content for m in restored.messages] == ["Where to?", "Lisbon."]
        assert restored.updated_at == session.updated_at

    @pytest.mark.asyncio
    async def test_persisted_blob_uses_camel_case(self, session_store, storage):
        session = ChatSession()
        await session_store.persist({session.id: session})

        blob = json.loads(await storage.get(CHATS_KEY))
        assert set(blob[session.id]) == {"id", "title", "messages", "createdAt", "updatedAt"}

    @pytest.mark.asyncio
    async def test_load_malformed_json_is_empty(self, session_store, storage):
        await storage.set(CHATS_KEY, "{not json")
        assert await session_store.load() == {}

    @pytest.mark.asyncio
    async def test_load_wrong_type_is_empty(self, session_store, storage):
        await storage.set(CHATS_KEY, "[1, 2, 3]")
        assert await session_store.load() == {}

    @pytest.mark.asyncio
    async def test_load_skips_malformed_sessions(self, session_store, storage):
        good = ChatSession(title="Good")
        blob = {good.id: good.to_storage(), "broken": {"messages": "nope"}}
        await storage.set(CHATS_KEY, json.dumps(blob))

        loaded = await session_store.load()
        assert list(loaded) == [good.id]

    @pytest.mark.asyncio
    async def test_load_accepts_legacy_bot_sender(self, session_store, storage):
        blob = {
            "abc": {
                "id": "abc",
                "title": "Old chat",
                "messages": [
                    {"id": "m1", "sender": "user", "content": "hi", "timestamp": "2024-01-01T10:00:00+00:00"},
                    {"id": "m2", "sender": "bot", "content": "hello", "timestamp": "2024-01-01T10:00:01+00:00"},
                ],
                "createdAt": "2024-01-01T10:00:00+00:00",
                "updatedAt": "2024-01-01T10:00:01+00:00",
            }
        }
        await storage.set(CHATS_KEY, json.dumps(blob))

        loaded = await session_store.load()
        assert loaded["abc"].messages[1].sender == "assistant"
        assert loaded["abc"].updated_at == datetime(2024, 1, 1, 10, 0, 1, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_load_read_error_is_empty(self, notifier):
        failing = AsyncMock(spec=StorageInterface)
        failing.get.side_effect = OSError("permission denied")
        assert await SessionStore(failing, notifier).load() == {}

    @pytest.mark.asyncio
    async def test_persist_failure_notifies_and_does_not_raise(self, notifier):
        failing = AsyncMock(spec=StorageInterface)
        failing.set.side_effect = PersistenceError(CHATS_KEY, "quota exceeded")
        store = SessionStore(failing, notifier)

        session = ChatSession()
        assert await store.persist({session.id: session}) is False
        assert notifier.last.level == "warning"

    @pytest.mark.asyncio
    async def test_naive_timestamps_load_as_utc(self, session_store, storage, manager):
        blob = {
            "old": {
                "id": "old",
                "title": "Old chat",
                "messages": [
                    {"id": "m1", "sender": "user", "content": "hi", "timestamp": "2024-01-01T10:00:00"},
                ],
                "createdAt": "2024-01-01T10:00:00",
                "updatedAt": "2024-01-01T10:00:00",
            },
            "new": ChatSession(title="New chat").to_storage(),
        }
        await storage.set(CHATS_KEY, json.dumps(blob))

        loaded = await session_store.load()
        assert loaded["old"].updated_at == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
        assert loaded["old"].messages[0].timestamp.tzinfo is not None

        resumed = await manager.initialize()
        assert resumed.title == "New chat"
        fresh = await manager.create_new_chat()
        history = manager.load_chat_history()
        assert history[0].id == fresh.id
        assert history[-1].id == "old"

    @pytest.mark.asyncio
    async def test_session_without_id_keeps_its_key(self, session_store, storage):
        await storage.set(CHATS_KEY, json.dumps({"k": {"title": "T", "messages": []}}))

        first = await session_store.load()
        second = await session_store.load()
        assert list(first) == ["k"]
        assert list(second) == ["k"]
        assert first["k"].id == "k"
