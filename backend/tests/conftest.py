"""
Shared test fixtures and configuration.
"""

import pytest
import os
from unittest.mock import AsyncMock, MagicMock

# Set test environment variables before importing app modules
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/gupai_test_data")
os.environ.setdefault("EXPORT_DIR", "/tmp/gupai_test_exports")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LOG_CONSOLE_ENABLED", "false")
os.environ.setdefault("BACKEND_MODE", "echo")

from gupai.core.chat_manager import ChatSessionManager
from gupai.core.notifications import Notifier
from gupai.core.resolver import ResponseResolver
from gupai.storage.local_storage import LocalStorage
from gupai.storage.session_store import SessionStore


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "data"))


@pytest.fixture
def session_store(storage, notifier):
    return SessionStore(storage, notifier)


@pytest.fixture
def resolver():
    """Resolver double that answers every message with a fixed reply."""
    mock = MagicMock(spec=ResponseResolver)
    mock.resolve = AsyncMock(return_value="Assistant reply")
    return mock


@pytest.fixture
def manager(session_store, resolver, notifier, tmp_path):
    return ChatSessionManager(
        session_store,
        resolver,
        notifier=notifier,
        assistant_name="GupAI",
        backend_label="Test",
        export_dir=str(tmp_path / "exports"),
    )
