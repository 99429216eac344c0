"""
Composition root - builds one instance of each component and wires them
together explicitly.
"""

import logging
from typing import Optional

from .config import Settings, settings as default_settings
from .core.chat_manager import ChatSessionManager
from .core.commands import CommandDispatcher
from .core.notifications import Notifier
from .core.resolver import ResponseResolver
from .providers.client import CompletionClient
from .storage.interface import StorageInterface
from .storage.local_storage import LocalStorage
from .storage.session_store import SessionStore

logger = logging.getLogger(__name__)


class ChatApplication:
    """
    Owns the chat core for one UI.

    Usage:
        async with ChatApplication(settings) as chat_app:
            await chat_app.dispatcher.dispatch(NewChat())
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        storage: Optional[StorageInterface] = None,
        client: Optional[CompletionClient] = None,
        offline: bool = False,
        notifier: Optional[Notifier] = None,
    ):
        """
        Args:
            config: Settings to build from (module settings by default)
            storage: Key-value store (LocalStorage at ``local_storage_path`` by default)
            client: Completion provider client (built from settings by default)
            offline: Never contact a provider; every reply comes from the fallback table
            notifier: Notice sink shared by all components
        """
        self.config = config or default_settings
        self.notifier = notifier or Notifier()
        self.storage = storage or LocalStorage(self.config.local_storage_path)
        self.session_store = SessionStore(self.storage, self.notifier)

        if offline:
            self.client = None
        else:
            self.client = client or CompletionClient(
                base_url=self.config.provider_base_url,
                health_path=self.config.provider_health_path,
                chat_path=self.config.provider_chat_path,
                timeout=self.config.provider_chat_timeout,
            )

        self.resolver = ResponseResolver(
            self.client,
            health_timeout=self.config.provider_health_timeout,
            chat_timeout=self.config.provider_chat_timeout,
        )
        self.manager = ChatSessionManager(
            self.session_store,
            self.resolver,
            notifier=self.notifier,
            assistant_name=self.config.assistant_name,
            backend_label=self.backend_label,
            export_dir=self.config.export_dir,
        )
        self.dispatcher = CommandDispatcher(self.manager)

    @property
    def backend_label(self) -> str:
        return "Offline" if self.client is None else self.config.backend_label

    async def start(self, check_backend: bool = True) -> None:
        await self.manager.initialize()
        self.dispatcher.start()
        if check_backend:
            await self.check_backend_connection()
        logger.info(f"{self.config.app_name} chat started (backend: {self.backend_label})")

    async def stop(self) -> None:
        await self.dispatcher.stop()
        await self.session_store.persist(self.manager.sessions)
        logger.info(f"{self.config.app_name} chat stopped")

    async def check_backend_connection(self) -> bool:
        """Probe the provider once and tell the user which mode replies will use."""
        healthy = await self.resolver.is_provider_healthy()
        if healthy:
            self.notifier.notify("Connected to backend server", "success")
        else:
            self.notifier.notify("Backend server is not connected. Using simulation mode.", "warning")
        return healthy

    async def __aenter__(self) -> "ChatApplication":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
