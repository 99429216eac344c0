"""
Storage Interface - Abstract base class for key-value store implementations.
The chat core only ever talks to this interface, so the backing store
(local files, browser-like local storage, a remote KV service) can be swapped.
"""

from abc import ABC, abstractmethod
from typing import Optional


class StorageInterface(ABC):
    """
    Abstract key-value storage contract.
    Values are opaque strings; callers own serialization.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under ``key``.

        Args:
            key: Storage key (e.g., "chats")

        Returns:
            Optional[str]: Stored value, or None if the key is absent or unreadable
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Overwrite the value stored under ``key``.

        Args:
            key: Storage key
            value: Serialized value

        Raises:
            PersistenceError: If the value could not be written
        """
        pass
