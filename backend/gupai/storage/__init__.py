"""Storage module - key-value store interface, local implementation and session mirroring."""

from .interface import StorageInterface
from .local_storage import LocalStorage
from .session_store import SessionStore, CHATS_KEY

__all__ = ['StorageInterface', 'LocalStorage', 'SessionStore', 'CHATS_KEY']
