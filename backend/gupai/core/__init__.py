"""Core module - chat session state, reply resolution and shared infrastructure."""

from .exceptions import GupAIError, ProviderUnavailable, ProviderError, PersistenceError, InternalFault
from .notifications import Notice, Notifier

__all__ = [
    'GupAIError', 'ProviderUnavailable', 'ProviderError', 'PersistenceError', 'InternalFault',
    'Notice', 'Notifier',
]
