"""Models module."""

from .session import (
    DEFAULT_TITLE, TITLE_MAX_LENGTH, Message, ChatSession, SearchResult, make_title, new_id
)
from .provider import HistoryItem, ChatRequest, ChatReply, HealthStatus

__all__ = [
    'DEFAULT_TITLE', 'TITLE_MAX_LENGTH', 'Message', 'ChatSession', 'SearchResult',
    'make_title', 'new_id',
    'HistoryItem', 'ChatRequest', 'ChatReply', 'HealthStatus'
]
