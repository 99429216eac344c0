"""
Transient user notices (the toast messages of a chat UI).

Notices never block or raise. Each one is logged and kept in a bounded
buffer; a UI can also subscribe to receive them as they happen.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Deque, List, Optional

logger = logging.getLogger(__name__)

LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass(frozen=True)
class Notice:
    """A single user-facing notice."""
    text: str
    level: str = "info"  # info, success, warning, error
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    """Collects notices and fans them out to listeners."""

    def __init__(self, max_notices: int = 50):
        self._notices: Deque[Notice] = deque(maxlen=max_notices)
        self._listeners: List[Callable[[Notice], None]] = []

    def subscribe(self, listener: Callable[[Notice], None]) -> None:
        self._listeners.append(listener)

    def notify(self, text: str, level: str = "info") -> Notice:
        if level not in LEVELS:
            raise ValueError(f"Unknown notice level: {level}")

        notice = Notice(text=text, level=level)
        self._notices.append(notice)
        logger.log(LEVELS[level], f"Notice ({level}): {text}")

        for listener in list(self._listeners):
            try:
                listener(notice)
            except Exception as e:
                # Listener failures are logged, never raised to the notifier
                logger.warning(f"Notice listener failed: {e}", exc_info=True)
        return notice

    @property
    def notices(self) -> List[Notice]:
        return list(self._notices)

    @property
    def last(self) -> Optional[Notice]:
        return self._notices[-1] if self._notices else None

    def clear(self) -> None:
        self._notices.clear()
