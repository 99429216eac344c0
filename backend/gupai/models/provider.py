"""
Completion Provider wire models - request/response bodies of the HTTP contract.
"""

from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, Field


class HistoryItem(BaseModel):
    """A prior message as sent to the provider."""
    sender: str
    content: str


class ChatRequest(BaseModel):
    """Body of ``POST <chat-path>``."""
    message: Optional[str] = None
    chat_history: List[HistoryItem] = Field(default_factory=list, alias="chatHistory")

    class Config:
        populate_by_name = True


class ChatReply(BaseModel):
    """Successful completion response."""
    reply: str
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class HealthStatus(BaseModel):
    """Body of ``GET <health-path>``."""
    status: str = "OK"
    service: str
    version: str
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
