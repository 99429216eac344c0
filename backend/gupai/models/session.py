"""
Session Models - Defines structures for chat sessions and their messages.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Literal
from pydantic import BaseModel, Field, field_validator

DEFAULT_TITLE = "New Chat"
TITLE_MAX_LENGTH = 30

Sender = Literal["user", "assistant"]


def new_id() -> str:
    """Generate an opaque unique identifier."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (older stores wrote them) as UTC."""
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def make_title(text: str, max_length: int = TITLE_MAX_LENGTH) -> str:
    """Short session title from the first user message."""
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text


class Message(BaseModel):
    """A single chat message. Immutable once created."""
    id: str = Field(default_factory=new_id)
    sender: Sender
    content: str
    timestamp: datetime = Field(default_factory=utcnow)

    class Config:
        frozen = True

    @field_validator("sender", mode="before")
    @classmethod
    def _normalize_sender(cls, value):
        # Older stores wrote assistant messages as "bot"
        return "assistant" if value == "bot" else value

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class ChatSession(BaseModel):
    """One conversation: ordered messages plus metadata."""
    id: str = Field(default_factory=new_id)
    title: str = DEFAULT_TITLE
    messages: List[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")

    class Config:
        populate_by_name = True

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    def append(self, message: Message) -> Message:
        """Append ``message`` and touch ``updated_at``."""
        self.messages.append(message)
        self.updated_at = utcnow()
        return message

    def recent_history(self, limit: int) -> List[Message]:
        return list(self.messages[-limit:]) if limit > 0 else []

    def first_user_message(self) -> Message | None:
        return next((m for m in self.messages if m.sender == "user"), None)

    def to_storage(self) -> dict:
        """Serialize using the camelCase keys of the persisted blob."""
        return self.model_dump(mode="json", by_alias=True)


class SearchResult(BaseModel):
    """Messages of one session that matched a search query."""
    session: ChatSession
    matching_messages: List[Message]
