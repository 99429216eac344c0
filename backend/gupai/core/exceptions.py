"""
Exception taxonomy for the chat core.

None of these are fatal: provider errors are absorbed into the fallback
reply, persistence errors become a warning notice, and an internal fault
becomes an apology message in the transcript.
"""

from typing import Optional


class GupAIError(Exception):
    """Base class for all GupAI errors."""


class ProviderUnavailable(GupAIError):
    """The completion provider failed its health probe."""


class ProviderError(GupAIError):
    """The completion call failed or the provider returned an error body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PersistenceError(GupAIError):
    """Writing to the local store failed."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Failed to persist '{key}': {reason}")
        self.key = key
        self.reason = reason


class InternalFault(GupAIError):
    """Unexpected failure while producing a reply."""
