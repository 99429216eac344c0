"""
Completion Provider client - talks to the chat backend over HTTP.

Contract:
    GET  <health-path> -> 200 {"status": "OK", ...}
    POST <chat-path>   -> 200 {"reply": ..., "timestamp": ...} or {"error": ...}
"""

import httpx
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..core.exceptions import ProviderError, ProviderUnavailable
from ..models import Message

logger = logging.getLogger(__name__)

REPLY_FIELDS = ("reply", "response", "message")


def extract_reply(data: Dict[str, Any]) -> Optional[str]:
    """First non-empty text among the reply fields, in priority order."""
    for field_name in REPLY_FIELDS:
        value = data.get(field_name)
        if isinstance(value, str) and value:
            return value
    return None


def format_history(history: Sequence[Message]) -> List[Dict[str, str]]:
    """Convert messages to the ``chatHistory`` wire shape."""
    return [{"sender": m.sender, "content": m.content} for m in history]


class CompletionClient:
    """
    Async client for a completion provider.
    Raises ProviderUnavailable / ProviderError; callers decide how to degrade.
    """

    def __init__(
        self,
        base_url: str,
        health_path: str = "/api/health",
        chat_path: str = "/api/chat",
        timeout: float = 60.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.health_path = health_path
        self.chat_path = chat_path
        self.timeout = timeout

    @property
    def health_url(self) -> str:
        return f"{self.base_url}{self.health_path}"

    @property
    def chat_url(self) -> str:
        return f"{self.base_url}{self.chat_path}"

    async def health(self) -> Dict[str, Any]:
        """
        Probe the provider.

        Returns:
            The health body when the provider reports ``status == "OK"``

        Raises:
            ProviderUnavailable: On network error, non-200 status or malformed body
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(self.health_url)
        except httpx.HTTPError as e:
            raise ProviderUnavailable(f"Health check failed: {e}") from e

        if resp.status_code != 200:
            raise ProviderUnavailable(f"Health check returned HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderUnavailable("Health check returned a malformed body") from e

        if not isinstance(data, dict) or data.get("status") != "OK":
            raise ProviderUnavailable(f"Provider reported unhealthy status: {data!r}")
        return data

    async def complete(self, message: str, history: Sequence[Message]) -> str:
        """
        Ask the provider for a reply.

        Args:
            message: The new user message
            history: Recent messages of the conversation, oldest first

        Returns:
            str: Reply text

        Raises:
            ProviderError: On any failure, including an ``error`` field in the body
        """
        start_time = time.time()
        payload = {"message": message, "chatHistory": format_history(history)}

        logger.debug(f"Completion request starting: url={self.chat_url}, history={len(history)} messages")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self.chat_url, json=payload)
        except httpx.HTTPError as e:
            raise ProviderError(f"Completion request failed: {e}") from e

        if resp.status_code != 200:
            raise ProviderError(f"HTTP error! status: {resp.status_code}", status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError("Completion response is not valid JSON", status_code=resp.status_code) from e

        if not isinstance(data, dict):
            raise ProviderError("Completion response is not a JSON object", status_code=resp.status_code)
        if data.get("error"):
            raise ProviderError(str(data["error"]), status_code=resp.status_code)

        reply = extract_reply(data)
        if reply is None:
            raise ProviderError("Completion response has no reply text", status_code=resp.status_code)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "Completion request completed",
            extra={"extra_fields": {
                "url": self.chat_url,
                "history_length": len(history),
                "reply_length": len(reply),
                "duration_ms": round(duration_ms, 2),
            }}
        )
        return reply

    async def status(self, backend_label: str = "") -> Dict[str, Any]:
        """Connection summary for diagnostics."""
        report: Dict[str, Any] = {
            "backend": backend_label,
            "endpoints": {"health": self.health_url, "chat": self.chat_url},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        try:
            report["health"] = await self.health()
            report["connected"] = True
        except ProviderUnavailable as e:
            report["connected"] = False
            report["error"] = str(e)
        return report
