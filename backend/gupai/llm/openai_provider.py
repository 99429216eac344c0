"""
OpenAI-compatible LLM Provider.
Works with any endpoint that implements the chat/completions API.
"""

import httpx
import logging
import time
from typing import Optional, List, Dict, Any

from .base import LLMProvider, LLMMessage, LLMResponse

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """Provider for OpenAI and OpenAI-compatible chat completion APIs."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
        base_url: str = "https://api.openai.com/v1",
        default_temperature: float = 0.7,
        default_max_tokens: int = 500,
        timeout: float = 60.0,
        log_calls: bool = True,
    ):
        super().__init__(api_key, model, base_url.rstrip("/"), default_temperature, default_max_tokens)
        self.timeout = timeout
        self.log_calls = log_calls

    @property
    def completions_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def chat_completion(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """POST the conversation to ``/chat/completions`` and return the first choice."""
        started = time.monotonic()
        payload = self._build_payload(messages, temperature, max_tokens, **kwargs)
        fields: Dict[str, Any] = {"provider": self.name, "model": payload["model"]}

        if logger.isEnabledFor(logging.DEBUG):
            last = messages[-1].content[:200] if messages else ""
            logger.debug(
                f"LLM call: model={payload['model']}, temperature={payload['temperature']}, "
                f"{len(messages)} messages, last: {last}"
            )

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self.completions_url, json=payload, headers=self._get_headers())
                resp.raise_for_status()
                data = resp.json()
            content = data["choices"][0]["message"]["content"]
        except Exception as e:
            fields.update(duration_ms=round((time.monotonic() - started) * 1000, 2), error=str(e))
            logger.error(f"LLM call failed: {e}", exc_info=True, extra={"extra_fields": fields})
            raise

        usage = data.get("usage") or {}
        model = data.get("model", payload["model"])

        if self.log_calls:
            fields.update(
                model=model,
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
                total_tokens=usage.get("total_tokens", 0),
                duration_ms=round((time.monotonic() - started) * 1000, 2),
            )
            logger.info("LLM call completed", extra={"extra_fields": fields})

        return LLMResponse(content=content, model=model, usage=usage, raw=data)
