"""
Chat API endpoint - the completion provider side of the chat contract.

Two interchangeable behaviours, selected by ``settings.backend_mode``:
- "echo": reply with a templated string that embeds the message
- "openai": forward system prompt + history + message to an upstream LLM
"""

import logging
from datetime import datetime, timezone
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ..config import settings
from ..models import ChatRequest, ChatReply
from ..llm.base import LLMMessage
from ..llm.factory import create_llm_provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

ECHO_TEMPLATE = (
    "🤖 {name} Backend Response:\n\n"
    "I received your message: \"{message}\"\n\n"
    "This is a simulated response from the backend server."
)


def _get_llm_provider():
    """Get configured LLM provider or None."""
    api_key = settings.llm_api_key or settings.openai_api_key
    if not api_key:
        return None
    return create_llm_provider(
        provider=settings.llm_provider,
        api_key=api_key,
        model=settings.llm_model,
        base_url=settings.llm_base_url,
        default_temperature=settings.llm_temperature,
        default_max_tokens=settings.llm_max_tokens,
        log_calls=settings.log_llm_calls,
    )


def _error(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    body = {"error": error}
    if message:
        body["message"] = message
    return JSONResponse(status_code=status_code, content=body)


async def _forward_to_llm(request: ChatRequest) -> str:
    """Ask the upstream LLM for a reply; raises on any failure."""
    provider = _get_llm_provider()
    if provider is None:
        raise RuntimeError("LLM API key is not configured")

    messages = [LLMMessage.text("system", settings.llm_system_prompt)]
    messages.extend(LLMMessage.from_history([item.model_dump() for item in request.chat_history]))
    messages.append(LLMMessage.text("user", request.message))

    response = await provider.chat_completion(
        messages,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )
    return response.content


@router.post("/chat")
async def chat(request: ChatRequest):
    """
    Produce a reply for a chat message.

    Returns:
        200 ``{"reply", "timestamp"}``; 400/500 ``{"error", ...}`` on failure
    """
    if not request.message or not request.message.strip():
        return _error(status.HTTP_400_BAD_REQUEST, "Message is required")

    if settings.backend_mode == "echo":
        reply = ECHO_TEMPLATE.format(name=settings.app_name, message=request.message)
        return ChatReply(reply=reply, timestamp=datetime.now(timezone.utc).isoformat())

    if settings.backend_mode != "openai":
        logger.error(f"Unknown backend mode: {settings.backend_mode}")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to get AI response",
            f"Unknown backend mode: {settings.backend_mode}",
        )

    try:
        reply = await _forward_to_llm(request)
    except Exception as e:
        logger.error(f"Backend Error: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to get AI response", str(e))

    return ChatReply(reply=reply, timestamp=datetime.now(timezone.utc).isoformat())
