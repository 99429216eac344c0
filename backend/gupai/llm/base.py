"""
LLM Provider Base - shared shapes for upstream chat-completion APIs.

The stub server's "openai" mode builds a conversation of ``LLMMessage``
(system prompt, prior turns, new message) and hands it to a provider.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List, Sequence
from dataclasses import dataclass, field

ROLES = ("system", "user", "assistant")


@dataclass
class LLMMessage:
    """One turn of an upstream conversation."""
    role: str  # one of ROLES
    content: str

    @staticmethod
    def text(role: str, text: str) -> "LLMMessage":
        if role not in ROLES:
            raise ValueError(f"Unknown message role: {role}")
        return LLMMessage(role=role, content=text)

    @staticmethod
    def from_history(history: Sequence[Dict[str, Any]]) -> List["LLMMessage"]:
        """
        Map chat history items (``{"sender", "content"}``) to LLM messages.
        Anything not sent by the user is treated as an assistant turn.
        """
        return [
            LLMMessage(
                role="user" if item.get("sender") == "user" else "assistant",
                content=str(item.get("content", "")),
            )
            for item in history
        ]

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class LLMResponse:
    """Reply text plus whatever accounting the upstream returned."""
    content: str
    model: str = ""
    usage: Dict[str, int] = field(default_factory=dict)
    raw: Optional[Dict[str, Any]] = None


class LLMProvider(ABC):
    """
    An upstream chat-completion API.

    Subclasses set ``name`` and implement ``chat_completion``; request
    defaults (model, temperature, token limit) live here.
    """

    name: str = "base"

    def __init__(self, api_key: str, model: str, base_url: Optional[str] = None,
                 default_temperature: float = 0.7, default_max_tokens: int = 500):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens

    @abstractmethod
    async def chat_completion(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """
        Ask the upstream for the next assistant turn.

        Args:
            messages: Conversation so far, system prompt first
            temperature: Overrides ``default_temperature``
            max_tokens: Overrides ``default_max_tokens``
            **kwargs: Provider-specific request fields (``model`` overrides the default model)

        Returns:
            LLMResponse with the generated content

        Raises:
            Whatever the transport raises; callers decide how to report it
        """

    def _format_messages(self, messages: List[LLMMessage]) -> List[Dict[str, Any]]:
        return [m.to_dict() for m in messages]

    def _build_payload(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> Dict[str, Any]:
        """Request body with the provider defaults filled in."""
        return {
            "model": kwargs.pop("model", None) or self.model,
            "messages": self._format_messages(messages),
            "temperature": self.default_temperature if temperature is None else temperature,
            "max_tokens": max_tokens or self.default_max_tokens,
            **kwargs,
        }
