"""
LLM Provider Factory - builds the provider named in settings.
"""

from typing import Dict, Optional, Type

from .base import LLMProvider
from .openai_provider import OpenAIProvider

PROVIDERS: Dict[str, Type[LLMProvider]] = {
    OpenAIProvider.name: OpenAIProvider,
}


def create_llm_provider(
    provider: str = "openai",
    api_key: str = "",
    model: Optional[str] = None,
    base_url: Optional[str] = None,
    **kwargs
) -> Optional[LLMProvider]:
    """
    Args:
        provider: Key into ``PROVIDERS``
        api_key: API key for the provider
        model: Model name (provider default if not given)
        base_url: Endpoint root (provider default if not given)
        **kwargs: Passed through to the provider constructor

    Returns:
        LLMProvider instance, or None if no api_key is configured

    Raises:
        ValueError: ``provider`` is not registered
    """
    if not api_key:
        return None

    try:
        provider_cls = PROVIDERS[provider]
    except KeyError:
        raise ValueError(f"Unsupported LLM provider: {provider}") from None

    overrides = {k: v for k, v in (("model", model), ("base_url", base_url)) if v}
    return provider_cls(api_key=api_key, **overrides, **kwargs)
