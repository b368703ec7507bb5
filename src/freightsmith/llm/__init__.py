"""LLM client module."""

from typing import Optional

from ..config import Settings, settings as default_settings
from .base import LLMClient, LLMResponse
from .anthropic_client import AnthropicClient
from .openrouter_client import OpenRouterClient


def create_llm_client(config: Optional[Settings] = None) -> LLMClient:
    """Create the appropriate LLM client based on configuration."""
    config = config or default_settings
    if config.llm_provider == "openrouter":
        if not config.openrouter_api_key:
            raise ValueError("OPENROUTER_API_KEY is required when LLM_PROVIDER is 'openrouter'")
        return OpenRouterClient(
            api_key=config.openrouter_api_key, timeout=config.fallback_timeout_seconds
        )
    # Default to Anthropic
    if not config.anthropic_api_key:
        raise ValueError("ANTHROPIC_API_KEY is required when LLM_PROVIDER is 'anthropic'")
    return AnthropicClient(api_key=config.anthropic_api_key, timeout=config.fallback_timeout_seconds)


__all__ = [
    "LLMClient",
    "LLMResponse",
    "AnthropicClient",
    "OpenRouterClient",
    "create_llm_client",
]
