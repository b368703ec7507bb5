"""Anthropic LLM client."""

from typing import Optional

from anthropic import Anthropic

from .base import LLMClient, LLMResponse


class AnthropicClient(LLMClient):
    """Anthropic Claude client."""

    def __init__(self, api_key: str, timeout: Optional[float] = None):
        if timeout is None:
            self.client = Anthropic(api_key=api_key)
        else:
            self.client = Anthropic(api_key=api_key, timeout=timeout)

    def create_message(
        self,
        messages: list[dict],
        system: str,
        max_tokens: int,
        model: str,
        tools: Optional[list[dict]] = None,
    ) -> LLMResponse:
        """Create a message with Claude."""
        kwargs = {
            "model": model,
            "max_tokens": max_tokens,
            "system": system,
            "messages": messages,
        }
        if tools:
            kwargs["tools"] = tools

        response = self.client.messages.create(**kwargs)

        return LLMResponse(
            content=response.content,
            stop_reason=response.stop_reason,
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        )
