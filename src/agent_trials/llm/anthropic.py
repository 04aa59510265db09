"""Anthropic Claude client for the judge."""

from __future__ import annotations

from typing import Any

import anthropic

from .base import LLMClient, LLMResponse


class AnthropicClient(LLMClient):
    """Claude API client.

    The judge system prompt is identical for every evaluation in a batch, so
    it is sent with ``cache_control`` to be reused across calls.
    """

    def __init__(self, model: str = "claude-sonnet-4-6", api_key: str | None = None):
        self.model = model
        self.client = anthropic.Anthropic(api_key=api_key) if api_key else anthropic.Anthropic()

    def generate(
        self,
        messages: list[dict[str, Any]],
        system: str = "",
        max_tokens: int = 4096,
        temperature: float = 0.1,
    ) -> LLMResponse:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": messages,
        }
        if system:
            kwargs["system"] = [
                {
                    "type": "text",
                    "text": system,
                    "cache_control": {"type": "ephemeral"},
                }
            ]

        response = self.client.messages.create(**kwargs)

        text = "\n".join(block.text for block in response.content if block.type == "text")
        return LLMResponse(
            text=text,
            stop_reason=response.stop_reason or "end_turn",
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=response.model,
            raw_response=response,
        )
