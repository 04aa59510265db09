"""OpenAI and OpenAI-compatible (vLLM, ollama) client for the judge."""

from __future__ import annotations

import re
from typing import Any

from openai import OpenAI

from .base import LLMClient, LLMResponse


class OpenAICompatClient(LLMClient):
    """Chat-completions client. ``base_url=None`` targets the OpenAI API."""

    def __init__(
        self,
        model: str = "gpt-4o",
        base_url: str | None = None,
        api_key: str | None = None,
    ):
        self.model = model
        self.base_url = base_url
        self.client = OpenAI(base_url=base_url, api_key=api_key)

    def generate(
        self,
        messages: list[dict[str, Any]],
        system: str = "",
        max_tokens: int = 4096,
        temperature: float = 0.1,
    ) -> LLMResponse:
        oai_messages: list[dict[str, Any]] = []
        if system:
            oai_messages.append({"role": "system", "content": system})
        oai_messages.extend(messages)

        response = self.client.chat.completions.create(
            model=self.model,
            messages=oai_messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        choice = response.choices[0]

        # Reasoning models served by vLLM may leave <think> blocks in content
        text = _strip_thinking(choice.message.content or "")

        stop_reason = "max_tokens" if choice.finish_reason == "length" else "end_turn"
        usage = response.usage
        return LLMResponse(
            text=text,
            stop_reason=stop_reason,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=self.model,
            raw_response=response,
        )


def _strip_thinking(text: str) -> str:
    """Remove <think>...</think> blocks from model output."""
    return re.sub(r"<think>.*?</think>\s*", "", text, flags=re.DOTALL).strip()
