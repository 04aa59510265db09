"""Abstract base class for judge LLM clients."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

# Pricing per million tokens (USD)
PRICING = {
    "gpt-4o": {
        "input": 2.5,
        "output": 10.0,
    },
    "gpt-4o-mini": {
        "input": 0.15,
        "output": 0.6,
    },
    "claude-sonnet-4-6": {
        "input": 3.0,
        "output": 15.0,
    },
    "claude-opus-4-6": {
        "input": 5.0,
        "output": 25.0,
    },
}


@dataclass
class LLMResponse:
    """Response from an LLM API call."""
    text: str
    stop_reason: str  # "end_turn", "max_tokens"
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""
    raw_response: Any = field(default=None, repr=False)

    @property
    def cost_usd(self) -> float:
        pricing = PRICING.get(self.model)
        if not pricing:
            return 0.0  # No pricing info for this model (local/free)
        return (
            self.input_tokens * pricing["input"] / 1_000_000
            + self.output_tokens * pricing["output"] / 1_000_000
        )


class LLMClient(ABC):
    """Abstract base for LLM API clients."""

    @abstractmethod
    def generate(
        self,
        messages: list[dict[str, Any]],
        system: str = "",
        max_tokens: int = 4096,
        temperature: float = 0.1,
    ) -> LLMResponse:
        """Generate a response from the LLM."""
        ...
