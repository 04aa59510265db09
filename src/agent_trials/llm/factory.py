"""Create a judge LLM client from configuration."""

from __future__ import annotations

from agent_trials.config import JudgeConfig

from .base import LLMClient


def create_llm_client(config: JudgeConfig) -> LLMClient:
    """Create LLM client based on provider config."""
    provider = config.provider

    if provider == "anthropic":
        from .anthropic import AnthropicClient
        return AnthropicClient(model=config.model, api_key=config.api_key)

    if provider in ("openai", "vllm", "local"):
        from .openai_compat import OpenAICompatClient
        base_url = config.base_url
        if provider != "openai" and not base_url:
            base_url = "http://localhost:8000/v1"
        return OpenAICompatClient(
            model=config.model,
            base_url=base_url,
            api_key=config.api_key or ("dummy" if provider != "openai" else None),
        )

    raise ValueError(f"Unknown LLM provider: {provider}")
