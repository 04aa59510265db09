"""Coding-agent adapters."""

from agent_trials.config import AgentSettings
from agent_trials.errors import UnknownAgentError
from agent_trials.tasks.enrich import sanitize_name

from .base import AgentAdapter, AgentOutput
from .cli import ClaudeAgent, CodexAgent, CursorAgent

AGENT_ADAPTERS: dict[str, type[AgentAdapter]] = {
    "claude": ClaudeAgent,
    "cursor": CursorAgent,
    "codex": CodexAgent,
}


def create_agent(name: str, settings: AgentSettings | None = None) -> AgentAdapter:
    """Factory function to create an agent adapter from its name."""
    key = sanitize_name(name)
    cls = AGENT_ADAPTERS.get(key)
    if cls is None:
        known = ", ".join(sorted(AGENT_ADAPTERS))
        raise UnknownAgentError(f"No handler found for agent '{name}'. Known agents: {known}")
    return cls(settings)


def check_agent_available(name: str) -> bool:
    """True if the agent's CLI binary is on PATH."""
    return create_agent(name, AgentSettings()).is_available()
