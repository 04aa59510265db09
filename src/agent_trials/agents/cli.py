"""Adapters for the supported coding-agent CLIs."""

from __future__ import annotations

from .base import AgentAdapter, ModelAwareAgent


class ClaudeAgent(ModelAwareAgent):
    base_args = ("--verbose", "--output-format", "stream-json", "--dangerously-skip-permissions")

    @property
    def name(self) -> str:
        return "claude"

    @property
    def binary(self) -> str:
        return "claude"


class CursorAgent(ModelAwareAgent):
    base_args = ("--force", "--output-format", "stream-json")

    @property
    def name(self) -> str:
        return "cursor"

    @property
    def binary(self) -> str:
        return "cursor-agent"

    @property
    def display_name(self) -> str:
        return "Cursor agent"


class CodexAgent(AgentAdapter):
    """Codex takes no model override; it reads its own config."""

    @property
    def name(self) -> str:
        return "codex"

    @property
    def binary(self) -> str:
        return "codex"

    def build_args(self) -> list[str]:
        return ["exec", "--dangerously-bypass-approvals-and-sandbox", "--json"]
