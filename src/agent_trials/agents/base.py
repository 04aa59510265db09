"""Base classes for coding-agent CLI adapters."""

from __future__ import annotations

import asyncio
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from agent_trials.config import AgentSettings, agent_settings_from_env
from agent_trials.errors import InvocationError


@dataclass
class AgentOutput:
    """Captured result of one agent process."""
    stdout: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class AgentAdapter(ABC):
    """Spawns an external coding agent with the prompt on stdin and captures stdout."""

    def __init__(self, settings: AgentSettings | None = None):
        self.settings = settings if settings is not None else agent_settings_from_env(self.name)

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key, e.g. ``claude``."""
        ...

    @property
    @abstractmethod
    def binary(self) -> str:
        """Executable looked up on PATH."""
        ...

    @property
    def display_name(self) -> str:
        return self.name.capitalize()

    @abstractmethod
    def build_args(self) -> list[str]:
        """Command line arguments, excluding the binary itself."""
        ...

    def command(self) -> list[str]:
        return [self.binary, *self.build_args()]

    def is_available(self) -> bool:
        return shutil.which(self.binary) is not None

    async def invoke(self, prompt: str, cwd: str | Path) -> AgentOutput:
        """Run the agent in ``cwd``. stderr is passed through to the console."""
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.command(),
                cwd=str(cwd),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise InvocationError(f"Failed to spawn {self.binary} CLI: {e}") from e

        stdout, _ = await proc.communicate(prompt.encode("utf-8"))
        return AgentOutput(
            stdout=stdout.decode("utf-8", errors="replace"),
            exit_code=proc.returncode if proc.returncode is not None else -1,
        )


class ModelAwareAgent(AgentAdapter):
    """Adapter whose CLI accepts ``--model`` and free-form extra arguments."""

    base_args: tuple[str, ...] = ()

    def build_args(self) -> list[str]:
        args = list(self.base_args)
        if self.settings.model:
            args += ["--model", self.settings.model]
        args += self.settings.extra_args
        return args
