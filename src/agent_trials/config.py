"""Configuration data models and environment helpers for trial runs."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from agent_trials.errors import ConfigurationError

DEFAULT_AGENTS = ["claude", "cursor", "codex"]
DEFAULT_WORKSPACE_DIR = str(Path(tempfile.gettempdir()) / "skills-evals-workspace")


class RunnerConfig(BaseModel):
    """Configuration for a single run-tasks invocation."""
    tasks_dir: str = "tasks"
    results_dir: str = "results"
    workspace_dir: str = DEFAULT_WORKSPACE_DIR
    agents: list[str] = Field(default_factory=lambda: list(DEFAULT_AGENTS))
    task_names: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    augmentations_file: str | None = None
    concurrency: int = Field(default=3, ge=1)


class JudgeConfig(BaseModel):
    """Configuration for the LLM judge."""
    provider: str = "openai"
    model: str = "gpt-4o"
    temperature: float = 0.1
    max_tokens: int = 4096
    api_key: str | None = None
    base_url: str | None = None


class AgentSettings(BaseModel):
    model: str | None = None
    additional_args: str = ""

    @property
    def extra_args(self) -> list[str]:
        return parse_additional_args(self.additional_args)


def get_env(key: str, default: str | None = None) -> str | None:
    """Return an environment variable, falling back to ``default`` when unset or empty."""
    return os.environ.get(key) or default


def get_required_env(key: str) -> str:
    value = os.environ.get(key)
    if not value:
        raise ConfigurationError(f"{key} environment variable is not set")
    return value


def parse_additional_args(args: str | None) -> list[str]:
    """Split a whitespace separated argument string into a list."""
    if not args or not args.strip():
        return []
    return args.split()


def agent_settings_from_env(agent_name: str) -> AgentSettings:
    """Read ``{AGENT}_MODEL`` and ``{AGENT}_ADDITIONAL_ARGS`` for an agent."""
    prefix = agent_name.upper()
    return AgentSettings(
        model=get_env(f"{prefix}_MODEL"),
        additional_args=get_env(f"{prefix}_ADDITIONAL_ARGS", "") or "",
    )


def judge_config_from_env() -> JudgeConfig:
    """Build the judge configuration from ``EVAL_*`` and provider key variables."""
    provider = get_env("EVAL_PROVIDER", "openai")
    if provider == "openai":
        api_key = get_required_env("OPENAI_API_KEY")
    else:
        api_key = get_env("EVAL_API_KEY")

    try:
        temperature = float(get_env("EVAL_TEMPERATURE", "0.1"))
    except ValueError as e:
        raise ConfigurationError(f"EVAL_TEMPERATURE must be a number: {e}") from e

    return JudgeConfig(
        provider=provider,
        model=get_env("EVAL_MODEL", "gpt-4o"),
        temperature=temperature,
        api_key=api_key,
        base_url=get_env("EVAL_BASE_URL"),
    )


def load_config(path: str | Path) -> RunnerConfig:
    """Load runner config from YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must contain a mapping ({path})")
    try:
        return RunnerConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}") from e
