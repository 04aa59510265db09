"""Expand tasks x agents into run records for one batch."""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from agent_trials.errors import ConfigurationError

from .base import RunRecord, TaskDefinition


def sanitize_name(name: str) -> str:
    """Make a name safe for folder and branch names.

    Lower-cases, collapses whitespace runs into a single hyphen and strips
    everything outside ``[a-z0-9-]``.
    """
    name = re.sub(r"\s+", "-", name.lower())
    return re.sub(r"[^a-z0-9-]", "", name)


def current_timestamp(now: datetime | None = None) -> str:
    """Batch identifier in ``YYYYMMDD-HHMMSS`` form (local time)."""
    return (now or datetime.now()).strftime("%Y%m%d-%H%M%S")


def enrich_tasks(
    tasks: Sequence[TaskDefinition],
    agents: Sequence[str],
    workspace_root: str | Path,
    results_root: str | Path,
    timestamp: str | None = None,
) -> list[RunRecord]:
    """Create one RunRecord per (task, agent), task-major order.

    All records share a single timestamp minted once per call. Agents that
    sanitize to the same name are run once (first spelling wins); repeated
    task names raise ConfigurationError since their folders would collide.
    """
    names = [task.name for task in tasks]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate task names: {', '.join(duplicates)}")

    unique_agents: dict[str, str] = {}
    for agent in agents:
        unique_agents.setdefault(sanitize_name(agent), agent)

    timestamp = timestamp or current_timestamp()
    workspace_base = Path(workspace_root).resolve() / timestamp
    results_base = Path(results_root).resolve() / timestamp

    records = []
    for task in tasks:
        for sanitized, agent in unique_agents.items():
            folder_name = f"{task.name}-{sanitized}"
            records.append(RunRecord(
                task=task,
                agent=agent,
                timestamp=timestamp,
                workspace_dir=workspace_base / folder_name,
                result_dir=results_base / folder_name,
                sanitized_agent=sanitized,
            ))
    return records
