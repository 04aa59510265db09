"""Task definition and run record data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

AUGMENTATION_MODES = ("merge", "replace")


@dataclass(frozen=True)
class AugmentationSpec:
    """A file or folder overlay applied to a workspace before the agent runs."""
    source: str
    target: str
    mode: str = "merge"  # "merge" | "replace"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AugmentationSpec:
        return cls(
            source=data.get("source") or "",
            target=data.get("target") or "",
            mode=data.get("mode") or "merge",
        )

    def to_dict(self) -> dict[str, Any]:
        return {"source": self.source, "target": self.target, "mode": self.mode}


@dataclass(frozen=True)
class TaskDefinition:
    """A development task loaded from ``tasks/{name}/``."""
    name: str
    description: str = ""
    tags: frozenset[str] = field(default_factory=frozenset)
    start_from: str = ""
    augmentations: tuple[AugmentationSpec, ...] = ()
    prompt: str = ""
    criteria: str = ""
    task_path: Path = field(default_factory=Path)


@dataclass(frozen=True)
class RunRecord:
    """One (task, agent) execution unit with its own workspace and result paths."""
    task: TaskDefinition
    agent: str
    timestamp: str
    workspace_dir: Path
    result_dir: Path
    sanitized_agent: str = ""

    @property
    def name(self) -> str:
        return self.task.name

    @property
    def prompt(self) -> str:
        return self.task.prompt

    @property
    def run_id(self) -> str:
        return f"{self.task.name}-{self.sanitized_agent}"

    @property
    def branch_name(self) -> str:
        """Branch the agent works on; unique per (agent, batch)."""
        return f"{self.sanitized_agent}-{self.timestamp}"

    def to_task_info(self) -> dict[str, Any]:
        """Snapshot written to ``task.json`` in the result folder."""
        return {
            "name": self.task.name,
            "description": self.task.description,
            "tags": sorted(self.task.tags),
            "startFrom": self.task.start_from,
            "augmentations": [aug.to_dict() for aug in self.task.augmentations],
            "agent": self.agent,
            "timestamp": self.timestamp,
            "workspaceDir": str(self.workspace_dir),
        }
