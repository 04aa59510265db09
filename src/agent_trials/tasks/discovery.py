"""Task discovery: load task folders from disk and filter them."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from agent_trials.errors import ConfigurationError

from .base import AugmentationSpec, TaskDefinition

REQUIRED_FILES = ("task.json", "prompt.txt", "criteria.txt")


def load_augmentations_file(path: str | Path) -> list[dict[str, Any]]:
    """Load a global augmentation list (JSON, or YAML by file suffix)."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Error reading augmentations file {path}: {e}") from e

    if not isinstance(data, list):
        raise ConfigurationError(
            f"Error reading augmentations file {path}: "
            f"Augmentations file must contain an array ({path})"
        )
    return data


def load_task(task_path: Path, global_augmentations: Iterable[dict[str, Any]] = ()) -> TaskDefinition | None:
    """Load a single task folder. Returns None if a required file is missing."""
    try:
        data = json.loads((task_path / "task.json").read_text(encoding="utf-8"))
        prompt = (task_path / "prompt.txt").read_text(encoding="utf-8")
        criteria = (task_path / "criteria.txt").read_text(encoding="utf-8")
    except (OSError, ValueError):
        return None
    if not isinstance(data, dict):
        return None

    # Global augmentations first so task-specific entries land on top
    raw_augmentations = [*global_augmentations, *(data.get("augmentations") or [])]
    augmentations = tuple(
        AugmentationSpec.from_dict(a) for a in raw_augmentations if isinstance(a, dict)
    )

    tags = data.get("tags") or []
    return TaskDefinition(
        name=data.get("name") or task_path.name,
        description=data.get("description") or "",
        tags=frozenset(tags if isinstance(tags, list) else []),
        start_from=data.get("startFrom") or "",
        augmentations=augmentations,
        prompt=prompt,
        criteria=criteria,
        task_path=task_path,
    )


def find_tasks(
    tasks_dir: str | Path,
    task_names: Iterable[str] = (),
    tags: Iterable[str] = (),
    augmentations_file: str | Path | None = None,
) -> list[TaskDefinition]:
    """Discover tasks under ``tasks_dir``, optionally filtered by name or tag.

    Args:
        tasks_dir: Folder holding one subfolder per task.
        task_names: Only return tasks with these names.
        tags: Only return tasks carrying at least one of these tags.
        augmentations_file: Global augmentation list prepended to every task.

    Returns:
        Task definitions in folder-name order.

    Raises:
        ConfigurationError: If both names and tags are given, or the
            augmentations file is unreadable or not a list.
    """
    names = [n for n in task_names if n]
    tag_filter = [t for t in tags if t]
    if names and tag_filter:
        raise ConfigurationError("Cannot specify both task names and tags. Use one or the other.")

    global_augmentations: list[dict[str, Any]] = []
    if augmentations_file:
        global_augmentations = load_augmentations_file(augmentations_file)

    base = Path(tasks_dir)
    if not base.is_dir():
        return []

    tasks = []
    for entry in sorted(base.iterdir()):
        if not entry.is_dir():
            continue
        task = load_task(entry, global_augmentations)
        if task is not None:
            tasks.append(task)

    if names:
        tasks = [t for t in tasks if t.name in names]
    if tag_filter:
        tasks = [t for t in tasks if any(tag in t.tags for tag in tag_filter)]

    return tasks
