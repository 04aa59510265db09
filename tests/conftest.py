"""Shared fixtures: isolated git identity and a local stand-in for remote clones."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from agent_trials.errors import GitError
from agent_trials.tasks.base import AugmentationSpec, TaskDefinition
from agent_trials.tasks.enrich import enrich_tasks
from agent_trials.workspace import git

SAMPLE_FILES = {
    "README.md": "# Sample app\n",
    "src/index.js": "console.log('hello');\n",
}


@pytest.fixture(autouse=True)
def git_identity(monkeypatch):
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test Runner")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "runner@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test Runner")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "runner@example.com")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", "/dev/null")
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")


def write_files(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


async def init_repo(path: Path, files: dict[str, str] | None = None) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    write_files(path, SAMPLE_FILES if files is None else files)
    await git.run_git(["init", "-q"], cwd=path)
    await git.run_git(["add", "."], cwd=path)
    await git.run_git(["commit", "-q", "-m", "Initial commit"], cwd=path)
    return path


class FakeRemote:
    """Replaces ``git.clone_repository`` with a local ``git init`` of canned files."""

    def __init__(self):
        self.calls: list[dict] = []
        self.repos: dict[str, dict[str, str]] = {}
        self.missing: set[str] = set()

    async def clone(self, clone_url, target_dir, ref=None, is_commit_hash=False):
        self.calls.append({
            "clone_url": clone_url,
            "target_dir": Path(target_dir),
            "ref": ref,
            "is_commit_hash": is_commit_hash,
        })
        if clone_url in self.missing:
            raise GitError(f"git clone {clone_url} failed: repository not found", returncode=128)
        await init_repo(Path(target_dir), self.repos.get(clone_url))


@pytest.fixture
def fake_remote(monkeypatch):
    remote = FakeRemote()
    monkeypatch.setattr(git, "clone_repository", remote.clone)
    return remote


@pytest.fixture
def make_task(tmp_path):
    """Write a task folder under ``tmp_path/tasks`` and return its definition."""

    def _make(
        name: str = "sample-task",
        start_from: str = "https://github.com/acme/webapp",
        augmentations: list[dict] | None = None,
        tags: list[str] | None = None,
        files: dict[str, str] | None = None,
    ) -> TaskDefinition:
        task_dir = tmp_path / "tasks" / name
        task_dir.mkdir(parents=True, exist_ok=True)
        data = {
            "name": name,
            "description": f"Description of {name}",
            "tags": tags or [],
            "startFrom": start_from,
            "augmentations": augmentations or [],
        }
        (task_dir / "task.json").write_text(json.dumps(data))
        (task_dir / "prompt.txt").write_text(f"Implement {name}")
        (task_dir / "criteria.txt").write_text(f"{name} works")
        write_files(task_dir, files or {})
        return TaskDefinition(
            name=name,
            description=data["description"],
            tags=frozenset(tags or []),
            start_from=start_from,
            augmentations=tuple(AugmentationSpec.from_dict(a) for a in augmentations or []),
            prompt=f"Implement {name}",
            criteria=f"{name} works",
            task_path=task_dir,
        )

    return _make


@pytest.fixture
def make_record(tmp_path, make_task):
    """Build a single RunRecord with workspace and results under ``tmp_path``."""

    def _make(agent: str = "claude", timestamp: str = "20250101-120000", **task_kwargs):
        task = make_task(**task_kwargs)
        [record] = enrich_tasks(
            [task], [agent], tmp_path / "workspace", tmp_path / "results", timestamp=timestamp,
        )
        return record

    return _make
