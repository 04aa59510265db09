"""Collect objective signals from a workspace after the agent has run."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from agent_trials.workspace.git import (
    AUGMENTATION_COMMIT_MESSAGE,
    CommitInfo,
    capture_git_changes,
    capture_git_commits,
)

from .scripts import ScriptResult, SkippedResult, has_npm_script, run_npm_script

if TYPE_CHECKING:
    from agent_trials.tasks.base import RunRecord

LINT_RESULTS_FILE = "lint-results.json"
TEST_RESULTS_FILE = "test-results.json"
COMMITS_FILE = "commits.json"
DIFF_FILE = "changes.diff"


@dataclass
class CapturedArtifacts:
    lint: ScriptResult | SkippedResult
    diff: str = ""
    commits: list[CommitInfo] = field(default_factory=list)
    tests: ScriptResult | None = None


def _write_json(path: Path, data: Any) -> None:
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def write_artifacts(artifacts: CapturedArtifacts, result_dir: Path) -> None:
    """Persist each artifact as its own file so the judge can read them independently."""
    result_dir.mkdir(parents=True, exist_ok=True)
    _write_json(result_dir / LINT_RESULTS_FILE, artifacts.lint.to_dict())

    if artifacts.tests is not None:
        _write_json(result_dir / TEST_RESULTS_FILE, artifacts.tests.to_dict())

    if artifacts.commits:
        _write_json(result_dir / COMMITS_FILE, [c.to_dict() for c in artifacts.commits])

    (result_dir / DIFF_FILE).write_text(artifacts.diff or "", encoding="utf-8")


async def collect_artifacts(workspace_dir: Path) -> CapturedArtifacts:
    """Gather lint, diff, commits and tests. Missing capabilities degrade, never raise."""
    if has_npm_script(workspace_dir, "lint"):
        lint: ScriptResult | SkippedResult = await run_npm_script(workspace_dir, "lint")
    else:
        lint = SkippedResult(reason="No lint script found in package.json")

    diff = await capture_git_changes(workspace_dir, AUGMENTATION_COMMIT_MESSAGE)
    commits = await capture_git_commits(workspace_dir, AUGMENTATION_COMMIT_MESSAGE)

    tests = None
    if has_npm_script(workspace_dir, "test"):
        tests = await run_npm_script(workspace_dir, "test")

    return CapturedArtifacts(lint=lint, diff=diff, commits=commits, tests=tests)


async def capture_results(record: RunRecord) -> CapturedArtifacts:
    """Collect artifacts from the record's workspace and write them to its result folder."""
    artifacts = await collect_artifacts(record.workspace_dir)
    write_artifacts(artifacts, record.result_dir)
    return artifacts
