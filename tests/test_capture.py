"""Tests for result capture after an agent run."""

import json

import pytest

from agent_trials.capture.results import CapturedArtifacts, capture_results, collect_artifacts, write_artifacts
from agent_trials.capture.scripts import ScriptResult, SkippedResult, has_npm_script
from agent_trials.errors import GitError
from agent_trials.workspace import git

from conftest import init_repo


async def _augmented_repo(path):
    repo = await init_repo(path)
    (repo / "AGENTS.md").write_text("rules\n")
    assert await git.add_and_commit(repo, git.AUGMENTATION_COMMIT_MESSAGE)
    return repo


@pytest.mark.asyncio
async def test_diff_and_commits_since_augmentation(tmp_path):
    repo = await _augmented_repo(tmp_path / "repo")

    (repo / "src" / "index.js").write_text("console.log('committed');\n")
    await git.add_and_commit(repo, "Agent change | with pipe")
    (repo / "README.md").write_text("# Uncommitted edit\n")
    (repo / "notes.txt").write_text("untracked\n")

    artifacts = await collect_artifacts(repo)

    assert "console.log('committed');" in artifacts.diff
    assert "# Uncommitted edit" in artifacts.diff
    assert "notes.txt" in artifacts.diff
    assert "+untracked" in artifacts.diff
    # The augmentation itself is the baseline, not part of the diff
    assert "AGENTS.md" not in artifacts.diff

    assert [c.message for c in artifacts.commits] == ["Agent change | with pipe"]
    assert artifacts.commits[0].author == "Test Runner"


@pytest.mark.asyncio
async def test_no_augmentation_commit_falls_back_to_head_diff(tmp_path):
    repo = await init_repo(tmp_path / "repo")
    (repo / "README.md").write_text("# Changed\n")
    (repo / "new.js").write_text("export {};\n")

    artifacts = await collect_artifacts(repo)

    assert "# Changed" in artifacts.diff
    assert "new.js" in artifacts.diff
    assert artifacts.commits == []


@pytest.mark.asyncio
async def test_lint_skipped_without_script(tmp_path):
    repo = await init_repo(tmp_path / "repo")
    artifacts = await collect_artifacts(repo)

    assert isinstance(artifacts.lint, SkippedResult)
    assert artifacts.lint.to_dict() == {"skipped": True, "reason": "No lint script found in package.json"}
    assert artifacts.tests is None


@pytest.mark.asyncio
async def test_diff_outside_repo_reports_error(tmp_path, monkeypatch):
    async def failing_find(cwd, message):
        raise GitError("not a git repository")

    monkeypatch.setattr(git, "find_commit_by_message", failing_find)
    assert await git.capture_git_changes(tmp_path) == "Error capturing diff: not a git repository"
    assert await git.capture_git_commits(tmp_path) == []


def test_has_npm_script(tmp_path):
    assert not has_npm_script(tmp_path, "lint")
    (tmp_path / "package.json").write_text(json.dumps({"scripts": {"lint": "eslint .", "test": ""}}))
    assert has_npm_script(tmp_path, "lint")
    assert not has_npm_script(tmp_path, "test")
    (tmp_path / "package.json").write_text("{broken")
    assert not has_npm_script(tmp_path, "lint")


def test_write_artifacts_optional_files(tmp_path):
    write_artifacts(CapturedArtifacts(lint=SkippedResult("none"), diff=""), tmp_path)

    assert json.loads((tmp_path / "lint-results.json").read_text()) == {"skipped": True, "reason": "none"}
    assert (tmp_path / "changes.diff").read_text() == ""
    assert not (tmp_path / "commits.json").exists()
    assert not (tmp_path / "test-results.json").exists()


def test_write_artifacts_with_tests(tmp_path):
    tests = ScriptResult(success=False, exit_code=1, stdout="1 failing", stderr="")
    write_artifacts(CapturedArtifacts(lint=tests, diff="diff", tests=tests), tmp_path)

    data = json.loads((tmp_path / "test-results.json").read_text())
    assert data == {"success": False, "exitCode": 1, "stdout": "1 failing", "stderr": ""}


@pytest.mark.asyncio
async def test_capture_results_writes_to_result_dir(make_record):
    record = make_record()
    await init_repo(record.workspace_dir)
    (record.workspace_dir / "README.md").write_text("# Edited\n")

    await capture_results(record)

    assert "# Edited" in (record.result_dir / "changes.diff").read_text()
    assert (record.result_dir / "lint-results.json").exists()
