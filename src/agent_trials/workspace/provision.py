"""Workspace provisioner: clone, augment, commit, branch, install."""

from __future__ import annotations

import asyncio
import json
import shutil
import sys
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

from agent_trials.errors import GitError, ProvisioningError

from . import git
from .augment import apply_augmentations
from .fs import move_contents
from .github import RepoRef, parse_start_from

if TYPE_CHECKING:
    from agent_trials.logging.logger import RunLogger
    from agent_trials.tasks.base import RunRecord

DEPENDENCY_MANIFEST = "package.json"


def write_task_info(record: RunRecord) -> Path:
    """Create the result folder with the task snapshot, prompt and criteria."""
    record.result_dir.mkdir(parents=True, exist_ok=True)

    (record.result_dir / "task.json").write_text(
        json.dumps(record.to_task_info(), indent=2), encoding="utf-8",
    )
    for filename in ("prompt.txt", "criteria.txt"):
        source = record.task.task_path / filename
        if source.exists():
            shutil.copyfile(source, record.result_dir / filename)
        else:
            text = record.task.prompt if filename == "prompt.txt" else record.task.criteria
            (record.result_dir / filename).write_text(text, encoding="utf-8")

    return record.result_dir


async def clone_start_from(repo: RepoRef, start_from: str, workspace_dir: Path) -> None:
    """Clone into a scratch directory, then move the contents into the workspace."""
    scratch = Path(tempfile.mkdtemp(prefix="clone-"))
    clone_dir = scratch / repo.repo
    try:
        try:
            await git.clone_repository(repo.clone_url, clone_dir, ref=repo.ref, is_commit_hash=repo.is_commit_hash)
        except GitError as e:
            raise ProvisioningError(
                f"Failed to clone repository from {start_from}.\n"
                f"Make sure the repository exists, you have access, and the {repo.ref_type} '{repo.ref}' exists.\n"
                f"Error: {e}"
            ) from e
        await asyncio.get_running_loop().run_in_executor(None, move_contents, clone_dir, workspace_dir)
    finally:
        await asyncio.get_running_loop().run_in_executor(None, shutil.rmtree, scratch, True)


async def install_dependencies(workspace_dir: Path, logger: RunLogger | None = None, run_id: str = "") -> bool:
    """Run ``npm ci`` when a manifest is present. Failures are warnings only."""
    if not (workspace_dir / DEPENDENCY_MANIFEST).exists():
        return False

    try:
        result = await git.run_command(["npm", "ci"], cwd=workspace_dir)
    except OSError as e:
        message = f"npm ci could not be started in {workspace_dir}: {e}"
    else:
        if result.ok:
            return True
        message = f"npm ci failed in {workspace_dir} (exit code {result.returncode}): {result.stderr.strip()[:500]}"

    print(f"Warning: {message}", file=sys.stderr)
    if logger:
        logger.log_warning(run_id, message)
    return False


async def provision_workspace(
    record: RunRecord,
    logger: RunLogger | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Path:
    """Prepare the record's workspace for the agent.

    Steps run strictly in order: create the directory, resolve ``startFrom``,
    clone, apply augmentations, commit them, branch, install dependencies.
    Any exception means the workspace is unusable.

    Returns:
        Path to the provisioned workspace directory.
    """
    workspace = record.workspace_dir
    workspace.mkdir(parents=True, exist_ok=True)

    repo = parse_start_from(record.task.start_from)
    await clone_start_from(repo, record.task.start_from, workspace)

    applied = await apply_augmentations(
        record.task.augmentations, workspace, record.task.task_path, transport=transport,
    )
    if applied:
        # Result capture diffs against this commit; the message is looked up verbatim
        try:
            await git.add_and_commit(workspace, git.AUGMENTATION_COMMIT_MESSAGE)
        except GitError as e:
            raise ProvisioningError(f"Failed to commit augmentations: {e}") from e

    try:
        await git.checkout_branch(workspace, record.branch_name, create=True)
    except GitError as e:
        raise ProvisioningError(f"Failed to create branch '{record.branch_name}': {e}") from e

    await install_dependencies(workspace, logger=logger, run_id=record.run_id)
    return workspace
