"""Async subprocess wrappers for git and other workspace commands."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path

from agent_trials.errors import GitError

AUGMENTATION_COMMIT_MESSAGE = "Add task augmentations"

# %H|%an|%ae|%ai|%s; the subject may itself contain "|"
COMMIT_LOG_FORMAT = "%H|%an|%ae|%ai|%s"


@dataclass
class CommandResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass
class CommitInfo:
    hash: str
    author: str
    email: str
    date: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {
            "hash": self.hash,
            "author": self.author,
            "email": self.email,
            "date": self.date,
            "message": self.message,
        }


async def run_command(
    args: list[str],
    cwd: str | Path | None = None,
    input_text: str | None = None,
) -> CommandResult:
    """Run a command without blocking the event loop and capture its output."""
    proc = await asyncio.create_subprocess_exec(
        *args,
        cwd=str(cwd) if cwd is not None else None,
        stdin=asyncio.subprocess.PIPE if input_text is not None else asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate(
        input_text.encode("utf-8") if input_text is not None else None
    )
    return CommandResult(
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


async def run_git(
    args: list[str],
    cwd: str | Path | None = None,
    ok_codes: tuple[int, ...] = (0,),
) -> str:
    """Run a git command and return stdout. Raises GitError on failure."""
    try:
        result = await run_command(["git", *args], cwd=cwd)
    except OSError as e:
        raise GitError(f"git {' '.join(args)} failed: {e}") from e
    if result.returncode not in ok_codes:
        raise GitError(
            f"git {' '.join(args)} failed: {result.stderr.strip()}",
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
    return result.stdout


async def clone_repository(
    clone_url: str,
    target_dir: str | Path,
    ref: str | None = None,
    is_commit_hash: bool = False,
) -> None:
    """Clone a repository.

    Commit hashes need the full history, so they get a plain clone followed
    by an explicit checkout. Branch names get a shallow single-branch clone.
    """
    if is_commit_hash and ref:
        await run_git(["clone", clone_url, str(target_dir)])
        await run_git(["checkout", ref], cwd=target_dir)
    elif ref:
        await run_git(["clone", "--depth", "1", "--branch", ref, clone_url, str(target_dir)])
    else:
        await run_git(["clone", clone_url, str(target_dir)])


async def checkout_branch(cwd: str | Path, branch: str, create: bool = False) -> None:
    args = ["checkout", "-b", branch] if create else ["checkout", branch]
    await run_git(args, cwd=cwd)


async def add_and_commit(cwd: str | Path, message: str) -> bool:
    """Stage everything and commit.

    Returns False when nothing is staged. Any other commit failure, such as a
    missing identity or a rejecting hook, raises GitError.
    """
    await run_git(["add", "."], cwd=cwd)
    staged = await run_command(["git", "diff", "--cached", "--quiet"], cwd=cwd)
    if staged.returncode == 0:
        return False
    if staged.returncode != 1:
        raise GitError(
            f"git diff --cached failed: {staged.stderr.strip()}",
            returncode=staged.returncode,
            stdout=staged.stdout,
            stderr=staged.stderr,
        )
    await run_git(["commit", "-m", message], cwd=cwd)
    return True


async def find_commit_by_message(cwd: str | Path, message: str) -> str | None:
    """Hash of the most recent commit whose message contains ``message``."""
    output = await run_git(
        ["log", "--fixed-strings", f"--grep={message}", "--format=%H", "-n", "1"],
        cwd=cwd,
    )
    return output.strip() or None


async def list_untracked_files(cwd: str | Path) -> list[str]:
    output = await run_git(["ls-files", "--others", "--exclude-standard"], cwd=cwd)
    return [line for line in output.splitlines() if line.strip()]


async def capture_git_changes(cwd: str | Path, since_message: str = AUGMENTATION_COMMIT_MESSAGE) -> str:
    """Unified diff of everything changed since the commit tagged ``since_message``.

    Falls back to the working tree against HEAD when no such commit exists.
    Untracked files are appended as diffs against an empty file.
    """
    try:
        base_commit = await find_commit_by_message(cwd, since_message)

        if base_commit:
            diff = await run_git(["diff", base_commit, "HEAD"], cwd=cwd)
            uncommitted = await run_git(["diff", "HEAD"], cwd=cwd)
            if uncommitted:
                diff += "\n" + uncommitted
        else:
            diff = await run_git(["diff", "HEAD"], cwd=cwd)

        for path in await list_untracked_files(cwd):
            # --no-index exits 1 when the files differ, which they always do here
            file_diff = await run_git(["diff", "--no-index", "/dev/null", path], cwd=cwd, ok_codes=(0, 1))
            if file_diff:
                diff += "\n" + file_diff

        return diff
    except GitError as e:
        return f"Error capturing diff: {e}"


def parse_commit_log(output: str) -> list[CommitInfo]:
    commits = []
    for line in output.strip().splitlines():
        if not line:
            continue
        parts = line.split("|")
        if len(parts) < 5:
            continue
        hash_, author, email, date, *message_parts = parts
        commits.append(CommitInfo(
            hash=hash_,
            author=author,
            email=email,
            date=date,
            message="|".join(message_parts),
        ))
    return commits


async def capture_git_commits(cwd: str | Path, since_message: str = AUGMENTATION_COMMIT_MESSAGE) -> list[CommitInfo]:
    """Commits made after the commit tagged ``since_message``; empty if there is none."""
    try:
        base_commit = await find_commit_by_message(cwd, since_message)
        if not base_commit:
            return []
        output = await run_git(["log", f"{base_commit}..HEAD", f"--format={COMMIT_LOG_FORMAT}"], cwd=cwd)
    except GitError:
        return []
    return parse_commit_log(output)
