"""GitHub URL parsing and repository-hosted augmentation downloads."""

from __future__ import annotations

import asyncio
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from agent_trials.errors import ConfigurationError, GitError, ProvisioningError

from . import git
from .fs import copy_item

GITHUB_HOST = "github.com"
RAW_GITHUB_HOST = "raw.githubusercontent.com"
DEFAULT_REF = "main"

_COMMIT_HASH_RE = re.compile(r"^[0-9a-f]{40}$", re.IGNORECASE)


@dataclass(frozen=True)
class RepoRef:
    org: str
    repo: str
    ref: str = DEFAULT_REF
    item_path: str = ""

    @property
    def clone_url(self) -> str:
        return f"https://{GITHUB_HOST}/{self.org}/{self.repo}.git"

    @property
    def is_commit_hash(self) -> bool:
        return is_commit_hash(self.ref)

    @property
    def ref_type(self) -> str:
        return "commit" if self.is_commit_hash else "branch"


def is_commit_hash(ref: str) -> bool:
    """True for a full 40 character hex commit id."""
    return bool(_COMMIT_HASH_RE.match(ref or ""))


def is_github_host(hostname: str | None) -> bool:
    hostname = (hostname or "").lower()
    return hostname == GITHUB_HOST or hostname.endswith("." + GITHUB_HOST)


def _path_parts(path: str) -> list[str]:
    return [p for p in path.split("/") if p]


def parse_start_from(start_from: str | None) -> RepoRef:
    """Parse a task's ``startFrom`` into org, repo and ref.

    Accepts ``https://github.com/org/repo`` and
    ``https://github.com/org/repo/tree/<branch-or-commit>``.
    """
    if not start_from:
        raise ConfigurationError("startFrom is required")

    url = urlparse(start_from)
    if url.scheme not in ("http", "https") or not url.netloc:
        raise ConfigurationError("startFrom must be a valid GitHub URL")
    if not is_github_host(url.hostname):
        raise ConfigurationError("startFrom must be a valid GitHub URL")

    parts = _path_parts(url.path)
    if len(parts) < 2:
        raise ConfigurationError("startFrom must be a valid GitHub URL")

    org, repo = parts[0], parts[1].removesuffix(".git")
    ref = DEFAULT_REF
    if len(parts) > 3 and parts[2] == "tree":
        ref = parts[3]
    return RepoRef(org=org, repo=repo, ref=ref)


def parse_github_url(source: str) -> RepoRef:
    """Parse a repository-hosted file or folder URL.

    Supported forms::

        https://github.com/org/repo/blob/<ref>/path/to/file
        https://github.com/org/repo/tree/<ref>/path/to/folder
        https://raw.githubusercontent.com/org/repo/<ref>/path/to/file
    """
    url = urlparse(source)
    hostname = (url.hostname or "").lower()
    parts = _path_parts(url.path)

    if hostname == RAW_GITHUB_HOST:
        if len(parts) < 4:
            raise ProvisioningError(f"Unsupported GitHub URL format: {source}")
        return RepoRef(org=parts[0], repo=parts[1], ref=parts[2], item_path="/".join(parts[3:]))

    if is_github_host(hostname):
        if len(parts) < 5 or parts[2] not in ("blob", "tree"):
            raise ProvisioningError(f"Unsupported GitHub URL format: {source}")
        return RepoRef(org=parts[0], repo=parts[1], ref=parts[3], item_path="/".join(parts[4:]))

    raise ProvisioningError(f"Invalid GitHub URL: {source}")


def is_github_url(source: str) -> bool:
    hostname = (urlparse(source).hostname or "").lower()
    return hostname == RAW_GITHUB_HOST or is_github_host(hostname)


async def download_from_github(source: str, dest_path: Path, mode: str = "merge") -> None:
    """Copy a file or folder out of a GitHub repository into ``dest_path``.

    The repository is cloned into a scratch directory with the user's git
    credentials, the item is copied, and the scratch directory is removed.
    """
    ref = parse_github_url(source)
    scratch = Path(tempfile.mkdtemp(prefix="gh-aug-"))
    clone_dir = scratch / ref.repo

    try:
        try:
            await git.clone_repository(ref.clone_url, clone_dir, ref=ref.ref, is_commit_hash=ref.is_commit_hash)
        except GitError as e:
            raise ProvisioningError(
                f"Failed to clone repository for augmentation from {source}.\n"
                f"Make sure the repository exists, you have access, and the {ref.ref_type} '{ref.ref}' exists.\n"
                f"Error: {e}"
            ) from e

        source_path = clone_dir / ref.item_path
        if not source_path.exists():
            raise ProvisioningError(
                f"Path '{ref.item_path}' not found in repository {ref.org}/{ref.repo} on {ref.ref_type} '{ref.ref}'.\n"
                f"Make sure the path exists in the repository."
            )

        await asyncio.get_running_loop().run_in_executor(None, copy_item, source_path, dest_path, mode)
    finally:
        await asyncio.get_running_loop().run_in_executor(None, shutil.rmtree, scratch, True)
