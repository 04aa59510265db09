"""Apply augmentation overlays to a provisioned workspace."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path

import httpx

from agent_trials.errors import ProvisioningError
from agent_trials.tasks.base import AugmentationSpec

from .fs import copy_item
from .github import download_from_github, is_github_url

DEFAULT_TIMEOUT_SECONDS = 60.0


def resolve_local_source(source: str, task_path: Path) -> Path:
    """Absolute paths are used as-is; relative ones resolve against the task folder."""
    path = Path(source)
    return path if path.is_absolute() else task_path / path


async def fetch_file(url: str, dest_path: Path, transport: httpx.AsyncBaseTransport | None = None) -> None:
    """Download a single file over HTTP(S). Non-2xx responses are errors."""
    try:
        async with httpx.AsyncClient(
            timeout=DEFAULT_TIMEOUT_SECONDS,
            follow_redirects=True,
            transport=transport,
        ) as client:
            response = await client.get(url)
    except httpx.HTTPError as e:
        raise ProvisioningError(f"Failed to fetch {url}: {e}") from e

    if not response.is_success:
        raise ProvisioningError(f"Failed to fetch {url}: {response.status_code} {response.reason_phrase}")

    dest_path.parent.mkdir(parents=True, exist_ok=True)
    dest_path.write_text(response.text, encoding="utf-8")


async def apply_augmentation(
    aug: AugmentationSpec,
    workspace_dir: Path,
    task_path: Path,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    target = workspace_dir / aug.target
    source = aug.source

    if source.startswith(("http://", "https://")):
        if is_github_url(source):
            await download_from_github(source, target, aug.mode)
        else:
            await fetch_file(source, target, transport=transport)
        return

    source_path = resolve_local_source(source, task_path)
    if not source_path.exists():
        raise ProvisioningError(f"Augmentation source not found: {source_path}")
    await asyncio.get_running_loop().run_in_executor(None, copy_item, source_path, target, aug.mode)


async def apply_augmentations(
    augmentations: Sequence[AugmentationSpec],
    workspace_dir: Path,
    task_path: Path,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Apply augmentations in order. Returns how many were applied.

    Entries without a source or target are skipped.
    """
    applied = 0
    for aug in augmentations:
        if not aug.source or not aug.target:
            continue
        await apply_augmentation(aug, workspace_dir, task_path, transport=transport)
        applied += 1
    return applied
