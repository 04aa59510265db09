"""Filesystem helpers for workspace overlays."""

from __future__ import annotations

import shutil
from pathlib import Path


def copy_directory(src: Path, dest: Path) -> None:
    """Recursively copy ``src`` over ``dest``, keeping files only present in ``dest``."""
    shutil.copytree(src, dest, dirs_exist_ok=True)


def copy_item(src: Path, dest: Path, mode: str = "merge") -> None:
    """Copy a file or folder to ``dest``.

    ``replace`` only applies to folders: the existing target subtree is
    removed before copying. Files always overwrite.
    """
    if src.is_dir():
        if mode == "replace":
            remove_tree(dest)
        copy_directory(src, dest)
    else:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dest)


def remove_tree(path: Path) -> None:
    """Remove a file or directory tree; missing paths are ignored."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def move_contents(src: Path, dest: Path) -> None:
    """Move every entry of ``src`` into ``dest`` (which must exist)."""
    for entry in src.iterdir():
        target = dest / entry.name
        if target.is_dir() and entry.is_dir():
            copy_directory(entry, target)
            shutil.rmtree(entry)
        else:
            if target.exists():
                remove_tree(target)
            shutil.move(str(entry), str(target))
