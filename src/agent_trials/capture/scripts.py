"""Detect and run package.json scripts (lint, test) in a workspace."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from agent_trials.workspace.git import run_command


@dataclass
class ScriptResult:
    success: bool
    exit_code: int
    stdout: str
    stderr: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "exitCode": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
        }


@dataclass
class SkippedResult:
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"skipped": True, "reason": self.reason}


def has_npm_script(workspace_dir: str | Path, script_name: str) -> bool:
    """True if ``package.json`` declares ``script_name``; False if unreadable."""
    package_json = Path(workspace_dir) / "package.json"
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return False
    scripts = data.get("scripts") if isinstance(data, dict) else None
    return isinstance(scripts, dict) and bool(scripts.get(script_name))


async def run_npm_script(workspace_dir: str | Path, script_name: str) -> ScriptResult:
    """Run ``npm run <script>``. Failures are reported, never raised."""
    try:
        result = await run_command(["npm", "run", script_name], cwd=workspace_dir)
    except OSError as e:
        return ScriptResult(success=False, exit_code=1, stdout="", stderr=str(e))

    return ScriptResult(
        success=result.ok,
        exit_code=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
    )
