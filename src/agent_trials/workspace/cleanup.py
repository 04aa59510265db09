"""Best-effort removal of ephemeral workspaces."""

from __future__ import annotations

import shutil
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from agent_trials.logging.logger import RunLogger
    from agent_trials.tasks.base import RunRecord


def cleanup_workspace(record: RunRecord, logger: RunLogger | None = None) -> bool:
    """Remove the record's workspace. Never raises; returns False on failure."""
    try:
        shutil.rmtree(record.workspace_dir, ignore_errors=False)
    except FileNotFoundError:
        return True
    except Exception as e:
        message = f"Failed to cleanup workspace {record.workspace_dir}: {e}"
        print(f"Warning: {message}", file=sys.stderr)
        if logger:
            logger.log_warning(record.run_id, message)
        return False
    return True
