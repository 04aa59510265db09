"""Structured JSON batch event logger."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any


class RunLogger:
    """Logs all batch events as structured JSON lines."""

    def __init__(self, batch_id: str, output_dir: str | Path = "results", filename: str = "events.jsonl"):
        self.batch_id = batch_id
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log_path = self.output_dir / filename
        self._events: list[dict[str, Any]] = []

    @property
    def events(self) -> list[dict[str, Any]]:
        return list(self._events)

    def _write_event(self, event: dict[str, Any]) -> None:
        event["batch_id"] = self.batch_id
        event["timestamp"] = time.time()
        self._events.append(event)
        with open(self.log_path, "a") as f:
            f.write(json.dumps(event, default=str) + "\n")

    def log_batch_start(self, run_ids: list[str], config: dict[str, Any]) -> None:
        self._write_event({
            "event": "batch_start",
            "run_ids": run_ids,
            "config": config,
        })

    def log_run_start(self, run_id: str, agent: str, workspace_dir: str) -> None:
        self._write_event({
            "event": "run_start",
            "run_id": run_id,
            "agent": agent,
            "workspace_dir": workspace_dir,
        })

    def log_stage(self, run_id: str, stage: str, status: str, duration_seconds: float = 0.0) -> None:
        self._write_event({
            "event": "stage",
            "run_id": run_id,
            "stage": stage,
            "status": status,
            "duration_seconds": round(duration_seconds, 3),
        })

    def log_warning(self, run_id: str, message: str) -> None:
        self._write_event({
            "event": "warning",
            "run_id": run_id,
            "message": message[:1000],
        })

    def log_run_end(self, run_id: str, status: str, error: str = "") -> None:
        self._write_event({
            "event": "run_end",
            "run_id": run_id,
            "status": status,
            "error": error,
        })

    def log_batch_end(self, completed: int, failed: int, errors: list[dict[str, str]]) -> None:
        self._write_event({
            "event": "batch_end",
            "completed": completed,
            "failed": failed,
            "errors": errors,
        })
