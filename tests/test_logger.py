"""Tests for the JSONL batch event log."""

import json

from agent_trials.logging.logger import RunLogger


def test_events_written_as_json_lines(tmp_path):
    logger = RunLogger("20250101-000000", tmp_path / "batch")
    logger.log_batch_start(["t-claude"], {"concurrency": 3, "workspace_dir": tmp_path})
    logger.log_run_start("t-claude", "claude", "/tmp/ws")
    logger.log_stage("t-claude", "provision", "ok", 1.23456)
    logger.log_run_end("t-claude", "completed")
    logger.log_batch_end(1, 0, [])

    lines = (tmp_path / "batch" / "events.jsonl").read_text().splitlines()
    events = [json.loads(line) for line in lines]
    assert [e["event"] for e in events] == ["batch_start", "run_start", "stage", "run_end", "batch_end"]
    assert all(e["batch_id"] == "20250101-000000" for e in events)
    assert events[0]["config"]["workspace_dir"] == str(tmp_path)
    assert events[2]["duration_seconds"] == 1.235
    assert [e["event"] for e in logger.events] == [e["event"] for e in events]


def test_warning_message_truncated(tmp_path):
    logger = RunLogger("b", tmp_path)
    logger.log_warning("r", "x" * 5000)
    assert len(logger.events[0]["message"]) == 1000
