"""Tests for workspace cleanup."""

import shutil

from agent_trials.logging.logger import RunLogger
from agent_trials.workspace.cleanup import cleanup_workspace


def test_cleanup_removes_workspace(make_record):
    record = make_record()
    (record.workspace_dir / "nested").mkdir(parents=True)
    (record.workspace_dir / "nested" / "file.txt").write_text("x")

    assert cleanup_workspace(record) is True
    assert not record.workspace_dir.exists()


def test_cleanup_is_idempotent(make_record):
    record = make_record()
    record.workspace_dir.mkdir(parents=True)

    assert cleanup_workspace(record) is True
    assert cleanup_workspace(record) is True


def test_cleanup_failure_is_a_warning(make_record, monkeypatch, tmp_path, capsys):
    record = make_record()
    record.workspace_dir.mkdir(parents=True)

    def failing_rmtree(path, ignore_errors=False):
        raise PermissionError("denied")

    monkeypatch.setattr(shutil, "rmtree", failing_rmtree)
    logger = RunLogger("batch", tmp_path / "logs")

    assert cleanup_workspace(record, logger=logger) is False
    assert "Failed to cleanup workspace" in capsys.readouterr().err
    [event] = logger.events
    assert event["event"] == "warning"
    assert event["run_id"] == record.run_id
