"""Per-record pipeline and batch entry point for run-tasks."""

from __future__ import annotations

import asyncio
import sys
import time
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path

import httpx

from agent_trials.agents import AgentAdapter, AgentOutput, create_agent
from agent_trials.agents.transcript import generate_transcript
from agent_trials.capture.results import capture_results
from agent_trials.config import RunnerConfig
from agent_trials.errors import InvocationError
from agent_trials.logging.logger import RunLogger
from agent_trials.tasks.base import RunRecord
from agent_trials.tasks.discovery import find_tasks
from agent_trials.tasks.enrich import enrich_tasks
from agent_trials.workspace.cleanup import cleanup_workspace
from agent_trials.workspace.provision import provision_workspace, write_task_info

from .parallel import ParallelRunner

OUTPUT_FILE = "output.jsonl"
TRANSCRIPT_FILE = "execution-transcript.txt"


async def invoke_agent(record: RunRecord, adapter: AgentAdapter) -> AgentOutput:
    """Run the agent in the record's workspace and save its raw output."""
    output = await adapter.invoke(record.prompt, record.workspace_dir)
    if not output.ok:
        raise InvocationError(f"{adapter.display_name} CLI exited with code {output.exit_code}")

    record.result_dir.mkdir(parents=True, exist_ok=True)
    (record.result_dir / OUTPUT_FILE).write_text(output.stdout, encoding="utf-8")

    try:
        transcript = generate_transcript(output.stdout, adapter.name)
    except (TypeError, ValueError, AttributeError, KeyError) as e:
        print(f"Warning: could not render transcript for {record.run_id}: {e}", file=sys.stderr)
        transcript = ""
    if transcript:
        (record.result_dir / TRANSCRIPT_FILE).write_text(transcript, encoding="utf-8")
    return output


class RecordProcessor:
    """Takes one RunRecord through provision -> invoke -> capture -> cleanup.

    Stages never overlap within a record. Cleanup always runs; any other
    stage failure propagates so the scheduler can record it.
    """

    def __init__(
        self,
        adapters: Mapping[str, AgentAdapter],
        logger: RunLogger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.adapters = adapters
        self.logger = logger
        self.transport = transport

    async def provision(self, record: RunRecord) -> object:
        return await provision_workspace(record, logger=self.logger, transport=self.transport)

    async def invoke(self, record: RunRecord) -> object:
        return await invoke_agent(record, self.adapters[record.agent])

    async def capture(self, record: RunRecord) -> object:
        return await capture_results(record)

    def cleanup(self, record: RunRecord) -> None:
        cleanup_workspace(record, logger=self.logger)

    async def _stage(self, record: RunRecord, name: str, step: Callable[[RunRecord], Awaitable[object]]) -> None:
        start = time.time()
        try:
            await step(record)
        except Exception:
            if self.logger:
                self.logger.log_stage(record.run_id, name, "failed", time.time() - start)
            raise
        if self.logger:
            self.logger.log_stage(record.run_id, name, "ok", time.time() - start)

    async def process(self, record: RunRecord) -> None:
        if self.logger:
            self.logger.log_run_start(record.run_id, record.agent, str(record.workspace_dir))

        try:
            write_task_info(record)
            await self._stage(record, "provision", self.provision)
            await self._stage(record, "invoke", self.invoke)
            await self._stage(record, "capture", self.capture)
        except Exception as e:
            if self.logger:
                self.logger.log_run_end(record.run_id, "failed", str(e))
            raise
        finally:
            await asyncio.get_running_loop().run_in_executor(None, self.cleanup, record)

        if self.logger:
            self.logger.log_run_end(record.run_id, "completed")


async def run_tasks(
    config: RunnerConfig,
    processor_factory: Callable[[Mapping[str, AgentAdapter], RunLogger], RecordProcessor] = RecordProcessor,
) -> bool:
    """Discover, enrich and run every (task, agent) pair. Returns True if any run failed.

    Configuration problems (conflicting filters, bad augmentation file,
    unknown agent) raise before any workspace is touched.
    """
    tasks = find_tasks(
        config.tasks_dir,
        task_names=config.task_names,
        tags=config.tags,
        augmentations_file=config.augmentations_file,
    )
    adapters = {agent: create_agent(agent) for agent in config.agents}

    if not tasks:
        print("No tasks found matching the given filters.")
        return False

    records = enrich_tasks(tasks, config.agents, config.workspace_dir, config.results_dir)
    timestamp = records[0].timestamp
    logger = RunLogger(timestamp, Path(config.results_dir) / timestamp)
    logger.log_batch_start([r.run_id for r in records], config.model_dump())

    print(f"Batch {timestamp}: {len(tasks)} task(s) x {len({r.agent for r in records})} agent(s) "
          f"= {len(records)} run(s), max {config.concurrency} parallel")
    print(f"Results will be saved to: {Path(config.results_dir) / timestamp}\n")

    processor = processor_factory(adapters, logger)
    runner: ParallelRunner[RunRecord] = ParallelRunner(config.concurrency)
    has_failures = await runner.run(records, processor.process, id_of=lambda r: r.run_id)

    if runner.tracker is not None:
        s = runner.tracker.state
        logger.log_batch_end(s.completed, s.failed, [e.to_dict() for e in s.errors])
    return has_failures
