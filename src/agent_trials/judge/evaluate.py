"""Judge pass: read captured artifacts per run and ask an LLM for a verdict."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from agent_trials.capture.results import COMMITS_FILE, DIFF_FILE, LINT_RESULTS_FILE, TEST_RESULTS_FILE
from agent_trials.config import JudgeConfig
from agent_trials.llm.base import LLMClient
from agent_trials.runner.parallel import run_in_parallel
from agent_trials.runner.pipeline import OUTPUT_FILE

from .prompt import SYSTEM_PROMPT, build_eval_prompt

EVAL_PROMPT_FILE = "eval-prompt.txt"
FINAL_RESULT_FILE = "final-result.md"
REQUIRED_FILES = ("task.json", "criteria.txt", "prompt.txt")


@dataclass
class TaskResult:
    """One run's result folder, as written by run-tasks."""
    name: str
    agent: str
    prompt: str
    criteria: str
    result_path: Path
    description: str = ""
    task_info: dict[str, Any] = field(default_factory=dict)

    @property
    def folder_name(self) -> str:
        return self.result_path.name

    def to_prompt_fields(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "agent": self.agent,
            "description": self.description,
            "prompt": self.prompt,
            "criteria": self.criteria,
        }


@dataclass
class EvalOutcome:
    markdown: str
    prompt_path: Path
    result_path: Path
    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0


def _latest_batch_dir(results_root: Path) -> Path | None:
    if not results_root.is_dir():
        print("No results directory found")
        return None
    dirs = sorted(p.name for p in results_root.iterdir() if p.is_dir())
    if not dirs:
        print("No results directories found")
        return None
    print(f"Using most recent results: {dirs[-1]}")
    return results_root / dirs[-1]


def load_task_result(folder: Path) -> TaskResult | None:
    """Read a result folder, or None if it lacks any required file."""
    if not all((folder / name).is_file() for name in REQUIRED_FILES):
        return None
    try:
        info = json.loads((folder / "task.json").read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return None
    if not isinstance(info, dict):
        return None

    return TaskResult(
        name=info.get("name", folder.name),
        agent=info.get("agent", ""),
        description=info.get("description", ""),
        prompt=(folder / "prompt.txt").read_text(encoding="utf-8"),
        criteria=(folder / "criteria.txt").read_text(encoding="utf-8"),
        result_path=folder,
        task_info=info,
    )


def find_task_results(result_dir: str | Path | None = None, results_root: str | Path = "results") -> list[TaskResult]:
    """Collect run results from ``result_dir``, or from the most recent batch under ``results_root``."""
    if result_dir is not None:
        target = Path(result_dir).resolve()
    else:
        target = _latest_batch_dir(Path(results_root))
        if target is None:
            return []

    if not target.is_dir():
        print(f"Could not read results directory: {target}")
        return []

    results = []
    for folder in sorted(p for p in target.iterdir() if p.is_dir()):
        result = load_task_result(folder)
        if result is not None:
            results.append(result)
    return results


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


def _read_json(path: Path) -> Any:
    text = _read_text(path)
    if text is None:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


async def eval_task(result: TaskResult, client: LLMClient, config: JudgeConfig) -> EvalOutcome:
    """Build the judge prompt for one run, call the LLM and write ``final-result.md``."""
    print(f"\nEvaluating: {result.folder_name}")
    print(f"Task: {result.name}")
    print(f"Agent: {result.agent}")

    path = result.result_path
    changes = _read_text(path / DIFF_FILE)
    if changes is None:
        print(f"  Warning: No {DIFF_FILE} found")
        changes = ""
    lint = _read_json(path / LINT_RESULTS_FILE)
    if lint is None:
        print(f"  Warning: No {LINT_RESULTS_FILE} found")
    tests = _read_json(path / TEST_RESULTS_FILE)
    commits = _read_json(path / COMMITS_FILE)
    log = _read_text(path / OUTPUT_FILE)

    prompt = build_eval_prompt(
        result.to_prompt_fields(),
        changes,
        lint,
        tests=tests,
        commits=commits if isinstance(commits, list) else None,
        log=log,
    )
    prompt_path = path / EVAL_PROMPT_FILE
    prompt_path.write_text(prompt, encoding="utf-8")
    print(f"  ✓ Created {EVAL_PROMPT_FILE}")

    loop = asyncio.get_running_loop()
    response = await loop.run_in_executor(
        None,
        lambda: client.generate(
            messages=[{"role": "user", "content": prompt}],
            system=SYSTEM_PROMPT,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
        ),
    )

    result_path = path / FINAL_RESULT_FILE
    result_path.write_text(response.text, encoding="utf-8")
    print(f"  ✓ Evaluation complete: {result_path}")

    return EvalOutcome(
        markdown=response.text,
        prompt_path=prompt_path,
        result_path=result_path,
        input_tokens=response.input_tokens,
        output_tokens=response.output_tokens,
        cost_usd=response.cost_usd,
    )


async def eval_tasks(results: list[TaskResult], client: LLMClient, config: JudgeConfig, parallel: int = 1) -> bool:
    """Evaluate every result with at most ``parallel`` judge calls in flight. True iff any failed."""

    async def process(result: TaskResult) -> EvalOutcome:
        return await eval_task(result, client, config)

    return await run_in_parallel(
        results,
        parallel,
        process,
        id_of=lambda r: r.folder_name,
    )
