"""Command-line entry points: ``run-tasks`` and ``eval-tasks``."""

from __future__ import annotations

import argparse
import asyncio
import sys

from dotenv import load_dotenv

from agent_trials.agents import check_agent_available
from agent_trials.config import DEFAULT_AGENTS, RunnerConfig, judge_config_from_env, load_config
from agent_trials.errors import ConfigurationError
from agent_trials.judge.evaluate import eval_tasks, find_task_results
from agent_trials.llm.factory import create_llm_client
from agent_trials.runner.pipeline import run_tasks


def _split_list(values: list[str] | None) -> list[str]:
    """Flatten repeated, comma separated option values."""
    items: list[str] = []
    for value in values or []:
        items.extend(v.strip() for v in value.split(",") if v.strip())
    return items


def build_run_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="run-tasks",
        description="Run coding agents against development tasks in isolated workspaces",
        epilog=(
            "Examples:\n"
            "  run-tasks\n"
            "  run-tasks --task my-task --agents claude\n"
            "  run-tasks --tag frontend,forms --concurrency 5\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--task", action="append", help="Task name(s) to run, comma separated (repeatable)")
    parser.add_argument("--tag", action="append", help="Run tasks with any of these tags, comma separated (repeatable)")
    parser.add_argument("--agents", action="append",
                        help=f"Agents to run, comma separated (default: {','.join(DEFAULT_AGENTS)})")
    parser.add_argument("--workspace", help="Root directory for agent workspaces (default: system temp)")
    parser.add_argument("--augmentations", help="JSON or YAML file of augmentations applied to every task")
    parser.add_argument("--tasks-dir", help="Directory containing task definitions (default: tasks)")
    parser.add_argument("--results-dir", help="Directory for run results (default: results)")
    parser.add_argument("--concurrency", type=int, help="Max runs in flight (default: 3)")
    parser.add_argument("--config", help="Path to a YAML runner config; flags override its values")
    return parser


def parse_run_args(argv: list[str] | None = None) -> RunnerConfig:
    """Parse run-tasks arguments into a RunnerConfig. Usage errors exit with code 2."""
    parser = build_run_parser()
    args = parser.parse_args(argv)

    task_names = _split_list(args.task)
    tags = _split_list(args.tag)
    if task_names and tags:
        parser.error("Cannot specify both --task and --tag. Use one or the other.")
    if args.concurrency is not None and args.concurrency < 1:
        parser.error("--concurrency must be at least 1")

    config = load_config(args.config) if args.config else RunnerConfig()

    overrides = {}
    if task_names:
        overrides["task_names"] = task_names
    if tags:
        overrides["tags"] = tags
    agents = _split_list(args.agents)
    if agents:
        overrides["agents"] = agents
    if args.workspace:
        overrides["workspace_dir"] = args.workspace
    if args.augmentations:
        overrides["augmentations_file"] = args.augmentations
    if args.tasks_dir:
        overrides["tasks_dir"] = args.tasks_dir
    if args.results_dir:
        overrides["results_dir"] = args.results_dir
    if args.concurrency is not None:
        overrides["concurrency"] = args.concurrency

    return config.model_copy(update=overrides)


def build_eval_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eval-tasks",
        description="Judge captured run results with an LLM",
        epilog=(
            "Examples:\n"
            "  eval-tasks\n"
            "  eval-tasks results/20251204-074135\n"
            "  eval-tasks /absolute/path/to/results --parallel 4\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("path", nargs="?", help="Results folder (defaults to most recent in the results dir)")
    parser.add_argument("--parallel", type=int, default=1, help="Max evaluations in flight (default: 1)")
    parser.add_argument("--results-dir", default="results", help="Root of batch results (default: results)")
    return parser


def parse_eval_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_eval_parser()
    args = parser.parse_args(argv)
    if args.parallel < 1:
        parser.error("--parallel must be at least 1")
    return args


def warn_unavailable_agents(agents: list[str]) -> None:
    for agent in agents:
        if not check_agent_available(agent):
            print(f"Warning: {agent} CLI not found on PATH; its runs will fail", file=sys.stderr)


def run_tasks_main(argv: list[str] | None = None) -> int:
    load_dotenv()
    try:
        config = parse_run_args(argv)
        warn_unavailable_agents(config.agents)
        has_failures = asyncio.run(run_tasks(config))
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    return 1 if has_failures else 0


def eval_tasks_main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = parse_eval_args(argv)
    try:
        config = judge_config_from_env()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    results = find_task_results(args.path, args.results_dir)
    if not results:
        print("No task results found to evaluate")
        return 0
    print(f"Found {len(results)} task result(s) to evaluate\n")

    client = create_llm_client(config)
    has_failures = asyncio.run(eval_tasks(results, client, config, parallel=args.parallel))
    return 1 if has_failures else 0


def run_tasks_entry() -> None:
    sys.exit(run_tasks_main())


def eval_tasks_entry() -> None:
    sys.exit(eval_tasks_main())
