#!/usr/bin/env python3
"""CLI entry point for judging captured run results."""

from agent_trials.cli import eval_tasks_entry

if __name__ == "__main__":
    eval_tasks_entry()
