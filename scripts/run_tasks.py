#!/usr/bin/env python3
"""CLI entry point for running tasks against coding agents."""

from agent_trials.cli import run_tasks_entry

if __name__ == "__main__":
    run_tasks_entry()
