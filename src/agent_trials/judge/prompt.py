"""Judge prompt templates."""

from __future__ import annotations

import json
from typing import Any

NO_LOG_PLACEHOLDER = "(No log available)"

SYSTEM_PROMPT = """\
You are an expert code reviewer evaluating the work of an autonomous coding agent.

You will be given a development task, the success criteria for it, and the
signals collected after the agent finished: the diff of its changes, lint and
test results, the commits it made and its execution log.

Judge the work strictly against the criteria. Respond in markdown with these sections:

## Verdict
PASS or FAIL, followed by a one-sentence summary.

## Score
An integer from 0 to 100.

## Criteria
One bullet per criterion, marked met or not met, with a short justification
that points at the diff or log.

## Issues
Bugs, regressions, lint or test failures, and anything the agent left unfinished.
Write "None" if there are none.
"""

EVAL_PROMPT_TEMPLATE = """\
# Task
Name: {{TASK_NAME}}
Agent: {{AGENT}}

## Description
{{DESCRIPTION}}

## Prompt Given to the Agent
{{PROMPT}}

# Success Criteria
{{CRITERIA}}

# Changes
```diff
{{CHANGES}}
```

# Lint Results
```json
{{LINT_RESULTS}}
```
{{TEST_RESULTS}}{{COMMITS}}
# Execution Log
{{LOG}}
"""


def format_test_section(tests: dict[str, Any] | None) -> str:
    if not tests:
        return ""
    return f"\n# Test Results\n```json\n{json.dumps(tests, indent=2)}\n```\n"


def format_commits_section(commits: list[dict[str, Any]] | None) -> str:
    if not commits:
        return ""
    lines = [f"- {c.get('hash', '')[:7]}: {c.get('message', '')}" for c in commits]
    return "\n# Git Commits\n" + "\n".join(lines) + "\n"


def build_eval_prompt(
    task: dict[str, Any],
    changes: str,
    lint: dict[str, Any] | None,
    tests: dict[str, Any] | None = None,
    commits: list[dict[str, Any]] | None = None,
    log: str | None = None,
) -> str:
    """Fill the evaluation template with a run's task data and captured artifacts.

    ``task`` needs ``name``, ``agent``, ``prompt`` and ``criteria``;
    ``description`` falls back to ``N/A``. Test and commit sections disappear
    when there is nothing to show.
    """
    values = {
        "TASK_NAME": task.get("name", ""),
        "AGENT": task.get("agent", ""),
        "DESCRIPTION": task.get("description") or "N/A",
        "PROMPT": task.get("prompt", ""),
        "CRITERIA": task.get("criteria", ""),
        "CHANGES": changes,
        "LINT_RESULTS": json.dumps(lint, indent=2),
        "TEST_RESULTS": format_test_section(tests),
        "COMMITS": format_commits_section(commits),
        "LOG": log if log else NO_LOG_PLACEHOLDER,
    }

    # Single pass so placeholder-like text inside artifacts is left alone
    parts = EVAL_PROMPT_TEMPLATE.split("{{")
    out = [parts[0]]
    for part in parts[1:]:
        key, sep, rest = part.partition("}}")
        if sep and key in values:
            out.append(str(values[key]) + rest)
        else:
            out.append("{{" + part)
    return "".join(out)
