"""Tests for the judge phase: result discovery, prompt assembly and evaluation."""

import json
import threading

import pytest

from agent_trials.config import JudgeConfig
from agent_trials.judge.evaluate import eval_task, eval_tasks, find_task_results
from agent_trials.judge.prompt import SYSTEM_PROMPT, build_eval_prompt
from agent_trials.llm.base import LLMClient, LLMResponse
from agent_trials.llm.factory import create_llm_client
from agent_trials.llm.openai_compat import OpenAICompatClient, _strip_thinking

VERDICT = "## Verdict\nPASS - feature implemented.\n"


class FakeLLM(LLMClient):
    def __init__(self, text=VERDICT, error=None):
        self.text = text
        self.error = error
        self.calls = []
        self.threads = []

    def generate(self, messages, system="", max_tokens=4096, temperature=0.1):
        self.calls.append({"messages": messages, "system": system, "temperature": temperature})
        self.threads.append(threading.current_thread())
        if self.error:
            raise self.error
        return LLMResponse(text=self.text, stop_reason="end_turn", input_tokens=1000, output_tokens=100, model="gpt-4o")


def _result_folder(root, name="login-claude", agent="claude"):
    folder = root / name
    folder.mkdir(parents=True)
    (folder / "task.json").write_text(json.dumps({"name": "login", "agent": agent, "description": "Login form"}))
    (folder / "prompt.txt").write_text("Build a login form")
    (folder / "criteria.txt").write_text("Form validates email")
    return folder


def test_build_eval_prompt_fills_placeholders():
    prompt = build_eval_prompt(
        {"name": "login", "agent": "claude", "description": "", "prompt": "Build it", "criteria": "Works"},
        changes="+added line",
        lint={"success": True, "exitCode": 0},
        tests={"success": False, "exitCode": 1},
        commits=[{"hash": "abcdef1234567890", "message": "Add login"}],
        log="agent log",
    )
    assert "{{" not in prompt
    assert "Name: login" in prompt
    assert "Agent: claude" in prompt
    assert "N/A" in prompt
    assert "+added line" in prompt
    assert '"exitCode": 0' in prompt
    assert "# Test Results" in prompt
    assert "- abcdef1: Add login" in prompt
    assert "agent log" in prompt


def test_build_eval_prompt_optional_sections_collapse():
    prompt = build_eval_prompt(
        {"name": "t", "agent": "codex", "prompt": "p", "criteria": "c"},
        changes="",
        lint=None,
    )
    assert "# Test Results" not in prompt
    assert "# Git Commits" not in prompt
    assert "(No log available)" in prompt
    assert "null" in prompt


def test_build_eval_prompt_leaves_artifact_braces_alone():
    prompt = build_eval_prompt(
        {"name": "t", "agent": "a", "prompt": "p", "criteria": "c"},
        changes="+ template {{AGENT}} literal",
        lint=None,
    )
    assert "+ template {{AGENT}} literal" in prompt


def test_find_task_results_uses_latest_batch(tmp_path, capsys):
    _result_folder(tmp_path / "20250101-000000")
    _result_folder(tmp_path / "20250102-000000", name="login-codex", agent="codex")
    (tmp_path / "20250102-000000" / "stray").mkdir()

    [result] = find_task_results(results_root=tmp_path)
    assert result.agent == "codex"
    assert result.folder_name == "login-codex"
    assert result.prompt == "Build a login form"
    assert result.criteria == "Form validates email"
    assert "Using most recent results: 20250102-000000" in capsys.readouterr().out


def test_find_task_results_explicit_dir(tmp_path):
    batch = tmp_path / "batch"
    _result_folder(batch, name="b-claude")
    _result_folder(batch, name="a-cursor", agent="cursor")

    results = find_task_results(batch, results_root=tmp_path / "unused")
    assert [r.folder_name for r in results] == ["a-cursor", "b-claude"]


def test_find_task_results_missing_dirs(tmp_path):
    assert find_task_results(results_root=tmp_path / "none") == []
    assert find_task_results(tmp_path / "none") == []
    (tmp_path / "empty").mkdir()
    assert find_task_results(results_root=tmp_path / "empty") == []


@pytest.mark.asyncio
async def test_eval_task_writes_prompt_and_verdict(tmp_path):
    folder = _result_folder(tmp_path / "batch")
    (folder / "changes.diff").write_text("+const form = true;")
    (folder / "lint-results.json").write_text(json.dumps({"skipped": True, "reason": "none"}))
    (folder / "commits.json").write_text(json.dumps([{"hash": "1234567890", "message": "Add form"}]))
    (folder / "output.jsonl").write_text("test log output")
    [result] = find_task_results(tmp_path / "batch")
    client = FakeLLM()

    outcome = await eval_task(result, client, JudgeConfig(temperature=0.3))

    assert outcome.markdown == VERDICT
    assert (folder / "final-result.md").read_text() == VERDICT
    prompt = (folder / "eval-prompt.txt").read_text()
    assert "+const form = true;" in prompt
    assert "- 1234567: Add form" in prompt
    assert "test log output" in prompt
    assert outcome.cost_usd == pytest.approx(0.0035)

    [call] = client.calls
    assert call["system"] == SYSTEM_PROMPT
    assert call["temperature"] == 0.3
    assert call["messages"] == [{"role": "user", "content": prompt}]
    assert client.threads[0] is not threading.main_thread()


@pytest.mark.asyncio
async def test_eval_task_missing_artifacts(tmp_path, capsys):
    folder = _result_folder(tmp_path / "batch")
    [result] = find_task_results(tmp_path / "batch")

    await eval_task(result, FakeLLM(), JudgeConfig())

    out = capsys.readouterr().out
    assert "Warning: No changes.diff found" in out
    assert "Warning: No lint-results.json found" in out
    assert "(No log available)" in (folder / "eval-prompt.txt").read_text()


@pytest.mark.asyncio
async def test_eval_task_llm_error_propagates(tmp_path):
    folder = _result_folder(tmp_path / "batch")
    [result] = find_task_results(tmp_path / "batch")

    with pytest.raises(RuntimeError, match="rate limited"):
        await eval_task(result, FakeLLM(error=RuntimeError("rate limited")), JudgeConfig())
    assert (folder / "eval-prompt.txt").exists()
    assert not (folder / "final-result.md").exists()


@pytest.mark.asyncio
async def test_eval_tasks_reports_failures(tmp_path):
    batch = tmp_path / "batch"
    for name in ("a-claude", "b-claude", "c-claude"):
        _result_folder(batch, name=name)
    results = find_task_results(batch)

    assert await eval_tasks(results, FakeLLM(), JudgeConfig(), parallel=2) is False
    assert all((r.result_path / "final-result.md").exists() for r in results)

    assert await eval_tasks(results, FakeLLM(error=RuntimeError("down")), JudgeConfig(), parallel=3) is True


def test_create_llm_client():
    client = create_llm_client(JudgeConfig(provider="openai", model="gpt-4o-mini", api_key="sk-test"))
    assert isinstance(client, OpenAICompatClient)
    assert client.model == "gpt-4o-mini"

    local = create_llm_client(JudgeConfig(provider="vllm", model="qwen"))
    assert local.base_url == "http://localhost:8000/v1"


def test_create_llm_client_unknown_provider():
    with pytest.raises(ValueError, match="Unknown LLM provider: gemini"):
        create_llm_client(JudgeConfig(provider="gemini"))


def test_strip_thinking():
    assert _strip_thinking("<think>hmm\nok</think>\n## Verdict\nPASS") == "## Verdict\nPASS"


def test_response_cost_unknown_model():
    assert LLMResponse(text="", stop_reason="end_turn", input_tokens=10, model="local").cost_usd == 0.0
