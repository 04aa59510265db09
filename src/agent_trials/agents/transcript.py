"""Render an agent's JSONL event stream as a readable transcript."""

from __future__ import annotations

import json
from typing import Any


def parse_events(jsonl_output: str) -> list[dict[str, Any]]:
    """Parse JSONL output, skipping lines that are not JSON objects."""
    events = []
    for line in jsonl_output.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            event = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(event, dict):
            events.append(event)
    return events


def _section(label: str, body: str) -> str:
    return f"[{label}]\n{body}\n\n"


def _message_texts(event: dict[str, Any]) -> list[dict[str, Any]]:
    """Content items of an event's message; non-object items are dropped."""
    message = event.get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, list):
        return []
    return [item for item in content if isinstance(item, dict)]


def transcribe_claude(events: list[dict[str, Any]]) -> str:
    parts = []
    for event in events:
        if event.get("type") == "assistant":
            for item in _message_texts(event):
                if item.get("type") == "text" and item.get("text"):
                    parts.append(_section("AGENT MESSAGE", item["text"]))
                elif item.get("type") == "tool_use":
                    body = f"[Tool: {item.get('name')}]"
                    if item.get("input"):
                        body += "\n" + json.dumps(item["input"], indent=2)
                    parts.append(_section("TOOL", body))
        elif event.get("type") == "result" and event.get("result"):
            parts.append(_section("RESULT", str(event["result"])))
    return "".join(parts)


def transcribe_cursor(events: list[dict[str, Any]]) -> str:
    parts = []
    for event in events:
        kind = event.get("type")
        if kind == "user":
            for item in _message_texts(event):
                if item.get("type") == "text" and item.get("text"):
                    parts.append(_section("USER MESSAGE", item["text"]))
        elif kind == "tool_call" and isinstance(event.get("tool_call"), dict) and event["tool_call"]:
            # {"readToolCall": {"args": {...}, "result": {...}}}
            tool_key = next(iter(event["tool_call"]))
            payload = event["tool_call"][tool_key]
            if not isinstance(payload, dict):
                payload = {}
            if event.get("subtype") == "started":
                tool_name = tool_key.replace("ToolCall", "") or "unknown"
                body = f"[Tool: {tool_name}]\n" + json.dumps(payload.get("args") or {}, indent=2)
                parts.append(_section("TOOL", body))
            elif event.get("subtype") == "completed" and payload.get("result"):
                parts.append(_section("RESULT", json.dumps(payload["result"], indent=2)))
        elif kind == "assistant":
            for item in _message_texts(event):
                if item.get("type") == "text" and item.get("text"):
                    parts.append(_section("AGENT MESSAGE", item["text"]))
        elif kind == "result" and event.get("response_text"):
            parts.append(_section("RESULT", str(event["response_text"])))
    return "".join(parts)


def transcribe_codex(events: list[dict[str, Any]]) -> str:
    parts = []
    for event in events:
        item = event.get("item")
        if event.get("type") != "item.completed" or not isinstance(item, dict):
            continue
        kind = item.get("type")
        if kind == "reasoning" and item.get("text"):
            parts.append(_section("REASONING", item["text"]))
        elif kind == "command_execution":
            body = f"[Command: {item.get('command')}]"
            if item.get("aggregated_output"):
                body += "\n" + str(item["aggregated_output"]).rstrip("\n")
            if item.get("exit_code") is not None:
                body += f"\nExit code: {item['exit_code']}"
            parts.append(_section("COMMAND", body))
        elif kind in ("message", "agent_message") and item.get("text"):
            parts.append(_section("AGENT MESSAGE", item["text"]))
    return "".join(parts)


TRANSCRIBERS = {
    "claude": transcribe_claude,
    "cursor": transcribe_cursor,
    "codex": transcribe_codex,
}


def generate_transcript(jsonl_output: str, agent_name: str) -> str:
    """Readable transcript for a known agent; empty string otherwise."""
    transcriber = TRANSCRIBERS.get(agent_name)
    if transcriber is None:
        return ""
    events = parse_events(jsonl_output)
    if not events:
        return ""
    return transcriber(events)
