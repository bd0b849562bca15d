"""stream-json protocol — message types + parsing (no I/O).

Handles the output of `claude --print --output-format stream-json --verbose`:
one JSON object per stdout line, parsed into typed dataclasses.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


# ── Parsed message types (CLI stdout -> Holocron) ─────────────


@dataclass
class SystemMessage:
    """type=system, subtype=init, the first line after CLI startup."""

    session_id: str
    model: str = ""
    tools: list[Any] = field(default_factory=list)


@dataclass
class AssistantText:
    """type=assistant: text blocks of one complete assistant message."""

    text: str


@dataclass
class ResultMessage:
    """type=result: final message marking end of a turn."""

    result: str
    session_id: str = ""
    cost_usd: float | None = None
    model: str = ""
    is_error: bool = False
    duration_ms: int | None = None


# Union type for all parsed messages
ParsedMessage = SystemMessage | AssistantText | ResultMessage | dict


def parse_line(line: str) -> ParsedMessage:
    """Parse a single JSONL line from CLI stdout into a typed message.

    Returns the appropriate dataclass for known message types,
    or the raw dict for unrecognized types. Raises ValueError on
    lines that are not JSON objects.
    """
    data = json.loads(line)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    msg_type = data.get("type", "")

    if msg_type == "system" and data.get("subtype") == "init":
        return SystemMessage(
            session_id=data.get("session_id", ""),
            model=data.get("model", ""),
            tools=data.get("tools", []),
        )

    # Assistant message: concatenate its text blocks, ignore tool_use etc.
    if msg_type == "assistant":
        content = data.get("message", {}).get("content", [])
        if isinstance(content, str):
            return AssistantText(text=content)
        texts = [
            b.get("text", "")
            for b in content
            if isinstance(b, dict) and b.get("type") == "text"
        ]
        if texts:
            return AssistantText(text="".join(texts))
        return data

    if msg_type == "result":
        return ResultMessage(
            result=data.get("result", "") or "",
            session_id=data.get("session_id", ""),
            cost_usd=data.get("total_cost_usd", data.get("cost_usd")),
            model=data.get("model", ""),
            is_error=bool(data.get("is_error", False)),
            duration_ms=data.get("duration_ms"),
        )

    return data
