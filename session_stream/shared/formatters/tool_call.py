"""Tool call and tool result summaries.

Content lists carry tool activity as typed blocks:

    {"type": "toolCall", "name": "exec", "arguments": {"command": "ls -la"}}
    {"type": "toolResult", "text": "..."}
    {"type": "toolResult", "content": [{"text": "..."}, ...]}

Each recognized block becomes one indented line: ``⚡ name(args)`` for calls
and ``→ text`` for results. Unrecognized blocks are skipped.
"""

from __future__ import annotations

from typing import Any

from rich.text import Text

from session_stream.shared.formatters.styles import DIM, ERROR, TOOL_CALL
from session_stream.shared.services.transcript_stream.normalize import coerce_text

ELLIPSIS = "…"
ARG_VALUE_LIMIT = 80
RAW_ARGS_LIMIT = 150
RESULT_LIMIT = 300


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to fit ``limit`` characters, ending with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[: limit - 3] + ELLIPSIS


def summarize_arguments(arguments: dict[str, Any]) -> str:
    """Render ``key=value`` pairs; long values are truncated individually."""
    return ", ".join(
        f"{key}={truncate(coerce_text(value), ARG_VALUE_LIMIT)}"
        for key, value in arguments.items()
    )


def tool_call_line(name: str, args_summary: str) -> Text:
    return Text.assemble(
        "  ",
        (f"⚡ {name}", TOOL_CALL),
        "(",
        (args_summary, DIM),
        ")",
    )


def tool_result_line(text: str) -> Text:
    return Text.assemble("  ", (f"→ {text}", DIM))


def tool_error_line(text: str) -> Text:
    return Text.assemble("  ", (f"✗ {text}", ERROR))


def extract_tool_calls(content: Any) -> list[Text]:
    """One summary line per ``toolCall`` block in a content list."""
    if not isinstance(content, list):
        return []
    calls: list[Text] = []
    for block in content:
        if not isinstance(block, dict) or block.get("type") != "toolCall":
            continue
        name = block.get("name")
        if not isinstance(name, str):
            name = "?"

        args_summary = ""
        arguments = block.get("arguments")
        if isinstance(arguments, dict):
            args_summary = summarize_arguments(arguments)
        elif "arguments" in block:
            args_summary = coerce_text(arguments)[:RAW_ARGS_LIMIT]

        calls.append(tool_call_line(name, args_summary))
    return calls


def _result_text(block: dict[str, Any]) -> str:
    text = block.get("text")
    if isinstance(text, str):
        return text
    if "content" not in block:
        return ""
    nested = block["content"]
    if isinstance(nested, list):
        parts = [
            item["text"]
            for item in nested
            if isinstance(item, dict) and isinstance(item.get("text"), str)
        ]
        return " ".join(parts)
    return coerce_text(nested)


def extract_tool_results(content: Any) -> list[Text]:
    """One summary line per ``toolResult`` block with non-blank text."""
    if not isinstance(content, list):
        return []
    results: list[Text] = []
    for block in content:
        if not isinstance(block, dict) or block.get("type") != "toolResult":
            continue
        text = truncate(_result_text(block), RESULT_LIMIT)
        if text.strip():
            results.append(tool_result_line(text))
    return results
