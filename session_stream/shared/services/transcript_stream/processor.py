"""Line processor — turns one raw JSON-Lines record into display text.

Every line is handled independently: decode, normalize to a ``UniformEvent``,
dispatch on role, render. Malformed input of any kind produces an empty
``ProcessedLine`` instead of an error so a bad line never stops a stream.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from rich.text import Text

from session_stream.shared.formatters import styles
from session_stream.shared.formatters.tool_call import (
    RESULT_LIMIT,
    extract_tool_calls,
    extract_tool_results,
    summarize_arguments,
    tool_call_line,
    tool_error_line,
    tool_result_line,
    truncate,
)
from session_stream.shared.formatters.usage import format_token_usage
from session_stream.shared.models.usage import Usage

from .formats import normalize_record
from .models import ProcessedLine, UniformEvent
from .normalize import extract_text, format_timestamp

logger = logging.getLogger(__name__)

HEARTBEAT_PREFIX = "Read HEARTBEAT"
LONG_TEXT_LIMIT = 500
LONG_TEXT_KEEP = 200
SYSTEM_LIMIT = 200
INLINE_RESULT_BYTES = 100

_EMPTY = ProcessedLine()


def _timestamp(event: UniformEvent) -> Text:
    formatted = format_timestamp(event.timestamp)
    if not formatted:
        return Text()
    return Text.assemble(" ", (formatted, styles.DIM))


def _shorten_long_text(text: str) -> Text:
    """Keep the head of very long messages and note the original length."""
    if len(text) <= LONG_TEXT_LIMIT:
        return Text(text)
    return Text.assemble(
        text[:LONG_TEXT_KEEP],
        "\n  ",
        (f"… ({len(text)} chars)", styles.DIM),
    )


def _header(label: str, style: str, *annotations: Text) -> Text:
    header = Text(label, style=style)
    for annotation in annotations:
        header.append_text(annotation)
    header.append(" ━━━", style=style)
    return header


class LineProcessor:
    """Render transcript lines for one stream.

    Args:
        verbose: Also render ``request`` events (full API payload records).
    """

    def __init__(self, *, verbose: bool = False) -> None:
        self.verbose = verbose
        self._handlers: dict[str, Callable[[UniformEvent, Text], ProcessedLine]] = {
            "user": self._render_user,
            "assistant": self._render_assistant,
            "tool": self._render_tool,
            "system": self._render_system,
            "thinking": self._render_thinking,
            "tool_call": self._render_tool_call,
            "tool_result": self._render_tool_result,
            "request": self._render_request,
        }

    def process(self, line: str) -> ProcessedLine:
        line = line.strip()
        if not line:
            return _EMPTY
        try:
            record: Any = json.loads(line)
        except (ValueError, RecursionError):
            logger.debug("Skipping line that is not valid JSON (%d chars)", len(line))
            return _EMPTY
        if not isinstance(record, dict):
            logger.debug("Skipping JSON line that is not an object")
            return _EMPTY

        event = normalize_record(record)
        handler = self._handlers.get(event.role)
        if handler is None:
            return _EMPTY
        return handler(event, _timestamp(event))

    @staticmethod
    def _result(text: Text, usage: Usage | None = None) -> ProcessedLine:
        return ProcessedLine(output=styles.render_ansi(text), usage=usage)

    def _render_user(self, event: UniformEvent, ts: Text) -> ProcessedLine:
        text = extract_text(event.content)
        if not text.strip() or text.startswith(HEARTBEAT_PREFIX):
            return _EMPTY
        body = _shorten_long_text(text)
        body.stylize(styles.USER)
        return self._result(
            Text("\n").join([Text(), _header("━━━ You", styles.USER_HEADER, ts), body])
        )

    def _render_assistant(self, event: UniformEvent, ts: Text) -> ProcessedLine:
        text = extract_text(event.content)
        tool_calls = extract_tool_calls(event.content)
        if not text.strip() and not tool_calls:
            return _EMPTY

        header = _header(
            "━━━ Agent", styles.AGENT_HEADER, ts, format_token_usage(event.usage)
        )
        parts = [Text(), header]
        if text.strip():
            parts.append(Text(text, style=styles.AGENT))
        parts.extend(tool_calls)
        return self._result(Text("\n").join(parts), usage=event.usage)

    def _render_tool(self, event: UniformEvent, ts: Text) -> ProcessedLine:
        results = extract_tool_results(event.content)
        if results:
            return self._result(Text("\n").join(results))
        text = extract_text(event.content)
        if not text.strip():
            return _EMPTY
        return self._result(tool_result_line(truncate(text, RESULT_LIMIT)))

    def _render_system(self, event: UniformEvent, ts: Text) -> ProcessedLine:
        text = truncate(extract_text(event.content), SYSTEM_LIMIT)
        if not text.strip():
            return _EMPTY
        line = Text.assemble("\n", ("[system]", styles.SYSTEM), ts, (f" {text}", styles.SYSTEM))
        return self._result(line)

    def _render_thinking(self, event: UniformEvent, ts: Text) -> ProcessedLine:
        text = extract_text(event.content)
        if not text.strip():
            return _EMPTY
        body = _shorten_long_text(text)
        body.stylize(styles.DIM)
        return self._result(
            Text("\n").join([Text(), _header("💭 Thinking", styles.THINKING_HEADER, ts), body])
        )

    def _render_tool_call(self, event: UniformEvent, ts: Text) -> ProcessedLine:
        args_summary = summarize_arguments(event.tool_input) if event.tool_input else ""
        return self._result(tool_call_line(event.tool_name or "?", args_summary))

    def _render_tool_result(self, event: UniformEvent, ts: Text) -> ProcessedLine:
        text = extract_text(event.content)
        if not text:
            return _EMPTY
        if event.is_error:
            return self._result(tool_error_line(truncate(text, RESULT_LIMIT)))
        line_count = text.count("\n") + 1
        byte_count = len(text.encode("utf-8", errors="replace"))
        if line_count == 1 and byte_count < INLINE_RESULT_BYTES:
            return self._result(tool_result_line(text))
        return self._result(tool_result_line(f"{line_count} lines, {byte_count} bytes"))

    def _render_request(self, event: UniformEvent, ts: Text) -> ProcessedLine:
        if not self.verbose:
            return _EMPTY
        return self._result(Text.assemble("\n", ("[request]", styles.SYSTEM), ts))


def process_line(line: str, *, verbose: bool = False) -> ProcessedLine:
    """Process a single raw line with a throwaway ``LineProcessor``."""
    return LineProcessor(verbose=verbose).process(line)
