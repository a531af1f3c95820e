"""Nested-message transcript format.

Records carry role, content and usage under a ``message`` object:

    {"message": {"role": "assistant", "content": [...], "usage": {...}},
     "timestamp": 1708770600000}
"""

from __future__ import annotations

from typing import Any

from session_stream.shared.models.usage import Usage

from ..models import UniformEvent
from .base import TranscriptFormat, string_field


class NestedMessageFormat(TranscriptFormat):
    format_name = "nested"

    def matches(self, record: dict[str, Any]) -> bool:
        # Fallback format: anything that is not flat-event is read this way.
        return True

    def normalize(self, record: dict[str, Any]) -> UniformEvent:
        message = record.get("message")
        if not isinstance(message, dict):
            message = {}

        timestamp: Any = string_field(record, "ts") or None
        if timestamp is None:
            raw = record.get("timestamp")
            if isinstance(raw, (str, int, float)) and not isinstance(raw, bool):
                timestamp = raw

        return UniformEvent(
            role=string_field(message, "role"),
            content=message.get("content"),
            usage=Usage.from_dict(message.get("usage")),
            timestamp=timestamp,
            **self.tool_fields(record),
        )
