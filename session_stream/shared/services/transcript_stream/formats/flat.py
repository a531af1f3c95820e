"""Flat-event transcript format.

Records keep every field at the top level and report usage with their own
field names:

    {"ts": "2024-02-24T10:30:01Z", "role": "assistant", "content": "...",
     "in_tokens": 100, "out_tokens": 20, "cost_usd": 0.0123}
"""

from __future__ import annotations

from typing import Any

from session_stream.shared.models.usage import Cost, Usage, as_float, as_int

from ..models import UniformEvent
from .base import TranscriptFormat, string_field


class FlatEventFormat(TranscriptFormat):
    format_name = "flat"

    def matches(self, record: dict[str, Any]) -> bool:
        if not string_field(record, "role"):
            return False
        message = record.get("message")
        if isinstance(message, dict) and string_field(message, "role"):
            return False
        return True

    def normalize(self, record: dict[str, Any]) -> UniformEvent:
        return UniformEvent(
            role=string_field(record, "role"),
            content=record.get("content"),
            usage=self._usage(record),
            timestamp=string_field(record, "ts") or None,
            **self.tool_fields(record),
        )

    @staticmethod
    def _usage(record: dict[str, Any]) -> Usage | None:
        in_tokens = as_int(record.get("in_tokens"))
        out_tokens = as_int(record.get("out_tokens"))
        if in_tokens <= 0 and out_tokens <= 0:
            return None
        cost_usd = as_float(record.get("cost_usd"))
        # totalTokens mirrors input only; output is not added in this format.
        return Usage(
            input=in_tokens,
            output=out_tokens,
            total_tokens=in_tokens,
            cost=Cost(total=cost_usd) if cost_usd > 0 else None,
        )
