"""Canonical transcript stream models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from session_stream.shared.models.usage import Usage

TimestampValue = Union[str, int, float]


@dataclass(frozen=True)
class UniformEvent:
    """One log line normalized from either transcript format.

    ``tool_name``, ``tool_input`` and ``is_error`` are read straight from the
    record's top level; only the ``tool_call`` and ``tool_result`` roles use them.
    """

    role: str
    content: Any = None
    usage: Usage | None = None
    timestamp: TimestampValue | None = None
    tool_name: str = ""
    tool_input: dict[str, Any] | None = None
    is_error: bool = False


@dataclass(frozen=True)
class ProcessedLine:
    """Rendered output for one line plus the usage it contributes.

    An empty ``output`` means there is nothing to display for the line.
    """

    output: str = ""
    usage: Usage | None = None
