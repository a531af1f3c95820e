"""Base interface for transcript format normalizers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..models import UniformEvent


def string_field(record: dict[str, Any], key: str) -> str:
    value = record.get(key)
    return value if isinstance(value, str) else ""


class TranscriptFormat(ABC):
    """Normalizer for one JSON-Lines transcript schema."""

    format_name: str

    @abstractmethod
    def matches(self, record: dict[str, Any]) -> bool:
        """Return True when the record is written in this format."""

    @abstractmethod
    def normalize(self, record: dict[str, Any]) -> UniformEvent:
        """Convert a decoded record into a ``UniformEvent``."""

    @staticmethod
    def tool_fields(record: dict[str, Any]) -> dict[str, Any]:
        tool_input = record.get("tool_input")
        return {
            "tool_name": string_field(record, "tool_name"),
            "tool_input": tool_input if isinstance(tool_input, dict) else None,
            "is_error": record.get("is_error") is True,
        }
