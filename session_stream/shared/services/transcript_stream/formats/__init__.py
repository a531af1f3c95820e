"""Transcript format normalizers."""

from __future__ import annotations

from typing import Any

from ..models import UniformEvent
from .base import TranscriptFormat
from .flat import FlatEventFormat
from .nested import NestedMessageFormat

# Probed in order; the nested-message format accepts everything else.
FORMATS: tuple[TranscriptFormat, ...] = (FlatEventFormat(), NestedMessageFormat())


def detect_format(record: dict[str, Any]) -> TranscriptFormat:
    for fmt in FORMATS:
        if fmt.matches(record):
            return fmt
    return FORMATS[-1]


def normalize_record(record: dict[str, Any]) -> UniformEvent:
    """Classify a decoded record and convert it into a ``UniformEvent``."""
    return detect_format(record).normalize(record)


__all__ = [
    "FORMATS",
    "FlatEventFormat",
    "NestedMessageFormat",
    "TranscriptFormat",
    "detect_format",
    "normalize_record",
]
