"""Transcript normalization for nested-message and flat-event session logs."""

from .formats import detect_format, normalize_record
from .models import ProcessedLine, UniformEvent
from .normalize import coerce_text, extract_text, format_timestamp, parse_rfc3339

__all__ = [
    "ProcessedLine",
    "UniformEvent",
    "coerce_text",
    "detect_format",
    "extract_text",
    "format_timestamp",
    "normalize_record",
    "parse_rfc3339",
]
