"""Normalization helpers shared by both transcript formats."""

from __future__ import annotations

import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any

_RFC3339_RE = re.compile(
    r"^(?P<date>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})[Tt]"
    r"(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})$"
)

# Epoch values above this are milliseconds.
_EPOCH_MS_THRESHOLD = 1e12


def coerce_text(value: Any) -> str:
    """Render arbitrary values into display text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        try:
            return json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError):
            return str(value)
    return str(value)


def extract_text(content: Any) -> str:
    """Extract visible text from a string, a list of typed blocks, or anything else.

    Only ``{"type": "text"}`` blocks and bare strings contribute to a block
    list; everything else in it is skipped. Never raises.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text")
                if isinstance(text, str):
                    parts.append(text)
        return "\n".join(parts)
    return coerce_text(content)


def parse_rfc3339(value: str) -> datetime | None:
    """Parse an RFC3339 timestamp, with or without fractional seconds."""
    # datetime.fromisoformat rejects "Z" and fractions other than 3 or 6 digits before 3.11.
    match = _RFC3339_RE.match(value.strip())
    if match is None:
        return None
    offset = match.group("offset")
    if offset in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = -1 if offset[0] == "-" else 1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        if hours > 23 or minutes > 59:
            return None
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))
    fraction = (match.group("fraction") or "").ljust(6, "0")[:6]
    try:
        return datetime(
            int(match.group("date")),
            int(match.group("month")),
            int(match.group("day")),
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second")),
            int(fraction),
            tzinfo=tz,
        )
    except ValueError:
        return None


def format_timestamp(value: Any) -> str:
    """Render a timestamp as ``HH:MM:SS``.

    Numbers are Unix epoch seconds (or milliseconds when above 1e12) shown in
    local time. Strings are parsed as RFC3339 and shown in their own offset;
    anything unparseable is passed through unchanged.
    """
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        try:
            seconds = float(value)
            if seconds > _EPOCH_MS_THRESHOLD:
                seconds /= 1000
            return datetime.fromtimestamp(int(seconds)).strftime("%H:%M:%S")
        except (OverflowError, OSError, ValueError):
            return str(value)
    if isinstance(value, str):
        if not value:
            return ""
        parsed = parse_rfc3339(value)
        if parsed is None:
            return value
        return parsed.strftime("%H:%M:%S")
    return ""
