"""Session streamer — feeds a session file through the line processor.

Supports dump mode (process everything, then print totals) and follow mode
(replay the last N lines, then poll for appended lines). Usage from every
processed line is summed into ``UsageTotals`` in the order lines are read.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable

from rich.text import Text

from session_stream.shared.formatters import styles
from session_stream.shared.formatters.usage import format_totals
from session_stream.shared.models.usage import UsageTotals
from session_stream.shared.services.discovery import agent_from_path

from .models import ProcessedLine
from .processor import LineProcessor

logger = logging.getLogger(__name__)

OutputSink = Callable[[str], None]


def _decode(raw: bytes) -> str:
    return raw.rstrip(b"\r").decode("utf-8", errors="replace")


class SessionTail:
    """Incremental reader returning complete lines appended since the last read.

    Reads bytes so a multi-byte character split across two writes is decoded
    only once its line is complete. Lines have no length limit.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._offset = 0
        self._pending = b""

    def read_lines(self) -> list[str]:
        size = self.path.stat().st_size
        if size < self._offset:
            logger.info("%s shrank from %d to %d bytes; rereading", self.path, self._offset, size)
            self._offset = 0
            self._pending = b""
        with self.path.open("rb") as handle:
            handle.seek(self._offset)
            chunk = handle.read()
        if not chunk:
            return []
        self._offset += len(chunk)
        *complete, self._pending = (self._pending + chunk).split(b"\n")
        return [_decode(raw) for raw in complete]

    def flush(self) -> list[str]:
        """Return the trailing line that has no newline yet, if any."""
        if not self._pending:
            return []
        line = _decode(self._pending)
        self._pending = b""
        return [line]


class SessionStreamer:
    """Stream one session file to an output sink.

    Args:
        path: Session JSONL file.
        sink: Receives each non-empty rendered output (may span several lines).
        verbose: Render ``request`` events.
        tail: Lines replayed before following.
        poll_interval: Seconds between polls in follow mode.
    """

    def __init__(
        self,
        path: Path,
        sink: OutputSink,
        *,
        verbose: bool = False,
        tail: int = 20,
        poll_interval: float = 0.3,
    ) -> None:
        self.path = path
        self.sink = sink
        self.tail = tail
        self.poll_interval = poll_interval
        self.processor = LineProcessor(verbose=verbose)
        self.totals = UsageTotals()
        self._reader = SessionTail(path)
        self._stop = threading.Event()

    def header(self) -> list[str]:
        agent = agent_from_path(self.path)
        title = f"Streaming: {self.path.name}" + (f" ({agent})" if agent else "")
        return [
            styles.render_ansi(Text(title, style=styles.BANNER)),
            styles.render_ansi(styles.rule()),
            "",
        ]

    def handle_line(self, line: str) -> ProcessedLine:
        result = self.processor.process(line)
        if result.output:
            self.sink(result.output)
        self.totals.add(result.usage)
        return result

    def dump(self) -> UsageTotals:
        """Process the whole file once and emit the totals summary."""
        lines = self._reader.read_lines() + self._reader.flush()
        logger.debug("Dumping %d lines from %s", len(lines), self.path)
        for line in lines:
            self.handle_line(line)
        if self.totals.has_tokens:
            self.sink("\n" + styles.render_ansi(styles.rule()))
            self.sink(styles.render_ansi(Text(format_totals(self.totals), style=styles.DIM)))
        return self.totals

    def replay_tail(self) -> int:
        """Process the last ``tail`` complete lines already in the file."""
        lines = self._reader.read_lines()
        start = max(len(lines) - self.tail, 0)
        for line in lines[start:]:
            self.handle_line(line)
        return len(lines) - start

    def poll(self) -> int:
        """Process lines appended since the last read; returns how many."""
        lines = self._reader.read_lines()
        for line in lines:
            self.handle_line(line)
        return len(lines)

    def follow(self) -> None:
        """Replay the tail, then poll until ``stop()`` is called."""
        self.replay_tail()
        logger.info("Following %s every %.2fs", self.path, self.poll_interval)
        while not self._stop.is_set():
            try:
                appended = self.poll()
            except FileNotFoundError:
                logger.warning("%s disappeared; waiting for it to return", self.path)
                appended = 0
            if not appended:
                self._stop.wait(self.poll_interval)

    def stop(self) -> None:
        self._stop.set()
