"""session-stream TUI — Textual application following one session."""

from __future__ import annotations

import logging
from pathlib import Path

from textual.app import App, ComposeResult

from session_stream.shared.services.transcript_stream.service import SessionStreamer
from session_stream.tui.widgets.status_bar import StatusBar
from session_stream.tui.widgets.transcript_log import TranscriptLog

logger = logging.getLogger(__name__)


class SessionStreamApp(App):
    """Full-screen follow view for a session transcript."""

    TITLE = "session-stream"

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("c", "clear_log", "Clear"),
    ]

    def __init__(
        self,
        path: Path,
        *,
        verbose: bool = False,
        tail: int = 20,
        poll_interval: float = 0.3,
        follow: bool = True,
    ) -> None:
        super().__init__()
        self.session_path = path
        self.follow_mode = follow
        self.poll_interval = poll_interval
        self.streamer = SessionStreamer(
            path,
            self._write_output,
            verbose=verbose,
            tail=tail,
            poll_interval=poll_interval,
        )

    def compose(self) -> ComposeResult:
        yield TranscriptLog(id="transcript")
        yield StatusBar(id="status-bar")

    def on_mount(self) -> None:
        status = self.query_one(StatusBar)
        status.session_name = self.session_path.name
        if self.follow_mode:
            self.streamer.replay_tail()
            status.state = "following"
            self.set_interval(self.poll_interval, self.poll_session)
        else:
            self.streamer.dump()
            status.state = "ended"
        status.update_totals(self.streamer.totals)

    def poll_session(self) -> None:
        """Pick up lines appended since the last poll."""
        status = self.query_one(StatusBar)
        try:
            appended = self.streamer.poll()
        except FileNotFoundError:
            if status.state != "missing":
                logger.warning("Session file %s disappeared", self.session_path)
            status.state = "missing"
            return
        status.state = "following"
        if appended:
            status.update_totals(self.streamer.totals)

    def _write_output(self, output: str) -> None:
        self.query_one(TranscriptLog).write_output(output)

    def action_clear_log(self) -> None:
        self.query_one(TranscriptLog).clear()
