"""Transcript log — scrolling RichLog of rendered session events."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import RichLog


class TranscriptLog(RichLog):
    """Scrollback of processed transcript lines."""

    def __init__(self, **kwargs) -> None:
        super().__init__(
            auto_scroll=True,
            wrap=True,
            markup=False,
            highlight=False,
            max_lines=5000,
            **kwargs,
        )

    def write_output(self, output: str) -> None:
        """Append one rendered output, decoding its ANSI styling."""
        self.write(Text.from_ansi(output))
