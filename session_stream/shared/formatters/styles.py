"""Terminal styles and ANSI rendering for transcript output.

Formatters build ``rich.text.Text`` values; ``render_ansi`` turns them into
plain strings with standard 8-color escape codes so output can be printed
by any sink (stdout, a file, or ``Text.from_ansi`` in the follow view).
"""

from __future__ import annotations

import io

from rich.console import Console
from rich.text import Text

USER = "cyan"
USER_HEADER = "bold cyan"
AGENT = "green"
AGENT_HEADER = "bold green"
THINKING_HEADER = "bold yellow"
TOOL_CALL = "magenta"
ERROR = "red"
SYSTEM = "dim blue"
BANNER = "yellow"
DIM = "dim"

RULE_CHAR = "─"
RULE_WIDTH = 60

# Wide enough that no transcript line is ever wrapped or cropped.
_RENDER_WIDTH = 1_000_000


def render_ansi(text: Text) -> str:
    """Render styled text to an ANSI string without wrapping."""
    if not text:
        return ""
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        force_terminal=True,
        force_jupyter=False,
        force_interactive=False,
        color_system="standard",
        width=_RENDER_WIDTH,
        soft_wrap=True,
        highlight=False,
        markup=False,
        emoji=False,
        legacy_windows=False,
    )
    console.print(text, end="")
    return buffer.getvalue()


def rule() -> Text:
    return Text(RULE_CHAR * RULE_WIDTH, style=DIM)
