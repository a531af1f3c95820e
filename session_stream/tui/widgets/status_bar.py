"""Status bar — bottom bar showing the session and running usage totals."""

from __future__ import annotations

from rich.text import Text
from textual.reactive import reactive
from textual.widget import Widget

from session_stream.shared.formatters.usage import format_cost, format_number
from session_stream.shared.models.usage import UsageTotals


class StatusBar(Widget):
    """Single-line status bar with session name, totals and follow state."""

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: 1;
        background: $panel;
    }
    """

    session_name: reactive[str] = reactive("")
    context_tokens: reactive[int] = reactive(0)
    output_tokens: reactive[int] = reactive(0)
    cost: reactive[float] = reactive(0.0)
    state: reactive[str] = reactive("loading")

    def update_totals(self, totals: UsageTotals) -> None:
        self.context_tokens = totals.context
        self.output_tokens = totals.output
        self.cost = totals.cost

    def render(self) -> Text:
        state_colors = {
            "following": "green",
            "ended": "dim",
            "missing": "red bold",
        }
        color = state_colors.get(self.state, "yellow")

        bar = Text()
        bar.append(f" {self.session_name} ", style="bold")
        bar.append(" │ ", style="dim")
        bar.append(f"ctx: {format_number(self.context_tokens)}", style="cyan")
        bar.append(" │ ", style="dim")
        bar.append(f"out: {format_number(self.output_tokens)}", style="cyan")
        if self.cost > 0:
            bar.append(" │ ", style="dim")
            bar.append(format_cost(self.cost), style="cyan")
        bar.append(" │ ", style="dim")
        bar.append(f"● {self.state}", style=color)
        return bar
