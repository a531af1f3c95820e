"""session-stream — main application entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.text import Text

from session_stream.config import DEFAULT_AGENT, StreamConfig
from session_stream.errors import NoSessionsError, SessionFileNotFoundError, SessionStreamError
from session_stream.shared.services.discovery import SessionDiscovery

logger = logging.getLogger(__name__)

SESSION_LIST_LIMIT = 20

_USAGE_EXAMPLES = """\
examples:
  session-stream                        # latest session for default agent (main)
  session-stream --agent argraphments   # latest session for a specific agent
  session-stream --list                 # list available agents
  session-stream --list --agent work    # list sessions for an agent
  session-stream <path>.jsonl           # stream a specific file
  session-stream --no-follow            # dump and exit (no tail)
  session-stream -n 50                  # show last N messages instead of default 20
  session-stream --verbose              # show request entries (flat-event format)
  session-stream --tui                  # follow in a full-screen view
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="session-stream",
        description="Stream nested-message and flat-event session logs in a readable format.",
        epilog=_USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "path", nargs="?", default=None,
        help="Session JSONL file to stream (default: latest session of --agent)",
    )
    parser.add_argument(
        "--agent", "-a", default=None,
        help=f"Agent id (default: {DEFAULT_AGENT})",
    )
    parser.add_argument(
        "--list", "-l", action="store_true",
        help="List agents, or sessions when --agent is given",
    )
    parser.add_argument(
        "--no-follow", action="store_true",
        help="Dump the whole session and exit",
    )
    parser.add_argument(
        "-n", dest="tail", type=int, default=None, metavar="N",
        help="Number of recent lines to show before following (default: 20)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", default=None,
        help="Show request entries (flat-event format)",
    )
    parser.add_argument(
        "--tui", action="store_true",
        help="Follow the session in a full-screen terminal view",
    )
    parser.add_argument(
        "--config", metavar="PATH", type=Path, default=None,
        help="YAML config file (default: <state dir>/session-stream.yaml)",
    )
    parser.add_argument(
        "--log-level", metavar="LEVEL", default=None,
        help="Diagnostic log level (default: WARNING)",
    )
    return parser


def configure_logging(config: StreamConfig, *, to_file: bool) -> None:
    """Log to stderr, or to a rotating file when the screen belongs to the TUI."""
    level = getattr(logging, config.log_level, logging.WARNING)
    if not to_file:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
            stream=sys.stderr,
        )
        return

    config.log_dir.mkdir(parents=True, exist_ok=True)
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    handler = RotatingFileHandler(
        config.log_dir / "session-stream.log",
        maxBytes=2_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    )
    root.addHandler(handler)


def apply_cli_overrides(config: StreamConfig, args: argparse.Namespace) -> StreamConfig:
    if args.agent:
        config.agent = args.agent
    if args.tail is not None:
        config.tail = args.tail
    if args.verbose:
        config.verbose = True
    if args.log_level:
        config.log_level = args.log_level.upper()
    config.validate()
    return config


def list_agents(discovery: SessionDiscovery, console: Console) -> None:
    agents = discovery.require_agents()
    console.print("[bold]Agents:[/bold]\n")
    for agent in agents:
        console.print(
            f"  [cyan]{escape(agent.name)}[/cyan]  [dim]({agent.session_count} sessions)[/dim]"
        )


def list_sessions(discovery: SessionDiscovery, agent: str, console: Console) -> None:
    sessions = discovery.list_sessions(agent, limit=SESSION_LIST_LIMIT)
    if not sessions:
        raise NoSessionsError(agent, discovery.session_pattern(agent), [])
    console.print(f"[bold]Sessions for [cyan]{escape(agent)}[/cyan]:[/bold]\n")
    for session in sessions:
        mtime = session.modified_at.strftime("%Y-%m-%d %H:%M")
        console.print(
            f"  [dim]{mtime}[/dim]  {session.size_label:>6}  {escape(session.path.name)}",
            highlight=False,
        )


def resolve_session_path(
    path_arg: str | None, discovery: SessionDiscovery, agent: str
) -> Path:
    if path_arg:
        path = Path(path_arg).expanduser()
        if not path.exists():
            raise SessionFileNotFoundError(path)
        return path
    return discovery.latest_session(agent)


def report_error(exc: SessionStreamError, console: Console) -> None:
    console.print(f"[red]{escape(str(exc))}[/red]")
    if isinstance(exc, NoSessionsError):
        console.print(f"[dim]Looked in: {escape(str(exc.pattern))}[/dim]")
        if exc.available:
            console.print(f"\nAvailable agents: {escape(', '.join(exc.available))}")


def stream_to_console(path: Path, config: StreamConfig, follow: bool, console: Console) -> None:
    from session_stream.shared.services.transcript_stream.service import SessionStreamer

    def sink(output: str) -> None:
        console.print(Text.from_ansi(output), soft_wrap=True, highlight=False)

    streamer = SessionStreamer(
        path,
        sink,
        verbose=config.verbose,
        tail=config.tail,
        poll_interval=config.poll_interval,
    )
    for line in streamer.header():
        sink(line)
    if not follow:
        streamer.dump()
        return
    try:
        streamer.follow()
    except KeyboardInterrupt:
        streamer.stop()
        logger.debug("Interrupted while following %s", path)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    console = Console()
    err_console = Console(stderr=True)

    try:
        config = apply_cli_overrides(StreamConfig.load(args.config), args)
    except SessionStreamError as exc:
        report_error(exc, err_console)
        return 1
    configure_logging(config, to_file=args.tui)
    logger.debug("Effective config: %s", config)

    discovery = SessionDiscovery(config.agents_dir)
    try:
        if args.list:
            if config.agent != DEFAULT_AGENT:
                list_sessions(discovery, config.agent, console)
            else:
                list_agents(discovery, console)
            return 0

        path = resolve_session_path(args.path, discovery, config.agent)
        if args.tui:
            from session_stream.tui.app import SessionStreamApp

            SessionStreamApp(
                path,
                verbose=config.verbose,
                tail=config.tail,
                poll_interval=config.poll_interval,
                follow=not args.no_follow,
            ).run()
            return 0

        stream_to_console(path, config, follow=not args.no_follow, console=console)
    except SessionStreamError as exc:
        report_error(exc, err_console)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
