"""Session discovery — agents and their JSONL session files on disk.

Layout under the state directory:

    agents/<agent>/sessions/<session-id>.jsonl
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from session_stream.errors import NoAgentsError, NoSessionsError

logger = logging.getLogger(__name__)

_SESSION_GLOB = "*.jsonl"
_MIB = 1024 * 1024


@dataclass(frozen=True)
class AgentInfo:
    name: str
    session_count: int


@dataclass(frozen=True)
class SessionFile:
    path: Path
    modified_at: datetime
    size: int

    @property
    def size_label(self) -> str:
        """``512K`` below one MiB, ``1.5M`` from there on."""
        if self.size >= _MIB:
            return f"{self.size / _MIB:.1f}M"
        return f"{self.size / 1024:.0f}K"


def agent_from_path(path: Path) -> str | None:
    """Agent name for a path shaped like ``.../agents/<name>/...``."""
    parts = path.parts
    for idx, part in enumerate(parts[:-1]):
        if part == "agents":
            return parts[idx + 1]
    return None


class SessionDiscovery:
    """Find agents and session files below ``agents_dir``."""

    def __init__(self, agents_dir: Path) -> None:
        self.agents_dir = agents_dir

    def sessions_dir(self, agent: str) -> Path:
        return self.agents_dir / agent / "sessions"

    def session_pattern(self, agent: str) -> Path:
        return self.sessions_dir(agent) / _SESSION_GLOB

    def list_agents(self) -> list[AgentInfo]:
        """Agents that have a sessions directory, sorted by name."""
        if not self.agents_dir.is_dir():
            logger.debug("Agents directory %s does not exist", self.agents_dir)
            return []
        agents: list[AgentInfo] = []
        for entry in sorted(self.agents_dir.iterdir(), key=lambda p: p.name):
            sessions_dir = entry / "sessions"
            if not entry.is_dir() or not sessions_dir.is_dir():
                continue
            count = sum(1 for _ in sessions_dir.glob(_SESSION_GLOB))
            agents.append(AgentInfo(name=entry.name, session_count=count))
        return agents

    def require_agents(self) -> list[AgentInfo]:
        agents = self.list_agents()
        if not agents:
            raise NoAgentsError(self.agents_dir)
        return agents

    def list_sessions(self, agent: str, *, limit: int | None = None) -> list[SessionFile]:
        """Session files for ``agent``, most recently modified first."""
        sessions_dir = self.sessions_dir(agent)
        if not sessions_dir.is_dir():
            return []
        sessions: list[SessionFile] = []
        for path in sessions_dir.glob(_SESSION_GLOB):
            try:
                stat = path.stat()
            except OSError:
                logger.debug("Skipping unreadable session file %s", path, exc_info=True)
                continue
            sessions.append(
                SessionFile(
                    path=path,
                    modified_at=datetime.fromtimestamp(stat.st_mtime),
                    size=stat.st_size,
                )
            )
        sessions.sort(key=lambda s: s.modified_at, reverse=True)
        if limit is not None and limit > 0:
            return sessions[:limit]
        return sessions

    def latest_session(self, agent: str) -> Path:
        """Most recently modified session for ``agent``.

        Raises:
            NoSessionsError: The agent has no session files.
        """
        sessions = self.list_sessions(agent)
        if not sessions:
            raise NoSessionsError(
                agent,
                self.session_pattern(agent),
                [info.name for info in self.list_agents()],
            )
        logger.debug("Latest session for %s: %s", agent, sessions[0].path)
        return sessions[0].path
