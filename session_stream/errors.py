"""Exception hierarchy for session discovery, streaming and configuration.

The line pipeline itself never raises; these cover the layers around it.
"""
from __future__ import annotations

from pathlib import Path


class SessionStreamError(Exception):
    """Base exception for all session-stream errors."""


class NoAgentsError(SessionStreamError):
    """No agent directories with sessions exist under the state directory."""
    def __init__(self, agents_dir: Path):
        self.agents_dir = agents_dir
        super().__init__(f"No agents found in {agents_dir}")


class NoSessionsError(SessionStreamError):
    """An agent has no session files."""
    def __init__(self, agent: str, pattern: Path, available: list[str]):
        self.agent = agent
        self.pattern = pattern
        self.available = available
        super().__init__(f"No session files found for agent '{agent}'")


class SessionFileNotFoundError(SessionStreamError):
    """An explicitly requested session file does not exist."""
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"File not found: {path}")


class ConfigError(SessionStreamError):
    """A configuration file or environment value is invalid."""
    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid configuration in {source}: {reason}")
