"""Configuration loaded from a YAML file and environment variables.

All settings have sensible defaults. Sources, lowest priority first:
defaults, ``<state_dir>/session-stream.yaml`` (or an explicit ``--config``
file), ``SESSION_STREAM_*`` / ``OPENCLAW_STATE_DIR`` env vars, CLI flags.

Example YAML:
    agent: work
    tail: 50
    poll_interval: 0.5
    verbose: true
    log_level: INFO
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_AGENT = "main"
CONFIG_FILENAME = "session-stream.yaml"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def default_state_dir() -> Path:
    """``$OPENCLAW_STATE_DIR`` or ``~/.openclaw``."""
    state_dir = os.getenv("OPENCLAW_STATE_DIR")
    if state_dir:
        return Path(state_dir).expanduser()
    return Path.home() / ".openclaw"


def _parse_bool(source: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _TRUE_VALUES:
        return True
    if isinstance(value, str) and value.strip().lower() in _FALSE_VALUES:
        return False
    raise ConfigError(source, f"expected a boolean, got {value!r}")


def _parse_int(source: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(source, f"expected an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(source, f"expected an integer, got {value!r}") from None


def _parse_float(source: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ConfigError(source, f"expected a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(source, f"expected a number, got {value!r}") from None


@dataclass
class StreamConfig:
    """Session streaming configuration."""

    # Root holding agents/<agent>/sessions/*.jsonl
    state_dir: Path = field(default_factory=default_state_dir)
    agent: str = DEFAULT_AGENT
    # Lines replayed from the end of the file before following
    tail: int = 20
    poll_interval: float = 0.3
    # Render request events
    verbose: bool = False
    log_level: str = "WARNING"

    @property
    def agents_dir(self) -> Path:
        return self.state_dir / "agents"

    @property
    def log_dir(self) -> Path:
        return self.state_dir / "logs"

    @classmethod
    def load(cls, config_path: Path | None = None) -> StreamConfig:
        """Build a config from defaults, the YAML file and the environment."""
        config = cls()
        path = config_path or config.state_dir / CONFIG_FILENAME
        if config_path is not None and not path.is_file():
            raise ConfigError(str(path), "file does not exist")
        if path.is_file():
            config.apply_yaml(path)
        config.apply_env()
        config.validate()
        return config

    def apply_yaml(self, path: Path) -> None:
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(str(path), str(exc)) from exc
        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigError(str(path), "top level must be a mapping")

        known = {f.name for f in fields(self)}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown config key %r in %s", key, path)
                continue
            self._set(f"{path}:{key}", key, value)
        logger.debug("Loaded config from %s", path)

    def apply_env(self) -> None:
        env_map = {
            "OPENCLAW_STATE_DIR": "state_dir",
            "SESSION_STREAM_AGENT": "agent",
            "SESSION_STREAM_TAIL": "tail",
            "SESSION_STREAM_POLL_INTERVAL": "poll_interval",
            "SESSION_STREAM_VERBOSE": "verbose",
            "SESSION_STREAM_LOG_LEVEL": "log_level",
        }
        overrides = {k: v for k, v in os.environ.items() if k in env_map and v}
        if overrides:
            logger.debug(
                "StreamConfig env overrides: %s",
                ", ".join(f"{k}={v}" for k, v in sorted(overrides.items())),
            )
        for env_name, value in overrides.items():
            self._set(env_name, env_map[env_name], value)

    def _set(self, source: str, key: str, value: Any) -> None:
        if key == "state_dir":
            if not isinstance(value, str) or not value:
                raise ConfigError(source, f"expected a path, got {value!r}")
            self.state_dir = Path(value).expanduser()
        elif key == "agent":
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(source, f"expected an agent name, got {value!r}")
            self.agent = value.strip()
        elif key == "tail":
            self.tail = _parse_int(source, value)
        elif key == "poll_interval":
            self.poll_interval = _parse_float(source, value)
        elif key == "verbose":
            self.verbose = _parse_bool(source, value)
        elif key == "log_level":
            self.log_level = str(value).upper()

    def validate(self) -> None:
        """Reject values the streamer cannot work with."""
        if self.tail < 0:
            raise ConfigError("tail", f"must not be negative, got {self.tail}")
        if not self.poll_interval > 0:
            raise ConfigError(
                "poll_interval", f"must be positive, got {self.poll_interval}"
            )
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError("log_level", f"unknown level {self.log_level!r}")
