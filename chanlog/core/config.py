from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Mapping

from .errors import ConfigError

logger = logging.getLogger(__name__)

# Paths are module-level so tests can monkeypatch them easily.
DATA_DIR: Path = Path(os.path.expanduser("~")) / ".chanlog_local"
CONFIG_PATH: Path = DATA_DIR / "config.json"

# Capability tag a server must carry in its plugin list to be logged.
LOGGER_PLUGIN = "logger"
# Hours east of UTC used when a server sets no offset of its own.
DEFAULT_UTC_OFFSET = -6


@dataclass(frozen=True)
class ServerConfig:
    plugins: frozenset = field(default_factory=frozenset)
    log_channels: frozenset = field(default_factory=frozenset)
    log_dir: Path = field(default_factory=lambda: DATA_DIR / "logs")
    utc_offset: int = DEFAULT_UTC_OFFSET


# server id -> ServerConfig
Config = Mapping[str, ServerConfig]
ConfigSource = Callable[[], Config]


class ConfigView:
    """Read-only projections over one configuration snapshot.

    Unknown servers yield empty results rather than errors.
    """

    def __init__(self, config: Config) -> None:
        self.config = config

    def _server(self, server: str) -> ServerConfig | None:
        return self.config.get(server)

    def logging_enabled_servers(self) -> set[str]:
        return {
            name
            for name, srv in self.config.items()
            if isinstance(name, str) and LOGGER_PLUGIN in srv.plugins
        }

    def logged_channels(self, server: str) -> set[str]:
        srv = self._server(server)
        return set(srv.log_channels) if srv else set()

    def log_root(self, server: str) -> Path | None:
        srv = self._server(server)
        return srv.log_dir if srv else None

    def utc_offset(self, server: str) -> int:
        srv = self._server(server)
        return srv.utc_offset if srv else DEFAULT_UTC_OFFSET


def _default_config() -> Dict[str, Any]:
    return {
        "servers": {
            # "irc.libera.chat": {"plugins": ["logger"], "log": ["#chanlog"], "utc_offset": 0}
        },
        "log_dir": str(DATA_DIR / "logs"),
    }


def parse_config(raw: Mapping[str, Any]) -> Dict[str, ServerConfig]:
    """Turn the JSON document into a ``Config`` mapping.

    Per-server ``log_dir`` falls back to the top-level ``log_dir``.
    """
    if not isinstance(raw, Mapping):
        raise ConfigError("config root must be an object")
    servers = raw.get("servers", {})
    if not isinstance(servers, Mapping):
        raise ConfigError("'servers' must be an object keyed by server id")
    default_dir = Path(raw.get("log_dir") or DATA_DIR / "logs").expanduser()
    out: Dict[str, ServerConfig] = {}
    for name, srv in servers.items():
        if not isinstance(srv, Mapping):
            raise ConfigError(f"server {name!r}: expected an object")
        plugins = srv.get("plugins", [])
        channels = srv.get("log", [])
        if not isinstance(plugins, list) or not all(isinstance(p, str) for p in plugins):
            raise ConfigError(f"server {name!r}: 'plugins' must be a list of strings")
        if not isinstance(channels, list) or not all(isinstance(c, str) for c in channels):
            raise ConfigError(f"server {name!r}: 'log' must be a list of channel names")
        offset = srv.get("utc_offset", DEFAULT_UTC_OFFSET)
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise ConfigError(f"server {name!r}: 'utc_offset' must be an integer")
        log_dir = srv.get("log_dir")
        out[name] = ServerConfig(
            plugins=frozenset(plugins),
            log_channels=frozenset(channels),
            log_dir=Path(log_dir).expanduser() if log_dir else default_dir,
            utc_offset=offset,
        )
    return out


def load_config(path: Path | None = None) -> Dict[str, ServerConfig]:
    path = path or CONFIG_PATH
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path} is not valid JSON: {e}") from e
    return parse_config(raw)


def ensure_config() -> Dict[str, Any]:
    """Ensure the user config exists and return it as a dict.

    Tests may monkeypatch DATA_DIR and CONFIG_PATH before calling this.
    """
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    if not CONFIG_PATH.exists():
        cfg = _default_config()
        _persist_cfg(cfg)
        return cfg
    try:
        with CONFIG_PATH.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError):
        # If corrupted, replace with defaults
        logger.warning("config at %s unreadable, rewriting defaults", CONFIG_PATH)
        cfg = _default_config()
        _persist_cfg(cfg)
        return cfg


def _persist_cfg(cfg: Dict[str, Any]) -> None:
    """Write the config dict to CONFIG_PATH (pretty JSON)."""
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    with CONFIG_PATH.open("w", encoding="utf-8") as f:
        json.dump(cfg, f, ensure_ascii=False, indent=2)


def file_source(path: Path | None = None) -> ConfigSource:
    """A config source that re-reads ``path`` on every call."""

    def _source() -> Config:
        return load_config(path)

    return _source
