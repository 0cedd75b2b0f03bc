from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

from ..core.config import Config, ConfigView
from ..core.errors import LogWriteError
from .codec import LogLine, encode
from .paths import resolve

logger = logging.getLogger(__name__)


class WriteStatus(enum.Enum):
    WRITTEN = "written"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ChatEvent:
    server: str
    channel: str
    actor: str
    text: str
    is_action: bool = False

    def __post_init__(self) -> None:
        for name in ("server", "channel", "actor"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ValueError(f"ChatEvent.{name} must be a non-empty string")
        if not isinstance(self.text, str):
            raise ValueError("ChatEvent.text must be a string")
        # one event is exactly one record in the day-file
        for name in ("server", "channel", "actor", "text"):
            if any(c in getattr(self, name) for c in "\r\n"):
                raise ValueError(f"ChatEvent.{name} must not contain line breaks")


def local_now(offset_hours: int, now: datetime | None = None) -> tuple[str, str]:
    """(YYYY-MM-DD, HH:MM:SS) for ``offset_hours`` east of UTC."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(timezone(timedelta(hours=offset_hours)))
    return local.strftime("%Y-%m-%d"), local.strftime("%H:%M:%S")


class LogWriter:
    """Appends chat events to per-channel day-files.

    Writes to the same channel directory are serialized with a lock; other
    channels proceed in parallel. Files are opened and closed per line.
    """

    def __init__(self) -> None:
        self._locks: dict[Path, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, directory: Path) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(directory)
            if lock is None:
                lock = self._locks[directory] = threading.Lock()
            return lock

    def write(self, config: Config, event: ChatEvent, now: datetime | None = None) -> WriteStatus:
        view = ConfigView(config)
        if event.server not in view.logging_enabled_servers():
            logger.debug("logging disabled on %s", event.server)
            return WriteStatus.SKIPPED
        directory = resolve(view, event.server, event.channel)
        if directory is None:
            logger.debug("not logging %s on %s", event.channel, event.server)
            return WriteStatus.SKIPPED
        date, stamp = local_now(view.utc_offset(event.server), now)
        path = directory / f"{date}.txt"
        data = encode(LogLine(stamp, event.actor, event.is_action, event.text)).encode("utf-8")
        with self._lock_for(directory):
            try:
                directory.mkdir(parents=True, exist_ok=True)
                # one write() on an O_APPEND descriptor keeps the line whole
                with path.open("ab", buffering=0) as f:
                    f.write(data)
            except OSError as e:
                raise LogWriteError(path, e) from e
        return WriteStatus.WRITTEN
