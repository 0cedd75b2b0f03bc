from __future__ import annotations

import logging
import re

from ..core.config import ConfigView
from .paths import resolve, sanitize_channel

logger = logging.getLogger(__name__)

DAY_FILE_RE = re.compile(r"\d{4}-\d{2}-\d{2}\.txt")


def servers(view: ConfigView) -> list[str]:
    return sorted(view.logging_enabled_servers())


def channels(view: ConfigView, server: str) -> list[str]:
    return sorted(view.logged_channels(server))


def log_files(view: ConfigView, server: str, channel: str) -> list[str]:
    """Day-file names for a channel, oldest first. No directory means no logs yet."""
    directory = resolve(view, server, channel)
    if directory is None:
        return []
    try:
        names = [
            p.name
            for p in directory.iterdir()
            if DAY_FILE_RE.fullmatch(p.name) and p.is_file()
        ]
    except OSError as e:
        logger.debug("cannot list %s: %s", directory, e)
        return []
    return sorted(names)


def find_channel(view: ConfigView, server: str, segment: str) -> str | None:
    """Map a URL segment to a configured channel id.

    Accepts the channel id itself ("#dev") or its directory name ("dev").
    """
    logged = channels(view, server)
    if segment in logged:
        return segment
    for channel in logged:
        if sanitize_channel(channel) == segment:
            return channel
    return None
