from __future__ import annotations

from pathlib import Path

from ..core.config import ConfigView

CHANNEL_MARKERS = "#"


def sanitize_channel(channel: str) -> str:
    # "#dev" and "##dev" both map to "dev"; collisions are not detected.
    return channel.lstrip(CHANNEL_MARKERS)


def resolve(view: ConfigView, server: str, channel: str) -> Path | None:
    """Directory holding ``channel``'s day-files, or None if it isn't logged."""
    if channel not in view.logged_channels(server):
        return None
    root = view.log_root(server)
    leaf = sanitize_channel(channel)
    if root is None or not leaf:
        return None
    return Path(root) / server / leaf
