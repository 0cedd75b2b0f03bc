"""Entry points the chat host calls for every inbound and outbound message."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from ..core.config import Config
from ..core.errors import LogWriteError
from ..logging.log_writer import ChatEvent, LogWriter, WriteStatus

logger = logging.getLogger(__name__)

ACTION_PREFIX = "\x01ACTION "

_writer = LogWriter()


def on_message(
    config: Config,
    event: ChatEvent,
    on_status: Optional[Callable[[str], None]] = None,
    writer: LogWriter | None = None,
) -> WriteStatus:
    """Log ``event``; I/O failures are reported, never raised into the host."""
    try:
        return (writer or _writer).write(config, event)
    except LogWriteError as e:
        logger.warning("log write failed for %s %s: %s", event.server, event.channel, e.cause)
        if on_status:
            try:
                on_status(f"[{event.server}] logging failed: {e}")
            except Exception:
                logger.exception("on_status callback raised")
        return WriteStatus.FAILED


def on_send_message(
    config: Config,
    server: str,
    own_nick: str,
    channel: str,
    text: str,
    is_action: bool = False,
    on_status: Optional[Callable[[str], None]] = None,
) -> str:
    """Log our own outgoing message and hand the text back unchanged.

    Multi-line text goes out as one message per line, so it is logged that way.
    """
    for line in text.splitlines() or [""]:
        on_message(config, ChatEvent(server, channel, own_nick, line, is_action), on_status)
    return text


def parse_privmsg(server: str, raw: str) -> ChatEvent | None:
    """Build a ChatEvent from a raw IRC line, or None if it isn't a PRIVMSG.

    Handles optional IRCv3 tags and CTCP ACTION (``/me``) bodies.
    """
    line = raw.rstrip("\r\n")
    if line.startswith("@"):
        if " " not in line:
            return None
        line = line.split(" ", 1)[1]
    if not line.startswith(":") or " :" not in line:
        return None
    head, text = line[1:].split(" :", 1)
    parts = head.split()
    if len(parts) < 3 or parts[1].upper() != "PRIVMSG":
        return None
    prefix, target = parts[0], parts[2]
    nick = prefix.split("!")[0]
    if not nick or not target:
        return None
    if text.startswith(ACTION_PREFIX):
        return ChatEvent(server, target, nick, text[len(ACTION_PREFIX) :].rstrip("\x01"), True)
    if text.startswith("\x01"):
        # other CTCP requests (VERSION, PING, ...) aren't chat
        return None
    return ChatEvent(server, target, nick, text)
