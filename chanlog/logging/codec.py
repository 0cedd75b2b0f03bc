"""On-disk transcript line format.

Speech:  ``[HH:MM:SS] nick: text``
Action:  ``[HH:MM:SS] *nick text``

Text is stored verbatim; escaping belongs to whoever renders it.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from ..core.errors import LineDecodeError

logger = logging.getLogger(__name__)

_LINE_RE = re.compile(r"\[(?P<time>[^\]]+)\] (?P<body>.*)", re.DOTALL)


@dataclass(frozen=True)
class LogLine:
    timestamp: str
    actor: str
    is_action: bool
    text: str


@dataclass(frozen=True)
class DecodedLine:
    number: int
    raw: str
    line: Optional[LogLine] = None
    error: Optional[LineDecodeError] = None

    @property
    def ok(self) -> bool:
        return self.line is not None


def encode(line: LogLine) -> str:
    if line.is_action:
        return f"[{line.timestamp}] *{line.actor} {line.text}\n"
    return f"[{line.timestamp}] {line.actor}: {line.text}\n"


def decode(raw: str) -> LogLine:
    stripped = raw.rstrip("\r\n")
    m = _LINE_RE.fullmatch(stripped)
    if not m:
        raise LineDecodeError(stripped, "missing [time] prefix")
    body = m.group("body")
    if body.startswith("*"):
        actor, _sep, text = body[1:].partition(" ")
        is_action = True
    else:
        actor, sep, text = body.partition(": ")
        if not sep:
            raise LineDecodeError(stripped, "missing ': ' after nick")
        is_action = False
    if not actor:
        raise LineDecodeError(stripped, "empty nick")
    return LogLine(m.group("time"), actor, is_action, text)


def decode_lines(lines: Iterable[str]) -> Iterator[DecodedLine]:
    """Decode each line independently; a bad line never stops the rest."""
    for number, raw in enumerate(lines, start=1):
        raw = raw.rstrip("\r\n")
        try:
            yield DecodedLine(number, raw, line=decode(raw))
        except LineDecodeError as e:
            logger.debug("line %d: %s", number, e)
            yield DecodedLine(number, raw, error=e)
