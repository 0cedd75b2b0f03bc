from __future__ import annotations


class ChanlogError(Exception):
    pass


class ConfigError(ChanlogError):
    pass


class LogWriteError(ChanlogError):
    """Creating a log directory or appending a line failed."""

    def __init__(self, path, cause: OSError) -> None:
        super().__init__(f"cannot write {path}: {cause}")
        self.path = path
        self.cause = cause


class LineDecodeError(ChanlogError, ValueError):
    def __init__(self, raw: str, reason: str = "unrecognised line") -> None:
        super().__init__(f"{reason}: {raw!r}")
        self.raw = raw
        self.reason = reason
