from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional
from urllib.parse import unquote

from ..core.config import ConfigSource, ConfigView
from ..logging import catalog
from ..logging.paths import resolve
from . import render

logger = logging.getLogger(__name__)

NOT_FOUND_BODY = "These are not the logs you're looking for."
BAD_PATH_BODY = "Bad log path."
HTML_TYPE = "text/html; charset=UTF-8"
TEXT_TYPE = "text/plain; charset=UTF-8"

_SEGMENT = r"(?P<{}>[^/]+)"
_ROUTES = [
    ("index", re.compile(r"/logs/?")),
    ("server", re.compile("/logs/" + _SEGMENT.format("server") + "/?")),
    (
        "channel",
        re.compile("/logs/" + _SEGMENT.format("server") + "/" + _SEGMENT.format("channel") + "/?"),
    ),
    (
        "log",
        re.compile(
            "/logs/"
            + _SEGMENT.format("server")
            + "/"
            + _SEGMENT.format("channel")
            + "/"
            + _SEGMENT.format("log")
        ),
    ),
]


@dataclass
class HttpRequest:
    """An inbound request; ``path`` is in its percent-encoded wire form."""

    path: str
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.path, str) or not self.path.startswith("/"):
            raise ValueError("HttpRequest.path must be an absolute path")
        self.method = self.method.upper()
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    def header(self, name: str, default: str = "") -> str:
        return self.headers.get(name.lower(), default)


@dataclass
class HttpResponse:
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes | str = b""


def not_found() -> HttpResponse:
    return HttpResponse(404, {}, NOT_FOUND_BODY)


def bad_request() -> HttpResponse:
    return HttpResponse(400, {}, BAD_PATH_BODY)


def safe_segment(segment: str) -> bool:
    """Reject anything that could step outside the log root."""
    if segment in (".", ".."):
        return False
    return not any(c in segment for c in ("/", "\\", "\x00"))


def html(body: str) -> HttpResponse:
    return HttpResponse(200, {"Content-Type": HTML_TYPE}, body)


class LogRouter:
    """Maps /logs requests onto the catalog and renderers.

    The configuration is fetched from ``config_source`` once per request.
    """

    def __init__(self, config_source: ConfigSource) -> None:
        self.config_source = config_source
        self._handlers: Dict[str, Callable[..., Optional[HttpResponse]]] = {
            "index": self._index,
            "server": self._server,
            "channel": self._channel,
            "log": self._log,
        }

    def match(self, path: str) -> tuple[str, Mapping[str, str]] | None:
        """Route name and percent-decoded segments for a request path."""
        for name, pattern in _ROUTES:
            m = pattern.fullmatch(path)
            if m:
                return name, {k: unquote(v) for k, v in m.groupdict().items()}
        return None

    def handle(self, request: HttpRequest) -> HttpResponse:
        if request.method not in ("GET", "HEAD"):
            return not_found()
        matched = self.match(request.path)
        if matched is None:
            logger.debug("no route for %s", request.path)
            return not_found()
        name, params = matched
        if not all(safe_segment(v) for v in params.values()):
            logger.debug("rejected unsafe path %r", request.path)
            return bad_request()
        view = ConfigView(self.config_source())
        response = self._handlers[name](view, request, **params)
        return response if response is not None else not_found()

    def _index(self, view: ConfigView, request: HttpRequest) -> HttpResponse:
        return html(render.render_global_index(view))

    def _server(self, view: ConfigView, request: HttpRequest, server: str) -> HttpResponse | None:
        if server not in catalog.servers(view):
            return None
        return html(render.render_server_index(view, server))

    def _channel(
        self, view: ConfigView, request: HttpRequest, server: str, channel: str
    ) -> HttpResponse | None:
        if server not in catalog.servers(view):
            return None
        channel_id = catalog.find_channel(view, server, channel)
        if channel_id is None:
            return None
        return html(render.render_channel_index(view, server, channel_id))

    def _log(
        self, view: ConfigView, request: HttpRequest, server: str, channel: str, log: str
    ) -> HttpResponse | None:
        if server not in catalog.servers(view):
            return None
        channel_id = catalog.find_channel(view, server, channel)
        if channel_id is None or log not in catalog.log_files(view, server, channel_id):
            return None
        path = resolve(view, server, channel_id) / log
        try:
            if request.header("accept").startswith("text/html"):
                return html(render.render_transcript(server, channel_id, log, path))
            return HttpResponse(200, {"Content-Type": TEXT_TYPE}, path.read_bytes())
        except FileNotFoundError:
            # removed between listing and reading
            return None
