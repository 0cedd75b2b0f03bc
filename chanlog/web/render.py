from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

from ..core.config import ConfigView
from ..logging import catalog
from ..logging.codec import LogLine, decode_lines

URL_PREFIX = "/logs"
TEMPLATE_DIR = Path(__file__).parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)


def link(*parts: str) -> str:
    return "/".join([URL_PREFIX, *(quote(p, safe="") for p in parts)])


def render_line(line: LogLine) -> Markup:
    time = escape(line.timestamp)
    nick = escape(line.actor)
    message = escape(line.text)
    if line.is_action:
        return Markup(
            f'[<span class="time">{time}</span>] <span class="action">'
            f'<span class="nick">{nick}</span> <span class="message">{message}</span></span>'
        )
    return Markup(
        f'[<span class="time">{time}</span>] <span class="nick">{nick}</span>: '
        f'<span class="message">{message}</span>'
    )


def _render_unparsed(raw: str) -> Markup:
    return Markup(f'<span class="unparsed">{escape(raw)}</span>')


def render_transcript(server: str, channel: str, filename: str, path: Path) -> str:
    """HTML page for one day-file; undecodable lines are shown as-is, marked."""
    date = filename[: -len(".txt")] if filename.endswith(".txt") else filename
    with path.open("r", encoding="utf-8", errors="replace", newline="\n") as f:
        rendered = [
            render_line(d.line) if d.ok else _render_unparsed(d.raw)
            for d in decode_lines(f)
        ]
    return _env.get_template("transcript.html").render(
        title=f"{channel} {date}",
        server=server,
        channel=channel,
        date=date,
        body=Markup("\n").join(rendered),
    )


def _channel_links(view: ConfigView, server: str) -> list[tuple[str, str]]:
    return [(ch, link(server, ch)) for ch in catalog.channels(view, server)]


def render_channel_index(view: ConfigView, server: str, channel: str) -> str:
    logs = [(name, link(server, channel, name)) for name in catalog.log_files(view, server, channel)]
    return _env.get_template("channel.html").render(
        title=f"{channel} on {server}", server=server, channel=channel, logs=logs
    )


def render_server_index(view: ConfigView, server: str) -> str:
    return _env.get_template("server.html").render(
        title=server, server=server, channels=_channel_links(view, server)
    )


def render_global_index(view: ConfigView) -> str:
    servers = [(srv, _channel_links(view, srv)) for srv in catalog.servers(view)]
    return _env.get_template("index.html").render(title="All channel logs", servers=servers)
