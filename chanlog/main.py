from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .core import config as config_mod
from .core.config import ConfigView, file_source, load_config
from .core.errors import ConfigError
from .irc.hooks import on_message, parse_privmsg
from .logging import catalog
from .logging.log_writer import LogWriter, WriteStatus

logger = logging.getLogger(__name__)


def cmd_serve(args: argparse.Namespace) -> int:
    from .web.app import create_app

    app = create_app(file_source(args.config))
    app.run(host=args.host, port=args.port)
    return 0


def cmd_ls(args: argparse.Namespace) -> int:
    view = ConfigView(load_config(args.config))
    if args.server is None:
        for server in catalog.servers(view):
            print(server)
        return 0
    if args.channel is None:
        for channel in catalog.channels(view, args.server):
            print(channel)
        return 0
    for name in catalog.log_files(view, args.server, args.channel):
        print(name)
    return 0


def cmd_replay(args: argparse.Namespace) -> int:
    """Feed a capture of raw IRC lines into the logs."""
    cfg = load_config(args.config)
    writer = LogWriter()
    counts = {status: 0 for status in WriteStatus}
    with args.fixture.open("r", encoding="utf-8", errors="replace") as f:
        for raw in f:
            event = parse_privmsg(args.server, raw)
            if event is None:
                continue
            counts[on_message(cfg, event, writer=writer)] += 1
    print(", ".join(f"{status.value}={n}" for status, n in counts.items()))
    return 1 if counts[WriteStatus.FAILED] else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chanlog")
    parser.add_argument("--config", type=Path, default=None, help="config.json to use")
    parser.add_argument("--log-level", default="INFO")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="serve the /logs web viewer")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8080)
    serve.set_defaults(func=cmd_serve)

    ls = sub.add_parser("ls", help="list servers, channels or day-files")
    ls.add_argument("server", nargs="?")
    ls.add_argument("channel", nargs="?")
    ls.set_defaults(func=cmd_ls)

    replay = sub.add_parser("replay", help="log PRIVMSGs from a raw IRC capture")
    replay.add_argument("server")
    replay.add_argument("fixture", type=Path)
    replay.set_defaults(func=cmd_replay)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if args.config is None:
        config_mod.ensure_config()
        args.config = config_mod.CONFIG_PATH
    try:
        return args.func(args)
    except ConfigError as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
