import pytest

from chanlog.core.config import ServerConfig
from chanlog.irc.hooks import on_message, on_send_message, parse_privmsg
from chanlog.logging.log_writer import ChatEvent, WriteStatus

SERVER = "irc.example.org"


def _lines(config):
    d = config[SERVER].log_dir / SERVER / "dev"
    return [ln for p in sorted(d.iterdir()) for ln in p.read_text().splitlines()]


def test_on_message_writes_and_skips(config, writer):
    assert on_message(config, ChatEvent(SERVER, "#dev", "alice", "hi"), writer=writer) is (
        WriteStatus.WRITTEN
    )
    assert on_message(config, ChatEvent(SERVER, "#nope", "alice", "hi"), writer=writer) is (
        WriteStatus.SKIPPED
    )
    assert _lines(config)[0].endswith("] alice: hi")


def test_on_message_reports_io_failure(config, writer, tmp_path):
    (tmp_path / "logs").mkdir()
    (tmp_path / "logs" / SERVER).write_text("in the way")
    statuses = []
    result = on_message(
        config, ChatEvent(SERVER, "#dev", "alice", "hi"), on_status=statuses.append, writer=writer
    )
    assert result is WriteStatus.FAILED
    assert len(statuses) == 1 and "logging failed" in statuses[0]
    # unrelated writes still go through
    other = dict(config)
    other[SERVER] = ServerConfig(
        plugins=config[SERVER].plugins,
        log_channels=config[SERVER].log_channels,
        log_dir=tmp_path / "elsewhere",
        utc_offset=0,
    )
    assert on_message(other, ChatEvent(SERVER, "#dev", "a", "b"), writer=writer) is (
        WriteStatus.WRITTEN
    )


def test_on_status_errors_are_contained(config, writer, tmp_path):
    (tmp_path / "logs").mkdir()
    (tmp_path / "logs" / SERVER).write_text("in the way")

    def boom(_msg):
        raise RuntimeError("ui gone")

    ev = ChatEvent(SERVER, "#dev", "alice", "hi")
    assert on_message(config, ev, on_status=boom, writer=writer) is WriteStatus.FAILED


def test_on_send_message_returns_text(config):
    out = on_send_message(config, SERVER, "chanbot", "#dev", "pong", is_action=True)
    assert out == "pong"
    assert _lines(config)[-1].endswith("] *chanbot pong")


@pytest.mark.parametrize(
    "raw, expected",
    [
        (
            ":alice!a@host PRIVMSG #dev :hello there\r\n",
            ChatEvent(SERVER, "#dev", "alice", "hello there"),
        ),
        (
            "@time=2023-10-11T12:34:56.789Z :bob!b@h PRIVMSG #dev :\x01ACTION waves\x01",
            ChatEvent(SERVER, "#dev", "bob", "waves", is_action=True),
        ),
        (":carol PRIVMSG #dev :a :colon", ChatEvent(SERVER, "#dev", "carol", "a :colon")),
    ],
)
def test_parse_privmsg(raw, expected):
    assert parse_privmsg(SERVER, raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "PING :server",
        ":alice!a@h JOIN :#dev",
        ":alice!a@h NOTICE #dev :hi",
        ":alice!a@h PRIVMSG #dev :\x01VERSION\x01",
        "@tagsonly",
    ],
)
def test_parse_privmsg_ignores_other_lines(raw):
    assert parse_privmsg(SERVER, raw) is None


def test_on_send_message_logs_each_line(config):
    out = on_send_message(config, SERVER, "chanbot", "#dev", "one\n[09:00:00] admin: two")
    assert out == "one\n[09:00:00] admin: two"
    lines = _lines(config)
    assert len(lines) == 2
    assert lines[0].endswith("] chanbot: one")
    assert lines[1].endswith("] chanbot: [09:00:00] admin: two")
