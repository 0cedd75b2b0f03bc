import pytest

from chanlog.core.config import ServerConfig
from chanlog.logging.log_writer import LogWriter

SERVER = "irc.example.org"


@pytest.fixture
def config(tmp_path):
    return {
        SERVER: ServerConfig(
            plugins=frozenset({"logger"}),
            log_channels=frozenset({"#dev", "#ops"}),
            log_dir=tmp_path / "logs",
            utc_offset=0,
        ),
        "irc.quiet.net": ServerConfig(
            plugins=frozenset({"help"}),
            log_channels=frozenset({"#lobby"}),
            log_dir=tmp_path / "logs",
        ),
    }


@pytest.fixture
def writer() -> LogWriter:
    return LogWriter()
