from chanlog.core.config import ConfigView, ServerConfig
from chanlog.logging import catalog

SERVER = "irc.example.org"


def test_servers_and_channels_sorted(config, tmp_path):
    config = dict(config)
    config["a.example.net"] = ServerConfig(
        frozenset({"logger"}), frozenset({"#zeta", "#alpha"}), tmp_path
    )
    view = ConfigView(config)
    assert catalog.servers(view) == ["a.example.net", SERVER]
    assert catalog.channels(view, "a.example.net") == ["#alpha", "#zeta"]
    assert catalog.channels(view, "nowhere") == []


def test_log_files_missing_directory_is_empty(config):
    view = ConfigView(config)
    assert catalog.log_files(view, SERVER, "#dev") == []
    assert catalog.log_files(view, SERVER, "#unlogged") == []


def test_log_files_filters_and_sorts(config, tmp_path):
    d = tmp_path / "logs" / SERVER / "dev"
    d.mkdir(parents=True)
    for name in ("2024-05-02.txt", "2024-04-30.txt", "notes.txt", "2024-05-01.log"):
        (d / name).write_text("")
    (d / "2024-01-01.txt").mkdir()
    assert catalog.log_files(ConfigView(config), SERVER, "#dev") == [
        "2024-04-30.txt",
        "2024-05-02.txt",
    ]


def test_find_channel_by_id_or_directory_name(config):
    view = ConfigView(config)
    assert catalog.find_channel(view, SERVER, "#dev") == "#dev"
    assert catalog.find_channel(view, SERVER, "dev") == "#dev"
    assert catalog.find_channel(view, SERVER, "#random") is None
    assert catalog.find_channel(view, "nowhere", "dev") is None
