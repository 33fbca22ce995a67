import pytest

from blocklist_updater import cli
from blocklist_updater.cli import config_from_args, parse_arguments


def test_arguments_map_to_config():
    args = parse_arguments([
        "-o", "out", "-t", "10", "--fetch-attempts", "3", "--fetch-delay", "0.5",
        "--resolve-attempts", "2", "--resolve-delay", "0", "--skip-verify", "-q",
    ])
    config = config_from_args(args)
    assert config.output_dir == "out"
    assert config.max_concurrent_checks == 10
    assert config.fetch_attempts == 3
    assert config.fetch_delay == 0.5
    assert config.resolve_attempts == 2
    assert config.resolve_delay == 0.0
    assert config.skip_verify
    assert config.quiet


def test_defaults_use_builtin_tables():
    config = config_from_args(parse_arguments([]))
    assert config.sources_file is None
    assert config.whitelist_file is None
    assert config.max_concurrent_checks == 50


def test_main_returns_zero_after_run(monkeypatch, tmp_path):
    calls = []

    class FakeUpdater:
        def __init__(self, config):
            calls.append(config)
            self.failed_sources = []

        def run(self):
            return {}

    monkeypatch.setattr(cli, "BlocklistUpdater", FakeUpdater)
    monkeypatch.setattr(cli, "configure_logging", lambda *args: None)

    assert cli.main(["-q", "-o", str(tmp_path)]) == 0
    assert calls[0].output_dir == str(tmp_path)


def test_main_returns_one_on_unexpected_error(monkeypatch):
    class BrokenUpdater:
        def __init__(self, config):
            raise RuntimeError("boom")

    monkeypatch.setattr(cli, "BlocklistUpdater", BrokenUpdater)
    monkeypatch.setattr(cli, "configure_logging", lambda *args: None)

    assert cli.main(["-q"]) == 1


def test_version(capsys):
    with pytest.raises(SystemExit):
        parse_arguments(["--version"])
    assert "Blocklist Updater v" in capsys.readouterr().out
