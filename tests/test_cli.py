"""Tests for the command-line entry point."""

import argparse
from unittest.mock import patch

import pytest

from mumble_sync.cli import (
    format_snapshot,
    load_yaml_config,
    resolve_config,
    resolve_logging,
    run,
    snapshot,
)
from mumble_sync.config import Config
from mumble_sync.config_schema import LoggingConfig
from mumble_sync.sync.models import Channel, User
from payloads import channel_state, user_state


def test_format_snapshot(sync, transport):
    transport.deliver(
        "update",
        {
            "channels": [
                channel_state(0),
                channel_state(2, name="Lobby", position=1),
                channel_state(1, name="AFK", position=0),
                channel_state(3, name="Sub", parent=2),
            ],
            "users": [
                user_state(userid=1, name="bob", channel=2, selfMute=True),
                user_state(userid=2, name="amy", channel=3, recording=True),
            ],
        },
    )

    assert format_snapshot(sync).splitlines() == [
        "# Root [0]",
        "  # AFK [1]",
        "  # Lobby [2]",
        "    - bob (M)",
        "    # Sub [3]",
        "      - amy (R)",
        "2 users, 4 channels",
    ]


def test_format_snapshot_empty(sync):
    assert format_snapshot(sync) == "0 users, 0 channels"


async def test_snapshot_uses_refresh(monkeypatch):
    monkeypatch.setattr("mumble_sync.core.async_utils._semaphore", None)
    config = Config(url="http://localhost:8080")
    with patch("mumble_sync.core.client.MumbleClient.get_users") as users, patch(
        "mumble_sync.core.client.MumbleClient.get_channels"
    ) as channels:
        users.return_value = [User.model_validate(user_state(name="zed"))]
        channels.return_value = [Channel.model_validate(channel_state(0))]

        output = await snapshot(config)

    assert "- zed" in output


def test_resolve_config_cli_override(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("MUMBLE_SYNC_CONFIG", raising=False)
    monkeypatch.setenv("MUMBLE_URL", "http://env.example.com")

    config = resolve_config({"url": "http://cli.example.com", "timeout": 3})

    assert config.url == "http://cli.example.com"
    assert config.timeout == 3.0


def test_run_reports_configuration_error(monkeypatch, tmp_path, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("MUMBLE_URL", raising=False)
    monkeypatch.delenv("MUMBLE_SYNC_CONFIG", raising=False)
    monkeypatch.setattr("sys.argv", ["mumble-sync", "snapshot"])

    with patch("mumble_sync.cli.setup_logging"), pytest.raises(SystemExit) as exc:
        run()

    assert exc.value.code == 2
    assert "Configuration error" in capsys.readouterr().err


def _args(**overrides):
    values = {"debug": False, "log_file": None, "log_format": None}
    values.update(overrides)
    return argparse.Namespace(**values)


def test_resolve_logging_uses_yaml_section():
    section = LoggingConfig(level="WARNING", file="/tmp/sync.log", format="json")

    assert resolve_logging(_args(), section) == {
        "debug": False,
        "log_file": "/tmp/sync.log",
        "log_format": "json",
        "level": "WARNING",
    }


def test_resolve_logging_cli_flags_win():
    section = LoggingConfig(file="/tmp/yaml.log", format="json")

    result = resolve_logging(
        _args(debug=True, log_file="cli.log", log_format="text"), section
    )

    assert result["log_file"] == "cli.log"
    assert result["log_format"] == "text"
    assert result["debug"] is True


def test_load_yaml_config_defaults_without_files(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("MUMBLE_SYNC_CONFIG", raising=False)

    assert load_yaml_config().logging.format == "text"


def test_run_applies_yaml_logging_section(monkeypatch, tmp_path):
    config_file = tmp_path / "config.yml"
    config_file.write_text(
        "mumble:\n  url: http://yaml.example.com\n"
        "logging:\n  level: WARNING\n  format: json\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("MUMBLE_SYNC_CONFIG", str(config_file))
    monkeypatch.delenv("MUMBLE_URL", raising=False)
    monkeypatch.setattr("sys.argv", ["mumble-sync", "snapshot"])

    with patch("mumble_sync.cli.setup_logging") as setup, patch(
        "mumble_sync.cli.snapshot", return_value="ok"
    ) as snap, patch("mumble_sync.cli.asyncio.run", return_value="ok"):
        run()

    setup.assert_called_once_with(
        debug=False, log_file=None, log_format="json", level="WARNING"
    )
    (config,), _ = snap.call_args
    assert config.url == "http://yaml.example.com"
