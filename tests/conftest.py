"""Shared pytest fixtures for mumble-sync tests."""

from unittest.mock import MagicMock

import pytest
from dotenv import load_dotenv

from mumble_sync.config import Config

load_dotenv()


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that require a live server",
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture
def mock_config():
    """Create a Config instance for testing."""
    return Config(url="https://voice.example.com/api", timeout=5.0)


@pytest.fixture
def mock_client(mock_config):
    """A MagicMock standing in for MumbleClient."""
    from mumble_sync.core.client import MumbleClient

    client = MagicMock(spec=MumbleClient)
    client.config = mock_config
    return client


@pytest.fixture
def transport():
    from mumble_sync.sync.transport import LocalTransport

    return LocalTransport()


@pytest.fixture
def sync(mock_client, transport):
    from mumble_sync.sync.engine import MumbleSync

    return MumbleSync(mock_client, transport)


@pytest.fixture
def recorder():
    """Collects (event, args) tuples from listeners it creates."""

    class Recorder:
        def __init__(self):
            self.calls: list[tuple] = []

        def listener(self, name):
            def _record(*args):
                self.calls.append((name, args))

            return _record

        def watch(self, emitter, *events):
            for ev in events:
                emitter.on(ev, self.listener(getattr(ev, "value", ev)))

        @property
        def names(self):
            return [name for name, _ in self.calls]

    return Recorder()
