"""Tests for mumble_sync.config: env-var config loading and validation.

Hierarchical YAML loading is covered by test_config_loader.py and the
Pydantic schema by test_config_schema.py.
"""

import logging

import pytest

from mumble_sync.config import Config, load_config, validate_config

_ENV_VARS = (
    "MUMBLE_URL",
    "MUMBLE_TIMEOUT",
    "MUMBLE_SOCKET_PATH",
    "MUMBLE_INSECURE",
    "MUMBLE_DEBUG",
    "MUMBLE_MAX_PARALLEL_REQUESTS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestValidateConfig:
    def test_valid_config(self):
        validate_config(Config(url="https://voice.example.com/api"))

    def test_trailing_slash_and_whitespace_stripped(self):
        config = Config(url="  http://localhost:8080/  ")
        validate_config(config)
        assert config.url == "http://localhost:8080"

    def test_invalid_url_no_scheme(self):
        with pytest.raises(
            ValueError, match="must start with http:// or https://"
        ):
            validate_config(Config(url="example.com"))

    def test_invalid_url_no_hostname(self):
        with pytest.raises(ValueError, match="must include a hostname"):
            validate_config(Config(url="http://"))

    def test_non_positive_timeout(self):
        with pytest.raises(ValueError, match="timeout"):
            validate_config(Config(url="http://localhost", timeout=0))

    def test_socket_path_needs_leading_slash(self):
        with pytest.raises(ValueError, match="socket path"):
            validate_config(
                Config(url="http://localhost", socket_path="ws/socket.io")
            )

    def test_max_parallel_bounds(self):
        with pytest.raises(ValueError, match="max_parallel_requests"):
            validate_config(
                Config(url="http://localhost", max_parallel_requests=0)
            )

    def test_insecure_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            validate_config(Config(url="https://localhost", insecure=True))
        assert "SSL verification disabled" in caplog.text


class TestLoadConfig:
    def test_missing_url(self):
        with pytest.raises(ValueError, match="Server URL not found"):
            load_config()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("MUMBLE_URL", "http://env.example.com")
        monkeypatch.setenv("MUMBLE_TIMEOUT", "2.5")
        monkeypatch.setenv("MUMBLE_INSECURE", "yes")
        monkeypatch.setenv("MUMBLE_MAX_PARALLEL_REQUESTS", "3")

        config = load_config()

        assert config.url == "http://env.example.com"
        assert config.timeout == 2.5
        assert config.insecure is True
        assert config.max_parallel_requests == 3
        assert config.socket_path == "/ws/socket.io"

    def test_cli_beats_env_beats_yaml(self, monkeypatch):
        monkeypatch.setenv("MUMBLE_URL", "http://env.example.com")
        fallbacks = {"url": "http://yaml.example.com", "timeout": 7}

        assert load_config(yaml_fallbacks=fallbacks).url == "http://env.example.com"
        assert (
            load_config(url="http://cli.example.com", yaml_fallbacks=fallbacks).url
            == "http://cli.example.com"
        )
        assert load_config(yaml_fallbacks=fallbacks).timeout == 7.0
        assert load_config(timeout=1, yaml_fallbacks=fallbacks).timeout == 1.0

    def test_yaml_fallbacks_only(self):
        config = load_config(
            yaml_fallbacks={
                "url": "http://yaml.example.com",
                "socket_path": "/events",
                "debug": True,
            }
        )
        assert config.socket_path == "/events"
        assert config.debug is True

    def test_env_bool_false_overrides_yaml(self, monkeypatch):
        monkeypatch.setenv("MUMBLE_DEBUG", "false")
        config = load_config(
            url="http://localhost", yaml_fallbacks={"debug": True}
        )
        assert config.debug is False

    def test_invalid_timeout_env(self, monkeypatch):
        monkeypatch.setenv("MUMBLE_TIMEOUT", "soon")
        with pytest.raises(ValueError, match="Invalid MUMBLE_TIMEOUT"):
            load_config(url="http://localhost")

    def test_invalid_parallel_env(self, monkeypatch):
        monkeypatch.setenv("MUMBLE_MAX_PARALLEL_REQUESTS", "many")
        with pytest.raises(
            ValueError, match="Invalid MUMBLE_MAX_PARALLEL_REQUESTS"
        ):
            load_config(url="http://localhost")
