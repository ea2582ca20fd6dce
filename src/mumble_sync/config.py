"""Connection settings for the control plane and event transport.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    MUMBLE_URL: Base URL of the server's REST API (required)
    MUMBLE_TIMEOUT: Per-request timeout in seconds (optional, default: 10)
    MUMBLE_SOCKET_PATH: Event transport path (optional, default: /ws/socket.io)
    MUMBLE_INSECURE: Skip SSL verification (optional, default: false)
    MUMBLE_DEBUG: Enable debug logging (optional, default: false)
    MUMBLE_MAX_PARALLEL_REQUESTS: Max concurrent HTTP requests (optional, default: 5)
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_SOCKET_PATH = "/ws/socket.io"


@dataclass
class Config:
    url: str
    timeout: float = DEFAULT_TIMEOUT
    socket_path: str = DEFAULT_SOCKET_PATH
    insecure: bool = False
    debug: bool = False
    max_parallel_requests: int = 5


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Raises:
        ValueError: If the URL, timeout, socket path or parallelism is invalid.
    """
    config.url = config.url.strip()

    if not config.url.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid server URL '{config.url}': must start with http:// or https://"
        )

    parsed = urlparse(config.url)
    if not parsed.hostname:
        raise ValueError(
            f"Invalid server URL '{config.url}': URL must include a hostname"
        )

    config.url = config.url.removesuffix("/")

    if config.timeout <= 0:
        raise ValueError(
            f"Invalid timeout {config.timeout}: must be a positive number of seconds"
        )

    if not config.socket_path.startswith("/"):
        raise ValueError(
            f"Invalid socket path '{config.socket_path}': must start with /"
        )

    if not (1 <= config.max_parallel_requests <= 100):
        raise ValueError(
            f"Invalid max_parallel_requests {config.max_parallel_requests}: "
            "must be between 1 and 100"
        )

    if config.insecure:
        logger.warning(
            "WARNING: SSL verification disabled (insecure=True). Use only for development."
        )


def _get_bool_env(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def load_config(
    url: str | None = None,
    timeout: float | None = None,
    insecure: bool = False,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` first so that
    .env values are visible through ``os.getenv()``.

    Args:
        url: Override server URL.
        timeout: Override request timeout in seconds.
        insecure: Skip SSL verification (CLI flag).
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Values from the YAML config ``mumble`` section.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If the URL is missing or any value is invalid.
    """
    fb = yaml_fallbacks or {}

    server_url = url or os.getenv("MUMBLE_URL") or fb.get("url")
    if not server_url:
        raise ValueError(
            "Server URL not found. Set MUMBLE_URL environment variable, "
            "pass --url CLI argument, or add 'url' to config.yml."
        )

    if timeout is not None:
        final_timeout = float(timeout)
    else:
        timeout_raw = os.getenv("MUMBLE_TIMEOUT")
        if timeout_raw is not None:
            try:
                final_timeout = float(timeout_raw)
            except ValueError:
                raise ValueError(
                    f"Invalid MUMBLE_TIMEOUT '{timeout_raw}': must be a number of seconds"
                ) from None
        else:
            final_timeout = float(fb.get("timeout", DEFAULT_TIMEOUT))

    socket_path = (
        os.getenv("MUMBLE_SOCKET_PATH")
        or fb.get("socket_path")
        or DEFAULT_SOCKET_PATH
    )

    if insecure:
        final_insecure = True
    else:
        env_insecure = _get_bool_env("MUMBLE_INSECURE")
        if env_insecure is not None:
            final_insecure = env_insecure
        else:
            final_insecure = bool(fb.get("insecure", False))

    if debug:
        final_debug = True
    else:
        env_debug = _get_bool_env("MUMBLE_DEBUG")
        if env_debug is not None:
            final_debug = env_debug
        else:
            final_debug = bool(fb.get("debug", False))

    max_parallel_raw = os.getenv("MUMBLE_MAX_PARALLEL_REQUESTS")
    if max_parallel_raw is not None:
        try:
            final_max_parallel = int(max_parallel_raw)
        except ValueError:
            raise ValueError(
                f"Invalid MUMBLE_MAX_PARALLEL_REQUESTS '{max_parallel_raw}': must be a number between 1 and 100"
            ) from None
    else:
        final_max_parallel = int(fb.get("max_parallel_requests", 5))

    config = Config(
        url=server_url,
        timeout=final_timeout,
        socket_path=socket_path,
        insecure=final_insecure,
        debug=final_debug,
        max_parallel_requests=final_max_parallel,
    )

    validate_config(config)

    return config
