"""Command-line entry point: print a one-shot snapshot of a server."""

import argparse
import asyncio
import logging
import sys
from typing import Any

import requests
from dotenv import load_dotenv

from . import __version__
from .config import Config, load_config
from .config_loader import discover_config_files, load_hierarchical_config
from .config_schema import LoggingConfig, UnifiedConfig, build_config
from .core.async_utils import init_semaphore
from .logger import setup_logging
from .sync.engine import MumbleSync
from .sync.transport import LocalTransport

logger = logging.getLogger(__name__)


def load_yaml_config() -> UnifiedConfig:
    """The merged YAML configuration, or defaults when no file exists.

    Raises:
        ValueError: If a config file fails schema validation.
    """
    if discover_config_files():
        return build_config(load_hierarchical_config())
    return UnifiedConfig()


def resolve_config(
    config_overrides: dict[str, Any] | None = None,
    unified: UnifiedConfig | None = None,
) -> Config:
    """Merge CLI overrides, env vars (.env loaded first) and YAML config.

    Raises:
        ValueError: If the resulting configuration is invalid.
    """
    load_dotenv()

    if unified is None:
        unified = load_yaml_config()
    yaml_fallbacks = {
        k: v for k, v in unified.mumble.model_dump().items() if v is not None
    }

    overrides = config_overrides or {}
    return load_config(
        url=overrides.get("url"),
        timeout=overrides.get("timeout"),
        insecure=overrides.get("insecure", False),
        debug=overrides.get("debug", False),
        yaml_fallbacks=yaml_fallbacks,
    )


def resolve_logging(
    args: argparse.Namespace, section: LoggingConfig
) -> dict[str, Any]:
    """``setup_logging`` arguments: CLI flags over the YAML ``logging`` section."""
    return {
        "debug": args.debug,
        "log_file": args.log_file or section.file,
        "log_format": args.log_format or section.format,
        "level": section.level,
    }


def format_snapshot(sync: MumbleSync) -> str:
    """Render cached channels as an indented tree with their users."""
    children: dict[int, list] = {}
    for channel in sync.channels.values():
        children.setdefault(channel.parent, []).append(channel)
    members: dict[int, list] = {}
    for user in sync.users.values():
        members.setdefault(user.channel, []).append(user)

    lines: list[str] = []

    def _walk(parent: int, depth: int) -> None:
        for channel in sorted(
            children.get(parent, []), key=lambda c: (c.position, c.name)
        ):
            lines.append(f"{'  ' * depth}# {channel.name} [{channel.id}]")
            for user in sorted(members.get(channel.id, []), key=lambda u: u.name):
                flags = "".join(
                    flag
                    for flag, on in (
                        ("M", user.mute or user.self_mute),
                        ("D", user.deaf or user.self_deaf),
                        ("R", user.recording),
                    )
                    if on
                )
                suffix = f" ({flags})" if flags else ""
                lines.append(f"{'  ' * (depth + 1)}- {user.name}{suffix}")
            _walk(channel.id, depth + 1)

    _walk(-1, 0)
    lines.append(f"{len(sync.users)} users, {len(sync.channels)} channels")
    return "\n".join(lines)


async def snapshot(config: Config) -> str:
    init_semaphore(config.max_parallel_requests)
    sync = MumbleSync.from_config(config, LocalTransport())
    await sync.refresh()
    return format_snapshot(sync)


def run() -> None:
    parser = argparse.ArgumentParser(
        prog="mumble-sync",
        description="Inspect a voice server through its REST API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print the channel tree using MUMBLE_URL from the environment or .env
  mumble-sync snapshot

  # Override the server URL and timeout
  mumble-sync snapshot --url http://localhost:8080 --timeout 5
        """,
    )
    parser.add_argument("command", choices=["snapshot"])
    parser.add_argument(
        "--url",
        help="Override REST API URL (takes precedence over MUMBLE_URL and config files)",
    )
    parser.add_argument(
        "--timeout", type=float, help="Per-request timeout in seconds"
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip SSL certificate verification (use only for development)",
    )
    parser.add_argument("--debug", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument(
        "--log-format", choices=["text", "json"], help="Log output format"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"mumble-sync version {__version__}",
    )

    args = parser.parse_args()
    load_dotenv()

    try:
        unified = load_yaml_config()
        setup_logging(**resolve_logging(args, unified.logging))
        config = resolve_config(
            {
                "url": args.url,
                "timeout": args.timeout,
                "insecure": args.insecure,
                "debug": args.debug,
            },
            unified,
        )
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        print(asyncio.run(snapshot(config)))
    except requests.RequestException as e:
        logger.error("Control-plane request failed: %s", e)
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    run()
