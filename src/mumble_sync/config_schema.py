"""Pydantic schema for the YAML configuration file.

Usage:
    from mumble_sync.config_schema import build_config

    unified = build_config(load_hierarchical_config())
    unified.mumble.timeout    # connection settings
    unified.logging.format    # logging settings
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class MumbleConfig(BaseModel):
    """Server connection settings.

    All fields are optional so env vars and CLI args can supply them.
    """

    url: str | None = Field(default=None, description="REST API base URL")
    timeout: float = Field(
        default=10.0,
        gt=0,
        le=300,
        description="Per-request timeout in seconds",
    )
    socket_path: str = Field(
        default="/ws/socket.io", description="Event transport path"
    )
    insecure: bool = Field(
        default=False,
        description="Disable SSL verification (development only)",
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    max_parallel_requests: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Maximum concurrent control-plane requests (1-100)",
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
        format: "text" or "json".
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")
    format: str = Field(default="text", pattern="^(text|json)$")

    model_config = {"frozen": True}


class UnifiedConfig(BaseModel):
    """Top-level configuration; ``UnifiedConfig()`` is always valid."""

    mumble: MumbleConfig = Field(default_factory=MumbleConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the merged YAML dict.

    Missing sections get defaults.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)
