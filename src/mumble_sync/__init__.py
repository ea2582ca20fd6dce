"""Client-side live mirror of a voice server's users and channels."""

__version__ = "0.1.0"

from .config import Config, load_config
from .core.client import MumbleClient
from .sync import Events, LocalTransport, MumbleSync

__all__ = [
    "Config",
    "Events",
    "LocalTransport",
    "MumbleClient",
    "MumbleSync",
    "__version__",
    "load_config",
]
