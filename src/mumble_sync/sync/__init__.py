"""Live mirror of a voice server's users and channels.

Modules:

- ``models``    -- ``User``, ``Channel`` and wire payload models.
- ``cache``     -- ``EntityStore`` / ``EntityCache``: id -> snapshot.
- ``diff``      -- ``diff_user``: granular user change signals.
- ``events``    -- ``Events``, ``WireEvent``, ``EventEmitter``.
- ``router``    -- ``EventRouter``: applies wire events to the cache.
- ``transport`` -- ``EventTransport`` protocol, ``LocalTransport``.
- ``server``    -- ``ServerAdmin``: MOTD, tree, superuser password.
- ``actions``   -- ``UserActions`` / ``ChannelActions``: per-entity calls.
- ``engine``    -- ``MumbleSync``: the facade applications hold.
"""

from .actions import ChannelActions, UserActions
from .cache import EntityCache, EntityStore
from .diff import ChangeSignal, diff_user
from .engine import MumbleSync, ReadyState
from .events import EventEmitter, Events, WireEvent
from .models import (
    AuthUser,
    BulkUpdate,
    Channel,
    ChannelTree,
    ContextAction,
    ContextActionEvent,
    ContextActionScope,
    ServerInfo,
    User,
)
from .router import EventRouter, MalformedEventError
from .server import ServerAdmin
from .transport import EventTransport, LocalTransport

__all__ = [
    "AuthUser",
    "BulkUpdate",
    "ChangeSignal",
    "Channel",
    "ChannelActions",
    "ChannelTree",
    "ContextAction",
    "ContextActionEvent",
    "ContextActionScope",
    "EntityCache",
    "EntityStore",
    "EventEmitter",
    "EventRouter",
    "EventTransport",
    "Events",
    "LocalTransport",
    "MalformedEventError",
    "MumbleSync",
    "ReadyState",
    "ServerAdmin",
    "ServerInfo",
    "User",
    "UserActions",
    "WireEvent",
    "diff_user",
]
