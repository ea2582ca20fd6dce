"""Pydantic models for server entities and wire payloads.

Entities (``User``, ``Channel``) are frozen: an update never patches a
cached snapshot, it replaces it with a freshly validated one.  Field names
follow Python conventions; the camelCase keys sent by the server are
accepted through aliases.

- ``User`` / ``Channel``: cached entities.
- ``BulkUpdate``: full-state batch (``update`` wire event).
- ``ContextActionEvent``: wire payload of the ``context`` event.
- ``ContextAction``: locally resolved context action delivered to listeners.
- ``ServerInfo``, ``ChannelTree``, ``AuthUser``: control-plane responses.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Iterator

from pydantic import BaseModel, ConfigDict, Field

_ENTITY_CONFIG = ConfigDict(
    frozen=True, populate_by_name=True, extra="ignore"
)


class ContextActionScope(IntEnum):
    """Where a context action shows up in the client UI."""

    SERVER = 1
    CHANNEL = 2
    USER = 4


class User(BaseModel):
    """A connected user.

    Attributes:
        session: Connection id, unique per live connection.
        userid: Registered user id, -1 if anonymous.
        mute: Muted by the server.
        deaf: Deafened by the server (implies mute).
        suppress: Lacks speech privileges in the current channel.
        priority_speaker: Is a priority speaker.
        self_mute: Muted themselves.
        self_deaf: Deafened themselves.
        recording: Is recording (read-only on the server).
        channel: Id of the channel the user is in.
        name: Display name.
        comment: User comment.
        onlinesecs: Seconds online.
        bytespersec: Average transmission rate.
        idlesecs: Seconds since the user last spoke.
        udp_ping: Average UDP ping.
        tcp_ping: Average TCP ping.
    """

    session: int
    userid: int = -1
    mute: bool = False
    deaf: bool = False
    suppress: bool = False
    priority_speaker: bool = Field(default=False, alias="prioritySpeaker")
    self_mute: bool = Field(default=False, alias="selfMute")
    self_deaf: bool = Field(default=False, alias="selfDeaf")
    recording: bool = False
    channel: int = 0
    name: str = ""
    comment: str = ""
    onlinesecs: int = 0
    bytespersec: int = 0
    idlesecs: int = 0
    udp_ping: float = Field(default=0.0, alias="udpPing")
    tcp_ping: float = Field(default=0.0, alias="tcpPing")
    version: int = 0
    release: str = ""
    os: str = ""
    osversion: str = ""
    identity: str = ""
    context: str = ""
    address: tuple[int, ...] = ()
    tcponly: bool = False

    model_config = _ENTITY_CONFIG

    @property
    def anonymous(self) -> bool:
        """True when the user is not registered on the server."""
        return self.userid == -1


class Channel(BaseModel):
    """A channel in the server tree.

    Attributes:
        id: Channel id; the root channel is always 0.
        name: Channel name, unique among siblings.
        parent: Parent channel id, -1 for the root.
        links: Ids of linked channels.
        description: Channel description.
        temporary: Removed when the last user leaves.
        position: Sort position.
    """

    id: int
    name: str = ""
    parent: int = -1
    links: tuple[int, ...] = ()
    description: str = ""
    temporary: bool = False
    position: int = 0

    model_config = _ENTITY_CONFIG

    @property
    def is_root(self) -> bool:
        return self.id == 0


class BulkUpdate(BaseModel):
    """Full-state batch of users and channels."""

    users: list[User] = []
    channels: list[Channel] = []

    model_config = {"frozen": True}


class ContextActionEvent(BaseModel):
    """Raw ``context`` payload as sent by the server.

    Attributes:
        action: Action name declared by the server.
        user: Full state of the issuing user.
        session: Session of the target user, 0 when there is none.
        channel: Id of the target channel, -1 when there is none.
    """

    action: str
    user: User
    session: int = 0
    channel: int = -1

    model_config = {"frozen": True}


class ContextAction(BaseModel):
    """A context action with its references resolved against the cache.

    Any reference that could not be resolved is ``None``.
    """

    action: str
    issuer: User | None = None
    user: User | None = None
    channel: Channel | None = None

    model_config = {"frozen": True}


class ServerInfo(BaseModel):
    """Server summary returned by the control plane root endpoint."""

    running: bool = False
    users: int = 0
    uptime_seconds: int = 0
    log_length: int = 0
    version: str = ""

    model_config = {"frozen": True, "extra": "ignore"}


class ChannelTree(BaseModel):
    """Channel tree node with the users inside it."""

    c: Channel
    children: list[ChannelTree] = []
    users: list[User] = []

    model_config = {"frozen": True}

    def walk(self) -> Iterator[ChannelTree]:
        """Yield every node depth-first, starting with this one."""
        yield self
        for child in self.children:
            yield from child.walk()


class AuthUser(BaseModel):
    """Entry of the server-side auth cache (pass-through only)."""

    id: int
    username: str
    password: str | None = None
    roles: list[str] = []
    display_name: str = Field(default="", alias="displayName")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")
