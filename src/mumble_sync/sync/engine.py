"""The application-facing sync object.

``MumbleSync`` owns the entity cache, wires an ``EventRouter`` to the event
transport and exposes the local event surface::

    sync = MumbleSync(client, transport)
    sync.on(Events.USER_MUTE_CHANGED, lambda user: print(user.name))
    await sync.wait_ready()

Subscription to the transport happens inside ``__init__`` so no event
delivered after construction is lost.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING

from ..core.async_utils import gather_limited, run_sync_limited
from .actions import ChannelActions, UserActions
from .cache import EntityCache, EntityStore
from .events import EventEmitter, Events, Listener
from .models import BulkUpdate, Channel, User
from .router import EventRouter
from .server import ServerAdmin
from .transport import EventTransport

if TYPE_CHECKING:
    from ..config import Config
    from ..core.client import MumbleClient

logger = logging.getLogger(__name__)


class ReadyState:
    """One-way not-ready -> ready latch.

    ``mark_ready()`` performs the transition at most once and reports
    whether this call was the one that did it.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def is_ready(self) -> bool:
        return self._event.is_set()

    def mark_ready(self) -> bool:
        if self._event.is_set():
            return False
        self._event.set()
        return True

    async def wait(self) -> None:
        await self._event.wait()


class MumbleSync:
    """Live mirror of a server's users and channels.

    Args:
        client: Control-plane client used by ``refresh()``, the server
            helpers and the per-entity actions.
        transport: Event transport to subscribe to.
    """

    def __init__(self, client: MumbleClient, transport: EventTransport) -> None:
        self.api = client
        self.transport = transport
        self.cache = EntityCache()
        self.events = EventEmitter()
        self.server = ServerAdmin(self)
        self.user_actions = UserActions(self)
        self.channel_actions = ChannelActions(self)
        self._ready = ReadyState()
        self.router = EventRouter(
            self.cache, self.events, on_bulk_update=self._on_bulk_update
        )
        self.router.attach(transport)

    @classmethod
    def from_config(
        cls, config: Config, transport: EventTransport
    ) -> MumbleSync:
        """Build the control-plane client from ``config``."""
        from ..core.client import MumbleClient

        return cls(MumbleClient(config), transport)

    # ------------------------------------------------------------------
    # Cache access
    # ------------------------------------------------------------------

    @property
    def users(self) -> EntityStore[User]:
        return self.cache.users

    @property
    def channels(self) -> EntityStore[Channel]:
        return self.cache.channels

    def get_user_channel(self, user: User) -> Channel | None:
        return self.cache.channel_of(user)

    def find_user_by_session(self, session: int) -> User | None:
        return self.cache.find_user_by_session(session)

    # ------------------------------------------------------------------
    # Readiness
    # ------------------------------------------------------------------

    @property
    def ready(self) -> bool:
        """True once the first bulk update has been applied."""
        return self._ready.is_ready

    async def wait_ready(self) -> None:
        await self._ready.wait()

    def _on_bulk_update(self) -> None:
        if self._ready.mark_ready():
            logger.info(
                "Sync ready: %d users, %d channels",
                len(self.users),
                len(self.channels),
            )
            self.events.emit(Events.READY)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(self) -> None:
        """Fetch every user and channel and replace them in the cache.

        No change events are emitted and readiness is untouched.  Safe to
        call repeatedly.
        """
        users, channels = await gather_limited(
            [
                run_sync_limited(self.api.get_users),
                run_sync_limited(self.api.get_channels),
            ]
        )
        self.router.apply_bulk(BulkUpdate(users=users, channels=channels))

    # ------------------------------------------------------------------
    # Event surface
    # ------------------------------------------------------------------

    def on(self, event: str | Enum, listener: Listener) -> Listener:
        """Subscribe to a local event or to a context action name."""
        return self.events.on(event, listener)

    def once(self, event: str | Enum, listener: Listener) -> Listener:
        return self.events.once(event, listener)

    def off(self, event: str | Enum, listener: Listener) -> None:
        self.events.off(event, listener)
