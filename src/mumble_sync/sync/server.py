"""Server-wide helpers built on the control-plane client."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..core.async_utils import run_sync
from .models import ChannelTree, ServerInfo

if TYPE_CHECKING:
    from .engine import MumbleSync

logger = logging.getLogger(__name__)

WELCOME_TEXT_KEY = "welcometext"


class ServerAdmin:
    def __init__(self, sync: MumbleSync) -> None:
        self.sync = sync

    async def get_info(self) -> ServerInfo:
        return await run_sync(self.sync.api.get_server)

    async def get_tree(self) -> ChannelTree:
        """Users and channels in tree form."""
        return await run_sync(self.sync.api.get_tree)

    async def set_superuser_password(self, password: str) -> None:
        await run_sync(self.sync.api.set_superuser_password, password)

    async def get_motd(self) -> str:
        """The server welcome text."""
        return await run_sync(self.sync.api.get_conf_key, WELCOME_TEXT_KEY)

    async def set_motd(self, motd: str, broadcast: bool = False) -> None:
        """Set the welcome text.

        Args:
            motd: New welcome text.
            broadcast: Also resend it to every cached user's session.
                Older servers always broadcast regardless.
        """
        await run_sync(self.sync.api.set_conf_key, WELCOME_TEXT_KEY, motd)
        if broadcast:
            sessions = [u.session for u in self.sync.users.values()]
            logger.info("Broadcasting welcome text to %d sessions", len(sessions))
            await run_sync(self.sync.api.send_welcome_message, sessions)
