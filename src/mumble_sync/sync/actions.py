"""Per-entity helpers on top of the control-plane client.

``User`` and ``Channel`` are frozen snapshots, so actions live here and
take the snapshot as their first argument.  None of them touch the cache:
the resulting state change arrives through the event stream like any
other.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..core.async_utils import run_sync
from .models import Channel, ContextActionScope, User

if TYPE_CHECKING:
    from .engine import MumbleSync

logger = logging.getLogger(__name__)


class UserActions:
    """Actions addressed to a connected user by session id."""

    def __init__(self, sync: MumbleSync) -> None:
        self.sync = sync

    async def _update(self, user: User, **fields: Any) -> None:
        await run_sync(self.sync.api.update_user_state, user.session, **fields)

    async def set_name(self, user: User, name: str) -> None:
        await self._update(user, name=name)

    async def set_mute(self, user: User, mute: bool) -> None:
        await self._update(user, mute=mute)

    async def set_deaf(self, user: User, deaf: bool) -> None:
        await self._update(user, deaf=deaf)

    async def set_suppress(self, user: User, suppress: bool) -> None:
        await self._update(user, suppress=suppress)

    async def set_priority_speaker(self, user: User, priority_speaker: bool) -> None:
        await self._update(user, priority_speaker=priority_speaker)

    async def set_channel(self, user: User, channel: Channel) -> None:
        """Move ``user`` into ``channel``."""
        await self._update(user, channel=channel.id)

    async def set_comment(self, user: User, comment: str) -> None:
        await self._update(user, comment=comment)

    async def get_certificate_list(self, user: User) -> str:
        return await run_sync(self.sync.api.get_certificate_list, user.session)

    async def send_message(self, user: User, message: str) -> None:
        await run_sync(self.sync.api.send_user_message, user.session, message)

    async def kick(self, user: User, reason: str = "") -> None:
        logger.info("Kicking %s (session %d): %s", user.name, user.session, reason)
        await run_sync(self.sync.api.kick_user, user.session, reason)

    async def add_context_action(
        self,
        user: User,
        action: str,
        text: str,
        scope: ContextActionScope = ContextActionScope.USER,
    ) -> None:
        """Show a context menu entry in ``user``'s client.

        Invocations come back as events named ``action``.
        """
        await run_sync(
            self.sync.api.add_context_action, user.session, action, text, scope
        )

    async def add_to_group(self, user: User, group: str, channel: int = 0) -> None:
        await run_sync(
            self.sync.api.add_user_to_group, user.session, channel, group
        )

    async def remove_from_group(
        self, user: User, group: str, channel: int = 0
    ) -> None:
        await run_sync(
            self.sync.api.remove_user_from_group, user.session, channel, group
        )


class ChannelActions:
    """Actions addressed to a channel by id."""

    def __init__(self, sync: MumbleSync) -> None:
        self.sync = sync

    async def _update(self, channel: Channel, **fields: Any) -> None:
        await run_sync(self.sync.api.update_channel_state, channel.id, **fields)

    async def set_name(self, channel: Channel, name: str) -> None:
        await self._update(channel, name=name)

    async def set_description(self, channel: Channel, description: str) -> None:
        await self._update(channel, description=description)

    async def set_position(self, channel: Channel, position: int) -> None:
        await self._update(channel, position=position)

    async def set_parent(self, channel: Channel, parent: Channel) -> None:
        await self._update(channel, parent=parent.id)

    async def set_links(self, channel: Channel, links: tuple[int, ...]) -> None:
        """Replace the full set of channels linked to ``channel``."""
        await self._update(channel, links=tuple(links))

    def _current_links(self, channel: Channel) -> tuple[int, ...]:
        cached = self.sync.channels.get(channel.id)
        return (cached or channel).links

    async def add_link(self, channel: Channel, other: Channel) -> None:
        """Link ``other`` to ``channel``; already linked is a no-op."""
        links = self._current_links(channel)
        if other.id in links:
            logger.debug("Channel %d already linked to %d", channel.id, other.id)
            return
        await self.set_links(channel, links + (other.id,))

    async def remove_link(self, channel: Channel, other: Channel) -> None:
        """Unlink ``other`` from ``channel``; not linked is a no-op."""
        links = self._current_links(channel)
        if other.id not in links:
            logger.debug("Channel %d not linked to %d", channel.id, other.id)
            return
        await self.set_links(channel, tuple(c for c in links if c != other.id))

    async def create_sub_channel(self, channel: Channel, name: str) -> Channel:
        return await run_sync(self.sync.api.create_channel, name, channel.id)

    async def delete(self, channel: Channel) -> None:
        logger.info("Removing channel %s [%d]", channel.name, channel.id)
        await run_sync(self.sync.api.remove_channel, channel.id)
