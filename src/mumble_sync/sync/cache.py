"""In-memory entity cache.

Holds the current snapshot of every known user and channel.  Users are
keyed by ``userid`` and channels by ``id``.  Lookups never raise: a miss
returns ``None`` because transient absence is normal while reconnecting or
when events race each other.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Generic, TypeVar

from .models import Channel, User

T = TypeVar("T")


class EntityStore(Generic[T]):
    """Mapping from numeric id to the current entity snapshot."""

    def __init__(self) -> None:
        self._entries: dict[int, T] = {}

    def get(self, entity_id: int) -> T | None:
        return self._entries.get(entity_id)

    def set(self, entity_id: int, entity: T) -> None:
        """Store ``entity`` under ``entity_id``, replacing any previous one."""
        self._entries[entity_id] = entity

    def delete(self, entity_id: int) -> T | None:
        """Remove and return the entity, or ``None`` if it was not cached."""
        return self._entries.pop(entity_id, None)

    def values(self) -> list[T]:
        return list(self._entries.values())

    def items(self) -> list[tuple[int, T]]:
        return list(self._entries.items())

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entries

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self)} entries)"


class EntityCache:
    """User and channel stores owned by one ``MumbleSync`` instance."""

    def __init__(self) -> None:
        self.users: EntityStore[User] = EntityStore()
        self.channels: EntityStore[Channel] = EntityStore()

    def put_user(self, user: User) -> None:
        self.users.set(user.userid, user)

    def put_channel(self, channel: Channel) -> None:
        self.channels.set(channel.id, channel)

    def find_user_by_session(self, session: int) -> User | None:
        """Find a user by session id.

        Session ids are not the cache key, so this is a linear scan.
        """
        for user in self.users.values():
            if user.session == session:
                return user
        return None

    def channel_of(self, user: User) -> Channel | None:
        """Resolve the channel a user is in, or ``None`` if not cached."""
        return self.channels.get(user.channel)
