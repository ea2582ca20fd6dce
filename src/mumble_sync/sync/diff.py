"""Derive granular change signals from two user snapshots.

The server only ever sends a user's complete state.  ``diff_user`` compares
the previous and the new snapshot attribute by attribute and returns one
``ChangeSignal`` per tracked attribute whose value differs, in a fixed
order.

Channels are only reported as a whole (``CHANNEL_STATE_CHANGED``); they
have no granular signals.
"""

from __future__ import annotations

from dataclasses import dataclass

from .cache import EntityStore
from .events import Events
from .models import Channel, User

# Attribute -> event, in emission order.
TRACKED_USER_FIELDS: tuple[tuple[str, Events], ...] = (
    ("channel", Events.USER_CHANNEL_CHANGED),
    ("mute", Events.USER_MUTE_CHANGED),
    ("deaf", Events.USER_DEAF_CHANGED),
    ("suppress", Events.USER_SUPPRESS_CHANGED),
    ("self_mute", Events.USER_SELF_MUTE_CHANGED),
    ("self_deaf", Events.USER_SELF_DEAF_CHANGED),
    ("priority_speaker", Events.USER_PRIORITY_SPEAKER_CHANGED),
    ("recording", Events.USER_RECORDING_CHANGED),
    ("comment", Events.USER_COMMENT_CHANGED),
    ("name", Events.USER_NAME_CHANGED),
)


@dataclass(frozen=True)
class ChangeSignal:
    """A single attribute change of a user.

    Attributes:
        event: Local event to emit.
        user: The new user snapshot.
        field: Name of the changed attribute.
        new_channel: Resolved new channel (channel changes only).
        old_channel: Resolved previous channel (channel changes only).
    """

    event: Events
    user: User
    field: str
    new_channel: Channel | None = None
    old_channel: Channel | None = None

    @property
    def args(self) -> tuple:
        """Positional listener arguments for ``event``."""
        if self.event is Events.USER_CHANNEL_CHANGED:
            return (self.user, self.new_channel, self.old_channel)
        return (self.user,)


def diff_user(
    old: User, new: User, channels: EntityStore[Channel]
) -> list[ChangeSignal]:
    """Compare two snapshots of the same user.

    Args:
        old: Previous snapshot.
        new: Snapshot that replaces it.
        channels: Channel store used to resolve channel ids.  Resolution
            happens now; an id missing from the store resolves to ``None``.

    Returns:
        Signals for every tracked attribute that changed, in the order of
        ``TRACKED_USER_FIELDS``.  Empty when nothing tracked changed.
    """
    signals: list[ChangeSignal] = []
    for field, event in TRACKED_USER_FIELDS:
        if getattr(old, field) == getattr(new, field):
            continue
        if event is Events.USER_CHANNEL_CHANGED:
            signals.append(
                ChangeSignal(
                    event=event,
                    user=new,
                    field=field,
                    new_channel=channels.get(new.channel),
                    old_channel=channels.get(old.channel),
                )
            )
        else:
            signals.append(ChangeSignal(event=event, user=new, field=field))
    return signals
