"""Event names and the listener registry behind ``MumbleSync``.

``WireEvent`` lists the names delivered by the event transport.  ``Events``
lists the local names applications subscribe to.  Context actions are the
exception: they are also emitted under their own action string, so any
action the server declares becomes a subscribable event at runtime.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class WireEvent(str, Enum):
    """Event names sent by the server over the event transport."""

    AUTH_ATTEMPT = "authAttempt"
    UPDATE = "update"
    CONTEXT = "context"
    USER_CONNECTED = "userConnected"
    USER_STATE_CHANGED = "userStateChanged"
    USER_DISCONNECTED = "userDisconnected"
    USER_TEXT_MESSAGE = "userTextMessage"
    CHANNEL_CREATED = "channelCreated"
    CHANNEL_STATE_CHANGED = "channelStateChanged"
    CHANNEL_REMOVED = "channelRemoved"
    # transport lifecycle
    DISCONNECT = "disconnect"
    CONNECT_ERROR = "connect_error"


class Events(str, Enum):
    """Local events emitted by ``MumbleSync``.

    Listener signatures:

    - ``USER_CONNECTED(user)``, ``USER_DISCONNECTED(user | None)``
    - ``USER_STATE_CHANGED(user, old_user | None)``
    - ``USER_TEXT_MESSAGE(user | None, message)``
    - ``CHANNEL_CREATED(channel)``, ``CHANNEL_REMOVED(channel | None)``
    - ``CHANNEL_STATE_CHANGED(channel, old_channel | None)``
    - ``USER_CHANNEL_CHANGED(user, new_channel | None, old_channel | None)``
    - every other ``USER_*_CHANGED(user)``
    - ``CONTEXT_ACTION(context_action)``
    - ``AUTH_ATTEMPT(username, password)``
    - ``READY()``, ``DISCONNECTED(reason)``, ``ERROR(exc)``
    """

    USER_CONNECTED = "userConnected"
    USER_STATE_CHANGED = "userStateChanged"
    USER_DISCONNECTED = "userDisconnected"
    USER_TEXT_MESSAGE = "userTextMessage"
    CHANNEL_CREATED = "channelCreated"
    CHANNEL_STATE_CHANGED = "channelStateChanged"
    CHANNEL_REMOVED = "channelRemoved"

    USER_CHANNEL_CHANGED = "userChannelChanged"
    USER_MUTE_CHANGED = "userMuteChanged"
    USER_DEAF_CHANGED = "userDeafChanged"
    USER_SUPPRESS_CHANGED = "userSuppressChanged"
    USER_SELF_MUTE_CHANGED = "userSelfMuteChanged"
    USER_SELF_DEAF_CHANGED = "userSelfDeafChanged"
    USER_PRIORITY_SPEAKER_CHANGED = "userPrioritySpeakerChanged"
    USER_RECORDING_CHANGED = "userRecordingChanged"
    USER_COMMENT_CHANGED = "userCommentChanged"
    USER_NAME_CHANGED = "userNameChanged"

    CONTEXT_ACTION = "contextAction"
    AUTH_ATTEMPT = "authAttempt"
    READY = "ready"
    DISCONNECTED = "disconnected"
    ERROR = "error"


def _event_name(event: str | Enum) -> str:
    return event.value if isinstance(event, Enum) else event


class EventEmitter:
    """Synchronous listener registry keyed by event name.

    Listeners run in registration order on the caller's thread.  A listener
    that returns an awaitable has it scheduled as a task on the running
    loop; without a running loop it is logged and discarded.  A listener
    that raises is logged and does not prevent delivery to the remaining
    listeners.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}
        self._once: dict[str, list[Listener]] = {}
        self._tasks: set[asyncio.Task] = set()

    def on(self, event: str | Enum, listener: Listener) -> Listener:
        """Register ``listener`` for ``event`` and return it."""
        self._listeners.setdefault(_event_name(event), []).append(listener)
        return listener

    def once(self, event: str | Enum, listener: Listener) -> Listener:
        """Register ``listener`` to be called at most once."""
        self.on(event, listener)
        self._once.setdefault(_event_name(event), []).append(listener)
        return listener

    def off(self, event: str | Enum, listener: Listener) -> None:
        """Remove ``listener``; unknown listeners are ignored."""
        name = _event_name(event)
        for registry in (self._listeners, self._once):
            listeners = registry.get(name, [])
            if listener in listeners:
                listeners.remove(listener)

    def listeners(self, event: str | Enum) -> list[Listener]:
        return list(self._listeners.get(_event_name(event), []))

    def listener_count(self, event: str | Enum) -> int:
        return len(self._listeners.get(_event_name(event), []))

    def emit(self, event: str | Enum, *args: Any) -> bool:
        """Call every listener of ``event`` with ``args``.

        Returns:
            True if the event had listeners.
        """
        name = _event_name(event)
        listeners = self.listeners(name)
        for listener in listeners:
            if listener in self._once.get(name, []):
                self.off(name, listener)
            try:
                result = listener(*args)
            except Exception:
                logger.exception("Listener %r for %s failed", listener, name)
                continue
            if inspect.isawaitable(result):
                self._schedule(name, result)
        return bool(listeners)

    def _schedule(self, name: str, awaitable: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error("Async listener for %s dropped: no running event loop", name)
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return
        task = asyncio.ensure_future(awaitable, loop=loop)
        self._tasks.add(task)

        def _done(t: asyncio.Task) -> None:
            self._tasks.discard(t)
            if not t.cancelled() and t.exception() is not None:
                logger.error(
                    "Async listener for %s failed",
                    name,
                    exc_info=t.exception(),
                )

        task.add_done_callback(_done)
