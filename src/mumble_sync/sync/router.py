"""Apply wire events to the entity cache and emit local events.

``EventRouter`` is the only component that mutates the cache in response
to the event stream.  Each handler runs synchronously on delivery, so
events are applied strictly in arrival order; ``old`` in an update always
reflects the immediately preceding state.

Per entity kind the router implements four transitions:

* **created** -- build the entity, cache it, emit the creation event.
* **updated** -- read the cached snapshot as ``old`` (may be missing),
  cache the new snapshot, emit the coarse state-changed event, then for
  users emit every granular signal from ``diff_user``.  Without an ``old``
  snapshot there is nothing to diff and only the coarse event fires.
* **removed** -- pop the cached snapshot and emit the removal event with
  it (``None`` if it was never cached).
* **bulk update** -- replace every listed entity without diffing.

Payloads are validated before the cache is touched.  A malformed payload
is logged and reported through ``Events.ERROR``; the cache keeps its
last-known-good state.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Mapping
from typing import Any

from .cache import EntityCache
from .diff import diff_user
from .events import EventEmitter, Events, WireEvent
from .models import (
    BulkUpdate,
    Channel,
    ContextAction,
    ContextActionEvent,
    User,
)
from .transport import EventTransport

logger = logging.getLogger(__name__)


class MalformedEventError(ValueError):
    """A wire event payload did not have the expected shape."""


def _state(payload: Any) -> Mapping[str, Any]:
    """Return the ``state`` object of an entity event payload."""
    if not isinstance(payload, Mapping):
        raise MalformedEventError(
            f"Expected an object payload, got {type(payload).__name__}"
        )
    state = payload.get("state")
    if not isinstance(state, Mapping):
        raise MalformedEventError("Event payload has no 'state' object")
    return state


def _guarded(wire_event: WireEvent):
    """Report malformed payloads instead of raising into the transport."""

    def decorator(handler: Callable[..., None]) -> Callable[..., None]:
        @functools.wraps(handler)
        def wrapper(self: EventRouter, *args: Any) -> None:
            try:
                handler(self, *args)
            except ValueError as exc:
                logger.warning(
                    "Dropping malformed %s event: %s", wire_event.value, exc
                )
                self.emitter.emit(Events.ERROR, exc)

        return wrapper

    return decorator


class EventRouter:
    """Route decoded wire events into the cache and the local event surface.

    Args:
        cache: Cache to mutate.
        emitter: Emitter that local events are sent through.
        on_bulk_update: Called after every applied bulk update.  The sync
            facade uses it to drive its one-time readiness transition.
    """

    def __init__(
        self,
        cache: EntityCache,
        emitter: EventEmitter,
        on_bulk_update: Callable[[], None] | None = None,
    ) -> None:
        self.cache = cache
        self.emitter = emitter
        self._on_bulk_update = on_bulk_update

    def attach(self, transport: EventTransport) -> None:
        """Subscribe every handler to ``transport``."""
        for wire_event, handler in self.handlers().items():
            transport.on(wire_event.value, handler)
        logger.debug("Event router attached to %r", transport)

    def handlers(self) -> dict[WireEvent, Callable[..., None]]:
        return {
            WireEvent.AUTH_ATTEMPT: self.handle_auth_attempt,
            WireEvent.UPDATE: self.handle_update,
            WireEvent.CONTEXT: self.handle_context,
            WireEvent.USER_CONNECTED: self.handle_user_connected,
            WireEvent.USER_STATE_CHANGED: self.handle_user_state_changed,
            WireEvent.USER_DISCONNECTED: self.handle_user_disconnected,
            WireEvent.USER_TEXT_MESSAGE: self.handle_user_text_message,
            WireEvent.CHANNEL_CREATED: self.handle_channel_created,
            WireEvent.CHANNEL_STATE_CHANGED: self.handle_channel_state_changed,
            WireEvent.CHANNEL_REMOVED: self.handle_channel_removed,
            WireEvent.DISCONNECT: self.handle_disconnect,
            WireEvent.CONNECT_ERROR: self.handle_connect_error,
        }

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    @_guarded(WireEvent.USER_CONNECTED)
    def handle_user_connected(self, payload: Any) -> None:
        user = User.model_validate(_state(payload))
        self.cache.put_user(user)
        logger.debug("User connected: %s (%d)", user.name, user.userid)
        self.emitter.emit(Events.USER_CONNECTED, user)

    @_guarded(WireEvent.USER_STATE_CHANGED)
    def handle_user_state_changed(self, payload: Any) -> None:
        user = User.model_validate(_state(payload))
        old_user = self.cache.users.get(user.userid)
        self.cache.put_user(user)
        self.emitter.emit(Events.USER_STATE_CHANGED, user, old_user)

        if old_user is None:
            return
        for signal in diff_user(old_user, user, self.cache.channels):
            self.emitter.emit(signal.event, *signal.args)

    @_guarded(WireEvent.USER_DISCONNECTED)
    def handle_user_disconnected(self, payload: Any) -> None:
        userid = User.model_validate(_state(payload)).userid
        user = self.cache.users.delete(userid)
        logger.debug("User disconnected: %d (cached=%s)", userid, user is not None)
        self.emitter.emit(Events.USER_DISCONNECTED, user)

    @_guarded(WireEvent.USER_TEXT_MESSAGE)
    def handle_user_text_message(self, payload: Any) -> None:
        sender = User.model_validate(_state(payload))
        message = payload.get("message")
        if message is not None and not isinstance(message, str):
            raise MalformedEventError("Text message is not a string")
        user = self.cache.users.get(sender.userid)
        self.emitter.emit(Events.USER_TEXT_MESSAGE, user, message or "")

    # ------------------------------------------------------------------
    # Channels
    # ------------------------------------------------------------------

    @_guarded(WireEvent.CHANNEL_CREATED)
    def handle_channel_created(self, payload: Any) -> None:
        channel = Channel.model_validate(_state(payload))
        self.cache.put_channel(channel)
        logger.debug("Channel created: %s (%d)", channel.name, channel.id)
        self.emitter.emit(Events.CHANNEL_CREATED, channel)

    @_guarded(WireEvent.CHANNEL_STATE_CHANGED)
    def handle_channel_state_changed(self, payload: Any) -> None:
        channel = Channel.model_validate(_state(payload))
        old_channel = self.cache.channels.get(channel.id)
        self.cache.put_channel(channel)
        # Channels only get the coarse event, no granular diff.
        self.emitter.emit(Events.CHANNEL_STATE_CHANGED, channel, old_channel)

    @_guarded(WireEvent.CHANNEL_REMOVED)
    def handle_channel_removed(self, payload: Any) -> None:
        channel_id = Channel.model_validate(_state(payload)).id
        channel = self.cache.channels.delete(channel_id)
        logger.debug("Channel removed: %d", channel_id)
        self.emitter.emit(Events.CHANNEL_REMOVED, channel)

    # ------------------------------------------------------------------
    # Misc
    # ------------------------------------------------------------------

    @_guarded(WireEvent.CONTEXT)
    def handle_context(self, payload: Any) -> None:
        event = ContextActionEvent.model_validate(payload)
        target = (
            self.cache.find_user_by_session(event.session)
            if event.session
            else None
        )
        context_action = ContextAction(
            action=event.action,
            issuer=self.cache.users.get(event.user.userid),
            user=target,
            channel=self.cache.channels.get(event.channel),
        )
        logger.debug("Context action %r", event.action)
        self.emitter.emit(event.action, context_action)
        self.emitter.emit(Events.CONTEXT_ACTION, context_action)

    @_guarded(WireEvent.UPDATE)
    def handle_update(self, payload: Any) -> None:
        self.apply_bulk(BulkUpdate.model_validate(payload))
        if self._on_bulk_update is not None:
            self._on_bulk_update()

    def apply_bulk(self, update: BulkUpdate) -> None:
        """Replace every entity in ``update``; emits nothing."""
        for user in update.users:
            self.cache.put_user(user)
        for channel in update.channels:
            self.cache.put_channel(channel)
        logger.debug(
            "Applied bulk update: %d users, %d channels",
            len(update.users),
            len(update.channels),
        )

    def handle_auth_attempt(self, username: Any = None, password: Any = None) -> None:
        self.emitter.emit(Events.AUTH_ATTEMPT, username, password)

    def handle_disconnect(self, *args: Any) -> None:
        reason = args[0] if args else None
        logger.warning("Event transport disconnected (reason=%s)", reason)
        self.emitter.emit(Events.DISCONNECTED, reason)

    def handle_connect_error(self, *args: Any) -> None:
        error = args[0] if args else None
        logger.error("Event transport connection error: %s", error)
        self.emitter.emit(Events.ERROR, error)
