"""Event transport contract.

The transport delivers decoded wire events.  Framing, connecting and
reconnecting belong to the transport, not to this package.  Anything with
an ``on(event, handler)`` method fits, including a socket.io async client
connected to the server's ``/ws/socket.io`` path.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from .events import EventEmitter


@runtime_checkable
class EventTransport(Protocol):
    def on(self, event: str, handler: Callable[..., Any]) -> Any: ...


class LocalTransport(EventEmitter):
    """In-process transport; ``deliver`` pushes an event to its handlers.

    Used to feed events from an adapter or a test, and to replay
    recorded event streams.
    """

    def deliver(self, event: str, *args: Any) -> bool:
        return self.emit(event, *args)
