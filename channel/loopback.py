"""In-memory loopback channel for smp-testkit.

Two connected endpoints share one event queue. Sends, connects and
disconnects are queued and delivered one at a time by poll(), so every
callback runs on the caller's thread and nothing is re-entered.
"""

import logging
from collections import deque
from dataclasses import dataclass

from channel.base import Handlers
from common.connection import ChannelError
from common.encoding import FrameType
from common.protocol import TRACE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Event:
    kind: FrameType
    target: "LoopbackEndpoint"
    handle: int
    cid: int = 0
    data: bytes = b""


class LoopbackChannel:
    """Connected endpoint pair.

    PDUs sent on endpoint_a are delivered to endpoint_b and vice versa.
    Connection events are delivered to both endpoints.
    """

    def __init__(self) -> None:
        self._queue: deque[_Event] = deque()
        self._connected: set[int] = set()
        self.endpoint_a = LoopbackEndpoint(self, "a")
        self.endpoint_b = LoopbackEndpoint(self, "b")

    def _other(self, endpoint: "LoopbackEndpoint") -> "LoopbackEndpoint":
        return self.endpoint_b if endpoint is self.endpoint_a else self.endpoint_a

    def is_connected(self, handle: int) -> bool:
        return handle in self._connected

    def connect(self, handle: int) -> None:
        if handle in self._connected:
            raise ChannelError(f"Connection {handle:#06x} already established")
        self._connected.add(handle)
        for endpoint in (self.endpoint_a, self.endpoint_b):
            self._queue.append(_Event(FrameType.CONNECT, endpoint, handle))
        logger.debug(f"Loopback: connection {handle:#06x} established")

    def disconnect(self, handle: int) -> None:
        if handle not in self._connected:
            return
        self._connected.discard(handle)
        # Undelivered traffic on a torn-down connection is lost
        self._queue = deque(e for e in self._queue if e.handle != handle)
        for endpoint in (self.endpoint_a, self.endpoint_b):
            self._queue.append(_Event(FrameType.DISCONNECT, endpoint, handle))
        logger.debug(f"Loopback: connection {handle:#06x} closed")

    def send(self, source: "LoopbackEndpoint", handle: int, cid: int, pdu: bytes) -> None:
        if handle not in self._connected:
            raise ChannelError(f"Connection {handle:#06x} is not established")
        self._queue.append(_Event(FrameType.DATA, self._other(source), handle, cid, bytes(pdu)))
        logger.log(TRACE, f"Loopback: {source.name} -> {self._other(source).name} {pdu.hex()}")

    @property
    def idle(self) -> bool:
        return not self._queue

    def poll(self, timeout_s: float = 0.0) -> bool:
        """Deliver the next queued event. Never blocks."""
        if not self._queue:
            return False
        event = self._queue.popleft()
        event.target._deliver(event)
        return True


class LoopbackEndpoint:
    """One side of a LoopbackChannel; satisfies the Link interface."""

    def __init__(self, parent: LoopbackChannel, name: str) -> None:
        self._parent = parent
        self.name = name
        self._handlers: dict[int, Handlers] = {}

    def register(self, cid: int, handlers: Handlers) -> None:
        self._handlers[cid] = handlers

    def unregister(self, cid: int) -> None:
        self._handlers.pop(cid, None)

    def send(self, handle: int, cid: int, pdu: bytes) -> None:
        self._parent.send(self, handle, cid, pdu)

    def connect(self, handle: int) -> None:
        self._parent.connect(handle)

    def disconnect(self, handle: int) -> None:
        self._parent.disconnect(handle)

    def poll(self, timeout_s: float = 0.0) -> bool:
        return self._parent.poll(timeout_s)

    @property
    def idle(self) -> bool:
        return self._parent.idle

    def _deliver(self, event: _Event) -> None:
        match event.kind:
            case FrameType.CONNECT:
                for handlers in list(self._handlers.values()):
                    handlers.on_connect(event.handle)
            case FrameType.DISCONNECT:
                for handlers in list(self._handlers.values()):
                    handlers.on_disconnect(event.handle)
            case FrameType.DATA:
                handlers = self._handlers.get(event.cid)
                if handlers is None:
                    logger.debug(f"Loopback: {self.name} has no handler for cid {event.cid:#06x}")
                    return
                handlers.on_message(event.handle, event.data)
