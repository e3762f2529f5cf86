"""Channel interfaces for smp-testkit.

Contains:
- Channel: Outbound send primitive used by the engines
- Handlers: Connection and message callbacks registered with a link
- Link: Channel with connection control and an event pump
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol


class Channel(Protocol):
    """Message-framed, connection-oriented transport."""

    def send(self, handle: int, cid: int, pdu: bytes) -> None:
        """Send one PDU. Raises ChannelError if the connection is gone."""
        ...


@dataclass(frozen=True)
class Handlers:
    """Callbacks for one registered channel identifier."""

    on_connect: Callable[[int], None]
    on_message: Callable[[int, bytes], None]
    on_disconnect: Callable[[int], None]


class Link(Channel, Protocol):
    """A channel the harness can drive: register, connect, pump events."""

    def register(self, cid: int, handlers: Handlers) -> None: ...
    def unregister(self, cid: int) -> None: ...
    def connect(self, handle: int) -> None: ...
    def disconnect(self, handle: int) -> None: ...

    def poll(self, timeout_s: float) -> bool:
        """Deliver at most one pending event. Returns True if one was delivered."""
        ...

    @property
    def idle(self) -> bool:
        """True when no event can arrive until something is sent."""
        ...
