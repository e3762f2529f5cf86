"""Exchange channels for smp-testkit.

- base: Channel, Handlers and Link interfaces
- loopback: In-memory connected endpoint pair
- serial_link: Link events carried over a serial port
"""

from channel.base import Channel, Handlers, Link
from channel.loopback import LoopbackChannel, LoopbackEndpoint
from channel.serial_link import SerialChannel

__all__ = [
    "Channel",
    "Handlers",
    "Link",
    "LoopbackChannel",
    "LoopbackEndpoint",
    "SerialChannel",
]
