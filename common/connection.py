"""Connection roles and channel errors for smp-testkit.

Contains:
- Role: Enum for initiator/responder role
- ChannelError: Exception for sends on a connection that is gone
"""

from enum import Enum


class Role(Enum):
    """Role in the pairing protocol."""

    INITIATOR = "initiator"
    RESPONDER = "responder"

    @property
    def peer(self) -> "Role":
        """Role played by the other side of the connection."""
        return Role.RESPONDER if self is Role.INITIATOR else Role.INITIATOR


class ChannelError(Exception):
    """Raised when the channel cannot deliver a transmission."""

    pass
