"""Link frame encoding/decoding for smp-testkit.

A link frame carries one connection event between two machines:
  [type u8][handle u16][cid u16][data]

- CONNECT: data is the sender's role byte, cid is 0
- DATA: data is one PDU for channel cid
- DISCONNECT: no data, cid is 0
"""

from dataclasses import dataclass
from enum import IntEnum

from common import message
from common.connection import Role
from common.protocol import SerialPort

LINK_HEADER_SIZE = 1 + message.UINT16_SIZE * 2

_ROLE_CODES = {Role.INITIATOR: 0x00, Role.RESPONDER: 0x01}
_CODE_ROLES = {code: role for role, code in _ROLE_CODES.items()}


class EncodingError(Exception):
    """Raised when a frame is well delimited but its contents are invalid."""

    pass


class TransportError(Exception):
    """Raised when no complete frame could be read (timeout, truncation)."""

    pass


class FrameType(IntEnum):
    """Link frame types."""

    CONNECT = 0x01
    DATA = 0x10
    DISCONNECT = 0x20


@dataclass(frozen=True)
class LinkFrame:
    """One decoded link frame."""

    frame_type: FrameType
    handle: int
    cid: int = 0
    data: bytes = b""

    @property
    def role(self) -> Role:
        """Sender role carried by a CONNECT frame."""
        if self.frame_type != FrameType.CONNECT or len(self.data) != 1:
            raise EncodingError("Only CONNECT frames carry a role")
        try:
            return _CODE_ROLES[self.data[0]]
        except KeyError:
            raise EncodingError(f"Invalid role code: {self.data[0]}")


def _encode(frame_type: FrameType, handle: int, cid: int, data: bytes) -> bytes:
    header = (
        bytes([frame_type])
        + message.uint16_to_bytes(handle)
        + message.uint16_to_bytes(cid)
    )
    return message.encode(header + data)


def encode_connect(handle: int, role: Role) -> bytes:
    """Encode a CONNECT frame announcing the sender's role."""
    return _encode(FrameType.CONNECT, handle, 0, bytes([_ROLE_CODES[role]]))


def encode_data(handle: int, cid: int, pdu: bytes) -> bytes:
    """Encode a DATA frame carrying one PDU."""
    return _encode(FrameType.DATA, handle, cid, pdu)


def encode_disconnect(handle: int) -> bytes:
    """Encode a DISCONNECT frame."""
    return _encode(FrameType.DISCONNECT, handle, 0, b"")


def parse_frame(raw: bytes) -> LinkFrame:
    """Parse frame bytes (already stripped of sync/length/CRC).

    Raises EncodingError on a short header or unknown frame type.
    """
    if len(raw) < LINK_HEADER_SIZE:
        raise EncodingError(
            f"Frame too short: {len(raw)} bytes, need at least {LINK_HEADER_SIZE}"
        )

    try:
        frame_type = FrameType(raw[0])
    except ValueError:
        raise EncodingError(f"Invalid frame type: {raw[0]:#04x}")

    handle = message.uint16_from_bytes(raw[1:3])
    cid = message.uint16_from_bytes(raw[3:5])
    return LinkFrame(frame_type=frame_type, handle=handle, cid=cid, data=raw[LINK_HEADER_SIZE:])


def decode_frame(reader: SerialPort) -> tuple[LinkFrame, bool]:
    """Read and parse one link frame.

    Returns (frame, crc_ok).

    Raises:
        TransportError: On timeout or truncated frame.
        EncodingError: On invalid frame contents.
    """
    raw, crc_ok = message.decode(reader)
    if raw is None:
        raise TransportError("Timeout or truncated frame")
    return parse_frame(raw), crc_ok
