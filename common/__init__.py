"""Common modules for smp-testkit.

This package contains shared code used by the engines, channels and harness:
- protocol: SMP opcodes, CID, PDU sizes, timing constants, SerialPort Protocol
- connection: Role enum, ChannelError
- message: Sync/length/CRC32 framing for the serial link
- encoding: Link frame encoding/decoding (CONNECT, DATA, DISCONNECT)
- device: Serial device setup
"""

from common.connection import ChannelError, Role
from common.encoding import EncodingError, FrameType, LinkFrame, TransportError
from common.protocol import (
    DEFAULT_BAUDRATE,
    DEFAULT_CASE_TIMEOUT_S,
    SMP_CID,
    TRACE,
    Opcode,
    PairingFailedReason,
    SerialPort,
)

__all__ = [
    # Protocol
    "Opcode",
    "PairingFailedReason",
    "SerialPort",
    "SMP_CID",
    "TRACE",
    "DEFAULT_BAUDRATE",
    "DEFAULT_CASE_TIMEOUT_S",
    # Connection
    "Role",
    # Framing
    "FrameType",
    "LinkFrame",
    # Exceptions
    "ChannelError",
    "EncodingError",
    "TransportError",
]
