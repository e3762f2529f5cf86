"""Byte-stream framing for the serial link.

Every link frame travels as:
  [4-byte sync magic][2-byte length][frame bytes][4-byte CRC32]

The sync magic lets a reader that joined mid-stream skip garbage until it
finds the start of the next frame. The CRC covers the frame bytes only.

All integers are little-endian unsigned.
"""

import logging
import zlib
from typing import Literal, Protocol

logger = logging.getLogger(__name__)

UINT16_SIZE = 2
UINT32_SIZE = 4
BYTE_ORDER: Literal["little", "big"] = "little"

# "SMPL" read as a little-endian integer
SYNC_MAGIC = 0x4C504D53
SYNC_MAGIC_BYTES = SYNC_MAGIC.to_bytes(UINT32_SIZE, BYTE_ORDER, signed=False)

# SMP PDUs are at most 65 bytes; leave room for the link header
MAX_FRAME_LENGTH = 512

# Give up resyncing after this many skipped bytes
MAX_RESYNC_BYTES = 4096


class Reader(Protocol):
    """Protocol for objects that can read bytes."""

    def read(self, size: int) -> bytes: ...


def uint16_to_bytes(value: int) -> bytes:
    return value.to_bytes(UINT16_SIZE, BYTE_ORDER, signed=False)


def uint16_from_bytes(data: bytes) -> int:
    return int.from_bytes(data, BYTE_ORDER, signed=False)


def uint32_to_bytes(value: int) -> bytes:
    return value.to_bytes(UINT32_SIZE, BYTE_ORDER, signed=False)


def uint32_from_bytes(data: bytes) -> int:
    return int.from_bytes(data, BYTE_ORDER, signed=False)


def encode(frame: bytes) -> bytes:
    """Wrap frame bytes with sync magic, length prefix and CRC32 suffix."""
    if len(frame) > MAX_FRAME_LENGTH:
        raise ValueError(f"Frame too long: {len(frame)} > {MAX_FRAME_LENGTH} bytes")
    return (
        SYNC_MAGIC_BYTES
        + uint16_to_bytes(len(frame))
        + frame
        + uint32_to_bytes(zlib.crc32(frame))
    )


def _find_sync(reader: Reader) -> bool:
    window = reader.read(UINT32_SIZE)
    if len(window) < UINT32_SIZE:
        return False

    skipped = 0
    while window != SYNC_MAGIC_BYTES:
        if skipped >= MAX_RESYNC_BYTES:
            logger.warning(f"No sync magic found in {skipped} bytes")
            return False
        next_byte = reader.read(1)
        if not next_byte:
            return False
        window = window[1:] + next_byte
        skipped += 1

    if skipped:
        logger.debug(f"Resynced after skipping {skipped} bytes")
    return True


def decode(reader: Reader) -> tuple[bytes | None, bool]:
    """Read one frame from reader.

    Returns (frame, crc_ok), or (None, False) on timeout, truncation or an
    implausible length.
    """
    if not _find_sync(reader):
        return None, False

    length_bytes = reader.read(UINT16_SIZE)
    if len(length_bytes) < UINT16_SIZE:
        return None, False

    length = uint16_from_bytes(length_bytes)
    if length > MAX_FRAME_LENGTH:
        logger.warning(f"Frame length {length} exceeds max {MAX_FRAME_LENGTH}, dropping")
        return None, False

    frame = reader.read(length)
    crc_bytes = reader.read(UINT32_SIZE)
    if len(frame) < length or len(crc_bytes) < UINT32_SIZE:
        return None, False

    return frame, uint32_from_bytes(crc_bytes) == zlib.crc32(frame)
