"""Serial link channel for smp-testkit.

Carries connection events and PDUs between two machines over a serial
port using the link frames from common.encoding. One machine runs the
harness, the other runs the simulated device (smptest.py peer).
"""

import logging

import serial

from channel.base import Handlers
from common.connection import ChannelError, Role
from common.encoding import (
    EncodingError,
    FrameType,
    LinkFrame,
    TransportError,
    decode_frame,
    encode_connect,
    encode_data,
    encode_disconnect,
)
from common.protocol import TRACE, SerialPort

logger = logging.getLogger(__name__)


class SerialChannel:
    """Link over a serial port.

    local_role is announced in CONNECT frames so the remote side knows which
    role to play; it can change between connections.
    """

    def __init__(self, port: SerialPort, local_role: Role | None = None) -> None:
        self._port = port
        self.local_role = local_role
        self._handlers: dict[int, Handlers] = {}
        self._connected: set[int] = set()
        self.remote_roles: dict[int, Role] = {}

    def register(self, cid: int, handlers: Handlers) -> None:
        self._handlers[cid] = handlers

    def unregister(self, cid: int) -> None:
        self._handlers.pop(cid, None)

    def is_connected(self, handle: int) -> bool:
        return handle in self._connected

    def _write(self, data: bytes) -> None:
        try:
            self._port.write(data)
        except serial.SerialException as e:
            raise ChannelError(f"Serial write failed: {e}") from e

    def connect(self, handle: int) -> None:
        """Announce a new connection to the remote side and notify local handlers."""
        if self.local_role is None:
            raise ValueError("local_role must be set before connecting")
        self._write(encode_connect(handle, self.local_role))
        self._connected.add(handle)
        logger.debug(f"Serial: connection {handle:#06x} opened as {self.local_role.value}")
        for handlers in list(self._handlers.values()):
            handlers.on_connect(handle)

    def disconnect(self, handle: int) -> None:
        if handle not in self._connected:
            return
        self._connected.discard(handle)
        self.remote_roles.pop(handle, None)
        try:
            self._write(encode_disconnect(handle))
        except ChannelError as e:
            logger.warning(f"Serial: DISCONNECT for {handle:#06x} not sent: {e}")
        for handlers in list(self._handlers.values()):
            handlers.on_disconnect(handle)

    def send(self, handle: int, cid: int, pdu: bytes) -> None:
        if handle not in self._connected:
            raise ChannelError(f"Connection {handle:#06x} is not established")
        self._write(encode_data(handle, cid, pdu))
        logger.log(TRACE, f"Serial: sent {pdu.hex()} on {handle:#06x}")

    @property
    def idle(self) -> bool:
        # The remote side may always send more
        return False

    def poll(self, timeout_s: float = 0.0) -> bool:
        """Read and dispatch one frame.

        Blocks for up to the port's read timeout; timeout_s is not used.
        """
        try:
            frame, crc_ok = decode_frame(self._port)
        except TransportError:
            return False
        except EncodingError as e:
            logger.warning(f"Serial: dropping malformed frame: {e}")
            return False

        if not crc_ok:
            logger.warning(f"Serial: dropping {frame.frame_type.name} frame with bad CRC")
            return False

        return self._dispatch(frame)

    def _dispatch(self, frame: LinkFrame) -> bool:
        match frame.frame_type:
            case FrameType.CONNECT:
                try:
                    role = frame.role
                except EncodingError as e:
                    logger.warning(f"Serial: dropping CONNECT: {e}")
                    return False
                self._connected.add(frame.handle)
                self.remote_roles[frame.handle] = role
                logger.info(f"Serial: remote {role.value} connected on {frame.handle:#06x}")
                for handlers in list(self._handlers.values()):
                    handlers.on_connect(frame.handle)
            case FrameType.DISCONNECT:
                if frame.handle not in self._connected:
                    return False
                self._connected.discard(frame.handle)
                self.remote_roles.pop(frame.handle, None)
                logger.info(f"Serial: remote closed {frame.handle:#06x}")
                for handlers in list(self._handlers.values()):
                    handlers.on_disconnect(frame.handle)
            case FrameType.DATA:
                if frame.handle not in self._connected:
                    logger.debug(f"Serial: dropping PDU for closed connection {frame.handle:#06x}")
                    return False
                handlers = self._handlers.get(frame.cid)
                if handlers is None:
                    logger.debug(f"Serial: no handler for cid {frame.cid:#06x}")
                    return False
                handlers.on_message(frame.handle, frame.data)
        return True
