"""Serial peer runner for smp-testkit.

Contains run_peer() which serves the harness over a serial port in a
persistent loop, playing the opposite role of every incoming connection,
and handles SIGINT/SIGTERM for graceful shutdown.
"""

import logging
import signal
from types import FrameType

from channel.base import Handlers
from channel.serial_link import SerialChannel
from common.device import open_serial
from common.protocol import LINK_POLL_S, SMP_CID
from peer.simulated import SimulatedPeer

logger = logging.getLogger(__name__)


class PeerDispatcher:
    """Creates a fresh SimulatedPeer for each connection on a serial link."""

    def __init__(self, channel: SerialChannel) -> None:
        self._channel = channel
        self.peers: dict[int, SimulatedPeer] = {}
        self.connections = 0

    def handlers(self) -> Handlers:
        return Handlers(
            on_connect=self.on_connect,
            on_message=self.on_message,
            on_disconnect=self.on_disconnect,
        )

    def on_connect(self, handle: int) -> None:
        remote_role = self._channel.remote_roles.get(handle)
        if remote_role is None:
            logger.warning(f"Peer: connection {handle:#06x} without a remote role, ignoring")
            return
        peer = SimulatedPeer(remote_role.peer, self._channel)
        self.peers[handle] = peer
        self.connections += 1
        peer.on_connect(handle)

    def on_message(self, handle: int, pdu: bytes) -> None:
        peer = self.peers.get(handle)
        if peer is not None:
            peer.on_message(handle, pdu)

    def on_disconnect(self, handle: int) -> None:
        peer = self.peers.pop(handle, None)
        if peer is not None:
            peer.on_disconnect(handle)


def run_peer(device: str, baudrate: int, rtscts: bool) -> int:
    """Serve connections until a signal arrives. Returns 0 unless the port fails to open."""
    running = True

    def handle_signal(_sig: int, _frame: FrameType | None) -> None:
        nonlocal running
        running = False
        logger.info("Signal received - shutting down")

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        ser = open_serial(device, baudrate, rtscts)
    except Exception as e:
        logger.error(f"Failed to open serial port: {e}")
        return 1

    try:
        channel = SerialChannel(ser)
        dispatcher = PeerDispatcher(channel)
        channel.register(SMP_CID, dispatcher.handlers())
        logger.info(f"Peer started on {device}, waiting for connections...")

        while running:
            channel.poll(LINK_POLL_S)

        logger.info(f"Peer served {dispatcher.connections} connections")
    finally:
        ser.close()
        logger.info(f"Closed {device}")

    return 0
