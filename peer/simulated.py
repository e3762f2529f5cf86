"""Simulated SMP device for smp-testkit.

Implements just enough of the Security Manager Protocol to be paired with:
feature exchange, parameter checks and Pairing Failed replies. Confirm and
Random values are random bytes; no cryptographic checks are made.
"""

import logging
import os
from collections.abc import Callable

from channel.base import Channel, Handlers
from common.connection import ChannelError, Role
from common.protocol import (
    AUTH_REQ_BONDING,
    MAX_ENC_KEY_SIZE,
    MIN_ENC_KEY_SIZE,
    PAIRING_FAILED_SIZE,
    PAIRING_FEATURES_SIZE,
    PAIRING_VALUE_SIZE,
    SMP_CID,
    TRACE,
    IoCapability,
    Opcode,
    PairingFailedReason,
)

logger = logging.getLogger(__name__)

# Key distribution bits this device supports (initiator keys, responder keys)
INIT_KEY_DIST = 0x00
RSP_KEY_DIST = 0x01  # EncKey


class SimulatedPeer:
    """Plays one role of a pairing on a single connection."""

    def __init__(
        self,
        role: Role,
        channel: Channel,
        cid: int = SMP_CID,
        random_bytes: Callable[[int], bytes] = os.urandom,
    ) -> None:
        self.role = role
        self._channel = channel
        self._cid = cid
        self._random_bytes = random_bytes
        self.io_capability = IoCapability.NO_INPUT_NO_OUTPUT
        self.auth_req = AUTH_REQ_BONDING
        self.handle: int | None = None
        self.failed_reason: PairingFailedReason | None = None
        self.pairing_complete = False
        self.received: list[bytes] = []

    @property
    def done(self) -> bool:
        return self.pairing_complete or self.failed_reason is not None

    def handlers(self) -> Handlers:
        return Handlers(
            on_connect=self.on_connect,
            on_message=self.on_message,
            on_disconnect=self.on_disconnect,
        )

    def features(
        self,
        opcode: Opcode,
        max_key_size: int = MAX_ENC_KEY_SIZE,
        init_dist: int = INIT_KEY_DIST,
        rsp_dist: int = RSP_KEY_DIST,
    ) -> bytes:
        """Build a Pairing Request/Response PDU from this device's features."""
        return bytes([
            opcode,
            self.io_capability,
            0x00,  # OOB data not present
            self.auth_req,
            max_key_size,
            init_dist,
            rsp_dist,
        ])

    def on_connect(self, handle: int) -> None:
        if self.handle is not None:
            return
        self.handle = handle
        logger.info(f"Peer: {self.role.value} connected on {handle:#06x}")
        if self.role is Role.INITIATOR:
            self._send(self.features(Opcode.PAIRING_REQUEST))

    def on_disconnect(self, handle: int) -> None:
        if handle == self.handle:
            logger.info(f"Peer: connection {handle:#06x} closed")
            self.handle = None

    def on_message(self, handle: int, pdu: bytes) -> None:
        if handle != self.handle or not pdu:
            return
        self.received.append(pdu)
        logger.log(TRACE, f"Peer: received {pdu.hex()}")
        if self.done:
            logger.debug("Peer: pairing finished, ignoring PDU")
            return

        try:
            if self.role is Role.RESPONDER:
                self._as_responder(pdu)
            else:
                self._as_initiator(pdu)
        except ChannelError as e:
            logger.warning(f"Peer: send failed: {e}")

    # -------------------------------------------------------------------------
    # Role handlers
    # -------------------------------------------------------------------------

    def _as_responder(self, pdu: bytes) -> None:
        match pdu[0]:
            case Opcode.PAIRING_REQUEST:
                self._handle_pairing_request(pdu)
            case Opcode.PAIRING_CONFIRM | Opcode.PAIRING_RANDOM:
                if len(pdu) != PAIRING_VALUE_SIZE:
                    self._fail(PairingFailedReason.INVALID_PARAMETERS)
                    return
                self._send_value(Opcode(pdu[0]))
                if pdu[0] == Opcode.PAIRING_RANDOM:
                    self.pairing_complete = True
                    logger.info("Peer: random values exchanged")
            case _:
                self._fail(PairingFailedReason.COMMAND_NOT_SUPPORTED)

    def _as_initiator(self, pdu: bytes) -> None:
        match pdu[0]:
            case Opcode.PAIRING_RESPONSE:
                self._send_value(Opcode.PAIRING_CONFIRM)
            case Opcode.PAIRING_CONFIRM:
                self._send_value(Opcode.PAIRING_RANDOM)
            case Opcode.PAIRING_RANDOM:
                self.pairing_complete = True
                logger.info("Peer: random values exchanged")
            case Opcode.PAIRING_FAILED:
                self.failed_reason = self._failed_reason(pdu)
                logger.info(f"Peer: pairing failed by remote ({self.failed_reason.name})")
            case _:
                self._fail(PairingFailedReason.COMMAND_NOT_SUPPORTED)

    def _failed_reason(self, pdu: bytes) -> PairingFailedReason:
        if len(pdu) != PAIRING_FAILED_SIZE:
            logger.warning(f"Peer: malformed Pairing Failed {pdu.hex()}")
            return PairingFailedReason.UNSPECIFIED_REASON
        try:
            return PairingFailedReason(pdu[1])
        except ValueError:
            return PairingFailedReason.UNSPECIFIED_REASON

    def _handle_pairing_request(self, pdu: bytes) -> None:
        if len(pdu) != PAIRING_FEATURES_SIZE:
            self._fail(PairingFailedReason.INVALID_PARAMETERS)
            return

        max_key_size, init_dist, rsp_dist = pdu[4], pdu[5], pdu[6]
        if not MIN_ENC_KEY_SIZE <= max_key_size <= MAX_ENC_KEY_SIZE:
            logger.info(f"Peer: rejecting key size {max_key_size}")
            self._fail(PairingFailedReason.ENCRYPTION_KEY_SIZE)
            return

        self._send(self.features(
            Opcode.PAIRING_RESPONSE,
            max_key_size=max_key_size,
            init_dist=init_dist & INIT_KEY_DIST,
            rsp_dist=rsp_dist & RSP_KEY_DIST,
        ))

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------

    def _send(self, pdu: bytes) -> None:
        if self.handle is None:
            raise ChannelError("Peer is not connected")
        self._channel.send(self.handle, self._cid, pdu)
        logger.log(TRACE, f"Peer: sent {pdu.hex()}")

    def _send_value(self, opcode: Opcode) -> None:
        self._send(bytes([opcode]) + self._random_bytes(PAIRING_VALUE_SIZE - 1))

    def _fail(self, reason: PairingFailedReason) -> None:
        self.failed_reason = reason
        logger.info(f"Peer: sending Pairing Failed ({reason.name})")
        self._send(bytes([Opcode.PAIRING_FAILED, reason]))
