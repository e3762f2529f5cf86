"""Scripted exchange engine base for smp-testkit.

Contains ExchangeEngine, the role-independent half of the responder and
initiator engines: binding an ExchangeState to a connection, routing
inbound PDUs, sending scripted PDUs and reporting exactly one verdict.
"""

import logging
from abc import ABC, abstractmethod

from channel.base import Channel, Handlers
from common.connection import ChannelError, Role
from common.protocol import SMP_CID, TRACE
from session.classifier import check_pdu, outbound_pdu
from session.result import Reporter, ScriptMismatch, Verdict
from session.script import Script
from session.state import ExchangeState

logger = logging.getLogger(__name__)


class ExchangeEngine(ABC):
    """Plays one script on one connection.

    Subclasses implement the role-specific transitions in _connected() and
    _handle(). All state lives on the instance; create one engine per case.
    """

    role: Role

    def __init__(
        self,
        script: Script,
        channel: Channel,
        reporter: Reporter,
        cid: int = SMP_CID,
    ) -> None:
        self.script = script
        self._channel = channel
        self._reporter = reporter
        self._cid = cid
        self.state: ExchangeState | None = None
        self.verdict = Verdict.PENDING
        self.closed = False
        self.sent = 0
        self.received = 0

    @property
    def position(self) -> int:
        return self.state.position if self.state else 0

    def handlers(self) -> Handlers:
        return Handlers(
            on_connect=self.on_connect,
            on_message=self.on_message,
            on_disconnect=self.on_disconnect,
        )

    # -------------------------------------------------------------------------
    # Channel callbacks
    # -------------------------------------------------------------------------

    def on_connect(self, handle: int) -> None:
        if self.closed or self.verdict is not Verdict.PENDING:
            return
        if self.state is not None:
            logger.warning(
                f"{self.role.value}: ignoring connection {handle:#06x}, "
                f"already bound to {self.state.handle:#06x}"
            )
            return

        logger.info(f"{self.role.value}: new connection with handle {handle:#06x}")
        self.state = ExchangeState(script=self.script, handle=handle)
        try:
            self._connected(self.state)
        except ChannelError as e:
            self._fail(f"Send failed on connect: {e}")

    def on_message(self, handle: int, pdu: bytes) -> None:
        if self.verdict is not Verdict.PENDING:
            logger.log(TRACE, f"{self.role.value}: ignoring PDU after {self.verdict.value}")
            return
        if self.closed or self.state is None or handle != self.state.handle:
            logger.debug(f"{self.role.value}: ignoring PDU for unbound handle {handle:#06x}")
            return

        self.received += 1
        logger.log(TRACE, f"{self.role.value}: received {pdu.hex()} at round {self.state.position}")
        try:
            self._handle(self.state, pdu)
        except ScriptMismatch as e:
            self._fail(str(e))
        except ChannelError as e:
            self._fail(f"Send failed at round {self.state.position}: {e}")

    def on_disconnect(self, handle: int) -> None:
        if self.closed or self.state is None or handle != self.state.handle:
            return
        logger.info(
            f"{self.role.value}: connection {handle:#06x} closed at round {self.state.position}"
        )
        # Abandoned: nothing is reported and later events are dropped
        self.closed = True

    # -------------------------------------------------------------------------
    # Helpers for subclasses
    # -------------------------------------------------------------------------

    def _validate(self, round_index: int, pdu: bytes, expected: bytes) -> None:
        check_pdu(round_index, pdu, expected)

    def _send(self, state: ExchangeState, pdu: bytes) -> None:
        data = outbound_pdu(pdu)
        self._channel.send(state.handle, self._cid, data)
        self.sent += 1
        logger.log(TRACE, f"{self.role.value}: sent {data.hex()}")

    def _pass(self) -> None:
        self.verdict = Verdict.PASSED
        self._reporter.report_passed()

    def _fail(self, reason: str) -> None:
        self.verdict = Verdict.FAILED
        self._reporter.report_failed(reason)

    @abstractmethod
    def _connected(self, state: ExchangeState) -> None:
        """Run the role's action for a freshly bound connection."""

    @abstractmethod
    def _handle(self, state: ExchangeState, pdu: bytes) -> None:
        """Run one round for an inbound PDU."""
