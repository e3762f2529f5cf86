"""Initiator engine for smp-testkit.

Plays the initiator side of a script:
  1. On connect, send script[0].request
  2. On each reply, validate it against script[k].response
  3. Send script[k + 1].request, or pass after the last round
"""

import logging

from common.connection import Role
from session.exchange import ExchangeEngine
from session.state import ExchangeState

logger = logging.getLogger(__name__)


class InitiatorEngine(ExchangeEngine):
    """Transmits scripted requests and validates the replies."""

    role = Role.INITIATOR

    def _connected(self, state: ExchangeState) -> None:
        logger.info("Initiator: sending first request")
        self._send(state, state.current().request)

    def _handle(self, state: ExchangeState, pdu: bytes) -> None:
        if state.exhausted:
            self._pass()
            return

        round_index = state.position
        entry = state.advance()
        if entry.response is None:
            # Round expects no reply; whatever arrived is not checked
            logger.debug(f"Initiator: round {round_index + 1} has no response, accepting PDU")
        else:
            self._validate(round_index, pdu, entry.response)
            logger.debug(f"Initiator: response {round_index + 1}/{len(state.script)} matched")

        if state.exhausted:
            logger.info("Initiator: script complete")
            self._pass()
            return

        self._send(state, state.current().request)
