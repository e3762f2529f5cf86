"""Responder engine for smp-testkit.

Plays the responder side of a script:
  1. Wait for the peer's request for round k
  2. Validate it against script[k].request
  3. Send script[k].response, or pass if the round has none
"""

import logging

from common.connection import Role
from session.exchange import ExchangeEngine
from session.state import ExchangeState

logger = logging.getLogger(__name__)


class ResponderEngine(ExchangeEngine):
    """Validates inbound requests and transmits the scripted replies."""

    role = Role.RESPONDER

    def _connected(self, state: ExchangeState) -> None:
        logger.debug(f"Responder: awaiting request 1/{len(state.script)}")

    def _handle(self, state: ExchangeState, pdu: bytes) -> None:
        if state.exhausted:
            # Trailing traffic once the script is complete
            self._pass()
            return

        round_index = state.position
        entry = state.advance()
        self._validate(round_index, pdu, entry.request)
        logger.debug(f"Responder: request {round_index + 1}/{len(state.script)} matched")

        if entry.response is None:
            logger.info("Responder: final round has no response, script complete")
            self._pass()
            return

        self._send(state, entry.response)

        if state.exhausted:
            logger.info("Responder: script complete")
            self._pass()
