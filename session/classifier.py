"""PDU classification for scripted exchanges.

Pairing Confirm and Pairing Random carry freshly generated cryptographic
values, so two independent stacks never produce the same bytes for them.
For those opcodes only the PDU length is checked; every other opcode must
match the script byte for byte.
"""

import logging
from enum import Enum, auto

from common.protocol import Opcode
from session.result import ScriptMismatch

logger = logging.getLogger(__name__)


class MatchRule(Enum):
    """How an inbound PDU is compared against the script."""

    EXACT = auto()  # Length and every byte must match
    LENGTH_ONLY = auto()  # Non-deterministic content, length must match


MATCH_RULES: dict[Opcode, MatchRule] = {
    Opcode.PAIRING_REQUEST: MatchRule.EXACT,
    Opcode.PAIRING_RESPONSE: MatchRule.EXACT,
    Opcode.PAIRING_CONFIRM: MatchRule.LENGTH_ONLY,
    Opcode.PAIRING_RANDOM: MatchRule.LENGTH_ONLY,
    Opcode.PAIRING_FAILED: MatchRule.EXACT,
    Opcode.ENCRYPTION_INFO: MatchRule.EXACT,
    Opcode.MASTER_IDENT: MatchRule.EXACT,
    Opcode.IDENTITY_INFO: MatchRule.EXACT,
    Opcode.IDENTITY_ADDR_INFO: MatchRule.EXACT,
    Opcode.SIGNING_INFO: MatchRule.EXACT,
    Opcode.SECURITY_REQUEST: MatchRule.EXACT,
    Opcode.PAIRING_PUBLIC_KEY: MatchRule.EXACT,
    Opcode.PAIRING_DHKEY_CHECK: MatchRule.EXACT,
    Opcode.KEYPRESS_NOTIFICATION: MatchRule.EXACT,
}


def match_rule(opcode: int) -> MatchRule:
    """Return the match rule for an opcode byte. Unknown opcodes match exactly."""
    try:
        return MATCH_RULES[Opcode(opcode)]
    except ValueError:
        return MatchRule.EXACT


def is_non_deterministic(opcode: int) -> bool:
    return match_rule(opcode) is MatchRule.LENGTH_ONLY


def check_pdu(round_index: int, pdu: bytes, expected: bytes) -> None:
    """Validate an inbound PDU against the scripted bytes.

    The rule is chosen by the opcode of the inbound PDU.

    Raises:
        ScriptMismatch: If the length differs, or the content differs for
            an opcode that requires an exact match.
    """
    if len(pdu) != len(expected):
        raise ScriptMismatch(round_index, expected, pdu)

    if is_non_deterministic(pdu[0]):
        logger.debug(
            f"Round {round_index}: opcode {pdu[0]:#04x} carries random content, length checked only"
        )
        return

    if pdu != expected:
        raise ScriptMismatch(round_index, expected, pdu)


def outbound_pdu(stored: bytes) -> bytes:
    """Return the bytes to transmit for a scripted PDU.

    Every PDU the engines send passes through here. Stored Confirm and
    Random values are sent verbatim as stand-ins for real cryptographic
    values; computed values would be substituted at this point.
    """
    return bytes(stored)
