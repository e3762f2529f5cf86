"""Built-in SMP test cases.

"SMP Server" cases check a device acting as pairing responder, so the
harness plays the initiator. "SMP Client" cases check a device acting as
pairing initiator, so the harness plays the responder.
"""

from dataclasses import dataclass

from common.connection import Role
from common.protocol import Opcode, PairingFailedReason
from session.script import Script, ScriptEntry


@dataclass(frozen=True)
class TestCase:
    """A named script and the role the harness plays with it."""

    __test__ = False  # Not a pytest test class

    name: str
    role: Role
    script: Script
    description: str = ""


# Pairing Request: NoInputNoOutput, no OOB, bonding without MITM,
# 16-byte max key, no initiator keys, EncKey from responder
BASIC_PAIRING_REQUEST = bytes([Opcode.PAIRING_REQUEST, 0x03, 0x00, 0x01, 0x10, 0x00, 0x01])
BASIC_PAIRING_RESPONSE = bytes([Opcode.PAIRING_RESPONSE, 0x03, 0x00, 0x01, 0x10, 0x00, 0x01])

# Confirm and Random with zero values; the opcode is all that matters here
CONFIRM_PDU = bytes([Opcode.PAIRING_CONFIRM]) + bytes(16)
RANDOM_PDU = bytes([Opcode.PAIRING_RANDOM]) + bytes(16)

SECURITY_REQUEST_PDU = bytes([Opcode.SECURITY_REQUEST, 0x00])
ZERO_PAIRING_REQUEST = bytes([Opcode.PAIRING_REQUEST]) + bytes(6)


def pairing_failed(reason: PairingFailedReason) -> bytes:
    return bytes([Opcode.PAIRING_FAILED, reason])


CATALOG: tuple[TestCase, ...] = (
    TestCase(
        name="SMP Server - Basic Request 1",
        role=Role.INITIATOR,
        script=Script([
            ScriptEntry(BASIC_PAIRING_REQUEST, BASIC_PAIRING_RESPONSE),
            ScriptEntry(CONFIRM_PDU, CONFIRM_PDU),
            ScriptEntry(RANDOM_PDU),
        ]),
        description="Feature exchange, confirm and random with a responding device",
    ),
    TestCase(
        name="SMP Server - Invalid Request 1",
        role=Role.INITIATOR,
        script=Script([
            ScriptEntry(SECURITY_REQUEST_PDU, pairing_failed(PairingFailedReason.COMMAND_NOT_SUPPORTED)),
        ]),
        description="Security Request sent to a responder is rejected as unsupported",
    ),
    TestCase(
        name="SMP Server - Invalid Request 2",
        role=Role.INITIATOR,
        script=Script([
            ScriptEntry(ZERO_PAIRING_REQUEST, pairing_failed(PairingFailedReason.ENCRYPTION_KEY_SIZE)),
        ]),
        description="Pairing Request with a zero key size is rejected",
    ),
    TestCase(
        name="SMP Client - Basic Request 1",
        role=Role.RESPONDER,
        script=Script([
            ScriptEntry(BASIC_PAIRING_REQUEST, BASIC_PAIRING_RESPONSE),
            ScriptEntry(CONFIRM_PDU, CONFIRM_PDU),
        ]),
        description="Feature exchange and confirm with an initiating device",
    ),
)


def select_cases(
    cases: tuple[TestCase, ...] = CATALOG,
    name_filter: str | None = None,
    role: Role | None = None,
) -> list[TestCase]:
    """Return cases whose name contains name_filter (case-insensitive) and whose role matches."""
    selected = []
    for case in cases:
        if name_filter and name_filter.lower() not in case.name.lower():
            continue
        if role is not None and case.role is not role:
            continue
        selected.append(case)
    return selected
