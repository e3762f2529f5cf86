"""Protocol definitions for smp-testkit.

Contains:
- Opcode enum for Security Manager Protocol PDUs
- PairingFailedReason and IoCapability enums
- SMP channel identifier and PDU sizes
- SerialPort Protocol for type checking
- Timing constants and logging configuration
"""

import logging
import os
from enum import IntEnum
from typing import Protocol

# TRACE logging level (below DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Fixed L2CAP channel identifier for SMP over LE
SMP_CID = 0x0006


class Opcode(IntEnum):
    """SMP PDU opcodes (first byte of every PDU)."""

    PAIRING_REQUEST = 0x01
    PAIRING_RESPONSE = 0x02
    PAIRING_CONFIRM = 0x03
    PAIRING_RANDOM = 0x04
    PAIRING_FAILED = 0x05
    ENCRYPTION_INFO = 0x06
    MASTER_IDENT = 0x07
    IDENTITY_INFO = 0x08
    IDENTITY_ADDR_INFO = 0x09
    SIGNING_INFO = 0x0A
    SECURITY_REQUEST = 0x0B
    PAIRING_PUBLIC_KEY = 0x0C
    PAIRING_DHKEY_CHECK = 0x0D
    KEYPRESS_NOTIFICATION = 0x0E


class PairingFailedReason(IntEnum):
    """Reason codes carried by a Pairing Failed PDU."""

    PASSKEY_ENTRY_FAILED = 0x01
    OOB_NOT_AVAILABLE = 0x02
    AUTH_REQUIREMENTS = 0x03
    CONFIRM_VALUE_FAILED = 0x04
    PAIRING_NOT_SUPPORTED = 0x05
    ENCRYPTION_KEY_SIZE = 0x06
    COMMAND_NOT_SUPPORTED = 0x07
    UNSPECIFIED_REASON = 0x08
    REPEATED_ATTEMPTS = 0x09
    INVALID_PARAMETERS = 0x0A


class IoCapability(IntEnum):
    """IO capability field of Pairing Request/Response."""

    DISPLAY_ONLY = 0x00
    DISPLAY_YES_NO = 0x01
    KEYBOARD_ONLY = 0x02
    NO_INPUT_NO_OUTPUT = 0x03
    KEYBOARD_DISPLAY = 0x04


class SerialPort(Protocol):
    """Protocol for serial port operations needed by the serial link."""

    def write(self, data: bytes, /) -> int | None: ...
    def read(self, size: int = ..., /) -> bytes: ...


# PDU sizes in bytes, opcode included
PAIRING_FEATURES_SIZE = 7  # Pairing Request / Pairing Response
PAIRING_VALUE_SIZE = 17  # Pairing Confirm / Pairing Random (opcode + 128-bit value)
PAIRING_FAILED_SIZE = 2

# Encryption key size bounds (bytes)
MIN_ENC_KEY_SIZE = 7
MAX_ENC_KEY_SIZE = 16

# Bonding flag in the AuthReq field
AUTH_REQ_BONDING = 0x01

# Default configuration (configurable via envvars)
DEFAULT_CASE_TIMEOUT_S = float(os.environ.get("SMP_CASE_TIMEOUT_S", "2.0"))
DEFAULT_BAUDRATE = int(os.environ.get("SMP_BAUDRATE", "115200"))

# Poll interval for link event pumps
LINK_POLL_S = 0.1
