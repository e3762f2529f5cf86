"""Verdict and result types for smp-testkit.

Contains:
- ScriptMismatch: Raised when an inbound PDU disagrees with the script
- Verdict: Outcome of one test case
- VerdictRecorder: Reporter that keeps the first verdict only
- CaseResult: Result of running one test case
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from common.connection import Role

logger = logging.getLogger(__name__)


class ScriptMismatch(Exception):
    """Raised when an inbound PDU does not match the expected script entry."""

    def __init__(self, round_index: int, expected: bytes, actual: bytes) -> None:
        self.round_index = round_index
        self.expected = expected
        self.actual = actual
        if len(actual) != len(expected):
            detail = f"unexpected PDU length ({len(actual)} != {len(expected)})"
        else:
            detail = f"unexpected PDU (expected {expected.hex()}, got {actual.hex()})"
        super().__init__(f"Round {round_index}: {detail}")

    @property
    def expected_len(self) -> int:
        return len(self.expected)

    @property
    def actual_len(self) -> int:
        return len(self.actual)


class Verdict(Enum):
    """Outcome of a test case."""

    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"


class Reporter(Protocol):
    """Verdict sink used by the exchange engines."""

    def report_passed(self) -> None: ...
    def report_failed(self, reason: str) -> None: ...


class VerdictRecorder:
    """Records the first verdict reported for a case and ignores the rest."""

    def __init__(self, case_name: str = "") -> None:
        self.case_name = case_name
        self.verdict = Verdict.PENDING
        self.reason: str | None = None

    @property
    def pending(self) -> bool:
        return self.verdict is Verdict.PENDING

    def report_passed(self) -> None:
        if not self.pending:
            logger.debug(f"{self.case_name}: ignoring pass after {self.verdict.value}")
            return
        self.verdict = Verdict.PASSED
        logger.info(f"{self.case_name}: passed")

    def report_failed(self, reason: str) -> None:
        if not self.pending:
            logger.debug(f"{self.case_name}: ignoring failure after {self.verdict.value}: {reason}")
            return
        self.verdict = Verdict.FAILED
        self.reason = reason
        logger.warning(f"{self.case_name}: failed: {reason}")


@dataclass
class CaseResult:
    """Result of running one test case.

    Attributes:
        name: Test case name.
        role: Role played by the harness.
        passed: True if the script completed.
        rounds: Rounds consumed when the case ended.
        script_length: Total rounds in the script.
        sent: PDUs transmitted by the harness.
        received: PDUs received from the peer.
        elapsed_s: Case duration in seconds.
        error: Failure reason if the case failed.
    """

    name: str
    role: Role
    passed: bool
    rounds: int = 0
    script_length: int = 0
    sent: int = 0
    received: int = 0
    elapsed_s: float = 0.0
    error: str | None = None
