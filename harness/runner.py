"""Case runner for smp-testkit.

Contains CaseRunner, which plays test cases one after another over a link,
each on its own connection with its own engine, and enforces the per-case
deadline. The engines never time out themselves; a peer that stops
responding is caught here.
"""

import itertools
import logging
import time
from collections.abc import Callable, Iterable
from enum import IntEnum

from channel.base import Link
from channel.loopback import LoopbackChannel
from channel.serial_link import SerialChannel
from common.connection import ChannelError
from common.protocol import DEFAULT_CASE_TIMEOUT_S, LINK_POLL_S, SMP_CID
from harness.cases import TestCase
from harness.factory import make_engine
from peer.simulated import SimulatedPeer
from session.report import SuiteReport
from session.result import CaseResult, Verdict, VerdictRecorder

logger = logging.getLogger(__name__)

LinkFactory = Callable[[TestCase], Link]

# First connection handle handed out by a runner
FIRST_HANDLE = 0x0040


class ExitCode(IntEnum):
    """Exit codes for test runs."""

    SUCCESS = 0  # Every selected case passed
    CASE_FAILED = 1  # At least one case failed
    SETUP_FAILED = 2  # Serial port could not be opened
    NO_CASES = 3  # Filters selected nothing


def loopback_link(case: TestCase) -> Link:
    """Fresh in-memory link with a simulated device playing the opposite role."""
    channel = LoopbackChannel()
    peer = SimulatedPeer(case.role.peer, channel.endpoint_b)
    channel.endpoint_b.register(SMP_CID, peer.handlers())
    return channel.endpoint_a


def serial_link_factory(channel: SerialChannel) -> LinkFactory:
    """Reuse one serial channel for every case, announcing the case's role."""

    def factory(case: TestCase) -> Link:
        channel.local_role = case.role
        return channel

    return factory


class CaseRunner:
    """Runs test cases sequentially over links from link_factory."""

    def __init__(
        self,
        link_factory: LinkFactory = loopback_link,
        timeout_s: float = DEFAULT_CASE_TIMEOUT_S,
        first_handle: int = FIRST_HANDLE,
    ) -> None:
        self._link_factory = link_factory
        self.timeout_s = timeout_s
        self._handles = itertools.count(first_handle)

    def run_case(self, case: TestCase) -> CaseResult:
        """Run one case to a verdict or to its deadline."""
        link = self._link_factory(case)
        recorder = VerdictRecorder(case.name)
        engine = make_engine(case.script, case.role, link, recorder)
        handle = next(self._handles)

        logger.info(f"Running '{case.name}' as {case.role.value} (handle {handle:#06x})")
        link.register(SMP_CID, engine.handlers())
        start = time.monotonic()
        deadline = start + self.timeout_s

        try:
            link.connect(handle)
            while recorder.pending:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    recorder.report_failed(
                        f"Timed out after {self.timeout_s}s at round {engine.position}"
                    )
                    break
                if not link.poll(min(remaining, LINK_POLL_S)) and link.idle:
                    recorder.report_failed(f"Peer stopped responding at round {engine.position}")
                    break
        except ChannelError as e:
            recorder.report_failed(f"Channel error: {e}")
        finally:
            link.disconnect(handle)
            link.unregister(SMP_CID)

        return CaseResult(
            name=case.name,
            role=case.role,
            passed=recorder.verdict is Verdict.PASSED,
            rounds=engine.position,
            script_length=len(case.script),
            sent=engine.sent,
            received=engine.received,
            elapsed_s=time.monotonic() - start,
            error=recorder.reason,
        )

    def run_suite(self, cases: Iterable[TestCase]) -> list[CaseResult]:
        results = [self.run_case(case) for case in cases]
        passed = sum(1 for r in results if r.passed)
        logger.info(f"Suite complete: {passed}/{len(results)} passed")
        return results


def exit_code(report: SuiteReport) -> ExitCode:
    """Map a suite report to an exit code."""
    if not report.results:
        return ExitCode.NO_CASES
    return ExitCode.SUCCESS if report.success() else ExitCode.CASE_FAILED
