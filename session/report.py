"""Case and suite reporting for smp-testkit.

Contains:
- Report: Base for printable pass/fail reports
- CaseReport: Status line for one test case
- SuiteReport: Per-case lines plus a summary
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from session.result import CaseResult


class Report(ABC):
    """Something that prints itself and knows whether it passed."""

    @abstractmethod
    def print(self) -> None: ...

    @abstractmethod
    def success(self) -> bool: ...


@dataclass
class CaseReport(Report):
    """Report for a single test case."""

    result: CaseResult

    def print(self) -> None:
        r = self.result
        counts = (
            f"{r.rounds}/{r.script_length} rounds, {r.sent} sent, "
            f"{r.received} received, {r.elapsed_s:.2f}s"
        )
        if r.passed:
            print(f"{r.name}: PASSED ({counts})")
        else:
            print(f"{r.name}: FAILED ({r.error})")
            print(f"    ({counts})")

    def success(self) -> bool:
        return self.result.passed


@dataclass
class SuiteReport(Report):
    """Report for a sequence of test cases."""

    results: list[CaseResult] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return len(self.results) - self.passed

    def print(self) -> None:
        for result in self.results:
            CaseReport(result=result).print()
        print(f"Summary: {self.passed} passed, {self.failed} failed, {len(self.results)} total")

    def success(self) -> bool:
        """Return True if at least one case ran and none failed."""
        return bool(self.results) and all(CaseReport(result=r).success() for r in self.results)
