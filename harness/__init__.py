"""Test harness for smp-testkit.

- factory: make_engine/make_handlers, one fresh engine per test case
- cases: TestCase and the built-in catalog
- runner: CaseRunner with per-case deadline, loopback and serial link factories

Note: runner is not exported here to keep peer/ and channel/ imports out of
the factory; import it from harness.runner.
"""

from harness.cases import CATALOG, TestCase, select_cases
from harness.factory import make_engine, make_handlers

__all__ = [
    "CATALOG",
    "TestCase",
    "make_engine",
    "make_handlers",
    "select_cases",
]
