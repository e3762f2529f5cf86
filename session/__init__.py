"""Scripted exchange core for smp-testkit.

This package holds the role-independent parts of a scripted pairing test:
- Script model (ScriptEntry, Script)
- PDU classification (exact vs. length-only comparison)
- Per-connection ExchangeState
- ExchangeEngine base class
- Verdicts, case results and reports

The role engines live in responder/ and initiator/.
"""

from session.classifier import MatchRule, check_pdu, is_non_deterministic, match_rule, outbound_pdu
from session.exchange import ExchangeEngine
from session.report import CaseReport, SuiteReport
from session.result import CaseResult, Reporter, ScriptMismatch, Verdict, VerdictRecorder
from session.script import OutOfRange, Script, ScriptEntry
from session.state import ExchangeState

__all__ = [
    "CaseReport",
    "CaseResult",
    "ExchangeEngine",
    "ExchangeState",
    "MatchRule",
    "OutOfRange",
    "Reporter",
    "Script",
    "ScriptEntry",
    "ScriptMismatch",
    "SuiteReport",
    "Verdict",
    "VerdictRecorder",
    "check_pdu",
    "is_non_deterministic",
    "match_rule",
    "outbound_pdu",
]
