"""Unit tests for behaviour shared by both engines.

Covers connection binding, disconnect handling, send failures, the engine
factory and the first-verdict-wins recorder.
"""

import pytest

from common.connection import Role
from harness.factory import make_engine, make_handlers
from initiator.engine import InitiatorEngine
from responder.engine import ResponderEngine
from session.result import Verdict, VerdictRecorder
from session.script import Script, ScriptEntry

HANDLE = 0x0040
OTHER_HANDLE = 0x0041

REQUEST = bytes([0x01, 0x03, 0x00, 0x01, 0x10, 0x00, 0x01])
RESPONSE = bytes([0x02, 0x03, 0x00, 0x01, 0x10, 0x00, 0x01])


def _script() -> Script:
    return Script([ScriptEntry(REQUEST, RESPONSE), ScriptEntry(b"\x03" + bytes(16), b"\x03" + bytes(16))])


@pytest.mark.unit
class TestConnectionBinding:
    """Tests for connect handling."""

    @pytest.mark.parametrize("role", [Role.INITIATOR, Role.RESPONDER])
    def test_message_before_connect_ignored(self, channel, reporter, role) -> None:
        engine = make_engine(_script(), role, channel, reporter)
        engine.on_message(HANDLE, RESPONSE)
        assert engine.received == 0
        assert reporter.calls == []
        assert engine.position == 0

    @pytest.mark.parametrize("role", [Role.INITIATOR, Role.RESPONDER])
    def test_message_on_other_handle_ignored(self, channel, reporter, role) -> None:
        engine = make_engine(_script(), role, channel, reporter)
        engine.on_connect(HANDLE)
        engine.on_message(OTHER_HANDLE, b"\xff")
        assert reporter.calls == []
        assert engine.position == 0

    def test_second_connect_ignored(self, channel, reporter) -> None:
        engine = InitiatorEngine(_script(), channel, reporter)
        engine.on_connect(HANDLE)
        engine.on_connect(OTHER_HANDLE)
        assert engine.state.handle == HANDLE
        assert channel.pdus == [REQUEST]

    def test_connect_send_failure_reports_failed(self, channel, reporter) -> None:
        channel.fail = True
        engine = InitiatorEngine(_script(), channel, reporter)
        engine.on_connect(HANDLE)
        assert reporter.verdicts == ["failed"]
        assert "Send failed on connect" in reporter.calls[0][1]
        assert engine.verdict is Verdict.FAILED

    def test_response_send_failure_reports_failed(self, channel, reporter) -> None:
        engine = ResponderEngine(_script(), channel, reporter)
        engine.on_connect(HANDLE)
        channel.fail = True
        engine.on_message(HANDLE, REQUEST)
        assert reporter.verdicts == ["failed"]
        assert "round 1" in reporter.calls[0][1]

    def test_counts_sent_and_received(self, channel, reporter) -> None:
        engine = ResponderEngine(_script(), channel, reporter)
        engine.on_connect(HANDLE)
        engine.on_message(HANDLE, REQUEST)
        assert engine.received == 1
        assert engine.sent == 1


@pytest.mark.unit
class TestDisconnect:
    """A disconnect abandons the case without a verdict."""

    @pytest.mark.parametrize("role", [Role.INITIATOR, Role.RESPONDER])
    def test_disconnect_reports_nothing(self, channel, reporter, role) -> None:
        engine = make_engine(_script(), role, channel, reporter)
        engine.on_connect(HANDLE)
        engine.on_disconnect(HANDLE)
        assert engine.closed
        assert engine.verdict is Verdict.PENDING
        assert reporter.calls == []

    def test_messages_after_disconnect_ignored(self, channel, reporter) -> None:
        engine = ResponderEngine(_script(), channel, reporter)
        engine.on_connect(HANDLE)
        engine.on_disconnect(HANDLE)
        engine.on_message(HANDLE, REQUEST)
        assert channel.sent == []
        assert reporter.calls == []

    def test_reconnect_after_disconnect_ignored(self, channel, reporter) -> None:
        engine = InitiatorEngine(_script(), channel, reporter)
        engine.on_connect(HANDLE)
        engine.on_disconnect(HANDLE)
        engine.on_connect(OTHER_HANDLE)
        assert channel.pdus == [REQUEST]

    def test_disconnect_of_other_handle_ignored(self, channel, reporter) -> None:
        engine = ResponderEngine(_script(), channel, reporter)
        engine.on_connect(HANDLE)
        engine.on_disconnect(OTHER_HANDLE)
        assert not engine.closed

    def test_disconnect_after_verdict_keeps_verdict(self, channel, reporter) -> None:
        engine = ResponderEngine(Script([ScriptEntry(REQUEST, RESPONSE)]), channel, reporter)
        engine.on_connect(HANDLE)
        engine.on_message(HANDLE, REQUEST)
        engine.on_disconnect(HANDLE)
        assert engine.verdict is Verdict.PASSED
        assert reporter.verdicts == ["passed"]


@pytest.mark.unit
class TestFactory:
    """Tests for make_engine and make_handlers."""

    def test_role_selects_engine(self, channel, reporter) -> None:
        assert isinstance(make_engine(_script(), Role.INITIATOR, channel, reporter), InitiatorEngine)
        assert isinstance(make_engine(_script(), Role.RESPONDER, channel, reporter), ResponderEngine)

    def test_engines_do_not_share_state(self, channel, reporter) -> None:
        script = _script()
        first = make_engine(script, Role.RESPONDER, channel, reporter)
        first.on_connect(HANDLE)
        first.on_message(HANDLE, REQUEST)

        second = make_engine(script, Role.RESPONDER, channel, reporter)
        assert second.position == 0
        assert second.state is None
        second.on_connect(OTHER_HANDLE)
        second.on_message(OTHER_HANDLE, REQUEST)
        assert channel.sent[-1] == (OTHER_HANDLE, 0x0006, RESPONSE)

    def test_handlers_drive_engine(self, channel, reporter) -> None:
        handlers = make_handlers(Script([ScriptEntry(REQUEST, RESPONSE)]), Role.INITIATOR, channel, reporter)
        handlers.on_connect(HANDLE)
        handlers.on_message(HANDLE, RESPONSE)
        handlers.on_disconnect(HANDLE)
        assert channel.pdus == [REQUEST]
        assert reporter.verdicts == ["passed"]

    def test_custom_cid(self, channel, reporter) -> None:
        engine = make_engine(_script(), Role.INITIATOR, channel, reporter, cid=0x0007)
        engine.on_connect(HANDLE)
        assert channel.sent == [(HANDLE, 0x0007, REQUEST)]


@pytest.mark.unit
class TestVerdictRecorder:
    """Tests for VerdictRecorder."""

    def test_starts_pending(self) -> None:
        recorder = VerdictRecorder("case")
        assert recorder.pending
        assert recorder.reason is None

    def test_first_failure_wins(self) -> None:
        recorder = VerdictRecorder("case")
        recorder.report_failed("first")
        recorder.report_failed("second")
        recorder.report_passed()
        assert recorder.verdict is Verdict.FAILED
        assert recorder.reason == "first"

    def test_pass_then_fail_stays_passed(self) -> None:
        recorder = VerdictRecorder("case")
        recorder.report_passed()
        recorder.report_failed("late")
        assert recorder.verdict is Verdict.PASSED
        assert recorder.reason is None


@pytest.mark.unit
class TestOutboundPdus:
    """Every transmitted PDU is built by outbound_pdu()."""

    @pytest.mark.parametrize("role", [Role.INITIATOR, Role.RESPONDER])
    def test_sends_go_through_outbound_pdu(self, channel, reporter, monkeypatch, role) -> None:
        built: list[bytes] = []

        def fake_outbound(stored: bytes) -> bytes:
            built.append(stored)
            return b"\xee" + stored[1:]

        monkeypatch.setattr("session.exchange.outbound_pdu", fake_outbound)
        engine = make_engine(_script(), role, channel, reporter)
        engine.on_connect(HANDLE)
        engine.on_message(HANDLE, REQUEST if role is Role.RESPONDER else RESPONSE)

        if role is Role.INITIATOR:
            expected = [REQUEST, b"\x03" + bytes(16)]
        else:
            expected = [RESPONSE]
        assert built == expected
        assert channel.pdus == [b"\xee" + pdu[1:] for pdu in built]
