"""Unit tests for the script model and exchange state."""

import pytest

from session.script import OutOfRange, Script, ScriptEntry
from session.state import ExchangeState


def _script(count: int = 3) -> Script:
    return Script([ScriptEntry(bytes([0x01, i]), bytes([0x02, i])) for i in range(count)])


@pytest.mark.unit
class TestScriptEntry:
    """Tests for ScriptEntry."""

    def test_response_defaults_to_none(self) -> None:
        entry = ScriptEntry(b"\x04" + bytes(16))
        assert entry.response is None

    def test_empty_request_rejected(self) -> None:
        with pytest.raises(ValueError):
            ScriptEntry(b"")

    def test_empty_response_rejected(self) -> None:
        with pytest.raises(ValueError):
            ScriptEntry(b"\x01", b"")

    def test_bytearray_normalised_to_bytes(self) -> None:
        entry = ScriptEntry(bytearray(b"\x01\x02"), bytearray(b"\x02\x03"))
        assert type(entry.request) is bytes
        assert type(entry.response) is bytes

    def test_frozen(self) -> None:
        entry = ScriptEntry(b"\x01")
        with pytest.raises(AttributeError):
            entry.request = b"\x02"  # type: ignore[misc]


@pytest.mark.unit
class TestScript:
    """Tests for Script."""

    def test_empty_script_rejected(self) -> None:
        with pytest.raises(ValueError):
            Script([])

    def test_length(self) -> None:
        script = _script(3)
        assert script.length() == 3
        assert len(script) == 3

    def test_entry_at(self) -> None:
        script = _script(3)
        assert script.entry_at(1).request == b"\x01\x01"
        assert script.entry_at(2).response == b"\x02\x02"

    def test_entry_at_past_end(self) -> None:
        script = _script(2)
        with pytest.raises(OutOfRange):
            script.entry_at(2)

    def test_entry_at_negative(self) -> None:
        with pytest.raises(OutOfRange):
            _script(2).entry_at(-1)

    def test_out_of_range_is_index_error(self) -> None:
        assert issubclass(OutOfRange, IndexError)

    def test_generator_input_is_captured(self) -> None:
        script = Script(ScriptEntry(bytes([0x01, i])) for i in range(2))
        assert len(script) == 2
        assert [e.request for e in script] == [b"\x01\x00", b"\x01\x01"]

    def test_source_list_mutation_does_not_leak(self) -> None:
        entries = [ScriptEntry(b"\x01")]
        script = Script(entries)
        entries.append(ScriptEntry(b"\x02"))
        assert len(script) == 1


@pytest.mark.unit
class TestExchangeState:
    """Tests for ExchangeState."""

    def test_starts_at_zero(self) -> None:
        state = ExchangeState(script=_script(2), handle=0x0040)
        assert state.position == 0
        assert not state.exhausted

    def test_advance_increments_by_one(self) -> None:
        state = ExchangeState(script=_script(2), handle=0x0040)
        first = state.advance()
        assert first.request == b"\x01\x00"
        assert state.position == 1
        second = state.advance()
        assert second.request == b"\x01\x01"
        assert state.position == 2
        assert state.exhausted

    def test_advance_past_end_raises(self) -> None:
        state = ExchangeState(script=_script(1), handle=0x0040)
        state.advance()
        with pytest.raises(OutOfRange):
            state.advance()
        assert state.position == 1

    def test_states_share_script_not_position(self) -> None:
        script = _script(2)
        a = ExchangeState(script=script, handle=1)
        b = ExchangeState(script=script, handle=2)
        a.advance()
        assert a.position == 1
        assert b.position == 0
