"""Script model for smp-testkit.

Contains:
- ScriptEntry: One round of expected request and canned response
- Script: Immutable ordered list of rounds for one test case
- OutOfRange: Raised when a script is indexed past its end
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass


class OutOfRange(IndexError):
    """Raised when a script is indexed outside its entries."""

    pass


@dataclass(frozen=True)
class ScriptEntry:
    """One scripted round.

    request is the PDU the peer must send. response is the PDU sent back,
    or None when the round expects no reply.
    """

    request: bytes
    response: bytes | None = None

    def __post_init__(self) -> None:
        if not self.request:
            raise ValueError("ScriptEntry request must contain at least the opcode")
        if self.response is not None and not self.response:
            raise ValueError("ScriptEntry response must be None or non-empty")
        # Normalise bytearray/memoryview input so entries stay immutable
        object.__setattr__(self, "request", bytes(self.request))
        if self.response is not None:
            object.__setattr__(self, "response", bytes(self.response))


class Script:
    """Immutable ordered sequence of ScriptEntry, length >= 1."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[ScriptEntry]) -> None:
        self._entries: tuple[ScriptEntry, ...] = tuple(entries)
        if not self._entries:
            raise ValueError("Script must contain at least one entry")

    def length(self) -> int:
        return len(self._entries)

    def entry_at(self, index: int) -> ScriptEntry:
        """Return the entry for round index.

        Raises OutOfRange if index is not within [0, length()).
        """
        if not 0 <= index < len(self._entries):
            raise OutOfRange(f"Round {index} outside script of length {len(self._entries)}")
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ScriptEntry]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"Script({len(self._entries)} rounds)"
