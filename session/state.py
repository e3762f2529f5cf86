"""Per-connection exchange state."""

from dataclasses import dataclass

from session.script import Script, ScriptEntry


@dataclass
class ExchangeState:
    """Progress of one script on one connection.

    position counts validated rounds: 0 <= position <= len(script).
    """

    script: Script
    handle: int
    position: int = 0

    @property
    def exhausted(self) -> bool:
        return self.position >= len(self.script)

    def advance(self) -> ScriptEntry:
        """Consume the current round and return its entry."""
        entry = self.script.entry_at(self.position)
        self.position += 1
        return entry

    def current(self) -> ScriptEntry:
        return self.script.entry_at(self.position)
