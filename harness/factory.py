"""Engine factory for smp-testkit.

Every call builds a new engine bound to a new ExchangeState, so nothing
carries over from one test case to the next.
"""

from channel.base import Channel, Handlers
from common.connection import Role
from common.protocol import SMP_CID
from initiator.engine import InitiatorEngine
from responder.engine import ResponderEngine
from session.exchange import ExchangeEngine
from session.result import Reporter
from session.script import Script

ENGINES: dict[Role, type[ExchangeEngine]] = {
    Role.INITIATOR: InitiatorEngine,
    Role.RESPONDER: ResponderEngine,
}


def make_engine(
    script: Script,
    role: Role,
    channel: Channel,
    reporter: Reporter,
    cid: int = SMP_CID,
) -> ExchangeEngine:
    """Create the engine that plays script in the given role."""
    return ENGINES[role](script, channel, reporter, cid=cid)


def make_handlers(
    script: Script,
    role: Role,
    channel: Channel,
    reporter: Reporter,
    cid: int = SMP_CID,
) -> Handlers:
    """Create connection and message handlers ready to register with a channel."""
    return make_engine(script, role, channel, reporter, cid=cid).handlers()
