"""Simulated device under test for smp-testkit.

- simulated: SimulatedPeer, a framing-level SMP implementation
- runner: run_peer() serving the harness over a serial port

Note: run_peer is not exported here; import it from peer.runner.
"""

from peer.simulated import SimulatedPeer

__all__ = ["SimulatedPeer"]
