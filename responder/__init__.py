"""Responder role for smp-testkit.

The harness answers requests sent by the device under test.
"""

from responder.engine import ResponderEngine

__all__ = ["ResponderEngine"]
