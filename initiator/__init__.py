"""Initiator role for smp-testkit.

The harness sends scripted requests and validates the device's replies.
"""

from initiator.engine import InitiatorEngine

__all__ = ["InitiatorEngine"]
