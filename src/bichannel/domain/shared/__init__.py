"""Shared domain utilities.

Interfaces for the external collaborators the channel core consumes. This
package is domain-accessible and should not depend on application code.
"""

from .height_clock_protocol import HeightClock
from .signature_verifier_protocol import SignatureVerifier

__all__ = ["HeightClock", "SignatureVerifier"]
