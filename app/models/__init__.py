"""
Models package

- shareholder.py: shareholder master data and contact overrides
- verification_session.py: one mutable row per scan (current state)
- verification_event.py: append-only audit events
"""

from .shareholder import Shareholder
from .verification_session import VerificationSession
from .verification_event import VerificationEvent

__all__ = [
    "Shareholder",
    "VerificationSession",
    "VerificationEvent",
]
