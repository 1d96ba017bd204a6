"""Core client-side flows"""

from .verification_flow import FlowState, VerificationFlow

__all__ = [
    "FlowState",
    "VerificationFlow",
]
