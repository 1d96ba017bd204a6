"""Result objects returned by the session layer and feature services"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

NETWORK_ERROR_MESSAGE = "Network error. Please try again."


class FailureReason(str, Enum):
    MISSING_CREDENTIALS = "missing-credentials"
    BAD_STATUS = "bad-status"
    EXCEPTION = "exception"
    INVALID_INPUT = "invalid-input"
    INSUFFICIENT_BALANCE = "insufficient-balance"
    PIN_REQUIRED = "pin-required"
    COOLDOWN = "cooldown"
    EXPIRED = "expired"
    INVALID_STATE = "invalid-state"


class RefreshResult(BaseModel):
    ok: bool
    reason: Optional[FailureReason] = None
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class WalletStatusResult(BaseModel):
    ok: bool
    wallet_status: Optional[str] = None
    reason: Optional[FailureReason] = None
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class ActionResult(BaseModel):
    """Outcome of a user-facing action (OTP send, payment, PIN setup, ...)"""
    ok: bool
    reason: Optional[FailureReason] = None
    message: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def success(cls, data: Optional[Dict[str, Any]] = None, message: Optional[str] = None) -> "ActionResult":
        return cls(ok=True, data=data, message=message)

    @classmethod
    def failure(
        cls,
        reason: FailureReason,
        message: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> "ActionResult":
        return cls(ok=False, reason=reason, message=message, data=data)
