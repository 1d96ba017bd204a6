"""
Code verification state machine shared by login OTP, wallet OTP and PIN entry.

    idle -> sent -> verifying -> verified
                             -> failed  (may resubmit or resend)
          sent/failed --(ttl elapsed)--> expired (must resend)

Sending a code starts a resend cooldown; the countdown is local and not
driven by the server.
"""

import math
import time
from enum import Enum
from threading import Lock
from typing import Callable, Optional

from ..models.results import ActionResult, FailureReason
from ..utils.logger import get_logger

logger = get_logger(__name__)


class FlowState(str, Enum):
    IDLE = "idle"
    SENT = "sent"
    VERIFYING = "verifying"
    VERIFIED = "verified"
    FAILED = "failed"
    EXPIRED = "expired"


_SENDABLE = (FlowState.IDLE, FlowState.SENT, FlowState.FAILED, FlowState.EXPIRED)
_SUBMITTABLE = (FlowState.SENT, FlowState.FAILED)


class VerificationFlow:
    """
    Drives one code verification.

    Args:
        send: Issues a new code (e.g. request an OTP SMS)
        verify: Checks a code with the server
        code_length: Exact number of digits expected
        resend_cooldown_seconds: Minimum spacing between sends
        code_ttl_seconds: Codes older than this are rejected locally; None disables
        clock: Monotonic time source, injectable for tests
        name: Label used in logs
    """

    def __init__(
        self,
        send: Callable[[], ActionResult],
        verify: Callable[[str], ActionResult],
        code_length: int,
        resend_cooldown_seconds: float = 30,
        code_ttl_seconds: Optional[float] = 300,
        clock: Callable[[], float] = time.monotonic,
        name: str = "verification",
    ):
        self._send = send
        self._verify = verify
        self.code_length = code_length
        self.resend_cooldown_seconds = resend_cooldown_seconds
        self.code_ttl_seconds = code_ttl_seconds
        self._clock = clock
        self.name = name

        self.state = FlowState.IDLE
        self.last_result: Optional[ActionResult] = None
        self._sent_at: Optional[float] = None
        self._sending = False
        self._lock = Lock()

    def seconds_until_resend(self) -> int:
        if self._sent_at is None:
            return 0
        remaining = self.resend_cooldown_seconds - (self._clock() - self._sent_at)
        if remaining <= 0:
            return 0
        return math.ceil(remaining)

    def _code_expired(self) -> bool:
        if self.code_ttl_seconds is None or self._sent_at is None:
            return False
        return (self._clock() - self._sent_at) >= self.code_ttl_seconds

    def send(self) -> ActionResult:
        with self._lock:
            if self.state not in _SENDABLE:
                return ActionResult.failure(FailureReason.INVALID_STATE, f"Cannot send while {self.state.value}")
            if self._sending:
                return ActionResult.failure(FailureReason.INVALID_STATE, "A code is already being sent")
            wait = self.seconds_until_resend()
            if wait > 0:
                return ActionResult.failure(
                    FailureReason.COOLDOWN,
                    f"Please wait {wait} seconds before requesting a new code",
                    data={"retry_after": wait},
                )
            self._sending = True

        try:
            result = self._send()
        except Exception:
            with self._lock:
                self._sending = False
            raise

        with self._lock:
            self._sending = False
            self.last_result = result
            if result.ok:
                self.state = FlowState.SENT
                self._sent_at = self._clock()
                logger.info("Verification code sent", flow=self.name)
            else:
                logger.warning("Verification code send failed", flow=self.name, reason=result.reason)
        return result

    def submit(self, code: str) -> ActionResult:
        code = (code or "").strip()
        with self._lock:
            if self.state not in _SUBMITTABLE:
                return ActionResult.failure(FailureReason.INVALID_STATE, f"Cannot verify while {self.state.value}")
            if len(code) != self.code_length or not code.isdigit():
                return ActionResult.failure(
                    FailureReason.INVALID_INPUT,
                    f"Please enter all {self.code_length} digits",
                )
            if self._code_expired():
                self.state = FlowState.EXPIRED
                logger.info("Verification code expired", flow=self.name)
                return ActionResult.failure(FailureReason.EXPIRED, "Code expired. Please request a new one.")
            self.state = FlowState.VERIFYING

        try:
            result = self._verify(code)
        except Exception:
            with self._lock:
                self.state = FlowState.FAILED
            raise

        with self._lock:
            self.last_result = result
            self.state = FlowState.VERIFIED if result.ok else FlowState.FAILED
        logger.info("Verification finished", flow=self.name, state=self.state.value)
        return result

    def reset(self) -> None:
        """Back to idle. A running resend cooldown is kept."""
        with self._lock:
            self.state = FlowState.IDLE
            self.last_result = None
