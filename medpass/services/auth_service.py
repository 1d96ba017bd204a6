"""Mobile + OTP login and logout"""

import re
from typing import Optional

from ..api.client import MediImpactClient
from ..core.verification_flow import VerificationFlow
from ..models.results import NETWORK_ERROR_MESSAGE, ActionResult, FailureReason
from ..utils.exceptions import BadStatusError, MedpassError
from ..utils.logger import get_logger
from .pin_service import PinPreferenceStore
from .session_store import SessionStore

logger = get_logger(__name__)

MOBILE_PATTERN = re.compile(r"^\d{10}$")
LOGIN_OTP_LENGTH = 5


class AuthService:
    """Login OTP request/verify, session creation and logout"""

    def __init__(
        self,
        store: SessionStore,
        client: MediImpactClient,
        pin_preferences: Optional[PinPreferenceStore] = None,
        otp_length: int = LOGIN_OTP_LENGTH,
        resend_cooldown_seconds: float = 30,
        code_ttl_seconds: Optional[float] = 300,
    ):
        self.store = store
        self.client = client
        self.pin_preferences = pin_preferences or PinPreferenceStore(store.kv)
        self.otp_length = otp_length
        self.resend_cooldown_seconds = resend_cooldown_seconds
        self.code_ttl_seconds = code_ttl_seconds

    def request_login_otp(self, mobile: str) -> ActionResult:
        """
        Send a login OTP.

        The server's status is not inspected: whatever it answers, the user
        moves on to OTP entry. Only a local validation error or a network
        failure stops the flow.
        """
        mobile = (mobile or "").strip()
        if not MOBILE_PATTERN.match(mobile):
            return ActionResult.failure(
                FailureReason.INVALID_INPUT,
                "Please enter a valid 10-digit phone number",
            )
        try:
            data = self.client.request_otp(mobile)
        except MedpassError as e:
            logger.error("Error sending OTP", error=str(e))
            return ActionResult.failure(FailureReason.EXCEPTION, NETWORK_ERROR_MESSAGE)
        logger.info("Login OTP requested", status=data.get("status"))
        return ActionResult.success(data=data)

    def verify_login_otp(self, mobile: str, otp: str) -> ActionResult:
        otp = (otp or "").strip()
        if len(otp) != self.otp_length or not otp.isdigit():
            return ActionResult.failure(
                FailureReason.INVALID_INPUT,
                f"Please enter all {self.otp_length} digits",
            )
        try:
            data = self.client.verify_otp(mobile, otp)
        except BadStatusError as e:
            return ActionResult.failure(
                FailureReason.BAD_STATUS,
                e.server_message or "Invalid OTP. Please try again.",
                data=e.payload,
            )
        except MedpassError as e:
            logger.error("Error verifying OTP", error=str(e))
            return ActionResult.failure(FailureReason.EXCEPTION, NETWORK_ERROR_MESSAGE)

        if not self.store.store(data, mobile):
            return ActionResult.failure(
                FailureReason.EXCEPTION,
                "Login successful but failed to save user data",
                data=data,
            )
        return ActionResult.success(data={"user_id": data.get("userId"), "name": data.get("name")})

    def login_flow(self, mobile: str) -> VerificationFlow:
        """OTP flow bound to one mobile number"""
        return VerificationFlow(
            send=lambda: self.request_login_otp(mobile),
            verify=lambda code: self.verify_login_otp(mobile, code),
            code_length=self.otp_length,
            resend_cooldown_seconds=self.resend_cooldown_seconds,
            code_ttl_seconds=self.code_ttl_seconds,
            name="login-otp",
        )

    def logout(self) -> bool:
        """Drop the session and the local PIN preference"""
        cleared = self.store.clear()
        pin_cleared = self.pin_preferences.clear()
        return cleared and pin_cleared
