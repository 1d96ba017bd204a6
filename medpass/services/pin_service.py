"""
Transaction PIN.

The PIN state lives in two places: a local preference (userPinEnabled /
userPinCode) and the server's profile pin_status. The server value wins
whenever the cached profile carries it.
"""

import re
from typing import Any, Optional

from ..api.client import MediImpactClient
from ..core.verification_flow import VerificationFlow
from ..models.results import NETWORK_ERROR_MESSAGE, ActionResult, FailureReason
from ..models.session import Session
from ..storage.kv_store import KeyValueStore
from ..utils.exceptions import BadStatusError, MedpassError
from ..utils.logger import get_logger
from .session_store import SessionStore

logger = get_logger(__name__)

PIN_ENABLED_KEY = "userPinEnabled"
PIN_CODE_KEY = "userPinCode"
PIN_LENGTH = 4
_PIN_PATTERN = re.compile(r"^\d{4}$")


def server_pin_status(profile: Any) -> Optional[bool]:
    """pin_status from a cached profile: True, False, or None when absent/unknown"""
    if not isinstance(profile, dict):
        return None
    value = profile.get("pin_status")
    if value in ("1", 1):
        return True
    if value in ("0", 0):
        return False
    return None


class PinPreferenceStore:
    """Local PIN flag and code"""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def is_enabled(self) -> Optional[bool]:
        """None when the flag was never written"""
        try:
            raw = self.kv.get_item(PIN_ENABLED_KEY)
        except MedpassError as e:
            logger.error("Error reading PIN preference", error=str(e))
            return None
        if raw is None:
            return None
        return raw == "true"

    def set_enabled(self, enabled: bool, pin: Optional[str] = None) -> None:
        items = {PIN_ENABLED_KEY: "true" if enabled else "false"}
        if enabled and pin:
            items[PIN_CODE_KEY] = pin
        self.kv.set_items(items)
        if not enabled:
            self.kv.remove_item(PIN_CODE_KEY)

    def stored_pin(self) -> Optional[str]:
        try:
            pin = self.kv.get_item(PIN_CODE_KEY)
        except MedpassError:
            return None
        return pin if pin and len(pin) == PIN_LENGTH else None

    def clear(self) -> bool:
        try:
            self.kv.remove_items([PIN_ENABLED_KEY, PIN_CODE_KEY])
            return True
        except MedpassError as e:
            logger.error("Error clearing PIN preference", error=str(e))
            return False


class PinService:
    """PIN setup, verification and disabling against /User/setPin and /User/checkPin"""

    def __init__(
        self,
        store: SessionStore,
        client: MediImpactClient,
        preferences: Optional[PinPreferenceStore] = None,
    ):
        self.store = store
        self.client = client
        self.preferences = preferences or PinPreferenceStore(store.kv)

    def is_pin_enabled(self, session: Optional[Session] = None) -> bool:
        """Server pin_status when present (mirrored locally), else the local flag"""
        if session is None:
            session = self.store.get()
        server_value = server_pin_status(session.profile) if session else None
        if server_value is not None:
            if self.preferences.is_enabled() != server_value:
                try:
                    self.preferences.set_enabled(server_value)
                except MedpassError as e:
                    logger.warning("Could not mirror server PIN status", error=str(e))
            return server_value
        return bool(self.preferences.is_enabled())

    def setup_pin(self, first_entry: str, second_entry: str) -> ActionResult:
        if not _PIN_PATTERN.match(first_entry or "") or not _PIN_PATTERN.match(second_entry or ""):
            return ActionResult.failure(FailureReason.INVALID_INPUT, "PIN must be 4 digits")
        if first_entry != second_entry:
            return ActionResult.failure(FailureReason.INVALID_INPUT, "PINs do not match. Try again.")

        credentials = self.store.credentials()
        if credentials is None:
            return ActionResult.failure(FailureReason.MISSING_CREDENTIALS, "Please login again.")

        try:
            self.client.set_pin(credentials, first_entry, enabled=True)
        except BadStatusError as e:
            return ActionResult.failure(FailureReason.BAD_STATUS, e.server_message or "Failed to set PIN", data=e.payload)
        except MedpassError as e:
            logger.error("PIN setup failed", error=str(e))
            return ActionResult.failure(FailureReason.EXCEPTION, NETWORK_ERROR_MESSAGE)

        try:
            self.preferences.set_enabled(True, first_entry)
        except MedpassError as e:
            # Server already has the PIN; the profile pin_status will catch up on refresh
            logger.warning("PIN set on server but local preference not saved", error=str(e))
        logger.info("Transaction PIN enabled")
        return ActionResult.success()

    def verify_pin(self, pin: str, enabled: Optional[bool] = None) -> ActionResult:
        """
        Check a PIN with the server. When the PIN feature is off there is
        nothing to check and any entry is accepted.
        """
        if not _PIN_PATTERN.match(pin or ""):
            return ActionResult.failure(FailureReason.INVALID_INPUT, "PIN must be 4 digits")
        if enabled is None:
            enabled = self.is_pin_enabled()
        if not enabled:
            return ActionResult.success()

        credentials = self.store.credentials()
        if credentials is None:
            return ActionResult.failure(FailureReason.MISSING_CREDENTIALS, "Please login again.")
        try:
            self.client.check_pin(credentials, pin)
        except BadStatusError as e:
            return ActionResult.failure(FailureReason.BAD_STATUS, e.server_message or "Invalid PIN", data=e.payload)
        except MedpassError as e:
            logger.error("PIN check failed", error=str(e))
            return ActionResult.failure(FailureReason.EXCEPTION, NETWORK_ERROR_MESSAGE)
        return ActionResult.success()

    def disable_pin(self, pin: str) -> ActionResult:
        verified = self.verify_pin(pin, enabled=True)
        if not verified.ok:
            return verified

        credentials = self.store.credentials()
        try:
            self.client.set_pin(credentials, "", enabled=False)
        except BadStatusError as e:
            return ActionResult.failure(FailureReason.BAD_STATUS, e.server_message or "Failed to disable PIN", data=e.payload)
        except MedpassError as e:
            logger.error("PIN disable failed", error=str(e))
            return ActionResult.failure(FailureReason.EXCEPTION, NETWORK_ERROR_MESSAGE)

        try:
            self.preferences.set_enabled(False)
        except MedpassError as e:
            logger.warning("PIN disabled on server but local preference not saved", error=str(e))
        logger.info("Transaction PIN disabled")
        return ActionResult.success()

    def pin_entry_flow(self) -> VerificationFlow:
        """Entry flow for an existing PIN. Nothing is sent, so there is no cooldown or expiry."""
        flow = VerificationFlow(
            send=ActionResult.success,
            verify=self.verify_pin,
            code_length=PIN_LENGTH,
            resend_cooldown_seconds=0,
            code_ttl_seconds=None,
            name="pin",
        )
        flow.send()
        return flow
